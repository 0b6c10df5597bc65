"""Tests for FileBox."""

from nanoroom.filebox import FileBox


class TestFileBox:
    """Test FileBox constructors."""

    def test_from_bytes_guesses_mimetype(self):
        """The mime type is guessed from the name."""
        box = FileBox.from_bytes(b"\x89PNG", "avatar.png")

        assert box.mimetype == "image/png"
        assert box.size == 4
        assert str(box) == "FileBox<avatar.png>"

    def test_unknown_extension(self):
        """Unknown names fall back to octet-stream."""
        assert FileBox.from_bytes(b"", "blob").mimetype == "application/octet-stream"

    def test_from_file_and_to_file(self, tmp_path):
        """Files are read from and written to disk."""
        source = tmp_path / "notes.txt"
        source.write_bytes(b"hello")

        box = FileBox.from_file(source)
        target = box.to_file(tmp_path / "out" / "copy.txt")

        assert box.name == "notes.txt"
        assert target.read_bytes() == b"hello"

    def test_base64(self):
        """Base64 payloads decode to the same bytes."""
        box = FileBox.from_base64(FileBox.from_bytes(b"abc", "a.bin").to_base64(), "a.bin")

        assert box.content == b"abc"
