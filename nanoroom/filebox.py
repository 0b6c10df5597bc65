"""Binary attachment value type passed through to the puppet."""

import base64
import mimetypes
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileBox:
    """An in-memory file: a name, its bytes and a mime type.

    Rooms never look inside a FileBox; it is handed to the puppet as-is
    when sent, and returned by the puppet for avatars.
    """
    name: str
    content: bytes
    mimetype: str = "application/octet-stream"

    @classmethod
    def from_bytes(cls, content: bytes, name: str, mimetype: str | None = None) -> "FileBox":
        """Wrap raw bytes, guessing the mime type from ``name`` if not given."""
        return cls(name=name, content=content, mimetype=mimetype or _guess_mimetype(name))

    @classmethod
    def from_file(cls, path: Path | str, name: str | None = None) -> "FileBox":
        """Read a file from disk."""
        path = Path(path)
        return cls.from_bytes(path.read_bytes(), name or path.name)

    @classmethod
    def from_base64(cls, data: str, name: str) -> "FileBox":
        """Decode a base64 payload, as puppets commonly return avatars."""
        return cls.from_bytes(base64.b64decode(data), name)

    def to_base64(self) -> str:
        return base64.b64encode(self.content).decode("ascii")

    def to_file(self, path: Path | str) -> Path:
        """Write the content to ``path`` and return it."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.content)
        return path

    @property
    def size(self) -> int:
        return len(self.content)

    def __str__(self) -> str:
        return f"FileBox<{self.name}>"


def _guess_mimetype(name: str) -> str:
    guessed, _ = mimetypes.guess_type(name)
    return guessed or "application/octet-stream"
