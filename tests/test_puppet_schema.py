"""Tests for puppet query filters."""

import re

from nanoroom.puppet.schema import MemberPayload, RoomMemberPayload, RoomMemberQueryFilter, RoomQueryFilter


class TestRoomQueryFilter:
    """Test topic matching."""

    def test_default_matches_everything(self):
        query = RoomQueryFilter()

        assert query.matches("General")
        assert query.matches("")

    def test_string_is_exact(self):
        query = RoomQueryFilter(topic="General")

        assert query.matches("General")
        assert not query.matches("General chat")

    def test_pattern_is_searched(self):
        query = RoomQueryFilter(topic=re.compile(r"^dev-"))

        assert query.matches("dev-backend")
        assert not query.matches("ops-dev-")


class TestRoomMemberQueryFilter:
    """Test member matching."""

    def test_all_set_fields_must_match(self):
        """Name and contact alias are checked together."""
        alice = MemberPayload(id="alice", name="Alice", alias="Al")

        assert RoomMemberQueryFilter(name="Alice").matches(alice)
        assert RoomMemberQueryFilter(name="Alice", contact_alias="Al").matches(alice)
        assert not RoomMemberQueryFilter(name="Alice", contact_alias="Ally").matches(alice)

    def test_room_alias_needs_room_payload(self):
        """Room aliases live in the per-room payload."""
        bob = MemberPayload(id="bob", name="Bob")
        query = RoomMemberQueryFilter(room_alias="Bobby")

        assert not query.matches(bob)
        assert query.matches(bob, RoomMemberPayload(id="bob", room_alias="Bobby"))

    def test_empty_filter_matches_nothing(self):
        assert not RoomMemberQueryFilter().matches(MemberPayload(id="x"))

    def test_any_field(self):
        """A plain string expands to one filter per field."""
        filters = RoomMemberQueryFilter.any_field("Al")

        assert [f.name for f in filters] == ["Al", None, None]
        assert [f.room_alias for f in filters] == [None, "Al", None]
        assert [f.contact_alias for f in filters] == [None, None, "Al"]
