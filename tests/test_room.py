"""Tests for room operations delegated to the puppet."""

from unittest.mock import AsyncMock

import pytest
from loguru import logger

from nanoroom.config.schema import Config, RoomConfig
from nanoroom.errors import InvalidArgumentError, NotReadyError, ProviderError
from nanoroom.filebox import FileBox
from nanoroom.puppet.schema import RoomMemberQueryFilter, RoomQueryFilter
from nanoroom.session import Session


class TestCreate:
    """Test room creation."""

    @pytest.mark.asyncio
    async def test_create_returns_pooled_room(self, puppet, session):
        """The new room is looked up through the pool."""
        members = [session.members.load("alice"), session.members.load("bob")]

        room = await session.rooms.create(members, "Project")

        assert room is session.rooms.load(room.id)
        assert puppet.rooms[room.id].topic == "Project"
        assert puppet.rooms[room.id].member_id_list == ["bot", "alice", "bob"]

    @pytest.mark.asyncio
    async def test_create_empty_members_rejected(self, puppet, session):
        """An empty member list fails before any puppet call."""
        with pytest.raises(InvalidArgumentError):
            await session.rooms.create([])

        assert puppet.calls == []

    @pytest.mark.asyncio
    async def test_create_non_list_rejected(self, puppet, session):
        """A member argument that is not a list fails before any puppet call."""
        with pytest.raises(InvalidArgumentError):
            await session.rooms.create(5)

        assert puppet.calls == []

    @pytest.mark.asyncio
    async def test_create_non_member_items_rejected(self, puppet, session):
        """Ids instead of members fail before any puppet call."""
        with pytest.raises(InvalidArgumentError):
            await session.rooms.create(["alice", "bob"])

        assert puppet.calls == []

    @pytest.mark.asyncio
    async def test_create_propagates_provider_error(self, puppet, session):
        """Puppet failures are not swallowed."""
        puppet.fail_on = {"room_create"}

        with pytest.raises(ProviderError):
            await session.rooms.create([session.members.load("alice")])


class TestFind:
    """Test room search."""

    @pytest.mark.asyncio
    async def test_find_all_default_matches_everything(self, session):
        """Without a query every room is returned, ready."""
        rooms = await session.rooms.find_all()

        assert {room.id for room in rooms} == {"room-general", "room-untitled"}
        assert all(room.is_ready() for room in rooms)

    @pytest.mark.asyncio
    async def test_find_all_by_exact_topic(self, session):
        """A string topic matches exactly."""
        rooms = await session.rooms.find_all(RoomQueryFilter(topic="General"))

        assert [room.id for room in rooms] == ["room-general"]

    @pytest.mark.asyncio
    async def test_find_all_by_pattern(self, puppet, session):
        """A compiled pattern is searched in the topic."""
        import re

        puppet.add_room("room-dev", topic="Dev General", member_id_list=["bot"])

        rooms = await session.rooms.find_all(RoomQueryFilter(topic=re.compile("General")))

        assert {room.id for room in rooms} == {"room-general", "room-dev"}

    @pytest.mark.asyncio
    async def test_find_all_without_topic_rejected(self, session):
        """A filter without a topic matcher is an invalid argument."""
        with pytest.raises(InvalidArgumentError):
            await session.rooms.find_all(RoomQueryFilter(topic=None))

    @pytest.mark.asyncio
    async def test_find_all_is_fail_safe(self, puppet, session):
        """Provider errors yield an empty list."""
        puppet.fail_on = {"room_search"}

        assert await session.rooms.find_all() == []

    @pytest.mark.asyncio
    async def test_find_all_logs_traceback(self, puppet, session):
        """The swallowed provider error is logged with its traceback."""
        messages = []
        sink_id = logger.add(messages.append, level="ERROR")
        try:
            puppet.fail_on = {"room_search"}
            await session.rooms.find_all()
        finally:
            logger.remove(sink_id)

        assert len(messages) == 1
        assert messages[0].record["exception"] is not None
        assert "find_all() rejected" in messages[0].record["message"]

    @pytest.mark.asyncio
    async def test_find_all_ready_failure_is_fail_safe(self, puppet, session):
        """A room that can not be readied also yields an empty list."""
        puppet.fail_on = {"room_payload"}

        assert await session.rooms.find_all() == []

    @pytest.mark.asyncio
    async def test_find_by_string(self, session, general):
        """A string query is a topic filter."""
        assert await session.rooms.find("General") is general

    @pytest.mark.asyncio
    async def test_find_nothing(self, session):
        """No match returns None."""
        assert await session.rooms.find("Nope") is None

    @pytest.mark.asyncio
    async def test_find_skips_invalid_rooms(self, puppet, session):
        """The first room the puppet validates wins."""
        puppet.add_room("room-general-2", topic="General", member_id_list=["bot"])
        puppet.room_validate = AsyncMock(side_effect=[False, True])

        room = await session.rooms.find("General")

        assert room.id == "room-general-2"

    @pytest.mark.asyncio
    async def test_find_none_valid(self, puppet, session):
        """If no candidate validates, None is returned."""
        puppet.room_validate = AsyncMock(return_value=False)

        assert await session.rooms.find("General") is None

    @pytest.mark.asyncio
    async def test_find_validate_error_propagates(self, puppet, session):
        """Unlike find_all, find does not swallow validation errors."""
        puppet.fail_on = {"room_validate"}

        with pytest.raises(ProviderError):
            await session.rooms.find("General")


class TestSay:
    """Test sending messages into a room."""

    @pytest.mark.asyncio
    async def test_say_text(self, puppet, general):
        """Plain text goes out unchanged with no reply target."""
        await general.say("hello")

        sent = puppet.sent[-1]
        assert sent["kind"] == "text"
        assert sent["payload"] == "hello"
        assert sent["receiver"].room_id == "room-general"
        assert sent["receiver"].contact_id is None

    @pytest.mark.asyncio
    async def test_say_mention_one(self, puppet, session, general):
        """A mention prefixes the text and sets the reply target."""
        alice = session.members.load("alice")

        await general.say("hi", [alice])

        sent = puppet.sent[-1]
        assert sent["payload"] == "@Alice hi"
        assert sent["receiver"].contact_id == "alice"

    @pytest.mark.asyncio
    async def test_say_mention_many(self, puppet, session, general):
        """Mentions are joined by a four-per-em space."""
        alice = session.members.load("alice")
        bob = session.members.load("bob")

        await general.say("hi", [alice, bob])

        sent = puppet.sent[-1]
        assert sent["payload"] == "@Alice\u2005@Bob hi"
        assert sent["receiver"].contact_id == "alice"

    @pytest.mark.asyncio
    async def test_say_single_member_mention(self, puppet, session, general):
        """A single member is accepted as mention."""
        await general.say("hi", session.members.load("bob"))

        assert puppet.sent[-1]["payload"] == "@Bob hi"

    @pytest.mark.asyncio
    async def test_say_file(self, puppet, general):
        """A FileBox is sent as a file."""
        file = FileBox.from_bytes(b"data", "notes.txt")

        await general.say(file)

        assert puppet.sent[-1]["kind"] == "file"
        assert puppet.sent[-1]["payload"] is file
        assert puppet.sent[-1]["receiver"].room_id == "room-general"

    @pytest.mark.asyncio
    async def test_say_member_card(self, puppet, session, general):
        """A member is sent as a contact card."""
        await general.say(session.members.load("carol"))

        assert puppet.sent[-1]["kind"] == "contact"
        assert puppet.sent[-1]["payload"] == "carol"

    @pytest.mark.asyncio
    async def test_say_unsupported(self, puppet, general):
        """Other content types are rejected."""
        with pytest.raises(InvalidArgumentError):
            await general.say(42)

        assert puppet.sent == []

    @pytest.mark.asyncio
    async def test_say_propagates_provider_error(self, puppet, general):
        """Send failures reach the caller."""
        puppet.fail_on = {"message_send_text"}

        with pytest.raises(ProviderError):
            await general.say("hello")


class TestMembership:
    """Test member operations."""

    @pytest.mark.asyncio
    async def test_add_delete_quit(self, puppet, session, general):
        """add, delete and quit change the room on the puppet side."""
        erin = session.members.load("erin")
        puppet.add_contact("erin", name="Erin")

        await general.add(erin)
        assert "erin" in puppet.rooms["room-general"].member_id_list

        await general.delete(erin)
        assert "erin" not in puppet.rooms["room-general"].member_id_list

        await general.quit()
        assert "bot" not in puppet.rooms["room-general"].member_id_list

    @pytest.mark.asyncio
    async def test_has(self, puppet, session, general):
        """has() checks the current member list."""
        assert await general.has(session.members.load("alice"))
        assert not await general.has(session.members.load("erin"))

    @pytest.mark.asyncio
    async def test_has_empty_list(self, puppet, session):
        """An empty or missing member list contains nobody."""
        puppet.add_room("room-empty", topic="Empty")
        room = session.rooms.load("room-empty")
        alice = session.members.load("alice")

        assert not await room.has(alice)

        puppet.room_member_list = AsyncMock(return_value=None)
        assert not await room.has(alice)

    @pytest.mark.asyncio
    async def test_member_list(self, session, general):
        """Member ids are mapped through the member pool."""
        members = await general.member_list()

        assert [m.id for m in members] == ["bot", "alice", "bob", "carol", "dave"]
        assert members[1] is session.members.load("alice")

    @pytest.mark.asyncio
    async def test_member_list_not_available(self, puppet, general):
        """A missing member list yields an empty list."""
        puppet.room_member_list = AsyncMock(return_value=None)

        assert await general.member_list() == []

    @pytest.mark.asyncio
    async def test_async_iteration(self, general):
        """Iterating a room yields its members."""
        ids = [member.id async for member in general]

        assert ids == ["bot", "alice", "bob", "carol", "dave"]

    @pytest.mark.asyncio
    async def test_member_all_by_name_and_alias(self, puppet, session, general):
        """A string query matches names and room aliases."""
        puppet.set_room_alias("room-general", "bob", "Bobby")

        assert await general.member_all("Alice") == [session.members.load("alice")]
        assert await general.member_all("Bobby") == [session.members.load("bob")]
        assert await general.member_all("Nobody") == []

    @pytest.mark.asyncio
    async def test_member_all_by_filter(self, session, general):
        """A filter matches the given field."""
        found = await general.member_all(RoomMemberQueryFilter(name="Carol"))

        assert found == [session.members.load("carol")]

    @pytest.mark.asyncio
    async def test_member_first_of_many(self, puppet, session, general):
        """member() returns the first match when several members match."""
        puppet.add_contact("alice-2", name="Alice")
        await general.add(session.members.load("alice-2"))

        assert await general.member("Alice") is session.members.load("alice")

    @pytest.mark.asyncio
    async def test_member_none(self, general):
        """member() returns None without a match."""
        assert await general.member(RoomMemberQueryFilter(name="Nobody")) is None

    @pytest.mark.asyncio
    async def test_room_alias(self, puppet, session, general):
        """alias() and room_alias() read the per-room member payload."""
        puppet.set_room_alias("room-general", "bob", "Bobby")
        bob = session.members.load("bob")

        assert await general.room_alias(bob) == "Bobby"
        assert await general.alias(bob) == "Bobby"
        assert await general.alias(session.members.load("alice")) is None

    @pytest.mark.asyncio
    async def test_owner(self, session, general, untitled):
        """owner() needs a ready room and resolves through the pool."""
        with pytest.raises(NotReadyError):
            general.owner()

        await general.ready()
        await untitled.ready()

        assert general.owner() is session.members.load("alice")
        assert untitled.owner() is None


class TestTopic:
    """Test topic get and set."""

    @pytest.mark.asyncio
    async def test_topic_from_payload(self, general):
        """A cached topic is returned as-is."""
        await general.ready()

        assert await general.topic() == "General"

    @pytest.mark.asyncio
    async def test_default_topic(self, untitled):
        """Without a topic, the first three other members name the room."""
        await untitled.ready()

        assert await untitled.topic() == "Alice,Bob,Carol"

    @pytest.mark.asyncio
    async def test_default_topic_without_payload(self, untitled):
        """The default topic does not require ready()."""
        assert await untitled.topic() == "Alice,Bob,Carol"

    @pytest.mark.asyncio
    async def test_default_topic_member_count(self, puppet):
        """The number of names is configurable."""
        session = Session(puppet, Config(room=RoomConfig(default_topic_member_count=2)))

        assert await session.rooms.load("room-untitled").topic() == "Alice,Bob"

    @pytest.mark.asyncio
    async def test_default_topic_empty_room(self, puppet, session):
        """A room with only the bot has an empty default topic."""
        puppet.add_room("room-alone", member_id_list=["bot"])

        assert await session.rooms.load("room-alone").topic() == ""

    @pytest.mark.asyncio
    async def test_set_topic_requires_ready(self, puppet, general):
        """Setting the topic before ready() raises and calls nothing."""
        with pytest.raises(NotReadyError):
            await general.set_topic("New")

        assert "room_topic" not in puppet.call_names()

    @pytest.mark.asyncio
    async def test_set_topic(self, puppet, general):
        """A successful update reports ok and reaches the puppet."""
        await general.ready()

        change = await general.set_topic("New")

        assert change.ok
        assert change.error is None
        assert puppet.rooms["room-general"].topic == "New"

        await general.sync()
        assert await general.topic() == "New"
        assert str(general) == "Room<New>"

    @pytest.mark.asyncio
    async def test_set_topic_failure_is_reported(self, puppet, general):
        """A provider failure is returned, not raised."""
        await general.ready()
        puppet.fail_on = {"room_topic"}

        change = await general.set_topic("New")

        assert not change.ok
        assert isinstance(change.error, ProviderError)
        assert change.topic == "New"


class TestAttributes:
    """Test announce, qrcode, avatar and string form."""

    @pytest.mark.asyncio
    async def test_announce(self, general):
        """Announcement read and write go to the puppet."""
        assert await general.announce() == "Be nice"

        await general.set_announce("Meeting at 5")

        assert await general.announce() == "Meeting at 5"

    @pytest.mark.asyncio
    async def test_qrcode(self, general):
        assert await general.qrcode() == "qrcode://room-general"

    @pytest.mark.asyncio
    async def test_avatar(self, general):
        """The avatar is a FileBox from the puppet."""
        avatar = await general.avatar()

        assert isinstance(avatar, FileBox)
        assert avatar.name == "room-general.jpg"

    @pytest.mark.asyncio
    async def test_str_uses_topic_when_ready(self, general):
        """The string form shows the id until the topic is known."""
        assert str(general) == "Room<room-general>"

        await general.ready()

        assert str(general) == "Room<General>"

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, puppet, general):
        """Delegated reads propagate puppet failures."""
        puppet.fail_on = {"room_qrcode"}

        with pytest.raises(ProviderError):
            await general.qrcode()
