"""Room entity: a group chat seen through the puppet.

Every operation is delegated to the session's puppet keyed by the room id.
The room keeps no state of its own besides its id and event listeners; the
payload (topic, members, owner, announcement) lives in the puppet cache.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from functools import wraps
from typing import TYPE_CHECKING, AsyncIterator, Callable, Optional, Sequence

from loguru import logger

from nanoroom.errors import InvalidArgumentError, NotReadyError
from nanoroom.events import EventEmitter, Listener
from nanoroom.filebox import FileBox
from nanoroom.puppet.schema import Receiver, RoomMemberQueryFilter, RoomPayload
from nanoroom.user.entity import Entity
from nanoroom.user.member import Member

if TYPE_CHECKING:
    from nanoroom.session import Session

# What can be said in a room: text, a file, or a member's contact card
SayContent = str | FileBox | Member


class RoomEventName(str, Enum):
    """Events a room emits."""

    JOIN = "join"  # (invitee_list: list[Member], inviter: Member)
    LEAVE = "leave"  # (leaver_list: list[Member], remover: Member | None)
    TOPIC = "topic"  # (topic: str, old_topic: str, changer: Member)


@dataclass
class TopicChange:
    """Outcome of a best-effort topic update."""

    topic: str
    ok: bool
    error: Optional[Exception] = None


def _logs_failure(method: Callable) -> Callable:
    """Log provider failures of a room method before they propagate."""

    @wraps(method)
    async def wrapper(self: "Room", *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except InvalidArgumentError:
            raise
        except Exception as e:
            logger.error(f"{self} {method.__name__}() exception: {e}")
            raise

    return wrapper


class Room(Entity, EventEmitter):
    """
    A group chat. Obtain instances with ``session.rooms.load(id)``,
    ``session.rooms.create(...)`` or ``session.rooms.find(...)``.

    Iterating a room asynchronously yields its current members::

        async for member in room:
            print(member.name())
    """

    def __init__(self, entity_id: str, session: "Session", *, _key: object = None):
        Entity.__init__(self, entity_id, session, _key=_key)
        EventEmitter.__init__(self)
        logger.trace(f"Room constructor({entity_id})")

    @property
    def payload(self) -> Optional[RoomPayload]:
        """Cached payload, or None until ``ready()`` has fetched it."""
        return self.puppet.room_payload_cache(self.id)

    def __str__(self) -> str:
        payload = self.payload
        if payload and payload.topic:
            return f"Room<{payload.topic}>"
        return f"Room<{self.id}>"

    __repr__ = __str__

    async def __aiter__(self) -> AsyncIterator[Member]:
        for member in await self.member_list():
            yield member

    # Payload lifecycle

    def is_ready(self) -> bool:
        """True if the puppet has a cached payload for this room. No I/O."""
        return self.payload is not None

    async def ready(self, dirty: bool = False) -> None:
        """
        Make sure the payload of this room and of all its members is cached.

        Members are readied concurrently; if any of them fails the whole
        call fails and the room payload is dropped again, so the room is
        not ready and the next ``ready()`` retries everything.

        Args:
            dirty: Drop the cached payload first and fetch it again.
        """
        logger.debug(f"Room ready({self.id}, dirty={dirty})")

        if not dirty and self.is_ready():
            return

        try:
            if dirty:
                await self.puppet.room_payload_dirty(self.id)
            await self.puppet.room_payload(self.id)
        except Exception as e:
            logger.error(f"Room ready({self.id}) exception: {e}")
            raise

        try:
            member_ids = await self.puppet.room_member_list(self.id) or []
            await asyncio.gather(
                *(self.session.members.load(member_id).ready() for member_id in member_ids)
            )
        except Exception as e:
            logger.error(f"Room ready({self.id}) member exception: {e}")
            await self.puppet.room_payload_dirty(self.id)
            raise

    async def sync(self) -> None:
        """Force a reload of the room payload from the puppet."""
        await self.ready(dirty=True)

    async def refresh(self) -> None:
        """Deprecated alias of ``sync()``."""
        logger.warning("Room refresh() is deprecated, use sync() instead")
        await self.sync()

    # Messaging

    @_logs_failure
    async def say(
        self,
        content: SayContent,
        mention: Member | Sequence[Member] | None = None,
    ) -> None:
        """
        Send a message inside the room.

        Text mentioning members is prefixed with ``@name`` for each of them,
        and the first mentioned member is attached as the reply target.

        Args:
            content: Text, a FileBox, or a Member whose card is sent
            mention: Member or members to mention, text only
        """
        if mention is None:
            mention_list: list[Member] = []
        elif isinstance(mention, Member):
            mention_list = [mention]
        else:
            mention_list = list(mention)

        logger.debug(f"Room say({content}, {', '.join(str(m) for m in mention_list)})")

        if isinstance(content, str):
            text = content
            if mention_list:
                await asyncio.gather(*(m.ready() for m in mention_list))
                separator = self.session.config.room.mention_separator
                mentions = separator.join(f"@{m.name()}" for m in mention_list)
                text = f"{mentions} {content}"
            receiver = Receiver(
                room_id=self.id,
                contact_id=mention_list[0].id if mention_list else None,
            )
            await self.puppet.message_send_text(receiver, text)
        elif isinstance(content, FileBox):
            await self.puppet.message_send_file(Receiver(room_id=self.id), content)
        elif isinstance(content, Member):
            await self.puppet.message_send_contact(Receiver(room_id=self.id), content.id)
        else:
            raise InvalidArgumentError(f"Room say() can not send {type(content).__name__}")

    # Events

    def on(self, event: RoomEventName | str, listener: Listener) -> "Room":
        """
        Subscribe to a room event.

        Listener arguments per event:
            join: (invitee_list, inviter)
            leave: (leaver_list, remover)
            topic: (topic, old_topic, changer)
        """
        name = self._event_name(event)
        logger.debug(f"Room on({name}, {listener!r})")
        EventEmitter.on(self, name, listener)
        return self

    def once(self, event: RoomEventName | str, listener: Listener) -> "Room":
        EventEmitter.once(self, self._event_name(event), listener)
        return self

    def off(self, event: RoomEventName | str, listener: Listener) -> "Room":
        EventEmitter.off(self, self._event_name(event), listener)
        return self

    def emit(self, event: RoomEventName | str, *args) -> bool:
        return EventEmitter.emit(self, self._event_name(event), *args)

    def on_join(self, listener: Callable[[list[Member], Member], object]) -> "Room":
        return self.on(RoomEventName.JOIN, listener)

    def on_leave(self, listener: Callable[[list[Member], Optional[Member]], object]) -> "Room":
        return self.on(RoomEventName.LEAVE, listener)

    def on_topic(self, listener: Callable[[str, str, Member], object]) -> "Room":
        return self.on(RoomEventName.TOPIC, listener)

    def emit_join(self, invitee_list: list[Member], inviter: Member) -> bool:
        return self.emit(RoomEventName.JOIN, invitee_list, inviter)

    def emit_leave(self, leaver_list: list[Member], remover: Optional[Member] = None) -> bool:
        return self.emit(RoomEventName.LEAVE, leaver_list, remover)

    def emit_topic(self, topic: str, old_topic: str, changer: Member) -> bool:
        return self.emit(RoomEventName.TOPIC, topic, old_topic, changer)

    @staticmethod
    def _event_name(event: RoomEventName | str) -> str:
        try:
            return RoomEventName(event).value
        except ValueError:
            raise InvalidArgumentError(f"Room has no event named {event!r}") from None

    # Membership

    @_logs_failure
    async def add(self, member: Member) -> None:
        """Invite ``member`` to the room."""
        logger.debug(f"Room add({member})")
        await self.puppet.room_add(self.id, member.id)

    @_logs_failure
    async def delete(self, member: Member) -> None:
        """Remove ``member`` from the room. Usually requires the bot to own it."""
        logger.debug(f"Room delete({member})")
        await self.puppet.room_del(self.id, member.id)

    @_logs_failure
    async def quit(self) -> None:
        """Leave the room."""
        logger.debug(f"Room quit() {self}")
        await self.puppet.room_quit(self.id)

    @_logs_failure
    async def has(self, member: Member) -> bool:
        """Check if ``member`` is currently in the room."""
        member_ids = await self.puppet.room_member_list(self.id)
        if not member_ids:
            return False
        return member.id in member_ids

    @_logs_failure
    async def member_all(self, query: str | RoomMemberQueryFilter) -> list[Member]:
        """
        Find all members matching ``query``.

        Args:
            query: A filter, or a string matched against the member name,
                room alias and contact alias

        Returns:
            Matching members, possibly empty
        """
        logger.trace(f"Room member_all({query})")
        member_ids = await self.puppet.room_member_search(self.id, query)
        return [self.session.members.load(member_id) for member_id in member_ids]

    async def member(self, query: str | RoomMemberQueryFilter) -> Optional[Member]:
        """
        Find one member matching ``query``; the first one if several match.

        Returns:
            Member or None if nothing matched
        """
        logger.debug(f"Room member({query})")

        members = await self.member_all(query)
        if not members:
            return None

        if len(members) > 1:
            logger.warning(f"Room member({query}) got {len(members)} members, using the first one")
        return members[0]

    @_logs_failure
    async def member_list(self) -> list[Member]:
        """Get all current members of the room."""
        logger.debug("Room member_list()")

        member_ids = await self.puppet.room_member_list(self.id)
        if member_ids is None:
            logger.warning(f"Room member_list() {self} not ready")
            return []

        return [self.session.members.load(member_id) for member_id in member_ids]

    def owner(self) -> Optional[Member]:
        """
        Get the owner of the room from the cached payload.

        Not every puppet knows the owner, so None is a normal answer.

        Raises:
            NotReadyError: The payload has not been fetched yet
        """
        logger.debug("Room owner()")

        payload = self.payload
        if payload is None:
            raise NotReadyError(f"{self} owner() called before ready()")
        if not payload.owner_id:
            return None
        return self.session.members.load(payload.owner_id)

    async def alias(self, member: Member) -> Optional[str]:
        """Same as ``room_alias()``."""
        return await self.room_alias(member)

    @_logs_failure
    async def room_alias(self, member: Member) -> Optional[str]:
        """
        Get the name ``member`` set for themselves in this room.

        Returns:
            The alias, or None if the member has none
        """
        member_payload = await self.puppet.room_member_payload(self.id, member.id)
        if member_payload and member_payload.room_alias:
            return member_payload.room_alias
        return None

    # Attributes

    @_logs_failure
    async def topic(self) -> str:
        """
        Get the room topic.

        Rooms without a topic get one made of the names of the first few
        members other than the bot, joined by commas.
        """
        logger.debug("Room topic()")

        payload = self.payload
        if payload and payload.topic:
            return payload.topic

        self_id = self.puppet.self_id()
        limit = self.session.config.room.default_topic_member_count
        member_ids = await self.puppet.room_member_list(self.id) or []

        members = [
            self.session.members.load(member_id)
            for member_id in member_ids
            if member_id != self_id
        ][:limit]
        await asyncio.gather(*(m.ready() for m in members))

        return ",".join(m.name() for m in members)

    async def set_topic(self, new_topic: str) -> TopicChange:
        """
        Change the room topic, best effort.

        Provider failures are logged and reported in the returned outcome
        instead of being raised.

        Raises:
            NotReadyError: The payload has not been fetched yet
        """
        logger.debug(f"Room set_topic({new_topic})")

        if not self.is_ready():
            logger.warning("Room set_topic() room not ready")
            raise NotReadyError(f"{self} is not ready")

        try:
            await self.puppet.room_topic(self.id, new_topic)
        except Exception as e:
            logger.warning(f"Room set_topic(new_topic={new_topic}) exception: {e}")
            return TopicChange(topic=new_topic, ok=False, error=e)
        return TopicChange(topic=new_topic, ok=True)

    @_logs_failure
    async def announce(self) -> str:
        """Get the room announcement."""
        logger.debug("Room announce()")
        return await self.puppet.room_announce(self.id) or ""

    @_logs_failure
    async def set_announce(self, text: str) -> None:
        """Set the room announcement."""
        logger.debug(f"Room set_announce({text})")
        await self.puppet.room_announce(self.id, text)

    @_logs_failure
    async def qrcode(self) -> str:
        """Get the join QR code of the room, as the encoded string."""
        logger.debug("Room qrcode()")
        return await self.puppet.room_qrcode(self.id)

    @_logs_failure
    async def avatar(self) -> FileBox:
        logger.debug("Room avatar()")
        return await self.puppet.room_avatar(self.id)
