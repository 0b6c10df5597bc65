"""Mock puppet for testing.

Keeps the "network" state in plain dicts and a separate payload cache,
so stale reads and forced resyncs behave as they do against a real
provider.
"""

from dataclasses import replace
from typing import Any, Optional

from loguru import logger

from nanoroom.errors import ProviderError
from nanoroom.filebox import FileBox
from nanoroom.puppet.base import Puppet
from nanoroom.puppet.schema import (
    MemberPayload,
    Receiver,
    RoomMemberPayload,
    RoomMemberQueryFilter,
    RoomPayload,
    RoomQueryFilter,
)


class MockPuppet(Puppet):
    """Records sent messages and provider calls for verification in tests.

    Set ``fail_on`` to a set of method names to make those calls raise
    ``ProviderError``.
    """

    name = "mock"

    def __init__(self, self_id: str = "bot") -> None:
        self._self_id = self_id
        self.rooms: dict[str, RoomPayload] = {}
        self.contacts: dict[str, MemberPayload] = {}
        self.room_members: dict[tuple[str, str], RoomMemberPayload] = {}

        self._room_cache: dict[str, RoomPayload] = {}
        self._contact_cache: dict[str, MemberPayload] = {}

        self.sent: list[dict[str, Any]] = []
        self.calls: list[tuple[str, tuple]] = []
        self.fail_on: set[str] = set()
        self._room_counter = 0

        self.add_contact(self_id, name="Bot")

    # Fixture helpers

    def add_contact(self, contact_id: str, name: str = "", alias: Optional[str] = None) -> MemberPayload:
        payload = MemberPayload(id=contact_id, name=name, alias=alias)
        self.contacts[contact_id] = payload
        return payload

    def add_room(
        self,
        room_id: str,
        topic: str = "",
        member_id_list: Optional[list[str]] = None,
        owner_id: Optional[str] = None,
        announcement: Optional[str] = None,
    ) -> RoomPayload:
        payload = RoomPayload(
            id=room_id,
            topic=topic,
            member_id_list=list(member_id_list or []),
            owner_id=owner_id,
            announcement=announcement,
        )
        self.rooms[room_id] = payload
        return payload

    def set_room_alias(self, room_id: str, member_id: str, room_alias: str) -> None:
        self.room_members[(room_id, member_id)] = RoomMemberPayload(id=member_id, room_alias=room_alias)

    def remove_room(self, room_id: str) -> None:
        """Make the room disappear from the network (the cache is left as-is)."""
        self.rooms.pop(room_id, None)

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        if method in self.fail_on:
            raise ProviderError(f"{method} failed")

    def _room(self, room_id: str) -> RoomPayload:
        payload = self.rooms.get(room_id)
        if payload is None:
            raise ProviderError(f"room {room_id} not found")
        return payload

    # Puppet

    def self_id(self) -> str:
        return self._self_id

    async def room_create(self, member_id_list: list[str], topic: Optional[str] = None) -> str:
        self._record("room_create", member_id_list, topic)
        self._room_counter += 1
        room_id = f"room-{self._room_counter}"
        self.add_room(room_id, topic=topic or "", member_id_list=[self._self_id, *member_id_list], owner_id=self._self_id)
        logger.debug(f"MockPuppet created {room_id}")
        return room_id

    async def room_search(self, query: RoomQueryFilter) -> list[str]:
        self._record("room_search", query)
        return [room_id for room_id, payload in self.rooms.items() if query.matches(payload.topic)]

    async def room_validate(self, room_id: str) -> bool:
        self._record("room_validate", room_id)
        return room_id in self.rooms

    async def room_payload(self, room_id: str) -> RoomPayload:
        self._record("room_payload", room_id)
        payload = self._room(room_id)
        cached = replace(payload, member_id_list=list(payload.member_id_list))
        self._room_cache[room_id] = cached
        return cached

    async def room_payload_dirty(self, room_id: str) -> None:
        self._record("room_payload_dirty", room_id)
        self._room_cache.pop(room_id, None)

    def room_payload_cache(self, room_id: str) -> Optional[RoomPayload]:
        return self._room_cache.get(room_id)

    async def room_member_list(self, room_id: str) -> Optional[list[str]]:
        self._record("room_member_list", room_id)
        return list(self._room(room_id).member_id_list)

    async def room_member_search(
        self,
        room_id: str,
        query: str | RoomMemberQueryFilter,
    ) -> list[str]:
        self._record("room_member_search", room_id, query)
        filters = RoomMemberQueryFilter.any_field(query) if isinstance(query, str) else [query]

        found = []
        for member_id in self._room(room_id).member_id_list:
            contact = self.contacts.get(member_id)
            if contact is None:
                continue
            room_member = self.room_members.get((room_id, member_id))
            if any(f.matches(contact, room_member) for f in filters):
                found.append(member_id)
        return found

    async def room_member_payload(self, room_id: str, member_id: str) -> Optional[RoomMemberPayload]:
        self._record("room_member_payload", room_id, member_id)
        self._room(room_id)
        return self.room_members.get((room_id, member_id))

    async def room_add(self, room_id: str, member_id: str) -> None:
        self._record("room_add", room_id, member_id)
        members = self._room(room_id).member_id_list
        if member_id not in members:
            members.append(member_id)

    async def room_del(self, room_id: str, member_id: str) -> None:
        self._record("room_del", room_id, member_id)
        members = self._room(room_id).member_id_list
        if member_id in members:
            members.remove(member_id)

    async def room_quit(self, room_id: str) -> None:
        self._record("room_quit", room_id)
        members = self._room(room_id).member_id_list
        if self._self_id in members:
            members.remove(self._self_id)

    async def room_topic(self, room_id: str, topic: Optional[str] = None) -> Optional[str]:
        self._record("room_topic", room_id, topic)
        payload = self._room(room_id)
        if topic is None:
            return payload.topic
        payload.topic = topic
        return None

    async def room_announce(self, room_id: str, text: Optional[str] = None) -> Optional[str]:
        self._record("room_announce", room_id, text)
        payload = self._room(room_id)
        if text is None:
            return payload.announcement or ""
        payload.announcement = text
        return None

    async def room_qrcode(self, room_id: str) -> str:
        self._record("room_qrcode", room_id)
        self._room(room_id)
        return f"qrcode://{room_id}"

    async def room_avatar(self, room_id: str) -> FileBox:
        self._record("room_avatar", room_id)
        self._room(room_id)
        return FileBox.from_bytes(b"", f"{room_id}.jpg")

    async def message_send_text(self, receiver: Receiver, text: str) -> None:
        self._record("message_send_text", receiver, text)
        self.sent.append({"kind": "text", "receiver": receiver, "payload": text})

    async def message_send_file(self, receiver: Receiver, file: FileBox) -> None:
        self._record("message_send_file", receiver, file)
        self.sent.append({"kind": "file", "receiver": receiver, "payload": file})

    async def message_send_contact(self, receiver: Receiver, contact_id: str) -> None:
        self._record("message_send_contact", receiver, contact_id)
        self.sent.append({"kind": "contact", "receiver": receiver, "payload": contact_id})

    async def contact_payload(self, contact_id: str) -> MemberPayload:
        self._record("contact_payload", contact_id)
        payload = self.contacts.get(contact_id)
        if payload is None:
            raise ProviderError(f"contact {contact_id} not found")
        cached = replace(payload)
        self._contact_cache[contact_id] = cached
        return cached

    async def contact_payload_dirty(self, contact_id: str) -> None:
        self._record("contact_payload_dirty", contact_id)
        self._contact_cache.pop(contact_id, None)

    def contact_payload_cache(self, contact_id: str) -> Optional[MemberPayload]:
        return self._contact_cache.get(contact_id)
