"""Payloads and query filters exchanged with a puppet."""

import re
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class RoomPayload:
    """Snapshot of a room as cached by the puppet."""

    id: str
    topic: str = ""
    member_id_list: list[str] = field(default_factory=list)  # Order is puppet-defined
    owner_id: Optional[str] = None
    announcement: Optional[str] = None


@dataclass
class RoomMemberPayload:
    """Per-room attributes of a member."""

    id: str
    room_alias: Optional[str] = None  # Name the member set for themselves in this room


@dataclass
class MemberPayload:
    """Snapshot of a contact as cached by the puppet."""

    id: str
    name: str = ""
    alias: Optional[str] = None  # Name the bot set for this contact


@dataclass
class Receiver:
    """Destination of an outgoing message.

    ``contact_id`` is the member a room message replies to, if any.
    """

    room_id: Optional[str] = None
    contact_id: Optional[str] = None


def _match_all() -> re.Pattern[str]:
    return re.compile(".*")


@dataclass
class RoomQueryFilter:
    """Query for rooms by topic: an exact string or a compiled pattern."""

    topic: str | re.Pattern[str] | None = field(default_factory=_match_all)

    def matches(self, topic: str) -> bool:
        if self.topic is None:
            return False
        if isinstance(self.topic, str):
            return self.topic == topic
        return self.topic.search(topic) is not None


@dataclass
class RoomMemberQueryFilter:
    """Query for room members.

    Every field that is set must match exactly.

    Attributes:
        name: The name the contact set for themselves
        room_alias: The name the contact set inside the room
        contact_alias: The alias the bot set for the contact
    """

    name: Optional[str] = None
    room_alias: Optional[str] = None
    contact_alias: Optional[str] = None

    @classmethod
    def any_field(cls, text: str) -> list["RoomMemberQueryFilter"]:
        """Expand a plain string into one filter per searchable field."""
        return [cls(name=text), cls(room_alias=text), cls(contact_alias=text)]

    def is_empty(self) -> bool:
        return self.name is None and self.room_alias is None and self.contact_alias is None

    def matches(
        self,
        member: MemberPayload,
        room_member: Optional[RoomMemberPayload] = None,
    ) -> bool:
        if self.is_empty():
            return False
        if self.name is not None and member.name != self.name:
            return False
        if self.contact_alias is not None and member.alias != self.contact_alias:
            return False
        if self.room_alias is not None:
            if room_member is None or room_member.room_alias != self.room_alias:
                return False
        return True
