"""Base puppet interface for messaging providers."""

from abc import ABC, abstractmethod
from typing import Optional

from nanoroom.filebox import FileBox
from nanoroom.puppet.schema import (
    MemberPayload,
    Receiver,
    RoomMemberPayload,
    RoomMemberQueryFilter,
    RoomPayload,
    RoomQueryFilter,
)


class Puppet(ABC):
    """
    Abstract base class for messaging providers.

    A puppet owns the transport, the session with the chat network and the
    payload caches. Rooms and members are thin facades that delegate every
    operation here, keyed by their id.

    Methods ending in ``_cache`` must answer from memory without I/O; every
    other call may suspend on the network and raise on failure.
    """

    name: str = "base"

    @abstractmethod
    def self_id(self) -> str:
        """Get the contact id of the logged-in account."""
        pass

    # Rooms

    @abstractmethod
    async def room_create(self, member_id_list: list[str], topic: Optional[str] = None) -> str:
        """
        Create a room.

        Args:
            member_id_list: Contacts to invite.
            topic: Optional initial topic.

        Returns:
            Id of the new room.
        """
        pass

    @abstractmethod
    async def room_search(self, query: RoomQueryFilter) -> list[str]:
        """Get the ids of all rooms matching ``query``."""
        pass

    @abstractmethod
    async def room_validate(self, room_id: str) -> bool:
        """Confirm with the network that ``room_id`` still exists."""
        pass

    @abstractmethod
    async def room_payload(self, room_id: str) -> RoomPayload:
        """Fetch the room payload and store it in the cache."""
        pass

    @abstractmethod
    async def room_payload_dirty(self, room_id: str) -> None:
        """Drop the cached payload so the next fetch goes to the network."""
        pass

    @abstractmethod
    def room_payload_cache(self, room_id: str) -> Optional[RoomPayload]:
        """Get the cached payload, or None if it was never fetched or was dropped."""
        pass

    @abstractmethod
    async def room_member_list(self, room_id: str) -> Optional[list[str]]:
        """Get the contact ids of the room members."""
        pass

    @abstractmethod
    async def room_member_search(
        self,
        room_id: str,
        query: str | RoomMemberQueryFilter,
    ) -> list[str]:
        """
        Search room members.

        Args:
            room_id: Room to search.
            query: A filter, or a string matched against the name, the room
                alias and the contact alias.

        Returns:
            Matching contact ids.
        """
        pass

    @abstractmethod
    async def room_member_payload(self, room_id: str, member_id: str) -> Optional[RoomMemberPayload]:
        """Get the per-room attributes of a member."""
        pass

    @abstractmethod
    async def room_add(self, room_id: str, member_id: str) -> None:
        pass

    @abstractmethod
    async def room_del(self, room_id: str, member_id: str) -> None:
        pass

    @abstractmethod
    async def room_quit(self, room_id: str) -> None:
        pass

    @abstractmethod
    async def room_topic(self, room_id: str, topic: Optional[str] = None) -> Optional[str]:
        """Get the room topic, or set it when ``topic`` is given."""
        pass

    @abstractmethod
    async def room_announce(self, room_id: str, text: Optional[str] = None) -> Optional[str]:
        """Get the room announcement, or set it when ``text`` is given."""
        pass

    @abstractmethod
    async def room_qrcode(self, room_id: str) -> str:
        """Get the join QR code of the room, as the encoded string."""
        pass

    @abstractmethod
    async def room_avatar(self, room_id: str) -> FileBox:
        pass

    # Messages

    @abstractmethod
    async def message_send_text(self, receiver: Receiver, text: str) -> None:
        pass

    @abstractmethod
    async def message_send_file(self, receiver: Receiver, file: FileBox) -> None:
        pass

    @abstractmethod
    async def message_send_contact(self, receiver: Receiver, contact_id: str) -> None:
        """Send a contact card."""
        pass

    # Contacts

    @abstractmethod
    async def contact_payload(self, contact_id: str) -> MemberPayload:
        """Fetch the contact payload and store it in the cache."""
        pass

    @abstractmethod
    async def contact_payload_dirty(self, contact_id: str) -> None:
        pass

    @abstractmethod
    def contact_payload_cache(self, contact_id: str) -> Optional[MemberPayload]:
        pass

    def __str__(self) -> str:
        return f"Puppet<{self.name}>"
