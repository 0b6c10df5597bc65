"""Member entity: a contact seen through the puppet."""

from typing import Optional

from loguru import logger

from nanoroom.puppet.schema import MemberPayload
from nanoroom.user.entity import Entity


class Member(Entity):
    """A chat contact. Obtain instances with ``session.members.load(id)``."""

    @property
    def payload(self) -> Optional[MemberPayload]:
        """Cached payload, or None until ``ready()`` has fetched it."""
        return self.puppet.contact_payload_cache(self.id)

    def is_ready(self) -> bool:
        return self.payload is not None

    async def ready(self, dirty: bool = False) -> None:
        """
        Make sure the payload is cached.

        Args:
            dirty: Drop the cached payload and fetch it again.
        """
        if not dirty and self.is_ready():
            return

        try:
            if dirty:
                await self.puppet.contact_payload_dirty(self.id)
            await self.puppet.contact_payload(self.id)
        except Exception as e:
            logger.error(f"Member ready({self.id}) failed: {e}")
            raise

    async def sync(self) -> None:
        await self.ready(dirty=True)

    def name(self) -> str:
        """The name the contact set for themselves, empty until ready."""
        payload = self.payload
        return payload.name if payload else ""

    def alias(self) -> Optional[str]:
        """The alias the bot set for this contact, if any."""
        payload = self.payload
        return payload.alias if payload else None

    def is_self(self) -> bool:
        return self.id == self.puppet.self_id()

    def __str__(self) -> str:
        return f"Member<{self.name() or self.id}>"

    __repr__ = __str__
