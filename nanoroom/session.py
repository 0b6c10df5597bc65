"""Session: one puppet, its configuration and the entity pools bound to it."""

from typing import Optional

from loguru import logger

from nanoroom.config.schema import Config
from nanoroom.errors import ConstructionError
from nanoroom.puppet.base import Puppet
from nanoroom.user.member import Member
from nanoroom.user.pool import MemberPool, RoomPool


class Session:
    """
    Everything entities need to reach their puppet.

    Each session has its own pools, so two sessions (or two tests) never
    share entity instances.

    Attributes:
        puppet: Provider every entity delegates to
        config: Behaviour settings
        rooms: Pool of rooms
        members: Pool of members
    """

    def __init__(self, puppet: Puppet, config: Optional[Config] = None):
        if puppet is None:
            raise ConstructionError("Session can not be created without a puppet")

        self.puppet = puppet
        self.config = config or Config()
        self.rooms = RoomPool(self)
        self.members = MemberPool(self)
        logger.debug(f"Session created with {puppet}")

    def self_member(self) -> Member:
        """The member the puppet is logged in as."""
        return self.members.load(self.puppet.self_id())

    def __repr__(self) -> str:
        return f"Session<{self.puppet}, rooms={len(self.rooms)}, members={len(self.members)}>"


def create_session(puppet: Puppet, config: Optional[Config] = None) -> Session:
    """Create a session over ``puppet``."""
    return Session(puppet, config)
