"""nanoroom - group chat rooms as thin facades over a messaging puppet."""

__version__ = "0.1.0"

from nanoroom.config.schema import Config
from nanoroom.errors import (
    ConstructionError,
    InvalidArgumentError,
    NotReadyError,
    ProviderError,
    RoomError,
)
from nanoroom.filebox import FileBox
from nanoroom.puppet import MockPuppet, Puppet, RoomMemberQueryFilter, RoomQueryFilter
from nanoroom.session import Session, create_session
from nanoroom.user import Member, Room, RoomEventName, TopicChange

__all__ = [
    "Config",
    "ConstructionError",
    "FileBox",
    "InvalidArgumentError",
    "Member",
    "MockPuppet",
    "NotReadyError",
    "ProviderError",
    "Puppet",
    "Room",
    "RoomError",
    "RoomEventName",
    "RoomMemberQueryFilter",
    "RoomQueryFilter",
    "Session",
    "TopicChange",
    "create_session",
]
