"""Puppet interface: the provider every entity delegates to."""

from nanoroom.puppet.base import Puppet
from nanoroom.puppet.mock import MockPuppet
from nanoroom.puppet.schema import (
    MemberPayload,
    Receiver,
    RoomMemberPayload,
    RoomMemberQueryFilter,
    RoomPayload,
    RoomQueryFilter,
)

__all__ = [
    "Puppet",
    "MockPuppet",
    "MemberPayload",
    "Receiver",
    "RoomMemberPayload",
    "RoomMemberQueryFilter",
    "RoomPayload",
    "RoomQueryFilter",
]
