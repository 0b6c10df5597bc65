"""Entities: rooms, members and the pools that own them."""

from nanoroom.user.entity import Entity
from nanoroom.user.member import Member
from nanoroom.user.pool import EntityPool, MemberPool, RoomPool
from nanoroom.user.room import Room, RoomEventName, SayContent, TopicChange

__all__ = [
    "Entity",
    "EntityPool",
    "Member",
    "MemberPool",
    "Room",
    "RoomEventName",
    "RoomPool",
    "SayContent",
    "TopicChange",
]
