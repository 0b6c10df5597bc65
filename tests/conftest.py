"""Shared fixtures: a session over a MockPuppet with a few contacts and rooms."""

import pytest

from nanoroom.puppet.mock import MockPuppet
from nanoroom.session import Session

MEMBER_IDS = ["bot", "alice", "bob", "carol", "dave"]


@pytest.fixture
def puppet():
    """Create MockPuppet with four contacts and two rooms."""
    puppet = MockPuppet(self_id="bot")
    puppet.add_contact("alice", name="Alice")
    puppet.add_contact("bob", name="Bob")
    puppet.add_contact("carol", name="Carol")
    puppet.add_contact("dave", name="Dave")

    puppet.add_room(
        "room-general",
        topic="General",
        member_id_list=MEMBER_IDS,
        owner_id="alice",
        announcement="Be nice",
    )
    puppet.add_room("room-untitled", topic="", member_id_list=MEMBER_IDS)
    return puppet


@pytest.fixture
def session(puppet):
    """Create Session bound to the mock puppet."""
    return Session(puppet)


@pytest.fixture
def general(session):
    return session.rooms.load("room-general")


@pytest.fixture
def untitled(session):
    return session.rooms.load("room-untitled")
