"""Exceptions raised by nanoroom entities."""


class RoomError(Exception):
    """Base class for all nanoroom errors."""
    pass


class InvalidArgumentError(RoomError, ValueError):
    """A caller passed a missing or malformed argument.

    Raised before any provider call is made, e.g. an empty member list on
    room creation, a query without a topic matcher, or content that can not
    be said in a room.
    """
    pass


class NotReadyError(RoomError):
    """The entity payload has not been fetched from the provider yet."""
    pass


class ConstructionError(RoomError, TypeError):
    """An entity was instantiated outside of its pool, or without a puppet."""
    pass


class ProviderError(RoomError):
    """A puppet failed while serving a delegated call."""
    pass
