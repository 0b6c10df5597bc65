"""Base class shared by rooms and members."""

from typing import TYPE_CHECKING

from nanoroom.errors import ConstructionError
from nanoroom.puppet.base import Puppet

if TYPE_CHECKING:
    from nanoroom.session import Session

# Only pools hold this key, so entities can not be built around them.
_POOL_KEY = object()


class Entity:
    """
    An object bound to one id in one session.

    Instances are created by an ``EntityPool`` only; calling a constructor
    directly raises ``ConstructionError``. The id never changes.
    """

    def __init__(self, entity_id: str, session: "Session", *, _key: object = None):
        if type(self) is Entity:
            raise ConstructionError("Entity can not be instantiated directly, subclass it")
        if _key is not _POOL_KEY:
            raise ConstructionError(
                f"{type(self).__name__} can not be instantiated directly, use the session pool load()"
            )
        if session is None or session.puppet is None:
            raise ConstructionError(f"{type(self).__name__} can not be instantiated without a puppet")

        self._id = entity_id
        self._session = session

    @property
    def id(self) -> str:
        return self._id

    @property
    def session(self) -> "Session":
        return self._session

    @property
    def puppet(self) -> Puppet:
        return self._session.puppet
