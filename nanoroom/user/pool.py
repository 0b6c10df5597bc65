"""Identity pools: one live entity per id per session.

A pool is created by its ``Session`` and lives as long as it does. Entries
are never evicted; ``clear()`` exists for tests and explicit teardown.
"""

import asyncio
import threading
from typing import TYPE_CHECKING, Generic, Iterator, Optional, TypeVar

from loguru import logger

from nanoroom.errors import ConstructionError, InvalidArgumentError
from nanoroom.puppet.schema import RoomQueryFilter
from nanoroom.user.entity import _POOL_KEY, Entity
from nanoroom.user.member import Member
from nanoroom.user.room import Room

if TYPE_CHECKING:
    from nanoroom.session import Session

E = TypeVar("E", bound=Entity)


class EntityPool(Generic[E]):
    """Maps ids to the single instance representing them."""

    entity_class: type[E]

    def __init__(self, session: "Session"):
        if session is None or session.puppet is None:
            raise ConstructionError(f"{type(self).__name__} needs a session with a puppet")
        self._session = session
        self._lock = threading.Lock()
        self._entities: Optional[dict[str, E]] = None  # Created on first load()

    def load(self, entity_id: str) -> E:
        """
        Get the instance for ``entity_id``, creating it on first reference.

        Args:
            entity_id: Stable id in the puppet's namespace

        Returns:
            The same object for every call with the same id
        """
        if not entity_id or not isinstance(entity_id, str):
            raise InvalidArgumentError(f"{self.entity_class.__name__} id must be a non-empty string")

        with self._lock:
            if self._entities is None:
                self._entities = {}

            existing = self._entities.get(entity_id)
            if existing is not None:
                return existing

            entity = self.entity_class(entity_id, self._session, _key=_POOL_KEY)
            self._entities[entity_id] = entity
            logger.trace(f"{self.entity_class.__name__} loaded: {entity_id}")
            return entity

    def get(self, entity_id: str) -> Optional[E]:
        """Get the instance for ``entity_id`` without creating it."""
        with self._lock:
            return (self._entities or {}).get(entity_id)

    def clear(self) -> None:
        with self._lock:
            self._entities = None

    def __contains__(self, entity_id: object) -> bool:
        with self._lock:
            return entity_id in (self._entities or {})

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities or {})

    def __iter__(self) -> Iterator[E]:
        with self._lock:
            return iter(list((self._entities or {}).values()))


class MemberPool(EntityPool[Member]):
    """Pool of members for one session."""

    entity_class = Member


class RoomPool(EntityPool[Room]):
    """Pool of rooms for one session, plus room creation and search."""

    entity_class = Room

    async def create(self, members: list[Member], topic: Optional[str] = None) -> Room:
        """
        Create a new room with ``members`` invited.

        Args:
            members: Members to invite, at least one
            topic: Optional initial topic

        Returns:
            The new room
        """
        if not members or not isinstance(members, (list, tuple)):
            raise InvalidArgumentError("member list not found")
        if not all(isinstance(m, Member) for m in members):
            raise InvalidArgumentError("member list must contain only Member instances")

        logger.debug(f"Room create({', '.join(str(m) for m in members)}, {topic})")

        try:
            room_id = await self._session.puppet.room_create([m.id for m in members], topic)
        except Exception as e:
            logger.error(f"Room create() exception: {e}")
            raise

        return self.load(room_id)

    async def find_all(self, query: Optional[RoomQueryFilter] = None) -> list[Room]:
        """
        Find every room whose topic matches ``query``.

        Fail-safe: provider errors are logged and an empty list is returned.

        Args:
            query: Topic filter, defaults to all rooms

        Returns:
            Ready rooms
        """
        if query is None:
            query = RoomQueryFilter()
        logger.debug(f"Room find_all({query})")

        if not query.topic:
            raise InvalidArgumentError("topic filter not found")

        try:
            room_ids = await self._session.puppet.room_search(query)
            rooms = [self.load(room_id) for room_id in room_ids]
            await asyncio.gather(*(room.ready() for room in rooms))
            return rooms
        except Exception as e:
            logger.exception(f"Room find_all() rejected: {e}")
            return []

    async def find(self, query: str | RoomQueryFilter) -> Optional[Room]:
        """
        Find one room by topic. When several match, the first one the
        puppet confirms as still valid is returned.

        Args:
            query: Exact topic, or a filter

        Returns:
            Room or None if nothing valid matched
        """
        logger.debug(f"Room find({query})")

        if isinstance(query, str):
            query = RoomQueryFilter(topic=query)

        rooms = await self.find_all(query)
        if not rooms:
            return None

        if len(rooms) > 1:
            logger.warning(f"Room find() got more than one ({len(rooms)}) result")

        for n, room in enumerate(rooms):
            try:
                valid = await self._session.puppet.room_validate(room.id)
            except Exception as e:
                logger.error(f"Room find() could not validate {room.id}: {e}")
                raise
            if valid:
                logger.debug(f"Room find() confirmed room[#{n}] id={room.id} is valid, return it")
                return room
            logger.debug(f"Room find() room[#{n}] id={room.id} is INVALID, try next")

        logger.warning(f"Room find() got {len(rooms)} rooms but none is valid")
        return None
