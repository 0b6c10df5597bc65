"""Minimal publish/subscribe for entity events."""

import asyncio
import inspect
from typing import Any, Callable

from loguru import logger

Listener = Callable[..., Any]


class EventEmitter:
    """
    Keeps listeners per event name and calls them in registration order.

    Listeners may be plain functions or coroutine functions. Coroutines are
    scheduled as tasks on the running loop; ``emit`` does not wait for them.
    A listener that raises is logged and the remaining listeners still run.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[tuple[Listener, bool]]] = {}
        self._tasks: set[asyncio.Task] = set()

    def on(self, event: str, listener: Listener) -> "EventEmitter":
        """Subscribe ``listener`` to ``event``. Returns self for chaining."""
        self._listeners.setdefault(event, []).append((listener, False))
        return self

    def once(self, event: str, listener: Listener) -> "EventEmitter":
        """Subscribe ``listener`` for the next ``event`` only."""
        self._listeners.setdefault(event, []).append((listener, True))
        return self

    def off(self, event: str, listener: Listener) -> "EventEmitter":
        """Remove every subscription of ``listener`` to ``event``."""
        entries = self._listeners.get(event)
        if entries:
            self._listeners[event] = [(fn, once) for fn, once in entries if fn != listener]
        return self

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every listener of ``event`` with ``args``.

        Returns:
            True if the event had listeners.
        """
        entries = self._listeners.get(event)
        if not entries:
            return False

        self._listeners[event] = [(fn, once) for fn, once in entries if not once]

        for listener, _ in entries:
            try:
                result = listener(*args)
            except Exception as e:
                logger.error(f"Error in '{event}' listener {listener!r}: {e}")
                continue
            if inspect.isawaitable(result):
                self._schedule(event, result)
        return True

    async def wait_listeners(self) -> None:
        """Wait for coroutine listeners scheduled by earlier emits."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _schedule(self, event: str, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, dropping async '{event}' listener")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = asyncio.ensure_future(awaitable, loop=loop)
        self._tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            if not t.cancelled() and t.exception() is not None:
                logger.error(f"Error in async '{event}' listener: {t.exception()}")

        task.add_done_callback(_done)
