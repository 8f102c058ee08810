"""Eviction policies for unobserved cache entries.

The store calls ``on_idle`` when the last listener of a key goes away or an
unobserved entry settles, and ``on_active`` when a key gains a listener
again. Policies decide if and when ``QueryStore.evict`` runs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from tenderdesk.query.keys import QueryKey, format_key

if TYPE_CHECKING:
    from tenderdesk.query.store import QueryStore

logger = logging.getLogger(__name__)


class EvictionPolicy(Protocol):
    """Hook point for garbage-collecting idle entries."""

    def on_idle(self, store: QueryStore, key: QueryKey) -> None: ...

    def on_active(self, key: QueryKey) -> None: ...

    def clear(self) -> None: ...


class NoEviction:
    """Keep every entry for the lifetime of the store."""

    def on_idle(self, store: QueryStore, key: QueryKey) -> None:
        return None

    def on_active(self, key: QueryKey) -> None:
        return None

    def clear(self) -> None:
        return None


class IdleTimeoutEviction:
    """Evict an entry once it has had no listener for ``gc_time`` seconds.

    Timers run on the event loop; outside a running loop the policy keeps
    the entry (there is nothing that could fire the timer).

    Args:
        gc_time: Idle period in seconds before eviction
    """

    def __init__(self, gc_time: float) -> None:
        if gc_time < 0:
            msg = f"gc_time must be >= 0, got {gc_time}"
            raise ValueError(msg)
        self.gc_time = gc_time
        self._timers: dict[QueryKey, asyncio.TimerHandle] = {}

    def on_idle(self, store: QueryStore, key: QueryKey) -> None:
        self.on_active(key)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop, keeping idle entry %s", format_key(key))
            return
        self._timers[key] = loop.call_later(self.gc_time, self._fire, store, key)

    def on_active(self, key: QueryKey) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def clear(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    @property
    def pending(self) -> int:
        """Number of scheduled evictions."""
        return len(self._timers)

    def _fire(self, store: QueryStore, key: QueryKey) -> None:
        self._timers.pop(key, None)
        store.evict(key)
