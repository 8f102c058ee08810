"""Subscriber binding between a consumer and one query key.

A ``QueryObserver`` plays the role a mounted view plays in a reactive UI: it
holds a subscription while mounted, asks the executor to keep its entry
fresh, and hands every new snapshot to ``on_change``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from tenderdesk.query.executor import QueryExecutor
from tenderdesk.query.keys import QueryKey, format_key, normalize_key
from tenderdesk.query.models import Fetcher, QueryOptions, QuerySnapshot, QueryStatus, Unsubscribe
from tenderdesk.query.store import QueryStore

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[QuerySnapshot], None]


class QueryObserver:
    """Observe one query key for as long as the observer is mounted.

    A key of None, or ``options.enabled`` set to False, means a required
    input is missing. The observer then neither subscribes nor fetches and
    reports ``options.placeholder_data``.

    Args:
        store: Shared query store
        executor: Executor running the fetches
        key: Key to observe, or None when an input is missing
        fetch_fn: Coroutine function fetching the data for ``key``
        options: Query options
        on_change: Called with the observer's snapshot on every change
    """

    def __init__(
        self,
        store: QueryStore,
        executor: QueryExecutor,
        key: Optional[QueryKey],
        fetch_fn: Fetcher,
        options: QueryOptions | None = None,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self._store = store
        self._executor = executor
        self._key = normalize_key(key) if key is not None else None
        self._fetch_fn = fetch_fn
        self._options = options or QueryOptions()
        self._on_change = on_change
        self._unsubscribe: Unsubscribe | None = None
        self._mounted = False
        self._latest: QuerySnapshot | None = None

    @property
    def key(self) -> Optional[QueryKey]:
        return self._key

    @property
    def options(self) -> QueryOptions:
        return self._options

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @property
    def is_enabled(self) -> bool:
        return self._key is not None and self._options.enabled

    @property
    def snapshot(self) -> QuerySnapshot:
        """Latest state of the observed entry, placeholder-filled."""
        if not self.is_enabled:
            return QuerySnapshot(key=self._key or (), data=self._options.placeholder_data)

        current = self._latest
        if current is None or not self._mounted:
            entry = self._store.get(self._key)
            current = entry.snapshot() if entry is not None else QuerySnapshot(key=self._key)

        if current.data is None and current.status != QueryStatus.SUCCESS:
            return QuerySnapshot(
                key=current.key,
                data=self._options.placeholder_data,
                error=current.error,
                status=current.status,
                is_stale=current.is_stale,
                fetched_at=current.fetched_at,
            )
        return current

    @property
    def data(self) -> Any:
        return self.snapshot.data

    def mount(self) -> QueryObserver:
        """Subscribe to the key and trigger a fetch when needed."""
        if self._mounted:
            return self
        self._mounted = True
        self._attach()
        return self

    def unmount(self) -> None:
        """Release the subscription; a running fetch is left to finish."""
        if not self._mounted:
            return
        self._detach()
        self._mounted = False

    def set_key(
        self,
        key: Optional[QueryKey],
        fetch_fn: Fetcher | None = None,
        options: QueryOptions | None = None,
    ) -> None:
        """Re-key the observer, moving the subscription to the new key."""
        new_key = normalize_key(key) if key is not None else None
        if new_key == self._key and fetch_fn is None and options is None:
            return

        logger.debug(
            "Re-keying observer from %s to %s",
            format_key(self._key) if self._key else None,
            format_key(new_key) if new_key else None,
        )
        if self._mounted:
            self._detach()

        self._key = new_key
        if fetch_fn is not None:
            self._fetch_fn = fetch_fn
        if options is not None:
            self._options = options

        if self._mounted:
            self._attach()
        self._emit()

    def refetch(self) -> asyncio.Task[None] | None:
        """Fetch again even when the entry is fresh."""
        if not self.is_enabled:
            return None
        return self._executor.ensure_fresh(
            self._key,
            self._fetch_fn,
            self._options.model_copy(update={"force": True}),
        )

    async def wait(self) -> QuerySnapshot:
        """Mount if needed, await the running fetch and return the snapshot.

        Raises:
            ApplicationError: The fetch was cancelled by a reset
        """
        self.mount()
        if self.is_enabled:
            task = self._executor.in_flight(self._key)
            if task is not None:
                await self._executor.join(self._key, task)
        return self.snapshot

    def _attach(self) -> None:
        self._latest = None
        if not self.is_enabled:
            return
        self._unsubscribe = self._store.subscribe(self._key, self._handle_change)
        self._executor.ensure_fresh(self._key, self._fetch_fn, self._options)

    def _detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._latest = None

    def _handle_change(self, snapshot: QuerySnapshot) -> None:
        self._latest = snapshot
        self._emit()

    def _emit(self) -> None:
        if self._on_change is not None:
            self._on_change(self.snapshot)

    def __enter__(self) -> QueryObserver:
        return self.mount()

    def __exit__(self, *exc_info: object) -> None:
        self.unmount()

    async def __aenter__(self) -> QueryObserver:
        await self.wait()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.unmount()
