"""Query executor: runs fetches for cache keys and writes results back.

At most one fetch per key is in flight at any time. Concurrent callers asking
for the same key get the task that is already running, so N subscribers
mounting together cause exactly one call into the data collaborator.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Any, Callable

from tenderdesk.query.keys import QueryKey, format_key, normalize_key
from tenderdesk.query.models import CacheEntry, Fetcher, QueryOptions, QueryStatus
from tenderdesk.query.notifications import notify_failure
from tenderdesk.query.store import QueryStore
from tenderdesk.shared.constants import CacheDefaults
from tenderdesk.shared.error_handling import error_message, map_exception_to_error
from tenderdesk.shared.errors import ApplicationError, ErrorCode, ErrorContext
from tenderdesk.shared.logging import log_operation_error, log_operation_success
from tenderdesk.shared.protocols import NotifierProtocol

logger = logging.getLogger(__name__)


class QueryExecutor:
    """Fire-and-forget fetch runner with per-key deduplication.

    Args:
        store: Store receiving results
        notifier: Receives a failure message for every failed fetch
        default_stale_time: Seconds a success entry stays fresh when the
            query does not set its own ``stale_time``. ``None`` keeps
            entries fresh until invalidated.
        clock: Monotonic time source
    """

    def __init__(
        self,
        store: QueryStore,
        notifier: NotifierProtocol | None = None,
        default_stale_time: float | None = CacheDefaults.STALE_TIME,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._default_stale_time = math.inf if default_stale_time is None else default_stale_time
        self._clock = clock
        self._in_flight: dict[QueryKey, asyncio.Task[None]] = {}
        self._rerun: set[QueryKey] = set()
        store.set_refetch_handler(self.refetch)

    @property
    def notifier(self) -> NotifierProtocol | None:
        return self._notifier

    def ensure_fresh(
        self,
        key: QueryKey,
        fetch_fn: Fetcher,
        options: QueryOptions | None = None,
    ) -> asyncio.Task[None] | None:
        """Make sure the entry for ``key`` is (being) brought up to date.

        Must be called with a running event loop.

        Returns:
            The task running the fetch, or None when nothing needed to run
            (query disabled, or entry still fresh).
        """
        options = options or QueryOptions()
        if not options.enabled:
            return None

        key = normalize_key(key)
        self._store.register_fetcher(key, fetch_fn, options)

        running = self._in_flight.get(key)
        if running is not None and not running.done():
            return running

        if not options.force and self.is_fresh(self._store.get(key), options.stale_time):
            return None

        return self._start(key, fetch_fn, options)

    def refetch(self, key: QueryKey) -> asyncio.Task[None] | None:
        """Re-run the fetcher registered for ``key``.

        A refetch requested while a fetch is running is queued behind it, so
        the data written last always comes from a fetch that started after
        the request.
        """
        key = normalize_key(key)
        entry = self._store.get(key)
        if entry is None or entry.fetcher is None:
            return None

        running = self._in_flight.get(key)
        if running is not None and not running.done():
            self._rerun.add(key)
            return running

        options = entry.options or QueryOptions()
        return self._start(key, entry.fetcher, options)

    def now(self) -> float:
        return self._clock()

    def is_fresh(self, entry: CacheEntry | None, stale_time: float | None = None) -> bool:
        if entry is None or entry.status != QueryStatus.SUCCESS or entry.is_stale:
            return False
        if entry.fetched_at is None:
            return False
        limit = self._default_stale_time if stale_time is None else stale_time
        return self._clock() - entry.fetched_at < limit

    def in_flight(self, key: QueryKey) -> asyncio.Task[None] | None:
        task = self._in_flight.get(normalize_key(key))
        if task is None or task.done():
            return None
        return task

    @property
    def in_flight_count(self) -> int:
        return sum(1 for task in self._in_flight.values() if not task.done())

    async def join(self, key: QueryKey, task: asyncio.Task[None]) -> None:
        """Wait for a fetch without sharing its cancellation.

        Cancelling the caller leaves the fetch running for other waiters.

        Raises:
            ApplicationError: The fetch was cancelled, e.g. by a reset
        """
        await asyncio.wait({task})
        if task.cancelled():
            raise ApplicationError(
                ErrorCode.QUERY_CANCELLED,
                "Query was cancelled",
                ErrorContext(operation="query", query_key=format_key(normalize_key(key))),
            )

    async def settle(self) -> None:
        """Wait until no fetch is running, including queued refetches."""
        while True:
            running = [task for task in self._in_flight.values() if not task.done()]
            if not running:
                return
            await asyncio.gather(*running, return_exceptions=True)

    def cancel_all(self) -> None:
        """Cancel running fetches; their results are never written."""
        for key, task in list(self._in_flight.items()):
            if not task.done():
                logger.debug("Cancelling fetch for %s", format_key(key))
                task.cancel()
        self._in_flight.clear()
        self._rerun.clear()

    def _start(self, key: QueryKey, fetch_fn: Fetcher, options: QueryOptions) -> asyncio.Task[None]:
        loop = asyncio.get_running_loop()
        task = loop.create_task(
            self._run(key, fetch_fn, options),
            name=f"query:{format_key(key)}",
        )
        # Recorded before notifying so that listeners re-entering
        # ensure_fresh see the fetch as running
        self._in_flight[key] = task
        self._store.set_entry(key, status=QueryStatus.LOADING)
        return task

    async def _run(self, key: QueryKey, fetch_fn: Fetcher, options: QueryOptions) -> None:
        started = self._clock()
        try:
            data: Any = await fetch_fn()
        except asyncio.CancelledError:
            self._release(key)
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._release(key)
            self._record_failure(key, exc, options)
        else:
            self._release(key)
            self._store.set_entry(
                key,
                data=data,
                error=None,
                status=QueryStatus.SUCCESS,
                fetched_at=self._clock(),
                is_stale=False,
            )
            log_operation_success(
                logger,
                operation="query",
                duration_ms=(self._clock() - started) * 1000,
                result_info={"key": format_key(key)},
            )

        if key in self._rerun:
            self._rerun.discard(key)
            self.refetch(key)

    def _record_failure(self, key: QueryKey, exc: Exception, options: QueryOptions) -> None:
        error = map_exception_to_error(
            exc,
            operation="query",
            default_code=ErrorCode.QUERY_FAILED,
            query_key=format_key(key),
        )
        log_operation_error(logger, error, operation="query", additional_context={"query_key": format_key(key)})
        self._store.set_entry(key, status=QueryStatus.ERROR, error=error)
        if options.notify_errors:
            notify_failure(self._notifier, error_message(error))

    def _release(self, key: QueryKey) -> None:
        if self._in_flight.get(key) is asyncio.current_task():
            del self._in_flight[key]
