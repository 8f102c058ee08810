"""Query client facade.

Owns one store, one query executor and one mutation executor. There is no
module-level instance: the application container creates one per session
and tests create their own isolated clients.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar

from tenderdesk.config.models.cache_settings import CacheSettings
from tenderdesk.query.eviction import EvictionPolicy, IdleTimeoutEviction, NoEviction
from tenderdesk.query.executor import QueryExecutor
from tenderdesk.query.keys import KeyMatcher, QueryKey, normalize_key
from tenderdesk.query.models import Fetcher, QueryOptions, QueryStatus
from tenderdesk.query.mutation import ErrorMessage, Mutation, MutationExecutor
from tenderdesk.query.notifications import notify_failure, notify_info, notify_success
from tenderdesk.query.observer import ChangeCallback, QueryObserver
from tenderdesk.query.store import QueryStore
from tenderdesk.shared.constants import CacheDefaults
from tenderdesk.shared.protocols import NotifierProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_eviction_policy(settings: CacheSettings) -> EvictionPolicy:
    if settings.eviction == CacheDefaults.EVICTION_NONE:
        return NoEviction()
    return IdleTimeoutEviction(settings.gc_time)


class QueryClient:
    """Entry point of the query layer.

    Example:
        >>> client = QueryClient.create(notifier=ConsoleNotifier())
        >>> tenders = await client.fetch_query(("tenders", "c1"), load_tenders)
        >>> client.dispose()
    """

    def __init__(
        self,
        store: QueryStore,
        executor: QueryExecutor,
        mutations: MutationExecutor,
        notifier: NotifierProtocol | None = None,
    ) -> None:
        self.store = store
        self.executor = executor
        self.mutations = mutations
        self.notifier = notifier

    @classmethod
    def create(
        cls,
        settings: CacheSettings | None = None,
        notifier: NotifierProtocol | None = None,
    ) -> QueryClient:
        """Build a client with its own store from cache settings."""
        settings = settings or CacheSettings()
        store = QueryStore(eviction=build_eviction_policy(settings))
        executor = QueryExecutor(store, notifier, default_stale_time=settings.stale_time)
        mutations = MutationExecutor(store, notifier)
        logger.debug(
            "Query client created (stale_time=%s, eviction=%s)",
            settings.stale_time,
            settings.eviction,
        )
        return cls(store, executor, mutations, notifier)

    # ---------------------------------------------------------------- queries

    def observe(
        self,
        key: Optional[QueryKey],
        fetch_fn: Fetcher,
        options: QueryOptions | None = None,
        on_change: ChangeCallback | None = None,
        *,
        mount: bool = True,
    ) -> QueryObserver:
        """Create an observer for ``key``, mounted unless ``mount`` is False."""
        observer = QueryObserver(self.store, self.executor, key, fetch_fn, options, on_change)
        if mount:
            observer.mount()
        return observer

    async def fetch_query(
        self,
        key: Optional[QueryKey],
        fetch_fn: Fetcher,
        options: QueryOptions | None = None,
    ) -> Any:
        """Return the data for ``key``, fetching it when not fresh.

        A disabled query (or a None key) returns the placeholder without
        calling ``fetch_fn``.

        Raises:
            TenderDeskError: The error the fetch ended with, or
                ApplicationError(QUERY_CANCELLED) when a reset cancelled it
        """
        options = options or QueryOptions()
        if key is None or not options.enabled:
            return options.placeholder_data

        task = self.executor.ensure_fresh(key, fetch_fn, options)
        if task is not None:
            await self.executor.join(key, task)

        entry = self.store.get(key)
        if entry is None:
            return options.placeholder_data
        if entry.status == QueryStatus.ERROR and entry.error is not None:
            raise entry.error
        return entry.data

    def invalidate(self, matcher: KeyMatcher, *, exact: bool = False) -> list[QueryKey]:
        return self.store.invalidate(matcher, exact=exact)

    def invalidate_many(self, matchers: Iterable[KeyMatcher]) -> list[QueryKey]:
        return self.store.invalidate_many(matchers)

    def get_query_data(self, key: QueryKey) -> Any:
        entry = self.store.get(key)
        return entry.data if entry is not None else None

    def set_query_data(self, key: QueryKey, data: Any) -> None:
        """Write ``data`` as a fresh successful result for ``key``."""
        self.store.set_entry(
            normalize_key(key),
            data=data,
            error=None,
            status=QueryStatus.SUCCESS,
            fetched_at=self.executor.now(),
            is_stale=False,
        )

    # -------------------------------------------------------------- mutations

    def mutation(
        self,
        mutate_fn: Callable[..., Awaitable[T]],
        *,
        invalidates: Iterable[KeyMatcher] | Callable[..., Iterable[KeyMatcher]] = (),
        success_message: str | Callable[..., str | None] | None = None,
        error_message: ErrorMessage = None,
        name: str | None = None,
    ) -> Mutation[T]:
        return Mutation(
            self.mutations,
            mutate_fn,
            invalidates=invalidates,
            success_message=success_message,
            error_message=error_message,
            name=name,
        )

    # ---------------------------------------------------------- notifications

    def notify_success(self, message: str) -> None:
        notify_success(self.notifier, message)

    def notify_failure(self, message: str) -> None:
        notify_failure(self.notifier, message)

    def notify_info(self, message: str) -> None:
        notify_info(self.notifier, message)

    # -------------------------------------------------------------- lifecycle

    def reset(self) -> None:
        """Drop all cached data, e.g. on sign-out."""
        self.executor.cancel_all()
        self.store.reset()

    def dispose(self) -> None:
        self.executor.cancel_all()
        self.store.dispose()
