"""Query cache store.

The store is the single shared mutable resource of the query layer. It maps
normalized query keys to ``CacheEntry`` objects and keeps the listeners
subscribed to each key. Only the executors (and explicit user actions routed
through ``QueryClient``) mutate it.

All methods are synchronous and must be called from the thread running the
event loop; the store does no locking of its own.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import Any, Callable, Iterable, Iterator

from tenderdesk.query.eviction import EvictionPolicy, NoEviction
from tenderdesk.query.keys import KeyMatcher, QueryKey, format_key, key_matches, normalize_key
from tenderdesk.query.models import CacheEntry, Fetcher, Listener, QueryOptions, QuerySnapshot, QueryStatus, Unsubscribe
from tenderdesk.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)

RefetchHandler = Callable[[QueryKey], Any]

_PATCHABLE_FIELDS = frozenset(f.name for f in fields(CacheEntry)) - {"key", "subscriber_count"}


class _Subscription:
    """Registration token; identity distinguishes repeated subscriptions."""

    __slots__ = ("listener",)

    def __init__(self, listener: Listener) -> None:
        self.listener = listener


class QueryStore:
    """Keyed store of query results with per-key listeners.

    Args:
        eviction: Policy deciding when unobserved entries are dropped.
            Defaults to keeping everything.

    Example:
        >>> store = QueryStore()
        >>> unsubscribe = store.subscribe(("tenders", "c1"), print)
        >>> store.set_entry(("tenders", "c1"), data=[])
        >>> unsubscribe()
    """

    def __init__(self, eviction: EvictionPolicy | None = None) -> None:
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._subscriptions: dict[QueryKey, list[_Subscription]] = {}
        self._eviction: EvictionPolicy = eviction or NoEviction()
        self._refetch_handler: RefetchHandler | None = None
        self._disposed = False

    # ------------------------------------------------------------------ reads

    def get(self, key: QueryKey) -> CacheEntry | None:
        """Return the entry for ``key`` without side effects."""
        return self._entries.get(normalize_key(key))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, (tuple, list)) and normalize_key(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(list(self._entries.values()))

    def find_all(self, matcher: KeyMatcher, *, exact: bool = False) -> list[CacheEntry]:
        """Return all entries selected by ``matcher``."""
        return [entry for entry in self._entries.values() if key_matches(entry.key, matcher, exact=exact)]

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # ---------------------------------------------------------- subscriptions

    def subscribe(self, key: QueryKey, listener: Listener) -> Unsubscribe:
        """Register ``listener`` for changes of the entry at ``key``.

        Creates the entry lazily and increments its subscriber count.

        Returns:
            Idempotent handle that removes the listener again.

        Raises:
            ApplicationError: If the store has been disposed
        """
        self._ensure_usable("subscribe")
        key = normalize_key(key)
        entry = self._get_or_create(key)
        token = _Subscription(listener)
        self._subscriptions.setdefault(key, []).append(token)
        entry.subscriber_count = len(self._subscriptions[key])
        self._eviction.on_active(key)

        def unsubscribe() -> None:
            self._remove_subscription(key, token)

        return unsubscribe

    def _remove_subscription(self, key: QueryKey, token: _Subscription) -> None:
        tokens = self._subscriptions.get(key)
        if not tokens or token not in tokens:
            return
        tokens.remove(token)
        token.listener = _noop

        remaining = len(tokens)
        if remaining == 0:
            del self._subscriptions[key]

        entry = self._entries.get(key)
        if entry is None:
            return
        entry.subscriber_count = remaining
        if remaining == 0 and not self._disposed:
            self._eviction.on_idle(self, key)

    def listener_count(self, key: QueryKey) -> int:
        return len(self._subscriptions.get(normalize_key(key), ()))

    # ----------------------------------------------------------------- writes

    def set_entry(self, key: QueryKey, **patch: Any) -> CacheEntry | None:
        """Merge ``patch`` into the entry for ``key`` and notify its listeners.

        The entry is created when absent. Unknown fields are ignored with a
        warning. Never raises.
        """
        if self._disposed:
            logger.warning("Ignoring set_entry on disposed store for %s", format_key(tuple(key)))
            return None

        key = normalize_key(key)
        entry = self._get_or_create(key)
        for name, value in patch.items():
            if name not in _PATCHABLE_FIELDS:
                logger.warning("Ignoring unknown cache entry field '%s' for %s", name, format_key(key))
                continue
            setattr(entry, name, value)

        self._notify(key, entry.snapshot())
        if entry.subscriber_count == 0 and entry.status != QueryStatus.LOADING:
            self._eviction.on_idle(self, key)
        return entry

    def register_fetcher(self, key: QueryKey, fetcher: Fetcher, options: QueryOptions | None = None) -> None:
        """Remember how to refresh ``key`` on invalidation."""
        if self._disposed:
            return
        entry = self._get_or_create(normalize_key(key))
        entry.fetcher = fetcher
        entry.options = options

    def set_refetch_handler(self, handler: RefetchHandler | None) -> None:
        """Install the callback that re-runs a key's fetcher (the executor)."""
        self._refetch_handler = handler

    def invalidate(self, matcher: KeyMatcher, *, exact: bool = False) -> list[QueryKey]:
        """Mark matching entries stale and refetch the observed ones.

        Entries without listeners only get the stale flag; they revalidate
        when a subscriber shows up again.

        Returns:
            Keys handed to the refetch handler.
        """
        if self._disposed:
            return []
        return self._invalidate_entries(
            self.find_all(matcher, exact=exact),
            matcher if callable(matcher) else format_key(normalize_key(matcher)),
        )

    def invalidate_many(self, matchers: Iterable[KeyMatcher]) -> list[QueryKey]:
        """Invalidate the union of several matchers.

        A key selected by more than one matcher is still refetched once.
        """
        if self._disposed:
            return []
        selected: dict[QueryKey, CacheEntry] = {}
        labels = []
        for matcher in matchers:
            labels.append(matcher if callable(matcher) else format_key(normalize_key(matcher)))
            for entry in self.find_all(matcher):
                selected.setdefault(entry.key, entry)
        return self._invalidate_entries(list(selected.values()), labels)

    def _invalidate_entries(self, entries: list[CacheEntry], label: Any) -> list[QueryKey]:
        scheduled: list[QueryKey] = []
        for entry in entries:
            entry.is_stale = True
            if entry.subscriber_count > 0 and entry.fetcher is not None:
                scheduled.append(entry.key)

        logger.debug(
            "Invalidated %s, refetching %d active entr%s",
            label,
            len(scheduled),
            "y" if len(scheduled) == 1 else "ies",
        )

        if self._refetch_handler is not None:
            for key in scheduled:
                try:
                    self._refetch_handler(key)
                except Exception:  # pylint: disable=broad-exception-caught
                    logger.exception("Refetch scheduling failed for %s", format_key(key))

        return scheduled

    def evict(self, key: QueryKey) -> bool:
        """Drop the entry for ``key`` if nothing observes or loads it.

        Returns:
            True when an entry was removed.
        """
        key = normalize_key(key)
        entry = self._entries.get(key)
        if entry is None or entry.subscriber_count > 0 or entry.status == QueryStatus.LOADING:
            return False
        del self._entries[key]
        logger.debug("Evicted idle entry %s", format_key(key))
        return True

    # -------------------------------------------------------------- lifecycle

    def reset(self) -> None:
        """Drop every entry and subscription.

        Current listeners receive an empty idle snapshot first so that bound
        views stop showing data from the previous session; their unsubscribe
        handles become no-ops.
        """
        subscriptions = self._subscriptions
        self._subscriptions = {}
        self._entries = {}
        self._eviction.clear()

        for key, tokens in subscriptions.items():
            empty = QuerySnapshot(key=key)
            for token in list(tokens):
                self._call_listener(token.listener, empty)
                token.listener = _noop

        logger.info("Query store reset")

    def dispose(self) -> None:
        """Reset the store and refuse further subscriptions."""
        self.reset()
        self._refetch_handler = None
        self._disposed = True

    # ---------------------------------------------------------------- helpers

    def _get_or_create(self, key: QueryKey) -> CacheEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry(key=key)
            self._entries[key] = entry
        return entry

    def _notify(self, key: QueryKey, snapshot: QuerySnapshot) -> None:
        # Iterate over a copy: listeners may (un)subscribe while being notified
        for token in list(self._subscriptions.get(key, ())):
            self._call_listener(token.listener, snapshot)

    @staticmethod
    def _call_listener(listener: Listener, snapshot: QuerySnapshot) -> None:
        try:
            listener(snapshot)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Listener for %s raised", format_key(snapshot.key))

    def _ensure_usable(self, operation: str) -> None:
        if self._disposed:
            raise ApplicationError(
                ErrorCode.STORE_DISPOSED,
                "Query store has been disposed",
                ErrorContext(operation=operation),
            )


def _noop(_snapshot: QuerySnapshot) -> None:
    return None
