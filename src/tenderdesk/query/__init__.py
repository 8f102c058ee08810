"""Reactive query cache.

Read-through cache with per-key deduplicated fetching, targeted
invalidation after writes, and observers binding consumers to keys.
"""

from tenderdesk.query.client import QueryClient
from tenderdesk.query.eviction import EvictionPolicy, IdleTimeoutEviction, NoEviction
from tenderdesk.query.executor import QueryExecutor
from tenderdesk.query.keys import QueryKey, format_key, key_matches, make_key, normalize_key
from tenderdesk.query.models import CacheEntry, QueryOptions, QuerySnapshot, QueryStatus
from tenderdesk.query.mutation import Mutation, MutationExecutor
from tenderdesk.query.observer import QueryObserver
from tenderdesk.query.store import QueryStore

__all__ = [
    "CacheEntry",
    "EvictionPolicy",
    "IdleTimeoutEviction",
    "Mutation",
    "MutationExecutor",
    "NoEviction",
    "QueryClient",
    "QueryExecutor",
    "QueryKey",
    "QueryObserver",
    "QueryOptions",
    "QuerySnapshot",
    "QueryStatus",
    "QueryStore",
    "format_key",
    "key_matches",
    "make_key",
    "normalize_key",
]
