"""Query cache data model.

Each cache entry is a small state machine::

    idle -> loading -> success | error
              ^            |
              +-- refetch -+

``is_stale`` is a modifier on top of the status: an invalidated success
entry keeps its data and status until the refetch lands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from tenderdesk.query.keys import QueryKey

Fetcher = Callable[[], Awaitable[Any]]
Listener = Callable[["QuerySnapshot"], None]
Unsubscribe = Callable[[], None]


class QueryStatus(str, Enum):
    """Lifecycle state of a cache entry."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class CacheEntry:
    """Stored state for one query key.

    Attributes:
        key: The normalized query key
        data: Last successfully fetched data (kept while reloading)
        error: Error of the last failed fetch, cleared on success
        status: Current lifecycle state
        fetched_at: Monotonic timestamp of the last successful fetch
        subscriber_count: Number of live listeners
        is_stale: Set by invalidation, cleared by a successful fetch
        fetcher: Last fetch function registered for this key
        options: Options the fetcher was registered with, reused by refetches
    """

    key: QueryKey
    data: Any = None
    error: Optional[Exception] = None
    status: QueryStatus = QueryStatus.IDLE
    fetched_at: Optional[float] = None
    subscriber_count: int = 0
    is_stale: bool = False
    fetcher: Optional[Fetcher] = field(default=None, repr=False)
    options: Optional[QueryOptions] = field(default=None, repr=False)

    def snapshot(self) -> QuerySnapshot:
        return QuerySnapshot(
            key=self.key,
            data=self.data,
            error=self.error,
            status=self.status,
            is_stale=self.is_stale,
            fetched_at=self.fetched_at,
        )


@dataclass(frozen=True)
class QuerySnapshot:
    """Immutable view of an entry handed to listeners and observers."""

    key: QueryKey
    data: Any = None
    error: Optional[Exception] = None
    status: QueryStatus = QueryStatus.IDLE
    is_stale: bool = False
    fetched_at: Optional[float] = None

    @property
    def is_loading(self) -> bool:
        return self.status == QueryStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status == QueryStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status == QueryStatus.ERROR


class QueryOptions(BaseModel):
    """Per-query execution options.

    Attributes:
        enabled: When False the query never runs (precondition not met)
        force: Refetch even when the entry is fresh
        stale_time: Seconds a success entry stays fresh; None means the
            client default, ``math.inf`` means never stale
        placeholder_data: Data reported while nothing has been fetched
        notify_errors: Send fetch failures to the notifier
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    enabled: bool = True
    force: bool = False
    stale_time: Optional[float] = Field(default=None, ge=0)
    placeholder_data: Any = None
    notify_errors: bool = True
