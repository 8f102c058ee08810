"""
Cache Configuration Constants

Defaults for the query cache. Settings in ``config.cache`` override them.
"""

BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND


class CacheDefaults:
    """Default freshness and garbage-collection windows."""

    # An entry younger than this is served without refetching
    STALE_TIME = 30 * BASE_SECOND

    # Unobserved entries are evicted after this idle period
    GC_TIME = 5 * BASE_MINUTE

    EVICTION_IDLE = "idle_timeout"
    EVICTION_NONE = "none"
