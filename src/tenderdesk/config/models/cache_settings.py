"""Query cache configuration model.

Controls how long fetched data stays fresh and what happens to entries
nobody observes any more.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from tenderdesk.shared.constants import CacheDefaults


class CacheSettings(BaseModel):
    """Query cache configuration.

    ``stale_time`` of None keeps successful entries fresh until they are
    invalidated.
    """

    stale_time: float | None = Field(
        default=CacheDefaults.STALE_TIME,
        ge=0,
        description="Seconds a fetched entry is served without refetching",
    )
    gc_time: float = Field(
        default=CacheDefaults.GC_TIME,
        ge=0,
        description="Idle seconds before an unobserved entry is evicted",
    )
    eviction: Literal["idle_timeout", "none"] = Field(
        default=CacheDefaults.EVICTION_IDLE,
        description="Eviction policy for unobserved entries (idle_timeout, none)",
    )


__all__ = ["CacheSettings"]
