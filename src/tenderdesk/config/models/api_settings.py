"""External service configuration models.

The hosted database (Supabase/PostgREST) and the dashboard's own HTTP API
used by the checkout, messaging, analysis and reminder endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class APISettings(BaseModel):
    """Connection settings for the external collaborators.

    Security: ``supabase_key`` and ``access_token`` are masked in
    ``__repr__`` so settings can be logged safely.
    """

    supabase_url: str = Field(default="", description="Supabase project URL")
    supabase_key: str = Field(
        default="",
        repr=False,
        description="Supabase anon key",
    )
    dashboard_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the dashboard HTTP API",
    )
    access_token: str = Field(
        default="",
        repr=False,
        description="Bearer token sent to the dashboard HTTP API",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    def __repr__(self) -> str:
        masked_key = "****" if self.supabase_key else "[empty]"
        return (
            f"APISettings("
            f"supabase_url={self.supabase_url!r}, "
            f"supabase_key={masked_key}, "
            f"dashboard_url={self.dashboard_url!r}, "
            f"request_timeout={self.request_timeout})"
        )


__all__ = ["APISettings"]
