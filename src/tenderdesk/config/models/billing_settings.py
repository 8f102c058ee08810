"""Billing configuration model.

Maps Stripe price ids back to subscription plans and fixes the credit
top-up amount the checkout endpoint accepts.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class BillingSettings(BaseModel):
    """Stripe price ids per plan and billing period."""

    pro_monthly_price_id: Optional[str] = Field(default=None, description="Pro plan, monthly")
    pro_annual_price_id: Optional[str] = Field(default=None, description="Pro plan, annual")
    team_monthly_price_id: Optional[str] = Field(default=None, description="Team plan, monthly")
    team_annual_price_id: Optional[str] = Field(default=None, description="Team plan, annual")
    top_up_amount: int = Field(default=10, gt=0, description="AI credits bought per top-up")


__all__ = ["BillingSettings"]
