"""Subscription plans and the limits they grant."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from tenderdesk.config.models.billing_settings import BillingSettings
from tenderdesk.shared.models.database import PlanType

UNLIMITED = -1


class PlanFeatures(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_tenders: int
    max_users: int
    export: bool = False
    analytics: bool = False
    competitor_tracking: bool = False
    procurement_plans: bool = False
    api_access: bool = False
    audit_logs: bool = False


class Plan(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    features: PlanFeatures


PLANS: dict[PlanType, Plan] = {
    "free": Plan(
        name="Free",
        description="Perfect for getting started",
        features=PlanFeatures(max_tenders=3, max_users=1),
    ),
    "pro": Plan(
        name="Pro",
        description="For serious tender hunters",
        features=PlanFeatures(
            max_tenders=UNLIMITED,
            max_users=3,
            export=True,
            analytics=True,
            competitor_tracking=True,
            procurement_plans=True,
        ),
    ),
    "team": Plan(
        name="Team",
        description="For growing companies",
        features=PlanFeatures(
            max_tenders=UNLIMITED,
            max_users=10,
            export=True,
            analytics=True,
            competitor_tracking=True,
            procurement_plans=True,
            api_access=True,
            audit_logs=True,
        ),
    ),
}


class PlanLimits(BaseModel):
    """Flattened view of what a plan allows, as the UI consumes it."""

    model_config = ConfigDict(frozen=True)

    plan: PlanType
    max_tenders: int
    max_users: int
    can_export: bool
    has_analytics: bool
    has_competitor_tracking: bool
    has_procurement_plans: bool
    has_api_access: bool
    has_audit_logs: bool
    is_unlimited: bool

    @classmethod
    def for_plan(cls, plan: Optional[PlanType]) -> PlanLimits:
        plan = plan or "free"
        features = PLANS[plan].features
        return cls(
            plan=plan,
            max_tenders=features.max_tenders,
            max_users=features.max_users,
            can_export=features.export,
            has_analytics=features.analytics,
            has_competitor_tracking=features.competitor_tracking,
            has_procurement_plans=features.procurement_plans,
            has_api_access=features.api_access,
            has_audit_logs=features.audit_logs,
            is_unlimited=features.max_tenders == UNLIMITED,
        )


def get_plan_from_price_id(price_id: Optional[str], billing: BillingSettings) -> PlanType:
    """Map a Stripe price id to its plan; unknown ids mean the free plan."""
    if not price_id:
        return "free"
    if price_id in (billing.pro_monthly_price_id, billing.pro_annual_price_id):
        return "pro"
    if price_id in (billing.team_monthly_price_id, billing.team_annual_price_id):
        return "team"
    return "free"
