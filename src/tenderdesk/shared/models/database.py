"""Row models of the hosted database.

Rows are validated at the data collaborator boundary. Unknown columns and
embedded relations (``organization``, ``category``...) are kept as extra
attributes so that list views can render joined data.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TenderStatus = Literal[
    "identified",
    "evaluating",
    "preparing",
    "submitted",
    "bid_opening",
    "under_evaluation",
    "won",
    "lost",
    "abandoned",
]
OrganizationType = Literal["ministry", "parastatal", "private_company", "municipality"]
MemberRole = Literal["owner", "admin", "member", "viewer"]
ReminderType = Literal["deadline_7days", "deadline_3days", "deadline_1day", "check_bid_opening"]
PlanType = Literal["free", "pro", "team"]
SubscriptionStatus = Literal["active", "canceled", "past_due", "trialing", "incomplete"]


class Row(BaseModel):
    """Base for database rows: lenient about extra columns."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class User(Row):
    id: str
    email: Optional[str] = None


class UserCompanyWithRole(Row):
    id: str
    name: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    is_active: bool = True
    ai_credits: Optional[int] = None
    has_sample_data: bool = False
    role: MemberRole = "member"


class Organization(Row):
    id: str
    name: str
    type: OrganizationType
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    shared: bool = False
    created_by_company_id: Optional[str] = None
    created_at: Optional[datetime] = None


class TenderCategory(Row):
    id: str
    name: str
    user_company_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_system(self) -> bool:
        return self.user_company_id is None


class Tender(Row):
    id: str
    user_company_id: str
    organization_id: str
    title: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    due_date: datetime
    document_url: Optional[str] = None
    status: TenderStatus = "identified"
    applied: bool = False
    applied_date: Optional[datetime] = None
    our_bid_amount: Optional[float] = None
    priority_score: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None


class BidOpeningResult(Row):
    id: str
    tender_id: str
    opening_date: datetime
    our_bid_amount: float
    lowest_bid_amount: float
    is_lowest_bidder: bool
    winner_company_name: Optional[str] = None
    total_bidders: int
    all_bids_data: Optional[Any] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class Competitor(Row):
    id: str
    user_company_id: Optional[str] = None
    name: str
    specialty_areas: Optional[list[str]] = None
    notes: Optional[str] = None
    encounter_count: int = 0
    created_at: Optional[datetime] = None

    @property
    def is_shared(self) -> bool:
        return self.user_company_id is None


class CompetitiveBid(Row):
    id: str
    tender_id: str
    competitor_id: str
    bid_amount: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class ChecklistItem(BaseModel):
    item: str
    status: str = "pending"


class TenderComplianceReport(Row):
    id: str
    tender_id: str
    requirements: list[str] = Field(default_factory=list)
    missing_documents: list[str] = Field(default_factory=list)
    mandatory_checklist: list[ChecklistItem] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ProcurementPlan(Row):
    id: str
    user_company_id: Optional[str] = None
    organization_id: str
    fiscal_year: str
    revision_number: int = 0
    file_url: Optional[str] = None
    upload_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None


class ProcurementOpportunity(Row):
    id: str
    plan_id: str
    closing_date: Optional[datetime] = None


class Reminder(Row):
    id: str
    tender_id: str
    reminder_type: ReminderType
    scheduled_date: datetime
    sent: bool = False
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class Subscription(Row):
    id: str = ""
    user_id: str
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    stripe_price_id: Optional[str] = None
    plan: PlanType = "free"
    status: SubscriptionStatus = "active"
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TenderStats(BaseModel):
    """Dashboard summary computed from a company's tenders."""

    total_active: int = 0
    submitted: int = 0
    win_rate: int = 0
    pipeline_value: float = 0.0
    status_counts: dict[str, int] = Field(default_factory=dict)
    total: int = 0


class DeleteOutcome(BaseModel):
    """Result of a guarded delete; ``success`` is False when it was refused."""

    success: bool
    blocked_by: int = 0
