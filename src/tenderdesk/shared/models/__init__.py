"""Shared model exports."""

from .api import (
    AnalysisResult,
    CheckoutSession,
    PlanParseResult,
    ProposalResult,
    RemindersResponse,
    SampleDataResult,
    ScheduleResponse,
    SendResponse,
    WhatsAppTestResult,
)
from .database import (
    BidOpeningResult,
    CompetitiveBid,
    Competitor,
    DeleteOutcome,
    Organization,
    ProcurementOpportunity,
    ProcurementPlan,
    Reminder,
    Subscription,
    Tender,
    TenderCategory,
    TenderComplianceReport,
    TenderStats,
    User,
    UserCompanyWithRole,
)
from .table_query import Cardinality, Order, TableQuery

__all__ = [
    "AnalysisResult",
    "BidOpeningResult",
    "Cardinality",
    "CheckoutSession",
    "CompetitiveBid",
    "Competitor",
    "DeleteOutcome",
    "Order",
    "Organization",
    "PlanParseResult",
    "ProcurementOpportunity",
    "ProcurementPlan",
    "ProposalResult",
    "Reminder",
    "RemindersResponse",
    "SampleDataResult",
    "ScheduleResponse",
    "SendResponse",
    "Subscription",
    "TableQuery",
    "Tender",
    "TenderCategory",
    "TenderComplianceReport",
    "TenderStats",
    "User",
    "UserCompanyWithRole",
    "WhatsAppTestResult",
]
