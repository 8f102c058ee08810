"""Tender-domain queries and mutations built on the query layer."""

from .auth import AuthSession
from .base import FeatureService, QuerySpec, query_spec
from .bid_results import BidResultService
from .billing import BillingService
from .categories import CategoryService
from .company import CompanySession
from .competitors import CompetitorService
from .compliance import ComplianceService
from .exports import ExportService
from .keys import QueryKeys
from .messaging import MessagingService
from .onboarding import SampleDataService
from .opportunities import OpportunityService
from .organizations import OrganizationService
from .plans import PLANS, PlanFeatures, PlanLimits, get_plan_from_price_id
from .preferences import NotificationPreferences, PreferenceStore
from .procurement_plans import ProcurementPlanService
from .proposals import ProposalService
from .reminders import ReminderService
from .subscription import SubscriptionService
from .tenders import TenderService, compute_tender_stats

__all__ = [
    "PLANS",
    "AuthSession",
    "BidResultService",
    "BillingService",
    "CategoryService",
    "CompanySession",
    "CompetitorService",
    "ComplianceService",
    "ExportService",
    "FeatureService",
    "MessagingService",
    "NotificationPreferences",
    "OpportunityService",
    "OrganizationService",
    "PlanFeatures",
    "PlanLimits",
    "PreferenceStore",
    "ProcurementPlanService",
    "ProposalService",
    "QueryKeys",
    "QuerySpec",
    "ReminderService",
    "SampleDataService",
    "SubscriptionService",
    "TenderService",
    "compute_tender_stats",
    "get_plan_from_price_id",
    "query_spec",
]
