"""
Query key constructors for the feature services.

Every cached resource has exactly one constructor here. Building keys
anywhere else fragments the cache silently, since two keys only share an
entry when they are deep-equal.
"""

from __future__ import annotations

from tenderdesk.query.keys import QueryKey, make_key


class QueryKeys:
    """Root segments and constructors for all feature query keys."""

    BID_RESULTS = "bid-results"
    CATEGORIES = "categories"
    COMPETITORS = "competitors"
    COMPETITIVE_BIDS = "competitive-bids"
    COMPETITOR_BIDS = "competitor-bids"
    COMPLIANCE = "compliance"
    DASHBOARD = "dashboard"
    ANALYTICS = "analytics"
    OPPORTUNITIES = "opportunities"
    ORGANIZATIONS = "organizations"
    PROCUREMENT_PLANS = "procurement-plans"
    REMINDERS = "reminders"
    SUBSCRIPTION = "subscription"
    TENDERS = "tenders"
    COMPANIES = "companies"

    # Roots whose entries depend on the active company
    COMPANY_SCOPED = (TENDERS, ORGANIZATIONS, COMPETITORS, CATEGORIES, DASHBOARD, ANALYTICS)

    @staticmethod
    def bid_results(tender_id: str | None) -> QueryKey:
        return make_key(QueryKeys.BID_RESULTS, tender_id)

    @staticmethod
    def categories(company_id: str | None) -> QueryKey:
        return make_key(QueryKeys.CATEGORIES, company_id)

    @staticmethod
    def competitors(company_id: str | None) -> QueryKey:
        return make_key(QueryKeys.COMPETITORS, company_id)

    @staticmethod
    def competitor(competitor_id: str | None) -> QueryKey:
        # Shares the root with the company list, as the dashboard always did
        return make_key(QueryKeys.COMPETITORS, competitor_id)

    @staticmethod
    def competitive_bids(tender_id: str | None) -> QueryKey:
        return make_key(QueryKeys.COMPETITIVE_BIDS, tender_id)

    @staticmethod
    def competitor_bids(competitor_id: str | None, company_id: str | None) -> QueryKey:
        return make_key(QueryKeys.COMPETITOR_BIDS, competitor_id, company_id)

    @staticmethod
    def compliance(tender_id: str | None) -> QueryKey:
        return make_key(QueryKeys.COMPLIANCE, tender_id)

    @staticmethod
    def dashboard(company_id: str | None = None) -> QueryKey:
        if company_id is None:
            return make_key(QueryKeys.DASHBOARD)
        return make_key(QueryKeys.DASHBOARD, company_id)

    @staticmethod
    def tender_stats(company_id: str | None) -> QueryKey:
        return make_key(QueryKeys.DASHBOARD, company_id, "stats")

    @staticmethod
    def upcoming_deadlines(company_id: str | None) -> QueryKey:
        return make_key(QueryKeys.DASHBOARD, company_id, "upcoming")

    @staticmethod
    def opportunities(plan_id: str | None) -> QueryKey:
        return make_key(QueryKeys.OPPORTUNITIES, plan_id)

    @staticmethod
    def all_opportunities() -> QueryKey:
        return make_key(QueryKeys.OPPORTUNITIES, "all")

    @staticmethod
    def organizations(company_id: str | None) -> QueryKey:
        return make_key(QueryKeys.ORGANIZATIONS, company_id)

    @staticmethod
    def organization(company_id: str | None, organization_id: str | None) -> QueryKey:
        return make_key(QueryKeys.ORGANIZATIONS, company_id, organization_id)

    @staticmethod
    def procurement_plans(company_id: str | None) -> QueryKey:
        return make_key(QueryKeys.PROCUREMENT_PLANS, company_id)

    @staticmethod
    def procurement_plan(company_id: str | None, plan_id: str | None) -> QueryKey:
        return make_key(QueryKeys.PROCUREMENT_PLANS, company_id, plan_id)

    @staticmethod
    def procurement_plans_by_organization(
        company_id: str | None,
        organization_id: str | None,
    ) -> QueryKey:
        return make_key(QueryKeys.PROCUREMENT_PLANS, company_id, "organization", organization_id)

    @staticmethod
    def reminders(tender_id: str | None = None) -> QueryKey:
        return make_key(QueryKeys.REMINDERS, tender_id)

    @staticmethod
    def all_reminders() -> QueryKey:
        return make_key(QueryKeys.REMINDERS)

    @staticmethod
    def pending_reminders() -> QueryKey:
        return make_key(QueryKeys.REMINDERS, "pending")

    @staticmethod
    def subscription(user_id: str | None) -> QueryKey:
        return make_key(QueryKeys.SUBSCRIPTION, user_id)

    @staticmethod
    def tenders(company_id: str | None) -> QueryKey:
        return make_key(QueryKeys.TENDERS, company_id)

    @staticmethod
    def tender(company_id: str | None, tender_id: str | None) -> QueryKey:
        return make_key(QueryKeys.TENDERS, company_id, tender_id)

    @staticmethod
    def companies(user_id: str | None) -> QueryKey:
        return make_key(QueryKeys.COMPANIES, user_id)
