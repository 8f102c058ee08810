"""
Backend table and column names.

The names match the hosted database schema; they are kept here so that the
feature services and the tests refer to the same strings.
"""


class Tables:
    """Table names of the hosted database."""

    BID_OPENING_RESULTS = "bid_opening_results"
    COMPETITIVE_BIDS = "competitive_bids"
    COMPETITORS = "competitors"
    ORGANIZATIONS = "organizations"
    PROCUREMENT_OPPORTUNITIES = "procurement_opportunities"
    PROCUREMENT_PLANS = "procurement_plans"
    SUBSCRIPTIONS = "subscriptions"
    TENDER_CATEGORIES = "tender_categories"
    TENDER_COMPLIANCE_REPORTS = "tender_compliance_reports"
    TENDERS = "tenders"
    USER_COMPANY_MEMBERS = "user_company_members"


class RPC:
    """Stored procedures called through the data collaborator."""

    INCREMENT_ENCOUNTER_COUNT = "increment_encounter_count"


class TenderStatuses:
    """Lifecycle states of a tender."""

    IDENTIFIED = "identified"
    EVALUATING = "evaluating"
    PREPARING = "preparing"
    SUBMITTED = "submitted"
    BID_OPENING = "bid_opening"
    UNDER_EVALUATION = "under_evaluation"
    WON = "won"
    LOST = "lost"
    ABANDONED = "abandoned"

    ALL = (
        IDENTIFIED,
        EVALUATING,
        PREPARING,
        SUBMITTED,
        BID_OPENING,
        UNDER_EVALUATION,
        WON,
        LOST,
        ABANDONED,
    )

    # A tender in one of these states no longer counts as active
    CLOSED = (WON, LOST, ABANDONED)
