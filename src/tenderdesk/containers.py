"""Dependency Injection container for TenderDesk.

The container owns one query client per application session, so tests and
embedding applications get isolated caches by creating their own container.

The container manages:
- Settings and local state storage (Singleton)
- Data collaborator, HTTP session and dashboard API client (Singleton)
- Query client and notifier (Singleton)
- Auth and company session (Singleton)
- Feature services (Factory; they read the active company when built)
"""

from __future__ import annotations

from dependency_injector import containers, providers

from tenderdesk.config.loader import load_settings
from tenderdesk.config.storage import StateStorage
from tenderdesk.features import (
    AuthSession,
    BidResultService,
    BillingService,
    CategoryService,
    CompanySession,
    CompetitorService,
    ComplianceService,
    ExportService,
    MessagingService,
    OpportunityService,
    OrganizationService,
    PreferenceStore,
    ProcurementPlanService,
    ProposalService,
    ReminderService,
    SampleDataService,
    SubscriptionService,
    TenderService,
)
from tenderdesk.query import QueryClient
from tenderdesk.services import (
    ConsoleNotifier,
    DashboardAPIClient,
    HTTPSessionManager,
    SupabaseDataClient,
)


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for TenderDesk services.

    Example:
        >>> container = Container()
        >>> await container.company_session().refresh_companies()
        >>> tenders = await container.tenders().list_tenders()
    """

    # Configuration
    config = providers.Singleton(load_settings)
    state_storage = providers.Singleton(StateStorage)

    # External collaborators
    notifier = providers.Singleton(ConsoleNotifier)
    data_client = providers.Singleton(SupabaseDataClient, settings=config.provided.api)
    http_sessions = providers.Singleton(HTTPSessionManager, settings=config.provided.api)
    api_client = providers.Singleton(DashboardAPIClient, sessions=http_sessions)

    # Query layer
    query_client = providers.Singleton(
        QueryClient.create,
        settings=config.provided.cache,
        notifier=notifier,
    )

    # Sessions
    auth_session = providers.Singleton(
        AuthSession,
        client=query_client,
        data=data_client,
        app_url=config.provided.api.dashboard_url,
    )
    company_session = providers.Singleton(
        CompanySession,
        client=query_client,
        data=data_client,
        auth=auth_session,
        storage=state_storage,
    )
    preferences = providers.Singleton(PreferenceStore, storage=state_storage)

    # Feature services
    tenders = providers.Factory(TenderService, client=query_client, data=data_client, company=company_session)
    bid_results = providers.Factory(BidResultService, client=query_client, data=data_client, company=company_session)
    categories = providers.Factory(CategoryService, client=query_client, data=data_client, company=company_session)
    competitors = providers.Factory(CompetitorService, client=query_client, data=data_client, company=company_session)
    organizations = providers.Factory(
        OrganizationService,
        client=query_client,
        data=data_client,
        company=company_session,
    )
    procurement_plans = providers.Factory(
        ProcurementPlanService,
        client=query_client,
        data=data_client,
        company=company_session,
        api=api_client,
    )
    opportunities = providers.Factory(OpportunityService, client=query_client, data=data_client, company=company_session)
    subscription = providers.Factory(SubscriptionService, client=query_client, data=data_client, company=company_session)
    compliance = providers.Factory(
        ComplianceService,
        client=query_client,
        data=data_client,
        company=company_session,
        api=api_client,
    )
    reminders = providers.Factory(ReminderService, client=query_client, api=api_client)
    messaging = providers.Factory(MessagingService, client=query_client, api=api_client)
    billing = providers.Factory(
        BillingService,
        client=query_client,
        api=api_client,
        settings=config.provided.billing,
    )
    proposals = providers.Factory(ProposalService, client=query_client, api=api_client)
    sample_data = providers.Factory(SampleDataService, client=query_client, api=api_client, session=company_session)
    exports = providers.Factory(ExportService, client=query_client, tenders=tenders, subscription=subscription)
