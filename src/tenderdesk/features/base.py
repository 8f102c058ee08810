"""Shared plumbing of the feature services."""

from __future__ import annotations

import logging
from typing import Any, NamedTuple, Optional

from tenderdesk.query.client import QueryClient
from tenderdesk.query.keys import QueryKey
from tenderdesk.query.models import Fetcher, QueryOptions
from tenderdesk.query.observer import ChangeCallback, QueryObserver
from tenderdesk.shared.errors import create_no_company_error, create_not_authenticated_error
from tenderdesk.shared.models.database import User
from tenderdesk.shared.protocols import CompanyContextProtocol, DataCollaboratorProtocol

logger = logging.getLogger(__name__)


class QuerySpec(NamedTuple):
    """Everything needed to run or observe one feature query.

    ``key`` is None when a required input is missing, which disables the
    query.
    """

    key: Optional[QueryKey]
    fetch_fn: Fetcher
    options: QueryOptions

    def observe(
        self,
        client: QueryClient,
        on_change: ChangeCallback | None = None,
        *,
        mount: bool = True,
    ) -> QueryObserver:
        return client.observe(self.key, self.fetch_fn, self.options, on_change, mount=mount)

    async def fetch(self, client: QueryClient) -> Any:
        return await client.fetch_query(self.key, self.fetch_fn, self.options)


def query_spec(
    key: Optional[QueryKey],
    fetch_fn: Fetcher,
    placeholder: Any = None,
    **options: Any,
) -> QuerySpec:
    """Build a spec that is disabled whenever ``key`` is None."""
    return QuerySpec(
        key,
        fetch_fn,
        QueryOptions(enabled=key is not None, placeholder_data=placeholder, **options),
    )


class FeatureService:
    """Base of the services bound to the active company.

    Args:
        client: Query client owning the cache
        data: Data collaborator
        company: Provides the active company and user ids
    """

    def __init__(
        self,
        client: QueryClient,
        data: DataCollaboratorProtocol,
        company: CompanyContextProtocol,
    ) -> None:
        self.client = client
        self.data = data
        self.company = company

    @property
    def company_id(self) -> Optional[str]:
        return self.company.company_id

    def require_company(self, operation: str) -> str:
        """Return the active company id or raise a precondition error."""
        company_id = self.company.company_id
        if not company_id:
            raise create_no_company_error(operation)
        return company_id

    async def require_user(self, operation: str) -> User:
        """Ask the data collaborator for the signed-in user.

        Raises:
            PreconditionError: If nobody is signed in
        """
        user = await self.data.get_current_user()
        if user is None:
            raise create_not_authenticated_error(operation)
        return user
