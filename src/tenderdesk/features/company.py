"""Active company selection.

A user may belong to several companies. The selected company scopes almost
every query, so switching it invalidates all company-scoped roots. The
selection survives restarts through ``StateStorage``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from tenderdesk.config.storage import StateStorage
from tenderdesk.features.auth import AuthSession
from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.client import QueryClient
from tenderdesk.query.models import QueryOptions
from tenderdesk.shared.constants import Tables
from tenderdesk.shared.models.database import UserCompanyWithRole
from tenderdesk.shared.models.table_query import TableQuery
from tenderdesk.shared.protocols import DataCollaboratorProtocol
from tenderdesk.shared.types import ModelConverter

logger = logging.getLogger(__name__)

CURRENT_COMPANY_KEY = "session.current_company_id"


def membership_to_company(row: dict[str, Any]) -> Optional[UserCompanyWithRole]:
    """Flatten a membership row with its embedded company; None if absent."""
    company = row.get("user_companies")
    if not company:
        return None
    return ModelConverter.to_model({**company, "role": row.get("role", "member")}, UserCompanyWithRole)


class CompanySession:
    """Holds the companies of the signed-in user and the selected one."""

    def __init__(
        self,
        client: QueryClient,
        data: DataCollaboratorProtocol,
        auth: AuthSession,
        storage: StateStorage,
    ) -> None:
        self.client = client
        self.data = data
        self.auth = auth
        self.storage = storage
        self._companies: list[UserCompanyWithRole] = []
        self._current: Optional[UserCompanyWithRole] = None
        auth.on_sign_out(self.clear)

    @property
    def companies(self) -> list[UserCompanyWithRole]:
        return list(self._companies)

    @property
    def current_company(self) -> Optional[UserCompanyWithRole]:
        return self._current

    @property
    def company_id(self) -> Optional[str]:
        return self._current.id if self._current is not None else None

    @property
    def user_id(self) -> Optional[str]:
        return self.auth.user_id

    async def refresh_companies(self) -> list[UserCompanyWithRole]:
        """Reload memberships and restore the stored selection.

        Falls back to the first company when the stored one is gone.
        """
        user = await self.auth.load_user()
        if user is None:
            self._companies = []
            self._current = None
            return []

        async def load_companies() -> list[UserCompanyWithRole]:
            rows = await self.data.select(
                TableQuery(
                    Tables.USER_COMPANY_MEMBERS,
                    columns="role, user_companies(*)",
                    eq={"user_id": user.id},
                )
            )
            return [company for company in map(membership_to_company, rows or ()) if company is not None]

        self._companies = await self.client.fetch_query(
            QueryKeys.companies(user.id),
            load_companies,
            QueryOptions(force=True, placeholder_data=[]),
        )

        stored_id = self.storage.get(CURRENT_COMPANY_KEY)
        restored = next((c for c in self._companies if c.id == stored_id), None)
        if restored is not None:
            self._current = restored
        elif self._companies:
            self._current = self._companies[0]
            self.storage.set(CURRENT_COMPANY_KEY, self._current.id)
        else:
            self._current = None

        logger.info(
            "Loaded %d companies, current: %s",
            len(self._companies),
            self.company_id,
        )
        return self.companies

    def switch_company(self, company_id: str) -> bool:
        """Select another of the user's companies.

        Returns:
            False if ``company_id`` is not one of the user's companies
        """
        company = next((c for c in self._companies if c.id == company_id), None)
        if company is None:
            logger.warning("Cannot switch to unknown company %s", company_id)
            return False

        self._current = company
        self.storage.set(CURRENT_COMPANY_KEY, company_id)
        self.client.invalidate_many((root,) for root in QueryKeys.COMPANY_SCOPED)
        logger.info("Switched to company %s", company_id)
        return True

    def clear(self) -> None:
        """Forget the companies and the stored selection."""
        self._companies = []
        self._current = None
        self.storage.set(CURRENT_COMPANY_KEY, None)
