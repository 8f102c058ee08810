"""Service protocols for dependency inversion.

The query layer and the feature services depend on these interfaces only;
concrete collaborators live in ``tenderdesk.services``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from tenderdesk.shared.models.database import User
from tenderdesk.shared.models.table_query import TableQuery


class DataCollaboratorProtocol(Protocol):
    """Backend-as-a-service client used for persistence and auth.

    Every call may fail with a transport error or a ``BackendError``
    carrying the backend's machine-readable code. Reads declared with
    ``Cardinality.ONE`` raise ``RecordNotFoundError`` on zero rows.

    Example:
        >>> client: DataCollaboratorProtocol = SupabaseDataClient(settings.api)
        >>> rows = await client.select(TableQuery("tenders", eq={"user_company_id": "c1"}))
    """

    async def select(self, query: TableQuery) -> Any:
        """Run a read.

        Returns:
            A list of row dicts, or a single row dict (None for an empty
            ``maybe_one`` read)
        """

    async def insert(self, table: str, row: Mapping[str, Any], columns: str = "*") -> dict[str, Any]:
        """Insert one row and return it as stored, selecting ``columns``."""

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        filters: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Update the single row matched by ``filters`` and return it."""

    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        """Delete the rows matched by equality ``filters``."""

    async def count(self, table: str, filters: Mapping[str, Any]) -> int:
        """Count the rows matched by equality ``filters``."""

    async def rpc(self, function: str, params: Mapping[str, Any]) -> Any:
        """Call a stored procedure."""

    async def get_current_user(self) -> Optional[User]:
        """Return the signed-in user, or None."""

    async def sign_in_with_password(self, email: str, password: str) -> User:
        """Start a session; raises on rejected credentials."""

    async def sign_up(self, email: str, password: str) -> Optional[User]:
        """Register an account; None until the email address is confirmed."""

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        """Send a password reset link that leads back to ``redirect_to``."""

    async def sign_out(self) -> None:
        """End the current session."""


class NotifierProtocol(Protocol):
    """User-facing success and failure messages.

    Implementations must not block; the query layer isolates their failures.
    """

    def notify_success(self, message: str) -> None: ...

    def notify_failure(self, message: str) -> None: ...

    def notify_info(self, message: str) -> None: ...


class CompanyContextProtocol(Protocol):
    """Source of the active company and signed-in user ids.

    Either id is None while the corresponding precondition is not met;
    queries keyed on it are then disabled.
    """

    @property
    def company_id(self) -> Optional[str]: ...

    @property
    def user_id(self) -> Optional[str]: ...
