"""Signed-in user session."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from tenderdesk.query.client import QueryClient
from tenderdesk.shared.models.database import User
from tenderdesk.shared.protocols import DataCollaboratorProtocol

logger = logging.getLogger(__name__)

SignOutHandler = Callable[[], None]


class AuthSession:
    """Tracks the current user and tears the cache down on sign-out.

    Authentication itself is owned by the data collaborator; this class
    only passes credentials through and reacts to the outcome.
    """

    def __init__(
        self,
        client: QueryClient,
        data: DataCollaboratorProtocol,
        app_url: str = "http://localhost:3000",
    ) -> None:
        self.client = client
        self.data = data
        self.app_url = app_url.rstrip("/")
        self._user: Optional[User] = None
        self._loaded = False
        self._sign_out_handlers: list[SignOutHandler] = []

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def user_id(self) -> Optional[str]:
        return self._user.id if self._user is not None else None

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    async def load_user(self) -> Optional[User]:
        """Refresh the current user from the data collaborator."""
        self._user = await self.data.get_current_user()
        self._loaded = True
        logger.debug("Current user: %s", self.user_id)
        return self._user

    async def sign_in(self, email: str, password: str) -> User:
        self._user = await self.data.sign_in_with_password(email, password)
        self._loaded = True
        logger.info("Signed in as %s", self._user.id)
        return self._user

    async def sign_up(self, email: str, password: str) -> Optional[User]:
        """Register an account.

        Returns:
            The new user, or None while the email address awaits confirmation.
            Registering does not sign in.
        """
        user = await self.data.sign_up(email, password)
        logger.info("Registered %s", user.id if user is not None else "an unconfirmed account")
        return user

    async def reset_password(self, email: str) -> None:
        """Email a reset link pointing at the dashboard's reset page."""
        await self.data.reset_password_for_email(email, f"{self.app_url}/reset-password")
        logger.info("Password reset requested")

    async def sign_out(self) -> None:
        """End the session and drop every cached query."""
        await self.data.sign_out()
        self._user = None
        self.client.reset()
        for handler in list(self._sign_out_handlers):
            handler()
        logger.info("Signed out")

    def on_sign_out(self, handler: SignOutHandler) -> None:
        self._sign_out_handlers.append(handler)
