"""
Pytest configuration and shared fixtures for TenderDesk tests.

Every test gets an isolated query client, a notifier recording every
message and an in-memory data collaborator.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from tenderdesk.config.models import CacheSettings
from tenderdesk.query import QueryClient
from tenderdesk.shared.models.database import User
from tests.fakes import USER_ID, FakeDataClient, RecordingNotifier, StaticCompany


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def query_client(notifier: RecordingNotifier) -> AsyncGenerator[QueryClient, None]:
    """Isolated client; entries are never evicted during a test."""
    client = QueryClient.create(CacheSettings(eviction="none"), notifier=notifier)
    yield client
    client.dispose()


@pytest.fixture
def user() -> User:
    return User(id=USER_ID, email="bids@example.co.za")


@pytest.fixture
def data(user: User) -> FakeDataClient:
    return FakeDataClient(user=user)


@pytest.fixture
def company() -> StaticCompany:
    return StaticCompany()


@pytest.fixture
def no_company() -> StaticCompany:
    return StaticCompany(company_id=None)
