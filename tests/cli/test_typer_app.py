"""Tests for the Typer CLI commands."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from dependency_injector import providers
from typer.testing import CliRunner

from tenderdesk import __version__
from tenderdesk.cli import app
from tenderdesk.config.models import CacheSettings, Settings
from tenderdesk.config.storage import StateStorage
from tenderdesk.containers import Container
from tenderdesk.features.company import CURRENT_COMPANY_KEY
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.constants import Messages
from tenderdesk.shared.models.api import SampleDataResult
from tenderdesk.shared.models.database import User
from tests.fakes import FakeDataClient, RecordingNotifier

runner = CliRunner()

MEMBERSHIPS = [
    {"user_id": "u1", "role": "owner", "user_companies": {"id": "c1", "name": "Acme Civils", "ai_credits": 4}},
    {"user_id": "u1", "role": "member", "user_companies": {"id": "c2", "name": "Acme Security"}},
]

TENDERS = [
    {
        "id": "T1",
        "user_company_id": "c1",
        "organization_id": "o1",
        "title": "Road repairs",
        "due_date": "2030-01-10T09:00:00+00:00",
        "status": "submitted",
        "applied": True,
        "our_bid_amount": 1500,
    },
    {
        "id": "T2",
        "user_company_id": "c2",
        "organization_id": "o1",
        "title": "Guarding",
        "due_date": "2030-01-12T09:00:00+00:00",
        "status": "won",
        "applied": True,
        "our_bid_amount": 900,
    },
]


@pytest.fixture
def data() -> FakeDataClient:
    return FakeDataClient(
        {"user_company_members": MEMBERSHIPS, "tenders": TENDERS},
        user=User(id="u1", email="bids@example.co.za"),
    )


@pytest.fixture
def storage(tmp_path: Path) -> StateStorage:
    return StateStorage(tmp_path / "state.toml")


@pytest.fixture
def container(mocker, data: FakeDataClient, storage: StateStorage) -> Container:
    """Container wired to in-memory collaborators, used by every command."""
    container = Container()
    container.config.override(providers.Object(Settings(cache=CacheSettings(eviction="none"))))
    container.data_client.override(providers.Object(data))
    container.state_storage.override(providers.Object(storage))
    container.notifier.override(providers.Object(RecordingNotifier()))
    mocker.patch("tenderdesk.cli.typer_app.build_container", return_value=container)
    mocker.patch("tenderdesk.cli.typer_app.setup_structured_logger")
    return container


class TestGlobalOptions:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"TenderDesk {__version__}" in result.output

    def test_config_masks_secrets(self, mocker, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        mocker.patch("tenderdesk.cli.typer_app.setup_structured_logger")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("TENDERDESK_API__SUPABASE_KEY", "super-secret")

        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "cache.stale_time" in result.output
        assert "super-secret" not in result.output
        assert "***" in result.output


class TestCompanyCommands:
    def test_companies_marks_active(self, container: Container) -> None:
        result = runner.invoke(app, ["companies"])

        assert result.exit_code == 0
        assert "Acme Civils" in result.output
        assert "Acme Security" in result.output
        assert "*" in result.output

    def test_use_switches_and_persists(self, container: Container, storage: StateStorage) -> None:
        result = runner.invoke(app, ["use", "c2"])

        assert result.exit_code == 0
        assert "Active company: Acme Security" in result.output
        assert storage.get(CURRENT_COMPANY_KEY) == "c2"

    def test_use_unknown_company(self, container: Container) -> None:
        result = runner.invoke(app, ["use", "c9"])

        assert result.exit_code == 1
        assert "Unknown company" in result.output


class TestPipelineCommands:
    def test_tenders_lists_active_company_only(self, container: Container, data: FakeDataClient) -> None:
        result = runner.invoke(app, ["tenders"])

        assert result.exit_code == 0
        assert "Road repairs" in result.output
        assert "Guarding" not in result.output
        assert data.selects("tenders")[0].eq == {"user_company_id": "c1"}

    def test_stats(self, container: Container) -> None:
        result = runner.invoke(app, ["stats"])

        assert result.exit_code == 0
        assert "Win rate" in result.output
        assert "0%" in result.output

    def test_compliance_without_report(self, container: Container) -> None:
        result = runner.invoke(app, ["compliance", "T1"])

        assert result.exit_code == 0
        assert "has not been analyzed yet" in result.output

    def test_no_company_exit_code(self, container: Container, data: FakeDataClient) -> None:
        data.tables["user_company_members"] = []

        result = runner.invoke(app, ["tenders"])

        assert result.exit_code == 2
        assert "No company selected" in result.output

    def test_backend_failure_exit_code(self, container: Container, data: FakeDataClient) -> None:
        data.fail("select", RuntimeError("connection reset"))

        result = runner.invoke(app, ["stats"])

        assert result.exit_code == 1
        assert "connection reset" in result.output


class TestActionCommands:
    def test_export_needs_paid_plan(self, container: Container, tmp_path: Path) -> None:
        result = runner.invoke(app, ["export", "--dir", str(tmp_path)])

        assert result.exit_code == 2
        assert "does not include tender exports" in result.output
        assert list(tmp_path.iterdir()) == []

    def test_export_writes_csv(self, container: Container, data: FakeDataClient, tmp_path: Path) -> None:
        data.tables["subscriptions"] = [{"id": "s1", "user_id": "u1", "plan": "pro", "status": "active"}]

        result = runner.invoke(app, ["export", "--dir", str(tmp_path)])

        assert result.exit_code == 0
        [export] = list(tmp_path.iterdir())
        content = export.read_text(encoding="utf-8")
        assert "Road repairs" in content
        assert "Guarding" not in content

    def test_sample_data_refused_when_company_has_tenders(self, container: Container) -> None:
        api = MagicMock(spec=DashboardAPIClient)
        api.load_sample_data = AsyncMock()
        container.api_client.override(providers.Object(api))

        result = runner.invoke(app, ["sample-data"])

        assert result.exit_code == 1
        assert "only offered to companies without tenders" in result.output
        api.load_sample_data.assert_not_awaited()

    def test_sample_data_for_empty_company(self, container: Container, data: FakeDataClient) -> None:
        data.tables["tenders"] = []
        api = MagicMock(spec=DashboardAPIClient)
        api.load_sample_data = AsyncMock(return_value=SampleDataResult(success=True))
        container.api_client.override(providers.Object(api))

        result = runner.invoke(app, ["sample-data"])

        assert result.exit_code == 0
        api.load_sample_data.assert_awaited_once()
        assert container.notifier().successes == [Messages.SAMPLE_DATA_LOADED]
