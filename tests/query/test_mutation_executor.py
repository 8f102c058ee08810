"""Tests for write execution and targeted invalidation."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from tenderdesk.query import QueryClient
from tenderdesk.query.models import QueryStatus

from tests.fakes import RecordingNotifier


async def _observe(client: QueryClient, key: tuple, fetch: AsyncMock) -> None:
    client.store.subscribe(key, MagicMock())
    await client.executor.ensure_fresh(key, fetch)


class TestMutationExecutor:
    @pytest.mark.asyncio
    async def test_refetches_exactly_the_invalidated_observed_keys(self, query_client: QueryClient) -> None:
        results = AsyncMock(return_value=["r"])
        tenders = AsyncMock(return_value=["t"])
        other_company = AsyncMock(return_value=["x"])
        await _observe(query_client, ("bid-results", "T1"), results)
        await _observe(query_client, ("tenders", "c1"), tenders)
        await _observe(query_client, ("tenders", "c2"), other_company)
        write = AsyncMock(return_value={"id": "R1", "tender_id": "T1"})

        await query_client.mutations.run(
            write,
            invalidates=[("bid-results", "T1"), ("tenders", "c1")],
        )
        await query_client.executor.settle()

        write.assert_awaited_once()
        assert results.await_count == 2
        assert tenders.await_count == 2
        assert other_company.await_count == 1

    @pytest.mark.asyncio
    async def test_overlapping_matchers_refetch_once(self, query_client: QueryClient) -> None:
        fetch = AsyncMock(return_value=[])
        await _observe(query_client, ("reminders", "T1"), fetch)

        await query_client.mutations.run(
            AsyncMock(return_value=None),
            invalidates=[("reminders",), ("reminders", "T1")],
        )
        await query_client.executor.settle()

        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_unobserved_keys_are_only_marked_stale(self, query_client: QueryClient) -> None:
        fetch = AsyncMock(return_value=[])
        await query_client.executor.ensure_fresh(("tenders", "c1"), fetch)

        await query_client.mutations.run(AsyncMock(return_value=None), invalidates=[("tenders",)])
        await query_client.executor.settle()

        assert fetch.await_count == 1
        assert query_client.store.get(("tenders", "c1")).is_stale

    @pytest.mark.asyncio
    async def test_invalidation_can_depend_on_result(self, query_client: QueryClient) -> None:
        query_client.store.set_entry(("bid-results", "T9"), data=[])

        await query_client.mutations.run(
            AsyncMock(return_value={"tender_id": "T9"}),
            invalidates=lambda result: [("bid-results", result["tender_id"])],
        )

        assert query_client.store.get(("bid-results", "T9")).is_stale

    @pytest.mark.asyncio
    async def test_success_message_is_sent(self, query_client: QueryClient, notifier: RecordingNotifier) -> None:
        await query_client.mutations.run(AsyncMock(return_value=3), success_message=lambda n: f"{n} reminders sent")

        assert notifier.successes == ["3 reminders sent"]

    @pytest.mark.asyncio
    async def test_failure_is_reraised_and_cache_untouched(
        self,
        query_client: QueryClient,
        notifier: RecordingNotifier,
    ) -> None:
        fetch = AsyncMock(return_value=[])
        await _observe(query_client, ("tenders", "c1"), fetch)
        error = RuntimeError("duplicate key value")

        with pytest.raises(RuntimeError) as exc_info:
            await query_client.mutations.run(
                AsyncMock(side_effect=error),
                invalidates=[("tenders",)],
                success_message="Saved",
            )

        assert exc_info.value is error
        assert notifier.failures == ["duplicate key value"]
        assert notifier.successes == []
        entry = query_client.store.get(("tenders", "c1"))
        assert entry.is_stale is False
        assert entry.status == QueryStatus.SUCCESS
        assert fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_error_message_override(self, query_client: QueryClient, notifier: RecordingNotifier) -> None:
        with pytest.raises(RuntimeError):
            await query_client.mutations.run(
                AsyncMock(side_effect=RuntimeError("boom")),
                error_message="Failed to save tender",
            )

        assert notifier.failures == ["Failed to save tender"]

    @pytest.mark.asyncio
    async def test_failing_callbacks_do_not_fail_an_acknowledged_write(
        self,
        query_client: QueryClient,
        notifier: RecordingNotifier,
    ) -> None:
        write = AsyncMock(return_value={"id": "R1"})

        result = await query_client.mutations.run(
            write,
            invalidates=lambda result: [("bid-results", result["tender_id"])],
            success_message=lambda result: result["missing"],
        )

        assert result == {"id": "R1"}
        write.assert_awaited_once()
        assert notifier.failures == []
        assert notifier.successes == []


class TestMutationHandle:
    @pytest.mark.asyncio
    async def test_callables_receive_call_arguments(self, query_client: QueryClient, notifier: RecordingNotifier) -> None:
        query_client.store.set_entry(("bid-results", "T1"), data=[])
        delete = query_client.mutation(
            AsyncMock(return_value=None),
            invalidates=lambda _, result_id, tender_id: [("bid-results", tender_id)],
            success_message=lambda _, result_id, tender_id: f"Deleted {result_id}",
        )

        await delete("R1", "T1")

        assert query_client.store.get(("bid-results", "T1")).is_stale
        assert notifier.successes == ["Deleted R1"]

    @pytest.mark.asyncio
    async def test_tracks_last_result_and_error(self, query_client: QueryClient) -> None:
        write = AsyncMock(side_effect=[{"id": "1"}, ValueError("bad")])
        mutation = query_client.mutation(write, name="create_tender")

        assert await mutation() == {"id": "1"}
        assert mutation.last_result == {"id": "1"}
        with pytest.raises(ValueError):
            await mutation()

        assert isinstance(mutation.last_error, ValueError)
        assert mutation.is_pending is False
        assert mutation.name == "create_tender"
