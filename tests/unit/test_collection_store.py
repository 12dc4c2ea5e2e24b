# tests/unit/test_collection_store.py
"""
Tests for CollectionStore hydration and local write primitives.
"""

import asyncio
import logging

import pytest

from brokerdesk.core.errors import HydrationError
from brokerdesk.core.models import CollectionName, Lead
from brokerdesk.repositories import build_repositories
from brokerdesk.services import CollectionStore


class TestConstruction:

    def test_requires_all_six_repositories(self, mock_supabase):
        repos = build_repositories(mock_supabase)
        del repos[CollectionName.EVENTS]

        with pytest.raises(ValueError, match="events"):
            CollectionStore(repos)

    def test_starts_empty(self, store):
        assert len(store) == 0
        assert store.loading is False
        assert store.generation == 0


class TestHydration:
    """Test hydrate_all()."""

    @pytest.mark.asyncio
    async def test_hydrates_all_six_newest_first(self, store, mock_supabase_with_data):
        result = await store.hydrate_all()

        assert all(error is None for error in result.values())
        assert set(result) == set(CollectionName)
        assert [lead.id for lead in store.leads] == [2, 1]
        assert [m.id for m in store.messages] == [2, 1]
        assert [t.id for t in store.tasks] == [1, 2]
        assert len(store.properties) == 1
        assert len(store.events) == 2
        assert len(store.transactions) == 2
        assert len(mock_supabase_with_data.requests_for("leads", "select")) == 1

    @pytest.mark.asyncio
    async def test_failure_is_isolated_per_collection(self, store, mock_supabase_with_data, caplog):
        await store.hydrate_all()
        before = store.tasks

        mock_supabase_with_data.data_store["tasks"].append(
            {"id": 3, "title": "New", "created_at": "2024-01-20T09:00:00+00:00"}
        )
        mock_supabase_with_data.data_store["leads"].append(
            {"id": 3, "name": "Cy", "created_at": "2024-01-20T09:00:00+00:00"}
        )
        mock_supabase_with_data.fail("tasks")

        with caplog.at_level(logging.ERROR):
            result = await store.hydrate_all()

        assert isinstance(result[CollectionName.TASKS], HydrationError)
        assert result[CollectionName.LEADS] is None
        assert store.tasks == before
        assert [lead.id for lead in store.leads] == [3, 2, 1]
        assert "Failed to hydrate tasks" in caplog.text

    @pytest.mark.asyncio
    async def test_response_without_data_leaves_collection(self, store, mock_supabase_with_data):
        await store.hydrate_all()
        mock_supabase_with_data.empty_responses["leads"] = True

        result = await store.hydrate_all()

        assert result[CollectionName.LEADS] is None
        assert len(store.leads) == 2

    @pytest.mark.asyncio
    async def test_loading_flag_spans_in_flight_requests(self, store, mock_supabase_with_data):
        gate = mock_supabase_with_data.hold("leads")

        first = asyncio.create_task(store.hydrate_all())
        second = asyncio.create_task(store.hydrate_all())
        await asyncio.sleep(0)
        assert store.loading is True

        gate.set()
        await asyncio.gather(first, second)

        assert store.loading is False
        assert len(mock_supabase_with_data.requests_for("leads", "select")) == 2
        assert [lead.id for lead in store.leads] == [2, 1]

    @pytest.mark.asyncio
    async def test_overlapping_hydrations_keep_last_response(self, store, mock_supabase_with_data):
        mock = mock_supabase_with_data
        first_gate = mock.hold("leads")
        first = asyncio.create_task(store.hydrate_all())
        while len(mock.requests_for("leads", "select")) < 1:
            await asyncio.sleep(0)

        second_gate = mock.hold("leads")
        second = asyncio.create_task(store.hydrate_all())
        while len(mock.requests_for("leads", "select")) < 2:
            await asyncio.sleep(0)

        second_gate.set()
        await second
        assert [lead.id for lead in store.leads] == [2, 1]
        assert store.loading is True

        mock.seed_data("leads", [{"id": 5, "name": "Eve", "created_at": "2024-01-20T09:00:00+00:00"}])
        first_gate.set()
        await first

        assert [lead.id for lead in store.leads] == [5]
        assert store.loading is False

    @pytest.mark.asyncio
    async def test_null_column_does_not_fail_collection(self, store, mock_supabase_with_data):
        mock_supabase_with_data.seed_data("leads", [
            {"id": 3, "name": "Cara", "status": None, "created_at": "2024-01-20T09:00:00+00:00"},
            {"id": 1, "name": "Ana Ruiz", "status": "new", "created_at": "2024-01-10T09:00:00+00:00"},
        ])

        result = await store.hydrate_all()

        assert result[CollectionName.LEADS] is None
        assert [lead.id for lead in store.leads] == [3, 1]
        assert store.find(CollectionName.LEADS, 3).status is None

    @pytest.mark.asyncio
    async def test_loading_clears_after_failures(self, store, mock_supabase_with_data):
        for name in CollectionName:
            mock_supabase_with_data.fail(name.value)

        result = await store.hydrate_all()

        assert all(isinstance(error, HydrationError) for error in result.values())
        assert store.loading is False

    @pytest.mark.asyncio
    async def test_results_after_clear_are_discarded(self, store, mock_supabase_with_data):
        gate = mock_supabase_with_data.hold("leads")

        task = asyncio.create_task(store.hydrate_all())
        await asyncio.sleep(0)
        store.clear_all()
        gate.set()
        await task

        assert store.leads == []


class TestLocalWrites:
    """Test replace/prepend/overlay/remove/clear_all."""

    @pytest.mark.asyncio
    async def test_prepend_puts_record_first(self, store):
        await store.hydrate_all()

        store.prepend(CollectionName.LEADS, Lead(id=9, name="Dee"))

        assert [lead.id for lead in store.leads] == [9, 2, 1]

    @pytest.mark.asyncio
    async def test_overlay_merges_shallowly(self, store):
        await store.hydrate_all()

        merged = store.overlay(CollectionName.LEADS, 1, {"status": "won"})

        assert merged.status == "won"
        assert merged.name == "Ana Ruiz"
        assert store.find(CollectionName.LEADS, 1).status == "won"
        assert len(store.leads) == 2

    @pytest.mark.asyncio
    async def test_overlay_missing_id(self, store):
        await store.hydrate_all()

        assert store.overlay(CollectionName.LEADS, 404, {"status": "won"}) is None
        assert [lead.status for lead in store.leads] == ["contacted", "new"]

    @pytest.mark.asyncio
    async def test_remove(self, store):
        await store.hydrate_all()

        assert store.remove(CollectionName.TASKS, 2) is True
        assert store.remove(CollectionName.TASKS, 404) is False
        assert [t.id for t in store.tasks] == [1]

    @pytest.mark.asyncio
    async def test_clear_all_empties_everything(self, store):
        await store.hydrate_all()

        store.clear_all()

        assert len(store) == 0
        assert store.generation == 1

    def test_get_returns_a_copy(self, store):
        store.replace(CollectionName.LEADS, [Lead(id=1, name="Ana")])

        snapshot = store.get(CollectionName.LEADS)
        snapshot.clear()

        assert len(store.leads) == 1

    def test_listeners_are_notified(self, store):
        seen = []

        def broken(name):
            raise RuntimeError("boom")

        store.subscribe(broken)
        unsubscribe = store.subscribe(seen.append)

        store.replace(CollectionName.LEADS, [])
        unsubscribe()
        store.replace(CollectionName.TASKS, [])

        assert seen == [CollectionName.LEADS]
