"""
Tests for the Background Scheduler: throttling, progress bookkeeping, manual generation.
Run with: pytest tests/test_scheduler.py
"""

import asyncio
import json

import pytest

from conftest import FakeClock, FakeGenerator, UnavailableStore, make_product
from storefront_content_system.actors.scheduler import (
    GENERATED_IDS_KEY,
    LAST_GENERATION_KEY,
    BackgroundScheduler,
)
from storefront_content_system.core.models import GeneratedDocument, SchedulerState, TickOutcome
from storefront_content_system.core.orchestrator import GenerationOrchestrator
from storefront_content_system.infrastructure.content_store import FileSystemContentStore

INTERVAL = 1200


@pytest.fixture
def catalog():
    return [
        make_product(product_id="1", name="First Notes"),
        make_product(product_id="2", name="Planner", has_static_content=False),
        make_product(product_id="3", name="Third Guide"),
        make_product(product_id="4", name="Fourth Guide"),
    ]


@pytest.fixture
def clock():
    return FakeClock()


def build_scheduler(catalog, generator, store, cache, clock):
    orchestrator = GenerationOrchestrator(generator, store, cache)
    return BackgroundScheduler(
        catalog, orchestrator, cache, interval_seconds=INTERVAL, clock=clock
    )


class TestDueCheck:
    @pytest.mark.asyncio
    async def test_first_tick_generates_first_eligible(self, catalog, generator, store, cache, clock):
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        assert await scheduler.due_check() == TickOutcome.GENERATED
        assert await store.get("1") is not None
        assert json.loads(cache.get(GENERATED_IDS_KEY)) == ["1"]
        assert cache.get(LAST_GENERATION_KEY) == str(int(clock.now * 1000))
        assert scheduler.state == SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_not_due_within_interval(self, catalog, generator, store, cache, clock):
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        await scheduler.due_check()
        clock.advance(INTERVAL - 1)

        assert await scheduler.due_check() == TickOutcome.NOT_DUE
        assert generator.call_count == 1

    @pytest.mark.asyncio
    async def test_due_again_after_interval(self, catalog, generator, store, cache, clock):
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        await scheduler.due_check()
        clock.advance(INTERVAL)

        assert await scheduler.due_check() == TickOutcome.GENERATED
        # Catalog order, skipping the item without static content.
        assert json.loads(cache.get(GENERATED_IDS_KEY)) == ["1", "3"]

    @pytest.mark.asyncio
    async def test_concurrent_due_checks_make_one_attempt(self, catalog, store, cache, clock):
        generator = FakeGenerator(delay=0.01)
        first = build_scheduler(catalog, generator, store, cache, clock)
        second = build_scheduler(catalog, generator, store, cache, clock)

        outcomes = await asyncio.gather(first.due_check(), second.due_check())

        assert sorted(o.value for o in outcomes) == ["GENERATED", "NOT_DUE"]
        assert generator.call_count == 1

    @pytest.mark.asyncio
    async def test_timestamp_written_before_generation(self, catalog, store, cache, clock):
        seen = {}

        class PeekingGenerator(FakeGenerator):
            async def generate(self, request):
                seen["stamp"] = cache.get(LAST_GENERATION_KEY)
                return await super().generate(request)

        scheduler = build_scheduler(catalog, PeekingGenerator(), store, cache, clock)
        await scheduler.due_check()

        assert seen["stamp"] == str(int(clock.now * 1000))

    @pytest.mark.asyncio
    async def test_failed_generation_not_recorded(self, catalog, store, cache, clock):
        generator = FakeGenerator(error="503 model is overloaded")
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        assert await scheduler.due_check() == TickOutcome.FAILED
        assert cache.get_json(GENERATED_IDS_KEY, default=[]) == []
        assert cache.get(LAST_GENERATION_KEY) is not None

        # Same product is retried once the interval passes.
        clock.advance(INTERVAL)
        await scheduler.due_check()
        assert generator.call_count == 2
        assert "First Notes" in generator.prompts[1]

    @pytest.mark.asyncio
    async def test_nothing_left_still_stamps(self, generator, store, cache, clock):
        catalog = [make_product(product_id="1")]
        cache.set(GENERATED_IDS_KEY, json.dumps(["1"]))
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        assert await scheduler.due_check() == TickOutcome.NOTHING_LEFT
        assert cache.get(LAST_GENERATION_KEY) == str(int(clock.now * 1000))
        assert generator.call_count == 0

    @pytest.mark.asyncio
    async def test_corrupt_progress_is_reset(self, catalog, generator, store, cache, clock):
        cache.set(GENERATED_IDS_KEY, "{not json")
        cache.set(LAST_GENERATION_KEY, "yesterday")
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        record = scheduler.load_progress()
        assert record.generated_ids == []
        assert record.last_attempt_at == 0
        assert await scheduler.due_check() == TickOutcome.GENERATED

    @pytest.mark.asyncio
    async def test_tick_never_raises(self, catalog, generator, store, cache, clock):
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        async def boom(product):
            raise RuntimeError("unexpected")

        scheduler.orchestrator.ensure_generated = boom
        assert await scheduler.due_check() == TickOutcome.FAILED
        assert scheduler.state == SchedulerState.IDLE


class TestLoop:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, catalog, generator, store, cache, clock):
        orchestrator = GenerationOrchestrator(generator, store, cache)
        scheduler = BackgroundScheduler(
            catalog,
            orchestrator,
            cache,
            interval_seconds=INTERVAL,
            tick_seconds=0.01,
            initial_delay_seconds=0,
            clock=clock,
        )

        task = scheduler.start()
        assert scheduler.start() is task
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert task.done()
        assert generator.call_count == 1

    @pytest.mark.asyncio
    async def test_stop_without_start(self, catalog, generator, store, cache, clock):
        scheduler = build_scheduler(catalog, generator, store, cache, clock)
        await scheduler.stop()


class TestManualGeneration:
    @pytest.mark.asyncio
    async def test_generates_first_missing_and_reconciles(self, catalog, generator, store, cache, clock):
        await store.create_only("1", GeneratedDocument(title="First", content="# First"))
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        result = await scheduler.generate_next_missing()

        assert result.success
        assert result.product_id == "3"
        assert "Third Guide" in result.message
        assert json.loads(cache.get(GENERATED_IDS_KEY)) == ["1", "3"]

    @pytest.mark.asyncio
    async def test_all_generated(self, generator, store, cache, clock):
        catalog = [make_product(product_id="1")]
        await store.create_only("1", GeneratedDocument(title="First", content="# First"))
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        result = await scheduler.generate_next_missing()

        assert result.success
        assert result.message == "All product content has already been generated."
        assert generator.call_count == 0

    @pytest.mark.asyncio
    async def test_store_error(self, catalog, generator, cache, clock):
        scheduler = build_scheduler(catalog, generator, UnavailableStore(), cache, clock)

        result = await scheduler.generate_next_missing()

        assert not result.success
        assert result.message.startswith("Database error")

    @pytest.mark.asyncio
    async def test_malformed_store_record_is_database_error(self, tmp_path, catalog, generator, cache, clock):
        store = FileSystemContentStore(str(tmp_path))
        (tmp_path / "1.json").write_text("[]", encoding="utf-8")
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        result = await scheduler.generate_next_missing()

        assert not result.success
        assert result.product_id == "1"
        assert result.message.startswith("Database error")
        assert generator.call_count == 0

    @pytest.mark.asyncio
    async def test_generation_failure(self, catalog, store, cache, clock):
        generator = FakeGenerator(content="no marker here")
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        result = await scheduler.generate_next_missing()

        assert not result.success
        assert result.product_id == "1"
        assert cache.get_json(GENERATED_IDS_KEY, default=[]) == []


class TestStats:
    @pytest.mark.asyncio
    async def test_counts_store_against_eligible(self, catalog, generator, store, cache, clock):
        await store.create_only("1", GeneratedDocument(title="First", content="# First"))
        scheduler = build_scheduler(catalog, generator, store, cache, clock)

        stats = await scheduler.stats()

        assert stats.generated_count == 1
        assert stats.total_catalog_items == 3
        assert stats.remaining == 2

    @pytest.mark.asyncio
    async def test_falls_back_to_progress_record(self, catalog, generator, cache, clock):
        cache.set(GENERATED_IDS_KEY, json.dumps(["1", "3"]))
        scheduler = build_scheduler(catalog, generator, UnavailableStore(), cache, clock)

        stats = await scheduler.stats()
        assert stats.generated_count == 2
