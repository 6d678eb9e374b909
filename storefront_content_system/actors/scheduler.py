"""
Background Scheduler: slowly works through the catalog, one product per interval.

State machine: IDLE -> DUE_CHECK -> (GENERATING -> IDLE) | (IDLE, not due).

Progress lives in the Local Device Cache, so sessions on the same device
cooperate loosely. The timestamp gate is advisory throttling only; the
store's create-only write is what prevents duplicate documents.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence

from storefront_content_system.core.errors import StoreUnavailable
from storefront_content_system.core.event_bus import EventBus, Events
from storefront_content_system.core.models import (
    GenerationProgressRecord,
    GenerationStats,
    ManualGenerationResult,
    ProductDescriptor,
    SchedulerState,
    TickOutcome,
)
from storefront_content_system.core.orchestrator import GenerationOrchestrator
from storefront_content_system.infrastructure.content_store import ContentStore
from storefront_content_system.infrastructure.local_cache import LocalCache
from storefront_content_system.infrastructure.logger import get_logger

logger = logging.getLogger("BackgroundScheduler")
structured = get_logger("BackgroundScheduler.events")

LAST_GENERATION_KEY = "elevendocs_last_generation_time"
GENERATED_IDS_KEY = "elevendocs_generated_product_ids"

GENERATION_INTERVAL_SECONDS = 20 * 60
TICK_SECONDS = 60
INITIAL_DELAY_SECONDS = 5


class BackgroundScheduler:
    def __init__(
        self,
        catalog: Sequence[ProductDescriptor],
        orchestrator: GenerationOrchestrator,
        cache: LocalCache,
        store: Optional[ContentStore] = None,
        interval_seconds: float = GENERATION_INTERVAL_SECONDS,
        tick_seconds: float = TICK_SECONDS,
        initial_delay_seconds: float = INITIAL_DELAY_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.catalog: List[ProductDescriptor] = list(catalog)
        self.orchestrator = orchestrator
        self.cache = cache
        self.store = store or orchestrator.store
        self.interval_ms = int(interval_seconds * 1000)
        self.tick_seconds = tick_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self.clock = clock
        self.state = SchedulerState.IDLE
        self._task: Optional[asyncio.Task] = None

    # --- Progress record ---

    def load_progress(self) -> GenerationProgressRecord:
        ids = self.cache.get_json(GENERATED_IDS_KEY, default=[])
        try:
            last = int(self.cache.safe_get(LAST_GENERATION_KEY) or 0)
        except ValueError:
            last = 0
        if not isinstance(ids, list):
            ids = []
        return GenerationProgressRecord(generated_ids=[str(i) for i in ids], last_attempt_at=last)

    def _save_last_attempt(self, now_ms: int):
        self.cache.safe_set(LAST_GENERATION_KEY, str(now_ms))

    def _save_generated_ids(self, record: GenerationProgressRecord):
        self.cache.set_json(GENERATED_IDS_KEY, record.generated_ids)

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def eligible_products(self) -> List[ProductDescriptor]:
        return [p for p in self.catalog if p.has_static_content]

    def next_candidate(self, record: GenerationProgressRecord) -> Optional[ProductDescriptor]:
        """First catalog item with static content not yet recorded, in catalog order."""
        for product in self.eligible_products():
            if not record.is_generated(product.id):
                return product
        return None

    # --- Due-check ---

    async def due_check(self) -> TickOutcome:
        """Run one scheduler tick. Never raises."""
        try:
            outcome, product_id = await self._due_check()
        except Exception:
            logger.exception("Scheduler tick failed")
            outcome, product_id = TickOutcome.FAILED, None
        finally:
            self.state = SchedulerState.IDLE

        EventBus.emit(Events.SCHEDULER_TICK, {"outcome": outcome.value}, product_id)
        if outcome != TickOutcome.NOT_DUE:
            structured.scheduler_tick(outcome.value, product_id)
        return outcome

    async def _due_check(self):
        self.state = SchedulerState.DUE_CHECK
        now_ms = self._now_ms()
        record = self.load_progress()

        if now_ms - record.last_attempt_at < self.interval_ms:
            return TickOutcome.NOT_DUE, None

        logger.info("Background generation interval met. Checking for products to generate...")
        product = self.next_candidate(record)

        # Stamp before generating so a slow attempt cannot trigger a burst of retries.
        self._save_last_attempt(now_ms)

        if product is None:
            logger.info("All product content has been generated. No more jobs to schedule.")
            return TickOutcome.NOTHING_LEFT, None

        self.state = SchedulerState.GENERATING
        logger.info(f"Starting background content generation for: {product.name}")
        generated = await self.orchestrator.ensure_generated(product)

        if not generated:
            logger.info(
                f"Background generation for {product.name} failed. "
                "It will be retried after the next interval."
            )
            return TickOutcome.FAILED, product.id

        # Reload: another session may have recorded progress meanwhile.
        latest = self.load_progress()
        latest.mark_generated(product.id)
        self._save_generated_ids(latest)
        logger.info(f"Finished background content generation for: {product.name}")
        return TickOutcome.GENERATED, product.id

    # --- Loop ---

    async def run_forever(self):
        """Initial check after a short delay, then one due-check per tick."""
        await asyncio.sleep(self.initial_delay_seconds)
        while True:
            await self.due_check()
            await asyncio.sleep(self.tick_seconds)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            logger.info("Initializing background content generator...")
            self._task = asyncio.ensure_future(self.run_forever())
        return self._task

    async def stop(self):
        if self._task is None:
            return
        logger.info("Cleaning up background generator.")
        self._task.cancel()
        await asyncio.wait({self._task})
        self._task = None

    # --- Manual generation and stats ---

    async def generate_next_missing(self) -> ManualGenerationResult:
        """
        Find the first catalog item missing from the Content Store and generate it.
        Ids found in the store are merged into the local progress record.
        """
        record = self.load_progress()
        candidate: Optional[ProductDescriptor] = None

        for product in self.eligible_products():
            try:
                existing = await self.store.get(product.id)
            except StoreUnavailable as e:
                logger.error(f"Error checking store for product content: {e}")
                return ManualGenerationResult(
                    product_id=product.id,
                    success=False,
                    message="Database error: could not check for existing content.",
                )
            if existing is None:
                candidate = product
                break
            record.mark_generated(product.id)

        self._save_generated_ids(record)

        if candidate is None:
            return ManualGenerationResult(
                success=True, message="All product content has already been generated."
            )

        generated = await self.orchestrator.ensure_generated(candidate)
        if generated:
            latest = self.load_progress()
            latest.mark_generated(candidate.id)
            self._save_generated_ids(latest)
            return ManualGenerationResult(
                product_id=candidate.id,
                success=True,
                message=f'Content for "{candidate.name}" has been generated.',
            )
        return ManualGenerationResult(
            product_id=candidate.id,
            success=False,
            message=f'Generation for "{candidate.name}" failed. Please try again.',
        )

    async def stats(self) -> GenerationStats:
        try:
            count = await self.store.count()
        except StoreUnavailable as e:
            logger.warning(f"Could not count stored documents: {e}")
            count = len(self.load_progress().generated_ids)
        return GenerationStats(
            generated_count=count, total_catalog_items=len(self.eligible_products())
        )
