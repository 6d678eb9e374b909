"""
Content Generation System - wires the pipeline together from Settings.
Provides a high-level interface over orchestrator, poller, scheduler and ad hoc service.
"""

from typing import Optional, Sequence

from storefront_content_system.actors.ad_hoc import AdHocDocumentService
from storefront_content_system.actors.poller import (
    PREVIEW_MAX_ATTEMPTS,
    CompletionPoller,
    PollHandle,
)
from storefront_content_system.actors.scheduler import BackgroundScheduler
from storefront_content_system.core.config import Settings, load_settings
from storefront_content_system.core.models import (
    AdHocResult,
    GenerationStats,
    ManualGenerationResult,
    PollResult,
    ProductDescriptor,
    TickOutcome,
)
from storefront_content_system.core.orchestrator import GenerationOrchestrator
from storefront_content_system.data.products import CATALOG
from storefront_content_system.infrastructure.content_store import (
    ContentStore,
    FileSystemContentStore,
)
from storefront_content_system.infrastructure.llm_client import (
    ContentGenerator,
    MistralContentGenerator,
)
from storefront_content_system.infrastructure.local_cache import (
    JsonFileLocalCache,
    LocalCache,
)
from storefront_content_system.logic_blocks.prompt_block import PromptVariant


class ContentGenerationSystem:
    """
    One device's view of the content pipeline.
    Collaborators can be injected; anything omitted is built from settings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        generator: Optional[ContentGenerator] = None,
        store: Optional[ContentStore] = None,
        cache: Optional[LocalCache] = None,
        catalog: Optional[Sequence[ProductDescriptor]] = None,
    ):
        self.settings = settings or load_settings()
        s = self.settings

        self.generator = generator or MistralContentGenerator(
            api_key=s.mistral_api_key, model=s.model, temperature=s.temperature
        )
        self.store = store or FileSystemContentStore(s.content_store_dir)
        self.cache = cache or JsonFileLocalCache(s.local_cache_path)
        self.catalog = list(catalog if catalog is not None else CATALOG)
        variant = PromptVariant(s.prompt_variant)

        self.orchestrator = GenerationOrchestrator(
            self.generator, self.store, self.cache, variant=variant
        )
        self.poller = CompletionPoller(
            self.store,
            self.cache,
            max_attempts=s.poll_max_attempts,
            interval_seconds=s.poll_interval_seconds,
        )
        self.scheduler = BackgroundScheduler(
            self.catalog,
            self.orchestrator,
            self.cache,
            store=self.store,
            interval_seconds=s.generation_interval_seconds,
            tick_seconds=s.scheduler_tick_seconds,
            initial_delay_seconds=s.scheduler_initial_delay_seconds,
        )
        self.ad_hoc = AdHocDocumentService(
            self.generator, self.store, self.cache, variant=variant
        )

    def get_product(self, product_id: str) -> Optional[ProductDescriptor]:
        for product in list(self.catalog) + self.ad_hoc.list_products():
            if product.id == product_id:
                return product
        return None

    async def ensure_generated(self, product: ProductDescriptor) -> bool:
        return await self.orchestrator.ensure_generated(product)

    async def await_content(
        self, product_id: str, max_attempts: Optional[int] = None
    ) -> PollResult:
        return await self.poller.await_content(product_id, max_attempts=max_attempts)

    def watch(self, product_id: str, max_attempts: Optional[int] = None) -> PollHandle:
        """Cancellable poll, e.g. for a view that may close first."""
        return self.poller.start(product_id, max_attempts=max_attempts)

    async def preview(
        self, product: ProductDescriptor, max_attempts: int = PREVIEW_MAX_ATTEMPTS
    ) -> PollResult:
        """Kick off generation if needed, then wait for the content to show up."""
        if product.has_static_content:
            self.orchestrator.prefetch(product)
        return await self.poller.await_content(product.id, max_attempts=max_attempts)

    async def scheduler_tick(self) -> TickOutcome:
        return await self.scheduler.due_check()

    async def generate_next(self) -> ManualGenerationResult:
        return await self.scheduler.generate_next_missing()

    async def create_ad_hoc(self, prompt: str, price: Optional[float] = None) -> AdHocResult:
        if price is None:
            return await self.ad_hoc.create_document(prompt)
        return await self.ad_hoc.create_document(prompt, price)

    async def stats(self) -> GenerationStats:
        return await self.scheduler.stats()
