"""
Generation Orchestrator: ensures exactly one stored document per product id.

Local cache → Content Store → Remote Content Generator → create-only write.
Every failure is absorbed here and reported as False.
"""

import asyncio
import logging
from typing import Dict, Optional, Set

from storefront_content_system.core.errors import (
    ContentPipelineError,
    EmptyOutput,
    GenerationRejected,
    StoreUnavailable,
    StoreWriteConflict,
)
from storefront_content_system.core.event_bus import EventBus, Events
from storefront_content_system.core.models import (
    GeneratedDocument,
    GenerationRequest,
    ProductDescriptor,
)
from storefront_content_system.infrastructure.content_store import ContentStore
from storefront_content_system.infrastructure.llm_client import ContentGenerator
from storefront_content_system.infrastructure.local_cache import LocalCache, NullLocalCache
from storefront_content_system.infrastructure.logger import get_logger
from storefront_content_system.logic_blocks.error_block import classify_error
from storefront_content_system.logic_blocks.postprocess_block import finalize_content
from storefront_content_system.logic_blocks.prompt_block import (
    PromptVariant,
    build_product_prompt,
)

logger = logging.getLogger("Orchestrator")
structured = get_logger("Orchestrator.events")


class GenerationOrchestrator:
    """
    Decides whether a product needs content, generates it and persists it.

    Concurrent calls for the same id on one instance share a single
    in-flight task; across instances the store's create-only write decides.
    """

    def __init__(
        self,
        generator: ContentGenerator,
        store: ContentStore,
        cache: Optional[LocalCache] = None,
        variant: PromptVariant = PromptVariant.MARKED,
    ):
        self.generator = generator
        self.store = store
        self.cache = cache or NullLocalCache()
        self.variant = variant
        self._inflight: Dict[str, asyncio.Task] = {}
        self._background: Set[asyncio.Task] = set()

    async def ensure_generated(self, product: ProductDescriptor) -> bool:
        """Return True once a document for product.id exists (or is not applicable)."""
        task = self._inflight.get(product.id)
        if task is None:
            task = asyncio.ensure_future(self._guarded(product))
            self._inflight[product.id] = task
            task.add_done_callback(lambda _t, pid=product.id: self._inflight.pop(pid, None))
        # shield: one caller being cancelled must not cancel the shared work
        return await asyncio.shield(task)

    def prefetch(self, product: ProductDescriptor) -> asyncio.Task:
        """
        Start generation without waiting for it.

        The returned task may be awaited or ignored; a reference is kept
        until it finishes.
        """
        task = asyncio.ensure_future(self.ensure_generated(product))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _guarded(self, product: ProductDescriptor) -> bool:
        try:
            return await self._ensure(product)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Unexpected failure generating content for {product.id}")
            return False

    async def _ensure(self, product: ProductDescriptor) -> bool:
        if self.cache.get_document(product.id) is not None:
            return True

        if product.is_ai_generated:
            return True

        if not product.has_static_content:
            logger.debug(f"No static content for {product.id}, nothing to generate")
            return False

        try:
            existing = await self.store.get(product.id)
        except StoreUnavailable as e:
            structured.generation_event(product.id, "store_read", success=False, reason=str(e))
            return False

        if existing is not None:
            self.cache.set_document(product.id, existing)
            EventBus.emit(Events.CONTENT_FOUND, {"source": "store"}, product.id)
            return True

        return await self._generate_and_store(product)

    async def _generate_and_store(self, product: ProductDescriptor) -> bool:
        EventBus.emit(Events.GENERATION_START, {"variant": self.variant.value}, product.id)
        structured.generation_event(product.id, "start")

        try:
            document = await self._generate(product)
        except ContentPipelineError as e:
            EventBus.emit(Events.GENERATION_FAILED, {"kind": e.kind.value, "error": e.message}, product.id)
            structured.generation_event(product.id, "generate", success=False, reason=e.message)
            return False

        try:
            stored = await self.store.create_only(product.id, document)
        except StoreWriteConflict:
            # Another writer got there first; its record is authoritative.
            EventBus.emit(Events.STORE_CONFLICT, {}, product.id)
            logger.info(f"Document for {product.id} already created by another writer")
            await self._mirror_winner(product.id)
            return True
        except StoreUnavailable as e:
            structured.generation_event(product.id, "store_write", success=False, reason=str(e))
            return False

        self.cache.set_document(product.id, stored)
        EventBus.emit(Events.GENERATION_COMPLETE, {"chars": len(stored.content)}, product.id)
        structured.generation_event(product.id, "complete", success=True)
        return True

    async def _generate(self, product: ProductDescriptor) -> GeneratedDocument:
        prompt = build_product_prompt(product, self.variant)
        response = await self.generator.generate(GenerationRequest(prompt=prompt))

        if response.failed:
            raise GenerationRejected(
                response.error, kind=classify_error(response.error), product_id=product.id
            )
        if not response.content or not response.title:
            raise EmptyOutput(
                f"AI model did not return content for {product.id}", product_id=product.id
            )

        content = finalize_content(response.content, self.variant.requires_marker)
        if not content:
            raise EmptyOutput(f"Empty document body for {product.id}", product_id=product.id)

        return GeneratedDocument(title=product.name or response.title, content=content)

    async def _mirror_winner(self, product_id: str):
        try:
            winner = await self.store.get(product_id)
        except StoreUnavailable as e:
            logger.warning(f"Could not read winning record for {product_id}: {e}")
            return
        if winner is not None:
            self.cache.set_document(product_id, winner)
