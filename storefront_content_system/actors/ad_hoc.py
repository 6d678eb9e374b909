"""
Ad hoc document service: turns a user's prompt into a new AI Services product.
"""

import logging
import time
from typing import Callable, List, Optional

from storefront_content_system.core.errors import (
    ContentPipelineError,
    EmptyOutput,
    GenerationRejected,
    StoreUnavailable,
    StoreWriteConflict,
)
from storefront_content_system.core.models import (
    AdHocResult,
    GeneratedDocument,
    GenerationRequest,
    ProductCategory,
    ProductDescriptor,
)
from storefront_content_system.infrastructure.content_store import ContentStore
from storefront_content_system.infrastructure.llm_client import ContentGenerator
from storefront_content_system.infrastructure.local_cache import LocalCache, NullLocalCache
from storefront_content_system.logic_blocks.error_block import classify_error, user_message
from storefront_content_system.logic_blocks.postprocess_block import finalize_content
from storefront_content_system.logic_blocks.prompt_block import PromptVariant, build_ad_hoc_prompt

logger = logging.getLogger("AdHocDocuments")

AI_PRODUCTS_KEY = "elevendocs_ai_products"
AI_PRODUCT_TAGS = ["ai", "pdf", "generated"]
DEFAULT_AD_HOC_PRICE = 49.0


class AdHocDocumentService:
    def __init__(
        self,
        generator: ContentGenerator,
        store: ContentStore,
        cache: Optional[LocalCache] = None,
        variant: PromptVariant = PromptVariant.MARKED,
        clock: Callable[[], float] = time.time,
    ):
        self.generator = generator
        self.store = store
        self.cache = cache or NullLocalCache()
        self.variant = variant
        self.clock = clock

    async def create_document(self, prompt: str, price: float = DEFAULT_AD_HOC_PRICE) -> AdHocResult:
        """Generate, cache and store a document for a free-form prompt. Never raises."""
        if not prompt or not prompt.strip():
            return AdHocResult(
                success=False,
                error="Prompt is empty. Please describe the PDF you want to create.",
            )

        try:
            document = await self._generate(prompt)
        except ContentPipelineError as e:
            logger.error(f"Ad hoc generation failed: {e.message}")
            return AdHocResult(success=False, error=user_message(e.kind, e.message))
        except Exception as e:
            logger.exception("Unexpected ad hoc generation failure")
            return AdHocResult(success=False, error=user_message(classify_error(str(e)), str(e)))

        product = ProductDescriptor(
            id=ProductDescriptor.ai_product_id(int(self.clock() * 1000)),
            name=document.title,
            description=f'AI-generated document based on your prompt: "{prompt.strip()[:50]}..."',
            category=ProductCategory.AI_SERVICES,
            price=price,
            tags=list(AI_PRODUCT_TAGS),
        )

        self.cache.set_document(product.id, document)

        stored = document
        try:
            stored = await self.store.create_only(product.id, document)
        except (StoreWriteConflict, StoreUnavailable) as e:
            # The local copy still lets this user download it.
            logger.error(f"Error saving generated content to the store: {e}")

        self._remember_product(product)
        logger.info(f'"{product.name}" has been added to the products library as {product.id}')
        return AdHocResult(success=True, product=product, document=stored)

    def list_products(self) -> List[ProductDescriptor]:
        """Ad hoc products created on this device."""
        products = []
        for item in self.cache.get_json(AI_PRODUCTS_KEY, default=[]) or []:
            try:
                products.append(ProductDescriptor(**item))
            except (TypeError, ValueError):
                logger.warning(f"Skipping unreadable ad hoc product entry: {item!r}")
        return products

    async def _generate(self, prompt: str) -> GeneratedDocument:
        response = await self.generator.generate(
            GenerationRequest(prompt=build_ad_hoc_prompt(prompt, self.variant))
        )
        if response.failed:
            raise GenerationRejected(response.error, kind=classify_error(response.error))
        if not response.title or not response.content:
            raise EmptyOutput("The AI model did not return any content.")

        content = finalize_content(response.content, self.variant.requires_marker)
        if not content:
            raise EmptyOutput("The AI model did not return any content.")
        return GeneratedDocument(title=response.title, content=content)

    def _remember_product(self, product: ProductDescriptor):
        existing = self.cache.get_json(AI_PRODUCTS_KEY, default=[]) or []
        existing.append(product.model_dump(mode="json"))
        self.cache.set_json(AI_PRODUCTS_KEY, existing)
