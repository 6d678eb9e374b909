"""
Tests for the ad hoc (user-prompted) document service.
Run with: pytest tests/test_ad_hoc.py
"""

import pytest

from conftest import ExplodingGenerator, FakeClock, FakeGenerator, UnavailableStore
from storefront_content_system.actors.ad_hoc import AI_PRODUCT_TAGS, AdHocDocumentService
from storefront_content_system.core.models import ProductCategory
from storefront_content_system.infrastructure.local_cache import InMemoryLocalCache

PROMPT = "A beginner's guide to sourdough baking with a weekly feeding schedule"


@pytest.fixture
def clock():
    return FakeClock(now=1_700_000_000.5)


class TestCreateDocument:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("prompt", ["", "   \n"])
    async def test_empty_prompt_rejected(self, generator, store, cache, prompt):
        service = AdHocDocumentService(generator, store, cache)

        result = await service.create_document(prompt)

        assert not result.success
        assert result.error.startswith("Prompt is empty")
        assert generator.call_count == 0

    @pytest.mark.asyncio
    async def test_success_creates_ai_product(self, generator, store, cache, clock):
        service = AdHocDocumentService(generator, store, cache, clock=clock)

        result = await service.create_document(PROMPT, price=99)

        assert result.success
        product = result.product
        assert product.id == "ai-pdf-1700000000500"
        assert product.is_ai_generated
        assert product.category == ProductCategory.AI_SERVICES
        assert product.name == "Generated Guide"
        assert product.price == 99
        assert product.tags == AI_PRODUCT_TAGS
        assert product.description == (
            f'AI-generated document based on your prompt: "{PROMPT[:50]}..."'
        )
        assert "User Prompt: " + PROMPT in generator.prompts[0]

        assert cache.get_document(product.id).content == "# Guide\n\nSome useful text."
        stored = await store.get(product.id)
        assert stored.content == "# Guide\n\nSome useful text."
        assert [p.id for p in service.list_products()] == [product.id]

    @pytest.mark.asyncio
    async def test_products_accumulate(self, generator, store, cache, clock):
        service = AdHocDocumentService(generator, store, cache, clock=clock)

        await service.create_document(PROMPT)
        clock.advance(1)
        await service.create_document("Another one")

        assert len(service.list_products()) == 2

    @pytest.mark.asyncio
    async def test_classified_error(self, store, cache):
        generator = FakeGenerator(error="429 Too Many Requests: rate limit")
        service = AdHocDocumentService(generator, store, cache)

        result = await service.create_document(PROMPT)

        assert not result.success
        assert "busy" in result.error
        assert service.list_products() == []

    @pytest.mark.asyncio
    async def test_truncated_output(self, store, cache):
        generator = FakeGenerator(content="# Half a document")
        service = AdHocDocumentService(generator, store, cache)

        result = await service.create_document(PROMPT)

        assert not result.success
        assert "cut short" in result.error
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, store, cache):
        service = AdHocDocumentService(ExplodingGenerator(), store, cache)

        result = await service.create_document(PROMPT)

        assert not result.success
        assert result.error == "connection reset"

    @pytest.mark.asyncio
    async def test_store_failure_keeps_local_copy(self, generator, clock):
        cache = InMemoryLocalCache()
        service = AdHocDocumentService(generator, UnavailableStore(), cache, clock=clock)

        result = await service.create_document(PROMPT)

        assert result.success
        assert cache.get_document(result.product.id) is not None

    def test_unreadable_product_entries_skipped(self, generator, store, cache):
        cache.set_json("elevendocs_ai_products", [{"id": "broken"}])
        service = AdHocDocumentService(generator, store, cache)

        assert service.list_products() == []
