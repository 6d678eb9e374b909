"""
Shared fakes and fixtures for pipeline tests.
"""

import asyncio
from typing import List, Optional

import pytest

from storefront_content_system.core.errors import CacheUnavailable, StoreUnavailable
from storefront_content_system.core.event_bus import EventBus
from storefront_content_system.core.models import (
    GenerationRequest,
    GenerationResponse,
    ProductCategory,
    ProductDescriptor,
)
from storefront_content_system.infrastructure.content_store import InMemoryContentStore
from storefront_content_system.infrastructure.llm_client import ContentGenerator
from storefront_content_system.infrastructure.local_cache import InMemoryLocalCache, LocalCache
from storefront_content_system.logic_blocks.prompt_block import COMPLETION_MARKER

COMPLETE_BODY = f"# Guide\n\nSome useful text.\n{COMPLETION_MARKER}"


class FakeGenerator(ContentGenerator):
    """Records prompts and returns a canned response."""

    def __init__(
        self,
        title: str = "Generated Guide",
        content: str = COMPLETE_BODY,
        error: Optional[str] = None,
        delay: float = 0,
    ):
        self.title = title
        self.content = content
        self.error = error
        self.delay = delay
        self.prompts: List[str] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.prompts.append(request.prompt)
        await asyncio.sleep(self.delay)
        return GenerationResponse(title=self.title, content=self.content, error=self.error)


class ExplodingGenerator(ContentGenerator):
    """Breaks the never-raises contract."""

    def __init__(self):
        self.call_count = 0

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.call_count += 1
        raise RuntimeError("connection reset")


class UnavailableStore(InMemoryContentStore):
    """Reads and writes always fail at the transport level."""

    async def get(self, product_id):
        raise StoreUnavailable("network down", product_id=product_id)

    async def create_only(self, product_id, document):
        raise StoreUnavailable("network down", product_id=product_id)

    async def count(self):
        raise StoreUnavailable("network down")


class BrokenCache(LocalCache):
    """Device storage that is not available at all."""

    def get(self, key):
        raise CacheUnavailable("storage disabled")

    def set(self, key, value):
        raise CacheUnavailable("storage disabled")


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_product(
    product_id: str = "101",
    name: str = "Linear Algebra Notes",
    category: ProductCategory = ProductCategory.ACADEMIC_NOTES,
    price: float = 250,
    has_static_content: bool = True,
    tags=None,
) -> ProductDescriptor:
    return ProductDescriptor(
        id=product_id,
        name=name,
        description=f"Description of {name}",
        category=category,
        price=price,
        tags=tags if tags is not None else ["math", "notes"],
        has_static_content=has_static_content,
    )


@pytest.fixture(autouse=True)
def clear_event_bus():
    EventBus.clear()
    yield
    EventBus.clear()


@pytest.fixture
def store():
    return InMemoryContentStore()


@pytest.fixture
def cache():
    return InMemoryLocalCache()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def product():
    return make_product()
