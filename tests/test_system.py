"""
End-to-end wiring tests for ContentGenerationSystem and the CLI.
Run with: pytest tests/test_system.py
"""

import pytest

from conftest import FakeGenerator, make_product
from storefront_content_system.actors.poller import PREVIEW_MAX_ATTEMPTS
from storefront_content_system.content_gen_system import ContentGenerationSystem
from storefront_content_system.core.config import Settings
from storefront_content_system.core.models import PollStatus, TickOutcome
from storefront_content_system.data.products import CATALOG, get_product
from storefront_content_system.main import build_parser


@pytest.fixture
def settings(tmp_path):
    return Settings(
        content_store_dir=str(tmp_path / "store"),
        local_cache_path=str(tmp_path / "cache.json"),
        log_dir=str(tmp_path / "logs"),
        poll_interval_seconds=0.01,
        poll_max_attempts=3,
    )


@pytest.fixture
def system(settings):
    return ContentGenerationSystem(settings, generator=FakeGenerator())


class TestContentGenerationSystem:
    @pytest.mark.asyncio
    async def test_ensure_then_poll(self, system):
        product = system.get_product("1")

        assert await system.ensure_generated(product) is True
        result = await system.await_content("1")

        assert result.status == PollStatus.FOUND
        assert result.document.title == product.name

    @pytest.mark.asyncio
    async def test_devices_share_the_store(self, settings, tmp_path):
        generator = FakeGenerator()
        first = ContentGenerationSystem(settings, generator=generator)
        other_device = settings.model_copy(
            update={"local_cache_path": str(tmp_path / "other_cache.json")}
        )
        second = ContentGenerationSystem(other_device, generator=generator)

        await first.ensure_generated(first.get_product("1"))
        assert await second.ensure_generated(second.get_product("1")) is True
        assert generator.call_count == 1
        assert second.cache.get_document("1") is not None

    @pytest.mark.asyncio
    async def test_preview_generates_and_waits(self, system):
        result = await system.preview(system.get_product("2"))
        assert result.found

    @pytest.mark.asyncio
    async def test_preview_waits_longer_than_download(self, system):
        product = system.get_product("9")
        assert not product.has_static_content

        result = await system.preview(product)

        assert result.status == PollStatus.TIMEOUT
        assert result.attempts == PREVIEW_MAX_ATTEMPTS

    @pytest.mark.asyncio
    async def test_poll_timeout_for_unknown(self, system):
        result = await system.await_content("does-not-exist")
        assert result.status == PollStatus.TIMEOUT
        assert result.attempts == 3

    @pytest.mark.asyncio
    async def test_scheduler_tick_and_stats(self, system):
        assert await system.scheduler_tick() == TickOutcome.GENERATED

        stats = await system.stats()
        assert stats.generated_count == 1
        assert stats.total_catalog_items == sum(1 for p in CATALOG if p.has_static_content)

    @pytest.mark.asyncio
    async def test_ad_hoc_products_are_discoverable(self, system):
        result = await system.create_ad_hoc("A field guide to mushrooms")

        assert result.success
        assert system.get_product(result.product.id) is not None
        assert (await system.await_content(result.product.id)).found

    @pytest.mark.asyncio
    async def test_custom_catalog(self, settings):
        catalog = [make_product(product_id="x1")]
        system = ContentGenerationSystem(settings, generator=FakeGenerator(), catalog=catalog)

        assert system.get_product("1") is None
        assert (await system.generate_next()).product_id == "x1"


class TestCatalog:
    def test_ids_unique(self):
        ids = [p.id for p in CATALOG]
        assert len(ids) == len(set(ids))

    def test_lookup(self):
        assert get_product("36").name == "VS Code Keyboard Shortcuts Master Sheet"
        assert get_product("missing") is None


class TestCli:
    def test_parses_subcommands(self):
        parser = build_parser()

        args = parser.parse_args(["poll", "7", "--attempts", "30"])
        assert args.command == "poll"
        assert args.product_id == "7"
        assert args.attempts == 30

        args = parser.parse_args(["ad-hoc", "A study plan", "--price", "99"])
        assert args.price == 99.0

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    @pytest.mark.parametrize("attempts", ["0", "-3", "many"])
    def test_attempts_must_be_positive(self, attempts):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["poll", "1", "--attempts", attempts])
