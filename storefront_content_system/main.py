"""
Command-line entry point for the Storefront Content System.
"""

import argparse
import asyncio
import logging
import sys

from storefront_content_system.content_gen_system import ContentGenerationSystem
from storefront_content_system.core.config import load_settings
from storefront_content_system.core.event_bus import setup_json_logging
from storefront_content_system.infrastructure.logger import set_log_dir

logger = logging.getLogger("Main")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storefront-content",
        description="Generate and cache long-form content for storefront products.",
    )
    parser.add_argument("--config", help="Path to JSON config (default: $CONTENT_CONFIG)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("run", help="Run the background scheduler until interrupted")
    sub.add_parser("tick", help="Run a single scheduler due-check")
    sub.add_parser("generate-next", help="Generate the first product missing from the store")
    sub.add_parser("stats", help="Show generated vs. eligible catalog items")

    ensure = sub.add_parser("ensure", help="Ensure content exists for one product")
    ensure.add_argument("product_id")

    poll = sub.add_parser("poll", help="Wait for a product's content to become available")
    poll.add_argument("product_id")
    poll.add_argument("--attempts", type=_positive_int, default=None)

    ad_hoc = sub.add_parser("ad-hoc", help="Generate a document from a free-form prompt")
    ad_hoc.add_argument("prompt")
    ad_hoc.add_argument("--price", type=float, default=None)

    return parser


async def _dispatch(system: ContentGenerationSystem, args) -> int:
    if args.command == "run":
        task = system.scheduler.start()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return 0

    if args.command == "tick":
        outcome = await system.scheduler_tick()
        print(f"Scheduler tick: {outcome.value}")
        return 0

    if args.command == "generate-next":
        result = await system.generate_next()
        print(result.message)
        return 0 if result.success else 1

    if args.command == "stats":
        stats = await system.stats()
        print(f"Generated: {stats.generated_count} / {stats.total_catalog_items} catalog items")
        return 0

    if args.command == "ensure":
        product = system.get_product(args.product_id)
        if product is None:
            print(f"Unknown product: {args.product_id}")
            return 2
        ok = await system.ensure_generated(product)
        print(f"{product.name}: {'ready' if ok else 'generation failed'}")
        return 0 if ok else 1

    if args.command == "poll":
        result = await system.await_content(args.product_id, max_attempts=args.attempts)
        if not result.found:
            print("Content not ready yet, please try again later.")
            return 1
        print(f"# {result.document.title}\n")
        print(result.document.content)
        return 0

    if args.command == "ad-hoc":
        result = await system.create_ad_hoc(args.prompt, args.price)
        if not result.success:
            print(f"Generation Failed: {result.error}")
            return 1
        print(f'"{result.product.name}" has been added to the products library ({result.product.id}).')
        return 0

    return 2


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    settings = load_settings(args.config)
    set_log_dir(settings.log_dir)
    setup_json_logging(f"{settings.log_dir}/pipeline.log")
    system = ContentGenerationSystem(settings)

    try:
        return asyncio.run(_dispatch(system, args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
