"""
Command Line Interface
======================

``vocab-wallpaper serve`` runs the HTTP service.
``vocab-wallpaper generate`` runs a single generation cycle and exits.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from vocab_wallpaper.config.logging import get_logger, setup_logging
from vocab_wallpaper.config.settings import get_settings
from vocab_wallpaper.core.generation.pipeline import build_generation_service
from vocab_wallpaper.models.schemas import GenerationOutcome, GenerationTrigger

logger = get_logger(__name__)


async def generate_once() -> GenerationOutcome:
    """Run one manual generation cycle with the configured components."""
    service = build_generation_service(get_settings())
    service.store.ensure_directory()
    try:
        return await service.run_cycle(GenerationTrigger.MANUAL)
    finally:
        await service.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vocab-wallpaper", description="Daily vocabulary wallpaper service"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default=None, help="Bind address")
    serve.add_argument("--port", type=int, default=None, help="Bind port")
    serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    subparsers.add_parser("generate", help="Generate the wallpaper once and exit")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        from vocab_wallpaper.api.main import run_server

        run_server(host=args.host, port=args.port, reload=args.reload)
        return 0

    setup_logging()
    outcome = asyncio.run(generate_once())
    if outcome.success:
        print(f"Generated {get_settings().image_path} with {outcome.resolved} word(s)")
        return 0

    print(
        f"Generation failed at {outcome.failed_stage.value if outcome.failed_stage else 'unknown'}: "
        f"{outcome.error}",
        file=sys.stderr,
    )
    return 1


if __name__ == "__main__":
    sys.exit(main())
