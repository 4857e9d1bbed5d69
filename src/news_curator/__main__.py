"""Command-line entry point: python -m news_curator."""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from .config import ConfigError, load_config, validate_config
from .history import HistoryStore, StorageError
from .logger import setup_logger
from .notifiers import build_notifier
from .orchestrator import CurationPipeline
from .providers import LLMClient
from .runner import CycleRunner
from .scheduler import Scheduler
from .tracker import NotificationTracker


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="News curator: fetch, filter, summarize and deliver")
    parser.add_argument("--config", default="config/config.yaml", help="Path to the YAML configuration")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    parser.add_argument("--dry-run", action="store_true", help="Curate without delivering or marking anything")
    parser.add_argument(
        "--check-providers", action="store_true", help="Test connectivity of every configured AI provider and exit"
    )
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
        if args.dry_run:
            config.dry_run = True
        validate_config(config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    logger = setup_logger(config.log_file)

    if args.check_providers:
        return await _check_providers(LLMClient.from_config(config), logger)

    try:
        with HistoryStore(config.history_db) as history:
            client = LLMClient.from_config(config)
            if not client.available:
                logger.warning("No AI provider configured: items pass unfiltered and use titles as glosses")

            runner = CycleRunner(
                pipeline=CurationPipeline.from_config(config, history, client),
                tracker=NotificationTracker(history),
                notifier=build_notifier(config),
                dry_run=config.dry_run
            )
            scheduler = Scheduler(runner, config.run_time, config.interval_minutes)

            if args.once:
                report = await scheduler.run_once()
                client.log_usage_summary()
                logger.debug(json.dumps(report.to_dict(), ensure_ascii=False))
                return 0 if report.success else 1

            await scheduler.serve()
    except StorageError as e:
        logger.error(f"History store unavailable: {e}")
        return 1
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    return 0


async def _check_providers(client: LLMClient, logger) -> int:
    """Log the health of each provider; exit status 1 unless all are healthy."""
    results = await client.registry.validate_all()
    if not results:
        logger.warning("No AI provider configured")
        return 1
    return 0 if all(is_healthy for is_healthy, _ in results.values()) else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
