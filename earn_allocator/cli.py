"""Command line entry point: one allocation run."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console

from config.settings import Settings, get_settings
from earn_allocator.core.errors import AllocatorError
from earn_allocator.data import EulerEarnReader
from earn_allocator.engine import Allocator, AllocatorConfig, RunReport
from earn_allocator.services import DryRunExecutor, LogNotifier, Notifier, WebhookNotifier
from earn_allocator.ui import build_report_panel

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(argv: List[str]) -> argparse.Namespace:
    """Parse command-line arguments. Anything unset falls back to the environment."""
    p = argparse.ArgumentParser(description="Compute and gate an Euler Earn reallocation.")
    p.add_argument("--mode", choices=["equalization", "drain"], default=None, help="Optimization mode.")
    p.add_argument("--drain-source", default=None, help="Vault to drain.")
    p.add_argument("--drain-target", default=None, help="Vault receiving drained capital.")
    p.add_argument("--drain-threshold", type=int, default=None, help="Stop draining at or below this amount.")
    p.add_argument("--apy-spread-tolerance", type=float, default=None, help="Min spread compression, APY points.")
    p.add_argument("--no-idle-vault", action="store_true", help="Ignore the idle vault.")
    return p.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    """Overlay CLI overrides on the environment settings."""
    overrides = {
        "optimization_mode": args.mode,
        "drain_source_vault": args.drain_source,
        "drain_target_vault": args.drain_target,
        "drain_threshold": args.drain_threshold,
        "apy_spread_tolerance": args.apy_spread_tolerance,
        "no_idle_vault": True if args.no_idle_vault else None,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    settings = get_settings()
    if not overrides:
        return settings
    return Settings(**{**settings.model_dump(), **overrides})


def build_notifier(settings: Settings) -> Notifier:
    if settings.notification_webhook_url:
        return WebhookNotifier(settings.notification_webhook_url)
    return LogNotifier()


async def run_once(settings: Settings) -> RunReport:
    """Wire collaborators from settings and perform a single run."""
    reader = EulerEarnReader(settings)
    notifier = build_notifier(settings)
    allocator = Allocator(
        config=AllocatorConfig.from_settings(settings),
        reader=reader,
        executor=DryRunExecutor(),
        notifier=notifier,
    )
    try:
        return await allocator.run()
    finally:
        await notifier.close()
        await reader.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        settings = build_settings(args)
    except ValidationError as e:
        # LOG_LEVEL is unknown until settings load
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(f"Invalid settings: {e}")
        return 1
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)

    try:
        report = asyncio.run(run_once(settings))
    except AllocatorError as e:
        logger.error(f"Run aborted: {e}")
        return 1
    except Exception:
        logger.exception("Run failed")
        return 1

    Console().print(build_report_panel(report))
    return 0
