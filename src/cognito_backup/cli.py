from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import yaml
from croniter import CroniterBadCronError, croniter
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import ConfigurationError
from .handler import invoke
from .logger import LoggingOptions, configure_logging


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Back up a Cognito user pool to encrypted S3 objects.")
    parser.add_argument(
        "--event",
        default=os.getenv("COGNITO_BACKUP_EVENT"),
        help="Path to a YAML or JSON event body overriding environment settings.",
    )
    parser.add_argument(
        "--schedule",
        help="Cron expression; keep running and back up on every tick.",
    )
    parser.add_argument(
        "--timezone",
        default="UTC",
        help="Timezone used to evaluate --schedule (default UTC).",
    )
    parser.add_argument(
        "--no-run-on-startup",
        dest="run_on_startup",
        action="store_false",
        help="With --schedule, wait for the first tick instead of running immediately.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Log level (default INFO).",
    )
    parser.add_argument(
        "--log-format",
        default=os.getenv("FORMATTER_TYPE", "TEXT"),
        choices=["TEXT", "JSON"],
        type=str.upper,
        help="Log output format.",
    )
    return parser.parse_args(argv)


def load_event(path: Optional[str]) -> Optional[Mapping[str, Any]]:
    if not path:
        return None
    event_path = Path(path).expanduser()
    if not event_path.exists():
        raise ConfigurationError(f"Event file not found: {event_path}")

    try:
        with event_path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not read event file {event_path}: {exc}") from exc
    return raw or {}


def run_once(event_path: Optional[str], env: Mapping[str, str], logger: logging.Logger) -> int:
    try:
        event = load_event(event_path)
    except ConfigurationError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    invocation = invoke(event, env, logger=logger)
    print(invocation.response.message)
    return 0 if invocation.success else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logger = configure_logging(LoggingOptions(format=args.log_format, level=args.log_level))

    if args.schedule:
        _validate_schedule(args.schedule, args.timezone)
        return run_with_scheduler(
            event_path=args.event,
            cron=args.schedule,
            timezone_name=args.timezone,
            run_on_startup=args.run_on_startup,
            logger=logger,
        )
    return run_once(args.event, os.environ, logger)


def run_with_scheduler(
    event_path: Optional[str],
    cron: str,
    timezone_name: str,
    run_on_startup: bool,
    logger: logging.Logger,
) -> int:
    stop_event = threading.Event()

    def _handle_signal(signum: int, _frame: Optional[object]) -> None:
        logger.info("Received signal %s; stopping scheduler", signum)
        stop_event.set()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    timezone = ZoneInfo(timezone_name)
    next_run = datetime.now(timezone) if run_on_startup else _next_run(cron, datetime.now(timezone))
    logger.info("First run scheduled for %s", next_run.isoformat())

    while not stop_event.is_set():
        remaining = (next_run - datetime.now(timezone)).total_seconds()
        if remaining > 0:
            stop_event.wait(remaining)
            continue

        _scheduled_run(event_path, logger)
        next_run = _next_run(cron, datetime.now(timezone))
        logger.info("Next run scheduled for %s", next_run.isoformat())

    logger.info("Scheduler stopped")
    return 0


def _scheduled_run(event_path: Optional[str], logger: logging.Logger) -> None:
    try:
        event = load_event(event_path)
    except ConfigurationError as exc:
        logger.error("Failed to load event file: %s; skipping this run", exc)
        return

    invocation = invoke(event, os.environ, logger=logger)
    if not invocation.success:
        logger.warning("Scheduled run failed: %s", invocation.error)


def _validate_schedule(cron: str, timezone_name: str) -> None:
    try:
        croniter(cron, datetime.now())
    except (CroniterBadCronError, ValueError) as exc:
        raise SystemExit(f"Configuration error: invalid cron expression '{cron}': {exc}") from exc
    try:
        ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise SystemExit(f"Configuration error: unknown timezone '{timezone_name}'") from exc


def _next_run(cron_expression: str, reference: datetime) -> datetime:
    return croniter(cron_expression, reference).get_next(datetime)


if __name__ == "__main__":
    sys.exit(main())
