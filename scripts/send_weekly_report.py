#!/usr/bin/env python3
"""Ручной запуск недельной рассылки (или из системного cron без HTTP-триггера)."""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

# Добавление корневой директории в PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config.settings import settings, validate_settings
from core.exceptions import ConfigurationError, UpstreamFetchError
from core.logging.logger import logger, setup_logging
from shared.services.weekly_payroll_runner import WeeklyPayrollContext


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Недельная рассылка расчётов зарплаты")
    parser.add_argument("--dry-run", action="store_true", help="посчитать без отправки в Telegram")
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="момент запуска в ISO-формате (для пересчёта конкретной недели)",
    )
    return parser.parse_args(argv)


async def run(dry_run: bool, now=None) -> dict:
    async with WeeklyPayrollContext(settings) as runner:
        report = await runner.run(dry_run=dry_run, now=now)
    return report.to_dict()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(settings.log_level, settings.log_format)

    try:
        validate_settings(settings)
    except ConfigurationError as e:
        logger.critical("Configuration is incomplete", missing=e.missing)
        return 2

    try:
        result = asyncio.run(run(args.dry_run, args.now))
    except UpstreamFetchError as e:
        logger.error("Weekly run aborted", error=str(e))
        return 1

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0 if result["failed"] == 0 else 3


if __name__ == "__main__":
    sys.exit(main())
