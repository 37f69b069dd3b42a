"""
Command line entry points for the scheduled summary jobs.

    solar-summaries daily
    solar-summaries backfill [--days N | --start YYYY-MM-DD --end YYYY-MM-DD]
                             [--only-missing] [--dry-run] [--serial SN ...]
    solar-summaries monthly
    solar-summaries init-db

Exit codes: 0 success, 1 fatal (configuration error or crash), 2 usage error,
3 partial failure (some devices or days failed).
"""
import argparse
import asyncio
import json
import logging
from datetime import date
from typing import List, Optional

from .application.services.daily_summary_service import DailySummaryService
from .application.services.monthly_summary_service import MonthlySummaryService
from .config import AppSettings, get_settings
from .domain.exceptions import ConfigurationException, ValidationException
from .infrastructure.database.connection import DatabaseManager, get_db_session, init_db
from .infrastructure.database.repositories import SummaryRepository
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_PARTIAL = 3


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='solar-summaries',
        description='Build daily and monthly inverter summaries',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('daily', help='Scheduled run: yesterday and today, then prune live data')

    backfill = subparsers.add_parser('backfill', help='Backfill daily summaries')
    backfill.add_argument('--days', type=int, default=None, help='Trailing window in local days (default from settings)')
    backfill.add_argument('--start', type=_iso_date, default=None, help='Start date (YYYY-MM-DD) inclusive, device-local')
    backfill.add_argument('--end', type=_iso_date, default=None, help='End date (YYYY-MM-DD) inclusive, device-local')
    backfill.add_argument('--only-missing', action='store_true', help='Never overwrite existing daily rows')
    backfill.add_argument('--dry-run', action='store_true', help='Report what would be written without writing')
    backfill.add_argument('--serial', action='append', default=None, dest='serials', help='Only this inverter (repeatable)')

    subparsers.add_parser('monthly', help='Rebuild monthly summaries from daily summaries')
    subparsers.add_parser('init-db', help='Create the summary tables (local development)')

    return parser


def validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.command != 'backfill':
        return
    if (args.start is None) != (args.end is None):
        parser.error('--start and --end must be given together')
    if args.start and args.end < args.start:
        parser.error('--end must not precede --start')
    if args.start and args.days:
        parser.error('--days cannot be combined with --start/--end')
    if args.days is not None and args.days < 1:
        parser.error('--days must be at least 1')


def exit_code_for(result) -> int:
    if result.ok:
        return EXIT_OK
    if result.failed_devices:
        return EXIT_PARTIAL
    return EXIT_FATAL


async def run_command(args: argparse.Namespace, settings: AppSettings) -> int:
    """Run one job against the datastore and return the exit code."""
    if args.command == 'init-db':
        await init_db()
        logger.info("Summary tables created")
        return EXIT_OK

    async with get_db_session() as session:
        store = SummaryRepository(session)

        if args.command == 'monthly':
            result = await MonthlySummaryService(store).run()
        else:
            service = DailySummaryService(store, settings.aggregation)
            if args.command == 'daily':
                result = await service.run_scheduled()
            elif args.start is not None:
                result = await service.run_range(
                    start_date=args.start,
                    end_date=args.end,
                    serials=args.serials,
                    only_missing=args.only_missing,
                    dry_run=args.dry_run,
                )
            else:
                result = await service.run_backfill(
                    days_back=args.days,
                    serials=args.serials,
                    only_missing=args.only_missing,
                    dry_run=args.dry_run,
                )

    logger.info(json.dumps(result.to_dict()))
    return exit_code_for(result)


async def _run(args: argparse.Namespace, settings: AppSettings) -> int:
    try:
        return await run_command(args, settings)
    finally:
        await DatabaseManager.close()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    validate_args(parser, args)

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        # Fail on missing credentials before any work starts
        settings.database.url
        return asyncio.run(_run(args, settings))
    except ConfigurationException as e:
        logger.error(f"Configuration error: {e.message}")
        return EXIT_FATAL
    except ValidationException as e:
        logger.error(e.message)
        return EXIT_USAGE
    except Exception as e:
        logger.exception(f"{args.command} job crashed: {e}")
        return EXIT_FATAL
