"""Main entry point with CLI."""
import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import Optional

from scratchscan.config import config, Config
from scratchscan.errors import CacheError, ListingFailure
from scratchscan.jobs.runner import SnapshotRunner
from scratchscan.logging_conf import setup_logging
from scratchscan.parse.models import Snapshot
from scratchscan.store.cache import SnapshotCache, format_time_ago, is_stale
from scratchscan.store.export import export_xlsx
from scratchscan.views import DEFAULT_SORT, SORTABLE_FIELDS, filter_records, sort_records

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Texas Lottery scratch-off analyzer")

    # Run options
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help=f"Concurrent detail requests per batch (default: {config.BATCH_SIZE})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help=f"Per-request timeout in seconds (default: {config.REQUEST_TIMEOUT:g})",
    )
    parser.add_argument(
        "--cached",
        action="store_true",
        help="Don't fetch: use the last cached snapshot",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Don't write the snapshot to the local cache",
    )
    parser.add_argument(
        "--export-progress",
        action="store_true",
        help="Append progress lines to data/progress.jsonl",
    )

    # Output
    parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write resolved games to this .xlsx file",
    )
    parser.add_argument(
        "--min-date",
        type=date.fromisoformat,
        default=None,
        help="Only games started on or after this date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--price",
        type=float,
        action="append",
        default=None,
        help="Only games at this ticket price (repeatable)",
    )
    parser.add_argument(
        "--sort",
        default=DEFAULT_SORT,
        help=f"Field to sort by (default: {DEFAULT_SORT})",
    )
    parser.add_argument(
        "--desc",
        action="store_true",
        help="Sort descending",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logs",
    )

    return parser.parse_args(argv)


async def load_cached() -> Optional[Snapshot]:
    cache = SnapshotCache()
    try:
        return await cache.load_snapshot()
    except CacheError as e:
        logger.error(f"Cache unavailable: {e}")
        return None


async def run_snapshot(args: argparse.Namespace) -> Snapshot:
    runner = SnapshotRunner(
        batch_size=args.batch_size,
        timeout=args.timeout,
        use_cache=not args.no_cache,
        export_progress=args.export_progress,
    )
    async for update in runner.run():
        logger.debug(f"Fetching game details... {update.progress.current} of {update.progress.total}")
    return runner.snapshot


def print_table(snapshot: Snapshot, args: argparse.Namespace) -> None:
    records = filter_records(snapshot.records, min_date=args.min_date, prices=args.price)
    records = sort_records(records, field=args.sort, descending=args.desc)

    print(f"{'Game #':>7}  {'Game Name':<30} {'Price':>6} {'Pack':>5} {'Max Loss':>11} {'Top Prize':>12} {'Left':>5}  Odds")
    for record in records:
        if record.status == "failed":
            print(f"{record.game_number:>7}  {record.summary.game_name[:30]:<30} error: {record.error_message}")
            continue
        flag = " ok" if record.guaranteed_return else ""
        print(
            f"{record.game_number:>7}  {record.summary.game_name[:30]:<30} "
            f"{record.summary.ticket_price:>6.0f} {record.detail.pack_size:>5} "
            f"{record.max_loss:>11,.0f} {record.detail.top_prize:>12,.0f} "
            f"{record.top_prizes_remaining:>5}  {record.detail.overall_odds}{flag}"
        )
    print(
        f"{len(records)} games shown, {len(snapshot.resolved)} resolved, "
        f"{len(snapshot.failed)} failed, fetched {format_time_ago(snapshot.fetched_at)}"
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging("DEBUG" if args.debug else None)

    if args.batch_size:
        Config.BATCH_SIZE = args.batch_size
    if args.timeout:
        Config.REQUEST_TIMEOUT = args.timeout

    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    if args.sort not in SORTABLE_FIELDS:
        logger.error(f"Unknown sort field: {args.sort}")
        sys.exit(1)

    try:
        if args.cached:
            snapshot = asyncio.run(load_cached())
            if snapshot is None:
                logger.error("No cached snapshot available")
                sys.exit(1)
            if is_stale(snapshot.fetched_at):
                logger.warning(f"This data was last updated {format_time_ago(snapshot.fetched_at)}")
        else:
            logger.info("=" * 60)
            logger.info(f"Listing: {config.LISTING_URL}")
            logger.info(f"Batch size: {config.BATCH_SIZE}")
            logger.info(f"Timeout: {config.REQUEST_TIMEOUT:g}s")
            logger.info("=" * 60)
            snapshot = asyncio.run(run_snapshot(args))
    except ListingFailure as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)

    print_table(snapshot, args)

    if args.output:
        export_xlsx(snapshot.records, args.output)


if __name__ == "__main__":
    main()
