#!/usr/bin/env python3
"""Utility script to inspect or clear the local snapshot cache."""
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from scratchscan.config import CACHE_DB, METRICS_FILE
from scratchscan.store.cache import SnapshotCache, format_time_ago, is_stale


async def show_stats() -> None:
    """Show what the cached snapshot holds."""
    snapshot = await SnapshotCache().load_snapshot()
    print(f"Cache database: {CACHE_DB}")
    if snapshot is None:
        print("No snapshot cached")
        return

    print(f"Run: {snapshot.run_id}")
    print(f"Fetched: {snapshot.fetched_at.isoformat()} ({format_time_ago(snapshot.fetched_at)})")
    print(f"Stale: {is_stale(snapshot.fetched_at)}")
    print(f"Games: {len(snapshot.records)} ({len(snapshot.resolved)} resolved, {len(snapshot.failed)} failed)")
    for record in snapshot.failed:
        print(f"  {record.game_number}: {record.error_message}")


async def clear_snapshot() -> None:
    """Delete the cached snapshot."""
    cache = SnapshotCache()
    await cache.remove(cache.key)
    print(f"Removed {cache.key} from {CACHE_DB}")


def clear_progress() -> None:
    """Delete the progress JSONL file."""
    if not METRICS_FILE.exists():
        print("No progress file")
        return
    METRICS_FILE.unlink()
    print(f"Deleted {METRICS_FILE}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage:")
        print("  python scripts/cache_tool.py stats             # Show the cached snapshot")
        print("  python scripts/cache_tool.py clear             # Delete the cached snapshot")
        print("  python scripts/cache_tool.py clear-progress    # Delete data/progress.jsonl")
        sys.exit(1)

    command = sys.argv[1]

    if command == "stats":
        asyncio.run(show_stats())
    elif command == "clear":
        confirm = input("Are you sure you want to delete the cached snapshot? (yes/no): ")
        if confirm.lower() == "yes":
            asyncio.run(clear_snapshot())
        else:
            print("Cancelled")
    elif command == "clear-progress":
        clear_progress()
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)
