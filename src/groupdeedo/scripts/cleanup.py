# src/groupdeedo/scripts/cleanup.py
"""
Retention job that deletes old posts.

Runs as a dry run unless ``--live`` is given. Schedule it daily, e.g.:

    0 3 * * * python -m groupdeedo.scripts.cleanup --live
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence

from groupdeedo.core.settings import settings
from groupdeedo.db.session import SessionLocal, create_tables
from groupdeedo.repositories.post_repo import SqlPostStore
from groupdeedo.services.cleanup import CleanupManager

logger = logging.getLogger("groupdeedo.cleanup")


def _positive_int(value: str) -> int:
    try:
        days = int(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError("must be a positive number") from err
    if days < 1:
        raise argparse.ArgumentTypeError("must be a positive number")
    return days


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Delete posts older than a retention window.")
    parser.add_argument(
        "--live",
        action="store_true",
        help="Actually delete posts (default is a dry run).",
    )
    parser.add_argument(
        "--days",
        type=_positive_int,
        default=settings.retention_days,
        help=f"Delete posts older than this many days (default: {settings.retention_days}).",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print database and retention statistics and exit.",
    )
    return parser


async def run(args: argparse.Namespace, manager: CleanupManager) -> int:
    if args.stats:
        stats = await manager.get_cleanup_stats(args.days)
        print(json.dumps(stats, indent=2, default=str))
        return 0

    result = await manager.run_cleanup(days_old=args.days, dry_run=not args.live)
    if result.dry_run and result.candidates:
        print(f"DRY RUN: would delete {result.candidates} posts. Re-run with --live to delete.")
    else:
        print(f"Deleted {result.deleted} posts older than {args.days} days.")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    create_tables()
    manager = CleanupManager(SqlPostStore(SessionLocal))
    return asyncio.run(run(args, manager))


if __name__ == "__main__":
    sys.exit(main())
