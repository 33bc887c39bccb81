#!/usr/bin/env python3
"""
List calendar invite dispatches stuck in "pending".

A pending row older than a few minutes means the email was handed to
SendGrid (or the process died trying) but the next action was never marked
as sent. Check the SendGrid activity feed for the recipients before
re-sending, otherwise they get the invite twice.

Usage:
    python scripts/list_pending_invites.py [--minutes N]
"""

import argparse
import asyncio
import sys
from datetime import timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv(".env.local")
load_dotenv()

from core.database import close_engine, get_connection
from core.queries.invite_dispatches import get_stale_pending_dispatches


async def main(minutes: int) -> int:
    try:
        async with get_connection() as conn:
            rows = await get_stale_pending_dispatches(
                conn, older_than=timedelta(minutes=minutes)
            )
    finally:
        await close_engine()

    if not rows:
        print(f"No dispatches pending for more than {minutes} minutes.")
        return 0

    print(f"{len(rows)} dispatch(es) pending for more than {minutes} minutes:\n")
    for row in rows:
        print(
            f"  #{row['dispatch_id']}  action={row['action_id']}  "
            f"user={row['user_id']}  created={row['created_at']:%Y-%m-%d %H:%M}  "
            f"to={row['recipients']}"
        )
    return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0])
    parser.add_argument(
        "--minutes",
        type=int,
        default=10,
        help="Only list dispatches pending longer than this (default: 10)",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.minutes)))
