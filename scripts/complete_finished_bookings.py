#!/usr/bin/env python3
"""Mark approved bookings whose end date has passed as completed.

Meant for a daily cron run. Each booking goes through the state machine
under its listing lock, one transaction per booking.

Usage:
    python scripts/complete_finished_bookings.py [--today 2026-04-05]
"""

import argparse
import asyncio
from datetime import date

from himaagarshare.core.logging import setup_logging
from himaagarshare.database import AsyncSessionLocal, close_db
from himaagarshare.services.booking_service import booking_service
from himaagarshare.utils.clock import today as current_date


async def complete_finished_bookings(today: date) -> None:
    """Complete every approved booking that ended before ``today``."""
    async with AsyncSessionLocal() as session:
        completed = await booking_service.complete_finished_bookings(session, today)

    print(f"Completed {len(completed)} booking(s) ending before {today.isoformat()}")
    for booking_id in completed:
        print(f"  {booking_id}")


def main():
    parser = argparse.ArgumentParser(description="Complete finished bookings")
    parser.add_argument("--today", type=date.fromisoformat, default=None, help="Override today (YYYY-MM-DD)")
    args = parser.parse_args()

    setup_logging()

    async def run() -> None:
        try:
            await complete_finished_bookings(args.today or current_date())
        finally:
            await close_db()

    asyncio.run(run())


if __name__ == "__main__":
    main()
