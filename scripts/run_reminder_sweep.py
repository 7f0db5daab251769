"""Run the reminder sweep from cron or by hand.

    python scripts/run_reminder_sweep.py            # one sweep, then exit
    python scripts/run_reminder_sweep.py --loop     # sweep every interval
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from lifetasks.core.config import settings  # noqa: E402
from lifetasks.core.logging import configure_logging  # noqa: E402
from lifetasks.db.session import engine  # noqa: E402
from lifetasks.workers.reminder_runner import ReminderSweepRunner  # noqa: E402


async def run(loop: bool, interval: float) -> int:
    runner = ReminderSweepRunner(interval=interval)
    try:
        if loop:
            await runner.run_forever()
            return 0
        result = await runner.run_once()
    finally:
        await engine.dispose()
    return 1 if result.failures else 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Send reminder digest emails")
    parser.add_argument("--loop", action="store_true", help="Keep running, one sweep per interval")
    parser.add_argument(
        "--interval",
        type=float,
        default=settings.REMINDER_SWEEP_INTERVAL_SECONDS,
        help="Seconds between sweeps when looping",
    )
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL, debug=settings.DEBUG)
    return asyncio.run(run(loop=args.loop, interval=args.interval))


if __name__ == "__main__":
    raise SystemExit(main())
