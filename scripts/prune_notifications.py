"""Delete notifications older than the retention window.

Usage:
    python -m scripts.prune_notifications [days]
Defaults to NOTIFICATION_RETENTION_DAYS (30). Intended for a daily cron job.
"""

import asyncio
import sys

from helpdesk.composition import build_services
from helpdesk.infrastructure.persistence.database import dispose_engine
from helpdesk.shared.telemetry.logging import setup_logging


async def main() -> None:
    setup_logging()
    days: int | None = None
    if len(sys.argv) > 1:
        try:
            days = int(sys.argv[1])
        except ValueError:
            print(f"days must be an integer, got: {sys.argv[1]}", file=sys.stderr)
            sys.exit(1)
    try:
        services = build_services()
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)
    try:
        deleted = await services.notifications.prune_older_than(days)
    finally:
        await dispose_engine()
    print(f"Deleted {deleted} notifications")


if __name__ == "__main__":
    asyncio.run(main())
