"""Best-effort execution for side effects that must never fail the primary operation."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

from helpdesk.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class BestEffortPolicy:
    """Run an awaitable; log and swallow any failure.

    The primary operation has already committed when the side effect runs,
    so no exception from it may reach the caller. Failures are logged with
    the traceback instead.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    async def run(self, awaitable: Awaitable[T], description: str) -> T | None:
        """Await and return the result, or None when a failure was swallowed."""
        try:
            return await awaitable
        except Exception:
            logger.exception("%s failed: %s", self.name, description)
            return None
