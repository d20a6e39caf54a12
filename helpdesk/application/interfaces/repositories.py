"""Repository-side interfaces (ports) for the application layer.

Services never build sessions themselves: they ask an ITransactionCoordinator
for a unit of work and use the repositories it yields.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol


class ITransactionCoordinator(Protocol):
    """Protocol for the transaction boundary (implemented by TransactionCoordinator)."""

    def transaction(self) -> AbstractAsyncContextManager[Any]:
        """Repositories bound to one transaction: commit on exit, rollback on error."""

    def read(self) -> AbstractAsyncContextManager[Any]:
        """Repositories bound to a session that is never committed."""
