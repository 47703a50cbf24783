"""Store Base — bounded, self-committing unit of work shared by every store.

Invariants:
    - Every store call runs inside bounded(): a deadline of timeout seconds
    - Deadline expiry, driver faults, and cancellation all roll the transaction back
    - A timed-out call raises PersistenceError; nothing retries it
    - Domain errors raised inside bounded() propagate unchanged after the rollback

Design Decisions:
    - asyncio.timeout over per-statement wait_for: one deadline covers the
      statement and its commit
    - Rollback shielded from a second cancellation so the connection returns clean
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dotareplays.config import get_settings
from dotareplays.core.errors import PersistenceError

logger = logging.getLogger(__name__)


class Store:
    """Base for stores bound to one AsyncSession."""

    def __init__(self, db: AsyncSession, timeout: float | None = None):
        self.db = db
        self.timeout = (
            timeout if timeout is not None
            else get_settings().db_query_timeout_seconds
        )

    @property
    def dialect(self) -> str:
        return self.db.get_bind().dialect.name

    async def _rollback(self) -> None:
        try:
            await self.db.rollback()
        except SQLAlchemyError as e:
            logger.warning(f"Rollback failed: {e}")

    @asynccontextmanager
    async def bounded(self, operation: str) -> AsyncIterator[None]:
        """Run a store operation under the query deadline."""
        try:
            async with asyncio.timeout(self.timeout):
                yield
        except TimeoutError as e:
            await asyncio.shield(self._rollback())
            logger.error(
                f"Store call timed out after {self.timeout}s",
                extra={"operation": operation},
            )
            raise PersistenceError("query deadline exceeded", operation) from e
        except asyncio.CancelledError:
            await asyncio.shield(self._rollback())
            raise
        except SQLAlchemyError as e:
            await self._rollback()
            logger.error(
                f"Store call failed: {e}", extra={"operation": operation},
            )
            raise PersistenceError("database operation failed", operation) from e
        except Exception:
            await self._rollback()
            raise
