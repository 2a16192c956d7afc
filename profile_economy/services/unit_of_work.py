"""Ledger transaction boundary.

Every balance-mutating operation runs its body through
``run_ledger_transaction``: the closure does all reads and writes on the
session, and this module owns commit, rollback and the translation of
lock/serialization failures into ``ConcurrencyConflictError``.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from profile_economy.config import get_settings
from profile_economy.utils.exceptions import ConcurrencyConflictError, EconomyError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected, lock_not_available, query_canceled (lock_timeout)
CONFLICT_SQLSTATES = {"40001", "40P01", "55P03", "57014"}
CONFLICT_MESSAGES = ("database is locked", "could not serialize", "deadlock detected", "lock timeout")


def is_concurrency_conflict(exc: DBAPIError) -> bool:
    """True when the driver error means another transaction got there first."""
    if isinstance(exc, IntegrityError):
        # Unique-key races (boost rows, owned items) surface as integrity errors
        # once the loser's insert reaches the database.
        return "unique" in str(exc.orig).lower() or "duplicate" in str(exc.orig).lower()

    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in CONFLICT_SQLSTATES:
        return True

    message = str(orig or exc).lower()
    return any(fragment in message for fragment in CONFLICT_MESSAGES)


async def run_ledger_transaction(
    db: AsyncSession,
    work: Callable[[], Awaitable[T]],
    *,
    operation: str,
) -> T:
    """Run ``work`` as one atomic unit on ``db``.

    Commits when ``work`` returns; rolls back on any exception so no debit,
    record or effect is left half-applied.

    Raises:
        ConcurrencyConflictError: lock wait / serialization / unique race.
        EconomyError: domain rejections raised by ``work``, unchanged.
    """
    try:
        result = await work()
        await db.commit()
    except EconomyError:
        await db.rollback()
        raise
    except DBAPIError as exc:
        await db.rollback()
        if is_concurrency_conflict(exc):
            logger.warning(f"Ledger conflict during {operation}: {exc.orig!r}")
            raise ConcurrencyConflictError(
                f"Concurrent update while running {operation}; retry the request",
                {"operation": operation},
            ) from exc
        logger.error(f"Database error during {operation}: {exc}")
        raise
    except Exception:
        await db.rollback()
        logger.exception(f"Unexpected failure during {operation}; transaction rolled back")
        raise
    return result


async def retry_on_conflict(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: Optional[int] = None,
    backoff_seconds: float = 0.05,
) -> T:
    """Re-run ``operation`` on ``ConcurrencyConflictError`` up to ``attempts`` times.

    Meant for the calling layer; every other error propagates immediately.
    ``attempts`` defaults to the ``conflict_retry_attempts`` setting.
    """
    if attempts is None:
        attempts = get_settings().conflict_retry_attempts
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except ConcurrencyConflictError:
            if attempt == attempts:
                raise
            logger.info(f"Retrying after ledger conflict (attempt {attempt}/{attempts})")
            await asyncio.sleep(backoff_seconds * attempt)
    raise AssertionError("unreachable")
