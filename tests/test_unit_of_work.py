"""Tests for the ledger transaction boundary and conflict retries."""
import sqlite3

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from profile_economy.services.ledger_service import AccountLedger
from profile_economy.services.unit_of_work import (
    is_concurrency_conflict,
    retry_on_conflict,
    run_ledger_transaction,
)
from profile_economy.utils.exceptions import ConcurrencyConflictError, InsufficientFundsError


def _locked_error():
    return OperationalError("UPDATE accounts", {}, sqlite3.OperationalError("database is locked"))


class TestConflictDetection:

    def test_locked_database_is_conflict(self):
        assert is_concurrency_conflict(_locked_error())

    def test_unique_violation_is_conflict(self):
        exc = IntegrityError("INSERT", {}, sqlite3.IntegrityError("UNIQUE constraint failed: active_boosts"))
        assert is_concurrency_conflict(exc)

    def test_check_violation_is_not_conflict(self):
        exc = IntegrityError("UPDATE", {}, sqlite3.IntegrityError("CHECK constraint failed: ck_accounts"))
        assert not is_concurrency_conflict(exc)


@pytest.mark.asyncio
class TestRunLedgerTransaction:

    async def test_commits_on_success(self, db_session, session_factory, account_factory):
        account_id = await account_factory(reputation=10)

        async def work():
            await AccountLedger(db_session).credit(account_id, "reputation", 5)
            return "ok"

        assert await run_ledger_transaction(db_session, work, operation="test_credit") == "ok"

        async with session_factory() as other:
            assert (await AccountLedger(other).read_balance(account_id)).reputation == 15

    async def test_domain_error_rolls_back_earlier_writes(self, db_session, account_factory):
        account_id = await account_factory(reputation=10, spendable_xp=0)
        ledger = AccountLedger(db_session)

        async def work():
            await ledger.credit(account_id, "reputation", 5)
            await ledger.debit_or_raise(account_id, {"spendable_xp": 1})

        with pytest.raises(InsufficientFundsError):
            await run_ledger_transaction(db_session, work, operation="test_rollback")

        assert (await ledger.read_balance(account_id)).reputation == 10

    async def test_lock_error_becomes_conflict(self, db_session):
        async def work():
            raise _locked_error()

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            await run_ledger_transaction(db_session, work, operation="test_conflict")

        assert exc_info.value.retryable is True
        assert exc_info.value.details == {"operation": "test_conflict"}


@pytest.mark.asyncio
class TestRetryOnConflict:

    async def test_retries_until_success(self):
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise ConcurrencyConflictError("busy")
            return "done"

        assert await retry_on_conflict(flaky, attempts=3, backoff_seconds=0) == "done"
        assert len(calls) == 3

    async def test_gives_up_after_attempts(self):
        calls = []

        async def always_busy():
            calls.append(1)
            raise ConcurrencyConflictError("busy")

        with pytest.raises(ConcurrencyConflictError):
            await retry_on_conflict(always_busy, attempts=2, backoff_seconds=0)
        assert len(calls) == 2

    async def test_other_errors_not_retried(self):
        calls = []

        async def short():
            calls.append(1)
            raise InsufficientFundsError("xp", 10, 0)

        with pytest.raises(InsufficientFundsError):
            await retry_on_conflict(short, backoff_seconds=0)
        assert len(calls) == 1
