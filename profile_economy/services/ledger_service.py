"""Account ledger: the only code that writes currency columns.

Debits are single conditional UPDATE statements
(``... SET x = x - :n WHERE account_id = :id AND x >= :n``); the row count
tells whether funds were sufficient. Callers never read a balance and then
write an unconditional new value.
"""
import logging
import math
from datetime import datetime, UTC
from typing import Mapping
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as postgres_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from profile_economy.models.account import Account
from profile_economy.models.owned_item import OwnedItem
from profile_economy.schemas.economy import BalanceSnapshot
from profile_economy.services.levels import calculate_level
from profile_economy.utils.exceptions import InsufficientFundsError, NotFoundError

logger = logging.getLogger(__name__)

# Balance columns the ledger may debit or credit, with the currency name used in errors
LEDGER_FIELDS = {
    "spendable_xp": "xp",
    "reputation": "reputation",
    "experience": "experience",
    "bonus_quest_slots": "bonus_quest_slots",
    "free_gift_credits": "free_gift_credits",
}


def snapshot(account: Account) -> BalanceSnapshot:
    return BalanceSnapshot(
        account_id=account.account_id,
        reputation=account.reputation,
        experience=account.experience,
        spendable_xp=account.spendable_xp,
        level=calculate_level(account.experience),
        title=account.title,
        bonus_quest_slots=account.bonus_quest_slots,
        free_gift_credits=account.free_gift_credits,
    )


class AccountLedger:
    """Atomic read, debit and credit primitives for one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lock_account(self, account_id: UUID) -> Account:
        """Load the account with a row lock held until the transaction ends."""
        result = await self.db.execute(
            select(Account)
            .where(Account.account_id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        account = result.scalar_one_or_none()
        if not account:
            raise NotFoundError(f"Account not found: {account_id}", {"account_id": str(account_id)})
        return account

    async def get_account(self, account_id: UUID) -> Account:
        """Fresh read of the account row (no lock)."""
        result = await self.db.execute(
            select(Account)
            .where(Account.account_id == account_id)
            .execution_options(populate_existing=True)
        )
        account = result.scalar_one_or_none()
        if not account:
            raise NotFoundError(f"Account not found: {account_id}", {"account_id": str(account_id)})
        return account

    async def read_balance(self, account_id: UUID) -> BalanceSnapshot:
        return snapshot(await self.get_account(account_id))

    async def conditional_debit(self, account_id: UUID, field: str, amount: int) -> bool:
        return await self.conditional_debit_many(account_id, {field: amount})

    async def conditional_debit_many(self, account_id: UUID, amounts: Mapping[str, int]) -> bool:
        """Debit every field in ``amounts`` only if all of them are covered.

        Returns False (and changes nothing) when any balance is short.
        """
        charges = {field: amount for field, amount in amounts.items() if amount}
        for field, amount in charges.items():
            self._check_field(field)
            if amount < 0:
                raise ValueError(f"Debit amount must be positive: {field}={amount}")

        if not charges:
            return True

        conditions = [getattr(Account, field) >= amount for field, amount in charges.items()]
        values = {field: getattr(Account, field) - amount for field, amount in charges.items()}
        values["updated_at"] = datetime.now(UTC)

        result = await self.db.execute(
            update(Account)
            .where(Account.account_id == account_id, *conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        debited = result.rowcount == 1
        logger.debug(f"Conditional debit {account_id=} {charges=} {debited=}")
        return debited

    async def debit_or_raise(self, account_id: UUID, amounts: Mapping[str, int]) -> None:
        """Conditional debit that raises ``InsufficientFundsError`` on shortfall."""
        if await self.conditional_debit_many(account_id, amounts):
            return

        account = await self.get_account(account_id)
        for field, amount in amounts.items():
            available = getattr(account, field)
            if amount and available < amount:
                raise InsufficientFundsError(LEDGER_FIELDS[field], amount, available)
        # Balances moved between the failed debit and this read
        field, amount = next((f, a) for f, a in amounts.items() if a)
        raise InsufficientFundsError(LEDGER_FIELDS[field], amount, getattr(account, field))

    async def credit(self, account_id: UUID, field: str, amount: int) -> None:
        await self.credit_many(account_id, {field: amount})

    async def credit_many(self, account_id: UUID, amounts: Mapping[str, int]) -> None:
        credits = {field: amount for field, amount in amounts.items() if amount}
        for field, amount in credits.items():
            self._check_field(field)
            if amount < 0:
                raise ValueError(f"Credit amount must be positive: {field}={amount}")

        if not credits:
            return

        values = {field: getattr(Account, field) + amount for field, amount in credits.items()}
        values["updated_at"] = datetime.now(UTC)
        result = await self.db.execute(
            update(Account)
            .where(Account.account_id == account_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotFoundError(f"Account not found: {account_id}", {"account_id": str(account_id)})

    async def award_experience(self, account_id: UUID, base_xp: int, multiplier: float = 1.0) -> int:
        """Credit boosted XP to both lifetime and spendable balances."""
        awarded = math.floor(base_xp * multiplier)
        if awarded > 0:
            await self.credit_many(account_id, {"experience": awarded, "spendable_xp": awarded})
        return awarded

    async def set_title(self, account_id: UUID, title: str) -> None:
        result = await self.db.execute(
            update(Account)
            .where(Account.account_id == account_id)
            .values(title=title, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotFoundError(f"Account not found: {account_id}", {"account_id": str(account_id)})

    async def add_owned_permanent(self, account_id: UUID, item_id: str) -> bool:
        """Idempotently record ownership; True when the row is new."""
        bind = self.db.get_bind()
        dialect_name = (bind.dialect.name if bind is not None else "").lower()
        if "sqlite" in dialect_name:
            insert_stmt = sqlite_insert(OwnedItem)
        else:
            insert_stmt = postgres_insert(OwnedItem)

        stmt = insert_stmt.values(
            account_id=account_id,
            item_id=item_id,
            acquired_at=datetime.now(UTC),
        ).on_conflict_do_nothing(index_elements=["account_id", "item_id"])

        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def is_owned(self, account_id: UUID, item_id: str) -> bool:
        result = await self.db.execute(
            select(OwnedItem.item_id).where(
                OwnedItem.account_id == account_id,
                OwnedItem.item_id == item_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def owned_item_ids(self, account_id: UUID) -> set[str]:
        result = await self.db.execute(
            select(OwnedItem.item_id).where(OwnedItem.account_id == account_id)
        )
        return set(result.scalars().all())

    @staticmethod
    def _check_field(field: str) -> None:
        if field not in LEDGER_FIELDS:
            raise ValueError(f"Not a ledger balance field: {field}")
