"""Append-only purchase history."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from datetime import datetime
from typing import Optional
from uuid import UUID
import uuid
import logging

from profile_economy.models.purchase_record import PurchaseRecord
from profile_economy.models.base import PurchaseSource

logger = logging.getLogger(__name__)


class PurchaseRecordService:
    """Writes and reads purchase records inside the caller's transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(
        self,
        account_id: UUID,
        item_id: str,
        category: str,
        charged_xp: int,
        charged_rep: int,
        source: PurchaseSource = PurchaseSource.STORE,
        created_at: Optional[datetime] = None,
    ) -> PurchaseRecord:
        """Add a record of amounts actually debited. Never commits."""
        record = PurchaseRecord(
            purchase_id=uuid.uuid4(),
            account_id=account_id,
            item_id=item_id,
            category=category,
            charged_xp=charged_xp,
            charged_rep=charged_rep,
            source=PurchaseSource(source).value,
        )
        if created_at is not None:
            record.created_at = created_at
        self.db.add(record)
        await self.db.flush()
        return record

    async def count_by_account(self, account_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(PurchaseRecord.purchase_id)).where(PurchaseRecord.account_id == account_id)
        )
        return result.scalar_one()

    async def is_owned(self, account_id: UUID, item_id: str) -> bool:
        """True when any purchase of ``item_id`` exists for the account."""
        result = await self.db.execute(
            select(PurchaseRecord.purchase_id)
            .where(PurchaseRecord.account_id == account_id, PurchaseRecord.item_id == item_id)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def purchased_item_ids(self, account_id: UUID) -> set[str]:
        result = await self.db.execute(
            select(PurchaseRecord.item_id).where(PurchaseRecord.account_id == account_id).distinct()
        )
        return set(result.scalars().all())

    async def list_by_account(self, account_id: UUID, limit: int = 100) -> list[PurchaseRecord]:
        result = await self.db.execute(
            select(PurchaseRecord)
            .where(PurchaseRecord.account_id == account_id)
            .order_by(PurchaseRecord.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
