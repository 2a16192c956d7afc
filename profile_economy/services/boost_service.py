"""Active boost lookups and activation."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID
import uuid
import logging

from profile_economy.models.active_boost import ActiveBoost
from profile_economy.schemas.economy import ActiveBoostView
from profile_economy.utils.datetime_helpers import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class BoostService:
    """Service for timed multiplier boosts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_boost(self, account_id: UUID, boost_type: str, lock: bool = False) -> Optional[ActiveBoost]:
        query = select(ActiveBoost).where(
            ActiveBoost.account_id == account_id,
            ActiveBoost.boost_type == boost_type,
        )
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def activate(
        self,
        account_id: UUID,
        boost_type: str,
        multiplier: float,
        duration_hours: int,
        now: Optional[datetime] = None,
    ) -> tuple[ActiveBoost, bool]:
        """Start or extend a boost.

        An unexpired boost has its expiry pushed out by ``duration_hours``; an
        expired one restarts from ``now``. The multiplier only ever goes up.

        Returns:
            (boost row, True if an unexpired boost was extended)
        """
        now = ensure_utc(now or utc_now())
        duration = timedelta(hours=duration_hours)
        boost = await self.get_boost(account_id, boost_type, lock=True)

        if boost is None:
            boost = ActiveBoost(
                boost_id=uuid.uuid4(),
                account_id=account_id,
                boost_type=boost_type,
                multiplier=multiplier,
                expires_at=now + duration,
                created_at=now,
            )
            self.db.add(boost)
            await self.db.flush()
            return boost, False

        current_expiry = ensure_utc(boost.expires_at)
        extended = current_expiry > now
        boost.expires_at = (current_expiry if extended else now) + duration
        boost.multiplier = max(boost.multiplier, multiplier)
        await self.db.flush()
        return boost, extended

    async def list_active_boosts(self, account_id: UUID, now: Optional[datetime] = None) -> list[ActiveBoostView]:
        now = ensure_utc(now or utc_now())
        result = await self.db.execute(
            select(ActiveBoost)
            .where(ActiveBoost.account_id == account_id)
            .order_by(ActiveBoost.expires_at)
        )
        # Filter in Python; SQLite hands back naive datetimes
        return [
            ActiveBoostView(
                boost_type=boost.boost_type,
                multiplier=boost.multiplier,
                expires_at=ensure_utc(boost.expires_at),
            )
            for boost in result.scalars().all()
            if ensure_utc(boost.expires_at) > now
        ]

    async def get_active_xp_multiplier(self, account_id: UUID, now: Optional[datetime] = None) -> float:
        """Highest multiplier among unexpired boosts, 1.0 when none."""
        boosts = await self.list_active_boosts(account_id, now)
        return max((boost.multiplier for boost in boosts), default=1.0)
