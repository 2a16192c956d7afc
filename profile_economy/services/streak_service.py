"""Daily check-in service."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID
import logging

from profile_economy.config import get_settings
from profile_economy.models.streak_state import StreakState
from profile_economy.schemas.economy import CheckInResult, StreakView
from profile_economy.services.ledger_service import AccountLedger, snapshot
from profile_economy.services.streak import advance_streak
from profile_economy.services.unit_of_work import run_ledger_transaction
from profile_economy.utils.datetime_helpers import ensure_utc, utc_date, utc_now

logger = logging.getLogger(__name__)


def streak_view(state: Optional[StreakState]) -> StreakView:
    if state is None:
        return StreakView(current_streak=0, longest_streak=0, last_streak_date=None, free_skip_count=0)
    return StreakView(
        current_streak=state.current_streak,
        longest_streak=state.longest_streak,
        last_streak_date=state.last_streak_date,
        free_skip_count=state.free_skip_count,
    )


class StreakService:
    """Service for check-in streaks and their rewards."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.clock = clock
        self.settings = get_settings()
        self.ledger = AccountLedger(db)

    async def get_state(self, account_id: UUID, lock: bool = False) -> Optional[StreakState]:
        query = select(StreakState).where(StreakState.account_id == account_id)
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def get_or_create_state(self, account_id: UUID) -> StreakState:
        """Locked streak row, inserted empty on first use. Never commits."""
        state = await self.get_state(account_id, lock=True)
        if state is None:
            state = StreakState(
                account_id=account_id,
                current_streak=0,
                longest_streak=0,
                free_skip_count=0,
            )
            self.db.add(state)
            await self.db.flush()
        return state

    async def get_streak(self, account_id: UUID) -> StreakView:
        return streak_view(await self.get_state(account_id))

    async def check_in(self, account_id: UUID) -> CheckInResult:
        """Record today's check-in.

        Advancing to a new day credits the flat check-in XP plus any milestone
        reputation. Checking in again on the same UTC day returns the current
        state and grants nothing.
        """
        now = ensure_utc(self.clock())
        today = utc_date(now)

        async def _check_in() -> CheckInResult:
            await self.ledger.lock_account(account_id)
            state = await self.get_or_create_state(account_id)

            transition = advance_streak(
                today=today,
                last_streak_date=state.last_streak_date,
                current_streak=state.current_streak,
                longest_streak=state.longest_streak,
                free_skip_count=state.free_skip_count,
            )

            xp_awarded = 0
            if transition.day_advanced:
                state.current_streak = transition.current_streak
                state.longest_streak = transition.longest_streak
                state.last_streak_date = transition.last_streak_date
                state.free_skip_count = transition.free_skip_count
                state.last_check_in = now
                await self.db.flush()

                if transition.bonus_reputation:
                    await self.ledger.credit(account_id, "reputation", transition.bonus_reputation)
                xp_awarded = await self.ledger.award_experience(account_id, self.settings.check_in_xp)

            account = await self.ledger.get_account(account_id)
            return CheckInResult(
                streak=streak_view(state),
                bonus_reputation=transition.bonus_reputation,
                xp_awarded=xp_awarded,
                used_skip=transition.used_skip,
                day_advanced=transition.day_advanced,
                balance=snapshot(account),
            )

        result = await run_ledger_transaction(self.db, _check_in, operation="check_in")
        if result.day_advanced:
            logger.info(
                f"Check-in {account_id=} streak={result.streak.current_streak} "
                f"bonus_rep={result.bonus_reputation} xp={result.xp_awarded} used_skip={result.used_skip}"
            )
        else:
            logger.info(f"Repeat check-in ignored {account_id=} day={today}")
        return result
