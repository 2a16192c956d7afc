"""Applies effect descriptors to an account.

Runs inside the caller's ledger transaction and never commits; a failure
here rolls back whatever debit or record the caller already made.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Any, Callable
from uuid import UUID
import logging

from profile_economy.schemas.economy import AppliedEffect
from profile_economy.schemas.effects import (
    GiftCredit,
    PermanentUnlock,
    QuestCredit,
    SkipCredit,
    StreakBoost,
    TimedBoost,
    TitleOverwrite,
    parse_effect,
)
from profile_economy.services.boost_service import BoostService
from profile_economy.services.ledger_service import AccountLedger
from profile_economy.services.streak_service import StreakService
from profile_economy.utils.datetime_helpers import ensure_utc, utc_now
from profile_economy.utils.exceptions import InvalidEffectError

logger = logging.getLogger(__name__)


class EffectApplier:
    """Dispatches on the effect ``kind`` and mutates account state."""

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock
        self.ledger = AccountLedger(db)
        self.boosts = BoostService(db)
        self.streaks = StreakService(db, clock=clock)

    async def apply(self, account_id: UUID, raw_effect: Any) -> AppliedEffect:
        """Validate ``raw_effect`` and apply it to ``account_id``.

        Raises:
            InvalidEffectError: descriptor is malformed; nothing was changed.
        """
        effect = parse_effect(raw_effect)

        match effect:
            case PermanentUnlock(item_id=item_id):
                granted = await self.ledger.add_owned_permanent(account_id, item_id)
                applied = AppliedEffect(kind=effect.kind, item_id=item_id, granted=granted)

            case TimedBoost(boost_type=boost_type, multiplier=multiplier, duration_hours=hours):
                boost, extended = await self.boosts.activate(
                    account_id, boost_type, multiplier, hours, now=self.clock()
                )
                applied = AppliedEffect(
                    kind=effect.kind,
                    boost_type=boost_type,
                    multiplier=boost.multiplier,
                    expires_at=ensure_utc(boost.expires_at),
                    extended=extended,
                )

            case SkipCredit(value=value):
                state = await self.streaks.get_or_create_state(account_id)
                state.free_skip_count += value
                await self.db.flush()
                applied = AppliedEffect(kind=effect.kind, value=value, new_total=state.free_skip_count)

            case StreakBoost(value=value):
                state = await self.streaks.get_or_create_state(account_id)
                state.current_streak += value
                state.longest_streak = max(state.longest_streak, state.current_streak)
                await self.db.flush()
                applied = AppliedEffect(kind=effect.kind, value=value, new_total=state.current_streak)

            case TitleOverwrite(value=title):
                # duration_hours is not enforced; titles stay until overwritten
                await self.ledger.set_title(account_id, title)
                applied = AppliedEffect(kind=effect.kind, title=title)

            case QuestCredit(value=value):
                await self.ledger.credit(account_id, "bonus_quest_slots", value)
                applied = AppliedEffect(kind=effect.kind, value=value)

            case GiftCredit(value=value):
                await self.ledger.credit(account_id, "free_gift_credits", value)
                applied = AppliedEffect(kind=effect.kind, value=value)

            case _:
                raise InvalidEffectError(f"Unhandled effect kind: {getattr(effect, 'kind', None)!r}")

        logger.debug(f"Applied effect {account_id=} kind={effect.kind}")
        return applied
