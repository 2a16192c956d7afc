"""Tests for timed boosts and the active XP multiplier."""
from datetime import timedelta

import pytest

from profile_economy.services.boost_service import BoostService
from profile_economy.services.effect_applier import EffectApplier
from profile_economy.services.ledger_service import AccountLedger


@pytest.mark.asyncio
class TestBoostActivation:

    async def test_new_boost_expires_after_duration(self, db_session, account_factory, fixed_clock):
        account_id = await account_factory()
        service = BoostService(db_session)

        boost, extended = await service.activate(account_id, "xp_boost_2x", 2.0, 24, now=fixed_clock())
        await db_session.commit()

        assert extended is False
        assert boost.expires_at == fixed_clock() + timedelta(hours=24)

    async def test_expired_boost_restarts_from_now(self, db_session, account_factory, fixed_clock):
        account_id = await account_factory()
        service = BoostService(db_session)
        start = fixed_clock()

        await service.activate(account_id, "xp_boost_2x", 2.0, 24, now=start)
        await db_session.commit()
        later = start + timedelta(hours=30)
        boost, extended = await service.activate(account_id, "xp_boost_2x", 2.0, 24, now=later)
        await db_session.commit()

        assert extended is False
        assert boost.expires_at == later + timedelta(hours=24)

    async def test_multiplier_never_decreases(self, db_session, account_factory, fixed_clock):
        account_id = await account_factory()
        service = BoostService(db_session)

        await service.activate(account_id, "xp_boost", 2.0, 1, now=fixed_clock())
        boost, _ = await service.activate(account_id, "xp_boost", 1.5, 1, now=fixed_clock())
        await db_session.commit()

        assert boost.multiplier == 2.0


@pytest.mark.asyncio
class TestActiveMultiplier:

    async def test_highest_unexpired_multiplier(self, db_session, account_factory, fixed_clock):
        account_id = await account_factory()
        service = BoostService(db_session)
        now = fixed_clock()

        await service.activate(account_id, "xp_boost_1_5x", 1.5, 48, now=now)
        await service.activate(account_id, "xp_boost_2x", 2.0, 1, now=now)
        await db_session.commit()

        assert await service.get_active_xp_multiplier(account_id, now) == 2.0
        two_hours_later = now + timedelta(hours=2)
        assert await service.get_active_xp_multiplier(account_id, two_hours_later) == 1.5
        assert [b.boost_type for b in await service.list_active_boosts(account_id, two_hours_later)] == ["xp_boost_1_5x"]
        assert await service.get_active_xp_multiplier(account_id, now + timedelta(days=3)) == 1.0

    async def test_boosted_experience_award(self, db_session, account_factory, fixed_clock):
        account_id = await account_factory()
        await EffectApplier(db_session, clock=fixed_clock).apply(
            account_id, {"kind": "timed_boost", "boost_type": "xp_boost_2x", "multiplier": 2.0, "duration_hours": 24}
        )
        await db_session.commit()

        multiplier = await BoostService(db_session).get_active_xp_multiplier(account_id, fixed_clock())
        ledger = AccountLedger(db_session)
        awarded = await ledger.award_experience(account_id, 15, multiplier)
        await db_session.commit()

        assert awarded == 30
        assert (await ledger.read_balance(account_id)).experience == 30
