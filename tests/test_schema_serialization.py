"""Tests for how service results dump timestamps."""
import json
import uuid
from datetime import UTC, datetime, timedelta, timezone

import pytest

from profile_economy.schemas.base import to_utc_iso
from profile_economy.schemas.economy import GiftInbox, PurchaseHistoryEntry
from profile_economy.services.gift_service import GiftService
from profile_economy.services.store_service import StoreService


def test_to_utc_iso_treats_naive_as_utc():
    assert to_utc_iso(datetime(2025, 3, 14, 15, 30)) == "2025-03-14T15:30:00Z"


def test_to_utc_iso_converts_offsets():
    eastern = timezone(timedelta(hours=-4))
    assert to_utc_iso(datetime(2025, 3, 14, 11, 30, tzinfo=eastern)) == "2025-03-14T15:30:00Z"


def test_history_entry_dump_uses_z_suffix():
    entry = PurchaseHistoryEntry(
        purchase_id=uuid.uuid4(),
        item_id="streak_shield",
        category="streak",
        charged_xp=300,
        charged_rep=0,
        source="store",
        created_at=datetime(2025, 3, 14, 15, 30),
    )

    assert entry.model_dump()["created_at"] == "2025-03-14T15:30:00Z"
    assert json.loads(entry.model_dump_json())["created_at"] == "2025-03-14T15:30:00Z"


@pytest.mark.asyncio
async def test_purchase_receipt_dumps_nested_boost_expiry(db_session, account_factory, catalog, fixed_clock):
    account_id = await account_factory(spendable_xp=1000)
    store = StoreService(db_session, catalog, clock=fixed_clock)

    receipt = await store.purchase(account_id, "xp_boost_2x")
    dumped = receipt.model_dump()

    assert receipt.effect.expires_at == fixed_clock() + timedelta(hours=24)
    assert dumped["effect"]["expires_at"] == "2025-03-15T15:30:00Z"
    assert dumped["balance"]["spendable_xp"] == receipt.balance.spendable_xp


@pytest.mark.asyncio
async def test_gift_inbox_dumps_timestamps_read_from_database(db_session, account_factory, catalog, fixed_clock):
    sender = await account_factory(reputation=200)
    recipient = await account_factory()
    service = GiftService(db_session, catalog, clock=fixed_clock)
    await service.send_gift(sender, recipient, "energy")

    inbox = await service.list_gifts(recipient)
    dumped = inbox.model_dump()

    assert isinstance(inbox, GiftInbox)
    assert dumped["received"][0]["created_at"] == "2025-03-14T15:30:00Z"
    assert dumped["received"][0]["claimed_at"] is None
    assert dumped["sent"] == []
