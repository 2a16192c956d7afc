"""Mystery box: fixed-price weighted draw over the store catalog."""
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Callable, Optional, Sequence
from uuid import UUID
import random
import logging

from profile_economy.config import get_settings
from profile_economy.models.base import PurchaseSource
from profile_economy.schemas.catalog import CatalogItem
from profile_economy.schemas.economy import MysteryBoxResult
from profile_economy.services.catalog import Catalog
from profile_economy.services.effect_applier import EffectApplier
from profile_economy.services.ledger_service import AccountLedger, snapshot
from profile_economy.services.purchase_record_service import PurchaseRecordService
from profile_economy.services.unit_of_work import run_ledger_transaction
from profile_economy.utils.datetime_helpers import ensure_utc, utc_now
from profile_economy.utils.exceptions import ConcurrencyConflictError, NotFoundError

logger = logging.getLogger(__name__)

CONSUMABLE_WEIGHT = 2
PERMANENT_WEIGHT = 1


def item_weight(item: CatalogItem) -> int:
    return PERMANENT_WEIGHT if item.is_permanent else CONSUMABLE_WEIGHT


def eligible_items(catalog: Catalog, owned_item_ids: set[str]) -> list[CatalogItem]:
    """Items a box may contain for an account owning ``owned_item_ids``.

    Reputation-only items never drop, and permanents already owned are skipped.
    """
    return [
        item for item in catalog.list_items()
        if not item.is_reputation_only
        and not (item.is_permanent and item.item_id in owned_item_ids)
    ]


def draw(items: Sequence[CatalogItem], rng: random.Random) -> CatalogItem:
    """Weighted pick: consumables are twice as likely as permanents."""
    if not items:
        raise ValueError("Cannot draw from an empty item list")
    total = sum(item_weight(item) for item in items)
    roll = rng.random() * total
    cumulative = 0
    for item in items:
        cumulative += item_weight(item)
        if roll < cumulative:
            return item
    return items[-1]


class MysteryBoxService:
    """Service for opening mystery boxes."""

    def __init__(
        self,
        db: AsyncSession,
        catalog: Catalog,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.catalog = catalog
        self.rng = rng or random.Random()
        self.clock = clock
        self.settings = get_settings()
        self.ledger = AccountLedger(db)
        self.records = PurchaseRecordService(db)
        self.effects = EffectApplier(db, clock=clock)

    @property
    def box_cost(self) -> int:
        return self.settings.mystery_box_cost

    async def open_box(self, account_id: UUID) -> MysteryBoxResult:
        """
        Pay the box cost in spendable XP and grant one random item.

        Raises:
            NotFoundError: unknown account, or nothing left to win.
            InsufficientFundsError: spendable XP below the box cost.
        """
        now = ensure_utc(self.clock())
        cost = self.box_cost

        async def _open() -> MysteryBoxResult:
            await self.ledger.lock_account(account_id)

            owned = await self.ledger.owned_item_ids(account_id) | await self.records.purchased_item_ids(account_id)
            candidates = eligible_items(self.catalog, owned)
            if not candidates:
                raise NotFoundError("No eligible items left for the mystery box", {"account_id": str(account_id)})

            await self.ledger.debit_or_raise(account_id, {"spendable_xp": cost})

            item = draw(candidates, self.rng)
            record = await self.records.append(
                account_id=account_id,
                item_id=item.item_id,
                category=item.category,
                charged_xp=cost,
                charged_rep=0,
                source=PurchaseSource.MYSTERY_BOX,
                created_at=now,
            )
            applied = await self.effects.apply(account_id, item.effect)
            if not applied.granted:
                # Ownership changed between the eligibility read and the unlock
                raise ConcurrencyConflictError(
                    "Mystery box drew an item that was unlocked concurrently",
                    {"item_id": item.item_id},
                )

            return MysteryBoxResult(
                purchase_id=record.purchase_id,
                item=item,
                charged_xp=cost,
                effect=applied,
                balance=snapshot(await self.ledger.get_account(account_id)),
            )

        result = await run_ledger_transaction(self.db, _open, operation="open_mystery_box")
        logger.info(
            f"Mystery box opened {account_id=} item_id={result.item.item_id} "
            f"charged_xp={result.charged_xp} remaining_xp={result.balance.spendable_xp}"
        )
        return result
