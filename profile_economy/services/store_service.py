"""XP store: listings, pricing status and purchases."""
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID
import logging

from profile_economy.config import get_settings
from profile_economy.models.base import PurchaseSource
from profile_economy.schemas.economy import (
    CatalogEntry,
    FlashSale,
    PricingStatus,
    PurchaseHistoryEntry,
    PurchaseReceipt,
    StoreCatalog,
)
from profile_economy.services.catalog import Catalog
from profile_economy.services.effect_applier import EffectApplier
from profile_economy.services.ledger_service import AccountLedger, snapshot
from profile_economy.services.pricing import (
    PricingContext,
    PricingRules,
    achievement_discount,
    flash_sale_ends_at,
    flash_sale_item,
    price,
)
from profile_economy.services.purchase_record_service import PurchaseRecordService
from profile_economy.services.unit_of_work import run_ledger_transaction
from profile_economy.utils.datetime_helpers import ensure_utc, utc_now
from profile_economy.utils.exceptions import AlreadyOwnedError, NotFoundError

logger = logging.getLogger(__name__)


class StoreService:
    """Coordinates pricing, debit, purchase record and effect for store purchases."""

    def __init__(
        self,
        db: AsyncSession,
        catalog: Catalog,
        clock: Callable[[], datetime] = utc_now,
        rules: Optional[PricingRules] = None,
    ):
        self.db = db
        self.catalog = catalog
        self.clock = clock
        self.rules = rules or PricingRules.from_settings(get_settings())
        self.ledger = AccountLedger(db)
        self.records = PurchaseRecordService(db)
        self.effects = EffectApplier(db, clock=clock)

    async def purchase(self, account_id: UUID, item_id: str) -> PurchaseReceipt:
        """Buy ``item_id`` for ``account_id``.

        Debit, purchase record and effect commit together or not at all.

        Raises:
            NotFoundError: unknown item or account.
            AlreadyOwnedError: permanent item the account already owns.
            InsufficientFundsError: spendable XP or reputation below the price.
            ConcurrencyConflictError: lost a race with another transaction.
        """
        item = self.catalog.get_item(item_id)
        if item is None:
            raise NotFoundError(f"Item not found: {item_id}", {"item_id": item_id})

        now = ensure_utc(self.clock())

        async def _purchase() -> PurchaseReceipt:
            account = await self.ledger.lock_account(account_id)

            if item.is_permanent and (
                await self.ledger.is_owned(account_id, item.item_id)
                or await self.records.is_owned(account_id, item.item_id)
            ):
                raise AlreadyOwnedError(f"Item already owned: {item.item_id}", {"item_id": item.item_id})

            context = PricingContext(
                purchase_count=await self.records.count_by_account(account_id),
                achievement_count=account.achievement_count,
            )
            quote = price(item, context, now, self.catalog, self.rules)

            await self.ledger.debit_or_raise(
                account_id, {"spendable_xp": quote.effective_xp, "reputation": quote.effective_rep}
            )
            record = await self.records.append(
                account_id=account_id,
                item_id=item.item_id,
                category=item.category,
                charged_xp=quote.effective_xp,
                charged_rep=quote.effective_rep,
                source=PurchaseSource.STORE,
                created_at=now,
            )
            applied = await self.effects.apply(account_id, item.effect)
            if not applied.granted:
                # Another transaction committed the unlock after our ownership check
                raise AlreadyOwnedError(f"Item already owned: {item.item_id}", {"item_id": item.item_id})

            balance = snapshot(await self.ledger.get_account(account_id))
            return PurchaseReceipt(
                purchase_id=record.purchase_id,
                item=item,
                charged_xp=quote.effective_xp,
                charged_rep=quote.effective_rep,
                flash_sale=quote.flash_sale,
                first_purchase=quote.first_purchase,
                achievement_discount=float(quote.achievement_discount),
                effect=applied,
                balance=balance,
            )

        receipt = await run_ledger_transaction(self.db, _purchase, operation="store_purchase")
        logger.info(
            f"Store purchase {account_id=} {item_id=} charged_xp={receipt.charged_xp} "
            f"charged_rep={receipt.charged_rep} flash_sale={receipt.flash_sale} "
            f"remaining_xp={receipt.remaining_xp}"
        )
        return receipt

    def get_flash_sale(self, now: Optional[datetime] = None) -> Optional[FlashSale]:
        now = ensure_utc(now or self.clock())
        item = flash_sale_item(self.catalog, now)
        if item is None:
            return None
        return FlashSale(
            item_id=item.item_id,
            discount=float(Decimal("1") - self.rules.flash_sale_multiplier),
            ends_at=flash_sale_ends_at(now),
        )

    async def get_catalog(self, account_id: Optional[UUID] = None) -> StoreCatalog:
        """Catalog with prices as ``account_id`` would pay them right now.

        Without an account the listing shows flash-sale prices only.
        """
        now = ensure_utc(self.clock())
        owned: set[str] = set()
        if account_id is not None:
            account = await self.ledger.get_account(account_id)
            context = PricingContext(
                purchase_count=await self.records.count_by_account(account_id),
                achievement_count=account.achievement_count,
            )
            owned = await self.ledger.owned_item_ids(account_id) | await self.records.purchased_item_ids(account_id)
        else:
            # Anonymous listing: no first-purchase or achievement discount
            context = PricingContext(purchase_count=1, achievement_count=0)

        entries = []
        for item in self.catalog.list_items():
            quote = price(item, context, now, self.catalog, self.rules)
            entries.append(CatalogEntry(
                item=item,
                effective_xp=quote.effective_xp,
                effective_rep=quote.effective_rep,
                owned=item.is_permanent and item.item_id in owned,
                flash_sale=quote.flash_sale,
            ))

        return StoreCatalog(
            entries=entries,
            flash_sale=self.get_flash_sale(now),
            first_purchase_eligible=account_id is not None and context.purchase_count == 0,
            achievement_discount_percent=self._discount_percent(context.achievement_count),
        )

    async def get_pricing_status(self, account_id: UUID) -> PricingStatus:
        account = await self.ledger.get_account(account_id)
        purchase_count = await self.records.count_by_account(account_id)
        return PricingStatus(
            first_purchase_eligible=purchase_count == 0,
            achievement_discount_percent=self._discount_percent(account.achievement_count),
            flash_sale=self.get_flash_sale(),
        )

    async def list_purchases(self, account_id: UUID, limit: int = 100) -> list[PurchaseHistoryEntry]:
        records = await self.records.list_by_account(account_id, limit=limit)
        return [
            PurchaseHistoryEntry(
                purchase_id=record.purchase_id,
                item_id=record.item_id,
                category=record.category,
                charged_xp=record.charged_xp,
                charged_rep=record.charged_rep,
                source=record.source,
                created_at=ensure_utc(record.created_at),
            )
            for record in records
        ]

    def _discount_percent(self, achievement_count: int) -> int:
        return int(achievement_discount(achievement_count, self.rules) * 100)
