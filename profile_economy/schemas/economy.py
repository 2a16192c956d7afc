"""Result schemas returned by economy services."""
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from profile_economy.schemas.base import BaseSchema
from profile_economy.schemas.catalog import CatalogItem


class BalanceSnapshot(BaseSchema):
    """Account currencies as committed by the operation that returned them."""
    account_id: UUID
    reputation: int
    experience: int
    spendable_xp: int
    level: int
    title: Optional[str] = None
    bonus_quest_slots: int = 0
    free_gift_credits: int = 0


class AppliedEffect(BaseSchema):
    """What the effect applier actually changed."""
    kind: str
    item_id: Optional[str] = None
    boost_type: Optional[str] = None
    multiplier: Optional[float] = None
    expires_at: Optional[datetime] = None
    extended: bool = False
    value: Optional[int] = None
    title: Optional[str] = None
    new_total: Optional[int] = None
    granted: bool = True  # False when a permanent unlock was already owned


class PurchaseReceipt(BaseSchema):
    purchase_id: UUID
    item: CatalogItem
    charged_xp: int
    charged_rep: int
    flash_sale: bool = False
    first_purchase: bool = False
    achievement_discount: float = 0.0
    effect: AppliedEffect
    balance: BalanceSnapshot

    @property
    def remaining_xp(self) -> int:
        return self.balance.spendable_xp


class PurchaseHistoryEntry(BaseSchema):
    purchase_id: UUID
    item_id: str
    category: str
    charged_xp: int
    charged_rep: int
    source: str
    created_at: datetime


class FlashSale(BaseSchema):
    item_id: str
    discount: float
    ends_at: datetime


class CatalogEntry(BaseSchema):
    """Catalog item as seen by one account at one instant."""
    item: CatalogItem
    effective_xp: int
    effective_rep: int
    owned: bool = False
    flash_sale: bool = False


class PricingStatus(BaseSchema):
    first_purchase_eligible: bool
    achievement_discount_percent: int
    flash_sale: Optional[FlashSale] = None


class StoreCatalog(BaseSchema):
    entries: list[CatalogEntry]
    flash_sale: Optional[FlashSale] = None
    first_purchase_eligible: bool = False
    achievement_discount_percent: int = 0


class MysteryBoxResult(BaseSchema):
    purchase_id: UUID
    item: CatalogItem
    charged_xp: int
    effect: AppliedEffect
    balance: BalanceSnapshot


class GiftSent(BaseSchema):
    gift_id: UUID
    gift_type: str
    recipient_id: UUID
    cost: int
    paid_with: str
    sender_balance: BalanceSnapshot


class GiftClaimResult(BaseSchema):
    gift_id: UUID
    effect: AppliedEffect
    reward: int
    balance: BalanceSnapshot


class GiftView(BaseSchema):
    gift_id: UUID
    gift_type: str
    gift_name: str
    rarity: str
    sender_id: UUID
    recipient_id: UUID
    cost: int
    effect: dict
    message: Optional[str] = None
    is_claimed: bool
    claimed_at: Optional[datetime] = None
    created_at: datetime


class GiftInbox(BaseSchema):
    received: list[GiftView]
    sent: list[GiftView]


class StreakView(BaseSchema):
    current_streak: int
    longest_streak: int
    last_streak_date: Optional[date] = None
    free_skip_count: int


class CheckInResult(BaseSchema):
    streak: StreakView
    bonus_reputation: int
    xp_awarded: int
    used_skip: bool
    day_advanced: bool
    balance: BalanceSnapshot


class ActiveBoostView(BaseSchema):
    boost_type: str
    multiplier: float
    expires_at: datetime
