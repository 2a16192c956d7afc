"""Store pricing rules.

Everything here is a pure function of the catalog, a small snapshot of the
account and the current instant, so prices can be computed (and tested)
without a database.

Rules:
- One catalog entry per UTC hour is on flash sale (x0.5).
- An account with no purchases gets x0.8, unless the item is the flash sale.
- Each owned achievement takes 1% off, capped at 10%, on top of either.
- Results are floored to whole XP/REP.
"""
import hashlib
import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from profile_economy.config import Settings
from profile_economy.schemas.catalog import CatalogItem
from profile_economy.services.catalog import Catalog
from profile_economy.utils.datetime_helpers import ensure_utc, hour_window


@dataclass(frozen=True)
class PricingRules:
    flash_sale_multiplier: Decimal = Decimal("0.5")
    first_purchase_multiplier: Decimal = Decimal("0.8")
    achievement_discount_step: Decimal = Decimal("0.01")
    achievement_discount_cap: Decimal = Decimal("0.10")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PricingRules":
        # str() keeps 0.8 as Decimal("0.8") instead of its binary expansion
        return cls(
            flash_sale_multiplier=Decimal(str(settings.flash_sale_multiplier)),
            first_purchase_multiplier=Decimal(str(settings.first_purchase_multiplier)),
            achievement_discount_step=Decimal(str(settings.achievement_discount_step)),
            achievement_discount_cap=Decimal(str(settings.achievement_discount_cap)),
        )


@dataclass(frozen=True)
class PricingContext:
    """The slice of account state pricing depends on."""
    purchase_count: int = 0
    achievement_count: int = 0


@dataclass(frozen=True)
class PriceQuote:
    item_id: str
    effective_xp: int
    effective_rep: int
    multiplier: Decimal
    flash_sale: bool
    first_purchase: bool
    achievement_discount: Decimal


def flash_sale_index(now: datetime, catalog_size: int) -> int:
    """Index of the on-sale entry for the UTC hour containing ``now``."""
    if catalog_size <= 0:
        raise ValueError("catalog_size must be positive")
    now = ensure_utc(now)
    key = f"{now.year:04d}-{now.month:02d}-{now.day:02d}-{now.hour:02d}"
    digest = hashlib.sha256(key.encode("ascii")).hexdigest()
    return int(digest, 16) % catalog_size


def flash_sale_item(catalog: Catalog, now: datetime) -> Optional[CatalogItem]:
    items = catalog.list_items()
    if not items:
        return None
    return items[flash_sale_index(now, len(items))]


def flash_sale_ends_at(now: datetime) -> datetime:
    return hour_window(now)[1]


def achievement_discount(achievement_count: int, rules: PricingRules = PricingRules()) -> Decimal:
    if achievement_count <= 0:
        return Decimal("0")
    return min(rules.achievement_discount_step * achievement_count, rules.achievement_discount_cap)


def price(
    item: CatalogItem,
    context: PricingContext,
    now: datetime,
    catalog: Catalog,
    rules: PricingRules = PricingRules(),
) -> PriceQuote:
    """Compute what ``item`` costs for an account at ``now``."""
    on_sale = flash_sale_item(catalog, now)
    is_flash = on_sale is not None and on_sale.item_id == item.item_id
    is_first = context.purchase_count == 0 and not is_flash

    if is_flash:
        base = rules.flash_sale_multiplier
    elif is_first:
        base = rules.first_purchase_multiplier
    else:
        base = Decimal("1")

    discount = achievement_discount(context.achievement_count, rules)
    multiplier = base * (Decimal("1") - discount)

    return PriceQuote(
        item_id=item.item_id,
        effective_xp=math.floor(item.cost_xp * multiplier),
        effective_rep=math.floor(item.cost_rep * multiplier),
        multiplier=multiplier,
        flash_sale=is_flash,
        first_purchase=is_first,
        achievement_discount=discount,
    )
