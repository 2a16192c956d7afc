"""Immutable store and gift catalog.

The catalog is built once at startup (``build_catalog``) and passed to every
service that needs it. Iteration order of ``list_items`` is the definition
order below; flash-sale selection and the mystery box depend on it, so new
items belong at the end.
"""
import logging
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from profile_economy.models.base import ItemLifecycle
from profile_economy.schemas.catalog import CatalogItem, GiftType
from profile_economy.schemas.effects import (
    GiftCredit,
    PermanentUnlock,
    QuestCredit,
    SkipCredit,
    StreakBoost,
    TimedBoost,
    TitleOverwrite,
)

logger = logging.getLogger(__name__)


def _permanent(item_id: str, name: str, description: str, category: str,
               cost_xp: int = 0, cost_rep: int = 0) -> dict:
    return {
        "item_id": item_id,
        "name": name,
        "description": description,
        "cost_xp": cost_xp,
        "cost_rep": cost_rep,
        "category": category,
        "lifecycle": ItemLifecycle.PERMANENT,
        "effect": PermanentUnlock(item_id=item_id),
    }


DEFAULT_STORE_ITEMS: tuple[dict, ...] = (
    # Profile customization
    _permanent("title_custom", "Custom Title", "Set a custom title on your profile", "profile", cost_xp=500),
    _permanent("bio_extended", "Extended Bio", "Write up to 500 chars in your bio (instead of 150)",
               "profile", cost_xp=300),
    _permanent("profile_theme_neon", "Neon Profile Theme", "Neon glow effect on your profile card",
               "profile", cost_xp=750),
    _permanent("profile_theme_gold", "Gold Profile Theme", "Gold shimmer effect on your profile card",
               "profile", cost_xp=1000),

    # Gameplay boosts
    {
        "item_id": "xp_boost_2x",
        "name": "2x XP Boost (24h)",
        "description": "Double XP for all actions for 24 hours",
        "cost_xp": 200,
        "category": "boost",
        "lifecycle": ItemLifecycle.CONSUMABLE,
        "duration_hours": 24,
        "effect": TimedBoost(boost_type="xp_boost_2x", multiplier=2.0, duration_hours=24),
    },
    {
        "item_id": "streak_shield",
        "name": "Streak Shield",
        "description": "Protect your streak from breaking for 1 missed day",
        "cost_xp": 150,
        "category": "boost",
        "lifecycle": ItemLifecycle.CONSUMABLE,
        "effect": SkipCredit(value=1),
    },
    {
        "item_id": "extra_daily_quest",
        "name": "Extra Daily Quest",
        "description": "Get 1 additional daily quest",
        "cost_xp": 100,
        "category": "boost",
        "lifecycle": ItemLifecycle.CONSUMABLE,
        "effect": QuestCredit(value=1),
    },

    # Letter upgrades
    _permanent("letter_template_basic_neon", "Basic Neon Template", "Neon-style letter template",
               "template", cost_xp=400),
    _permanent("letter_template_basic_retro", "Retro Terminal Template", "Classic terminal-style letter look",
               "template", cost_xp=400),

    # Reputation-gated items
    _permanent("exclusive_badge_veteran", "Veteran Badge", "Exclusive badge for reputation leaders",
               "badge", cost_rep=500),
    _permanent("exclusive_badge_legend", "Legend Badge", "Only the most reputable players can buy this",
               "badge", cost_rep=2000),
    _permanent("duel_taunt", "Custom Duel Taunt", "Set a custom taunt message that appears when you win",
               "duel", cost_xp=300, cost_rep=100),

    # Social
    _permanent("squad_banner", "Custom Squad Banner", "Upload a custom banner for your squad",
               "social", cost_xp=600),
    {
        "item_id": "free_gift_pack",
        "name": "Free Gift Pack (3 gifts)",
        "description": "Send 3 gifts without spending reputation",
        "cost_xp": 250,
        "category": "social",
        "lifecycle": ItemLifecycle.CONSUMABLE,
        "effect": GiftCredit(value=3),
    },
)

DEFAULT_GIFT_TYPES: tuple[dict, ...] = (
    {
        "gift_type": "energy",
        "name": "Energy",
        "icon": "⚡",
        "cost": 50,
        "rarity": "common",
        "description": "+1 day to the recipient's streak",
        "effect": StreakBoost(value=1),
    },
    {
        "gift_type": "protection",
        "name": "Protection",
        "icon": "\U0001f6e1️",
        "cost": 100,
        "rarity": "rare",
        "description": "Skip a day without losing the streak",
        "effect": SkipCredit(value=1),
    },
    {
        "gift_type": "boost",
        "name": "Boost",
        "icon": "\U0001f680",
        "cost": 150,
        "rarity": "rare",
        "description": "+50% experience for 24 hours",
        "effect": TimedBoost(boost_type="xp_boost_1_5x", multiplier=1.5, duration_hours=24),
    },
    {
        "gift_type": "legend",
        "name": "Legend",
        "icon": "\U0001f451",
        "cost": 500,
        "rarity": "legendary",
        "description": "Exclusive Legend title",
        "effect": TitleOverwrite(value="Legend", duration_hours=168),
    },
)


class Catalog:
    """Read-only view over store items and gift types."""

    __slots__ = ("_items", "_items_by_id", "_gift_types")

    def __init__(self, items: Iterable[CatalogItem], gift_types: Iterable[GiftType] = ()):
        items = tuple(items)
        by_id = {}
        for item in items:
            if item.item_id in by_id:
                raise ValueError(f"Duplicate catalog item id: {item.item_id}")
            by_id[item.item_id] = item

        gifts = {}
        for gift_type in gift_types:
            if gift_type.gift_type in gifts:
                raise ValueError(f"Duplicate gift type: {gift_type.gift_type}")
            gifts[gift_type.gift_type] = gift_type

        object.__setattr__(self, "_items", items)
        object.__setattr__(self, "_items_by_id", MappingProxyType(by_id))
        object.__setattr__(self, "_gift_types", MappingProxyType(gifts))

    def __setattr__(self, name, value):
        raise AttributeError("Catalog is immutable")

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._items_by_id

    def get_item(self, item_id: str) -> Optional[CatalogItem]:
        return self._items_by_id.get(item_id)

    def list_items(self) -> tuple[CatalogItem, ...]:
        return self._items

    def get_gift_type(self, gift_type: str) -> Optional[GiftType]:
        return self._gift_types.get(gift_type)

    def list_gift_types(self) -> tuple[GiftType, ...]:
        return tuple(self._gift_types.values())

    @property
    def gift_types(self) -> Mapping[str, GiftType]:
        return self._gift_types


def build_catalog(
    items: Iterable[dict] = DEFAULT_STORE_ITEMS,
    gift_types: Iterable[dict] = DEFAULT_GIFT_TYPES,
) -> Catalog:
    """Validate raw configuration and freeze it into a ``Catalog``."""
    catalog = Catalog(
        (CatalogItem.model_validate(item) for item in items),
        (GiftType.model_validate(gift) for gift in gift_types),
    )
    logger.info(f"Catalog loaded: items={len(catalog)}, gift_types={len(catalog.gift_types)}")
    return catalog
