"""Database models."""
from profile_economy.models.base import ItemLifecycle, PurchaseSource, GiftPayment
from profile_economy.models.account import Account
from profile_economy.models.owned_item import OwnedItem
from profile_economy.models.purchase_record import PurchaseRecord
from profile_economy.models.active_boost import ActiveBoost
from profile_economy.models.gift import Gift
from profile_economy.models.streak_state import StreakState

__all__ = [
    "Account",
    "ActiveBoost",
    "Gift",
    "GiftPayment",
    "ItemLifecycle",
    "OwnedItem",
    "PurchaseRecord",
    "PurchaseSource",
    "StreakState",
]
