from profile_economy.services.catalog import Catalog, build_catalog, DEFAULT_STORE_ITEMS, DEFAULT_GIFT_TYPES
from profile_economy.services.ledger_service import AccountLedger
from profile_economy.services.unit_of_work import run_ledger_transaction, retry_on_conflict
from profile_economy.services.pricing import PricingContext, PricingRules, PriceQuote, price
from profile_economy.services.purchase_record_service import PurchaseRecordService
from profile_economy.services.boost_service import BoostService
from profile_economy.services.effect_applier import EffectApplier
from profile_economy.services.store_service import StoreService
from profile_economy.services.gift_service import GiftService
from profile_economy.services.streak import advance_streak, StreakTransition, STREAK_MILESTONES
from profile_economy.services.streak_service import StreakService
from profile_economy.services.mystery_box_service import MysteryBoxService
from profile_economy.services.levels import calculate_level

__all__ = [
    "AccountLedger",
    "BoostService",
    "Catalog",
    "DEFAULT_GIFT_TYPES",
    "DEFAULT_STORE_ITEMS",
    "EffectApplier",
    "GiftService",
    "MysteryBoxService",
    "PriceQuote",
    "PricingContext",
    "PricingRules",
    "PurchaseRecordService",
    "STREAK_MILESTONES",
    "StoreService",
    "StreakService",
    "StreakTransition",
    "advance_streak",
    "build_catalog",
    "calculate_level",
    "price",
    "retry_on_conflict",
    "run_ledger_transaction",
]
