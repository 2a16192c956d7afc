"""Utilities module - time helpers and the economy error taxonomy."""
from profile_economy.utils.datetime_helpers import ensure_utc, utc_now

__all__ = ["ensure_utc", "utc_now"]
