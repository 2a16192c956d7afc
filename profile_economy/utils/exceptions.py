"""Economy error taxonomy.

Every failure raised by a ledger operation derives from ``EconomyError`` and
carries a stable ``code`` plus a ``details`` dict (required/available amounts,
ids) so the calling layer can surface it without parsing messages. Only
``ConcurrencyConflictError`` is retryable.
"""
from typing import Any, Dict, Optional


class EconomyError(RuntimeError):
    """Base exception for economy operations."""

    code = "ECONOMY_ERROR"
    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.details}


class InsufficientFundsError(EconomyError):
    """Raised when a conditional debit finds less than the required amount."""

    code = "INSUFFICIENT_FUNDS"

    def __init__(self, currency: str, required: int, available: int):
        super().__init__(
            f"Insufficient {currency}: need {required}, have {available}",
            {"currency": currency, "required": required, "available": available},
        )
        self.currency = currency
        self.required = required
        self.available = available


class AlreadyOwnedError(EconomyError):
    code = "ALREADY_OWNED"


class AlreadyClaimedError(EconomyError):
    code = "ALREADY_CLAIMED"


class NotFoundError(EconomyError):
    code = "NOT_FOUND"


class ForbiddenError(EconomyError):
    code = "FORBIDDEN"


class SelfGiftError(EconomyError):
    code = "SELF_GIFT"


class InvalidGiftTypeError(EconomyError):
    code = "INVALID_GIFT_TYPE"


class InvalidEffectError(EconomyError):
    """Raised for malformed or unrecognized effect descriptors."""

    code = "INVALID_EFFECT"


class ConcurrencyConflictError(EconomyError):
    """Lock wait, deadlock or serialization failure; safe to retry."""

    code = "CONCURRENCY_CONFLICT"
    retryable = True
