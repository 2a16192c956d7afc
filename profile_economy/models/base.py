"""Base utilities for SQLAlchemy models."""
from enum import Enum
import uuid
from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.sql import sqltypes


class ItemLifecycle(str, Enum):
    """Catalog item lifecycle."""
    PERMANENT = "permanent"
    CONSUMABLE = "consumable"


class PurchaseSource(str, Enum):
    """How a purchase record came to exist."""
    STORE = "store"
    MYSTERY_BOX = "mystery_box"


class GiftPayment(str, Enum):
    """What the sender spent on a gift."""
    REPUTATION = "reputation"
    FREE_CREDIT = "free_credit"


class AdaptiveUUID(sqltypes.TypeDecorator):
    """UUID stored natively on PostgreSQL and as lowercase hex elsewhere."""

    impl = sqltypes.String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PGUUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    @staticmethod
    def _coerce_uuid(value):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))

    def process_bind_param(self, value, dialect):
        value = self._coerce_uuid(value)
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value
        return value.hex

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self._coerce_uuid(value)


def get_uuid_column(*args, **kwargs):
    """Get a Column configured for UUID storage on any dialect.

    Example:
        account_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
        sender_id = get_uuid_column(ForeignKey("accounts.account_id"), nullable=False)
    """
    return Column(AdaptiveUUID(), *args, **kwargs)
