"""Append-only purchase history."""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
import uuid
from datetime import datetime, UTC
from profile_economy.database import Base
from profile_economy.models.base import get_uuid_column, PurchaseSource


class PurchaseRecord(Base):
    """Completed purchase; charged amounts are what was actually debited."""

    __tablename__ = "purchase_records"

    purchase_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    account_id = get_uuid_column(
        ForeignKey("accounts.account_id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id = Column(String(64), nullable=False)
    category = Column(String(32), nullable=False)
    charged_xp = Column(Integer, default=0, nullable=False)
    charged_rep = Column(Integer, default=0, nullable=False)
    source = Column(String(20), default=PurchaseSource.STORE.value, nullable=False)
    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False, index=True
    )

    __table_args__ = (
        Index("ix_purchase_records_account_item", "account_id", "item_id"),
    )

    def __repr__(self):
        return (f"<PurchaseRecord(purchase_id={self.purchase_id}, item_id={self.item_id}, "
                f"charged_xp={self.charged_xp}, charged_rep={self.charged_rep})>")
