"""Owned permanent unlocks."""
from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
from profile_economy.database import Base
from profile_economy.models.base import get_uuid_column


class OwnedItem(Base):
    """One row per permanent catalog item an account owns."""

    __tablename__ = "owned_items"

    account_id = get_uuid_column(
        ForeignKey("accounts.account_id", ondelete="CASCADE"), primary_key=True
    )
    item_id = Column(String(64), primary_key=True)
    acquired_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    account = relationship("Account", back_populates="owned_items")

    def __repr__(self):
        return f"<OwnedItem(account_id={self.account_id}, item_id={self.item_id})>"
