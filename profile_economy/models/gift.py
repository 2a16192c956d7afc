"""Gifts sent between accounts."""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String
import uuid
from datetime import datetime, UTC
from profile_economy.database import Base
from profile_economy.models.base import get_uuid_column, GiftPayment


class Gift(Base):
    """Gift whose cost was debited at send time; claimable exactly once."""

    __tablename__ = "gifts"

    gift_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    sender_id = get_uuid_column(
        ForeignKey("accounts.account_id", ondelete="CASCADE"), nullable=False, index=True
    )
    recipient_id = get_uuid_column(
        ForeignKey("accounts.account_id", ondelete="CASCADE"), nullable=False, index=True
    )
    gift_type = Column(String(32), nullable=False)
    gift_name = Column(String(80), nullable=False)
    rarity = Column(String(20), nullable=False)
    cost = Column(Integer, nullable=False)
    effect = Column(JSON, nullable=False)  # Serialized effect descriptor
    message = Column(String(500), nullable=True)
    paid_with = Column(String(20), default=GiftPayment.REPUTATION.value, nullable=False)
    is_claimed = Column(Boolean, default=False, nullable=False)
    claimed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False, index=True
    )

    def __repr__(self):
        return (f"<Gift(gift_id={self.gift_id}, gift_type={self.gift_type}, "
                f"is_claimed={self.is_claimed})>")
