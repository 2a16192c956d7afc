"""Time-bounded boosts granted by consumables and gifts."""
from sqlalchemy import Column, DateTime, Float, ForeignKey, String, UniqueConstraint
import uuid
from datetime import datetime, UTC
from profile_economy.database import Base
from profile_economy.models.base import get_uuid_column


class ActiveBoost(Base):
    """At most one row per (account, boost type); expiry only moves forward."""

    __tablename__ = "active_boosts"

    boost_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    account_id = get_uuid_column(
        ForeignKey("accounts.account_id", ondelete="CASCADE"), nullable=False, index=True
    )
    boost_type = Column(String(50), nullable=False)
    multiplier = Column(Float, default=1.0, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("account_id", "boost_type", name="uq_active_boosts_account_type"),
    )

    def __repr__(self):
        return (f"<ActiveBoost(account_id={self.account_id}, boost_type={self.boost_type}, "
                f"expires_at={self.expires_at})>")
