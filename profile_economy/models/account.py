"""Account balance model."""
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    JSON,
    String,
)
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime, UTC
from profile_economy.database import Base
from profile_economy.models.base import get_uuid_column


class Account(Base):
    """Profile account holding every currency the economy mutates."""

    __tablename__ = "accounts"

    account_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    display_name = Column(String(80), nullable=True)
    title = Column(String(80), nullable=True)
    reputation = Column(Integer, default=0, nullable=False)
    experience = Column(Integer, default=0, nullable=False)  # Lifetime total, drives level
    spendable_xp = Column(Integer, default=0, nullable=False)
    bonus_quest_slots = Column(Integer, default=0, nullable=False)
    free_gift_credits = Column(Integer, default=0, nullable=False)
    achievements = Column(JSON, default=dict, nullable=False)  # achievement_id -> award metadata
    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    owned_items = relationship("OwnedItem", back_populates="account", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("reputation >= 0", name="ck_accounts_reputation_non_negative"),
        CheckConstraint("experience >= 0", name="ck_accounts_experience_non_negative"),
        CheckConstraint("spendable_xp >= 0", name="ck_accounts_spendable_xp_non_negative"),
        CheckConstraint("bonus_quest_slots >= 0", name="ck_accounts_bonus_quest_slots_non_negative"),
        CheckConstraint("free_gift_credits >= 0", name="ck_accounts_free_gift_credits_non_negative"),
    )

    @property
    def achievement_count(self) -> int:
        return len(self.achievements or {})

    def __repr__(self):
        return (f"<Account(account_id={self.account_id}, reputation={self.reputation}, "
                f"experience={self.experience}, spendable_xp={self.spendable_xp})>")
