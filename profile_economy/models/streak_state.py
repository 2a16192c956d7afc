"""Daily check-in streak state."""
from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer
from datetime import datetime, UTC
from profile_economy.database import Base
from profile_economy.models.base import get_uuid_column


class StreakState(Base):
    """Consecutive-day check-in tracking for one account."""

    __tablename__ = "streak_states"

    account_id = get_uuid_column(
        ForeignKey("accounts.account_id", ondelete="CASCADE"), primary_key=True
    )
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_streak_date = Column(Date, nullable=True)
    free_skip_count = Column(Integer, default=0, nullable=False)
    last_check_in = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("free_skip_count >= 0", name="ck_streak_states_free_skip_non_negative"),
        CheckConstraint("longest_streak >= current_streak", name="ck_streak_states_longest_covers_current"),
    )

    def __repr__(self):
        return (f"<StreakState(account_id={self.account_id}, current={self.current_streak}, "
                f"longest={self.longest_streak}, last={self.last_streak_date})>")
