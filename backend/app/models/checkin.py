"""Check-in models."""

from datetime import date, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class CheckinState(Base, TimestampMixin):
    """Current check-in record, one row per user."""

    __tablename__ = "checkin_states"

    user_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )

    last_checkin_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        comment="Date of the most recent check-in (configured timezone)",
    )

    current_streak: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    total_checkins: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    currency_balance: Mapped[int] = mapped_column(
        BigInteger,
        default=0,
        nullable=False,
    )

    total_currency_earned: Mapped[int] = mapped_column(
        BigInteger,
        default=0,
        nullable=False,
    )

    has_loyalty_badge: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    loyal_since: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        comment="Date the loyalty badge was granted",
    )

    def __repr__(self) -> str:
        return f"<CheckinState user={self.user_id} streak={self.current_streak}>"


class DailyCheckin(Base):
    """One successful daily check-in."""

    __tablename__ = "daily_checkins"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )

    checkin_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    # Streak after this check-in
    streak_days: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )

    reward_amount: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    # daily, currency, loyalty_badge
    reward_type: Mapped[str] = mapped_column(
        String(20),
        default="daily",
        nullable=False,
    )

    milestone_label: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    streak_broken: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    checked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    __table_args__ = (
        # At most one check-in per user per day
        UniqueConstraint("user_id", "checkin_date", name="uq_user_checkin_date"),
        Index("ix_checkin_user_date", "user_id", "checkin_date"),
    )

    def __repr__(self) -> str:
        return f"<DailyCheckin user={self.user_id} date={self.checkin_date}>"
