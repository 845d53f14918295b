"""SQLAlchemy ORM models for obligation persistence."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class ObligationRow(Base):
    __tablename__ = "obligations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    title: Mapped[str] = mapped_column(String(80))
    kind: Mapped[str] = mapped_column(String(20), index=True)  # HOUSING on legacy rows
    due_day: Mapped[int] = mapped_column(Integer, default=1)
    billing_interval_months: Mapped[int] = mapped_column(Integer, default=1)
    start_month: Mapped[int] = mapped_column(Integer, default=1)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    estimate_min: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    estimate_max: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    # Mortgage
    mortgage_holder: Mapped[str] = mapped_column(String(60), default="")
    mortgage_kind: Mapped[str] = mapped_column(String(40), default="")
    remaining_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    initial_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    interest_rate: Mapped[Decimal] = mapped_column(Numeric(6, 3), default=0)
    has_monthly_fee: Mapped[bool] = mapped_column(Boolean, default=False)
    monthly_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)

    # Lifecycle
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    pause_periods: Mapped[list["PausePeriodRow"]] = relationship(
        back_populates="obligation", lazy="selectin", order_by="PausePeriodRow.start_date"
    )


class PausePeriodRow(Base):
    __tablename__ = "pause_periods"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    obligation_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("obligations.id"), index=True)
    start_date: Mapped[date] = mapped_column(Date)  # Month start
    end_date: Mapped[date] = mapped_column(Date)  # Month start, inclusive
    note: Mapped[str] = mapped_column(String(200), default="")

    obligation: Mapped["ObligationRow"] = relationship(back_populates="pause_periods")


class TermsHistoryRow(Base):
    __tablename__ = "terms_history"
    __table_args__ = (UniqueConstraint("obligation_id", "from_date"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    obligation_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("obligations.id"), index=True)
    from_date: Mapped[date] = mapped_column(Date, index=True)

    # NULL = not overridden by this snapshot
    amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    estimate_min: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    estimate_max: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    interest_rate: Mapped[Decimal | None] = mapped_column(Numeric(6, 3), nullable=True)
    has_monthly_fee: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    monthly_fee: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    remaining_balance: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    note: Mapped[str] = mapped_column(String(200), default="")


class PaymentRow(Base):
    __tablename__ = "payments"
    __table_args__ = (UniqueConstraint("obligation_id", "period_key", "kind"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    obligation_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("obligations.id"), index=True)
    period_key: Mapped[str] = mapped_column(String(7), index=True)  # YYYY-MM
    paid_date: Mapped[date] = mapped_column(Date, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    status: Mapped[str] = mapped_column(String(10), default="PAID")
    kind: Mapped[str] = mapped_column(String(10), default="MAIN")
    note: Mapped[str] = mapped_column(String(200), default="")
