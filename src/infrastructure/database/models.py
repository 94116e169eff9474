"""SQLAlchemy ORM models for settlement entities."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    """Portal user; only the role is read by settlement."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="member", index=True)


class SavingsAccountModel(Base):
    """One savings balance per member."""

    __tablename__ = "savings"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_savings_balance_non_negative"),)

    member_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


class LoanModel(Base):
    """Persisted loan record."""

    __tablename__ = "loans"
    __table_args__ = (
        CheckConstraint("total_repaid >= 0", name="ck_loans_total_repaid_non_negative"),
        CheckConstraint("total_repaid <= total_amount", name="ck_loans_total_repaid_bounded"),
    )

    id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    member_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    loan_type: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_repaid: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    monthly_payment: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    last_settled_period: Mapped[str | None] = mapped_column(String(7), nullable=True)
    last_deduction_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


class CommodityOrderModel(Base):
    """Persisted marketplace order paid by monthly deductions."""

    __tablename__ = "commodity_orders"
    __table_args__ = (
        CheckConstraint("deductions_remaining >= 0", name="ck_orders_remaining_non_negative"),
    )

    id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    member_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    monthly_payment: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deductions_paid: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deductions_remaining: Mapped[int] = mapped_column(Integer, nullable=False)
    last_settled_period: Mapped[str | None] = mapped_column(String(7), nullable=True)
    last_deduction_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


class LedgerEntryModel(Base):
    """Savings transaction; one row per committed deduction."""

    __tablename__ = "savings_transactions"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    member_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    linked_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    period: Mapped[str] = mapped_column(String(7), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


class DeductionLogModel(Base):
    """Append-only audit trail of deduction attempts."""

    __tablename__ = "deduction_logs"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    member_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    linked_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    outcome: Mapped[str] = mapped_column(String(50), nullable=False)
    period: Mapped[str] = mapped_column(String(7), nullable=False)
    balance_before: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    balance_after: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    fully_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


class NotificationModel(Base):
    """In-app notification for a member or administrator."""

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="normal")
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
