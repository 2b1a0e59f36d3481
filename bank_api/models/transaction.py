"""
Transaction history database model.
Immutable ledger rows documenting completed balance mutations.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    Numeric,
    func,
)

from bank_api.database import Base


class TransactionType(str, enum.Enum):
    """Three-letter transaction codes."""
    DEPOSIT = "DEP"
    WITHDRAWAL = "WTH"
    TRANSFER = "TRF"


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DATETIME column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TransactionHistory(Base):
    """
    TransactionsHistory table - one row per deposit, withdrawal or transfer.

    from_account_id carries no foreign key: deposits store a caller-supplied
    placeholder there. Deleting an account that still has incoming rows is
    rejected by the restrict rule on to_account_id.
    """
    __tablename__ = "transactions_history"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_history_amount_positive"),
    )

    transaction_id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    from_account_id = Column(Integer, nullable=False)
    to_account_id = Column(
        Integer,
        ForeignKey("accounts.account_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    transaction_type = Column(
        SQLEnum(
            TransactionType,
            name="transaction_type",
            native_enum=False,
            length=3,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    )
    amount = Column(Numeric(precision=18, scale=2), nullable=False)
    transaction_date = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )

    def __repr__(self):
        return (
            f"<TransactionHistory(id={self.transaction_id}, type={self.transaction_type}, "
            f"from={self.from_account_id}, to={self.to_account_id}, amount={self.amount})>"
        )
