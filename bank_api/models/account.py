"""
Account database model.
Represents customer bank accounts in the system.
"""

from sqlalchemy import CheckConstraint, Column, Integer, Numeric, String

from bank_api.database import Base


class Account(Base):
    """
    Account table - stores customer name and running balance.
    The account id is supplied by the caller, not generated.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("total_balance >= 0", name="ck_accounts_total_balance_non_negative"),
    )

    account_id = Column(Integer, primary_key=True, autoincrement=False)
    customer_name = Column(String(100), unique=True, nullable=False)
    total_balance = Column(Numeric(precision=18, scale=2), nullable=False, default=0)

    def __repr__(self):
        return f"<Account(account_id={self.account_id}, customer={self.customer_name}, balance={self.total_balance})>"
