"""
Transaction ledger persistence.
Rows are only ever inserted and read; there is no update or delete.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from bank_api.models.account import Account
from bank_api.models.transaction import TransactionHistory


class TransactionHistoryRepository:
    """Appends and queries TransactionHistory rows."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, transaction: TransactionHistory) -> TransactionHistory:
        """Insert the row and flush so its generated id is available."""
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def get_by_id(self, transaction_id: int) -> Optional[TransactionHistory]:
        return self.session.get(TransactionHistory, transaction_id)

    def list_by_to_account(
        self,
        to_account_id: int,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
    ) -> List[Tuple[TransactionHistory, str]]:
        """
        Rows credited to ``to_account_id``, newest first, each paired with
        the destination customer name.
        """
        stmt = (
            select(TransactionHistory, Account.customer_name)
            .join(Account, TransactionHistory.to_account_id == Account.account_id)
            .where(TransactionHistory.to_account_id == to_account_id)
        )
        if from_date is not None:
            stmt = stmt.where(TransactionHistory.transaction_date >= from_date)
        if to_date is not None:
            stmt = stmt.where(TransactionHistory.transaction_date <= to_date)
        stmt = stmt.order_by(
            TransactionHistory.transaction_date.desc(),
            TransactionHistory.transaction_id.desc(),
        )
        return [(row, customer_name) for row, customer_name in self.session.execute(stmt).all()]
