"""
Account persistence.
A fixed set of named queries over the accounts table.
"""

from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from bank_api.models.account import Account


class AccountRepository:
    """Reads and writes Account rows through the request's session."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, account_id: int) -> Optional[Account]:
        return self.session.get(Account, account_id)

    def get_for_update(self, account_id: int) -> Optional[Account]:
        """
        Fetch a fresh copy of the account and lock its row until the
        surrounding transaction ends (SELECT ... FOR UPDATE).
        """
        stmt = (
            select(Account)
            .where(Account.account_id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_customer_name(self, customer_name: str, exclude_account_id: Optional[int] = None) -> Optional[Account]:
        """Exact, case-sensitive name match, optionally ignoring one account."""
        stmt = select(Account).where(Account.customer_name == customer_name)
        if exclude_account_id is not None:
            stmt = stmt.where(Account.account_id != exclude_account_id)
        return self.session.execute(stmt.limit(1)).scalar_one_or_none()

    def list_all(self) -> List[Account]:
        return list(self.session.execute(select(Account).order_by(Account.account_id)).scalars())

    def list_by_ids(self, account_ids: Iterable[int]) -> Dict[int, Account]:
        """Resolve many accounts in one query, keyed by id."""
        ids = set(account_ids)
        if not ids:
            return {}
        stmt = select(Account).where(Account.account_id.in_(ids))
        return {account.account_id: account for account in self.session.execute(stmt).scalars()}

    def add(self, account: Account) -> Account:
        self.session.add(account)
        self.session.flush()
        return account

    def update(self, account: Account) -> Account:
        self.session.add(account)
        self.session.flush()
        return account

    def delete(self, account_id: int) -> None:
        self.session.execute(delete(Account).where(Account.account_id == account_id))
