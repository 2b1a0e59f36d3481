"""
Account service.
CRUD over accounts with customer-name uniqueness.
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from bank_api.core.exceptions import EntityAlreadyExistsError, EntityInUseError, EntityNotFoundError
from bank_api.database import run_in_transaction
from bank_api.models.account import Account
from bank_api.repositories.account_repository import AccountRepository
from bank_api.schemas.account import AccountRequest, AccountView
from bank_api.services.base import BaseService


class AccountService(BaseService):
    """Manages customer accounts."""

    def __init__(self, session, **kwargs):
        super().__init__(session, **kwargs)
        self.accounts = AccountRepository(session)

    def get_accounts(self, account_id: Optional[int] = None) -> List[AccountView]:
        """
        Return the account with ``account_id`` when it is positive (an empty
        list if it does not exist), otherwise every account.
        """
        if account_id is not None and account_id > 0:
            account = self.accounts.get_by_id(account_id)
            accounts = [account] if account is not None else []
        else:
            accounts = self.accounts.list_all()
        return [AccountView.model_validate(account) for account in accounts]

    def create_account(self, request: AccountRequest) -> str:
        """
        Insert a new account.

        Raises:
            EntityAlreadyExistsError: the customer name or account id is taken
        """
        def work():
            if self.accounts.get_by_customer_name(request.customer_name) is not None:
                raise EntityAlreadyExistsError(request.customer_name)
            if self.accounts.get_by_id(request.account_id) is not None:
                raise EntityAlreadyExistsError(request.account_id)
            self.accounts.add(
                Account(
                    account_id=request.account_id,
                    customer_name=request.customer_name,
                    total_balance=request.total_balance,
                )
            )

        with self.reporting("create_account", account_id=request.account_id):
            try:
                run_in_transaction(self.session, work)
            except IntegrityError as exc:
                # Lost a race against a concurrent insert of the same name or id
                conflict = self._find_conflict(request, check_id=True)
                if conflict is None:
                    raise
                raise conflict from exc

        self.logger.info("account_created", account_id=request.account_id)
        return f"Account for customer {request.customer_name} created successfully"

    def update_account(self, request: AccountRequest) -> str:
        """
        Overwrite the customer name and balance of an existing account.

        Raises:
            EntityNotFoundError: no account with this id
            EntityAlreadyExistsError: another account holds the new name
        """
        def work():
            account = self.accounts.get_for_update(request.account_id)
            if account is None:
                raise EntityNotFoundError(request.account_id)

            if self.accounts.get_by_customer_name(request.customer_name, exclude_account_id=request.account_id):
                raise EntityAlreadyExistsError(request.customer_name)

            account.customer_name = request.customer_name
            account.total_balance = request.total_balance
            self.accounts.update(account)

        with self.reporting("update_account", account_id=request.account_id):
            with self.locks.hold(request.account_id):
                try:
                    run_in_transaction(self.session, work)
                except IntegrityError as exc:
                    conflict = self._find_conflict(request, check_id=False)
                    if conflict is None:
                        raise
                    raise conflict from exc

        self.logger.info("account_updated", account_id=request.account_id)
        return f"Account for customer {request.customer_name} updated successfully"

    def delete_account(self, account_id: int) -> str:
        """
        Delete an account. Ledger rows are not inspected here; the
        restrict rule on the ledger's foreign key rejects the delete while
        rows still reference the account.

        Raises:
            EntityNotFoundError: no account with this id
            EntityInUseError: the account has transaction history
        """
        def work():
            if self.accounts.get_for_update(account_id) is None:
                raise EntityNotFoundError(account_id)
            self.accounts.delete(account_id)

        with self.reporting("delete_account", account_id=account_id):
            with self.locks.hold(account_id):
                try:
                    run_in_transaction(self.session, work)
                except IntegrityError as exc:
                    raise EntityInUseError(account_id) from exc

        self.logger.info("account_deleted", account_id=account_id)
        return f"Account {account_id} deleted successfully"

    def _find_conflict(self, request: AccountRequest, check_id: bool) -> Optional[EntityAlreadyExistsError]:
        """
        After a unique violation, name the account property another writer
        took first. None when neither is taken, so the original error stands.
        """
        if self.accounts.get_by_customer_name(request.customer_name, exclude_account_id=request.account_id):
            return EntityAlreadyExistsError(request.customer_name)
        if check_id and self.accounts.get_by_id(request.account_id) is not None:
            return EntityAlreadyExistsError(request.account_id)
        return None
