"""
Transaction service.

Executes deposits, withdrawals and transfers against account balances and
records each one as a ledger row. Every pipeline is linear:

    validate -> read account(s) -> compute -> write account(s) -> write ledger -> message

and runs as a single database transaction while holding the locks of the
accounts it touches. A failure at any step rolls back the whole pipeline.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from bank_api.core.exceptions import (
    EntityNotFoundError,
    InsufficientBalanceError,
    InvalidAccountError,
    InvalidArgumentError,
    SameAccountTransactionError,
)
from bank_api.database import run_in_transaction
from bank_api.models.account import Account
from bank_api.models.transaction import TransactionHistory, TransactionType, utcnow
from bank_api.repositories.account_repository import AccountRepository
from bank_api.repositories.transaction_repository import TransactionHistoryRepository
from bank_api.schemas.transaction import TransactionHistoryRequest, TransactionHistoryView
from bank_api.services.base import BaseService

# Source name shown for deposits, whose source is outside the bank
EXTERNAL_DEPOSIT_LABEL = "Depósito externo"

PipelineResult = Tuple[int, str]


class TransactionService(BaseService):
    """Processes transactions and lists ledger rows."""

    def __init__(self, session, **kwargs):
        super().__init__(session, **kwargs)
        self.accounts = AccountRepository(session)
        self.ledger = TransactionHistoryRepository(session)
        self._pipelines: Dict[TransactionType, Callable[[TransactionHistoryRequest], PipelineResult]] = {
            TransactionType.DEPOSIT: self._process_deposit,
            TransactionType.WITHDRAWAL: self._process_withdrawal,
            TransactionType.TRANSFER: self._process_transfer,
        }

    def create_transaction(self, request: TransactionHistoryRequest) -> str:
        """
        Execute a deposit, withdrawal or transfer and return a
        human-readable result message.

        Raises:
            SameAccountTransactionError: transfer to the source account
            InvalidAccountError: a referenced account does not exist
            InsufficientBalanceError: the source balance is below the amount
            InvalidArgumentError: unknown transaction type
        """
        context = {
            "transaction_type": str(getattr(request.transaction_type, "value", request.transaction_type)),
            "from_account_id": request.from_account_id,
            "to_account_id": request.to_account_id,
        }
        with self.reporting("create_transaction", **context):
            if (request.transaction_type == TransactionType.TRANSFER
                    and request.from_account_id == request.to_account_id):
                raise SameAccountTransactionError()

            try:
                pipeline = self._pipelines[TransactionType(request.transaction_type)]
            except ValueError:
                raise InvalidArgumentError(f"Invalid transaction type: {request.transaction_type}") from None

            with self.locks.hold(*self._touched_accounts(request)):
                try:
                    transaction_id, message = run_in_transaction(self.session, lambda: pipeline(request))
                except IntegrityError as exc:
                    # Destination deleted between the existence check and the ledger insert
                    raise InvalidAccountError(
                        f"Account {request.to_account_id} does not exist. Check the account number and try again."
                    ) from exc

        self.logger.info(
            "transaction_created",
            transaction_id=transaction_id,
            amount=str(request.amount),
            **context,
        )
        return message

    def get_transaction_histories_by_account(
        self,
        to_account_id: int,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
    ) -> List[TransactionHistoryView]:
        """
        Ledger rows credited to ``to_account_id``, newest first, with the
        destination and source customer names.

        Raises:
            EntityNotFoundError: the destination account does not exist
        """
        with self.reporting("list_transactions", to_account_id=to_account_id):
            if self.accounts.get_by_id(to_account_id) is None:
                raise EntityNotFoundError(to_account_id)

            rows = self.ledger.list_by_to_account(to_account_id, from_date=from_date, to_date=to_date)
            sources = self.accounts.list_by_ids(
                row.from_account_id for row, _ in rows
                if row.transaction_type != TransactionType.DEPOSIT
            )
            return [self._to_view(row, to_customer_name, sources) for row, to_customer_name in rows]

    def get_transaction_history(self, transaction_id: int) -> TransactionHistoryView:
        """
        Raises:
            EntityNotFoundError: no ledger row with this id
        """
        with self.reporting("get_transaction", transaction_id=transaction_id):
            row = self.ledger.get_by_id(transaction_id)
            if row is None:
                raise EntityNotFoundError(transaction_id, entity="Transaction")

            account_ids = {row.to_account_id}
            if row.transaction_type != TransactionType.DEPOSIT:
                account_ids.add(row.from_account_id)
            accounts = self.accounts.list_by_ids(account_ids)

            destination = accounts.get(row.to_account_id)
            return self._to_view(row, destination.customer_name if destination else "", accounts)

    # Pipelines. Each runs inside run_in_transaction and returns
    # (transaction_id, message).

    def _process_deposit(self, request: TransactionHistoryRequest) -> PipelineResult:
        to_account = self.accounts.get_for_update(request.to_account_id)
        if to_account is None:
            raise InvalidAccountError(
                f"Account {request.to_account_id} does not exist. Check the account number and try again."
            )

        to_account.total_balance += request.amount
        self.accounts.update(to_account)

        created = self.ledger.add(self._new_ledger_row(request))

        return created.transaction_id, (
            f"Deposit successful. ${request.amount:,.2f} credited to account {request.to_account_id}. "
            f"Transaction ID: {created.transaction_id}"
        )

    def _process_withdrawal(self, request: TransactionHistoryRequest) -> PipelineResult:
        from_account = self.accounts.get_for_update(request.from_account_id)
        if from_account is None:
            raise InvalidAccountError(
                f"Account {request.from_account_id} does not exist. Check the account number and try again."
            )

        # The ledger row references to_account_id, so it must name a real account
        if (request.to_account_id != request.from_account_id
                and self.accounts.get_by_id(request.to_account_id) is None):
            raise InvalidAccountError(f"Destination account {request.to_account_id} does not exist.")

        self._ensure_funds(from_account, request)

        from_account.total_balance -= request.amount
        self.accounts.update(from_account)

        created = self.ledger.add(self._new_ledger_row(request))

        return created.transaction_id, (
            f"Withdrawal successful. ${request.amount:,.2f} debited from account {request.from_account_id}. "
            f"Remaining balance: ${from_account.total_balance:,.2f}. "
            f"Transaction ID: {created.transaction_id}"
        )

    def _process_transfer(self, request: TransactionHistoryRequest) -> PipelineResult:
        # Lock rows in ascending id order, same as the in-process locks
        locked = {
            account_id: self.accounts.get_for_update(account_id)
            for account_id in sorted({request.from_account_id, request.to_account_id})
        }
        from_account = locked[request.from_account_id]
        to_account = locked[request.to_account_id]

        if from_account is None:
            raise InvalidAccountError(f"Source account {request.from_account_id} does not exist.")
        if to_account is None:
            raise InvalidAccountError(f"Destination account {request.to_account_id} does not exist.")

        self._ensure_funds(from_account, request)

        from_account.total_balance -= request.amount
        to_account.total_balance += request.amount

        # Debit first, then credit
        self.accounts.update(from_account)
        self.accounts.update(to_account)

        created = self.ledger.add(self._new_ledger_row(request))

        return created.transaction_id, (
            f"Transfer successful. ${request.amount:,.2f} transferred from account {request.from_account_id} "
            f"to account {request.to_account_id}. Transaction ID: {created.transaction_id}"
        )

    @staticmethod
    def _ensure_funds(account: Account, request: TransactionHistoryRequest) -> None:
        if account.total_balance < request.amount:
            raise InsufficientBalanceError(
                f"Insufficient balance in account {account.account_id}. "
                f"Balance: {account.total_balance:,.2f}, Required: {request.amount:,.2f}"
            )

    @staticmethod
    def _touched_accounts(request: TransactionHistoryRequest) -> Tuple[int, ...]:
        """Accounts whose balance the request may change."""
        if request.transaction_type == TransactionType.DEPOSIT:
            return (request.to_account_id,)
        if request.transaction_type == TransactionType.WITHDRAWAL:
            return (request.from_account_id,)
        return (request.from_account_id, request.to_account_id)

    @staticmethod
    def _new_ledger_row(request: TransactionHistoryRequest) -> TransactionHistory:
        return TransactionHistory(
            from_account_id=request.from_account_id,
            to_account_id=request.to_account_id,
            transaction_type=request.transaction_type,
            amount=request.amount,
            transaction_date=utcnow(),
        )

    @staticmethod
    def _to_view(row: TransactionHistory, to_customer_name: str, sources: Dict[int, Account]) -> TransactionHistoryView:
        if row.transaction_type == TransactionType.DEPOSIT:
            from_customer_name = EXTERNAL_DEPOSIT_LABEL
        else:
            source = sources.get(row.from_account_id)
            from_customer_name = source.customer_name if source is not None else ""

        return TransactionHistoryView(
            transaction_id=row.transaction_id,
            from_account_id=row.from_account_id,
            from_account_customer_name=from_customer_name,
            to_account_id=row.to_account_id,
            to_account_customer_name=to_customer_name,
            transaction_type=row.transaction_type,
            amount=row.amount,
            transaction_date=row.transaction_date,
        )
