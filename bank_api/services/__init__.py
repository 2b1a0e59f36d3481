"""
Business services package.
"""

from bank_api.services.account_service import AccountService
from bank_api.services.locks import AccountLockRegistry, account_locks
from bank_api.services.transaction_service import EXTERNAL_DEPOSIT_LABEL, TransactionService

__all__ = [
    "AccountLockRegistry",
    "AccountService",
    "EXTERNAL_DEPOSIT_LABEL",
    "TransactionService",
    "account_locks",
]
