"""
Persistence layer package.
"""

from bank_api.repositories.account_repository import AccountRepository
from bank_api.repositories.transaction_repository import TransactionHistoryRepository

__all__ = ["AccountRepository", "TransactionHistoryRepository"]
