"""
Pydantic schemas package.
"""

from bank_api.schemas.account import AccountRequest, AccountView, CamelModel
from bank_api.schemas.transaction import TransactionHistoryRequest, TransactionHistoryView

__all__ = [
    "AccountRequest",
    "AccountView",
    "CamelModel",
    "TransactionHistoryRequest",
    "TransactionHistoryView",
]
