"""
Database models package.
"""

from bank_api.models.account import Account
from bank_api.models.transaction import TransactionHistory, TransactionType

__all__ = ["Account", "TransactionHistory", "TransactionType"]
