"""
Pydantic schemas for transaction history requests and responses.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, Field, field_validator

from bank_api.models.transaction import TransactionType
from bank_api.schemas.account import CamelModel

VALID_TRANSACTION_CODES = frozenset(member.value for member in TransactionType)


class TransactionHistoryRequest(CamelModel):
    """Schema for a deposit, withdrawal or transfer."""
    from_account_id: int = Field(..., gt=0, description="Source account (placeholder for deposits)")
    to_account_id: int = Field(..., gt=0, description="Destination account")
    transaction_type: TransactionType = Field(..., description="DEP, WTH or TRF (case-insensitive)")
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2, description="Amount (must be positive)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "fromAccountId": 1001,
                "toAccountId": 1002,
                "transactionType": "TRF",
                "amount": 250.00
            }
        }
    )

    @field_validator("transaction_type", mode="before")
    @classmethod
    def normalize_transaction_type(cls, value):
        if isinstance(value, TransactionType):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Transaction type is required")
        if len(value) != 3:
            raise ValueError("Transaction type must be exactly 3 characters")
        code = value.upper()
        if code not in VALID_TRANSACTION_CODES:
            raise ValueError("Transaction type must be DEP (Deposit), WTH (Withdrawal), or TRF (Transfer)")
        return code


class TransactionHistoryView(CamelModel):
    """Ledger row annotated with both customer names."""
    transaction_id: int
    from_account_id: int
    from_account_customer_name: str = ""
    to_account_id: int
    to_account_customer_name: str = ""
    transaction_type: TransactionType
    amount: Decimal
    transaction_date: datetime
