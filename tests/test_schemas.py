"""
Tests for request validation.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from bank_api.models.transaction import TransactionType
from bank_api.schemas.account import AccountRequest
from bank_api.schemas.transaction import TransactionHistoryRequest


def transaction(**overrides):
    data = {"fromAccountId": 1, "toAccountId": 2, "transactionType": "TRF", "amount": "10.00"}
    data.update(overrides)
    return TransactionHistoryRequest.model_validate(data)


@pytest.mark.parametrize("raw, expected", [
    ("DEP", TransactionType.DEPOSIT),
    ("wth", TransactionType.WITHDRAWAL),
    ("Trf", TransactionType.TRANSFER),
])
def test_transaction_type_is_normalized(raw, expected):
    assert transaction(transactionType=raw).transaction_type == expected


@pytest.mark.parametrize("raw, error", [
    ("", "Transaction type is required"),
    ("   ", "Transaction type is required"),
    ("TR", "exactly 3 characters"),
    ("TRFX", "exactly 3 characters"),
    ("XYZ", "DEP (Deposit), WTH (Withdrawal), or TRF (Transfer)"),
])
def test_transaction_type_rejections(raw, error):
    with pytest.raises(ValidationError) as excinfo:
        transaction(transactionType=raw)
    assert error in str(excinfo.value)


def test_amount_must_be_positive_with_two_decimals():
    assert transaction(amount="0.01").amount == Decimal("0.01")
    for amount in ("0", "-1", "1.001"):
        with pytest.raises(ValidationError):
            transaction(amount=amount)


def test_account_ids_must_be_positive():
    with pytest.raises(ValidationError):
        transaction(fromAccountId=0)
    with pytest.raises(ValidationError):
        transaction(toAccountId=-3)


def test_account_request_rules():
    request = AccountRequest.model_validate({"accountId": 1, "customerName": "Ana", "totalBalance": 0})
    assert request.total_balance == Decimal("0")

    with pytest.raises(ValidationError, match="Customer name is required"):
        AccountRequest(account_id=1, customer_name="  ", total_balance=Decimal("1"))
    with pytest.raises(ValidationError):
        AccountRequest(account_id=1, customer_name="Ana", total_balance=Decimal("-0.01"))
    with pytest.raises(ValidationError):
        AccountRequest(account_id=0, customer_name="Ana", total_balance=Decimal("1"))
