"""
Advanced tests for the bank account service.
Tests concurrency, stress, and edge cases.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from bank_api.core.exceptions import InsufficientBalanceError
from bank_api.database import Base, build_engine
from bank_api.models.account import Account
from bank_api.models.transaction import TransactionHistory
from bank_api.schemas.transaction import TransactionHistoryRequest
from bank_api.services.locks import AccountLockRegistry
from bank_api.services.transaction_service import TransactionService


@pytest.fixture
def file_sessions(tmp_path):
    """Session factory over a file database shared by worker threads."""
    engine = build_engine(f"sqlite:///{tmp_path / 'concurrency.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def locks():
    return AccountLockRegistry()


def seed(sessions, *accounts):
    with sessions() as session:
        for account_id, name, balance in accounts:
            session.add(Account(account_id=account_id, customer_name=name, total_balance=Decimal(balance)))
        session.commit()


def balance_of(sessions, account_id):
    with sessions() as session:
        return session.get(Account, account_id).total_balance


def ledger_count(sessions):
    with sessions() as session:
        return session.scalar(select(func.count()).select_from(TransactionHistory))


def submit(sessions, locks, from_id, to_id, transaction_type, amount):
    """Run one transaction on its own session, like one request would."""
    with sessions() as session:
        service = TransactionService(session, locks=locks)
        return service.create_transaction(
            TransactionHistoryRequest(
                from_account_id=from_id,
                to_account_id=to_id,
                transaction_type=transaction_type,
                amount=Decimal(amount),
            )
        )


def run_concurrently(count, fn, *args, max_workers=10):
    """Return (successes, insufficient-balance failures)."""
    successes, failures = 0, 0
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(fn, *args) for _ in range(count)]
        for future in as_completed(futures):
            try:
                future.result()
                successes += 1
            except InsufficientBalanceError:
                failures += 1
    return successes, failures


# ==================== CONCURRENCY TESTS ====================

def test_concurrent_withdrawals_never_overdraw(file_sessions, locks):
    """Ten withdrawals of 20 from 100: exactly five succeed."""
    seed(file_sessions, (1, "Alice", "100.00"))

    successes, failures = run_concurrently(10, submit, file_sessions, locks, 1, 1, "WTH", "20.00")

    assert successes == 5
    assert failures == 5
    assert balance_of(file_sessions, 1) == Decimal("0.00")
    assert ledger_count(file_sessions) == 5


def test_concurrent_transfers_same_account(file_sessions, locks):
    """Many transfers out of one account keep the total constant."""
    seed(file_sessions, (1, "Alice", "1000.00"), (2, "Bob", "0.00"))

    successes, failures = run_concurrently(20, submit, file_sessions, locks, 1, 2, "TRF", "10.00")

    assert successes == 20
    assert failures == 0
    assert balance_of(file_sessions, 1) == Decimal("800.00")
    assert balance_of(file_sessions, 2) == Decimal("200.00")


def test_concurrent_transfers_insufficient_funds(file_sessions, locks):
    """Only as many transfers succeed as the balance covers."""
    seed(file_sessions, (1, "Alice", "100.00"), (2, "Bob", "0.00"))

    successes, failures = run_concurrently(10, submit, file_sessions, locks, 1, 2, "TRF", "30.00")

    assert successes == 3
    assert failures == 7
    assert balance_of(file_sessions, 1) == Decimal("10.00")
    assert balance_of(file_sessions, 2) == Decimal("90.00")
    assert ledger_count(file_sessions) == 3


def test_concurrent_bidirectional_transfers(file_sessions, locks):
    """Opposite transfers between two accounts complete without deadlock."""
    seed(file_sessions, (1, "Alice", "500.00"), (2, "Bob", "500.00"))

    with ThreadPoolExecutor(max_workers=10) as executor:
        futures = [
            executor.submit(submit, file_sessions, locks, source, target, "TRF", "5.00")
            for _ in range(10)
            for source, target in ((1, 2), (2, 1))
        ]
        for future in as_completed(futures, timeout=60):
            future.result()

    assert balance_of(file_sessions, 1) == Decimal("500.00")
    assert balance_of(file_sessions, 2) == Decimal("500.00")
    assert ledger_count(file_sessions) == 20


def test_concurrent_deposits_and_withdrawals(file_sessions, locks):
    seed(file_sessions, (1, "Alice", "0.00"))

    with ThreadPoolExecutor(max_workers=10) as executor:
        deposits = [executor.submit(submit, file_sessions, locks, 999, 1, "DEP", "10.00") for _ in range(10)]
        for future in as_completed(deposits):
            future.result()

    successes, _ = run_concurrently(15, submit, file_sessions, locks, 1, 1, "WTH", "10.00")

    assert successes == 10
    assert balance_of(file_sessions, 1) == Decimal("0.00")


# ==================== EXTREME VALUE TESTS ====================

def test_very_large_transfer(file_sessions, locks):
    """Large amounts keep cent precision."""
    seed(file_sessions, (1, "Rich", "9999999999999.99"), (2, "Poor", "0.00"))

    submit(file_sessions, locks, 1, 2, "TRF", "9999999999999.98")

    assert balance_of(file_sessions, 1) == Decimal("0.01")
    assert balance_of(file_sessions, 2) == Decimal("9999999999999.98")


def test_very_small_transfer(file_sessions, locks):
    """Test minimum amount transfer (0.01)."""
    seed(file_sessions, (1, "Alice", "1.00"), (2, "Bob", "0.00"))

    submit(file_sessions, locks, 1, 2, "TRF", "0.01")

    assert balance_of(file_sessions, 1) == Decimal("0.99")
    assert balance_of(file_sessions, 2) == Decimal("0.01")


def test_many_small_transfers(file_sessions, locks):
    """Test many sequential small transfers."""
    seed(file_sessions, (1, "Alice", "10.00"), (2, "Bob", "0.00"))

    for _ in range(100):
        submit(file_sessions, locks, 1, 2, "TRF", "0.10")

    assert balance_of(file_sessions, 1) == Decimal("0.00")
    assert balance_of(file_sessions, 2) == Decimal("10.00")

    with pytest.raises(InsufficientBalanceError):
        submit(file_sessions, locks, 1, 2, "TRF", "0.01")


def test_decimal_precision(file_sessions, locks):
    """Amounts that are inexact in binary floating point stay exact."""
    seed(file_sessions, (1, "Alice", "0.30"), (2, "Bob", "0.00"))

    submit(file_sessions, locks, 1, 2, "TRF", "0.10")
    submit(file_sessions, locks, 1, 2, "TRF", "0.20")

    assert balance_of(file_sessions, 1) == Decimal("0.00")
    assert balance_of(file_sessions, 2) == Decimal("0.30")
