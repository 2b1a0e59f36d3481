"""
Transaction history API endpoints.
Handles deposits, withdrawals and transfers, and ledger queries.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from bank_api.database import get_db
from bank_api.schemas.transaction import TransactionHistoryRequest, TransactionHistoryView
from bank_api.services.transaction_service import TransactionService

router = APIRouter(prefix="/transactionhistory", tags=["Transaction History"])


def get_transaction_service(db: Session = Depends(get_db)) -> TransactionService:
    return TransactionService(db)


@router.post("", response_model=str, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction_data: TransactionHistoryRequest,
    service: TransactionService = Depends(get_transaction_service)
):
    """
    Process a deposit, withdrawal or transfer.

    Balances and the ledger row are written in one database transaction:
    the request either completes fully or leaves no trace.

    - **fromAccountId**: Source account (any positive placeholder for deposits)
    - **toAccountId**: Destination account
    - **transactionType**: DEP, WTH or TRF (case-insensitive)
    - **amount**: Amount (must be positive)
    """
    return service.create_transaction(transaction_data)


@router.get("/account/{to_account_id}", response_model=List[TransactionHistoryView])
def get_transaction_histories_by_account(
    to_account_id: int = Path(..., gt=0),
    from_date: Optional[datetime] = Query(None, alias="fromDate", description="Only rows on or after this time (UTC)"),
    to_date: Optional[datetime] = Query(None, alias="toDate", description="Only rows on or before this time (UTC)"),
    service: TransactionService = Depends(get_transaction_service)
):
    """
    Get all transactions credited to an account, newest first.
    """
    return service.get_transaction_histories_by_account(to_account_id, from_date=from_date, to_date=to_date)


@router.get("/{transaction_id}", response_model=TransactionHistoryView)
def get_transaction_history(
    transaction_id: int = Path(..., gt=0),
    service: TransactionService = Depends(get_transaction_service)
):
    """
    Get a single transaction by id.
    """
    return service.get_transaction_history(transaction_id)
