"""
Account API endpoints.
Handles account listing, creation, update and deletion.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from bank_api.database import get_db
from bank_api.schemas.account import AccountRequest, AccountView
from bank_api.services.account_service import AccountService

router = APIRouter(prefix="/account", tags=["Accounts"])


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)


@router.get("", response_model=List[AccountView])
def get_accounts(
    account_id: Optional[int] = Query(None, alias="accountId", description="Return only this account when positive"),
    service: AccountService = Depends(get_account_service)
):
    """
    List accounts.

    - **accountId**: optional; a positive id returns at most one account
    """
    return service.get_accounts(account_id)


@router.post("", response_model=str, status_code=status.HTTP_201_CREATED)
def create_account(
    account_data: AccountRequest,
    service: AccountService = Depends(get_account_service)
):
    """
    Create a new account.

    - **accountId**: Unique identifier for the account
    - **customerName**: Name of the account owner (unique)
    - **totalBalance**: Starting balance
    """
    return service.create_account(account_data)


@router.put("", response_model=str)
def update_account(
    account_data: AccountRequest,
    service: AccountService = Depends(get_account_service)
):
    """
    Overwrite the customer name and balance of an existing account.
    """
    return service.update_account(account_data)


@router.delete("/{account_id}", response_model=str)
def delete_account(
    account_id: int = Path(..., gt=0),
    service: AccountService = Depends(get_account_service)
):
    """
    Delete an account.
    """
    return service.delete_account(account_id)
