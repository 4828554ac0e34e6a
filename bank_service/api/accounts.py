"""
Account API endpoints.

The API layer is thin: it parses requests, builds a service
around the request's session and shapes the response. Business
errors propagate to the exception handlers registered in
bank_service.main, which turn them into status codes.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bank_service.models.base import get_db
from bank_service.services.account_service import AccountService
from bank_service.services.transaction_service import TransactionService
from bank_service.schemas.account import (
    AccountCreate,
    AccountRename,
    AccountInfo,
    AccountDetails,
)
from bank_service.schemas.transaction import (
    DepositRequest,
    WithdrawalRequest,
    TransferRequest,
)

router = APIRouter(prefix="/api/accounts", tags=["Accounts"])


# --- Account Endpoints ---

@router.post("", response_model=AccountInfo, status_code=201)
def open_account(
    request: AccountCreate,
    db: Session = Depends(get_db),
):
    """Open a new account with a zero balance."""
    return AccountService(db).create_account(request)


@router.get("", response_model=list[AccountInfo])
def list_accounts(
    page: int | None = Query(default=None, ge=0),
    page_size: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    """
    List accounts.

    Pass both page (0-based) and page_size to get one page;
    otherwise every account is returned.
    """
    return AccountService(db).list_accounts(page, page_size)


@router.get("/by-name/{name}", response_model=AccountDetails)
def show_account_by_name(
    name: str,
    db: Session = Depends(get_db),
):
    return AccountService(db).get_account_by_name(name)


@router.delete("/by-name/{name}", status_code=204)
def close_account_by_name(
    name: str,
    db: Session = Depends(get_db),
):
    AccountService(db).delete_account_by_name(name)


@router.post("/by-name/{name}/soft", status_code=204)
def deactivate_account_by_name(
    name: str,
    db: Session = Depends(get_db),
):
    AccountService(db).deactivate_account_by_name(name)


@router.get("/{account_id}", response_model=AccountDetails)
def show_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Get account details."""
    return AccountService(db).get_account(account_id)


@router.put("/{account_id}", response_model=AccountInfo)
def rename_account(
    account_id: int,
    request: AccountRename,
    db: Session = Depends(get_db),
):
    """Rename an account. Requires the account's pin."""
    return AccountService(db).rename_account(account_id, request)


@router.delete("/{account_id}", status_code=204)
def close_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Delete an account permanently."""
    AccountService(db).delete_account(account_id)


@router.post("/{account_id}/soft", status_code=204)
def deactivate_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Mark an account as deleted without removing it."""
    AccountService(db).deactivate_account(account_id)


# --- Money Endpoints ---

@router.post("/{account_id}/deposit", response_model=AccountInfo)
def deposit(
    account_id: int,
    request: DepositRequest,
    db: Session = Depends(get_db),
):
    """Deposit money into an account."""
    return TransactionService(db).deposit(account_id, request)


@router.post("/{account_id}/withdraw", response_model=AccountInfo)
def withdraw(
    account_id: int,
    request: WithdrawalRequest,
    db: Session = Depends(get_db),
):
    """Withdraw money from an account."""
    return TransactionService(db).withdraw(account_id, request)


@router.post("/{account_id}/transfer", response_model=AccountInfo)
def transfer(
    account_id: int,
    request: TransferRequest,
    db: Session = Depends(get_db),
):
    """Transfer money to the account named in the request."""
    return TransactionService(db).transfer(account_id, request)
