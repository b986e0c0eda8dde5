"""
Account and money movement endpoints
"""

from datetime import datetime, timezone
from typing import List
from fastapi import APIRouter, HTTPException, Depends, Response, status

from .dependencies import get_ledger
from .schemas import (
    AccountResponse,
    CreateAccountRequest,
    MessageResponse,
    RegisterTransactionRequest,
    ReplaceAccountRequest,
    StatementRequest,
    TransactionResponse,
    TransferRequest,
    UpdateAccountRequest,
)
from ..config import get_config
from ..exceptions import LedgerError, NotFoundError
from ..ledger import Ledger
from ..logging_config import get_logger


router = APIRouter()
logger = get_logger("account_service.api")


@router.get("", response_model=List[AccountResponse])
async def list_accounts(ledger: Ledger = Depends(get_ledger)):
    """List all accounts"""
    accounts = ledger.list_accounts()
    logger.info(f"Found {len(accounts)} accounts")
    return [AccountResponse.from_account(account) for account in accounts]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AccountResponse)
async def create_account(
    request: CreateAccountRequest,
    ledger: Ledger = Depends(get_ledger)
):
    """Open a new account with a zero balance"""
    try:
        account = ledger.create_account(
            owner_id=request.owner_id,
            account_type=request.account_type,
            currency=request.currency,
            interest_rate=request.interest_rate
        )
    except LedgerError as e:
        logger.warning(f"Account creation rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return AccountResponse.from_account(account)


@router.get("/version")
async def get_version():
    """Service name and version"""
    config = get_config()
    return {
        "service": config.service_name,
        "version": config.service_version,
        "description": config.service_description,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/owner/{owner_id}", response_model=List[AccountResponse])
async def list_owner_accounts(owner_id: str, ledger: Ledger = Depends(get_ledger)):
    """List all accounts of one owner"""
    accounts = ledger.list_accounts_by_owner(owner_id)
    return [AccountResponse.from_account(account) for account in accounts]


@router.get("/exists/{account_id}/{owner_id}", response_model=bool)
async def account_exists(
    account_id: str,
    owner_id: str,
    ledger: Ledger = Depends(get_ledger)
):
    """Check that an account exists and belongs to the owner"""
    return ledger.account_exists(account_id, owner_id)


@router.post("/transactions", response_model=MessageResponse)
async def register_transaction(
    request: RegisterTransactionRequest,
    ledger: Ledger = Depends(get_ledger)
):
    """Register a credit or debit against an account"""
    try:
        transaction = ledger.register_transaction(
            account_id=request.account_id,
            amount=request.amount,
            transaction_type=request.transaction_type,
            description=request.description,
            currency=request.currency,
            counterparty_account_id=request.counterparty_account_id
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"message": f"Transaction {transaction.id} registered successfully"}


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(transaction_id: str, ledger: Ledger = Depends(get_ledger)):
    """Get a single transaction"""
    try:
        transaction = ledger.get_transaction(transaction_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return TransactionResponse.from_transaction(transaction)


@router.post("/transfer", response_model=MessageResponse)
async def transfer(
    request: TransferRequest,
    ledger: Ledger = Depends(get_ledger)
):
    """Transfer money between two accounts of the same currency"""
    try:
        ledger.transfer(
            from_account_id=request.from_account_id,
            to_account_id=request.to_account_id,
            amount=request.amount,
            description=request.description
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"message": "Transfer completed successfully"}


@router.post("/statement", response_model=List[TransactionResponse])
async def get_statement(
    request: StatementRequest,
    ledger: Ledger = Depends(get_ledger)
):
    """Account statement for a date range; an unknown account is a bad request"""
    try:
        transactions = ledger.get_statement(
            account_id=request.account_id,
            from_date=request.from_date,
            to_date=request.to_date
        )
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [TransactionResponse.from_transaction(t) for t in transactions]


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(account_id: str, ledger: Ledger = Depends(get_ledger)):
    """Get account details"""
    try:
        account = ledger.get_account(account_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AccountResponse.from_account(account)


@router.get("/{account_id}/transactions", response_model=List[TransactionResponse])
async def get_account_transactions(account_id: str, ledger: Ledger = Depends(get_ledger)):
    """Full transaction history of an account"""
    try:
        transactions = ledger.get_account_transactions(account_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [TransactionResponse.from_transaction(t) for t in transactions]


@router.put("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_account(
    account_id: str,
    request: UpdateAccountRequest,
    ledger: Ledger = Depends(get_ledger)
):
    """Change the interest rate and/or closing date"""
    try:
        ledger.update_interest_or_closure(
            account_id,
            interest_rate=request.interest_rate,
            closed_date=request.closed_date
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{account_id}/full", status_code=status.HTTP_204_NO_CONTENT)
async def replace_account(
    account_id: str,
    request: ReplaceAccountRequest,
    ledger: Ledger = Depends(get_ledger)
):
    """Overwrite every field of an account, balance included"""
    try:
        ledger.replace_account(
            account_id,
            owner_id=request.owner_id,
            account_type=request.account_type,
            currency=request.currency,
            balance=request.balance,
            opened_date=request.opened_date,
            interest_rate=request.interest_rate,
            closed_date=request.closed_date
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LedgerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(account_id: str, ledger: Ledger = Depends(get_ledger)):
    """Delete an account; its transactions are kept"""
    try:
        ledger.delete_account(account_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return Response(status_code=status.HTTP_204_NO_CONTENT)
