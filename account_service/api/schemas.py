"""
Pydantic schemas for API requests and responses
"""

from decimal import Decimal
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from ..accounts import Account, AccountType
from ..currency import CURRENCY_CODE_PATTERN, DEFAULT_CURRENCY
from ..transactions import MAX_DESCRIPTION_LENGTH, Transaction, TransactionType

def currency_field():
    return Field(
        DEFAULT_CURRENCY,
        pattern=CURRENCY_CODE_PATTERN.pattern,
        description="Three-letter currency code (RUB, USD, EUR)"
    )


def interest_rate_field():
    return Field(None, ge=0, le=100, description="Annual interest rate in percent")


# Account schemas
class CreateAccountRequest(BaseModel):
    owner_id: str = Field(..., min_length=1)
    account_type: AccountType = Field(..., description="Account type (checking, deposit, credit)")
    currency: str = currency_field()
    interest_rate: Optional[Decimal] = interest_rate_field()


class UpdateAccountRequest(BaseModel):
    interest_rate: Optional[Decimal] = interest_rate_field()
    closed_date: Optional[datetime] = None


class ReplaceAccountRequest(BaseModel):
    owner_id: str = Field(..., min_length=1)
    account_type: AccountType
    currency: str = currency_field()
    balance: Decimal = Field(..., ge=0, description="Balance cannot be negative")
    interest_rate: Optional[Decimal] = interest_rate_field()
    opened_date: datetime
    closed_date: Optional[datetime] = None


class AccountResponse(BaseModel):
    id: str
    owner_id: str
    account_type: str
    currency: str
    balance: str = Field(..., description="Decimal amount as string")
    interest_rate: Optional[str] = None
    opened_date: datetime
    closed_date: Optional[datetime] = None

    @classmethod
    def from_account(cls, account: Account) -> 'AccountResponse':
        return cls(
            id=account.id,
            owner_id=account.owner_id,
            account_type=account.account_type.value,
            currency=account.currency,
            balance=str(account.balance),
            interest_rate=str(account.interest_rate) if account.interest_rate is not None else None,
            opened_date=account.opened_date,
            closed_date=account.closed_date
        )


# Transaction schemas
class RegisterTransactionRequest(BaseModel):
    account_id: str = Field(..., min_length=1)
    counterparty_account_id: Optional[str] = None
    amount: Decimal = Field(..., gt=0, description="Amount must be greater than 0")
    currency: Optional[str] = Field(
        None, pattern=CURRENCY_CODE_PATTERN.pattern,
        description="Defaults to the account currency"
    )
    transaction_type: TransactionType = Field(..., description="Transaction type (credit, debit)")
    description: str = Field("", max_length=MAX_DESCRIPTION_LENGTH)


class TransferRequest(BaseModel):
    from_account_id: str = Field(..., min_length=1)
    to_account_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, description="Amount must be greater than 0")
    description: str = Field("", max_length=MAX_DESCRIPTION_LENGTH)


class StatementRequest(BaseModel):
    account_id: str = Field(..., min_length=1)
    from_date: datetime
    to_date: datetime


class TransactionResponse(BaseModel):
    id: str
    account_id: str
    counterparty_account_id: Optional[str] = None
    amount: str = Field(..., description="Decimal amount as string")
    currency: str
    transaction_type: str
    description: str
    transaction_date: datetime

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> 'TransactionResponse':
        return cls(
            id=transaction.id,
            account_id=transaction.account_id,
            counterparty_account_id=transaction.counterparty_account_id,
            amount=str(transaction.amount),
            currency=transaction.currency,
            transaction_type=transaction.transaction_type.value,
            description=transaction.description,
            transaction_date=transaction.transaction_date
        )


class MessageResponse(BaseModel):
    message: str
