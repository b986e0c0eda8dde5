"""
Transaction Records

A transaction is an immutable ledger entry against exactly one account.
A transfer is recorded as two of them, a debit on the source and a credit
on the destination, each naming the other account as counterparty.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional
from enum import Enum

from .storage import StorageRecord

MAX_DESCRIPTION_LENGTH = 500


class TransactionType(Enum):
    """Direction of a ledger entry"""
    CREDIT = "credit"  # Increases balance
    DEBIT = "debit"    # Decreases balance


@dataclass
class Transaction(StorageRecord):
    """Record of a single balance-affecting event, never changed once stored"""
    account_id: str
    amount: Decimal
    currency: str
    transaction_type: TransactionType
    description: str
    transaction_date: datetime
    counterparty_account_id: Optional[str] = None

    @property
    def signed_amount(self) -> Decimal:
        """Balance delta this entry applied to its account"""
        if self.transaction_type == TransactionType.CREDIT:
            return self.amount
        return -self.amount

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Convert dictionary to Transaction"""
        return cls(
            id=data["id"],
            account_id=data["account_id"],
            amount=Decimal(data["amount"]),
            currency=data["currency"],
            transaction_type=TransactionType(data["transaction_type"]),
            description=data["description"],
            transaction_date=datetime.fromisoformat(data["transaction_date"]),
            counterparty_account_id=data.get("counterparty_account_id"),
        )


def net_amount(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of credits minus sum of debits"""
    return sum((t.signed_amount for t in transactions), Decimal("0"))


def sort_by_date(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Ascending by transaction date; equal dates keep their input order"""
    return sorted(transactions, key=lambda t: t.transaction_date)
