"""
Account Records

An account holds a balance in a single currency and belongs to one owner.
No transaction may drive a balance below zero, whatever the account type.
Only an administrative replace can set the balance directly.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, Optional
from enum import Enum

from .storage import StorageRecord


class AccountType(Enum):
    """Banking product types"""
    CHECKING = "checking"  # Current account
    DEPOSIT = "deposit"    # Term deposit, interest rate required
    CREDIT = "credit"      # Credit line, interest rate required

    @property
    def requires_interest_rate(self) -> bool:
        return self in (AccountType.DEPOSIT, AccountType.CREDIT)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class Account(StorageRecord):
    """
    Bank account snapshot

    Instances handed out by the ledger are copies; changing one does not
    change the stored account.
    """
    owner_id: str
    account_type: AccountType
    currency: str
    balance: Decimal
    opened_date: datetime
    interest_rate: Optional[Decimal] = None  # Annual rate in percent, stored but never applied
    closed_date: Optional[datetime] = None

    @property
    def is_closed(self) -> bool:
        return self.closed_date is not None

    def can_cover(self, amount: Decimal) -> bool:
        """Check whether a debit of ``amount`` leaves the balance at or above zero"""
        return self.balance >= amount

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        """Convert dictionary to Account"""
        interest_rate = None
        if data.get("interest_rate") is not None:
            interest_rate = Decimal(data["interest_rate"])

        closed_date = None
        if data.get("closed_date"):
            closed_date = datetime.fromisoformat(data["closed_date"])

        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            account_type=AccountType(data["account_type"]),
            currency=data["currency"],
            balance=Decimal(data["balance"]),
            opened_date=datetime.fromisoformat(data["opened_date"]),
            interest_rate=interest_rate,
            closed_date=closed_date,
        )
