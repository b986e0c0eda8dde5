"""
Demo Data

Opens a demo customer's checking and deposit accounts and moves money
between them through the public ledger operations, so the seeded history
satisfies the same invariants as live data.
"""

from decimal import Decimal
from typing import Dict
import uuid

from .accounts import AccountType
from .ledger import Ledger
from .logging_config import get_logger
from .transactions import TransactionType

logger = get_logger("account_service.seed")


def seed_demo_data(ledger: Ledger, owner_id: str = None) -> Dict[str, str]:
    """
    Create a demo owner with a funded checking account and a deposit

    Returns:
        IDs of the seeded owner and accounts
    """
    owner_id = owner_id or str(uuid.uuid4())

    checking = ledger.create_account(owner_id, AccountType.CHECKING, "RUB")
    deposit = ledger.create_account(
        owner_id, AccountType.DEPOSIT, "RUB", interest_rate=Decimal("3.0")
    )

    ledger.register_transaction(
        checking.id, Decimal("1000"), TransactionType.CREDIT,
        description="Cash deposit at branch"
    )
    ledger.transfer(checking.id, deposit.id, Decimal("200"), "Top up of deposit")

    logger.info(f"Seeded demo owner {owner_id}: checking {checking.id}, deposit {deposit.id}")

    return {
        "owner_id": owner_id,
        "checking_account_id": checking.id,
        "deposit_account_id": deposit.id,
    }
