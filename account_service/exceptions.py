"""
Ledger Error Taxonomy

Every business failure is raised before the ledger is mutated. All errors
derive from ValueError so callers that only distinguish "bad request" can
catch that.
"""

from decimal import Decimal


class LedgerError(ValueError):
    """Base exception for all ledger errors"""


class ValidationError(LedgerError):
    """Raised when input is malformed or out of range"""


class NotFoundError(LedgerError):
    """Raised when a referenced entity does not exist"""


class AccountNotFoundError(NotFoundError):
    """Raised when an account id is unknown"""

    def __init__(self, account_id: str, role: str = "Account"):
        self.account_id = account_id
        self.role = role
        super().__init__(f"{role} {account_id} not found")


class TransactionNotFoundError(NotFoundError):
    """Raised when a transaction id is unknown"""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class InsufficientFundsError(LedgerError):
    """Raised when a debit would take an account below zero"""

    def __init__(self, account_id: str, balance: Decimal, amount: Decimal):
        self.account_id = account_id
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"Insufficient funds on account {account_id}: balance {balance}, requested {amount}"
        )


class CurrencyMismatchError(LedgerError):
    """Raised when two currencies that must match do not"""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Currency mismatch: {expected} != {actual}")
