"""
Account Ledger

Owns every account and every transaction and is the only way to change
them. Each operation runs inside one storage unit of work: the storage lock
is held for the whole operation, so readers never see half a transfer and
concurrent debits of the same account cannot lose updates. All business
checks happen before the first write.
"""

from decimal import Decimal
from datetime import datetime, timezone
from typing import List, Optional, Tuple
import uuid

from .accounts import Account, AccountType, ensure_utc
from .currency import AmountLike, to_decimal, validate_currency_code, format_amount
from .exceptions import (
    AccountNotFoundError,
    CurrencyMismatchError,
    InsufficientFundsError,
    TransactionNotFoundError,
    ValidationError,
)
from .logging_config import get_logger, log_action
from .storage import InMemoryStorage
from .transactions import (
    MAX_DESCRIPTION_LENGTH,
    Transaction,
    TransactionType,
    sort_by_date,
)

MIN_INTEREST_RATE = Decimal("0")
MAX_INTEREST_RATE = Decimal("100")


def _annotate(prefix: str, description: str) -> str:
    return f"{prefix}: {description}" if description else prefix


class Ledger:
    """
    In-memory store of accounts and transactions plus the operations that
    enforce balance and currency invariants.
    """

    def __init__(self, storage: Optional[InMemoryStorage] = None):
        self.storage = storage or InMemoryStorage()
        self.accounts_table = "accounts"
        self.transactions_table = "transactions"
        self.logger = get_logger("account_service.ledger")

    # Account management

    def create_account(
        self,
        owner_id: str,
        account_type: AccountType,
        currency: str,
        interest_rate: Optional[AmountLike] = None
    ) -> Account:
        """
        Open a new account with a zero balance

        Args:
            owner_id: ID of the owning customer (not checked against a registry)
            account_type: Checking, deposit or credit
            currency: Three-letter currency code, fixed for the account's life
            interest_rate: Annual rate in percent; required for deposit and credit

        Returns:
            Created Account

        Raises:
            ValidationError: On an empty owner, bad currency or missing/out-of-range rate
        """
        owner_id = self._validate_owner_id(owner_id)
        account_type = self._validate_account_type(account_type)
        validate_currency_code(currency)
        if account_type.requires_interest_rate and interest_rate is None:
            raise ValidationError(
                f"Interest rate is required for {account_type.value} accounts"
            )
        rate = self._validate_interest_rate(interest_rate)

        account = Account(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            account_type=account_type,
            currency=currency,
            balance=Decimal("0"),
            opened_date=datetime.now(timezone.utc),
            interest_rate=rate,
            closed_date=None
        )

        with self.storage.atomic():
            self._save_account(account)

        log_action(
            self.logger, "info",
            f"Created account {account.id} for owner {owner_id}",
            action="create_account", resource=account.id,
            extra={"owner_id": owner_id, "account_type": account_type.value, "currency": currency}
        )
        return account

    def get_account(self, account_id: str) -> Account:
        """Get account by ID"""
        with self.storage.atomic():
            return self._require_account(account_id)

    def list_accounts(self) -> List[Account]:
        """All accounts in the order they were opened"""
        with self.storage.atomic():
            return [Account.from_dict(data) for data in self.storage.load_all(self.accounts_table)]

    def list_accounts_by_owner(self, owner_id: str) -> List[Account]:
        """Get all accounts for an owner"""
        with self.storage.atomic():
            accounts_data = self.storage.find(self.accounts_table, {"owner_id": owner_id})
            return [Account.from_dict(data) for data in accounts_data]

    def account_exists(self, account_id: str, owner_id: str) -> bool:
        """True only if the account exists and belongs to this owner"""
        with self.storage.atomic():
            data = self.storage.load(self.accounts_table, account_id)
            return data is not None and data["owner_id"] == owner_id

    def update_interest_or_closure(
        self,
        account_id: str,
        interest_rate: Optional[AmountLike] = None,
        closed_date: Optional[datetime] = None
    ) -> Account:
        """
        Partially update an account; only supplied fields change

        Raises:
            ValidationError: If the rate is outside [0, 100] or the closing date is not a datetime
            AccountNotFoundError: If the account does not exist
        """
        rate = self._validate_interest_rate(interest_rate)
        if closed_date is not None:
            closed_date = self._validate_date(closed_date, "closed_date")

        with self.storage.atomic():
            account = self._require_account(account_id)
            if rate is not None:
                account.interest_rate = rate
            if closed_date is not None:
                account.closed_date = closed_date
            self._save_account(account)

        log_action(
            self.logger, "info", f"Updated account {account_id}",
            action="update_account", resource=account_id,
            extra={
                "interest_rate": str(rate) if rate is not None else None,
                "closed_date": closed_date.isoformat() if closed_date else None
            }
        )
        return account

    def replace_account(
        self,
        account_id: str,
        owner_id: str,
        account_type: AccountType,
        currency: str,
        balance: AmountLike,
        opened_date: datetime,
        interest_rate: Optional[AmountLike] = None,
        closed_date: Optional[datetime] = None
    ) -> Account:
        """
        Overwrite every mutable field of an account

        Administrative correction path: the new balance and currency are not
        reconciled with the account's transaction history, so afterwards the
        balance need not equal credits minus debits. Only field-level checks
        apply.

        Raises:
            ValidationError: On a missing field, bad currency, negative balance,
                out-of-range rate or a date that is not a datetime
            AccountNotFoundError: If the account does not exist
        """
        owner_id = self._validate_owner_id(owner_id)
        account_type = self._validate_account_type(account_type)
        validate_currency_code(currency)
        new_balance = to_decimal(balance, "balance")
        if new_balance < 0:
            raise ValidationError("Balance cannot be negative")
        rate = self._validate_interest_rate(interest_rate)
        opened_date = self._validate_date(opened_date, "opened_date")
        if closed_date is not None:
            closed_date = self._validate_date(closed_date, "closed_date")

        with self.storage.atomic():
            account = self._require_account(account_id)
            previous_balance = account.balance
            account.owner_id = owner_id
            account.account_type = account_type
            account.currency = currency
            account.balance = new_balance
            account.interest_rate = rate
            account.opened_date = opened_date
            account.closed_date = closed_date
            self._save_account(account)

        log_action(
            self.logger, "warning",
            f"Replaced account {account_id}; balance set directly without a transaction",
            action="replace_account", resource=account_id,
            extra={"previous_balance": str(previous_balance), "balance": str(new_balance)}
        )
        return account

    def delete_account(self, account_id: str) -> None:
        """Remove an account; its transactions stay in the history"""
        with self.storage.atomic():
            if not self.storage.delete(self.accounts_table, account_id):
                raise AccountNotFoundError(account_id)

        log_action(self.logger, "info", f"Deleted account {account_id}",
                   action="delete_account", resource=account_id)

    # Money movement

    def register_transaction(
        self,
        account_id: str,
        amount: AmountLike,
        transaction_type: TransactionType,
        description: str = "",
        currency: Optional[str] = None,
        counterparty_account_id: Optional[str] = None
    ) -> Transaction:
        """
        Record a credit or debit against one account and apply it to the balance

        Args:
            account_id: Account the entry belongs to
            amount: Positive amount
            transaction_type: CREDIT increases the balance, DEBIT decreases it
            description: Free text, at most 500 characters
            currency: Currency recorded on the entry; defaults to the account's
            counterparty_account_id: Optional other account involved

        Returns:
            The stored Transaction

        Raises:
            ValidationError: On a non-positive amount, long description or bad currency
            AccountNotFoundError: If the account or counterparty does not exist
            InsufficientFundsError: If a debit exceeds the account's balance
        """
        value = self._validate_amount(amount)
        transaction_type = self._validate_transaction_type(transaction_type)
        description = self._validate_description(description)
        if currency is not None:
            validate_currency_code(currency)
        if counterparty_account_id is not None and counterparty_account_id == account_id:
            raise ValidationError("Counterparty must be a different account")

        try:
            with self.storage.atomic():
                account = self._require_account(account_id)
                if counterparty_account_id is not None:
                    self._require_account(counterparty_account_id, role="Counterparty account")
                if transaction_type == TransactionType.DEBIT and not account.can_cover(value):
                    raise InsufficientFundsError(account_id, account.balance, value)

                transaction = self._new_transaction(
                    account, value, transaction_type, description,
                    counterparty_account_id, currency=currency
                )
                self._post(account, transaction)
        except InsufficientFundsError as e:
            self._reject("register_transaction", e)
            raise

        log_action(
            self.logger, "info",
            f"Registered {transaction_type.value} {transaction.id} of "
            f"{format_amount(value, transaction.currency)} on account {account_id}",
            action="register_transaction", resource=transaction.id,
            extra={"account_id": account_id, "balance": str(account.balance)}
        )
        return transaction

    def transfer(
        self,
        from_account_id: str,
        to_account_id: str,
        amount: AmountLike,
        description: str = ""
    ) -> Tuple[Transaction, Transaction]:
        """
        Move money between two accounts of the same currency

        Both legs commit together or not at all.

        Returns:
            (debit on the source, credit on the destination)

        Raises:
            ValidationError: On a non-positive amount, long description or same account
            AccountNotFoundError: Naming the source first, then the destination
            InsufficientFundsError: If the source cannot cover the amount
            CurrencyMismatchError: If the two currencies differ
        """
        value = self._validate_amount(amount)
        description = self._validate_description(description)
        if from_account_id == to_account_id:
            raise ValidationError("Cannot transfer to the same account")

        try:
            with self.storage.atomic():
                from_account = self._require_account(from_account_id, role="Source account")
                to_account = self._require_account(to_account_id, role="Destination account")

                if not from_account.can_cover(value):
                    raise InsufficientFundsError(from_account_id, from_account.balance, value)

                if from_account.currency != to_account.currency:
                    raise CurrencyMismatchError(from_account.currency, to_account.currency)

                debit = self._new_transaction(
                    from_account, value, TransactionType.DEBIT,
                    _annotate(f"Transfer to account {to_account_id}", description),
                    counterparty_account_id=to_account_id
                )
                credit = self._new_transaction(
                    to_account, value, TransactionType.CREDIT,
                    _annotate(f"Transfer from account {from_account_id}", description),
                    counterparty_account_id=from_account_id
                )
                self._post(from_account, debit)
                self._post(to_account, credit)
        except InsufficientFundsError as e:
            self._reject("transfer", e)
            raise

        log_action(
            self.logger, "info",
            f"Transferred {format_amount(value, from_account.currency)} "
            f"from {from_account_id} to {to_account_id}",
            action="transfer", resource=debit.id,
            extra={"debit_id": debit.id, "credit_id": credit.id}
        )
        return debit, credit

    # Queries

    def get_statement(
        self,
        account_id: str,
        from_date: datetime,
        to_date: datetime
    ) -> List[Transaction]:
        """
        Transactions of one account dated within [from_date, to_date], oldest first

        Raises:
            ValidationError: If a date is missing or not a datetime, or from_date is
                later than to_date
            AccountNotFoundError: If the account does not exist
        """
        start = self._validate_date(from_date, "from_date")
        end = self._validate_date(to_date, "to_date")
        if start > end:
            raise ValidationError("Start date cannot be later than end date")

        with self.storage.atomic():
            if not self.storage.exists(self.accounts_table, account_id):
                raise AccountNotFoundError(account_id)
            entries = [
                t for t in self._account_transactions(account_id)
                if start <= t.transaction_date <= end
            ]

        statement = sort_by_date(entries)
        self.logger.debug(
            f"Statement for {account_id} from {start.isoformat()} to {end.isoformat()}: "
            f"{len(statement)} transactions"
        )
        return statement

    def get_account_transactions(self, account_id: str) -> List[Transaction]:
        """All transactions recorded against an existing account, in insertion order"""
        with self.storage.atomic():
            if not self.storage.exists(self.accounts_table, account_id):
                raise AccountNotFoundError(account_id)
            return self._account_transactions(account_id)

    def get_transaction(self, transaction_id: str) -> Transaction:
        """Get transaction by ID, including those of deleted accounts"""
        with self.storage.atomic():
            data = self.storage.load(self.transactions_table, transaction_id)
        if data is None:
            raise TransactionNotFoundError(transaction_id)
        return Transaction.from_dict(data)

    def list_transactions(self) -> List[Transaction]:
        """Every transaction ever registered, in insertion order"""
        with self.storage.atomic():
            return [Transaction.from_dict(data) for data in self.storage.load_all(self.transactions_table)]

    # Internals

    def _require_account(self, account_id: str, role: str = "Account") -> Account:
        data = self.storage.load(self.accounts_table, account_id)
        if data is None:
            raise AccountNotFoundError(account_id, role)
        return Account.from_dict(data)

    def _account_transactions(self, account_id: str) -> List[Transaction]:
        rows = self.storage.find(self.transactions_table, {"account_id": account_id})
        return [Transaction.from_dict(data) for data in rows]

    def _new_transaction(
        self,
        account: Account,
        amount: Decimal,
        transaction_type: TransactionType,
        description: str,
        counterparty_account_id: Optional[str] = None,
        currency: Optional[str] = None
    ) -> Transaction:
        return Transaction(
            id=str(uuid.uuid4()),
            account_id=account.id,
            amount=amount,
            currency=currency or account.currency,
            transaction_type=transaction_type,
            description=description,
            transaction_date=datetime.now(timezone.utc),
            counterparty_account_id=counterparty_account_id
        )

    def _post(self, account: Account, transaction: Transaction) -> None:
        """Apply a transaction to its account and append it to the history"""
        account.balance += transaction.signed_amount
        self.storage.save(self.transactions_table, transaction.id, transaction.to_dict())
        self._save_account(account)

    def _save_account(self, account: Account) -> None:
        self.storage.save(self.accounts_table, account.id, account.to_dict())

    def _reject(self, action: str, error: InsufficientFundsError) -> None:
        log_action(
            self.logger, "warning", str(error), action=action, resource=error.account_id,
            extra={"balance": str(error.balance), "amount": str(error.amount)}
        )

    # Field validation

    @staticmethod
    def _validate_owner_id(owner_id: str) -> str:
        if owner_id is None or not str(owner_id).strip():
            raise ValidationError("Owner ID is required")
        return str(owner_id)

    @staticmethod
    def _validate_account_type(account_type) -> AccountType:
        if account_type is None:
            raise ValidationError("Account type is required")
        try:
            return AccountType(account_type)
        except ValueError:
            raise ValidationError(f"Unknown account type: {account_type!r}")

    @staticmethod
    def _validate_transaction_type(transaction_type) -> TransactionType:
        if transaction_type is None:
            raise ValidationError("Transaction type is required")
        try:
            return TransactionType(transaction_type)
        except ValueError:
            raise ValidationError(f"Unknown transaction type: {transaction_type!r}")

    @staticmethod
    def _validate_interest_rate(interest_rate: Optional[AmountLike]) -> Optional[Decimal]:
        if interest_rate is None:
            return None
        rate = to_decimal(interest_rate, "interest_rate")
        if not MIN_INTEREST_RATE <= rate <= MAX_INTEREST_RATE:
            raise ValidationError("Interest rate must be between 0 and 100")
        return rate

    @staticmethod
    def _validate_amount(amount: AmountLike) -> Decimal:
        if amount is None:
            raise ValidationError("Amount is required")
        value = to_decimal(amount)
        if value <= 0:
            raise ValidationError("Amount must be greater than 0")
        return value

    @staticmethod
    def _validate_date(value: datetime, field_name: str) -> datetime:
        if value is None:
            raise ValidationError(f"{field_name} is required")
        if not isinstance(value, datetime):
            raise ValidationError(f"{field_name} must be a datetime, got {type(value).__name__}")
        return ensure_utc(value)

    @staticmethod
    def _validate_description(description: Optional[str]) -> str:
        description = description or ""
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"Description must not exceed {MAX_DESCRIPTION_LENGTH} characters"
            )
        return description
