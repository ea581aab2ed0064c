from decimal import Decimal
from enum import Enum
from typing import Optional

from models import TransactionType, MAX_AMOUNT


class ErrorKind(Enum):
    AMOUNT_REQUIRED = "amount_required"
    NEGATIVE_AMOUNT = "negative_amount"
    AMOUNT_TOO_LARGE = "amount_too_large"
    ACCOUNT_LOCKED = "account_locked"
    NO_SUCH_ACCOUNT = "no_such_account"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    STATEMENT_ENCODING = "statement_encoding"


class LedgerError(Exception):
    """Base class for every error raised while building a ledger."""


class AccountError(LedgerError):
    """Raised by the state manager when an account is missing or locked."""

    def __init__(self, kind: ErrorKind, client_id: int):
        self.kind = kind
        self.client_id = client_id
        if kind == ErrorKind.ACCOUNT_LOCKED:
            message = f"account {client_id} is locked"
        else:
            message = f"no such account: {client_id}"
        super().__init__(message)


class TransactionError(LedgerError):
    """
    Failure applying a single transaction.
    Subclasses name the transaction type; `kind` says what went wrong.
    """

    transaction_type: TransactionType

    def __init__(self, kind: ErrorKind, client_id: int, transaction_id: int, detail: Optional[str] = None):
        self.kind = kind
        self.client_id = client_id
        self.transaction_id = transaction_id
        super().__init__(detail or self._describe())

    @classmethod
    def from_account_error(cls, error: AccountError, transaction_id: int) -> "TransactionError":
        return cls(error.kind, error.client_id, transaction_id)

    @property
    def recoverable(self) -> bool:
        return False

    def _describe(self) -> str:
        action = self.transaction_type.value
        tx = self.transaction_id
        if self.kind == ErrorKind.AMOUNT_REQUIRED:
            return f"{action} tx {tx}: an amount is required, but none was present"
        if self.kind == ErrorKind.NEGATIVE_AMOUNT:
            return f"{action} tx {tx}: amount must not be negative"
        if self.kind == ErrorKind.AMOUNT_TOO_LARGE:
            return f"{action} tx {tx}: amount exceeds the maximum of {MAX_AMOUNT:f}"
        if self.kind == ErrorKind.ACCOUNT_LOCKED:
            return f"{action} tx {tx}: account {self.client_id} is locked"
        if self.kind == ErrorKind.NO_SUCH_ACCOUNT:
            return f"{action} tx {tx}: no such account {self.client_id}"
        if self.kind == ErrorKind.DUPLICATE_TRANSACTION:
            return f"{action} tx {tx}: duplicate transaction id {tx} detected"
        return f"{action} tx {tx}: {self.kind.value}"


class DepositError(TransactionError):
    transaction_type = TransactionType.DEPOSIT


class WithdrawalError(TransactionError):
    transaction_type = TransactionType.WITHDRAWAL

    def __init__(
        self,
        kind: ErrorKind,
        client_id: int,
        transaction_id: int,
        requested: Optional[Decimal] = None,
        available: Optional[Decimal] = None,
    ):
        self.requested = requested
        self.available = available
        detail = None
        if kind == ErrorKind.INSUFFICIENT_FUNDS:
            detail = (
                f"withdrawal tx {transaction_id}: insufficient funds "
                f"wanted={requested} had={available}"
            )
        super().__init__(kind, client_id, transaction_id, detail)

    @property
    def recoverable(self) -> bool:
        return self.kind == ErrorKind.INSUFFICIENT_FUNDS


class DisputeError(TransactionError):
    transaction_type = TransactionType.DISPUTE


class ResolveError(TransactionError):
    transaction_type = TransactionType.RESOLVE


class ChargebackError(TransactionError):
    transaction_type = TransactionType.CHARGEBACK


class StatementError(LedgerError):
    """Raised when the account statement cannot be rendered."""

    kind = ErrorKind.STATEMENT_ENCODING


class TransactionDecodeError(LedgerError):
    """Raised when an input row cannot be turned into a Transaction."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
