from dataclasses import dataclass
from decimal import Context, Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional

PRECISION = Decimal("0.0001")

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

# Largest accepted transaction amount. MAX_TRANSACTION_ID transactions of this
# size stay well inside LEDGER_CONTEXT's precision, so balance arithmetic is exact.
MAX_AMOUNT = Decimal("1e24")
LEDGER_CONTEXT = Context(prec=60, rounding=ROUND_HALF_UP)


def round_amount(value: Decimal) -> Decimal:
    """Round to 4 decimal places, half away from zero."""
    return value.quantize(PRECISION, rounding=ROUND_HALF_UP, context=LEDGER_CONTEXT)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    SUCCESS = "success"
    IGNORED = "ignored"
    REJECTED = "rejected"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    """
    Balances for one client.
    Every write is rounded, and total is derived so total == available + held always holds.
    """

    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return LEDGER_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = round_amount(LEDGER_CONTEXT.add(self.available, amount))

    def debit(self, amount: Decimal) -> None:
        self.available = round_amount(LEDGER_CONTEXT.subtract(self.available, amount))

    def hold(self, amount: Decimal) -> None:
        self.available = round_amount(LEDGER_CONTEXT.subtract(self.available, amount))
        self.held = round_amount(LEDGER_CONTEXT.add(self.held, amount))

    def release_hold(self, amount: Decimal) -> None:
        self.held = round_amount(LEDGER_CONTEXT.subtract(self.held, amount))
        self.available = round_amount(LEDGER_CONTEXT.add(self.available, amount))

    def remove_held(self, amount: Decimal) -> None:
        self.held = round_amount(LEDGER_CONTEXT.subtract(self.held, amount))

    def lock(self) -> None:
        self.locked = True


class ProcessingStats:
    """Counters for one processing run."""

    def __init__(self):
        self.processed = 0
        self.ignored = 0
        self.rejected = 0

    def record(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.SUCCESS:
            self.processed += 1
        elif result == ProcessingResult.IGNORED:
            self.ignored += 1
        elif result == ProcessingResult.REJECTED:
            self.rejected += 1

    def __str__(self) -> str:
        return f"Processed: {self.processed}, Ignored: {self.ignored}, Rejected: {self.rejected}"
