import csv
import logging
import re
from decimal import Decimal
from typing import Dict, Iterable, Iterator, Optional

from errors import TransactionDecodeError
from models import Transaction, TransactionType, MAX_AMOUNT, MAX_CLIENT_ID, MAX_TRANSACTION_ID

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")

ID_PATTERN = re.compile(r"[0-9]+")
AMOUNT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def read_transactions(filepath: str) -> Iterator[Transaction]:
    """Lazily read CSV file and yield transactions in file order."""
    with open(filepath, "r", newline="") as f:
        yield from parse_transactions(f)


def parse_transactions(lines: Iterable[str]) -> Iterator[Transaction]:
    """Parse CSV text lines (header first) into transactions."""
    reader = csv.DictReader(lines, restval="", skipinitialspace=True)
    if reader.fieldnames is None:
        return

    reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]
    missing = [column for column in REQUIRED_COLUMNS if column not in reader.fieldnames]
    if missing:
        raise TransactionDecodeError(f"missing required column(s): {', '.join(missing)}", line_number=1)

    try:
        for row in reader:
            if _is_blank(row):
                continue
            yield parse_row(row, reader.line_num)
    except csv.Error as e:
        raise TransactionDecodeError(str(e), line_number=reader.line_num) from e


def parse_row(row: Dict[Optional[str], str], line_number: Optional[int] = None) -> Transaction:
    """Parse CSV row into Transaction."""
    normalized = {k: (v or "").strip() for k, v in row.items() if k is not None}

    transaction_type_str = normalized.get("type", "").lower()
    try:
        transaction_type = TransactionType(transaction_type_str)
    except ValueError:
        raise TransactionDecodeError(f"unknown transaction type {transaction_type_str!r}", line_number) from None

    client_id = _parse_id(normalized.get("client", ""), "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized.get("tx", ""), "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    amount_str = normalized.get("amount", "")
    if transaction_type.carries_amount:
        if not amount_str:
            raise TransactionDecodeError(f"{transaction_type.value} requires an amount", line_number)
        amount = _parse_amount(amount_str, line_number)
    elif amount_str:
        logger.debug(f"Ignoring amount on {transaction_type.value} row at line {line_number}")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(value: str, column: str, maximum: int, line_number: Optional[int]) -> int:
    if not ID_PATTERN.fullmatch(value):
        raise TransactionDecodeError(f"invalid {column} {value!r}", line_number)
    try:
        parsed = int(value)
    except ValueError:
        raise TransactionDecodeError(f"invalid {column} {value[:32]!r}", line_number) from None
    if parsed > maximum:
        raise TransactionDecodeError(f"{column} {parsed} out of range 0..{maximum}", line_number)
    return parsed


def _parse_amount(value: str, line_number: Optional[int]) -> Decimal:
    if not AMOUNT_PATTERN.fullmatch(value):
        raise TransactionDecodeError(f"invalid amount {value!r}", line_number)
    amount = Decimal(value)
    if amount.copy_abs() > MAX_AMOUNT:
        raise TransactionDecodeError(f"amount {value} exceeds the maximum of {MAX_AMOUNT:f}", line_number)
    return amount


def _is_blank(row: Dict[Optional[str], str]) -> bool:
    return all(not value.strip() for key, value in row.items() if key is not None and value is not None)
