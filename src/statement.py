import csv
import io
from decimal import Decimal
from typing import Dict

from errors import StatementError
from models import ClientAccount, LEDGER_CONTEXT

HEADER = ("client", "available", "held", "total", "locked")


def format_decimal(value: Decimal) -> str:
    """Format decimal with up to 4 decimal places, removing trailing zeros."""
    normalized = value.normalize(LEDGER_CONTEXT)
    if normalized.is_zero():
        return "0"
    return f"{normalized:f}"


def render_statement(accounts: Dict[int, ClientAccount]) -> str:
    """Render one CSV row per account, ordered by client id."""
    buffer = io.StringIO()
    try:
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(HEADER)
        for client_id in sorted(accounts.keys()):
            account = accounts[client_id]
            writer.writerow(
                (
                    client_id,
                    format_decimal(account.available),
                    format_decimal(account.held),
                    format_decimal(account.total),
                    str(account.locked).lower(),
                )
            )
    except (csv.Error, TypeError, ValueError, AttributeError) as e:
        raise StatementError(f"failed to render account statement: {e}") from e
    return buffer.getvalue()
