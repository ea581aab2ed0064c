import sys
import logging

from pydantic import ValidationError

from config import get_settings
from errors import LedgerError
from ledger import Ledger


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format=settings.log_format,
        stream=sys.stderr,
    )


def main():
    try:
        configure_logging()
    except (ValidationError, ValueError) as e:
        print(f"invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    if len(sys.argv) != 2:
        print("Usage: payments-ledger <input.csv>", file=sys.stderr)
        sys.exit(1)

    filepath = sys.argv[1]
    try:
        ledger = Ledger.from_csv(filepath)
    except (LedgerError, OSError) as e:
        print(f"failed to process input file: {e}", file=sys.stderr)
        sys.exit(1)

    if get_settings().report_stats:
        print(ledger.stats, file=sys.stderr)

    try:
        output = ledger.statement()
    except LedgerError as e:
        print(f"failed to generate output report: {e}", file=sys.stderr)
        sys.exit(1)

    sys.stdout.write(output)


if __name__ == "__main__":
    main()
