import logging
from typing import Dict, Iterable

from decoder import read_transactions
from errors import TransactionError
from models import Transaction, ClientAccount, ProcessingResult, ProcessingStats
from state_manager import StateManager
from statement import render_statement
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class Ledger:
    """
    Computes client balances from an ordered stream of transactions.

    Transactions are applied strictly in arrival order. Insufficient funds on
    a withdrawal is logged and skipped; every other TransactionError aborts
    the run and propagates to the caller unchanged.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @classmethod
    def from_csv(cls, filepath: str) -> "Ledger":
        """Build a ledger by processing every transaction in a CSV file."""
        ledger = cls()
        logger.info(f"Processing transactions from {filepath}")
        ledger.process_all(read_transactions(filepath))
        return ledger

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process(self, transaction: Transaction) -> ProcessingResult:
        try:
            result = self._processor.process_transaction(transaction)
        except TransactionError as e:
            if not e.recoverable:
                raise
            logger.warning(str(e))
            result = ProcessingResult.REJECTED

        self._stats.record(result)
        return result

    def process_all(self, transactions: Iterable[Transaction]) -> ProcessingStats:
        for transaction in transactions:
            self.process(transaction)

        logger.info(f"Processing complete: {self._stats}")
        return self._stats

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()

    def statement(self) -> str:
        """Render the account statement as CSV text. Raises StatementError."""
        return render_statement(self._state.get_all_accounts())
