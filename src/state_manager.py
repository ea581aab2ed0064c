from typing import Dict, Optional, Set

from errors import AccountError, ErrorKind
from models import Transaction, ClientAccount


class StateManager:
    """
    Owns all mutable state of one processing run.
    Stores client accounts and transaction history for dispute lookups.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}
        self._disputed_transaction_ids: Set[int] = set()
        self._charged_back_transaction_ids: Set[int] = set()

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def create_account(self, client_id: int) -> ClientAccount:
        account = ClientAccount(client_id=client_id)
        self._accounts[client_id] = account
        return account

    def get_unlocked_account(self, client_id: int) -> ClientAccount:
        """
        Return the account for client_id.
        Raises AccountError if it does not exist or is locked.
        """
        account = self._accounts.get(client_id)
        if account is None:
            raise AccountError(ErrorKind.NO_SUCH_ACCOUNT, client_id)
        if account.locked:
            raise AccountError(ErrorKind.ACCOUNT_LOCKED, client_id)
        return account

    def store_transaction(self, transaction: Transaction) -> None:
        """Store transaction for future dispute lookups."""
        self._transactions[transaction.transaction_id] = transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def mark_transaction_disputed(self, transaction_id: int) -> None:
        """Mark a transaction as disputed."""
        self._disputed_transaction_ids.add(transaction_id)

    def is_transaction_disputed(self, transaction_id: int) -> bool:
        """Check if transaction is currently disputed."""
        return transaction_id in self._disputed_transaction_ids

    def clear_transaction_dispute(self, transaction_id: int) -> None:
        """Clear dispute status for a transaction."""
        self._disputed_transaction_ids.discard(transaction_id)

    def mark_transaction_charged_back(self, transaction_id: int) -> None:
        self._disputed_transaction_ids.discard(transaction_id)
        self._charged_back_transaction_ids.add(transaction_id)

    def is_transaction_charged_back(self, transaction_id: int) -> bool:
        return transaction_id in self._charged_back_transaction_ids

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
