import logging
from decimal import Decimal
from typing import Optional, Type

from errors import (
    AccountError,
    ChargebackError,
    DepositError,
    DisputeError,
    ErrorKind,
    ResolveError,
    TransactionError,
    WithdrawalError,
)
from models import Transaction, TransactionType, ClientAccount, ProcessingResult, MAX_AMOUNT, round_amount
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions against state, one at a time, in arrival order.

    Returns ProcessingResult for applied and ignored transactions and raises
    a TransactionError subclass for every failure. Callers decide which
    failures are recoverable (see TransactionError.recoverable).
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Processed successfully
            IGNORED: Dispute, resolve or chargeback referencing a transaction
                that is unknown or not in the required dispute state
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)
            case _:
                raise ValueError(f"unknown transaction type {transaction.transaction_type!r}")

    def _validated_amount(self, transaction: Transaction, error_class: Type[TransactionError]) -> Decimal:
        amount = transaction.amount
        if amount is None:
            raise error_class(ErrorKind.AMOUNT_REQUIRED, transaction.client_id, transaction.transaction_id)
        if amount.is_nan() or amount > MAX_AMOUNT:
            raise error_class(ErrorKind.AMOUNT_TOO_LARGE, transaction.client_id, transaction.transaction_id)
        if amount < 0:
            raise error_class(ErrorKind.NEGATIVE_AMOUNT, transaction.client_id, transaction.transaction_id)

        if self._state.has_transaction(transaction.transaction_id):
            raise error_class(ErrorKind.DUPLICATE_TRANSACTION, transaction.client_id, transaction.transaction_id)

        return round_amount(amount)

    def _record(self, transaction: Transaction, amount: Decimal) -> None:
        self._state.store_transaction(
            Transaction(
                transaction_type=transaction.transaction_type,
                client_id=transaction.client_id,
                transaction_id=transaction.transaction_id,
                amount=amount,
            )
        )

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        amount = self._validated_amount(transaction, DepositError)

        # Recorded even if the account turns out to be locked.
        self._record(transaction, amount)

        account = self._state.get_account(transaction.client_id)
        if account is None:
            account = self._state.create_account(transaction.client_id)
        elif account.locked:
            raise DepositError(ErrorKind.ACCOUNT_LOCKED, transaction.client_id, transaction.transaction_id)

        account.credit(amount)
        logger.debug(f"Deposit tx {transaction.transaction_id}: credited {amount} to client {transaction.client_id}")
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        amount = self._validated_amount(transaction, WithdrawalError)

        account = self._state.get_account(transaction.client_id)
        if account is None:
            raise WithdrawalError(ErrorKind.NO_SUCH_ACCOUNT, transaction.client_id, transaction.transaction_id)
        if account.locked:
            self._record(transaction, amount)
            raise WithdrawalError(ErrorKind.ACCOUNT_LOCKED, transaction.client_id, transaction.transaction_id)

        if amount > account.available:
            raise WithdrawalError(
                ErrorKind.INSUFFICIENT_FUNDS,
                transaction.client_id,
                transaction.transaction_id,
                requested=amount,
                available=account.available,
            )

        self._record(transaction, amount)
        account.debit(amount)
        logger.debug(f"Withdrawal tx {transaction.transaction_id}: debited {amount} from client {transaction.client_id}")
        return ProcessingResult.SUCCESS

    def _find_original(self, transaction: Transaction) -> Optional[Transaction]:
        """
        Look up the transaction a dispute, resolve or chargeback refers to.
        Returns None when the reference is unknown or belongs to another client,
        both of which are treated as upstream data errors.
        """
        original = self._state.get_transaction(transaction.transaction_id)
        action = transaction.transaction_type.value

        if original is None:
            logger.info(f"{action.capitalize()} for tx {transaction.transaction_id}: transaction not found, ignoring")
            return None

        if original.client_id != transaction.client_id:
            logger.info(
                f"{action.capitalize()} for tx {transaction.transaction_id}: client mismatch "
                f"(expected {original.client_id}, got {transaction.client_id}), ignoring"
            )
            return None

        return original

    def _unlocked_account(self, transaction: Transaction, error_class: Type[TransactionError]) -> ClientAccount:
        try:
            return self._state.get_unlocked_account(transaction.client_id)
        except AccountError as e:
            raise error_class.from_account_error(e, transaction.transaction_id) from e

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        original = self._find_original(transaction)
        if original is None:
            return ProcessingResult.IGNORED

        if self._state.is_transaction_disputed(transaction.transaction_id):
            logger.info(f"Dispute for tx {transaction.transaction_id}: transaction already disputed, ignoring")
            return ProcessingResult.IGNORED

        if self._state.is_transaction_charged_back(transaction.transaction_id):
            logger.info(f"Dispute for tx {transaction.transaction_id}: transaction already charged back, ignoring")
            return ProcessingResult.IGNORED

        if original.amount is None:
            raise DisputeError(ErrorKind.AMOUNT_REQUIRED, transaction.client_id, transaction.transaction_id)

        account = self._unlocked_account(transaction, DisputeError)
        account.hold(original.amount)
        self._state.mark_transaction_disputed(transaction.transaction_id)
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        original = self._find_original(transaction)
        if original is None:
            return ProcessingResult.IGNORED

        if not self._state.is_transaction_disputed(transaction.transaction_id):
            logger.info(f"Resolve for tx {transaction.transaction_id}: transaction not disputed, ignoring")
            return ProcessingResult.IGNORED

        if original.amount is None:
            raise ResolveError(ErrorKind.AMOUNT_REQUIRED, transaction.client_id, transaction.transaction_id)

        account = self._unlocked_account(transaction, ResolveError)
        account.release_hold(original.amount)
        self._state.clear_transaction_dispute(transaction.transaction_id)
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        original = self._find_original(transaction)
        if original is None:
            return ProcessingResult.IGNORED

        if not self._state.is_transaction_disputed(transaction.transaction_id):
            logger.info(f"Chargeback for tx {transaction.transaction_id}: transaction not disputed, ignoring")
            return ProcessingResult.IGNORED

        if original.amount is None:
            raise ChargebackError(ErrorKind.AMOUNT_REQUIRED, transaction.client_id, transaction.transaction_id)

        account = self._unlocked_account(transaction, ChargebackError)
        account.remove_held(original.amount)
        account.lock()
        self._state.mark_transaction_charged_back(transaction.transaction_id)
        return ProcessingResult.SUCCESS
