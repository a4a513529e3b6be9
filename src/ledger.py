import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple, assert_never

from errors import ClientMismatchError
from models import (
    AccountSnapshot,
    ClientAccount,
    DisputeAction,
    DisputeActionType,
    ProcessingResult,
    Transaction,
    TransactionRecord,
    TransactionState,
    TransactionType,
)

logger = logging.getLogger(__name__)


class AccountLedger:
    """
    Balances, transaction history and dispute history of a single client.
    Applies one event at a time; business failures never raise, they are
    reported through the returned ProcessingResult.
    """

    def __init__(self, client_id: int):
        self._account = ClientAccount(client_id=client_id)
        self._transaction_history: Dict[int, TransactionRecord] = {}
        self._dispute_history: List[DisputeAction] = []

    @property
    def client_id(self) -> int:
        return self._account.client_id

    @property
    def available(self) -> Decimal:
        return self._account.available

    @property
    def held(self) -> Decimal:
        return self._account.held

    @property
    def total(self) -> Decimal:
        return self._account.total

    @property
    def locked(self) -> bool:
        return self._account.locked

    @property
    def dispute_history(self) -> Tuple[DisputeAction, ...]:
        return tuple(self._dispute_history)

    def get_transaction_record(self, transaction_id: int) -> Optional[TransactionRecord]:
        return self._transaction_history.get(transaction_id)

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._transaction_history

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot.from_account(self._account)

    def apply_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a deposit or withdrawal.

        Returns:
            APPLIED: Recorded as accepted, balance changed
            REJECTED: Recorded as rejected (locked account or insufficient funds)
            IGNORED: Transaction id already in history, nothing recorded
        """
        if transaction.client_id != self.client_id:
            raise ClientMismatchError(self.client_id, transaction)

        if self.has_transaction(transaction.transaction_id):
            logger.info(f"{transaction}: transaction id already recorded, skipping duplicate")
            return ProcessingResult.IGNORED

        if self._account.locked:
            logger.info(f"{transaction}: account {self.client_id} is locked, rejecting")
            return self._record(transaction, TransactionState.REJECTED)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._account.credit(transaction.amount)
                return self._record(transaction, TransactionState.ACCEPTED)
            case TransactionType.WITHDRAWAL:
                if self._account.available >= transaction.amount:
                    self._account.debit(transaction.amount)
                    return self._record(transaction, TransactionState.ACCEPTED)
                logger.info(f"{transaction}: insufficient funds (available {self._account.available}), rejecting")
                return self._record(transaction, TransactionState.REJECTED)

    def apply_dispute_action(self, action: DisputeAction) -> ProcessingResult:
        """
        Apply a dispute, resolve or chargeback to a previously recorded transaction.

        Returns:
            APPLIED: The referenced transaction changed state
            IGNORED: No-op (unknown reference, locked account, or the state
                     of the referenced transaction does not allow the action)
        """
        if action.client_id != self.client_id:
            raise ClientMismatchError(self.client_id, action)

        if self._account.locked:
            logger.info(f"{action}: account {self.client_id} is locked, ignoring")
            return ProcessingResult.IGNORED

        record = self._transaction_history.get(action.transaction_id)
        if record is None:
            # Unknown here, or belongs to another client. Not worth recording.
            logger.info(f"{action}: no such transaction for client {self.client_id}, ignoring")
            return ProcessingResult.IGNORED

        match (record.state, action.action_type):
            case (TransactionState.ACCEPTED, DisputeActionType.DISPUTE):
                self._open_dispute(record)
                return self._transition(record, action, TransactionState.DISPUTED)
            case (TransactionState.DISPUTED, DisputeActionType.RESOLVE):
                self._resolve_dispute(record)
                return self._transition(record, action, TransactionState.RESOLVED)
            case (TransactionState.DISPUTED, DisputeActionType.CHARGEBACK):
                self._charge_back(record)
                return self._transition(record, action, TransactionState.CHARGEBACKED)
            case (TransactionState.ACCEPTED, DisputeActionType.RESOLVE | DisputeActionType.CHARGEBACK):
                logger.info(f"{action}: transaction is not disputed, ignoring")
            case (TransactionState.DISPUTED, DisputeActionType.DISPUTE):
                logger.info(f"{action}: transaction already disputed, ignoring")
            case (
                TransactionState.REJECTED | TransactionState.RESOLVED | TransactionState.CHARGEBACKED,
                DisputeActionType.DISPUTE | DisputeActionType.RESOLVE | DisputeActionType.CHARGEBACK,
            ):
                logger.info(f"{action}: transaction is {record.state.value}, ignoring")
            case _ as unreachable:
                assert_never(unreachable)
        return ProcessingResult.IGNORED

    def _open_dispute(self, record: TransactionRecord) -> None:
        match record.transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._account.hold(record.amount)
            case TransactionType.WITHDRAWAL:
                # Funds already left the account; nothing to hold until adjudicated.
                pass

    def _resolve_dispute(self, record: TransactionRecord) -> None:
        match record.transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._account.release_hold(record.amount)
            case TransactionType.WITHDRAWAL:
                # The withdrawal was erroneous, refund it.
                self._account.credit(record.amount)

    def _charge_back(self, record: TransactionRecord) -> None:
        match record.transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._account.remove_held(record.amount)
            case TransactionType.WITHDRAWAL:
                pass
        self._account.locked = True
        logger.warning(f"Chargeback of tx {record.transaction.transaction_id}: account {self.client_id} locked")

    def _record(self, transaction: Transaction, state: TransactionState) -> ProcessingResult:
        self._transaction_history[transaction.transaction_id] = TransactionRecord(transaction, state)
        if state == TransactionState.ACCEPTED:
            return ProcessingResult.APPLIED
        return ProcessingResult.REJECTED

    def _transition(self, record: TransactionRecord, action: DisputeAction, state: TransactionState) -> ProcessingResult:
        record.state = state
        self._dispute_history.append(action)
        return ProcessingResult.APPLIED
