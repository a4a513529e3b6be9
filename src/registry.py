import logging
from typing import Dict, List, Optional, Union

from ledger import AccountLedger
from models import AccountSnapshot, DisputeAction, ProcessingResult, Transaction

logger = logging.getLogger(__name__)

Event = Union[Transaction, DisputeAction]


class LedgerRegistry:
    """
    Owns one AccountLedger per client id and routes events to them.
    Ledgers are created on first reference and never removed.
    """

    def __init__(self):
        self._ledgers: Dict[int, AccountLedger] = {}
        # Transaction ids are unique across the whole stream, not per client.
        self._transaction_owners: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._ledgers)

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._ledgers

    def get_or_create_ledger(self, client_id: int) -> AccountLedger:
        """Get existing ledger or create one with zero balances."""
        if client_id not in self._ledgers:
            self._ledgers[client_id] = AccountLedger(client_id)
        return self._ledgers[client_id]

    def get_ledger(self, client_id: int) -> Optional[AccountLedger]:
        return self._ledgers.get(client_id)

    def route(self, event: Event) -> ProcessingResult:
        """Apply an event to the ledger of its own client."""
        if isinstance(event, Transaction):
            return self.apply_transaction(event)
        if isinstance(event, DisputeAction):
            return self.apply_dispute_action(event)
        raise TypeError(f"cannot route {event!r}")

    def apply_transaction(self, transaction: Transaction) -> ProcessingResult:
        ledger = self.get_or_create_ledger(transaction.client_id)

        owner = self._transaction_owners.get(transaction.transaction_id)
        if owner is not None and owner != transaction.client_id:
            logger.warning(f"{transaction}: transaction id already used by client {owner}, ignoring")
            return ProcessingResult.IGNORED

        result = ledger.apply_transaction(transaction)
        self._transaction_owners.setdefault(transaction.transaction_id, transaction.client_id)
        return result

    def apply_dispute_action(self, action: DisputeAction) -> ProcessingResult:
        ledger = self.get_or_create_ledger(action.client_id)
        return ledger.apply_dispute_action(action)

    def snapshot(self, client_id: int) -> Optional[AccountSnapshot]:
        ledger = self._ledgers.get(client_id)
        if ledger is None:
            return None
        return ledger.snapshot()

    def snapshot_all(self) -> List[AccountSnapshot]:
        """Snapshots of every known account, in no particular order."""
        return [ledger.snapshot() for ledger in self._ledgers.values()]
