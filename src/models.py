from dataclasses import dataclass
from decimal import Context, Decimal, Inexact, InvalidOperation, MAX_EMAX, MIN_EMIN, localcontext
from enum import Enum

# Additions and subtractions never round under this context; if one ever
# would, Inexact is raised instead of a silently truncated balance.
MONEY_CONTEXT = Context(prec=1000, Emax=MAX_EMAX, Emin=MIN_EMIN, traps=[InvalidOperation, Inexact])

ZERO = Decimal("0")


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class DisputeActionType(Enum):
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class TransactionState(Enum):
    """
    Lifecycle of a recorded transaction.

        ACCEPTED --dispute--> DISPUTED --resolve----> RESOLVED
                                       --chargeback-> CHARGEBACKED
        REJECTED (never enters the dispute flow)
    """

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGEBACKED = "chargebacked"


class ProcessingResult(Enum):
    APPLIED = "applied"
    REJECTED = "rejected"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Decimal

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class DisputeAction:
    action_type: DisputeActionType
    client_id: int
    transaction_id: int

    def __repr__(self) -> str:
        return f"DisputeAction({self.action_type.value}, client={self.client_id}, tx={self.transaction_id})"


@dataclass
class TransactionRecord:
    """History entry: the transaction as first seen plus its current state."""

    transaction: Transaction
    state: TransactionState

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    locked: bool = False

    @property
    def total(self) -> Decimal:
        with localcontext(MONEY_CONTEXT):
            return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.available += amount

    def debit(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.available -= amount

    def hold(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            available, held = self.available - amount, self.held + amount
        self.available, self.held = available, held

    def release_hold(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            held, available = self.held - amount, self.available + amount
        self.held, self.available = held, available

    def remove_held(self, amount: Decimal) -> None:
        with localcontext(MONEY_CONTEXT):
            self.held -= amount


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    locked: bool

    @property
    def total(self) -> Decimal:
        with localcontext(MONEY_CONTEXT):
            return self.available + self.held

    @classmethod
    def from_account(cls, account: ClientAccount) -> "AccountSnapshot":
        return cls(
            client_id=account.client_id,
            available=account.available,
            held=account.held,
            locked=account.locked,
        )


class ProcessingStats:
    """Counters for per-event outcomes over one run."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.ignored = 0

    @property
    def processed(self) -> int:
        return self.applied + self.rejected + self.ignored

    def record(self, result: ProcessingResult) -> None:
        match result:
            case ProcessingResult.APPLIED:
                self.applied += 1
            case ProcessingResult.REJECTED:
                self.rejected += 1
            case ProcessingResult.IGNORED:
                self.ignored += 1

    def __repr__(self) -> str:
        return f"ProcessingStats(processed={self.processed}, applied={self.applied}, rejected={self.rejected}, ignored={self.ignored})"
