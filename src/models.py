import threading
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN
from enum import Enum


AMOUNT_PRECISION = Decimal("0.0001")

# Largest balance a 64-bit count of 1/10000 units can hold.
MAX_BALANCE = (Decimal(2 ** 64 - 1) * AMOUNT_PRECISION).quantize(AMOUNT_PRECISION)

MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1


def quantize_amount(amount: Decimal) -> Decimal:
    """Round an amount to the four fractional digits balances are kept in."""
    return amount.quantize(AMOUNT_PRECISION, rounding=ROUND_HALF_EVEN)


class TransactionKind(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class DisputeState(Enum):
    UNDISPUTED = "undisputed"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class DisputeActionKind(Enum):
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    SUCCESS = "success"
    ACCOUNT_LOCKED = "account_locked"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    INVALID_DISPUTE_STATE = "invalid_dispute_state"
    NOT_DISPUTABLE = "not_disputable"


@dataclass
class Transaction:
    kind: TransactionKind
    client_id: int
    transaction_id: int
    amount: Decimal
    dispute_state: DisputeState = DisputeState.UNDISPUTED

    def __repr__(self) -> str:
        return f"Transaction({self.kind.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount}, {self.dispute_state.value})"


@dataclass(frozen=True)
class DisputeAction:
    kind: DisputeActionKind
    client_id: int
    transaction_id: int

    def __repr__(self) -> str:
        return f"DisputeAction({self.kind.value}, client={self.client_id}, tx={self.transaction_id})"


@dataclass(frozen=True)
class AccountSnapshot:
    client: int
    available: Decimal
    held: Decimal
    locked: bool

    @property
    def total(self) -> Decimal:
        return self.available + self.held


class ProcessingStats:
    """Thread-safe counters for tracking processing statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.processed = 0
        self.rejected = 0
        self.malformed = 0

    def record_success(self):
        with self._lock:
            self.processed += 1

    def record_rejection(self):
        with self._lock:
            self.rejected += 1

    def record_malformed(self):
        with self._lock:
            self.malformed += 1
