import logging
from decimal import Decimal
from typing import Dict, Optional, Union

from exceptions import BalanceOverflowError, LedgerInvariantError
from models import (
    MAX_BALANCE,
    AccountSnapshot,
    DisputeState,
    ProcessingResult,
    Transaction,
    TransactionKind,
)

logger = logging.getLogger(__name__)


def _checked_add(balance: Decimal, amount: Decimal, what: str) -> Decimal:
    result = balance + amount
    if result > MAX_BALANCE:
        raise BalanceOverflowError(f"{what} balance overflow: {balance} + {amount} exceeds {MAX_BALANCE}")
    return result


class ClientAccount:
    """
    One client's balances and transaction history.

    Every mutating operation returns a ProcessingResult; rejections leave the
    account untouched and are never raised. Only broken invariants and balance
    overflow raise, and both are fatal for the run.
    """

    def __init__(self, client_id: int):
        self.client_id = client_id
        self.available = Decimal("0")
        self.held = Decimal("0")
        self.locked = False
        self.transactions: Dict[int, Transaction] = {}

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        return self.transactions.get(transaction_id)

    def register(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a new deposit or withdrawal and record it in the history.

        Returns:
            SUCCESS: Balance updated and transaction stored as undisputed
            ACCOUNT_LOCKED: Account was frozen by a chargeback
            DUPLICATE_TRANSACTION: Transaction id already in this account's history
            INSUFFICIENT_FUNDS: Withdrawal larger than the available balance
        """
        if self.locked:
            logger.warning(f"{transaction.kind.value.capitalize()} tx {transaction.transaction_id}: client {self.client_id} is locked, rejecting")
            return ProcessingResult.ACCOUNT_LOCKED

        if transaction.transaction_id in self.transactions:
            logger.info(f"{transaction.kind.value.capitalize()} tx {transaction.transaction_id}: duplicate transaction id for client {self.client_id}, skipping")
            return ProcessingResult.DUPLICATE_TRANSACTION

        match transaction.kind:
            case TransactionKind.DEPOSIT:
                self.available = _checked_add(self.available, transaction.amount, "available")
            case TransactionKind.WITHDRAWAL:
                if transaction.amount > self.available:
                    logger.warning(f"Withdrawal tx {transaction.transaction_id}: insufficient funds for client {self.client_id} (available {self.available}, requested {transaction.amount})")
                    return ProcessingResult.INSUFFICIENT_FUNDS
                self.available -= transaction.amount

        transaction.dispute_state = DisputeState.UNDISPUTED
        self.transactions[transaction.transaction_id] = transaction
        return ProcessingResult.SUCCESS

    def dispute(self, transaction_id: int) -> ProcessingResult:
        """Hold the funds of an undisputed deposit."""
        original = self.transactions.get(transaction_id)

        if original is None:
            logger.info(f"Dispute for tx {transaction_id}: not found for client {self.client_id}")
            return ProcessingResult.UNKNOWN_TRANSACTION

        if original.dispute_state != DisputeState.UNDISPUTED:
            logger.info(f"Dispute for tx {transaction_id}: transaction is {original.dispute_state.value}, ignoring")
            return ProcessingResult.INVALID_DISPUTE_STATE

        # Funds of a withdrawal have already left the account, so there is nothing to hold.
        if original.kind != TransactionKind.DEPOSIT:
            logger.warning(f"Dispute for tx {transaction_id}: only deposits can be disputed (got {original.kind.value})")
            return ProcessingResult.NOT_DISPUTABLE

        # A deposit that has since been partly withdrawn is not partially held.
        if original.amount > self.available:
            logger.warning(f"Dispute for tx {transaction_id}: available balance {self.available} of client {self.client_id} does not cover disputed amount {original.amount}")
            return ProcessingResult.INSUFFICIENT_FUNDS

        self.held = _checked_add(self.held, original.amount, "held")
        self.available -= original.amount
        original.dispute_state = DisputeState.DISPUTED
        return ProcessingResult.SUCCESS

    def resolve(self, transaction_id: int) -> ProcessingResult:
        """Release the held funds of a disputed deposit back to available."""
        original = self._get_disputed(transaction_id, "Resolve")
        if isinstance(original, ProcessingResult):
            return original

        available = _checked_add(self.available, original.amount, "available")
        self._release_held(original, "Resolve")
        self.available = available
        original.dispute_state = DisputeState.UNDISPUTED
        return ProcessingResult.SUCCESS

    def chargeback(self, transaction_id: int) -> ProcessingResult:
        """Forfeit the held funds of a disputed deposit and lock the account."""
        original = self._get_disputed(transaction_id, "Chargeback")
        if isinstance(original, ProcessingResult):
            return original

        self._release_held(original, "Chargeback")
        self.locked = True
        original.dispute_state = DisputeState.CHARGED_BACK
        logger.warning(f"Chargeback for tx {transaction_id}: client {self.client_id} is now locked")
        return ProcessingResult.SUCCESS

    def _get_disputed(self, transaction_id: int, action: str) -> Union[Transaction, ProcessingResult]:
        original = self.transactions.get(transaction_id)

        if original is None:
            logger.info(f"{action} for tx {transaction_id}: not found for client {self.client_id}")
            return ProcessingResult.UNKNOWN_TRANSACTION

        if original.dispute_state != DisputeState.DISPUTED:
            logger.info(f"{action} for tx {transaction_id}: transaction is {original.dispute_state.value}, not disputed")
            return ProcessingResult.INVALID_DISPUTE_STATE

        return original

    def _release_held(self, original: Transaction, action: str) -> None:
        if original.amount > self.held:
            message = (
                f"{action} for tx {original.transaction_id}: held balance {self.held} of client "
                f"{self.client_id} is below disputed amount {original.amount}"
            )
            logger.critical(message)
            raise LedgerInvariantError(message)
        self.held -= original.amount

    def verify(self) -> None:
        """Re-check the balance invariants, raising LedgerInvariantError on the first violation."""
        if self.available < 0 or self.held < 0:
            raise LedgerInvariantError(
                f"Client {self.client_id}: negative balance (available {self.available}, held {self.held})"
            )

        disputed = sum(
            (t.amount for t in self.transactions.values() if t.dispute_state == DisputeState.DISPUTED),
            Decimal("0"),
        )
        if disputed != self.held:
            raise LedgerInvariantError(
                f"Client {self.client_id}: held balance {self.held} does not match disputed total {disputed}"
            )

        for transaction_id, transaction in self.transactions.items():
            if transaction.kind == TransactionKind.WITHDRAWAL and transaction.dispute_state != DisputeState.UNDISPUTED:
                raise LedgerInvariantError(
                    f"Client {self.client_id}: withdrawal tx {transaction_id} is {transaction.dispute_state.value}"
                )

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client=self.client_id,
            available=self.available,
            held=self.held,
            locked=self.locked,
        )

    def __repr__(self) -> str:
        return f"ClientAccount(client={self.client_id}, available={self.available}, held={self.held}, locked={self.locked}, transactions={len(self.transactions)})"
