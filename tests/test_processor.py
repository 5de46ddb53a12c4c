import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from exceptions import LedgerInvariantError
from models import DisputeAction, DisputeActionKind, ProcessingResult, Transaction, TransactionKind
from state_manager import StateManager
from transaction_processor import TransactionProcessor


class TestTransactionProcessor:
    def setup_method(self):
        self.state = StateManager()
        self.processor = TransactionProcessor(self.state)

    def test_deposit(self):
        tx = Transaction(TransactionKind.DEPOSIT, client_id=1, transaction_id=1, amount=Decimal("100"))
        result = self.processor.process_event(tx)

        assert result == ProcessingResult.SUCCESS
        account = self.state.get_or_create_account(1)
        assert account.available == Decimal("100")
        assert account.total == Decimal("100")

    def test_withdrawal_insufficient_funds(self):
        self.processor.process_event(Transaction(TransactionKind.DEPOSIT, client_id=1, transaction_id=1, amount=Decimal("50")))

        withdrawal = Transaction(TransactionKind.WITHDRAWAL, client_id=1, transaction_id=2, amount=Decimal("100"))
        result = self.processor.process_event(withdrawal)

        assert result == ProcessingResult.INSUFFICIENT_FUNDS
        assert self.state.get_or_create_account(1).available == Decimal("50")

    def test_dispute_actions_routed(self):
        self.processor.process_event(Transaction(TransactionKind.DEPOSIT, client_id=1, transaction_id=1, amount=Decimal("100")))

        assert self.processor.process_event(DisputeAction(DisputeActionKind.DISPUTE, client_id=1, transaction_id=1)) == ProcessingResult.SUCCESS
        assert self.state.get_or_create_account(1).held == Decimal("100")

        assert self.processor.process_event(DisputeAction(DisputeActionKind.RESOLVE, client_id=1, transaction_id=1)) == ProcessingResult.SUCCESS
        assert self.state.get_or_create_account(1).held == Decimal("0")

        self.processor.process_event(DisputeAction(DisputeActionKind.DISPUTE, client_id=1, transaction_id=1))
        assert self.processor.process_event(DisputeAction(DisputeActionKind.CHARGEBACK, client_id=1, transaction_id=1)) == ProcessingResult.SUCCESS
        assert self.state.get_or_create_account(1).locked is True

    def test_dispute_from_wrong_client(self):
        self.processor.process_event(Transaction(TransactionKind.DEPOSIT, client_id=1, transaction_id=1, amount=Decimal("100")))

        result = self.processor.process_event(DisputeAction(DisputeActionKind.DISPUTE, client_id=2, transaction_id=1))

        assert result == ProcessingResult.UNKNOWN_TRANSACTION
        assert self.state.get_or_create_account(1).held == Decimal("0")
        assert self.state.get_or_create_account(2).total == Decimal("0")

    def test_unknown_dispute_creates_account(self):
        result = self.processor.process_event(DisputeAction(DisputeActionKind.DISPUTE, client_id=5, transaction_id=99))

        assert result == ProcessingResult.UNKNOWN_TRANSACTION
        assert list(self.state.get_all_accounts()) == [5]

    def test_verify_invariants_after_each_event(self):
        processor = TransactionProcessor(self.state, verify_invariants=True)
        processor.process_event(Transaction(TransactionKind.DEPOSIT, client_id=1, transaction_id=1, amount=Decimal("10")))

        self.state.get_or_create_account(1).held = Decimal("3")
        with pytest.raises(LedgerInvariantError):
            processor.process_event(Transaction(TransactionKind.DEPOSIT, client_id=1, transaction_id=2, amount=Decimal("1")))


class TestStateManager:
    def test_lazy_creation(self):
        state = StateManager()
        first = state.get_or_create_account(3)
        assert state.get_or_create_account(3) is first
        assert len(state.get_all_accounts()) == 1

    def test_snapshots_ordered_by_client(self):
        state = StateManager()
        for client_id in (9, 2, 65535, 0):
            state.get_or_create_account(client_id)

        snapshots = state.snapshots()

        assert [s.client for s in snapshots] == [0, 2, 9, 65535]
        assert all(s.total == Decimal("0") and s.locked is False for s in snapshots)
