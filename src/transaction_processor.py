from typing import Union

from models import DisputeAction, DisputeActionKind, ProcessingResult, Transaction
from state_manager import StateManager

Event = Union[Transaction, DisputeAction]


class TransactionProcessor:
    """
    Routes parsed events to the account owning their client id.
    Caller must ensure only one thread processes events for a given client.
    """

    def __init__(self, state: StateManager, verify_invariants: bool = False):
        self._state = state
        self._verify_invariants = verify_invariants

    def process_event(self, event: Event) -> ProcessingResult:
        """
        Apply a single event to its account, creating the account if needed.

        Returns the account operation's result. Rejections never raise;
        LedgerError subclasses propagate and must stop the run.
        """
        account = self._state.get_or_create_account(event.client_id)

        match event:
            case Transaction():
                result = account.register(event)
            case DisputeAction(kind=DisputeActionKind.DISPUTE):
                result = account.dispute(event.transaction_id)
            case DisputeAction(kind=DisputeActionKind.RESOLVE):
                result = account.resolve(event.transaction_id)
            case DisputeAction(kind=DisputeActionKind.CHARGEBACK):
                result = account.chargeback(event.transaction_id)
            case _:
                raise TypeError(f"Unsupported event: {event!r}")

        if self._verify_invariants:
            account.verify()
        return result
