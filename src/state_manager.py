import threading
from typing import Dict, List

from account import ClientAccount
from models import AccountSnapshot


class StateManager:
    """
    Registry of client accounts.
    Accounts are created on first reference and never removed during a run.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

        # Protects creation of new entries in _accounts when workers run in parallel.
        # Each account itself is only ever touched by the worker that owns its client id.
        self._global_lock = threading.Lock()

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        with self._global_lock:
            if client_id not in self._accounts:
                self._accounts[client_id] = ClientAccount(client_id)
            return self._accounts[client_id]

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        with self._global_lock:
            return dict(self._accounts)

    def snapshots(self) -> List[AccountSnapshot]:
        """Project every account to a snapshot, ordered by ascending client id."""
        accounts = self.get_all_accounts()
        return [accounts[client_id].snapshot() for client_id in sorted(accounts)]
