"""Fatal ledger errors. Expected rejections are never raised."""


class LedgerError(Exception):
    """Base for all fatal ledger errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class LedgerInvariantError(LedgerError):
    """Raised when account state contradicts the ledger invariants (e.g. held balance going negative)."""


class BalanceOverflowError(LedgerError):
    """Raised when a balance would exceed the largest representable amount."""
