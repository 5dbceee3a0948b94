"""Error types raised by the ledger core."""


class LedgerError(Exception):
    """Base class for nutrition ledger errors."""


class InvalidInput(LedgerError):  # noqa: N818
    """Raised when a value falls outside its accepted domain."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class StoreUnavailable(LedgerError):  # noqa: N818
    """Raised when the document store cannot be read or written."""


class StreakUpdateFailed(LedgerError):  # noqa: N818
    """Raised when the streak bookkeeping for a log date cannot be persisted."""
