"""Ledger error taxonomy.

Input problems are reported with ``protean.exceptions.ValidationError`` like
everywhere else in the codebase. The two errors below cover what can go
wrong once storage is involved. Both guarantee that the ledger is left
exactly as it was before the call, so callers may always retry.
"""


class LedgerError(Exception):
    """Base class for recoverable ledger failures."""


class ConflictError(LedgerError):
    """The requested donations no longer match what is pending in storage.

    Raised when some donation ids were never recorded, belong to another
    nonprofit, or were settled by a concurrent payout. Callers should
    refresh their pending view and retry with a corrected set.
    """

    def __init__(self, message: str, requested: int, matched: int):
        super().__init__(message)
        self.requested = requested
        self.matched = matched


class StorageError(LedgerError):
    """The store was unavailable or the unit of work was aborted.

    Nothing was persisted. Callers should retry with backoff.
    """
