"""Application exception types.

Provider clients raise ``ProviderError`` at their boundary so the dispatcher
can decide between falling back and surfacing the failure. The storage layer
raises ``RecordNotFound`` or ``StorageError`` so callers can tell a missing
row apart from a broken database.
"""
from typing import Optional


class ProviderError(Exception):
    """An upstream AI/grammar provider failed or returned something unusable."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}")


class RecordNotFound(Exception):
    def __init__(self, entity: str, record_id: int):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id} not found")


class StorageError(Exception):
    """A database operation failed. ``cause`` carries the driver error."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)
