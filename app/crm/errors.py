from __future__ import annotations


class CustomerDomainError(Exception):
    """Base class for failures surfaced by the customer operations."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputRejected(CustomerDomainError):
    def __init__(self, message: str, *, reason: str, field: str | None = None):
        super().__init__(message)
        self.reason = reason
        self.field = field


class NotFound(CustomerDomainError):
    pass


class Conflict(CustomerDomainError):
    pass


class PersistenceError(CustomerDomainError):
    """
    The store failed mid-operation. The message is safe to show to callers;
    the underlying driver error is kept as __cause__ for the logs.
    """
