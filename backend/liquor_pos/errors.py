# Overview: Error taxonomy shared by services, the record store, and routes.

from __future__ import annotations


class POSError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(POSError):
    """Missing or invalid input, raised before anything is persisted."""
    status_code = 400


class AuthError(POSError):
    """Credentials or session token rejected."""
    status_code = 401


class PermissionDeniedError(POSError):
    """Authenticated, but the role may not perform the action."""
    status_code = 403


class NotFoundError(POSError):
    """Entity id has no matching row."""
    status_code = 404


class DuplicateError(POSError):
    """Unique constraint violated (username, barcode)."""
    status_code = 409


class PersistenceError(POSError):
    """The underlying record store call failed."""
    status_code = 502


class PartialFailureError(PersistenceError):
    """
    A transaction was persisted but a downstream step failed.

    details always carries transaction_id so the caller can find the
    cancelled record.
    """

    def __init__(self, message: str, transaction_id, details: dict | None = None):
        merged = {"transaction_id": transaction_id}
        merged.update(details or {})
        super().__init__(message, merged)
        self.transaction_id = transaction_id


class InsufficientStockError(PersistenceError):
    """Conditional stock decrement refused: not enough units on hand."""


def error_response(exc: POSError) -> tuple[dict, int]:
    """JSON body and status for a service error."""
    return exc.to_dict(), exc.status_code
