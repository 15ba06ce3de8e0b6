"""
Error taxonomy for Outvoice.

Errors are never retried. They propagate to the UI boundary, which shows
the message to the user as-is. No error leaves a service in a state other
than the one it had before the failing call (fetch is the exception: a
failed fetch leaves the invoice list empty).
"""

from typing import Optional


class OutvoiceError(Exception):
    """Base exception for all Outvoice errors."""
    pass


class BackendError(OutvoiceError):
    """A call to the hosted backend failed (transport, API or decode error)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class BackendNotConfiguredError(BackendError):
    """The live backend was requested but URL/key are missing."""

    def __init__(self, message: str):
        super().__init__(message)


class AuthenticationError(OutvoiceError):
    """Sign-in, sign-up, provider sign-in or sign-out failed."""
    pass


class NotAuthenticatedError(OutvoiceError):
    """A user-scoped operation was attempted with no signed-in user."""
    pass


class InvalidDeepLinkError(OutvoiceError):
    """A URL handed to the deep-link entry point is not an auth callback."""
    pass


class InvoiceServiceError(OutvoiceError):
    """Base class for classified invoice operation failures."""

    operation = "process"

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(str(cause) or cause.__class__.__name__)


class InvoiceFetchError(InvoiceServiceError):
    """Fetching the user's invoices failed."""

    operation = "fetch"


class InvoiceAddError(InvoiceServiceError):
    """Adding an invoice failed."""

    operation = "add"


class InvoiceDeleteError(InvoiceServiceError):
    """Deleting invoices failed."""

    operation = "delete"
