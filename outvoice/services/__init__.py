"""Services package."""

from outvoice.services.backend import (
    AuthBackendInterface,
    AuthSession,
    Backend,
    InMemoryBackend,
    InvoiceBackendInterface,
    SupabaseBackend,
    create_backend,
)
from outvoice.services.auth_service import AuthService, OAuthProvider
from outvoice.services.invoice_service import InvoiceService

__all__ = [
    # Backends
    "AuthBackendInterface",
    "AuthSession",
    "Backend",
    "InMemoryBackend",
    "InvoiceBackendInterface",
    "SupabaseBackend",
    "create_backend",
    # Services
    "AuthService",
    "InvoiceService",
    "OAuthProvider",
]
