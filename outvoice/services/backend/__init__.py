"""
Backend Services Package

Provides the abstract backend interfaces and their two implementations:
the live Supabase backend and the in-memory preview backend.
"""

from outvoice.services.backend.interface import (
    AuthBackendInterface,
    AuthSession,
    InvoiceBackendInterface,
)
from outvoice.services.backend.memory import InMemoryBackend, sample_invoices
from outvoice.services.backend.supabase_backend import SupabaseBackend
from outvoice.services.backend.factory import Backend, create_backend

__all__ = [
    # Interfaces
    "AuthBackendInterface",
    "AuthSession",
    "InvoiceBackendInterface",
    # Implementations
    "Backend",
    "InMemoryBackend",
    "SupabaseBackend",
    "create_backend",
    "sample_invoices",
]
