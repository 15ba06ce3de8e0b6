"""
Data Models Package

This package contains all Pydantic models used in Outvoice.
Backend rows are decoded into these models before anything else sees them.
"""

from outvoice.models.invoice import (
    Invoice,
    InvoiceStatus,
)
from outvoice.models.onboarding import (
    DEFAULT_ONBOARDING_ITEMS,
    OnboardingItem,
)
from outvoice.models.user import User
from outvoice.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Invoice models
    "Invoice",
    "InvoiceStatus",
    # Onboarding
    "DEFAULT_ONBOARDING_ITEMS",
    "OnboardingItem",
    # Identity
    "User",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
