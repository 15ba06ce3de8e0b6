"""
Audit Models for Outvoice

Every user-visible action (sign-in, sign-out, invoice fetch/add/delete)
produces one AuditEvent. Events are written to the structured log only;
they are never sent to the backend.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_UP = "user_signed_up"
    PROVIDER_SIGN_IN_STARTED = "provider_sign_in_started"
    PROVIDER_SIGN_IN_COMPLETED = "provider_sign_in_completed"
    USER_SIGNED_OUT = "user_signed_out"
    SESSION_RESTORED = "session_restored"
    AUTH_FAILED = "auth_failed"

    # Invoices
    INVOICES_FETCHED = "invoices_fetched"
    INVOICE_ADDED = "invoice_added"
    INVOICES_DELETED = "invoices_deleted"
    INVOICE_OPERATION_FAILED = "invoice_operation_failed"

    # Diagnostics
    DIAGNOSTIC_COMPLETED = "diagnostic_completed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity / whose data is this about?
    entity_type: Optional[str] = None
    entity_id: Optional[UUID] = None
    user_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "user_id": str(self.user_id) if self.user_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.signed_in(user_id, email)
        event = AuditEventBuilder.invoice_added(invoice_id, user_id, number)
    """

    @staticmethod
    def signed_in(user_id: UUID, email: str, method: str = "password") -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_IN,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description=f"User signed in ({method})",
            details={"email": email, "method": method},
        )

    @staticmethod
    def signed_up(user_id: UUID, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_UP,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="New account created",
            details={"email": email},
        )

    @staticmethod
    def provider_sign_in_started(provider: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROVIDER_SIGN_IN_STARTED,
            description=f"OAuth sign-in started with {provider}",
            details={"provider": provider},
        )

    @staticmethod
    def provider_sign_in_completed(user_id: UUID, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROVIDER_SIGN_IN_COMPLETED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="OAuth sign-in completed",
            details={"email": email},
        )

    @staticmethod
    def signed_out(user_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_OUT,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="User signed out",
        )

    @staticmethod
    def session_restored(user_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESTORED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="Existing session restored",
        )

    @staticmethod
    def auth_failed(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Authentication operation failed: {operation}",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def invoices_fetched(user_id: UUID, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICES_FETCHED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            description=f"Fetched {count} invoice(s)",
            details={"count": count},
        )

    @staticmethod
    def invoice_added(invoice_id: UUID, user_id: UUID, invoice_number: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_ADDED,
            entity_type="invoice",
            entity_id=invoice_id,
            user_id=user_id,
            description=f"Invoice {invoice_number} added",
            details={"invoice_number": invoice_number},
        )

    @staticmethod
    def invoices_deleted(invoice_ids: list[UUID], user_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICES_DELETED,
            entity_type="invoice",
            user_id=user_id,
            description=f"Deleted {len(invoice_ids)} invoice(s)",
            details={"invoice_ids": [str(i) for i in invoice_ids]},
        )

    @staticmethod
    def invoice_operation_failed(
        operation: str,
        error_message: str,
        user_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_OPERATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="invoice",
            user_id=user_id,
            description=f"Invoice {operation} failed",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def diagnostic_completed(name: str, succeeded: bool, message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DIAGNOSTIC_COMPLETED,
            severity=AuditSeverity.INFO if succeeded else AuditSeverity.WARNING,
            description=f"Diagnostic '{name}' {'passed' if succeeded else 'failed'}",
            details={"name": name, "succeeded": succeeded},
            error_message=None if succeeded else message,
        )
