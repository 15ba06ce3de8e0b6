"""
Audit Logger

DESIGN DECISION: Every user action that touches the backend is logged.
This provides:
1. Traceability of sign-in / sign-out and invoice mutations
2. Debugging capability when the backend rejects a call

The audit logger:
- Is async so services can await it inline
- Never raises (a logging failure must not break the user's action)
"""

import logging
from typing import Optional
from uuid import UUID

import structlog

from outvoice.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Set the stdlib level that structlog's filter_by_level reads."""
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger("outvoice").setLevel(level)


class AuditLogger:
    """Central audit logging service (structured local log)."""

    def __init__(self, logger_name: str = "outvoice.audit"):
        self._logger = structlog.get_logger(logger_name)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Swallowed: audit output must not fail the caller
            return False
        return True

    async def log_signed_in(self, user_id: UUID, email: str, method: str = "password") -> None:
        await self.log(AuditEventBuilder.signed_in(user_id, email, method))

    async def log_signed_up(self, user_id: UUID, email: str) -> None:
        await self.log(AuditEventBuilder.signed_up(user_id, email))

    async def log_provider_sign_in_started(self, provider: str) -> None:
        await self.log(AuditEventBuilder.provider_sign_in_started(provider))

    async def log_provider_sign_in_completed(self, user_id: UUID, email: str) -> None:
        await self.log(AuditEventBuilder.provider_sign_in_completed(user_id, email))

    async def log_signed_out(self, user_id: Optional[UUID]) -> None:
        await self.log(AuditEventBuilder.signed_out(user_id))

    async def log_session_restored(self, user_id: UUID) -> None:
        await self.log(AuditEventBuilder.session_restored(user_id))

    async def log_auth_failed(self, operation: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.auth_failed(operation, error_message))

    async def log_invoices_fetched(self, user_id: UUID, count: int) -> None:
        await self.log(AuditEventBuilder.invoices_fetched(user_id, count))

    async def log_invoice_added(self, invoice_id: UUID, user_id: UUID, invoice_number: str) -> None:
        await self.log(AuditEventBuilder.invoice_added(invoice_id, user_id, invoice_number))

    async def log_invoices_deleted(self, invoice_ids: list[UUID], user_id: Optional[UUID]) -> None:
        await self.log(AuditEventBuilder.invoices_deleted(invoice_ids, user_id))

    async def log_invoice_operation_failed(
        self,
        operation: str,
        error_message: str,
        user_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.invoice_operation_failed(operation, error_message, user_id)
        )

    async def log_diagnostic(self, name: str, succeeded: bool, message: str) -> None:
        await self.log(AuditEventBuilder.diagnostic_completed(name, succeeded, message))
