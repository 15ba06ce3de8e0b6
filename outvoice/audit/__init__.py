"""Audit logging package."""

from outvoice.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
