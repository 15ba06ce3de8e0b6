"""
Backend diagnostics.

Two checks a developer (or beta tester) can run from the settings screen
to see whether networking, auth and basic table access work:

1. Connection: one-row select from `profiles`
2. Sign-in: a real sign-in with supplied credentials

Results come back as DiagnosticStatus values; nothing here raises.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from outvoice.audit import AuditLogger
from outvoice.errors import OutvoiceError
from outvoice.services.auth_service import AuthService
from outvoice.services.backend.interface import InvoiceBackendInterface


class DiagnosticState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    FAILURE = "failure"


class DiagnosticStatus(BaseModel):
    """Outcome of one diagnostic run."""

    model_config = ConfigDict(frozen=True)

    state: DiagnosticState = DiagnosticState.IDLE
    message: str = ""

    @property
    def description(self) -> str:
        if self.state == DiagnosticState.IDLE:
            return "Idle"
        if self.state == DiagnosticState.RUNNING:
            return "Running…"
        if self.state == DiagnosticState.SUCCESS:
            return "Success"
        return f"Failed – {self.message}"

    @property
    def is_running(self) -> bool:
        return self.state == DiagnosticState.RUNNING


IDLE = DiagnosticStatus()
RUNNING = DiagnosticStatus(state=DiagnosticState.RUNNING)
SUCCESS = DiagnosticStatus(state=DiagnosticState.SUCCESS)


def failure(message: str) -> DiagnosticStatus:
    return DiagnosticStatus(state=DiagnosticState.FAILURE, message=message)


async def run_connection_test(
    backend: InvoiceBackendInterface,
    audit_logger: Optional[AuditLogger] = None,
) -> DiagnosticStatus:
    """Ping the backend."""
    try:
        await backend.ping()
        status = SUCCESS
    except OutvoiceError as e:
        status = failure(str(e))

    if audit_logger:
        await audit_logger.log_diagnostic(
            "connection", status.state == DiagnosticState.SUCCESS, status.message
        )
    return status


async def run_sign_in_test(
    auth_service: AuthService,
    email: str,
    password: str,
    audit_logger: Optional[AuditLogger] = None,
) -> DiagnosticStatus:
    """Sign in with the given credentials. A success leaves the user signed in."""
    if not email or not password:
        return failure("Email and password are required")

    try:
        await auth_service.sign_in(email, password)
        status = SUCCESS
    except OutvoiceError as e:
        status = failure(str(e))

    if audit_logger:
        await audit_logger.log_diagnostic(
            "sign_in", status.state == DiagnosticState.SUCCESS, status.message
        )
    return status
