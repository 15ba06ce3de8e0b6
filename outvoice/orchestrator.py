"""
Application wiring for Outvoice

This module ties together the components and defines the app flow:
1. Launch -> onboarding (until completed)
2. Onboarding done -> authentication
3. Signed in -> main tabs, with Invoices as the main screen

DESIGN DECISION: Shared state (current user, invoice list) lives in one
AppState object that the UI receives explicitly. Each app session gets its own
AppState and backend; only the cached settings and the pending sign-in
store are shared.
"""

from enum import Enum
from typing import Optional

from outvoice.audit import AuditLogger, configure_logging
from outvoice.config import Settings, get_settings
from outvoice.services.auth_service import AuthService
from outvoice.services.backend import Backend, create_backend
from outvoice.services.invoice_service import InvoiceService
from outvoice.services.pending_sign_ins import PendingSignIns
from outvoice.state import (
    AuthFormState,
    InvoiceListState,
    NavigationState,
    OnboardingState,
)


class AppPhase(str, Enum):
    ONBOARDING = "onboarding"
    AUTH = "auth"
    MAIN = "main"


class AppState:
    """
    Everything the UI needs, created once per app session.

    The services are shared; the view-state containers belong to their
    screens but are kept here so the UI can survive reruns.
    """

    def __init__(
        self,
        backend: Backend,
        audit_logger: Optional[AuditLogger] = None,
        redirect_url: Optional[str] = None,
        pending_sign_ins: Optional[PendingSignIns] = None,
    ):
        self.backend = backend
        self.audit_logger = audit_logger or AuditLogger()
        self.auth_service = AuthService(
            backend,
            audit_logger=self.audit_logger,
            redirect_url=redirect_url,
            pending_sign_ins=pending_sign_ins,
        )
        self.invoice_service = InvoiceService(
            self.auth_service,
            backend,
            audit_logger=self.audit_logger,
        )

        self.navigation = NavigationState()
        self.onboarding = OnboardingState()
        self.auth_form = AuthFormState()
        self.invoice_list = InvoiceListState(self.invoice_service)

    @property
    def phase(self) -> AppPhase:
        if not self.onboarding.completed:
            return AppPhase.ONBOARDING
        if not self.auth_service.is_authenticated:
            return AppPhase.AUTH
        return AppPhase.MAIN

    async def start(self) -> None:
        """Restore a previous session (if any) and load its invoices."""
        user = await self.auth_service.restore_session()
        if user is not None:
            self.onboarding.complete()
            await self.invoice_list.load()

    async def sign_out(self) -> None:
        """Sign out, then drop the signed-out user's invoices."""
        await self.auth_service.sign_out()
        await self.invoice_list.load()


def create_app_components(
    settings: Optional[Settings] = None,
    backend: Optional[Backend] = None,
    pending_sign_ins: Optional[PendingSignIns] = None,
) -> AppState:
    """
    Factory function to create the application state.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        backend: Explicit backend; otherwise a new one chosen from settings.
            Each app session needs its own: the backend holds the session.
        pending_sign_ins: Store shared by all sessions that carries provider
            sign-ins across the redirect

    Returns:
        The wired AppState
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    return AppState(
        backend=backend or create_backend(settings),
        audit_logger=AuditLogger(),
        redirect_url=settings.supabase.redirect_url,
        pending_sign_ins=pending_sign_ins,
    )
