"""In-memory backend for previews, development builds and tests."""

import secrets
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional
from uuid import UUID, uuid4

from outvoice.deeplink import AuthCallback, with_query
from outvoice.errors import BackendError
from outvoice.models.invoice import Invoice, InvoiceStatus
from outvoice.models.user import User
from outvoice.services.backend.interface import (
    AuthBackendInterface,
    AuthSession,
    InvoiceBackendInterface,
)


def sample_invoices(now: Optional[datetime] = None) -> list[Invoice]:
    """Sample rows shown before anything real has been added."""
    now = now or datetime.now(timezone.utc)

    def days(n: int) -> datetime:
        return now + timedelta(days=n)

    return [
        Invoice(
            client_name="Mock Client A",
            invoice_number="MOCK-001",
            amount=Decimal("120.50"),
            status=InvoiceStatus.PAID,
            due_date=days(-10).date(),
            created_date=days(-30),
        ),
        Invoice(
            client_name="Mock Client B",
            invoice_number="MOCK-002",
            amount=Decimal("350.00"),
            status=InvoiceStatus.SENT,
            due_date=days(15).date(),
            created_date=days(-5),
        ),
        Invoice(
            client_name="Mock Client C",
            invoice_number="MOCK-003",
            amount=Decimal("99.99"),
            status=InvoiceStatus.OVERDUE,
            due_date=days(-5).date(),
            created_date=days(-40),
        ),
        Invoice(
            client_name="Another Company Inc.",
            invoice_number="MOCK-004",
            amount=Decimal("1500.00"),
            status=InvoiceStatus.DRAFT,
            due_date=days(30).date(),
            created_date=now,
        ),
    ]


class InMemoryBackend(AuthBackendInterface, InvoiceBackendInterface):
    """
    Fabricating backend.

    Every auth call succeeds and makes up a user instead of going over
    the network. Invoice listing ignores the owner filter and returns all
    rows held in memory (sample rows included).

    Examples:
        >>> backend = InMemoryBackend()
        >>> session = await backend.sign_in_with_password("a@b.c", "pw")
        >>> invoices = await backend.list_invoices(session.user_id)
    """

    interactive_oauth = False

    def __init__(
        self,
        invoices: Optional[Iterable[Invoice]] = None,
        seed_samples: bool = True,
    ) -> None:
        if invoices is not None:
            self._invoices: list[Invoice] = list(invoices)
        elif seed_samples:
            self._invoices = sample_invoices()
        else:
            self._invoices = []
        self._profiles: dict[UUID, User] = {}
        self._session: Optional[AuthSession] = None
        self._code_verifier: Optional[str] = None

    def _start_session(self, user: User) -> AuthSession:
        self._profiles[user.id] = user
        self._session = AuthSession(
            user_id=user.id,
            email=user.email,
            access_token=f"preview-{uuid4().hex}",
            refresh_token=f"preview-{uuid4().hex}",
        )
        return self._session

    # Auth

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        return self._start_session(
            User(email=email, first_name="Preview", last_name="User")
        )

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AuthSession:
        metadata = metadata or {}
        return self._start_session(
            User(
                email=email,
                first_name=metadata.get("first_name", ""),
                last_name=metadata.get("last_name", ""),
            )
        )

    async def sign_in_with_oauth(self, provider: str, redirect_url: str) -> str:
        self._code_verifier = secrets.token_urlsafe(32)
        return with_query(redirect_url, code=f"preview-{provider}")

    def pending_code_verifier(self) -> Optional[str]:
        return self._code_verifier

    async def exchange_auth_callback(
        self,
        callback: AuthCallback,
        code_verifier: Optional[str] = None,
    ) -> AuthSession:
        if not callback.has_credentials:
            raise BackendError("Auth callback carries no code or tokens")
        # A verifier from this backend's own flow must match it
        if code_verifier and self._code_verifier and code_verifier != self._code_verifier:
            raise BackendError("Code verifier does not match the pending sign-in")
        self._code_verifier = None
        provider = "google"
        if callback.code and callback.code.startswith("preview-"):
            provider = callback.code[len("preview-"):]
        return self._start_session(
            User(
                email=f"preview.{provider}@example.com",
                first_name=provider.capitalize(),
                last_name="User",
            )
        )

    async def get_session(self) -> Optional[AuthSession]:
        return self._session

    async def sign_out(self) -> None:
        self._session = None

    async def fetch_profile(self, user_id: UUID) -> User:
        try:
            return self._profiles[user_id]
        except KeyError:
            raise BackendError(f"Profile not found: {user_id}")

    async def update_profile(self, user_id: UUID, fields: dict[str, Any]) -> None:
        user = await self.fetch_profile(user_id)
        self._profiles[user_id] = user.model_copy(update=fields)

    # Invoices

    async def list_invoices(self, user_id: UUID) -> list[Invoice]:
        return sorted(self._invoices, key=lambda i: i.created_date, reverse=True)

    async def insert_invoice(self, row: dict[str, Any]) -> Invoice:
        try:
            stored = Invoice.model_validate({**row, "id": uuid4()})
        except ValueError as e:
            raise BackendError(f"Failed to insert invoice: {e}", e)
        self._invoices.append(stored)
        return stored

    async def delete_invoices(self, invoice_ids: Iterable[UUID]) -> None:
        doomed = set(invoice_ids)
        self._invoices = [i for i in self._invoices if i.id not in doomed]

    async def ping(self) -> None:
        return None
