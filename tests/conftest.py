"""
Shared fixtures.

No real backend calls in tests: services run against InMemoryBackend,
and SupabaseBackend runs against FakeSupabaseClient below.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, Optional
from uuid import uuid4

import pytest

from outvoice.audit import AuditLogger
from outvoice.config import get_settings
from outvoice.models.invoice import Invoice, InvoiceStatus
from outvoice.services.auth_service import AuthService
from outvoice.services.backend import InMemoryBackend
from outvoice.services.invoice_service import InvoiceService


REDIRECT_URL = "outvoice://login-callback"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer .env / shell settings out of the tests."""
    for name in (
        "SUPABASE_URL",
        "SUPABASE_KEY",
        "SUPABASE_REDIRECT_URL",
        "USE_PREVIEW_DATA",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def build_invoice(
    number: str = "INV-001",
    client: str = "Acme Corp",
    amount: str = "100.00",
    created: Optional[datetime] = None,
    **extra: Any,
) -> Invoice:
    return Invoice(
        client_name=client,
        invoice_number=number,
        amount=Decimal(amount),
        status=extra.pop("status", InvoiceStatus.SENT),
        due_date=extra.pop("due_date", date(2025, 4, 1)),
        created_date=created or datetime(2025, 3, 1, tzinfo=timezone.utc),
        **extra,
    )


@pytest.fixture
def make_invoice():
    return build_invoice


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend(seed_samples=False)


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def auth_service(backend, audit_logger) -> AuthService:
    return AuthService(backend, audit_logger=audit_logger, redirect_url=REDIRECT_URL)


@pytest.fixture
def invoice_service(auth_service, backend, audit_logger) -> InvoiceService:
    return InvoiceService(auth_service, backend, audit_logger=audit_logger)


# =============================================================================
# Fake Supabase client
# =============================================================================

class FakeQuery:
    """Records the builder chain and returns canned data on execute()."""

    def __init__(self, data: Any = None, error: Optional[Exception] = None):
        self.data = data
        self.error = error
        self.calls: list[tuple] = []

    def _record(self, name: str, *args: Any, **kwargs: Any) -> "FakeQuery":
        self.calls.append((name, args, kwargs))
        return self

    def select(self, *args, **kwargs):
        return self._record("select", *args, **kwargs)

    def eq(self, *args, **kwargs):
        return self._record("eq", *args, **kwargs)

    def in_(self, *args, **kwargs):
        return self._record("in_", *args, **kwargs)

    def order(self, *args, **kwargs):
        return self._record("order", *args, **kwargs)

    def limit(self, *args, **kwargs):
        return self._record("limit", *args, **kwargs)

    def single(self, *args, **kwargs):
        return self._record("single", *args, **kwargs)

    def insert(self, *args, **kwargs):
        return self._record("insert", *args, **kwargs)

    def update(self, *args, **kwargs):
        return self._record("update", *args, **kwargs)

    def delete(self, *args, **kwargs):
        return self._record("delete", *args, **kwargs)

    def execute(self):
        self.calls.append(("execute", (), {}))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=self.data)


class FakeAuth:
    """Stands in for client.auth; each method returns the configured response."""

    def __init__(self):
        self.responses: dict[str, Any] = {}
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple] = []

    def _call(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        if name in self.errors:
            raise self.errors[name]
        return self.responses.get(name)

    def sign_in_with_password(self, credentials):
        return self._call("sign_in_with_password", credentials)

    def sign_up(self, credentials):
        return self._call("sign_up", credentials)

    def sign_in_with_oauth(self, credentials):
        return self._call("sign_in_with_oauth", credentials)

    def exchange_code_for_session(self, params):
        return self._call("exchange_code_for_session", params)

    def set_session(self, access_token, refresh_token):
        return self._call("set_session", access_token, refresh_token)

    def get_session(self):
        return self._call("get_session")

    def sign_out(self):
        return self._call("sign_out")


class FakeSupabaseClient:
    def __init__(self):
        self.auth = FakeAuth()
        self.queries: dict[str, FakeQuery] = {}

    def set_table(self, name: str, data: Any = None, error: Optional[Exception] = None) -> FakeQuery:
        self.queries[name] = FakeQuery(data=data, error=error)
        return self.queries[name]

    def table(self, name: str) -> FakeQuery:
        return self.queries.setdefault(name, FakeQuery())


def build_auth_response(user_id=None, email: str = "ada@example.com", with_session: bool = True):
    """Shape of a supabase AuthResponse."""
    user = SimpleNamespace(id=str(user_id or uuid4()), email=email, user_metadata={})
    session = None
    if with_session:
        session = SimpleNamespace(access_token="access", refresh_token="refresh", user=user)
    return SimpleNamespace(user=user, session=session)


@pytest.fixture
def auth_response():
    return build_auth_response


@pytest.fixture
def fake_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()
