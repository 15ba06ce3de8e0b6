"""
Supabase Backend Implementation

DESIGN DECISION: Everything non-trivial (auth, persistence, filtering,
ordering) is delegated to the hosted backend. This module only maps
request/response shapes to our models.

TRADEOFFS:
- The supabase client is synchronous; each call runs in a worker thread
  (asyncio.to_thread) so awaiting it does not block the event loop
- One backend (and client) per app session: the client holds that
  session's auth tokens and PKCE verifier
- No retries, no caching: a failed call raises BackendError and the
  caller decides what to show
"""

import asyncio
from typing import Any, Iterable, Optional
from uuid import UUID

import structlog
from supabase import Client, ClientOptions, create_client

from outvoice.config import SupabaseSettings, get_settings
from outvoice.deeplink import AuthCallback
from outvoice.errors import BackendError, BackendNotConfiguredError
from outvoice.models.invoice import Invoice
from outvoice.models.user import User
from outvoice.services.backend.interface import (
    AuthBackendInterface,
    AuthSession,
    InvoiceBackendInterface,
)


logger = structlog.get_logger(__name__)

CODE_VERIFIER_SUFFIX = "-code-verifier"


class AuthStorage:
    """
    Storage handed to the auth client (get_item / set_item / remove_item).

    Owned by one backend, so the session tokens and the PKCE verifier the
    client writes stay with that backend.
    """

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def code_verifier(self) -> Optional[str]:
        """The verifier of the OAuth flow started last, if any."""
        for key, value in self._items.items():
            if key.endswith(CODE_VERIFIER_SUFFIX):
                return value
        return None


class SupabaseBackend(AuthBackendInterface, InvoiceBackendInterface):
    """
    Live backend on Supabase auth + PostgREST tables.

    The client is created lazily so constructing the backend never
    touches the network.
    """

    def __init__(
        self,
        client: Optional[Client] = None,
        settings: Optional[SupabaseSettings] = None,
    ):
        self._settings = settings or get_settings().supabase
        self._client = client
        self.storage = AuthStorage()

    @property
    def client(self) -> Client:
        """Get or create the Supabase client."""
        if self._client is None:
            if not self._settings.is_configured:
                raise BackendNotConfiguredError(
                    "SUPABASE_URL and SUPABASE_KEY must be set to use the live backend"
                )
            self._client = create_client(
                self._settings.url,
                self._settings.key,
                options=ClientOptions(flow_type="pkce", storage=self.storage),
            )
            logger.info("supabase_client_created", url=self._settings.url)
        return self._client

    async def _call(self, action: str, fn) -> Any:
        """Run one blocking client call in a worker thread, wrapping failures."""
        try:
            return await asyncio.to_thread(fn)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"{action}: {e}", e)

    def _invoices(self):
        return self.client.table(self._settings.invoices_table)

    def _profiles(self):
        return self.client.table(self._settings.profiles_table)

    @staticmethod
    def _to_session(response: Any) -> AuthSession:
        """Map an auth response (or a bare session) to AuthSession."""
        session = getattr(response, "session", None)
        if session is None and hasattr(response, "access_token"):
            session = response
        user = getattr(response, "user", None) or getattr(session, "user", None)
        if user is None:
            raise BackendError("Auth response contained no user")
        return AuthSession(
            user_id=UUID(str(user.id)),
            email=user.email or "",
            access_token=getattr(session, "access_token", None),
            refresh_token=getattr(session, "refresh_token", None),
            user_metadata=dict(getattr(user, "user_metadata", None) or {}),
        )

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        response = await self._call(
            "Sign-in failed",
            lambda: self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            ),
        )
        return self._to_session(response)

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AuthSession:
        credentials: dict[str, Any] = {"email": email, "password": password}
        if metadata:
            credentials["options"] = {"data": metadata}
        response = await self._call(
            "Sign-up failed", lambda: self.client.auth.sign_up(credentials)
        )
        return self._to_session(response)

    async def sign_in_with_oauth(self, provider: str, redirect_url: str) -> str:
        response = await self._call(
            f"Could not start {provider} sign-in",
            lambda: self.client.auth.sign_in_with_oauth(
                {"provider": provider, "options": {"redirect_to": redirect_url}}
            ),
        )
        return response.url

    def pending_code_verifier(self) -> Optional[str]:
        return self.storage.code_verifier()

    async def exchange_auth_callback(
        self,
        callback: AuthCallback,
        code_verifier: Optional[str] = None,
    ) -> AuthSession:
        if callback.code:
            params = {"auth_code": callback.code}
            if code_verifier:
                params["code_verifier"] = code_verifier
            response = await self._call(
                "Could not complete sign-in",
                lambda: self.client.auth.exchange_code_for_session(params),
            )
        elif callback.access_token and callback.refresh_token:
            response = await self._call(
                "Could not complete sign-in",
                lambda: self.client.auth.set_session(
                    callback.access_token, callback.refresh_token
                ),
            )
        else:
            raise BackendError("Auth callback carries no code or tokens")
        return self._to_session(response)

    async def get_session(self) -> Optional[AuthSession]:
        session = await self._call(
            "Session lookup failed", lambda: self.client.auth.get_session()
        )
        if session is None:
            return None
        return self._to_session(session)

    async def sign_out(self) -> None:
        await self._call("Sign-out failed", lambda: self.client.auth.sign_out())

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    async def fetch_profile(self, user_id: UUID) -> User:
        def fetch() -> User:
            response = (
                self._profiles()
                .select("*")
                .eq("id", str(user_id))
                .single()
                .execute()
            )
            return User.from_profile_row(response.data)

        return await self._call("Failed to fetch profile", fetch)

    async def update_profile(self, user_id: UUID, fields: dict[str, Any]) -> None:
        await self._call(
            "Failed to update profile",
            lambda: self._profiles().update(fields).eq("id", str(user_id)).execute(),
        )

    # -------------------------------------------------------------------------
    # Invoices
    # -------------------------------------------------------------------------

    async def list_invoices(self, user_id: UUID) -> list[Invoice]:
        def fetch() -> list[Invoice]:
            response = (
                self._invoices()
                .select("*")
                .eq("user_id", str(user_id))
                .order("created_date", desc=True)
                .execute()
            )
            return [Invoice.model_validate(row) for row in response.data or []]

        return await self._call("Failed to list invoices", fetch)

    async def insert_invoice(self, row: dict[str, Any]) -> Invoice:
        response = await self._call(
            "Failed to insert invoice", lambda: self._invoices().insert(row).execute()
        )
        if not response.data:
            raise BackendError("Insert returned no row")
        try:
            return Invoice.model_validate(response.data[0])
        except ValueError as e:
            raise BackendError(f"Failed to decode inserted invoice: {e}", e)

    async def delete_invoices(self, invoice_ids: Iterable[UUID]) -> None:
        ids = [str(invoice_id) for invoice_id in invoice_ids]
        if not ids:
            return
        await self._call(
            "Failed to delete invoices",
            lambda: self._invoices().delete().in_("id", ids).execute(),
        )

    async def ping(self) -> None:
        await self._call(
            "Backend unreachable",
            lambda: self._profiles().select("*").limit(1).execute(),
        )
