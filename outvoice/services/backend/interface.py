"""
Abstract Backend Interface

DESIGN DECISION: Services never talk to the hosted backend client directly.
They depend on these two interfaces, which have two implementations:
1. SupabaseBackend - the live hosted backend
2. InMemoryBackend - fabricated data for previews, development and tests

The implementation is chosen once at startup (see factory.py), so the
services carry no "is the client configured?" branches.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from outvoice.deeplink import AuthCallback
from outvoice.models.invoice import Invoice
from outvoice.models.user import User


class AuthSession(BaseModel):
    """What the auth API hands back after a successful sign-in."""

    model_config = ConfigDict(frozen=True)

    user_id: UUID
    email: str = ""
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    user_metadata: dict[str, Any] = {}


class AuthBackendInterface(ABC):
    """
    Abstract interface for authentication and profile operations.

    All methods raise BackendError on failure.
    """

    # When False the backend completes provider sign-in without sending
    # the user to a consent page (preview backend).
    interactive_oauth: bool = True

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Email/password sign-in."""
        pass

    @abstractmethod
    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AuthSession:
        """
        Create a new auth user.

        Args:
            email: Email address
            password: Password
            metadata: Extra user metadata (first/last name)
        """
        pass

    @abstractmethod
    async def sign_in_with_oauth(self, provider: str, redirect_url: str) -> str:
        """
        Start an OAuth sign-in.

        Returns:
            The URL the user must open to authorize. After consent the
            provider redirects to `redirect_url` (the deep link).
        """
        pass

    def pending_code_verifier(self) -> Optional[str]:
        """
        PKCE verifier of the OAuth sign-in started last, or None.

        The redirect may be handled by another backend instance (a new app
        session); the verifier is carried over and passed to
        exchange_auth_callback there.
        """
        return None

    @abstractmethod
    async def exchange_auth_callback(
        self,
        callback: AuthCallback,
        code_verifier: Optional[str] = None,
    ) -> AuthSession:
        """Turn a parsed OAuth redirect into a session."""
        pass

    @abstractmethod
    async def get_session(self) -> Optional[AuthSession]:
        """Return the active session, or None if nobody is signed in."""
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """End the active session."""
        pass

    @abstractmethod
    async def fetch_profile(self, user_id: UUID) -> User:
        """Fetch the `profiles` row for a user."""
        pass

    @abstractmethod
    async def update_profile(self, user_id: UUID, fields: dict[str, Any]) -> None:
        """Update columns of a user's `profiles` row."""
        pass


class InvoiceBackendInterface(ABC):
    """
    Abstract interface for invoice table operations.

    All methods raise BackendError on failure.
    """

    @abstractmethod
    async def list_invoices(self, user_id: UUID) -> list[Invoice]:
        """
        List a user's invoices, newest `created_date` first.

        Args:
            user_id: Owning user (the filter key)
        """
        pass

    @abstractmethod
    async def insert_invoice(self, row: dict[str, Any]) -> Invoice:
        """
        Insert one invoice row.

        Returns:
            The row as stored by the backend (with its generated id)
        """
        pass

    @abstractmethod
    async def delete_invoices(self, invoice_ids: Iterable[UUID]) -> None:
        """Delete the rows with the given ids."""
        pass

    @abstractmethod
    async def ping(self) -> None:
        """Cheapest possible round trip; raises BackendError if unreachable."""
        pass
