"""
Session / Identity Service

Holds the single "current user" value that the rest of the app reads to
gate the UI and to scope invoice queries.

FLOW (password):
1. Auth API sign-in -> session (user id)
2. Fetch the `profiles` row for that id -> User
3. Replace current_user

FLOW (provider):
1. begin_provider_sign_in -> authorization URL (user opens it)
2. Provider redirects to the deep link
3. complete_provider_sign_in(deep link) -> session -> profile -> current_user

With a PendingSignIns store the redirect URL carries a `flow` id and the
PKCE verifier is parked under it, so step 3 may run on another session's
backend.

No retries. A failure raises AuthenticationError and leaves current_user
as it was.
"""

from enum import Enum
from typing import Awaitable, Callable, Optional, Union

import structlog

from outvoice.audit import AuditLogger
from outvoice.config import get_settings
from outvoice.deeplink import AuthCallback, parse_auth_callback, with_query
from outvoice.errors import AuthenticationError, BackendError, InvalidDeepLinkError
from outvoice.models.user import User
from outvoice.services.backend.interface import AuthBackendInterface, AuthSession
from outvoice.services.pending_sign_ins import PendingSignIns


logger = structlog.get_logger(__name__)


class OAuthProvider(str, Enum):
    """Supported OAuth providers."""
    GOOGLE = "google"


# Receives the authorization URL, returns the redirect URL after consent
Authorizer = Callable[[str], Awaitable[str]]


class AuthService:
    """
    Session holder.

    IMPORTANT BOUNDARIES:
    1. Only this service writes current_user
    2. Every backend failure surfaces as AuthenticationError
    """

    def __init__(
        self,
        backend: AuthBackendInterface,
        audit_logger: Optional[AuditLogger] = None,
        redirect_url: Optional[str] = None,
        pending_sign_ins: Optional[PendingSignIns] = None,
    ):
        self._backend = backend
        self._audit_logger = audit_logger
        self._pending_sign_ins = pending_sign_ins
        self._redirect_url = redirect_url or get_settings().supabase.redirect_url
        self._current_user: Optional[User] = None

    @property
    def current_user(self) -> Optional[User]:
        return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    @property
    def redirect_url(self) -> str:
        return self._redirect_url

    async def _fail(self, operation: str, error: Exception) -> AuthenticationError:
        message = str(error)
        logger.warning("auth_operation_failed", operation=operation, error=message)
        if self._audit_logger:
            await self._audit_logger.log_auth_failed(operation, message)
        return AuthenticationError(message)

    async def _load_user(self, session: AuthSession) -> User:
        """Fetch the profile for a session, filling in the email if the row lacks it."""
        user = await self._backend.fetch_profile(session.user_id)
        if not user.email and session.email:
            user = user.model_copy(update={"email": session.email})
        return user

    async def sign_in(self, email: str, password: str) -> User:
        """
        Sign in with email and password.

        Returns:
            The signed-in user

        Raises:
            AuthenticationError: If the backend rejects the credentials
        """
        try:
            session = await self._backend.sign_in_with_password(email, password)
            user = await self._load_user(session)
        except BackendError as e:
            raise await self._fail("sign_in", e) from e

        self._current_user = user
        if self._audit_logger:
            await self._audit_logger.log_signed_in(user.id, user.email)
        return user

    async def sign_up(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str = "",
    ) -> User:
        """
        Create an account, record the name on its profile and sign in.

        Raises:
            AuthenticationError: If any of the three backend steps fails
        """
        names = {"first_name": first_name, "last_name": last_name}
        try:
            session = await self._backend.sign_up(email, password, metadata=names)
            await self._backend.update_profile(session.user_id, names)
            user = await self._load_user(session)
        except BackendError as e:
            raise await self._fail("sign_up", e) from e

        self._current_user = user
        if self._audit_logger:
            await self._audit_logger.log_signed_up(user.id, user.email)
        return user

    async def begin_provider_sign_in(
        self,
        provider: OAuthProvider = OAuthProvider.GOOGLE,
    ) -> str:
        """Start an OAuth sign-in and return the URL the user must open."""
        redirect_url = self._redirect_url
        flow_id = None
        if self._pending_sign_ins is not None:
            flow_id = self._pending_sign_ins.new_flow_id()
            redirect_url = with_query(redirect_url, flow=flow_id)

        try:
            url = await self._backend.sign_in_with_oauth(
                OAuthProvider(provider).value, redirect_url
            )
        except BackendError as e:
            raise await self._fail("provider_sign_in", e) from e

        code_verifier = self._backend.pending_code_verifier()
        if flow_id and code_verifier:
            self._pending_sign_ins.put(flow_id, code_verifier)

        if self._audit_logger:
            await self._audit_logger.log_provider_sign_in_started(OAuthProvider(provider).value)
        return url

    async def complete_provider_sign_in(
        self,
        callback: Union[str, AuthCallback],
    ) -> User:
        """
        Finish an OAuth sign-in from the deep link the provider redirected to.

        Args:
            callback: The raw deep-link URL or an already-parsed AuthCallback
        """
        try:
            if isinstance(callback, str):
                callback = parse_auth_callback(callback, self._redirect_url)
            if callback.error:
                raise AuthenticationError(callback.error_description or callback.error)
            code_verifier = None
            if callback.flow and self._pending_sign_ins is not None:
                code_verifier = self._pending_sign_ins.take(callback.flow)
            session = await self._backend.exchange_auth_callback(
                callback, code_verifier=code_verifier
            )
            user = await self._load_user(session)
        except (AuthenticationError, InvalidDeepLinkError, BackendError) as e:
            raise await self._fail("provider_sign_in", e) from e

        self._current_user = user
        if self._audit_logger:
            await self._audit_logger.log_provider_sign_in_completed(user.id, user.email)
        return user

    async def sign_in_with_provider(
        self,
        provider: OAuthProvider = OAuthProvider.GOOGLE,
        authorize: Optional[Authorizer] = None,
    ) -> User:
        """
        Run the whole provider sign-in.

        Args:
            provider: OAuth provider
            authorize: Opens the authorization URL and returns the redirect
                URL once the user has consented. Not needed when the backend
                completes provider sign-in without a consent page.
        """
        url = await self.begin_provider_sign_in(provider)
        if self._backend.interactive_oauth:
            if authorize is None:
                raise AuthenticationError(
                    "Provider sign-in needs a browser to authorize"
                )
            url = await authorize(url)
        return await self.complete_provider_sign_in(url)

    async def sign_out(self) -> None:
        """
        Sign out and clear the current user.

        Raises:
            AuthenticationError: If the backend call fails (user stays signed in)
        """
        previous = self._current_user
        try:
            await self._backend.sign_out()
        except BackendError as e:
            raise await self._fail("sign_out", e) from e

        self._current_user = None
        if self._audit_logger:
            await self._audit_logger.log_signed_out(previous.id if previous else None)

    async def get_current_user(self) -> Optional[User]:
        """
        Look up the active session and refresh current_user from it.

        Returns:
            The user, or None when there is no session
        """
        try:
            session = await self._backend.get_session()
            if session is None:
                self._current_user = None
                return None
            user = await self._load_user(session)
        except BackendError as e:
            raise await self._fail("get_current_user", e) from e

        self._current_user = user
        return user

    async def restore_session(self) -> Optional[User]:
        """Best-effort session restore at startup. Never raises."""
        try:
            user = await self.get_current_user()
        except AuthenticationError:
            return None
        if user and self._audit_logger:
            await self._audit_logger.log_session_restored(user.id)
        return user
