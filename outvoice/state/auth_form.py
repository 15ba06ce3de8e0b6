"""
Auth form state.

One form toggles between "Sign In" and "Sign Up". The primary action is
gated on field validity; when it is not submittable, nothing is sent to
the backend. Failures are kept as a user-facing message.
"""

from enum import Enum
from typing import Optional

from outvoice.errors import OutvoiceError
from outvoice.models.user import User
from outvoice.services.auth_service import AuthService, Authorizer, OAuthProvider


class AuthMode(str, Enum):
    SIGN_IN = "Sign In"
    SIGN_UP = "Sign Up"


class AuthFormState:
    """Fields and flags behind the authentication sheet."""

    def __init__(self, mode: AuthMode = AuthMode.SIGN_IN):
        self.mode = mode
        self.email = ""
        self.password = ""
        self.first_name = ""  # sign-up only
        self.is_loading = False
        self.error_message: Optional[str] = None

    def toggle_mode(self) -> AuthMode:
        self.mode = AuthMode.SIGN_UP if self.mode == AuthMode.SIGN_IN else AuthMode.SIGN_IN
        self.error_message = None
        return self.mode

    @property
    def can_submit(self) -> bool:
        if self.is_loading or not self.email or not self.password:
            return False
        if self.mode == AuthMode.SIGN_UP and not self.first_name:
            return False
        return True

    async def submit(self, auth_service: AuthService) -> Optional[User]:
        """
        Run the primary action for the current mode.

        Returns:
            The signed-in user, or None if the form was not submittable
            or the call failed (see error_message)
        """
        if not self.can_submit:
            return None

        self.is_loading = True
        self.error_message = None
        try:
            if self.mode == AuthMode.SIGN_IN:
                return await auth_service.sign_in(self.email, self.password)
            return await auth_service.sign_up(self.email, self.password, self.first_name)
        except OutvoiceError as e:
            verb = "sign in" if self.mode == AuthMode.SIGN_IN else "sign up"
            self.error_message = f"Failed to {verb}: {e}"
            return None
        finally:
            self.is_loading = False

    async def sign_in_with_provider(
        self,
        auth_service: AuthService,
        authorize: Optional[Authorizer] = None,
        provider: OAuthProvider = OAuthProvider.GOOGLE,
    ) -> Optional[User]:
        """Provider sign-in (works in both modes)."""
        if self.is_loading:
            return None

        self.is_loading = True
        self.error_message = None
        try:
            return await auth_service.sign_in_with_provider(provider, authorize)
        except OutvoiceError as e:
            self.error_message = f"Google authentication failed: {e}"
            return None
        finally:
            self.is_loading = False
