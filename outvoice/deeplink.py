"""
Deep link entry point.

The app registers a single custom URL (default
``outvoice://login-callback``). It is used only as the OAuth redirect
target: the provider appends either an authorization ``code`` (PKCE
flow) or ``access_token``/``refresh_token`` in the fragment (implicit
flow), or an ``error``.
"""

from typing import Mapping, Optional
from urllib.parse import parse_qs, urlencode, urlparse

from pydantic import BaseModel, ConfigDict

from outvoice.errors import InvalidDeepLinkError


class AuthCallback(BaseModel):
    """Parameters carried by an OAuth redirect."""

    model_config = ConfigDict(frozen=True)

    code: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None
    # Id of the pending sign-in this redirect completes
    flow: Optional[str] = None

    @classmethod
    def from_params(cls, params: Mapping[str, object]) -> "AuthCallback":
        """Build from a flat mapping (query params); list values take the first item."""
        values = {}
        for name in cls.model_fields:
            value = params.get(name)
            if isinstance(value, (list, tuple)):
                value = value[0] if value else None
            if value:
                values[name] = str(value)
        return cls(**values)

    @property
    def has_credentials(self) -> bool:
        return bool(self.code or (self.access_token and self.refresh_token))


def with_query(url: str, **params: str) -> str:
    """Append query parameters to a URL, keeping the ones it already has."""
    parsed = urlparse(url)
    query = "&".join(part for part in (parsed.query, urlencode(params)) if part)
    return parsed._replace(query=query).geturl()


def _same_target(url, redirect) -> bool:
    return (
        url.scheme.lower() == redirect.scheme.lower()
        and url.netloc.lower() == redirect.netloc.lower()
        and url.path.rstrip("/") == redirect.path.rstrip("/")
    )


def parse_auth_callback(url: str, redirect_url: str) -> AuthCallback:
    """
    Parse an incoming deep link.

    Raises:
        InvalidDeepLinkError: The URL is not the configured redirect, or
            carries neither credentials nor an error.
    """
    parsed = urlparse(url)
    if not _same_target(parsed, urlparse(redirect_url)):
        raise InvalidDeepLinkError(f"Not an auth callback: {url}")

    # Fragment first so query params win on conflict
    params: dict[str, list[str]] = {}
    params.update(parse_qs(parsed.fragment))
    params.update(parse_qs(parsed.query))

    callback = AuthCallback.from_params(params)
    if not callback.has_credentials and not callback.error:
        raise InvalidDeepLinkError(f"Auth callback carries no code or tokens: {url}")
    return callback
