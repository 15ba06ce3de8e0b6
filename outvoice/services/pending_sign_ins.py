"""
Provider sign-ins waiting for their redirect.

The OAuth redirect can arrive in a different app session from the one
that started the sign-in (a browser redirect opens a fresh Streamlit
session). Each session has its own backend, so the PKCE verifier the
starting backend generated is parked here under a random flow id. The
flow id travels in the redirect URL; the verifier itself never does.

Entries are single-use and expire after `ttl_seconds`.
"""

import secrets
import threading
import time
from typing import Callable, Optional


class PendingSignIns:
    """Thread-safe flow id -> code verifier store shared by all sessions."""

    def __init__(
        self,
        ttl_seconds: float = 600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._verifiers: dict[str, tuple[str, float]] = {}

    @staticmethod
    def new_flow_id() -> str:
        return secrets.token_urlsafe(16)

    def put(self, flow_id: str, code_verifier: str) -> None:
        with self._lock:
            self._drop_expired()
            self._verifiers[flow_id] = (code_verifier, self._clock() + self._ttl_seconds)

    def take(self, flow_id: str) -> Optional[str]:
        """Remove and return the verifier for a flow (None if unknown or expired)."""
        with self._lock:
            self._drop_expired()
            entry = self._verifiers.pop(flow_id, None)
        return entry[0] if entry else None

    def __len__(self) -> int:
        with self._lock:
            self._drop_expired()
            return len(self._verifiers)

    def _drop_expired(self) -> None:
        now = self._clock()
        for flow_id in [f for f, (_, expires) in self._verifiers.items() if expires <= now]:
            del self._verifiers[flow_id]
