"""Identity provider wrapper around the store's token endpoints.

Holds the signed-in session for one browser session, refreshes it when
the access token runs out, and tells subscribers when the identity changes.
The access token is pushed onto the :class:`StoreClient` so data calls run
as the signed-in owner.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional

from .rest_client import StoreClient, StoreResult

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

# Refresh a little before the store rejects the token
EXPIRY_LEEWAY_SECONDS = 30

AuthCallback = Callable[[str, Optional["AuthSession"]], None]


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user_id: str
    email: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        if self.expires_at is None:
            return False
        return now >= self.expires_at - EXPIRY_LEEWAY_SECONDS

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], now: float) -> "AuthSession":
        user = payload.get("user") or {}
        expires_at = payload.get("expires_at")
        if expires_at is None and payload.get("expires_in") is not None:
            expires_at = now + float(payload["expires_in"])
        return cls(
            access_token=str(payload["access_token"]),
            user_id=str(user.get("id") or ""),
            email=user.get("email"),
            refresh_token=payload.get("refresh_token"),
            expires_at=float(expires_at) if expires_at is not None else None,
        )


class Subscription:
    """Handle returned by :meth:`IdentityProvider.on_auth_state_change`."""

    def __init__(self, provider: "IdentityProvider", callback: AuthCallback):
        self._provider = provider
        self.callback = callback

    def unsubscribe(self) -> None:
        self._provider._remove_listener(self)


class IdentityProvider:
    """Password sign-in, session lookup and change notifications."""

    def __init__(self, client: StoreClient, *, clock: Callable[[], float] = time.time):
        self.client = client
        self.clock = clock
        self._session: Optional[AuthSession] = None
        self._listeners: List[Subscription] = []

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    def get_session(self) -> StoreResult:
        """Current session, refreshed first if its access token expired.

        Returns a result whose data is the session or ``None``. A failed
        refresh signs the user out locally and carries the error.
        """
        session = self._session
        if session is None or not session.is_expired(self.clock()):
            return StoreResult.success(session)
        if not session.refresh_token:
            self._set_session(None, SIGNED_OUT)
            return StoreResult.success(None)

        result = self.client.auth_post(
            "token",
            {"refresh_token": session.refresh_token},
            params={"grant_type": "refresh_token"},
            token=self.client.key,
        )
        if not result.ok:
            logger.info("Session refresh failed, signing out: %s", result.message)
            self._set_session(None, SIGNED_OUT)
            return StoreResult(data=None, error=result.error)
        refreshed = AuthSession.from_payload(result.data, self.clock())
        self._set_session(refreshed, TOKEN_REFRESHED)
        return StoreResult.success(refreshed)

    def sign_in_with_password(self, email: str, password: str) -> StoreResult:
        result = self.client.auth_post(
            "token",
            {"email": email, "password": password},
            params={"grant_type": "password"},
            token=self.client.key,
        )
        if not result.ok:
            return result
        session = AuthSession.from_payload(result.data, self.clock())
        self._set_session(session, SIGNED_IN)
        logger.info("Signed in as %s", session.email or session.user_id)
        return StoreResult.success(session)

    def sign_out(self) -> StoreResult:
        """End the session locally, and remotely when a token is held."""
        session = self._session
        if session is None:
            return StoreResult.success(None)
        result = self.client.auth_post("logout", token=session.access_token)
        if not result.ok:
            logger.warning("Remote sign-out failed: %s", result.message)
        self._set_session(None, SIGNED_OUT)
        return result

    def on_auth_state_change(self, callback: AuthCallback) -> Subscription:
        subscription = Subscription(self, callback)
        self._listeners.append(subscription)
        return subscription

    def _remove_listener(self, subscription: Subscription) -> None:
        if subscription in self._listeners:
            self._listeners.remove(subscription)

    def _set_session(self, session: Optional[AuthSession], event: str) -> None:
        self._session = session
        self.client.access_token = session.access_token if session else None
        for subscription in list(self._listeners):
            subscription.callback(event, session)
