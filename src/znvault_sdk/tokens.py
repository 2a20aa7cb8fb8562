"""
Credential state for ZN-Vault SDK.
"""

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

import jwt


@dataclass(frozen=True)
class Credentials:
    """Snapshot of the credentials attached to outgoing requests."""
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    api_key: Optional[str] = None


class TokenStore:
    """
    Single owner of the active credentials.

    Every write builds a new Credentials snapshot and swaps it in while holding
    the write lock, so readers get a consistent snapshot without locking and
    never see half of a multi-field update.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        api_key: Optional[str] = None,
    ):
        self._lock = threading.Lock()
        self._state = Credentials(access_token, refresh_token, api_key)

    def get(self) -> Credentials:
        return self._state

    def _update(self, **changes) -> None:
        with self._lock:
            self._state = replace(self._state, **changes)

    def set_access_token(self, token: Optional[str]) -> None:
        self._update(access_token=token)

    def set_refresh_token(self, token: Optional[str]) -> None:
        self._update(refresh_token=token)

    def set_api_key(self, key: Optional[str]) -> None:
        self._update(api_key=key)

    def set_tokens(self, access_token: Optional[str], refresh_token: Optional[str]) -> None:
        """Replace the access/refresh pair in one step."""
        self._update(access_token=access_token, refresh_token=refresh_token)

    def clear_tokens(self) -> None:
        self._update(access_token=None, refresh_token=None)


def token_expiry(token: str) -> Optional[datetime]:
    """
    Return the `exp` claim of a JWT access token, or None.

    The signature is not verified. Opaque (non-JWT) tokens and tokens without
    an `exp` claim yield None, as do claims outside the platform's time range.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)) or isinstance(exp, bool):
        return None
    try:
        return datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def is_token_expired(token: str, now: Optional[datetime] = None) -> bool:
    expiry = token_expiry(token)
    if expiry is None:
        return False
    return expiry <= (now or datetime.now(timezone.utc))
