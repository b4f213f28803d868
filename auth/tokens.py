"""
auth/tokens.py -- JWT token codec and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Every token carries exp, iat and a purpose
       claim ("login", "access" or "refresh"). Each purpose is also signed
       with its own key, HMAC-SHA256(SECRET_KEY, purpose), so a token minted
       for one purpose fails signature verification when read as another,
       even before the purpose claim is checked.

       read() raises InvalidTokenError on any failure. Expired, forged,
       malformed and wrong-purpose tokens look identical to the caller; the
       actual reason is only written to the DEBUG log.

  Passwords: bcrypt, used directly (no passlib wrapper). The hash is stored in
       users.password and never leaves the store layer in a response.

Layer rule: no imports from api/ or users/. Import from core/ is allowed.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Mapping

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from core.errors import InvalidTokenError

logger = logging.getLogger("ticketdesk.auth")

_ALGORITHM = "HS256"

# Claim names shared with the frontend.
EMAIL_CLAIM = "email"
USER_ID_CLAIM = "userId"
_PURPOSE_CLAIM = "purpose"


class TokenPurpose(str, Enum):
    LOGIN = "login"
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPair:
    """An access/refresh pair. Tokens are the only session state."""

    access_token: str
    refresh_token: str


# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt silently truncates input beyond 72 bytes; the API layer caps
    password length at 72 characters.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


class TokenCodec:
    """Issues and reads signed, time-bound tokens.

    Instantiate once per process (see api/main.lifespan) and pass it to the
    services that need it.

    Usage:
        codec = TokenCodec(settings.secret_key, access_ttl=900, refresh_ttl=604800, login_ttl=1800)
        token = codec.issue_access_token(7)
        claims = codec.read(token, TokenPurpose.ACCESS)   # {"userId": 7, ...}
    """

    def __init__(
        self,
        secret_key: str,
        access_ttl: int,
        refresh_ttl: int,
        login_ttl: int,
    ) -> None:
        self._keys = {purpose: _derive_key(secret_key, purpose) for purpose in TokenPurpose}
        self._ttls = {
            TokenPurpose.ACCESS: timedelta(seconds=access_ttl),
            TokenPurpose.REFRESH: timedelta(seconds=refresh_ttl),
            TokenPurpose.LOGIN: timedelta(seconds=login_ttl),
        }

    def issue(
        self,
        claims: Mapping[str, Any],
        purpose: TokenPurpose,
        ttl: timedelta | None = None,
    ) -> str:
        """Encode claims into a signed token for the given purpose.

        ttl defaults to the configured lifetime of that purpose. exp, iat and
        purpose are set here and override any same-named key in claims.
        """
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload.update(
            {
                "iat": now,
                "exp": now + (ttl if ttl is not None else self._ttls[purpose]),
                _PURPOSE_CLAIM: purpose.value,
            }
        )
        return jwt.encode(payload, self._keys[purpose], algorithm=_ALGORITHM)

    def read(self, token: str, purpose: TokenPurpose) -> dict[str, Any]:
        """Verify a token issued for purpose and return its claims.

        Raises InvalidTokenError on a bad signature, malformed input, expiry,
        or a purpose mismatch.
        """
        try:
            payload = jwt.decode(token, self._keys[purpose], algorithms=[_ALGORITHM])
        except ExpiredSignatureError:
            logger.debug("Rejected %s token: expired", purpose.value)
            raise InvalidTokenError() from None
        except JWTError as exc:
            logger.debug("Rejected %s token: %s", purpose.value, exc)
            raise InvalidTokenError() from None
        if payload.get(_PURPOSE_CLAIM) != purpose.value:
            logger.debug("Rejected %s token: purpose claim %r", purpose.value, payload.get(_PURPOSE_CLAIM))
            raise InvalidTokenError()
        return payload

    # ------------------------------------------------------------------
    # Per-purpose helpers
    # ------------------------------------------------------------------

    def issue_login_token(self, email: str) -> str:
        return self.issue({EMAIL_CLAIM: email}, TokenPurpose.LOGIN)

    def issue_access_token(self, user_id: int) -> str:
        return self.issue({USER_ID_CLAIM: user_id}, TokenPurpose.ACCESS)

    def issue_refresh_token(self, user_id: int) -> str:
        return self.issue({USER_ID_CLAIM: user_id}, TokenPurpose.REFRESH)

    def issue_pair(self, user_id: int) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user_id),
            refresh_token=self.issue_refresh_token(user_id),
        )


def _derive_key(secret_key: str, purpose: TokenPurpose) -> str:
    """Return the per-purpose signing key as a hex string."""
    return hmac.new(secret_key.encode(), purpose.value.encode(), hashlib.sha256).hexdigest()
