"""
auth/service.py -- Login-by-token and refresh-by-token flows.

Both flows are stateless: nothing is written to the store. The user a token
names is re-read on every exchange, so deleting a user is enough to make all
of their tokens useless.

Refresh tokens are not single-use. A refresh token that has been exchanged
stays valid until its own expiry; the pair it produced simply supersedes it.

Layer rule: no imports from api/ or users/.
"""

from __future__ import annotations

import logging

from auth.models import User
from auth.store import UserStore
from auth.tokens import EMAIL_CLAIM, USER_ID_CLAIM, TokenCodec, TokenPair, TokenPurpose
from core.errors import InvalidTokenError, UnauthorizedError

logger = logging.getLogger("ticketdesk.auth")


class AuthService:
    def __init__(self, store: UserStore, codec: TokenCodec) -> None:
        self._store = store
        self._codec = codec

    def authenticate(self, login_token: str) -> TokenPair:
        """Exchange a login token for a fresh access/refresh pair.

        Raises:
            InvalidTokenError: the token does not verify or carries no email.
            UnauthorizedError: no user has that email.
        """
        claims = self._codec.read(login_token, TokenPurpose.LOGIN)
        email = claims.get(EMAIL_CLAIM)
        if not email:
            raise InvalidTokenError()

        user = self._store.get_by_email(email)
        if user is None:
            raise UnauthorizedError("User does not exist.")

        logger.info("Login succeeded for user %s", user.id)
        return self._codec.issue_pair(user.id)

    def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new pair.

        A token whose user has since been deleted is treated as invalid, not
        as an authorization failure.
        """
        claims = self._codec.read(refresh_token, TokenPurpose.REFRESH)
        user_id = claims.get(USER_ID_CLAIM)
        if not user_id:
            raise InvalidTokenError("Invalid refresh token.")

        user = self._store.get_by_id(user_id)
        if user is None:
            raise InvalidTokenError("User not found.")

        logger.info("Session refreshed for user %s", user.id)
        return self._codec.issue_pair(user.id)

    def resolve_access_token(self, access_token: str) -> User:
        """Return the user an access token names.

        Raises UnauthorizedError for any unusable token or a missing user;
        this is the check the authorization dependency runs on every request.
        """
        try:
            claims = self._codec.read(access_token, TokenPurpose.ACCESS)
        except InvalidTokenError:
            raise UnauthorizedError() from None

        user_id = claims.get(USER_ID_CLAIM)
        user = self._store.get_by_id(user_id) if user_id else None
        if user is None:
            raise UnauthorizedError()
        return user
