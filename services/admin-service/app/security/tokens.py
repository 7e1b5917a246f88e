"""Utilities for issuing and validating admin session JWTs."""

from __future__ import annotations

import time
from typing import Any

import jwt

from ..config import Settings
from ..domain.account import AdminAccount

ALGORITHM = "HS256"


class TokenIssuer:
    """Mint and verify HS256 session tokens from explicitly supplied settings."""

    def __init__(self, *, secret: str, issuer: str, ttl_seconds: int) -> None:
        self._secret = secret
        self._issuer = issuer
        self._ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret=settings.jwt_secret,
            issuer=settings.jwt_issuer,
            ttl_seconds=settings.jwt_ttl_seconds,
        )

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, account: AdminAccount) -> tuple[str, int]:
        """Create a signed JWT representing an authenticated administrator.

        Parameters
        ----------
        account:
            Administrator whose identity and display names become the token claims.

        Returns
        -------
        tuple[str, int]
            A tuple containing the encoded JWT string and its TTL (in seconds).
        """

        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "sub": account.account_id,
            "first_name": account.first_name,
            "last_name": account.last_name,
            "email": account.email,
            "iat": now,
            "exp": now + self._ttl_seconds,
        }
        token = jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        return token, self._ttl_seconds

    def decode(self, token: str) -> dict[str, Any]:
        """Decode and verify a JWT returning its payload.

        Raises
        ------
        jwt.PyJWTError
            Propagated when the token is invalid, expired, or signed by another issuer.
        """

        return jwt.decode(
            token,
            self._secret,
            algorithms=[ALGORITHM],
            issuer=self._issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
