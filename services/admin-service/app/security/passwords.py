"""bcrypt password hashing helpers."""

from __future__ import annotations

import bcrypt

# bcrypt only consumes the first 72 bytes of a secret.
_MAX_SECRET_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_SECRET_BYTES]


class PasswordHasher:
    """Salted one-way hashing with a configurable bcrypt cost factor."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds
        # Compared against when the account is unknown so both login paths cost one bcrypt check.
        self._decoy_hash = self.hash("decoy-password").encode("utf-8")

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(_secret(password), bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Return ``True`` when ``password`` matches ``password_hash``.

        A missing hash is checked against a decoy and always fails.
        """
        if not password_hash:
            bcrypt.checkpw(_secret(password), self._decoy_hash)
            return False
        try:
            return bcrypt.checkpw(_secret(password), password_hash.encode("utf-8"))
        except ValueError:
            return False
