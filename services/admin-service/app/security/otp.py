"""One-time confirmation codes."""

from __future__ import annotations

import secrets


def generate_otp(length: int = 6) -> str:
    """Return a random numeric code of exactly ``length`` digits with no leading zero."""
    if length < 1:
        raise ValueError("otp length must be positive")
    lower = 10 ** (length - 1)
    return str(lower + secrets.randbelow(9 * lower))


def otp_matches(stored: str | None, submitted: str) -> bool:
    """Exact comparison of a submitted code against the stored one; a cleared code never matches."""
    if stored is None:
        return False
    return secrets.compare_digest(str(stored).encode("utf-8"), submitted.encode("utf-8"))
