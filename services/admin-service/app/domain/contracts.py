"""Domain-level request and result contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RegisterAdminInput:
    """Sanitised inputs required to register an administrator."""

    first_name: str
    last_name: str
    email: str
    password: str
    phone_number: str
    designation: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    post_code: str = ""


@dataclass(slots=True)
class AuthenticatedAdmin:
    """Identity plus the freshly minted session token returned on login or confirmation."""

    account_id: str
    first_name: str
    last_name: str
    email: str
    token: str
    expires_in: int
