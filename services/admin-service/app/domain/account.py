from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class AdminAccount:
    """Aggregate root for a storefront administrator and its confirmation state."""

    account_id: str
    first_name: str
    last_name: str
    email: str
    password_hash: str
    phone_number: str
    designation: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    post_code: str = ""
    image: str | None = None
    is_confirmed: bool = True
    is_active: bool = True
    confirm_otp: str | None = None
    otp_tries: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
