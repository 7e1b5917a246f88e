"""Admin account DTOs shared across services."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AdminSummary(BaseModel):
    """Public view of an administrator returned after registration."""

    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(..., serialization_alias="_id")
    first_name: str
    last_name: str
    email_id: str
    phone_number: str
    designation: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    post_code: str = ""


class AdminSession(BaseModel):
    """Identity plus the bearer token handed out on login and confirmation."""

    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(..., serialization_alias="_id")
    first_name: str
    last_name: str
    email_id: str
    token: str
    expires_in: int
