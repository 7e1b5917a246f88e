"""Response envelope wrapping every admin API payload."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class FieldErrorItem(BaseModel):
    field: str
    message: str


class ApiEnvelope(BaseModel):
    success: bool
    message: str
    data: Any = None
