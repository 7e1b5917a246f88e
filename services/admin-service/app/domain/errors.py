"""Error taxonomy raised by the admin authentication workflows."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class AdminServiceError(Exception):
    """Base class for every error surfaced by the admin service."""


class ValidationFailed(AdminServiceError):
    """One or more request fields failed validation."""

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__("Validation Error.")
        self.errors = list(errors)


class Unauthorized(AdminServiceError):
    """Credentials, confirmation state or OTP were rejected."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DuplicateAccountError(AdminServiceError):
    """The store's unique index rejected an insert."""

    def __init__(self, field: str) -> None:
        super().__init__(f"duplicate value for {field}")
        self.field = field


class StoreError(AdminServiceError):
    """The credential store could not complete an operation."""


class DeliveryError(AdminServiceError):
    """The notification transport failed to deliver a message."""
