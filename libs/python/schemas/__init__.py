"""Shared schema exports."""

from .account import AdminSession, AdminSummary
from .envelope import ApiEnvelope, FieldErrorItem

__all__ = [
    "AdminSession",
    "AdminSummary",
    "ApiEnvelope",
    "FieldErrorItem",
]
