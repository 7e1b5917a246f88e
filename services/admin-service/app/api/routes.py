"""HTTP route definitions for admin account authentication."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict
from schemas import AdminSession, AdminSummary

from ..config import get_settings
from ..domain.account import AdminAccount
from ..domain.contracts import AuthenticatedAdmin
from ..domain.errors import AdminServiceError, Unauthorized
from ..domain.service import AdminAuthService
from ..security.throttling import build_throttle
from .responses import response_from_error, success_response, throttled_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin-auth"])


class _AuthBody(BaseModel):
    """Lenient body model; the domain validation pipeline owns field rules and messages."""

    model_config = ConfigDict(coerce_numbers_to_str=True)


class RegisterRequest(_AuthBody):
    first_name: str | None = None
    last_name: str | None = None
    email_id: str | None = None
    password: str | None = None
    phone_number: str | None = None
    designation: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    post_code: str | None = None


class LoginRequest(_AuthBody):
    email_id: str | None = None
    password: str | None = None


class VerifyConfirmRequest(_AuthBody):
    email_id: str | None = None
    otp: str | None = None


class ResendConfirmOtpRequest(_AuthBody):
    email_id: str | None = None


settings = get_settings()
throttle = build_throttle(settings)
bearer = HTTPBearer(auto_error=False)


def get_service(request: Request) -> AdminAuthService:
    """Resolve the `AdminAuthService` stored on the FastAPI application state."""
    service: AdminAuthService = request.app.state.admin_auth_service
    return service


def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    service: AdminAuthService = Depends(get_service),
) -> AdminAccount:
    """Resolve the bearer token on a privileged request to its administrator."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("Authentication required.")
    return service.authenticate_token(credentials.credentials)


def _throttled(operation: str, email: str | None) -> bool:
    key = f"{operation}:{(email or '').strip().lower()}"
    if throttle.allow(key):
        return False
    logger.warning("throttled %s request", operation)
    return True


def _summary(account: AdminAccount) -> dict:
    return AdminSummary(
        account_id=account.account_id,
        first_name=account.first_name,
        last_name=account.last_name,
        email_id=account.email,
        phone_number=account.phone_number,
        designation=account.designation,
        address=account.address,
        city=account.city,
        state=account.state,
        post_code=account.post_code,
    ).model_dump(by_alias=True)


def _session(result: AuthenticatedAdmin) -> dict:
    return AdminSession(
        account_id=result.account_id,
        first_name=result.first_name,
        last_name=result.last_name,
        email_id=result.email,
        token=result.token,
        expires_in=result.expires_in,
    ).model_dump(by_alias=True)


@router.post("/register")
def register(
    payload: RegisterRequest,
    service: AdminAuthService = Depends(get_service),
) -> JSONResponse:
    """Register an administrator and email a confirmation OTP."""
    try:
        account = service.register(payload.model_dump())
    except AdminServiceError as exc:
        return response_from_error(exc)
    return success_response("Registration Success.", _summary(account))


@router.post("/login")
def login(
    payload: LoginRequest,
    service: AdminAuthService = Depends(get_service),
) -> JSONResponse:
    """Authenticate with email and password and receive a session token."""
    if _throttled("login", payload.email_id):
        return throttled_response()
    try:
        result = service.login(payload.model_dump())
    except AdminServiceError as exc:
        return response_from_error(exc)
    return success_response("Login Success.", _session(result))


@router.post("/verify-confirm")
def verify_confirm(
    payload: VerifyConfirmRequest,
    service: AdminAuthService = Depends(get_service),
) -> JSONResponse:
    """Confirm an account with its emailed OTP and receive a session token."""
    if _throttled("verify-confirm", payload.email_id):
        return throttled_response()
    try:
        result = service.verify_confirm(payload.model_dump())
    except AdminServiceError as exc:
        return response_from_error(exc)
    return success_response("Login Success.", _session(result))


@router.post("/resend-confirm-otp")
def resend_confirm_otp(
    payload: ResendConfirmOtpRequest,
    service: AdminAuthService = Depends(get_service),
) -> JSONResponse:
    """Email a fresh confirmation OTP and mark the account unconfirmed."""
    if _throttled("resend-confirm-otp", payload.email_id):
        return throttled_response()
    try:
        service.resend_confirm_otp(payload.model_dump())
    except AdminServiceError as exc:
        return response_from_error(exc)
    return success_response("Confirm otp sent.")


@router.get("/me")
def current_admin(admin: AdminAccount = Depends(require_admin)) -> JSONResponse:
    """Return the profile of the administrator identified by the bearer token."""
    return success_response("Success", _summary(admin))
