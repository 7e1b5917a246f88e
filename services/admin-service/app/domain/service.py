"""Admin authentication service orchestrating storage, OTP delivery, and token issuance."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, NoReturn, Protocol

import jwt
from prometheus_client import Counter

from .account import AdminAccount
from .contracts import AuthenticatedAdmin, RegisterAdminInput
from .errors import DuplicateAccountError, FieldError, Unauthorized, ValidationFailed
from .validation import FieldRule, Validator
from ..notifications.mailer import (
    CONFIRM_SUBJECT,
    NotificationSender,
    confirm_account_body,
    login_account_body,
)
from ..security.otp import generate_otp, otp_matches
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenIssuer

logger = logging.getLogger(__name__)

AUTH_EVENTS = Counter(
    "admin_auth_events_total",
    "Terminal outcomes of admin authentication workflows.",
    ["operation", "outcome"],
)

LOGIN_FAILED = "Email or Password wrong."
NOT_CONFIRMED = "Account is not confirmed. Please confirm your account."
NOT_ACTIVE = "Account is not active. Please contact admin."
EMAIL_NOT_FOUND = "Specified email not found."
OTP_MISMATCH = "Otp does not match"

_DUPLICATE_MESSAGES = {
    "email_id": "E-mail already in use",
    "phone_number": "Phone number already in use",
}

_PROFILE_FIELDS = ("designation", "address", "city", "state", "post_code")


class CredentialStore(Protocol):
    def find_by_email(self, email: str) -> AdminAccount | None: ...

    def find_by_phone(self, phone_number: str) -> AdminAccount | None: ...

    def get_by_id(self, account_id: str) -> AdminAccount | None: ...

    def insert(self, account: AdminAccount) -> AdminAccount: ...

    def update_by_email(self, email: str, /, **fields: Any) -> None: ...


def _email_rule() -> FieldRule:
    return (
        FieldRule("email_id")
        .trim()
        .escape()
        .required("Email must be specified.")
        .email("Email must be a valid email address.")
    )


def _name_rule(name: str, label: str) -> FieldRule:
    return (
        FieldRule(name)
        .trim()
        .escape()
        .required(f"{label} must be specified.")
        .alphanumeric(f"{label} has non-alphanumeric characters.")
    )


class AdminAuthService:
    """Registration, login, and OTP confirmation workflows for administrators.

    Confirmation state moves between *unconfirmed* (after registration or an OTP
    resend) and *confirmed* (after a successful verification or login).
    """

    def __init__(
        self,
        repository: CredentialStore,
        mailer: NotificationSender,
        tokens: TokenIssuer,
        passwords: PasswordHasher,
        *,
        mail_from: str,
        otp_length: int = 6,
    ) -> None:
        """Store collaborators used to orchestrate persistence, delivery, and token issuance."""
        self._repository = repository
        self._mailer = mailer
        self._tokens = tokens
        self._passwords = passwords
        self._mail_from = mail_from
        self._otp_length = otp_length

        self._register_validator = Validator(
            _name_rule("first_name", "First name"),
            _name_rule("last_name", "Last name"),
            _email_rule().must(
                lambda value: self._repository.find_by_email(value) is None,
                _DUPLICATE_MESSAGES["email_id"],
            ),
            FieldRule("phone_number")
            .trim()
            .escape()
            .required("Phone must be specified.")
            .must(
                lambda value: self._repository.find_by_phone(value) is None,
                _DUPLICATE_MESSAGES["phone_number"],
            ),
            FieldRule("password")
            .trim()
            .min_length(6, "Password must be 6 characters or greater.")
            .escape(),
            *(FieldRule(name).trim().escape() for name in _PROFILE_FIELDS),
        )
        self._login_validator = Validator(
            _email_rule(),
            FieldRule("password").trim().escape().required("Password must be specified."),
        )
        self._verify_validator = Validator(
            _email_rule(),
            FieldRule("otp").trim().escape().required("OTP must be specified."),
        )
        self._resend_validator = Validator(_email_rule())

    def register(self, payload: Mapping[str, Any]) -> AdminAccount:
        """Validate and register a new administrator, emailing a confirmation OTP.

        The account is only persisted once the OTP email has been sent. A unique
        index conflict discovered at insert time is reported as a validation
        failure on the conflicting field; the sent email is not recalled.
        """
        cleaned = self._check(self._register_validator, payload, "register")
        data = RegisterAdminInput(
            first_name=cleaned["first_name"],
            last_name=cleaned["last_name"],
            email=cleaned["email_id"],
            password=cleaned["password"],
            phone_number=cleaned["phone_number"],
            **{name: cleaned[name] for name in _PROFILE_FIELDS},
        )

        otp = generate_otp(self._otp_length)
        account = AdminAccount(
            account_id=str(uuid.uuid4()),
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            password_hash=self._passwords.hash(data.password),
            phone_number=data.phone_number,
            designation=data.designation,
            address=data.address,
            city=data.city,
            state=data.state,
            post_code=data.post_code,
            is_confirmed=False,
            confirm_otp=otp,
        )

        self._mailer.send(self._mail_from, data.email, CONFIRM_SUBJECT, confirm_account_body(otp))
        try:
            stored = self._repository.insert(account)
        except DuplicateAccountError as exc:
            logger.info("registration lost uniqueness race on %s", exc.field)
            AUTH_EVENTS.labels("register", "duplicate").inc()
            raise ValidationFailed(
                [FieldError(field=exc.field, message=_DUPLICATE_MESSAGES.get(exc.field, str(exc)))]
            ) from exc

        logger.info("admin %s registered", stored.account_id)
        AUTH_EVENTS.labels("register", "success").inc()
        return stored

    def login(self, payload: Mapping[str, Any]) -> AuthenticatedAdmin:
        """Authenticate by email and password, rotate the OTP, and issue a session token.

        Unknown emails and wrong passwords share one message. Confirmation is
        checked before activity. A successful login also marks the account as
        confirmed.
        """
        cleaned = self._check(self._login_validator, payload, "login")
        email = cleaned["email_id"]

        account = self._repository.find_by_email(email)
        password_hash = account.password_hash if account else None
        if not self._passwords.verify(cleaned["password"], password_hash) or account is None:
            self._reject("login", "bad_credentials", LOGIN_FAILED)
        if not account.is_confirmed:
            self._reject("login", "unconfirmed", NOT_CONFIRMED)
        if not account.is_active:
            self._reject("login", "inactive", NOT_ACTIVE)

        otp = generate_otp(self._otp_length)
        self._mailer.send(self._mail_from, email, CONFIRM_SUBJECT, login_account_body(otp))
        self._repository.update_by_email(email, is_confirmed=True, confirm_otp=otp)
        account.is_confirmed = True
        account.confirm_otp = otp

        logger.info("admin %s logged in", account.account_id)
        AUTH_EVENTS.labels("login", "success").inc()
        return self._authenticated(account)

    def verify_confirm(self, payload: Mapping[str, Any]) -> AuthenticatedAdmin:
        """Confirm an account with its current OTP and issue a session token."""
        cleaned = self._check(self._verify_validator, payload, "verify_confirm")
        email = cleaned["email_id"]

        account = self._repository.find_by_email(email)
        if account is None:
            self._reject("verify_confirm", "unknown_email", EMAIL_NOT_FOUND)
        # TODO: reject already-confirmed accounts once product decides whether re-verification is allowed.
        if not otp_matches(account.confirm_otp, cleaned["otp"]):
            self._reject("verify_confirm", "otp_mismatch", OTP_MISMATCH)

        self._repository.update_by_email(email, is_confirmed=True, confirm_otp=None)
        account.is_confirmed = True
        account.confirm_otp = None

        logger.info("admin %s confirmed", account.account_id)
        AUTH_EVENTS.labels("verify_confirm", "success").inc()
        return self._authenticated(account)

    def resend_confirm_otp(self, payload: Mapping[str, Any]) -> None:
        """Issue a new OTP and mark the account unconfirmed, whatever its current state."""
        cleaned = self._check(self._resend_validator, payload, "resend_confirm_otp")
        email = cleaned["email_id"]

        account = self._repository.find_by_email(email)
        if account is None:
            self._reject("resend_confirm_otp", "unknown_email", EMAIL_NOT_FOUND)

        otp = generate_otp(self._otp_length)
        self._mailer.send(self._mail_from, email, CONFIRM_SUBJECT, login_account_body(otp))
        self._repository.update_by_email(email, is_confirmed=False, confirm_otp=otp)

        logger.info("confirmation otp reissued for admin %s", account.account_id)
        AUTH_EVENTS.labels("resend_confirm_otp", "success").inc()

    def authenticate_token(self, token: str) -> AdminAccount:
        """Resolve a bearer token to its administrator, raising :class:`Unauthorized` otherwise."""
        try:
            claims = self._tokens.decode(token)
        except jwt.PyJWTError as exc:
            raise Unauthorized("Invalid or expired token.") from exc
        try:
            account_id = str(uuid.UUID(str(claims["sub"])))
        except ValueError as exc:
            raise Unauthorized("Invalid or expired token.") from exc
        account = self._repository.get_by_id(account_id)
        if account is None:
            raise Unauthorized("Invalid or expired token.")
        return account

    def _check(self, validator: Validator, payload: Mapping[str, Any], operation: str) -> dict[str, str]:
        try:
            return validator.check(payload)
        except ValidationFailed:
            AUTH_EVENTS.labels(operation, "invalid").inc()
            raise

    def _reject(self, operation: str, outcome: str, message: str) -> NoReturn:
        logger.info("%s rejected: %s", operation, outcome)
        AUTH_EVENTS.labels(operation, outcome).inc()
        raise Unauthorized(message)

    def _authenticated(self, account: AdminAccount) -> AuthenticatedAdmin:
        token, expires_in = self._tokens.issue(account)
        return AuthenticatedAdmin(
            account_id=account.account_id,
            first_name=account.first_name,
            last_name=account.last_name,
            email=account.email,
            token=token,
            expires_in=expires_in,
        )
