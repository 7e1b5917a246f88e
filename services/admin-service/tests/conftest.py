from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api import routes
from app.api.responses import register_exception_handlers
from app.domain.account import AdminAccount
from app.domain.errors import DeliveryError, DuplicateAccountError, StoreError
from app.domain.service import AdminAuthService
from app.security.passwords import PasswordHasher
from app.security.throttling import InMemoryThrottle
from app.security.tokens import TokenIssuer

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
OTP_PATTERN = re.compile(r"OTP: (\d+)")


class FakeRepository:
    """In-memory credential store enforcing the same unique keys as the Postgres indexes."""

    def __init__(self) -> None:
        self._accounts: dict[str, AdminAccount] = {}
        self.fail_inserts = False
        self.race_on_insert: str | None = None

    def find_by_email(self, email: str):
        return self._copy(next((a for a in self._accounts.values() if a.email == email), None))

    def find_by_phone(self, phone_number: str):
        return self._copy(
            next((a for a in self._accounts.values() if a.phone_number == phone_number), None)
        )

    def get_by_id(self, account_id: str):
        return self._copy(self._accounts.get(account_id))

    def insert(self, account: AdminAccount) -> AdminAccount:
        if self.fail_inserts:
            raise StoreError("insert failed: connection lost")
        if self.race_on_insert:
            raise DuplicateAccountError(self.race_on_insert)
        for existing in self._accounts.values():
            if existing.email == account.email:
                raise DuplicateAccountError("email_id")
            if existing.phone_number == account.phone_number:
                raise DuplicateAccountError("phone_number")
        now = datetime.now(timezone.utc)
        stored = replace(account, created_at=now, updated_at=now)
        self._accounts[stored.account_id] = stored
        return replace(stored)

    def update_by_email(self, email: str, /, **fields) -> None:
        for account_id, account in self._accounts.items():
            if account.email == email:
                self._accounts[account_id] = replace(
                    account, updated_at=datetime.now(timezone.utc), **fields
                )

    def stored(self, email: str) -> AdminAccount:
        return next(a for a in self._accounts.values() if a.email == email)

    def count(self) -> int:
        return len(self._accounts)

    @staticmethod
    def _copy(account: AdminAccount | None) -> AdminAccount | None:
        return replace(account) if account else None


@dataclass
class SentMessage:
    sender: str
    recipient: str
    subject: str
    html_body: str

    @property
    def otp(self) -> str:
        match = OTP_PATTERN.search(self.html_body)
        assert match, self.html_body
        return match.group(1)


class FakeMailer:
    """Records outgoing mail; flip ``fail`` to simulate transport errors."""

    def __init__(self) -> None:
        self.sent: list[SentMessage] = []
        self.fail = False

    def send(self, sender: str, recipient: str, subject: str, html_body: str) -> None:
        if self.fail:
            raise DeliveryError("smtp relay unreachable")
        self.sent.append(SentMessage(sender, recipient, subject, html_body))


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret=TEST_SECRET, issuer="storefront.test", ttl_seconds=600)


@pytest.fixture
def service(repository, mailer, token_issuer) -> AdminAuthService:
    return AdminAuthService(
        repository,
        mailer,
        token_issuer,
        PasswordHasher(rounds=4),
        mail_from="admin@storefront.example",
    )


@pytest.fixture
def registration() -> dict[str, str]:
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "email_id": "jane@x.com",
        "password": "secret1",
        "phone_number": "555-0100",
        "designation": "Manager",
        "address": "1 Main Street",
        "city": "Springfield",
        "state": "IL",
        "post_code": "62701",
    }


@pytest.fixture
def api_client(service):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(routes.router)
    app.state.admin_auth_service = service

    original_throttle = routes.throttle
    routes.throttle = InMemoryThrottle(max_requests=100, window_seconds=60)

    with TestClient(app) as client:
        yield client

    routes.throttle = original_throttle
