from __future__ import annotations

import smtplib

import pytest

from app.domain.errors import DeliveryError
from app.notifications import mailer as mailer_module
from app.notifications.mailer import SmtpMailer, confirm_account_body, login_account_body


class RecordingSMTP:
    instances: list["RecordingSMTP"] = []
    fail_with: Exception | None = None

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.started_tls = False
        self.credentials = None
        self.messages = []
        RecordingSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, username, password):
        self.credentials = (username, password)

    def send_message(self, msg):
        if RecordingSMTP.fail_with is not None:
            raise RecordingSMTP.fail_with
        self.messages.append(msg)


@pytest.fixture(autouse=True)
def fake_smtp(monkeypatch):
    RecordingSMTP.instances = []
    RecordingSMTP.fail_with = None
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", RecordingSMTP)
    return RecordingSMTP


def test_templates_embed_code():
    assert confirm_account_body("123456") == "<p>Please Confirm your Account.</p><p>OTP: 123456</p>"
    assert login_account_body("654321") == "<p>Please Login your Account.</p><p>OTP: 654321</p>"


def test_send_builds_html_message(fake_smtp):
    smtp = SmtpMailer(host="mail.local", port=2525, username="bot", password="pw", timeout=3)

    smtp.send("admin@shop.example", "jane@x.com", "Confirm Account", confirm_account_body("123456"))

    (server,) = fake_smtp.instances
    assert (server.host, server.port, server.timeout) == ("mail.local", 2525, 3)
    assert server.started_tls
    assert server.credentials == ("bot", "pw")
    (msg,) = server.messages
    assert msg["To"] == "jane@x.com"
    assert msg["From"] == "admin@shop.example"
    assert msg["Subject"] == "Confirm Account"
    assert "OTP: 123456" in msg.get_payload()[0].get_payload(decode=True).decode()


def test_send_skips_tls_and_login_when_not_configured(fake_smtp):
    SmtpMailer(host="mail.local", port=25, use_tls=False).send("a@x.com", "b@x.com", "s", "<p>x</p>")

    (server,) = fake_smtp.instances
    assert not server.started_tls
    assert server.credentials is None


@pytest.mark.parametrize(
    "failure", [smtplib.SMTPRecipientsRefused({}), ConnectionRefusedError("refused")]
)
def test_transport_failures_become_delivery_errors(fake_smtp, failure):
    fake_smtp.fail_with = failure

    with pytest.raises(DeliveryError):
        SmtpMailer(host="mail.local", port=25).send("a@x.com", "b@x.com", "s", "<p>x</p>")
