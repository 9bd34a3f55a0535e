"""
Mail transport tests
"""
import smtplib
import socket
from unittest.mock import patch, MagicMock

import pytest

from primecare.core.config import settings
from primecare.services.mail_transport import (
    MailTransportError,
    MockMailTransport,
    SMTPMailTransport,
    get_mail_transport,
)


@pytest.mark.unit
def test_mock_transport_records_messages():
    transport = MockMailTransport()

    result = transport.send_mail("PrimeCare <noreply@example.com>", "a@example.com", "Hi", "<p>Hi</p>")

    assert result["message_id"].startswith("mock-")
    assert len(transport.sent) == 1
    assert transport.sent[0]["to"] == "a@example.com"
    assert transport.sent[0]["subject"] == "Hi"


@pytest.mark.unit
def test_smtp_transport_requires_host():
    transport = SMTPMailTransport(host="")

    with pytest.raises(MailTransportError):
        transport.send_mail("noreply@example.com", "a@example.com", "Hi", "<p>Hi</p>")


@pytest.mark.unit
def test_smtp_transport_sends_with_starttls_and_login():
    server = MagicMock()
    with patch("primecare.services.mail_transport.smtplib.SMTP") as smtp_cls:
        smtp_cls.return_value.__enter__.return_value = server
        transport = SMTPMailTransport(host="smtp.example.com", port=587, user="u", password="p", use_ssl=False, timeout=5)

        result = transport.send_mail("noreply@example.com", "a@example.com", "Hi", "<p>Hi</p>")

    smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=5)
    smtp_cls.return_value.starttls.assert_called_once()
    server.login.assert_called_once_with("u", "p")
    args = server.sendmail.call_args[0]
    assert args[0] == "noreply@example.com"
    assert args[1] == ["a@example.com"]
    assert "Subject: Hi" in args[2]
    assert result["message_id"]


@pytest.mark.unit
def test_smtp_transport_wraps_timeouts():
    with patch("primecare.services.mail_transport.smtplib.SMTP", side_effect=socket.timeout("timed out")):
        transport = SMTPMailTransport(host="smtp.example.com", use_ssl=False)

        with pytest.raises(MailTransportError):
            transport.send_mail("noreply@example.com", "a@example.com", "Hi", "<p>Hi</p>")


@pytest.mark.unit
def test_smtp_transport_wraps_smtp_errors():
    server = MagicMock()
    server.sendmail.side_effect = smtplib.SMTPRecipientsRefused({"a@example.com": (550, b"no such user")})
    with patch("primecare.services.mail_transport.smtplib.SMTP_SSL") as smtp_cls:
        smtp_cls.return_value.__enter__.return_value = server
        transport = SMTPMailTransport(host="smtp.example.com", port=465, use_ssl=True)

        with pytest.raises(MailTransportError):
            transport.send_mail("noreply@example.com", "a@example.com", "Hi", "<p>Hi</p>")


@pytest.mark.unit
def test_get_mail_transport_follows_backend_setting(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_BACKEND", "mock")
    assert isinstance(get_mail_transport(), MockMailTransport)

    monkeypatch.setattr(settings, "EMAIL_BACKEND", "smtp")
    assert isinstance(get_mail_transport(), SMTPMailTransport)
