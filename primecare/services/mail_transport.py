"""
Mail transport

send_mail() either returns {"message_id": ...} or raises MailTransportError.
Callers treat any raise (including timeouts) as a failed send.
"""
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Dict, List, Optional
import logging
import smtplib
import uuid

from primecare.core.config import settings

logger = logging.getLogger(__name__)


class MailTransportError(Exception):
    """Raised when an email could not be handed to the mail server"""


class MailTransport:
    def send_mail(self, from_address: str, to: str, subject: str, html: str) -> Dict[str, str]:
        raise NotImplementedError


class SMTPMailTransport(MailTransport):
    """SMTP delivery with a per-send timeout"""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: Optional[bool] = None,
        timeout: Optional[float] = None,
    ):
        self.host = host if host is not None else settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = user if user is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.use_ssl = settings.SMTP_USE_SSL if use_ssl is None else use_ssl
        self.timeout = timeout or settings.SMTP_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.host)

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        server.starttls()
        return server

    def send_mail(self, from_address: str, to: str, subject: str, html: str) -> Dict[str, str]:
        if not self.is_configured:
            raise MailTransportError("SMTP is not configured. Set SMTP_HOST.")

        message_id = make_msgid()
        msg = MIMEMultipart("alternative")
        msg["From"] = from_address
        msg["To"] = to
        msg["Subject"] = subject
        msg["Message-ID"] = message_id
        msg.attach(MIMEText(html, "html", "utf-8"))

        try:
            with self._connect() as server:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(from_address, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            # socket.timeout is an OSError
            raise MailTransportError(f"Failed to send email to {to}: {e}") from e

        logger.info("Email sent to %s: %s", to, subject)
        return {"message_id": message_id}


class MockMailTransport(MailTransport):
    """Records emails in memory instead of sending them"""

    def __init__(self):
        self.sent: List[Dict[str, str]] = []

    def send_mail(self, from_address: str, to: str, subject: str, html: str) -> Dict[str, str]:
        message_id = f"mock-{uuid.uuid4().hex[:16]}"
        self.sent.append({
            "from": from_address,
            "to": to,
            "subject": subject,
            "html": html,
            "message_id": message_id,
        })
        logger.info("Mock email sent to %s: %s", to, subject)
        return {"message_id": message_id}


def get_mail_transport() -> MailTransport:
    if settings.EMAIL_BACKEND == "mock":
        return MockMailTransport()
    transport = SMTPMailTransport()
    if not transport.is_configured:
        logger.warning("SMTP credentials not configured. Email sending will fail.")
    return transport
