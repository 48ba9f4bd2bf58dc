"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers the verification code as a plain-text message. Port 465 uses
implicit TLS (SMTP_SSL); any other port upgrades with STARTTLS. The
socket timeout belongs to this adapter, not to the domain service.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    Implements EmailSender protocol over SMTP.

    Delivery errors (smtplib.SMTPException, OSError) propagate to the
    caller, which reports them as an upstream failure.
    """

    subject = "Email verification"

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self._username = username
        self._password = password
        self.sender = sender
        self.timeout = timeout

    def send_verification_code(self, email: str, code: str) -> None:
        message = EmailMessage()
        message["Subject"] = self.subject
        message["From"] = self.sender
        message["To"] = email
        message.set_content(code)

        context = ssl.create_default_context()
        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context) as server:
                server.login(self._username, self._password)
                server.send_message(message)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=context)
                server.login(self._username, self._password)
                server.send_message(message)

        logger.info("Verification email sent to %s", email)
