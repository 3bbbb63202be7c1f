"""
SMTP Client

Sends notification email through an authenticated SMTP relay with proper
error handling and response tracking.
"""

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Optional

from core.config import Settings, get_settings

from .email_builder import EmailData

logger = logging.getLogger(__name__)


@dataclass
class SmtpResponse:
    """Outcome of one send attempt"""

    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None


class SmtpEmailSender:
    """SMTP delivery with STARTTLS and login"""

    def __init__(self, host: str, port: int = 587, use_tls: bool = True, timeout: int = 10):
        self.host = host
        self.port = port
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SmtpEmailSender":
        settings = settings or get_settings()
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout,
        )

    def build_message(self, email_data: EmailData) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = email_data.subject
        message["From"] = email_data.from_email
        message["To"] = email_data.to_email
        message["Message-ID"] = make_msgid()
        if email_data.reply_to_email:
            message["Reply-To"] = email_data.reply_to_email

        message.attach(MIMEText(email_data.text_content, "plain", "utf-8"))
        if email_data.html_content:
            message.attach(MIMEText(email_data.html_content, "html", "utf-8"))
        return message

    def send_email(self, email_data: EmailData, username: str, password: str) -> SmtpResponse:
        """Send one message; failures are reported in the response, never raised"""
        message = self.build_message(email_data)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                server.login(username, password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery to {email_data.to_email} failed: {e}")
            return SmtpResponse(success=False, error_message=str(e))

        logger.info(f"Email sent to {email_data.to_email}: {message['Message-ID']}")
        return SmtpResponse(success=True, message_id=message["Message-ID"])
