"""Email service for sending alert and report notifications."""

import asyncio
import html
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Callable, Optional

from assetwatch.core.config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SMTPConfig:
    """SMTP transport configuration."""

    host: str
    port: int
    user: str
    password: str
    from_email: str
    from_name: str
    use_tls: bool = True
    timeout: float = 30.0

    @classmethod
    def from_settings(cls, config: Settings) -> "SMTPConfig":
        return cls(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            user=config.SMTP_USER,
            password=config.SMTP_PASSWORD,
            from_email=config.SMTP_FROM_EMAIL or config.SMTP_USER,
            from_name=config.SMTP_FROM_NAME,
            use_tls=config.SMTP_TLS,
            timeout=config.SMTP_TIMEOUT_SECONDS,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.host and self.user and self.password)


class EmailService:
    """Service for sending emails via SMTP.

    The transport is set up once at construction. Without credentials it
    stays uninitialized and every send fails fast with a logged error.
    """

    def __init__(
        self,
        config: SMTPConfig,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ):
        self.config = config
        self._smtp_factory: Optional[Callable[..., smtplib.SMTP]] = None

        if not config.has_credentials:
            logger.warning("SMTP credentials not configured, email sending disabled")
            return

        self._smtp_factory = smtp_factory
        logger.info(
            "Email transport initialized",
            extra={"smtp_host": config.host, "smtp_port": config.port},
        )

    @property
    def is_configured(self) -> bool:
        return self._smtp_factory is not None

    def build_message(self, to_email: str, subject: str, body: str) -> MIMEMultipart:
        """Plain-text body plus a single HTML paragraph rendering of it."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.config.from_name} <{self.config.from_email}>"
        msg["To"] = to_email

        html_body = html.escape(body).replace("\n", "<br>")
        msg.attach(MIMEText(body, "plain", "utf-8"))
        msg.attach(MIMEText(f"<p>{html_body}</p>", "html", "utf-8"))
        return msg

    async def send_email(self, to_email: str, subject: str, body: str) -> bool:
        """
        Send an email.

        Args:
            to_email: Recipient email address
            subject: Email subject
            body: Plain text body

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.is_configured:
            logger.error(f"Email transport not initialized, cannot send '{subject}' to {to_email}")
            return False

        try:
            msg = self.build_message(to_email, subject, body)
            await asyncio.to_thread(self._deliver, to_email, msg)
            logger.info(f"Email sent to {to_email}: {subject}")
            return True
        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {type(e).__name__}: {e}")
            return False

    def _deliver(self, to_email: str, msg: MIMEMultipart) -> None:
        with self._smtp_factory(self.config.host, self.config.port, timeout=self.config.timeout) as server:
            if self.config.use_tls:
                server.starttls()
            server.login(self.config.user, self.config.password)
            server.sendmail(self.config.from_email, to_email, msg.as_string())


# Singleton instance
email_service = EmailService(SMTPConfig.from_settings(settings))
