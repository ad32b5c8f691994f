"""SMTP mail sender for financial reports."""

import email.mime.application
import email.mime.multipart
import email.mime.text
import email.utils
import logging
import smtplib
import ssl
from dataclasses import dataclass
from html import escape
from typing import Optional

from finreport.domain.errors import ConfigurationError, DeliveryError, missing_settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
IMPLICIT_TLS_PORT = 465


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass(frozen=True)
class SendResult:
    message_id: str
    recipients: tuple[str, ...]


def split_recipients(value: Optional[str]) -> list[str]:
    """Split a comma- or semicolon-separated address list."""
    if not value:
        return []
    return [part.strip() for part in value.replace(";", ",").split(",") if part.strip()]


class MailSender:
    """Send report emails over SMTP.

    Port 465 (or secure=True) uses implicit TLS; any other port upgrades the
    connection with STARTTLS.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        sender: str = "",
        default_to: str = "",
        secure: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if not host or not user or not password:
            raise ConfigurationError(
                missing_settings("Email", ["EMAIL_HOST", "EMAIL_USER", "EMAIL_PASSWORD"])
            )
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user
        self.default_to = default_to
        self.secure = secure or port == IMPLICIT_TLS_PORT
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.secure:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if not self.secure:
                server.ehlo()
                server.starttls(context=context)
                server.ehlo()
            server.login(self.user, self.password)
        except BaseException:
            server.close()
            raise
        return server

    def _build_message(
        self,
        recipients: list[str],
        subject: str,
        text: str,
        html: Optional[str],
        attachment: Optional[Attachment],
    ) -> email.mime.multipart.MIMEMultipart:
        msg = email.mime.multipart.MIMEMultipart("mixed")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = ", ".join(recipients)
        msg["Date"] = email.utils.formatdate(localtime=True)
        msg["Message-ID"] = email.utils.make_msgid()

        body = email.mime.multipart.MIMEMultipart("alternative")
        body.attach(email.mime.text.MIMEText(text, "plain", "utf-8"))
        if html:
            body.attach(email.mime.text.MIMEText(html, "html", "utf-8"))
        msg.attach(body)

        if attachment is not None:
            _, subtype = attachment.content_type.split("/", 1)
            part = email.mime.application.MIMEApplication(attachment.content, _subtype=subtype)
            part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
            msg.attach(part)

        return msg

    def send(
        self,
        subject: str,
        text: str,
        html: Optional[str] = None,
        to: Optional[str] = None,
        attachment: Optional[Attachment] = None,
    ) -> SendResult:
        """Send one email.

        Args:
            subject: Subject line
            text: Plain-text body
            html: Optional HTML alternative body
            to: Comma-separated recipients (defaults to default_to)
            attachment: Optional file attachment

        Returns:
            SendResult with the Message-ID and the recipients

        Raises:
            DeliveryError: If there is no recipient or SMTP delivery fails
        """
        recipients = split_recipients(to or self.default_to)
        if not recipients:
            raise DeliveryError("Recipient email address is required")

        msg = self._build_message(recipients, subject, text, html, attachment)
        try:
            with self._connect() as server:
                server.sendmail(self.sender, recipients, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending email: %s", e)
            raise DeliveryError(f"Error sending email: {e}") from e

        logger.info("Email sent successfully: %s", msg["Message-ID"])
        return SendResult(message_id=msg["Message-ID"], recipients=tuple(recipients))

    def send_notification(self, subject: str, message: str, to: Optional[str] = None) -> SendResult:
        """Send a short plain notification, mirrored as simple HTML."""
        html = "<p>{}</p>".format(escape(message).replace("\n", "<br>"))
        return self.send(subject, message, html, to=to)

    def verify_connection(self) -> bool:
        """Log in to the SMTP server without sending anything."""
        try:
            with self._connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email connection verification failed: %s", e)
            return False
        logger.info("Email connection verified successfully")
        return True


def create_mail_sender(settings) -> MailSender:
    """Create a MailSender from Settings.

    Raises:
        ConfigurationError: If host, user or password is missing
    """
    return MailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.email_from,
        default_to=settings.email_to,
        secure=settings.smtp_secure,
    )
