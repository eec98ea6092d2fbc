"""SMTP transport built on smtplib."""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid

from ..config import TransportConfig
from ..exceptions import DeliveryError
from ..models import EmailMessage
from .base import BaseTransport, classify_failure

logger = logging.getLogger(__name__)


class SmtpTransport(BaseTransport):
    """Relays messages through an authenticated SMTP server."""

    def __init__(self, config: TransportConfig):
        """Initialize the transport.

        Args:
            config: Transport configuration; nothing connects until used
        """
        self.config = config

    def _tls_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        return context

    def _connect(self) -> smtplib.SMTP:
        """Open an authenticated session.

        Port 465 uses implicit TLS; any other port upgrades with STARTTLS
        when the server offers it.
        """
        config = self.config
        context = self._tls_context()

        if config.use_implicit_tls:
            client = smtplib.SMTP_SSL(
                config.smtp_host,
                config.smtp_port,
                timeout=config.smtp_connect_timeout,
                context=context,
            )
        else:
            client = smtplib.SMTP(
                config.smtp_host, config.smtp_port, timeout=config.smtp_connect_timeout
            )

        try:
            if client.sock is not None:
                client.sock.settimeout(config.smtp_socket_timeout)
            client.ehlo()
            if not config.use_implicit_tls and client.has_extn("starttls"):
                client.starttls(context=context)
                client.ehlo()
            client.login(config.smtp_user, config.smtp_pass)
        except Exception:
            client.close()
            raise
        return client

    def verify(self) -> None:
        """Open a session, authenticate and close it again."""
        with self._connect() as client:
            client.noop()
        logger.debug(f"SMTP connection to {self.config.smtp_host}:{self.config.smtp_port} verified")

    def send(self, message: EmailMessage) -> str:
        """Send email via SMTP.

        Args:
            message: Email message to send

        Returns:
            The Message-ID header of the submitted message

        Raises:
            DeliveryError: If the server rejects the message or the session fails
        """
        mime_message = self._create_mime_message(message)
        from_email = message.from_email or self.config.from_email

        try:
            with self._connect() as client:
                client.send_message(
                    mime_message, from_addr=from_email, to_addrs=[message.recipient]
                )
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(
                f"SMTP delivery to {message.recipient} failed: {e}",
                category=classify_failure(e),
            ) from e

        return mime_message["Message-ID"]

    def _create_mime_message(self, message: EmailMessage) -> MIMEMultipart:
        """Create a multipart/alternative MIME message."""
        from_email = message.from_email or self.config.from_email
        from_name = message.from_name or self.config.from_name
        domain = from_email.rpartition("@")[2] or None

        mime_message = MIMEMultipart("alternative")
        mime_message["From"] = formataddr((from_name, from_email))
        mime_message["To"] = message.recipient
        mime_message["Subject"] = message.subject
        mime_message["Date"] = formatdate(localtime=True)
        mime_message["Message-ID"] = make_msgid(domain=domain)

        for header, value in message.headers.items():
            mime_message[header] = value

        if message.text_body:
            mime_message.attach(MIMEText(message.text_body, "plain", "utf-8"))
        if message.html_body:
            mime_message.attach(MIMEText(message.html_body, "html", "utf-8"))

        return mime_message
