"""Composes validated requests into emails and hands them to a transport."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from .config import TransportConfig
from .exceptions import MailerError, ValidationError
from .models import (
    DispatchResult,
    EmailMessage,
    EmailRequest,
    FailureCategory,
    HealthReport,
)
from .template import TemplateLoader, render_email, resolve_template_kind
from .transports.base import BaseTransport, classify_failure
from .transports.smtp import SmtpTransport
from .validators import validate_email_request

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "X-Mailer": "Secure SMTP Service",
    "X-Priority": "3",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageDispatcher:
    """Runs the validate, probe, render and send lifecycle for one request at a time.

    The dispatcher holds only read-only state, so a single instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        config: TransportConfig,
        transport: Optional[BaseTransport] = None,
        template_loader: Optional[TemplateLoader] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize the dispatcher.

        Args:
            config: Transport configuration loaded at process start
            transport: Mail transport (defaults to SMTP built from config)
            template_loader: Template loader (defaults to bundled templates)
            clock: Source of the timestamp interpolated into templates
        """
        self.config = config
        self.transport = transport or SmtpTransport(config)
        self.template_loader = template_loader or TemplateLoader()
        self.clock = clock

    def submit(self, payload: Any) -> DispatchResult:
        """Validate a raw payload and dispatch it.

        Args:
            payload: Decoded request body

        Returns:
            DispatchResult; validation failures never reach the transport
        """
        try:
            request = validate_email_request(payload)
        except ValidationError as e:
            logger.warning(f"Rejected send request: {e}")
            return DispatchResult.failed(e.category, str(e))
        return self.dispatch(request)

    def dispatch(self, request: EmailRequest) -> DispatchResult:
        """Attempt delivery of a validated request and classify the outcome.

        Args:
            request: Normalized request

        Returns:
            DispatchResult carrying the message id or a failure category
        """
        missing = self.config.missing_fields()
        if missing:
            logger.error(f"SMTP transport is not configured, missing: {missing}")
            return DispatchResult.failed(
                FailureCategory.SERVER_MISCONFIGURED,
                f"Missing configuration: {', '.join(missing)}",
            )

        try:
            resolve_template_kind(request.template)
        except MailerError as e:
            logger.error(f"Cannot send to {request.to}: {e}")
            return DispatchResult.failed(e.category, str(e))

        try:
            self.transport.verify()
        except Exception as e:
            logger.error(f"SMTP connection failed: {e}")
            return DispatchResult.failed(FailureCategory.SERVICE_UNAVAILABLE, str(e))

        sent_at = self.clock()
        try:
            rendered = render_email(request, sent_at, self.template_loader)
        except MailerError as e:
            logger.error(f"Failed to render template {request.template!r}: {e}")
            return DispatchResult.failed(e.category, str(e))

        message = EmailMessage(
            recipient=request.to,
            subject=request.subject,
            html_body=rendered.html_body,
            text_body=rendered.text_body,
            from_email=self.config.from_email,
            from_name=self.config.from_name,
            headers=dict(DEFAULT_HEADERS),
        )

        try:
            message_id = self.transport.send(message)
        except Exception as e:
            category = classify_failure(e)
            logger.error(
                f"Email sending error ({category.value}) for {request.to}: {e}",
                exc_info=True,
            )
            return DispatchResult.failed(category, str(e))

        result = DispatchResult.sent(message_id)
        sent_at = result.timestamp.isoformat()
        logger.info(
            f"Email sent successfully: message_id={message_id} to={request.to} "
            f"subject={request.subject!r} at={sent_at}",
            extra={
                "message_id": message_id,
                "recipient": request.to,
                "subject": request.subject,
                "sent_at": sent_at,
            },
        )
        return result

    def health_check(self) -> HealthReport:
        """Probe the transport without sending mail."""
        missing = self.config.missing_fields()
        if missing:
            return HealthReport(
                healthy=False, message="SMTP not configured", missing_vars=missing
            )

        try:
            self.transport.verify()
        except Exception as e:
            logger.warning(f"SMTP health check failed: {e}")
            return HealthReport(healthy=False, message="SMTP service unavailable")

        return HealthReport(healthy=True, message="SMTP service is operational")
