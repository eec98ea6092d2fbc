"""Custom exceptions for the SMTP mailer."""

from typing import Optional

from .models import FailureCategory


class MailerError(Exception):
    """Base exception for all mailer errors."""

    category = FailureCategory.UNKNOWN


class ValidationError(MailerError):
    """Raised when an inbound payload fails validation."""

    pass


class MissingFieldError(ValidationError):
    """Raised when required fields are absent or empty."""

    category = FailureCategory.MISSING_FIELD

    def __init__(self, missing: list):
        super().__init__(f"Missing required fields: {', '.join(missing)}")
        self.missing = list(missing)


class InvalidAddressError(ValidationError):
    """Raised when the recipient address is malformed."""

    category = FailureCategory.INVALID_ADDRESS


class ConfigurationError(MailerError):
    """Raised when transport configuration is incomplete or malformed."""

    category = FailureCategory.SERVER_MISCONFIGURED


class TemplateError(MailerError):
    """Raised when there's an error with template loading or rendering."""

    pass


class InvalidTemplateError(TemplateError):
    """Raised when the requested template kind does not exist."""

    category = FailureCategory.INVALID_TEMPLATE


class TransportError(MailerError):
    """Raised when there's an error with the mail transport."""

    pass


class DeliveryError(TransportError):
    """Raised when submitting a message to the transport fails."""

    def __init__(self, message: str, category: Optional[FailureCategory] = None):
        super().__init__(message)
        if category is not None:
            self.category = category
