"""SMTP mailer: validates send requests, renders fixed templates and relays them over SMTP."""

__version__ = "0.1.0"

from .exceptions import (
    MailerError,
    ValidationError,
    MissingFieldError,
    InvalidAddressError,
    ConfigurationError,
    TemplateError,
    InvalidTemplateError,
    TransportError,
    DeliveryError,
)
from .models import (
    EmailRequest,
    EmailMessage,
    RenderedTemplate,
    TemplateKind,
    FailureCategory,
    DispatchResult,
    HealthReport,
)
from .config import TransportConfig, Settings, load_settings
from .template import TemplateLoader, render_email
from .dispatcher import MessageDispatcher
from .transports import BaseTransport, MockTransport, SmtpTransport
from .validators import validate_email_address, validate_email_request
from .app import create_app

__all__ = [
    "MailerError",
    "ValidationError",
    "MissingFieldError",
    "InvalidAddressError",
    "ConfigurationError",
    "TemplateError",
    "InvalidTemplateError",
    "TransportError",
    "DeliveryError",
    "EmailRequest",
    "EmailMessage",
    "RenderedTemplate",
    "TemplateKind",
    "FailureCategory",
    "DispatchResult",
    "HealthReport",
    "TransportConfig",
    "Settings",
    "load_settings",
    "TemplateLoader",
    "render_email",
    "MessageDispatcher",
    "BaseTransport",
    "MockTransport",
    "SmtpTransport",
    "validate_email_address",
    "validate_email_request",
    "create_app",
]
