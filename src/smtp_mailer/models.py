"""Data models for the SMTP mailer."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from datetime import datetime, timezone
from enum import Enum


class TemplateKind(str, Enum):
    """The fixed set of email templates."""

    WELCOME = "welcome"
    NOTIFICATION = "notification"
    CUSTOM = "custom"


class FailureCategory(str, Enum):
    """Why a dispatch did not succeed."""

    MISSING_FIELD = "missing_field"
    INVALID_ADDRESS = "invalid_address"
    SERVER_MISCONFIGURED = "server_misconfigured"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INVALID_TEMPLATE = "invalid_template"
    AUTH_FAILED = "auth_failed"
    CONNECTION_FAILED = "connection_failed"
    TIMED_OUT = "timed_out"
    UNKNOWN = "unknown"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]

    @property
    def client_message(self) -> str:
        return _CLIENT_MESSAGES[self]


_STATUS_CODES = {
    FailureCategory.MISSING_FIELD: 400,
    FailureCategory.INVALID_ADDRESS: 400,
    FailureCategory.SERVER_MISCONFIGURED: 500,
    FailureCategory.SERVICE_UNAVAILABLE: 503,
    FailureCategory.INVALID_TEMPLATE: 500,
    FailureCategory.AUTH_FAILED: 500,
    FailureCategory.CONNECTION_FAILED: 500,
    FailureCategory.TIMED_OUT: 500,
    FailureCategory.UNKNOWN: 500,
}

_CLIENT_MESSAGES = {
    FailureCategory.MISSING_FIELD: "Missing required fields",
    FailureCategory.INVALID_ADDRESS: "Invalid email address",
    FailureCategory.SERVER_MISCONFIGURED: "Server configuration error. Please check SMTP settings.",
    FailureCategory.SERVICE_UNAVAILABLE: "Email service temporarily unavailable. Please try again later.",
    FailureCategory.INVALID_TEMPLATE: "Invalid email template",
    FailureCategory.AUTH_FAILED: "SMTP authentication failed. Please check credentials.",
    FailureCategory.CONNECTION_FAILED: "Unable to connect to email server. Please try again later.",
    FailureCategory.TIMED_OUT: "Email sending timed out. Please try again.",
    FailureCategory.UNKNOWN: "Failed to send email",
}


@dataclass(frozen=True)
class EmailRequest:
    """A validated, normalized send request."""

    to: str
    subject: str
    name: str
    template: str
    message: str = ""


@dataclass(frozen=True)
class RenderedTemplate:
    """HTML and plain-text bodies produced from a template."""

    html_body: str
    text_body: str


@dataclass
class EmailMessage:
    """Represents an outgoing email message."""

    recipient: str
    subject: str
    html_body: Optional[str] = None
    text_body: Optional[str] = None
    from_email: Optional[str] = None
    from_name: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.html_body and not self.text_body:
            raise ValueError("Either html_body or text_body must be provided")


@dataclass
class TemplateMetadata:
    """Metadata about a template."""

    name: str
    required_variables: List[str]
    optional_variables: List[str] = field(default_factory=list)
    has_html: bool = True
    has_text: bool = False
    description: Optional[str] = None


@dataclass
class DispatchResult:
    """Outcome of a single dispatch."""

    succeeded: bool
    message_id: Optional[str] = None
    failure_category: Optional[FailureCategory] = None
    error_detail: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def sent(cls, message_id: str) -> "DispatchResult":
        return cls(succeeded=True, message_id=message_id)

    @classmethod
    def failed(
        cls, category: FailureCategory, detail: Optional[str] = None
    ) -> "DispatchResult":
        return cls(succeeded=False, failure_category=category, error_detail=detail)

    @property
    def status_code(self) -> int:
        if self.succeeded:
            return 200
        return self.failure_category.status_code

    @property
    def client_message(self) -> str:
        if self.succeeded:
            return "Email sent successfully"
        return self.failure_category.client_message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON response body."""
        if self.succeeded:
            return {
                "success": True,
                "message": self.client_message,
                "messageId": self.message_id,
            }
        return {"error": self.client_message}


@dataclass
class HealthReport:
    """Result of probing the transport without sending mail."""

    healthy: bool
    message: str
    missing_vars: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def status_code(self) -> int:
        if self.healthy:
            return 200
        return 500 if self.missing_vars else 503

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON response body."""
        if self.missing_vars:
            return {
                "status": "error",
                "message": self.message,
                "missingVars": list(self.missing_vars),
            }
        return {
            "status": "healthy" if self.healthy else "error",
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }
