"""Mail transport implementations."""

from .base import BaseTransport, classify_failure
from .mock import MockTransport
from .smtp import SmtpTransport

__all__ = ["BaseTransport", "MockTransport", "SmtpTransport", "classify_failure"]
