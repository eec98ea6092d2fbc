"""Base mail transport interface."""

import smtplib
import socket
from abc import ABC, abstractmethod

from ..exceptions import DeliveryError
from ..models import EmailMessage, FailureCategory

_TEXT_MARKERS = (
    ("authentication", FailureCategory.AUTH_FAILED),
    ("timeout", FailureCategory.TIMED_OUT),
    ("timed out", FailureCategory.TIMED_OUT),
    ("connection", FailureCategory.CONNECTION_FAILED),
)


def classify_failure(error: BaseException) -> FailureCategory:
    """Best-effort mapping of a send failure to a FailureCategory.

    Exception types are checked first; the error text is only consulted
    when the type says nothing useful.
    """
    if isinstance(error, DeliveryError) and error.category is not FailureCategory.UNKNOWN:
        return error.category
    if isinstance(error, smtplib.SMTPAuthenticationError):
        return FailureCategory.AUTH_FAILED
    if isinstance(error, (TimeoutError, socket.timeout)):
        return FailureCategory.TIMED_OUT
    if isinstance(
        error,
        (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected, ConnectionError),
    ):
        return FailureCategory.CONNECTION_FAILED

    text = str(error).lower()
    for marker, category in _TEXT_MARKERS:
        if marker in text:
            return category
    return FailureCategory.UNKNOWN


class BaseTransport(ABC):
    """Abstract base class for mail transports."""

    @abstractmethod
    def verify(self) -> None:
        """Check that the transport can reach and authenticate with its server.

        Raises:
            Exception: Any error means the transport is unavailable
        """
        pass

    @abstractmethod
    def send(self, message: EmailMessage) -> str:
        """Send an email message.

        Args:
            message: Email message to send

        Returns:
            Transport-assigned message id

        Raises:
            DeliveryError: If the message could not be submitted
        """
        pass
