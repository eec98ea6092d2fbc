"""Mock transport for tests."""

from typing import List, Optional

from ..models import EmailMessage
from .base import BaseTransport


class MockTransport(BaseTransport):
    """Transport that records messages instead of sending them."""

    def __init__(
        self,
        verify_error: Optional[Exception] = None,
        send_error: Optional[Exception] = None,
    ):
        """Initialize the mock.

        Args:
            verify_error: Raised from every verify() call when set
            send_error: Raised from every send() call when set
        """
        self.verify_error = verify_error
        self.send_error = send_error
        self.verify_calls = 0
        self.send_calls = 0
        self.sent: List[EmailMessage] = []

    def verify(self) -> None:
        self.verify_calls += 1
        if self.verify_error is not None:
            raise self.verify_error

    def send(self, message: EmailMessage) -> str:
        self.send_calls += 1
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(message)
        return f"<mock-{len(self.sent)}@localhost>"
