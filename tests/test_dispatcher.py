"""Tests for the message dispatcher."""

import logging
import smtplib

import pytest

from smtp_mailer.config import LoggingConfig
from smtp_mailer.dispatcher import MessageDispatcher
from smtp_mailer.exceptions import DeliveryError
from smtp_mailer.logging import setup_logging
from smtp_mailer.models import EmailRequest, FailureCategory
from smtp_mailer.transports.mock import MockTransport


class TestDispatch:
    """Tests for MessageDispatcher.dispatch and submit."""

    def test_successful_send(self, dispatcher, mock_transport, valid_payload, sent_at_text):
        """Test the happy path through probe, render and send."""
        result = dispatcher.submit(valid_payload)

        assert result.succeeded is True
        assert result.message_id == "<mock-1@localhost>"
        assert result.status_code == 200
        assert mock_transport.verify_calls == 1
        assert mock_transport.send_calls == 1

        message = mock_transport.sent[0]
        assert message.recipient == "a@b.com"
        assert message.subject == "Hi"
        assert message.from_email == "noreply@example.com"
        assert message.from_name == "Secure SMTP Service"
        assert message.headers == {"X-Mailer": "Secure SMTP Service", "X-Priority": "3"}
        assert "Welcome, Ann!" in message.html_body
        assert "Welcome, Ann!" in message.text_body
        assert sent_at_text in message.html_body

    def test_success_is_logged_with_message_details(self, dispatcher, valid_payload, caplog):
        """Test the structured success log line."""
        with caplog.at_level(logging.INFO, logger="smtp_mailer.dispatcher"):
            dispatcher.submit(valid_payload)

        records = [r for r in caplog.records if r.getMessage().startswith("Email sent successfully")]
        assert len(records) == 1
        assert records[0].message_id == "<mock-1@localhost>"
        assert records[0].recipient == "a@b.com"
        assert records[0].subject == "Hi"
        assert records[0].sent_at

    def test_success_line_on_default_console(self, dispatcher, valid_payload, capsys, restore_root_logger):
        """Test that the console line carries the message details without file logging."""
        setup_logging(LoggingConfig())

        dispatcher.submit(valid_payload)

        out = capsys.readouterr().out
        assert "Email sent successfully" in out
        assert "message_id=<mock-1@localhost>" in out
        assert "to=a@b.com" in out
        assert "subject='Hi'" in out
        assert " at=" in out

    def test_custom_message(self, dispatcher, mock_transport, valid_payload):
        """Test that custom messages reach both bodies."""
        result = dispatcher.submit(
            {**valid_payload, "template": "custom", "message": "Line1\nLine2"}
        )

        assert result.succeeded is True
        assert "Line1<br>Line2" in mock_transport.sent[0].html_body
        assert "Line1\nLine2" in mock_transport.sent[0].text_body

    @pytest.mark.parametrize("field", ["to", "subject", "name", "template"])
    def test_missing_field_never_reaches_transport(
        self, dispatcher, mock_transport, valid_payload, field
    ):
        """Test that validation failures make no transport calls."""
        del valid_payload[field]

        result = dispatcher.submit(valid_payload)

        assert result.failure_category == FailureCategory.MISSING_FIELD
        assert result.status_code == 400
        assert mock_transport.verify_calls == 0
        assert mock_transport.send_calls == 0

    def test_invalid_address(self, dispatcher, mock_transport, valid_payload):
        """Test that a malformed address is rejected before the transport."""
        result = dispatcher.submit({**valid_payload, "to": "not-an-address"})

        assert result.failure_category == FailureCategory.INVALID_ADDRESS
        assert result.client_message == "Invalid email address"
        assert mock_transport.verify_calls == 0

    @pytest.mark.parametrize("template", ["newsletter", "Welcome", "custom "])
    def test_invalid_template_makes_no_transport_calls(
        self, dispatcher, mock_transport, template
    ):
        """Test that unknown templates fail closed before the probe."""
        request = EmailRequest(to="a@b.com", subject="Hi", name="Ann", template=template)

        result = dispatcher.dispatch(request)

        assert result.failure_category == FailureCategory.INVALID_TEMPLATE
        assert result.status_code == 500
        assert mock_transport.verify_calls == 0
        assert mock_transport.send_calls == 0

    def test_unconfigured_transport(self, unconfigured_config, mock_transport, valid_payload):
        """Test that a missing setting stops the request before any network call."""
        dispatcher = MessageDispatcher(unconfigured_config, transport=mock_transport)

        result = dispatcher.submit(valid_payload)

        assert result.failure_category == FailureCategory.SERVER_MISCONFIGURED
        assert result.status_code == 500
        assert "SMTP_PORT" in result.error_detail
        assert mock_transport.verify_calls == 0
        assert mock_transport.send_calls == 0

    def test_probe_failure(self, transport_config, valid_payload):
        """Test that a failed probe yields 503 and no send."""
        transport = MockTransport(verify_error=ConnectionRefusedError("refused"))
        dispatcher = MessageDispatcher(transport_config, transport=transport)

        result = dispatcher.submit(valid_payload)

        assert result.failure_category == FailureCategory.SERVICE_UNAVAILABLE
        assert result.status_code == 503
        assert transport.verify_calls == 1
        assert transport.send_calls == 0

    @pytest.mark.parametrize(
        "error, category",
        [
            (Exception("Invalid login: authentication failed"), FailureCategory.AUTH_FAILED),
            (Exception("connection refused by peer"), FailureCategory.CONNECTION_FAILED),
            (Exception("Greeting never received: timeout"), FailureCategory.TIMED_OUT),
            (Exception("Connection timeout"), FailureCategory.TIMED_OUT),
            (Exception("mailbox unavailable"), FailureCategory.UNKNOWN),
            (smtplib.SMTPAuthenticationError(535, b"5.7.8 Bad credentials"), FailureCategory.AUTH_FAILED),
            (TimeoutError("timed out"), FailureCategory.TIMED_OUT),
            (ConnectionResetError(), FailureCategory.CONNECTION_FAILED),
            (smtplib.SMTPServerDisconnected("gone"), FailureCategory.CONNECTION_FAILED),
            (DeliveryError("rejected", category=FailureCategory.AUTH_FAILED), FailureCategory.AUTH_FAILED),
            (DeliveryError("read timeout"), FailureCategory.TIMED_OUT),
        ],
    )
    def test_send_failures_are_classified(self, transport_config, valid_payload, error, category):
        """Test the mapping of send failures to categories."""
        transport = MockTransport(send_error=error)
        dispatcher = MessageDispatcher(transport_config, transport=transport)

        result = dispatcher.submit(valid_payload)

        assert result.succeeded is False
        assert result.failure_category == category
        assert result.status_code == 500
        assert result.client_message == category.client_message
        assert transport.send_calls == 1

    def test_timed_out_wording(self, transport_config, valid_payload):
        """Test the client message for a timed-out send."""
        transport = MockTransport(send_error=Exception("SMTP timeout"))
        dispatcher = MessageDispatcher(transport_config, transport=transport)

        result = dispatcher.submit(valid_payload)

        assert result.to_dict() == {"error": "Email sending timed out. Please try again."}


class TestHealthCheck:
    """Tests for MessageDispatcher.health_check."""

    def test_healthy(self, dispatcher, mock_transport):
        """Test a reachable transport."""
        report = dispatcher.health_check()

        assert report.healthy is True
        assert report.status_code == 200
        assert report.to_dict()["status"] == "healthy"
        assert mock_transport.send_calls == 0

    def test_unavailable(self, transport_config):
        """Test an unreachable transport."""
        transport = MockTransport(verify_error=OSError("no route to host"))
        report = MessageDispatcher(transport_config, transport=transport).health_check()

        assert report.healthy is False
        assert report.status_code == 503
        assert report.message == "SMTP service unavailable"

    def test_unconfigured(self, unconfigured_config, mock_transport):
        """Test that the probe is skipped when settings are missing."""
        report = MessageDispatcher(unconfigured_config, transport=mock_transport).health_check()

        assert report.status_code == 500
        assert report.missing_vars == ["SMTP_PORT", "SMTP_USER", "SMTP_PASS", "FROM_EMAIL"]
        assert report.to_dict() == {
            "status": "error",
            "message": "SMTP not configured",
            "missingVars": ["SMTP_PORT", "SMTP_USER", "SMTP_PASS", "FROM_EMAIL"],
        }
        assert mock_transport.verify_calls == 0
