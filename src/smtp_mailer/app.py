"""HTTP surface for the SMTP mailer."""

import logging
from typing import Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .config import TransportConfig
from .dispatcher import MessageDispatcher
from .models import FailureCategory
from .transports.base import BaseTransport

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[TransportConfig] = None,
    transport: Optional[BaseTransport] = None,
    dispatcher: Optional[MessageDispatcher] = None,
) -> Flask:
    """Factory function to create and configure the Flask app.

    Args:
        config: Transport configuration (read from the environment if omitted)
        transport: Mail transport passed to the dispatcher
        dispatcher: Fully built dispatcher; overrides config and transport
    """
    app = Flask(__name__)

    if dispatcher is None:
        dispatcher = MessageDispatcher(config or TransportConfig(), transport=transport)
    app.dispatcher = dispatcher

    missing = dispatcher.config.missing_fields()
    if missing:
        logger.error(f"Missing required environment variables: {missing}")

    @app.route('/api/send-email', methods=['POST'])
    def send_email():
        """Validate the payload and send one email."""
        payload = request.get_json(silent=True)
        result = app.dispatcher.submit(payload)
        return jsonify(result.to_dict()), result.status_code

    @app.route('/api/send-email', methods=['GET'])
    def health():
        """Check SMTP reachability without sending mail."""
        report = app.dispatcher.health_check()
        return jsonify(report.to_dict()), report.status_code

    @app.errorhandler(Exception)
    def unexpected_error(error):
        """Convert anything that escaped the dispatcher into a JSON 500."""
        if isinstance(error, HTTPException):
            return error
        logger.exception(f"Unhandled error on {request.method} {request.path}: {error}")
        return jsonify({"error": FailureCategory.UNKNOWN.client_message}), 500

    return app
