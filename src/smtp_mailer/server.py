#!/usr/bin/env python
"""
SMTP mailer server - builds the app from the process environment.
"""

from typing import Optional

from flask import Flask

from .app import create_app
from .config import Settings, load_settings
from .logging import setup_logging


def create_mailer_app(env_file: Optional[str] = None) -> Flask:
    """Load settings once, configure logging and build the application."""
    settings = load_settings(env_file)
    setup_logging(settings.logging)
    app = create_app(config=settings.transport)
    app.settings = settings
    return app


def run(app: Flask, settings: Settings, host: Optional[str] = None,
        port: Optional[int] = None, debug: bool = False) -> None:
    """Run the development server."""
    host = host or settings.host
    port = port or settings.port
    debug = debug or settings.debug

    print(f"Starting SMTP mailer on {host}:{port}")
    print(f"Send endpoint: http://{host}:{port}/api/send-email")

    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    mailer_app = create_mailer_app()
    run(mailer_app, mailer_app.settings)
