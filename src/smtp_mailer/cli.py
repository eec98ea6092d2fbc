"""CLI commands for the SMTP mailer."""

import sys
from datetime import datetime, timezone
from typing import Optional

import click

from .config import load_settings
from .dispatcher import MessageDispatcher
from .exceptions import MailerError
from .logging import setup_logging
from .models import EmailRequest
from .server import create_mailer_app, run
from .template import TemplateLoader, render_email


@click.group()
def main():
    """SMTP mailer CLI."""
    pass


@main.command()
@click.option("--host", default=None, help="Bind address (default: MAILER_HOST or 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Port (default: MAILER_PORT or 5000)")
@click.option("--debug", is_flag=True, help="Enable Flask debug mode")
@click.option("--env-file", type=click.Path(exists=True), help=".env file path")
def serve(host: Optional[str], port: Optional[int], debug: bool, env_file: Optional[str]):
    """Run the HTTP server."""
    try:
        app = create_mailer_app(env_file)
    except MailerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    run(app, app.settings, host=host, port=port, debug=debug)


@main.command()
@click.option("--env-file", type=click.Path(exists=True), help=".env file path")
def check(env_file: Optional[str]):
    """Check that the SMTP server is reachable without sending mail."""
    try:
        settings = load_settings(env_file)
    except MailerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    setup_logging(settings.logging)

    report = MessageDispatcher(settings.transport).health_check()

    click.echo(f"Status: {'healthy' if report.healthy else 'error'}")
    click.echo(f"Message: {report.message}")
    if report.missing_vars:
        click.echo(f"Missing variables: {', '.join(report.missing_vars)}")

    sys.exit(0 if report.healthy else 1)


@main.command()
def list_templates():
    """List all available templates."""
    loader = TemplateLoader()
    templates = loader.list_templates()

    click.echo(f"Available templates ({len(templates)}):")
    for template in templates:
        try:
            metadata = loader.load_metadata(template)
            click.echo(f"  - {template}: {metadata.description or metadata.name}")
        except MailerError as e:
            click.echo(f"  - {template}: (Error loading metadata: {e})")


@main.command()
@click.option("--template", required=True, help="Template name")
@click.option("--name", required=True, help="Recipient name")
@click.option("--subject", required=True, help="Email subject")
@click.option("--message", default="", help="Message body for the custom template")
@click.option("--text", is_flag=True, help="Show the plain-text body instead of HTML")
def preview(template: str, name: str, subject: str, message: str, text: bool):
    """Render a template locally without contacting any server."""
    request = EmailRequest(
        to="preview@example.com",
        subject=subject,
        name=name,
        template=template,
        message=message,
    )
    try:
        rendered = render_email(request, datetime.now(timezone.utc))
    except MailerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(rendered.text_body if text else rendered.html_body)


@main.command()
@click.option("--to", "recipient", required=True, help="Recipient email address")
@click.option("--subject", required=True, help="Email subject")
@click.option("--name", required=True, help="Recipient name")
@click.option("--template", required=True, help="Template name (welcome, notification, custom)")
@click.option("--message", default=None, help="Message body for the custom template")
@click.option("--env-file", type=click.Path(exists=True), help=".env file path")
def send(
    recipient: str,
    subject: str,
    name: str,
    template: str,
    message: Optional[str],
    env_file: Optional[str],
):
    """Send a single email using the SMTP settings from the environment."""
    try:
        settings = load_settings(env_file)
    except MailerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    setup_logging(settings.logging)

    payload = {
        "to": recipient,
        "subject": subject,
        "name": name,
        "template": template,
        "message": message,
    }
    result = MessageDispatcher(settings.transport).submit(payload)

    click.echo(f"Status: {'sent' if result.succeeded else 'failed'}")
    if result.message_id:
        click.echo(f"Message ID: {result.message_id}")
    if not result.succeeded:
        click.echo(f"Error: {result.client_message}")
        click.echo(f"Category: {result.failure_category.value}")

    sys.exit(0 if result.succeeded else 1)


if __name__ == "__main__":
    main()
