"""Jinja2-backed template loader and renderer."""

import html
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import jinja2
import yaml
from markupsafe import Markup

from .exceptions import InvalidTemplateError, TemplateError
from .models import EmailRequest, RenderedTemplate, TemplateKind, TemplateMetadata

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

DATE_FORMAT = "%m/%d/%Y, %I:%M:%S %p"


def nl2br(value: str) -> Markup:
    """Escape a value and turn its newlines into <br> tags."""
    return Markup("<br>").join(value.replace("\r\n", "\n").split("\n"))


def html_to_text(source: str) -> str:
    """Create plain text from HTML by dropping tags and collapsing whitespace."""
    text = re.sub(r"<style[^>]*>.*?</style>", "", source, flags=re.S | re.I)
    text = re.sub(r"<[^>]*>", "", text)
    text = html.unescape(text)
    return re.sub(r"\s+", " ", text).strip()


def _autoescape(template_name: Optional[str]) -> bool:
    if template_name is None:
        return True
    return not template_name.endswith(".text.jinja2")


class TemplateLoader:
    """Loads and manages Jinja2 email templates."""

    def __init__(self, template_dir: Optional[str] = None):
        """Initialize the template loader.

        Args:
            template_dir: Path to the directory containing templates
                (defaults to the templates bundled with the package)
        """
        self.template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
        if not self.template_dir.exists():
            raise TemplateError(f"Template directory does not exist: {self.template_dir}")

        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self.template_dir)),
            autoescape=_autoescape,
            undefined=jinja2.StrictUndefined,
        )
        self.env.filters["nl2br"] = nl2br
        self._cache: Dict[str, TemplateMetadata] = {}

    def load_template(self, template_name: str) -> jinja2.Template:
        """Load a Jinja2 template.

        Args:
            template_name: Name of the template (without .jinja2 extension)

        Returns:
            Loaded Jinja2 template

        Raises:
            TemplateError: If template cannot be loaded
        """
        try:
            return self.env.get_template(f"{template_name}.jinja2")
        except jinja2.TemplateNotFound as e:
            raise TemplateError(f"Template not found: {template_name}") from e
        except jinja2.TemplateError as e:
            raise TemplateError(f"Error loading template {template_name}: {e}") from e

    def load_metadata(self, template_name: str) -> TemplateMetadata:
        """Load template metadata from YAML file.

        Raises:
            TemplateError: If metadata file cannot be loaded or parsed
        """
        if template_name in self._cache:
            return self._cache[template_name]

        metadata_path = self.template_dir / f"{template_name}.yaml"
        if not metadata_path.exists():
            raise TemplateError(f"Template metadata not found: {metadata_path}")

        try:
            with open(metadata_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise TemplateError(f"Error parsing metadata {metadata_path}: {e}") from e

        if not data:
            raise TemplateError(f"Empty metadata file: {metadata_path}")

        metadata = TemplateMetadata(
            name=data.get("name", template_name),
            required_variables=data.get("required_variables", []),
            optional_variables=data.get("optional_variables", []),
            has_html=data.get("has_html", True),
            has_text=data.get("has_text", False),
            description=data.get("description"),
        )

        self._cache[template_name] = metadata
        return metadata

    def render_template(
        self, template_name: str, context: Dict[str, Any]
    ) -> RenderedTemplate:
        """Render a template with the given context.

        When the template has no text variant the text body is derived
        from the HTML body.

        Returns:
            RenderedTemplate with both bodies

        Raises:
            TemplateError: If rendering fails
        """
        metadata = self.load_metadata(template_name)
        try:
            html_body = ""
            if metadata.has_html:
                html_body = self.load_template(template_name).render(**context)

            text_body = None
            if metadata.has_text:
                try:
                    text_template = self.env.get_template(f"{template_name}.text.jinja2")
                    text_body = text_template.render(**context)
                except jinja2.TemplateNotFound:
                    pass
        except jinja2.UndefinedError as e:
            raise TemplateError(f"Missing variable in template: {e}") from e
        except jinja2.TemplateError as e:
            raise TemplateError(f"Error rendering template: {e}") from e

        if text_body is None:
            text_body = html_to_text(html_body)
        return RenderedTemplate(html_body=html_body, text_body=text_body)

    def list_templates(self) -> List[str]:
        """List all available templates.

        Returns:
            List of template names
        """
        templates = set()
        for file in self.template_dir.glob("*.jinja2"):
            name = file.stem
            if not name.endswith(".text") and not name.startswith("_"):
                templates.add(name)
        return sorted(templates)


def resolve_template_kind(value: str) -> TemplateKind:
    """Map a raw template value to a TemplateKind.

    Raises:
        InvalidTemplateError: If the value names no known template
    """
    try:
        return TemplateKind(value)
    except ValueError as e:
        raise InvalidTemplateError(f"Invalid email template: {value!r}") from e


def _base_context(request: EmailRequest, sent_at: datetime) -> Dict[str, Any]:
    return {
        "name": request.name,
        "subject": request.subject,
        "date": sent_at.strftime(DATE_FORMAT),
        "year": sent_at.year,
    }


def _custom_context(request: EmailRequest, sent_at: datetime) -> Dict[str, Any]:
    context = _base_context(request, sent_at)
    context["message"] = request.message
    return context


_CONTEXT_BUILDERS: Dict[TemplateKind, Callable[[EmailRequest, datetime], Dict[str, Any]]] = {
    TemplateKind.WELCOME: _base_context,
    TemplateKind.NOTIFICATION: _base_context,
    TemplateKind.CUSTOM: _custom_context,
}


def render_email(
    request: EmailRequest,
    sent_at: datetime,
    loader: Optional[TemplateLoader] = None,
) -> RenderedTemplate:
    """Render the HTML/text pair for a request.

    Args:
        request: Validated request; its template value selects the pair
        sent_at: Timestamp interpolated into the bodies
        loader: Template loader (defaults to the bundled templates)

    Raises:
        InvalidTemplateError: If the template value names no known template
        TemplateError: If rendering fails
    """
    kind = resolve_template_kind(request.template)
    builder = _CONTEXT_BUILDERS[kind]
    loader = loader or TemplateLoader()
    return loader.render_template(kind.value, builder(request, sent_at))
