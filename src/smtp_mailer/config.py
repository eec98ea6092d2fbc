"""Configuration management for the SMTP mailer."""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

IMPLICIT_TLS_PORT = 465


class TransportConfig(BaseSettings):
    """SMTP transport configuration, read from SMTP_* / FROM_* variables."""

    smtp_host: Optional[str] = Field(None, description="SMTP server hostname")
    smtp_port: Optional[int] = Field(None, description="SMTP server port")
    smtp_user: Optional[str] = Field(None, description="SMTP username")
    smtp_pass: Optional[str] = Field(None, description="SMTP password")
    from_email: Optional[str] = Field(None, description="Sender email address")
    from_name: str = Field("Secure SMTP Service", description="Sender display name")
    smtp_connect_timeout: float = Field(10.0, description="Connection timeout in seconds")
    smtp_socket_timeout: float = Field(10.0, description="Socket timeout in seconds")

    model_config = SettingsConfigDict(case_sensitive=False, env_ignore_empty=True)

    @property
    def use_implicit_tls(self) -> bool:
        """True when the port is the well-known SMTPS port."""
        return self.smtp_port == IMPLICIT_TLS_PORT

    def missing_fields(self) -> List[str]:
        """Names of the required environment variables that are unset."""
        required = {
            "SMTP_HOST": self.smtp_host,
            "SMTP_PORT": self.smtp_port,
            "SMTP_USER": self.smtp_user,
            "SMTP_PASS": self.smtp_pass,
            "FROM_EMAIL": self.from_email,
        }
        return [name for name, value in required.items() if value in (None, "")]

    @property
    def is_configured(self) -> bool:
        return not self.missing_fields()


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Logging level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )
    file_path: Optional[str] = Field(None, description="Path to log file")
    max_file_size: int = Field(10 * 1024 * 1024, description="Maximum log file size in bytes")
    backup_count: int = Field(5, description="Number of backup log files to keep")
    console_output: bool = Field(True, description="Enable console logging")

    model_config = SettingsConfigDict(env_prefix="MAILER_LOG_", case_sensitive=False)


class Settings(BaseSettings):
    """Main application settings."""

    app_name: str = Field("smtp-mailer", description="Application name")
    host: str = Field("0.0.0.0", description="Address the HTTP server binds to")
    port: int = Field(5000, description="Port the HTTP server listens on")
    debug: bool = Field(False, description="Enable debug mode")

    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_prefix="MAILER_", case_sensitive=False)


@lru_cache()
def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load application settings once per process.

    Values from an environment file (default: .env in the working directory)
    are applied first, then actual environment variables win.

    Args:
        env_file: Path to environment file

    Returns:
        Loaded settings instance

    Raises:
        ConfigurationError: If a configured value cannot be parsed
    """
    env_path = Path(env_file) if env_file else Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    try:
        return Settings()
    except PydanticValidationError as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e
