"""Configuration management for the event wizard."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _default_draft_dir() -> Path:
    raw = os.environ.get("WIZARD_DRAFT_DIR", "")
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".meetspace_wizard" / "drafts"


@dataclass
class Config:
    """Global configuration for the event wizard.

    All values can be overridden via environment variables with a WIZARD_ prefix
    (meeting settings use the JAAS_ prefix shared with the web app).
    Example: WIZARD_AUTOSAVE_DELAY=5
    """

    # Debounce settings (seconds)
    autosave_delay: float = field(
        default_factory=lambda: float(os.environ.get("WIZARD_AUTOSAVE_DELAY", "2.0"))
    )
    field_validation_delay: float = field(
        default_factory=lambda: float(os.environ.get("WIZARD_FIELD_VALIDATION_DELAY", "0.5"))
    )

    # Upload retry settings
    upload_max_retries: int = field(
        default_factory=lambda: int(os.environ.get("WIZARD_UPLOAD_MAX_RETRIES", "3"))
    )
    retry_base_delay: float = field(
        default_factory=lambda: float(os.environ.get("WIZARD_RETRY_BASE_DELAY", "0.5"))
    )
    retry_max_delay: float = field(
        default_factory=lambda: float(os.environ.get("WIZARD_RETRY_MAX_DELAY", "8.0"))
    )
    retry_jitter: float = field(
        default_factory=lambda: float(os.environ.get("WIZARD_RETRY_JITTER", "0.1"))
    )

    # Draft storage
    draft_dir: Path = field(default_factory=_default_draft_dir)

    # Built-in conferencing (Jitsi as a Service)
    jaas_app_id: str = field(default_factory=lambda: os.environ.get("JAAS_APP_ID", ""))
    jaas_domain: str = field(default_factory=lambda: os.environ.get("JAAS_DOMAIN", "8x8.vc"))

    # Event API (create operation)
    api_base_url: str = field(default_factory=lambda: os.environ.get("WIZARD_API_BASE_URL", ""))
    api_token: str = field(default_factory=lambda: os.environ.get("WIZARD_API_TOKEN", ""))
    api_timeout: float = field(
        default_factory=lambda: float(os.environ.get("WIZARD_API_TIMEOUT", "30"))
    )

    # Validation limits
    min_price: float = field(
        default_factory=lambda: float(os.environ.get("WIZARD_MIN_PRICE", "0.01"))
    )
    max_price: float = field(
        default_factory=lambda: float(os.environ.get("WIZARD_MAX_PRICE", "100000"))
    )
    room_name_min_length: int = field(
        default_factory=lambda: int(os.environ.get("WIZARD_ROOM_NAME_MIN_LENGTH", "3"))
    )

    # Logging
    log_level: str = field(
        default_factory=lambda: os.environ.get("WIZARD_LOG_LEVEL", "INFO")
    )

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a value is out of range.
        """
        if self.autosave_delay < 0 or self.field_validation_delay < 0:
            raise ValueError("Debounce delays must be non-negative")
        if self.upload_max_retries < 0:
            raise ValueError("WIZARD_UPLOAD_MAX_RETRIES must be zero or greater")
        if self.min_price <= 0 or self.max_price < self.min_price:
            raise ValueError(
                "WIZARD_MIN_PRICE must be positive and not larger than WIZARD_MAX_PRICE"
            )
        if self.room_name_min_length < 1:
            raise ValueError("WIZARD_ROOM_NAME_MIN_LENGTH must be at least 1")
        if self.api_timeout <= 0:
            raise ValueError("WIZARD_API_TIMEOUT must be positive")

    @property
    def meetings_enabled(self) -> bool:
        """Whether meeting URLs can be composed for the built-in platform."""
        return bool(self.jaas_app_id)

    @classmethod
    def from_env(cls) -> "Config":
        """Create a Config instance from environment variables.

        Returns:
            Config instance with values from environment.
        """
        return cls()
