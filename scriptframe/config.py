"""
Configuration management for scriptframe.
"""

import os
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

IMAGE_PROVIDERS = ("imagen", "stability")


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


@dataclass
class GeminiConfig:
    """Google Gemini / Imagen API configuration."""

    api_key: str = field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
    )
    chat_model: str = field(
        default_factory=lambda: os.getenv("CHAT_MODEL", "gemini-2.5-flash")
    )
    image_model: str = field(
        default_factory=lambda: os.getenv("IMAGE_MODEL", "imagen-3.0-generate-002")
    )
    # Milliseconds, as expected by the SDK's HttpOptions; None keeps the SDK default
    timeout_ms: Optional[int] = field(
        default_factory=lambda: _optional_int("GEMINI_TIMEOUT_MS")
    )
    max_retries: int = field(
        default_factory=lambda: int(os.getenv("GEMINI_MAX_RETRIES", "0"))
    )
    retry_backoff: float = field(
        default_factory=lambda: float(os.getenv("GEMINI_RETRY_BACKOFF", "0.5"))
    )


@dataclass
class StabilityConfig:
    """Stability AI REST API configuration."""

    api_key: str = field(default_factory=lambda: os.getenv("STABILITY_API_KEY", ""))
    api_host: str = field(
        default_factory=lambda: os.getenv("STABILITY_API_HOST", "https://api.stability.ai")
    )
    engine_id: str = field(
        default_factory=lambda: os.getenv("STABILITY_ENGINE_ID", "stable-image-generate-sd3")
    )
    timeout: float = field(
        default_factory=lambda: float(os.getenv("STABILITY_TIMEOUT", "120"))
    )
    max_retries: int = field(
        default_factory=lambda: int(os.getenv("STABILITY_MAX_RETRIES", "0"))
    )
    retry_backoff: float = field(
        default_factory=lambda: float(os.getenv("STABILITY_RETRY_BACKOFF", "0.5"))
    )

    @property
    def endpoint(self) -> str:
        return f"{self.api_host.rstrip('/')}/v2beta/stable-image/generate/{self.engine_id}"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    format: str = field(
        default_factory=lambda: os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )
    file_path: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE_PATH"))


@dataclass
class Config:
    """Main configuration class."""

    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    stability: StabilityConfig = field(default_factory=StabilityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    default_image_provider: str = field(
        default_factory=lambda: os.getenv("IMAGE_PROVIDER", "imagen").lower()
    )

    def validate(self) -> bool:
        """Validate configuration settings."""
        errors = []

        if self.default_image_provider not in IMAGE_PROVIDERS:
            errors.append(
                f"Image provider must be one of: {', '.join(IMAGE_PROVIDERS)}"
            )

        if self.gemini.max_retries < 0 or self.stability.max_retries < 0:
            errors.append("Retry counts cannot be negative")

        if self.stability.timeout <= 0:
            errors.append("Stability timeout must be positive")

        if self.gemini.timeout_ms is not None and self.gemini.timeout_ms <= 0:
            errors.append("Gemini timeout must be positive")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        return True


# Global configuration instance
config = Config()


def get_config() -> Config:
    """Get the global configuration instance."""
    return config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global config
    load_dotenv(override=True)
    config = Config()
    return config
