"""Runtime configuration.

Values are read from environment variables prefixed with ``CL_THUMBNAILER_``
(e.g. ``CL_THUMBNAILER_CAPTURE_TIMEOUT=10``).
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .plugins.image_scale.algo.image_format import ImageFormat


class ThumbnailerSettings(BaseSettings):
    """Settings shared by the service, the capture bridge and the HTTP app."""

    # Source acquisition
    placeholder_path: Path = Field(
        default=Path("white.gif"),
        description="Image used when a remote fetch fails (relative to the working directory)",
    )
    fetch_timeout: float = Field(default=30.0, gt=0, description="HTTP fetch timeout in seconds")

    # Website capture
    capture_timeout: float = Field(default=20.0, gt=0, description="Page load ceiling in seconds")
    capture_poll_interval: float = Field(default=0.05, gt=0)
    viewport_width: int = Field(default=1024, ge=1)
    viewport_height: int = Field(default=768, ge=1)

    # Encoding
    default_format: ImageFormat = ImageFormat.PNG
    default_quality: int = Field(default=50, ge=1, le=100)
    default_to_png: bool = Field(
        default=False,
        description="Encode unknown/unspecified formats as PNG instead of failing",
    )

    # Response cache
    cache_enabled: bool = True
    cache_ttl_seconds: float = Field(default=24 * 60 * 60, gt=0)

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    model_config = SettingsConfigDict(env_prefix="CL_THUMBNAILER_")

    def resolve_placeholder(self) -> Path:
        """Absolute placeholder path, relative paths resolved against the CWD."""
        path = self.placeholder_path.expanduser()
        if not path.is_absolute():
            path = Path.cwd() / path
        return path


_settings: ThumbnailerSettings | None = None


def get_settings() -> ThumbnailerSettings:
    """Get the process-wide settings instance.

    Returns:
        ThumbnailerSettings loaded from the environment on first use
    """
    global _settings
    if _settings is None:
        _settings = ThumbnailerSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
