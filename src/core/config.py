"""Configuration settings for Atelier Agent."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from core.errors import ConfigurationError

# =============================================================================
# Path Configuration (always relative to project structure)
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_FILE = PROJECT_ROOT / "configs" / "config.yaml"

DEFAULT_OUTPUT_DIR = PROJECT_ROOT / "output"


# =============================================================================
# Config Loading
# =============================================================================


def load_config() -> dict[str, Any]:
    """Load configuration from config.yaml."""
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    return {}


def get_config(key: str, default: Any = None) -> Any:
    """Get a config value by dot-notation key (e.g., 'api.port')."""
    config = load_config()
    keys = key.split(".")
    value = config
    for k in keys:
        if isinstance(value, dict):
            value = value.get(k)
        else:
            return default
    return value if value is not None else default


# =============================================================================
# Convenience accessors
# =============================================================================


def get_api_host() -> str:
    return get_config("api.host", "0.0.0.0")


def get_api_port() -> int:
    return get_config("api.port", 8000)


def get_api_base_url() -> str:
    return os.getenv("ATELIER_API_URL") or f"http://localhost:{get_api_port()}"


def get_fail_fast() -> bool:
    return bool(get_config("startup.fail_fast", False))


def get_generate_timeout() -> int:
    return get_config("timeouts.generate", 60)


def get_upload_timeout() -> int:
    return get_config("timeouts.upload", 60)


def get_default_prompt() -> str:
    return get_config(
        "defaults.prompt",
        "Portrait of a young artist sketching in a sunlit studio, expressive "
        "line art, soft pastel palette, hyperrealistic lighting",
    )


def get_default_negative_prompt() -> str:
    return get_config(
        "defaults.negative_prompt", "distorted anatomy, low quality, blurry, watermark"
    )


def get_default_style() -> str:
    return get_config("defaults.style", "figurative-ink")


def get_default_aspect_ratio() -> str:
    return get_config("defaults.aspect_ratio", "1:1")


def get_default_guidance() -> float:
    return float(get_config("defaults.guidance", 7.5))


def get_default_caption() -> str:
    return get_config(
        "defaults.caption",
        "Daily figure drawing study · #art #figurestudy #digitalart",
    )


# =============================================================================
# Credentials
# =============================================================================


@dataclass(frozen=True)
class StabilitySettings:
    """Stability AI text-to-image settings."""

    api_key: str | None
    endpoint: str = "https://api.stability.ai/v2beta/stable-image/generate/core"
    output_format: str = "png"

    def missing(self) -> list[str]:
        return [] if self.api_key else ["STABILITY_API_KEY"]


@dataclass(frozen=True)
class CloudinarySettings:
    """Cloudinary signed-upload settings."""

    cloud_name: str | None
    api_key: str | None
    api_secret: str | None
    upload_url: str = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"
    folder: str = "agentic-figure-studies"
    tags: str = "ai,figure-study,instagram,agentic"

    def missing(self) -> list[str]:
        required = {
            "CLOUDINARY_CLOUD_NAME": self.cloud_name,
            "CLOUDINARY_API_KEY": self.api_key,
            "CLOUDINARY_API_SECRET": self.api_secret,
        }
        return [name for name, value in required.items() if not value]


@dataclass(frozen=True)
class InstagramSettings:
    """Instagram Graph API publishing settings."""

    access_token: str | None
    ig_user_id: str | None
    graph_url: str = "https://graph.facebook.com/v19.0"
    hashtags: str = "#aiart #figuredrawing #digitalart #agentic"

    def missing(self) -> list[str]:
        required = {
            "INSTAGRAM_ACCESS_TOKEN": self.access_token,
            "INSTAGRAM_IG_USER_ID": self.ig_user_id,
        }
        return [name for name, value in required.items() if not value]


@dataclass(frozen=True)
class Settings:
    """Validated-once runtime settings passed into every service."""

    stability: StabilitySettings
    cloudinary: CloudinarySettings
    instagram: InstagramSettings
    generate_timeout: float = 60
    upload_timeout: float = 60

    def missing_credentials(self) -> list[str]:
        return (
            self.stability.missing()
            + self.cloudinary.missing()
            + self.instagram.missing()
        )


def require(missing: list[str]) -> None:
    """Raise ConfigurationError naming the first missing variable, if any."""
    if missing:
        raise ConfigurationError(
            f"{missing[0]} is not set. Please configure it in your environment."
        )


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Read credentials from the environment and endpoints from config.yaml.

    Args:
        env: Mapping to read credentials from. Defaults to ``os.environ``
            after loading ``.env``.

    Returns:
        Settings snapshot. Missing credentials are left as ``None``; call
        ``validate_settings`` to fail fast on them.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    return Settings(
        stability=StabilitySettings(
            api_key=env.get("STABILITY_API_KEY") or None,
            endpoint=get_config("stability.endpoint", StabilitySettings.endpoint),
            output_format=get_config(
                "stability.output_format", StabilitySettings.output_format
            ),
        ),
        cloudinary=CloudinarySettings(
            cloud_name=env.get("CLOUDINARY_CLOUD_NAME") or None,
            api_key=env.get("CLOUDINARY_API_KEY") or None,
            api_secret=env.get("CLOUDINARY_API_SECRET") or None,
            upload_url=get_config("cloudinary.upload_url", CloudinarySettings.upload_url),
            folder=get_config("cloudinary.folder", CloudinarySettings.folder),
            tags=get_config("cloudinary.tags", CloudinarySettings.tags),
        ),
        instagram=InstagramSettings(
            access_token=env.get("INSTAGRAM_ACCESS_TOKEN") or None,
            ig_user_id=env.get("INSTAGRAM_IG_USER_ID") or None,
            graph_url=get_config("instagram.graph_url", InstagramSettings.graph_url),
            hashtags=get_config("instagram.hashtags", InstagramSettings.hashtags),
        ),
        generate_timeout=get_generate_timeout(),
        upload_timeout=get_upload_timeout(),
    )


def validate_settings(settings: Settings) -> Settings:
    """Fail fast when any credential is missing."""
    missing = settings.missing_credentials()
    if missing:
        raise ConfigurationError(
            "Missing required configuration: " + ", ".join(missing)
        )
    return settings
