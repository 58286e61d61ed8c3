"""Pydantic models for Atelier Agent generation and publishing."""

from datetime import datetime

from pydantic import BaseModel, Field


# ============================================================================
# Presets
# ============================================================================


class StylePreset(BaseModel):
    """Named style that steers the look of a generated image."""

    key: str = Field(description="Identifier sent by clients")
    label: str = Field(description="Human readable name")
    descriptor: str = Field(description="Text appended to the prompt")


# ============================================================================
# Generation Models
# ============================================================================


class GenerationRequest(BaseModel):
    """Normalised creative direction for one text-to-image call."""

    prompt: str = Field(min_length=1, description="Trimmed user prompt")
    negative_prompt: str = Field(default="", description="Things to steer away from")
    style: str | None = Field(default=None, description="Style preset key")
    aspect_ratio: str = Field(default="1:1", description="Aspect ratio label")
    guidance: float = Field(default=7.5, ge=1.0, le=20.0, description="cfg_scale")


class GenerationResult(BaseModel):
    """Image returned by the generation service."""

    base64_image: str = Field(description="PNG bytes, base64 encoded")
    model: str | None = Field(default=None, description="Vendor model identifier")
    inference_time: float | None = Field(
        default=None, description="Inference duration in seconds"
    )


class HistoryEntry(BaseModel):
    """One generated image kept for the current session only."""

    base64_image: str
    created_at: datetime = Field(default_factory=datetime.now)
    prompt: str
    style: str | None = None


# ============================================================================
# Publishing Models
# ============================================================================


class PublishRequest(BaseModel):
    """Image plus the metadata used to compose its caption."""

    image_data: str | None = Field(default=None, description="PNG bytes, base64 encoded")
    caption: str | None = None
    prompt: str | None = None
    style: str | None = None


class PublishResult(BaseModel):
    """Identifiers produced by a successful publish."""

    image_url: str = Field(description="Durable URL on the asset host")
    container_id: str = Field(description="Instagram media container id")
    publish_id: str = Field(description="Instagram media id after publishing")
