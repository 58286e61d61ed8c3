"""Pydantic schemas for the web API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateRequest(CamelModel):
    """Request for image generation."""

    prompt: str | None = None
    negative_prompt: str | None = None
    aspect_ratio: str | None = None
    style: str | None = None
    guidance: float | None = None

    @field_validator("guidance", mode="before")
    @classmethod
    def _numbers_only(cls, value: Any) -> Any:
        # Anything that is not a JSON number falls back to the default.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value


class GenerateResponse(CamelModel):
    """Response for a generated image."""

    base64_image: str
    model: str | None = None
    inference_time: float | None = None


class UploadRequest(CamelModel):
    """Request to host and publish an image."""

    image_data: str | None = None
    caption: str | None = None
    prompt: str | None = None
    style: str | None = None


class UploadResponse(CamelModel):
    """Response for a published image."""

    container_id: str
    publish_id: str
    image_url: str


class ErrorResponse(CamelModel):
    """Body returned for every failed request."""

    error: str
    status: int | None = None
    image_url: str | None = None
