"""Per-browser-session state and actions for the Streamlit studio."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import requests
from pydantic import ValidationError as PydanticValidationError

from core.config import (
    get_default_aspect_ratio,
    get_default_caption,
    get_default_guidance,
    get_default_negative_prompt,
    get_default_prompt,
    get_default_style,
)
from core.schemas import GenerationResult, HistoryEntry, PublishResult


class StudioRequestError(Exception):
    """Raised when the API answers with a non-2xx status or is unreachable."""

    def __init__(self, message: str, image_url: str | None = None):
        super().__init__(message)
        self.image_url = image_url


class StudioClient:
    """Posts JSON to the Atelier API."""

    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout: float = 90,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _post_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self.session.post(
                f"{self.base_url}{path}", json=payload, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise StudioRequestError(f"Could not reach the API: {e}") from e

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = None
            if not isinstance(body, dict):
                body = {}
            raise StudioRequestError(
                body.get("error") or response.text or f"Request failed with {response.status_code}",
                image_url=body.get("imageUrl"),
            )

        try:
            data = response.json()
        except ValueError as e:
            raise StudioRequestError(f"Unexpected response from {path}.") from e
        if not isinstance(data, dict):
            raise StudioRequestError(f"Unexpected response from {path}.")
        return data

    def generate(self, payload: dict[str, Any]) -> GenerationResult:
        data = self._post_json("/api/generate", payload)
        try:
            return GenerationResult(
                base64_image=data["base64Image"],
                model=data.get("model"),
                inference_time=data.get("inferenceTime"),
            )
        except (KeyError, PydanticValidationError) as e:
            raise StudioRequestError("Unexpected response from /api/generate.") from e

    def upload(self, payload: dict[str, Any]) -> PublishResult:
        data = self._post_json("/api/upload", payload)
        try:
            return PublishResult(
                image_url=data["imageUrl"],
                container_id=data["containerId"],
                publish_id=data["publishId"],
            )
        except (KeyError, PydanticValidationError) as e:
            raise StudioRequestError("Unexpected response from /api/upload.") from e


@dataclass
class GenerationMeta:
    """What the latest generation was asked for and how it ran."""

    prompt: str
    style: str
    model: str | None = None
    inference_time: float | None = None


@dataclass
class StudioSession:
    """Local-only state of one studio page."""

    prompt: str = field(default_factory=get_default_prompt)
    style: str = field(default_factory=get_default_style)
    aspect_ratio: str = field(default_factory=get_default_aspect_ratio)
    negative_prompt: str = field(default_factory=get_default_negative_prompt)
    guidance: float = field(default_factory=get_default_guidance)
    caption: str = field(default_factory=get_default_caption)

    is_generating: bool = False
    is_uploading: bool = False
    generation_error: str | None = None
    upload_error: str | None = None
    history: list[HistoryEntry] = field(default_factory=list)
    generation_meta: GenerationMeta | None = None
    last_publish: PublishResult | None = None
    last_published_entry: HistoryEntry | None = None

    @property
    def latest_image(self) -> HistoryEntry | None:
        return self.history[0] if self.history else None

    @property
    def gallery(self) -> list[HistoryEntry]:
        """Everything except the image shown in the main preview."""
        return self.history[1:]

    @property
    def published_is_latest(self) -> bool:
        """Whether the last published image is the one in the main preview."""
        return self.last_published_entry is not None and self.last_published_entry is self.latest_image

    @property
    def can_generate(self) -> bool:
        return not self.is_generating

    @property
    def can_upload(self) -> bool:
        return self.latest_image is not None and not self.is_uploading

    def generation_payload(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "style": self.style,
            "aspectRatio": self.aspect_ratio,
            "negativePrompt": self.negative_prompt,
            "guidance": self.guidance,
        }


def generate(session: StudioSession, client: StudioClient) -> HistoryEntry | None:
    """Run one generation and record it at the top of the history."""
    if not session.can_generate:
        return None

    session.is_generating = True
    session.generation_error = None
    session.upload_error = None
    prompt, style = session.prompt, session.style
    try:
        result = client.generate(session.generation_payload())
        session.generation_meta = GenerationMeta(
            prompt=prompt,
            style=style,
            model=result.model,
            inference_time=result.inference_time,
        )
        entry = HistoryEntry(base64_image=result.base64_image, prompt=prompt, style=style)
        session.history.insert(0, entry)
        return entry
    except StudioRequestError as e:
        session.generation_error = str(e) or "Failed to generate image."
        return None
    finally:
        session.is_generating = False


def upload(session: StudioSession, client: StudioClient) -> PublishResult | None:
    """Publish the latest image with the current caption.

    The payload is built from the latest entry at the time of the call, so
    a generation finishing mid-upload does not change what gets published.
    """
    entry = session.latest_image
    if entry is None or session.is_uploading:
        return None

    session.is_uploading = True
    session.upload_error = None
    payload = {
        "imageData": entry.base64_image,
        "caption": session.caption,
        "prompt": entry.prompt,
        "style": entry.style,
    }
    try:
        result = client.upload(payload)
        session.last_publish = result
        session.last_published_entry = entry
        return result
    except StudioRequestError as e:
        session.upload_error = str(e) or "Failed to upload to Instagram."
        if e.image_url:
            session.upload_error += f" The image is still hosted at {e.image_url}"
        return None
    finally:
        session.is_uploading = False
