"""Generation service: validates creative direction and calls Stability."""

from __future__ import annotations

import requests

from core.config import Settings
from core.errors import ValidationError
from core.logging_config import log
from core.schemas import GenerationRequest, GenerationResult
from core.styles import apply_style, normalize_aspect_ratio, normalize_guidance

from backend.stability_client import StabilityClient


class GenerationService:
    """Turns user input into a single text-to-image request."""

    def __init__(self, client: StabilityClient):
        self.client = client

    @classmethod
    def from_settings(
        cls, settings: Settings, session: requests.Session | None = None
    ) -> GenerationService:
        return cls(
            StabilityClient(settings.stability, session, timeout=settings.generate_timeout)
        )

    def prepare(
        self,
        prompt: str | None,
        negative_prompt: str | None = None,
        aspect_ratio: str | None = None,
        style: str | None = None,
        guidance: float | None = None,
    ) -> GenerationRequest:
        """Normalise raw input.

        Raises:
            ValidationError: If the prompt is missing or blank
        """
        prompt = (prompt or "").strip()
        if not prompt:
            raise ValidationError("Prompt is required.")

        return GenerationRequest(
            prompt=prompt,
            negative_prompt=(negative_prompt or "").strip(),
            style=style or None,
            aspect_ratio=normalize_aspect_ratio(aspect_ratio),
            guidance=normalize_guidance(guidance),
        )

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate an image for an already prepared request."""
        log.info(
            "Generating image (style=%s, aspect_ratio=%s, guidance=%.1f)",
            request.style,
            request.aspect_ratio,
            request.guidance,
        )
        return self.client.text_to_image(
            prompt=apply_style(request.prompt, request.style),
            negative_prompt=request.negative_prompt,
            aspect_ratio=request.aspect_ratio,
            cfg_scale=request.guidance,
        )
