"""Stability AI text-to-image client.

Processing flow:
    1. Check the API key on the injected settings.
    2. Submit the normalised request as a multipart form.
    3. Return the first image artifact plus whatever metadata came back.

Error handling:
    - Missing API key -> ``ConfigurationError``
    - Transport failure, non-2xx status or a response without an image
      -> ``UpstreamError`` (carrying the upstream status when known)
"""

from __future__ import annotations

import json
import math

import requests

from core.config import StabilitySettings, require
from core.errors import UpstreamError
from core.logging_config import log, measure
from core.schemas import GenerationResult


def _error_detail(response: requests.Response) -> str:
    """Pull the most useful error text out of a failed response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or "Failed to generate image."

    if isinstance(data, dict):
        if data.get("message"):
            return str(data["message"])
        if data.get("error"):
            return str(data["error"])
        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(e) for e in errors)
    return json.dumps(data, indent=2)


def _extract_image(data: dict) -> str | None:
    artifacts = data.get("artifacts")
    if isinstance(artifacts, list) and artifacts and isinstance(artifacts[0], dict):
        image = artifacts[0].get("base64")
        if isinstance(image, str) and image:
            return image
    image = data.get("image")
    return image if isinstance(image, str) and image else None


def _extract_model(data: dict, response: requests.Response) -> str | None:
    model = data.get("model_id") or response.headers.get("stability-model-id")
    return str(model) if model else None


class StabilityClient:
    """Thin wrapper over the Stability text-to-image endpoint."""

    def __init__(
        self,
        settings: StabilitySettings,
        session: requests.Session | None = None,
        timeout: float = 60,
    ):
        self.settings = settings
        self.session = session or requests.Session()
        self.timeout = timeout

    def text_to_image(
        self,
        prompt: str,
        negative_prompt: str = "",
        aspect_ratio: str = "1:1",
        cfg_scale: float = 7.5,
    ) -> GenerationResult:
        """Generate one image.

        Args:
            prompt: Final prompt, style descriptor already appended
            negative_prompt: Omitted from the request when empty
            aspect_ratio: Forwarded verbatim
            cfg_scale: Guidance value, already clamped

        Returns:
            GenerationResult with the base64 image and optional metadata

        Raises:
            ConfigurationError: If the API key is not configured
            UpstreamError: If the call fails or returns no image
        """
        require(self.settings.missing())

        form = {
            "mode": "text-to-image",
            "prompt": prompt,
            "aspect_ratio": aspect_ratio,
            "output_format": self.settings.output_format,
            "cfg_scale": str(cfg_scale),
        }
        if negative_prompt:
            form["negative_prompt"] = negative_prompt

        try:
            with measure("stability.generate"):
                response = self.session.post(
                    self.settings.endpoint,
                    headers={
                        "Authorization": f"Bearer {self.settings.api_key}",
                        "Accept": "application/json",
                    },
                    # Stability only accepts multipart bodies
                    files={"none": ""},
                    data=form,
                    timeout=self.timeout,
                )
        except requests.exceptions.RequestException as e:
            log.error("Stability request failed: %s", e)
            raise UpstreamError(f"Failed to reach the Stability API: {e}") from e

        if not response.ok:
            detail = _error_detail(response)
            log.error("Stability responded %s: %s", response.status_code, detail)
            raise UpstreamError(detail, upstream_status=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                "No image returned from the Stability API.",
                upstream_status=response.status_code,
            ) from e

        image = _extract_image(data) if isinstance(data, dict) else None
        if not image:
            raise UpstreamError("No image returned from the Stability API.")

        metrics = data.get("metrics")
        if not isinstance(metrics, dict):
            metrics = {}
        try:
            inference_time = float(metrics.get("inference") or 0) or None
        except (TypeError, ValueError):
            inference_time = None
        if inference_time is not None and not math.isfinite(inference_time):
            inference_time = None

        return GenerationResult(
            base64_image=image,
            model=_extract_model(data, response),
            inference_time=inference_time,
        )
