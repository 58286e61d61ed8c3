"""Error taxonomy shared by the generation and publish handlers."""

from __future__ import annotations

from typing import Any


class AtelierError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        image_url: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.upstream_status = upstream_status
        self.image_url = image_url

    def to_payload(self) -> dict[str, Any]:
        """Render the error as the JSON body returned to clients."""
        payload: dict[str, Any] = {"error": self.message}
        if self.upstream_status is not None:
            payload["status"] = self.upstream_status
        if self.image_url:
            payload["imageUrl"] = self.image_url
        return payload


class ValidationError(AtelierError):
    """Raised when caller input is missing or malformed."""

    status_code = 400


class ConfigurationError(AtelierError):
    """Raised when a required credential is not configured."""

    status_code = 500


class UpstreamError(AtelierError):
    """Raised when a vendor call fails or returns an unexpected shape."""

    status_code = 502


class UploadError(UpstreamError):
    """Raised when the asset-hosting upload fails."""

    pass


class PublishError(UpstreamError):
    """Raised when creating or publishing the media container fails."""

    pass
