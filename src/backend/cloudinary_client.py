"""Signed uploads to Cloudinary."""

from __future__ import annotations

import hashlib
import time

import requests

from core.config import CloudinarySettings, require
from core.errors import UploadError
from core.logging_config import log, measure


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Compute a Cloudinary upload signature.

    Parameters are sorted by name, joined as ``k=v`` pairs with ``&`` and the
    API secret is appended before taking the SHA-1 hex digest.
    """
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] != "")
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryClient:
    """Hosts generated PNGs and returns their durable URL."""

    def __init__(
        self,
        settings: CloudinarySettings,
        session: requests.Session | None = None,
        clock=time.time,
    ):
        self.settings = settings
        self.session = session or requests.Session()
        self.clock = clock

    def upload_image(self, image_data: str, timeout: float = 60) -> str:
        """Upload a base64 PNG and return its ``secure_url``.

        Raises:
            ConfigurationError: If any of the three credentials is missing
            UploadError: If the upload fails or returns no URL
        """
        require(self.settings.missing())

        signed = {
            "folder": self.settings.folder,
            "tags": self.settings.tags,
            "timestamp": str(int(self.clock())),
        }
        signature = sign_params(signed, self.settings.api_secret)

        url = self.settings.upload_url.format(cloud_name=self.settings.cloud_name)
        form = {
            "file": f"data:image/png;base64,{image_data}",
            "api_key": self.settings.api_key,
            "signature": signature,
            **signed,
        }

        try:
            with measure("cloudinary.upload"):
                response = self.session.post(url, data=form, timeout=timeout)
        except requests.exceptions.RequestException as e:
            log.error("Cloudinary request failed: %s", e)
            raise UploadError(f"Cloudinary upload failed: {e}") from e

        if not response.ok:
            detail = response.text or f"Cloudinary responded with status {response.status_code}"
            log.error("Cloudinary responded %s", response.status_code)
            raise UploadError(f"Cloudinary upload failed: {detail}")

        try:
            secure_url = response.json().get("secure_url")
        except (ValueError, AttributeError):
            secure_url = None

        if not isinstance(secure_url, str) or not secure_url:
            raise UploadError("Cloudinary upload failed: Cloudinary did not return a secure URL.")

        return secure_url
