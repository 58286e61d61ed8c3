"""Publish service: host the image, then post it to Instagram."""

from __future__ import annotations

import time

import requests

from core.captions import DEFAULT_HASHTAGS, compose_caption
from core.config import Settings
from core.errors import AtelierError, PublishError, UploadError, ValidationError
from core.logging_config import log
from core.schemas import PublishRequest, PublishResult

from backend.cloudinary_client import CloudinaryClient
from backend.instagram_client import InstagramClient


class PublishService:
    """Runs the hosting upload and the two-call publish sequence in order."""

    def __init__(
        self,
        hosting: CloudinaryClient,
        publisher: InstagramClient,
        timeout: float = 60,
        hashtags: str = DEFAULT_HASHTAGS,
        clock=time.monotonic,
    ):
        self.hosting = hosting
        self.publisher = publisher
        self.timeout = timeout
        self.hashtags = hashtags
        self.clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, session: requests.Session | None = None
    ) -> PublishService:
        session = session or requests.Session()
        return cls(
            hosting=CloudinaryClient(settings.cloudinary, session),
            publisher=InstagramClient(settings.instagram, session),
            timeout=settings.upload_timeout,
            hashtags=settings.instagram.hashtags,
        )

    def _remaining(self, started: float, error_cls: type[AtelierError], step: str) -> float:
        remaining = self.timeout - (self.clock() - started)
        if remaining <= 0:
            raise error_cls(f"{step} failed: timed out after {self.timeout:g}s.")
        return remaining

    def publish(self, request: PublishRequest) -> PublishResult:
        """Upload and publish one image.

        Hosting failures abort before anything is sent to Instagram. Any
        failure after hosting carries the hosted URL on the raised error.

        Raises:
            ValidationError: If the image payload is missing
            ConfigurationError: If hosting or publishing credentials are missing
            UploadError: If the hosting upload fails
            PublishError: If container creation or publishing fails
        """
        if not request.image_data:
            raise ValidationError("imageData is required.")

        started = self.clock()

        image_url = self.hosting.upload_image(
            request.image_data,
            timeout=self._remaining(started, UploadError, "Cloudinary upload"),
        )
        log.info("Image hosted at %s", image_url)

        caption = compose_caption(
            request.caption, request.prompt, request.style, hashtags=self.hashtags
        )
        try:
            container_id = self.publisher.create_container(
                image_url,
                caption,
                timeout=self._remaining(started, PublishError, "Instagram publish"),
            )
            publish_id = self.publisher.publish_container(
                container_id,
                timeout=self._remaining(started, PublishError, "Instagram publish"),
            )
        except AtelierError as e:
            e.image_url = image_url
            log.error("Publishing failed after hosting: %s", e.message)
            raise

        log.info("Published media %s (container %s)", publish_id, container_id)
        return PublishResult(
            image_url=image_url,
            container_id=container_id,
            publish_id=publish_id,
        )
