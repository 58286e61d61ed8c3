"""Instagram Graph API publishing (container, then publish)."""

from __future__ import annotations

import requests

from core.config import InstagramSettings, require
from core.errors import PublishError
from core.logging_config import log, measure


def _graph_json(response: requests.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _graph_error(data: dict) -> str | None:
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message")
    return None


class InstagramClient:
    """Two-step publisher for a hosted image."""

    def __init__(
        self,
        settings: InstagramSettings,
        session: requests.Session | None = None,
    ):
        self.settings = settings
        self.session = session or requests.Session()

    def _post(self, edge: str, form: dict[str, str], timeout: float) -> requests.Response:
        url = f"{self.settings.graph_url}/{self.settings.ig_user_id}/{edge}"
        try:
            with measure(f"instagram.{edge}"):
                return self.session.post(url, data=form, timeout=timeout)
        except requests.exceptions.RequestException as e:
            log.error("Instagram %s request failed: %s", edge, e)
            raise PublishError(f"Instagram publish failed: {e}") from e

    def create_container(self, image_url: str, caption: str, timeout: float = 60) -> str:
        """Create a media container for ``image_url`` and return its id."""
        require(self.settings.missing())

        response = self._post(
            "media",
            {
                "access_token": self.settings.access_token,
                "image_url": image_url,
                "caption": caption,
            },
            timeout,
        )
        data = _graph_json(response)
        if not response.ok or not data.get("id"):
            message = _graph_error(data) or (
                f"Failed to create Instagram media container ({response.status_code})."
            )
            raise PublishError(f"Instagram publish failed: {message}")
        return str(data["id"])

    def publish_container(self, container_id: str, timeout: float = 60) -> str:
        """Publish a previously created container and return the media id."""
        require(self.settings.missing())

        response = self._post(
            "media_publish",
            {
                "access_token": self.settings.access_token,
                "creation_id": container_id,
            },
            timeout,
        )
        data = _graph_json(response)
        if not response.ok or not data.get("id"):
            message = _graph_error(data) or (
                f"Failed to publish Instagram media ({response.status_code})."
            )
            raise PublishError(f"Instagram publish failed: {message}")
        return str(data["id"])
