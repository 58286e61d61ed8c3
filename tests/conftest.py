"""Shared fixtures: fake vendor HTTP sessions and complete settings."""

from __future__ import annotations

import json

import pytest

from core.config import (
    CloudinarySettings,
    InstagramSettings,
    Settings,
    StabilitySettings,
)

STABILITY_URL = "https://api.stability.ai/v2beta/stable-image/generate/core"
CLOUDINARY_URL = "https://api.cloudinary.com/v1_1/demo-cloud/image/upload"
MEDIA_URL = "https://graph.facebook.com/v19.0/1784/media"
PUBLISH_URL = "https://graph.facebook.com/v19.0/1784/media_publish"


class FakeResponse:
    """Just enough of ``requests.Response`` for the clients."""

    def __init__(self, status_code=200, json_data=None, text=None, headers=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text if text is not None else (json.dumps(json_data) if json_data is not None else "")
        self.headers = headers or {}

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


class FakeSession:
    """Records every POST and answers from per-URL queues."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, dict]] = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if url not in self.routes:
            raise AssertionError(f"Unexpected POST to {url}")
        answer = self.routes[url]
        if isinstance(answer, list):
            answer = answer.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]

    def calls_to(self, url: str) -> list[dict]:
        return [kwargs for called, kwargs in self.calls if called == url]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        stability=StabilitySettings(api_key="sk-test"),
        cloudinary=CloudinarySettings(
            cloud_name="demo-cloud", api_key="cl-key", api_secret="cl-secret"
        ),
        instagram=InstagramSettings(access_token="ig-token", ig_user_id="1784"),
    )


@pytest.fixture
def stability_ok() -> FakeResponse:
    return FakeResponse(
        json_data={
            "artifacts": [{"base64": "aW1hZ2U=", "finishReason": "SUCCESS"}],
            "model_id": "sd3-core",
            "metrics": {"inference": 3.25},
        }
    )


@pytest.fixture
def publish_routes() -> dict:
    return {
        CLOUDINARY_URL: FakeResponse(
            json_data={"secure_url": "https://res.cloudinary.com/demo-cloud/study.png"}
        ),
        MEDIA_URL: FakeResponse(json_data={"id": "container-1"}),
        PUBLISH_URL: FakeResponse(json_data={"id": "media-1"}),
    }
