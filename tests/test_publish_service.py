import dataclasses
import hashlib

import pytest
import requests

from backend.cloudinary_client import sign_params
from backend.publish_service import PublishService
from core.errors import ConfigurationError, PublishError, UploadError, ValidationError
from core.schemas import PublishRequest

from conftest import CLOUDINARY_URL, MEDIA_URL, PUBLISH_URL, FakeResponse, FakeSession

HOSTED_URL = "https://res.cloudinary.com/demo-cloud/study.png"


def make_service(settings, routes, **kwargs):
    session = FakeSession(routes)
    service = PublishService.from_settings(settings, session)
    for name, value in kwargs.items():
        setattr(service, name, value)
    service.hosting.clock = lambda: 1700000000
    return service, session


def request(**overrides):
    fields = {"image_data": "aW1hZ2U=", "caption": "A", "prompt": "B", "style": "C"}
    fields.update(overrides)
    return PublishRequest(**fields)


def test_publish_runs_all_three_calls_in_order(settings, publish_routes):
    service, session = make_service(settings, publish_routes)

    result = service.publish(request())

    assert result.image_url == HOSTED_URL
    assert result.container_id == "container-1"
    assert result.publish_id == "media-1"
    assert session.urls() == [CLOUDINARY_URL, MEDIA_URL, PUBLISH_URL]

    media = session.calls_to(MEDIA_URL)[0]["data"]
    assert media["image_url"] == HOSTED_URL
    assert media["access_token"] == "ig-token"
    assert media["caption"] == (
        "A\n\nPrompt: B\n\nStyle: C\n\n#aiart #figuredrawing #digitalart #agentic"
    )
    published = session.calls_to(PUBLISH_URL)[0]["data"]
    assert published == {"access_token": "ig-token", "creation_id": "container-1"}


def test_cloudinary_upload_is_signed(settings, publish_routes):
    service, session = make_service(settings, publish_routes)

    service.publish(request())

    form = session.calls_to(CLOUDINARY_URL)[0]["data"]
    assert form["file"] == "data:image/png;base64,aW1hZ2U="
    assert form["api_key"] == "cl-key"
    assert form["timestamp"] == "1700000000"
    assert form["folder"] == "agentic-figure-studies"
    assert form["tags"] == "ai,figure-study,instagram,agentic"
    expected = hashlib.sha1(
        b"folder=agentic-figure-studies&tags=ai,figure-study,instagram,agentic"
        b"&timestamp=1700000000cl-secret"
    ).hexdigest()
    assert form["signature"] == expected


def test_sign_params_sorts_and_skips_empty_values():
    signature = sign_params({"timestamp": "10", "folder": "", "eager": "w_400"}, "s3cret")
    assert signature == hashlib.sha1(b"eager=w_400&timestamp=10s3cret").hexdigest()


@pytest.mark.parametrize("image_data", [None, ""])
def test_missing_image_calls_nothing(settings, publish_routes, image_data):
    service, session = make_service(settings, publish_routes)

    with pytest.raises(ValidationError, match="imageData is required."):
        service.publish(request(image_data=image_data))

    assert session.calls == []


@pytest.mark.parametrize(
    "field, name",
    [
        ("cloud_name", "CLOUDINARY_CLOUD_NAME"),
        ("api_key", "CLOUDINARY_API_KEY"),
        ("api_secret", "CLOUDINARY_API_SECRET"),
    ],
)
def test_missing_hosting_credential(settings, publish_routes, field, name):
    settings = dataclasses.replace(
        settings, cloudinary=dataclasses.replace(settings.cloudinary, **{field: None})
    )
    service, session = make_service(settings, publish_routes)

    with pytest.raises(ConfigurationError, match=name):
        service.publish(request())

    assert session.calls == []


def test_hosting_failure_never_reaches_instagram(settings, publish_routes):
    publish_routes[CLOUDINARY_URL] = FakeResponse(status_code=401, text="Invalid Signature")
    service, session = make_service(settings, publish_routes)

    with pytest.raises(UploadError, match="Cloudinary upload failed: Invalid Signature") as excinfo:
        service.publish(request())

    assert excinfo.value.image_url is None
    assert session.urls() == [CLOUDINARY_URL]


def test_hosting_without_secure_url(settings, publish_routes):
    publish_routes[CLOUDINARY_URL] = FakeResponse(json_data={"public_id": "x"})
    service, session = make_service(settings, publish_routes)

    with pytest.raises(UploadError, match="did not return a secure URL"):
        service.publish(request())

    assert session.urls() == [CLOUDINARY_URL]


@pytest.mark.parametrize("secure_url", [42, ["https://cdn/x.png"], {"href": "https://cdn/x.png"}])
def test_hosting_with_non_string_secure_url(settings, publish_routes, secure_url):
    publish_routes[CLOUDINARY_URL] = FakeResponse(json_data={"secure_url": secure_url})
    service, session = make_service(settings, publish_routes)

    with pytest.raises(UploadError, match="did not return a secure URL"):
        service.publish(request())

    assert session.urls() == [CLOUDINARY_URL]



def test_hosting_transport_failure(settings, publish_routes):
    publish_routes[CLOUDINARY_URL] = requests.exceptions.ConnectionError("refused")
    service, session = make_service(settings, publish_routes)

    with pytest.raises(UploadError, match="refused"):
        service.publish(request())

    assert session.urls() == [CLOUDINARY_URL]


def test_container_failure_keeps_hosted_url(settings, publish_routes):
    publish_routes[MEDIA_URL] = FakeResponse(
        status_code=400, json_data={"error": {"message": "Invalid OAuth access token."}}
    )
    service, session = make_service(settings, publish_routes)

    with pytest.raises(PublishError) as excinfo:
        service.publish(request())

    assert excinfo.value.message == "Instagram publish failed: Invalid OAuth access token."
    assert excinfo.value.image_url == HOSTED_URL
    assert session.urls() == [CLOUDINARY_URL, MEDIA_URL]


def test_container_without_id_uses_status_message(settings, publish_routes):
    publish_routes[MEDIA_URL] = FakeResponse(status_code=200, json_data={})
    service, _ = make_service(settings, publish_routes)

    with pytest.raises(
        PublishError, match=r"Failed to create Instagram media container \(200\)\."
    ):
        service.publish(request())


def test_publish_step_failure_keeps_hosted_url(settings, publish_routes):
    publish_routes[PUBLISH_URL] = FakeResponse(status_code=500, text="<html>oops</html>")
    service, _ = make_service(settings, publish_routes)

    with pytest.raises(PublishError, match=r"Failed to publish Instagram media \(500\)\.") as excinfo:
        service.publish(request())

    assert excinfo.value.image_url == HOSTED_URL


def test_missing_instagram_credential_keeps_hosted_url(settings, publish_routes):
    settings = dataclasses.replace(
        settings, instagram=dataclasses.replace(settings.instagram, ig_user_id=None)
    )
    service, session = make_service(settings, publish_routes)

    with pytest.raises(ConfigurationError, match="INSTAGRAM_IG_USER_ID") as excinfo:
        service.publish(request())

    assert excinfo.value.image_url == HOSTED_URL
    assert session.urls() == [CLOUDINARY_URL]


def test_exhausted_budget_stops_before_publishing(settings, publish_routes):
    ticks = iter([0.0, 1.0, 61.0])
    service, session = make_service(settings, publish_routes, clock=lambda: next(ticks))

    with pytest.raises(PublishError, match="timed out") as excinfo:
        service.publish(request())

    assert excinfo.value.image_url == HOSTED_URL
    assert session.urls() == [CLOUDINARY_URL]
