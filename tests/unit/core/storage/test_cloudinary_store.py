"""Tests for the Cloudinary REST adapter."""
import hashlib
from unittest.mock import MagicMock, patch

import pytest
import requests

from core.exceptions import UpstreamError
from core.storage.cloudinary_store import CloudinaryStore, sign_params


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status_code}", response=response)
    return response


@pytest.fixture
def store():
    store = CloudinaryStore(cloud_name="demo", api_key="key", api_secret="secret", timeout_seconds=5)
    store.session = MagicMock()
    return store


def test_sign_params_skips_empty_and_unsigned_values():
    params = {"public_id": "cv", "timestamp": 100, "folder": "", "api_key": "key", "overwrite": True}

    expected = hashlib.sha1(b"overwrite=true&public_id=cv&timestamp=100secret").hexdigest()
    assert sign_params(params, "secret") == expected


def test_missing_credentials_are_rejected():
    with pytest.raises(ValueError):
        CloudinaryStore(cloud_name="demo", api_key="", api_secret="secret")


def test_upload_posts_signed_request(store):
    store.session.post.return_value = _response(payload={
        "secure_url": "https://res.cloudinary.com/demo/raw/upload/recruitment/cv.pdf",
        "public_id": "recruitment/cv.pdf",
        "resource_type": "raw",
        "bytes": 4,
    })

    stored = store.upload(b"%PDF", public_id="cv.pdf", folder="recruitment")

    url = store.session.post.call_args[0][0]
    data = store.session.post.call_args[1]["data"]
    assert url == "https://api.cloudinary.com/v1_1/demo/raw/upload"
    assert data["api_key"] == "key"
    assert data["overwrite"] == "true"
    assert "signature" in data
    assert store.session.post.call_args[1]["timeout"] == 5
    assert stored.public_id == "recruitment/cv.pdf"
    assert stored.size == 4


def test_client_error_is_not_retried(store):
    store.session.post.return_value = _response(400, {"error": {"message": "Invalid image file"}})

    with pytest.raises(UpstreamError, match="Invalid image file"):
        store.upload(b"x", public_id="logo", folder="images", resource_type="image")

    assert store.session.post.call_count == 1


@patch("time.sleep")
def test_server_error_is_retried(mock_sleep, store):
    ok = _response(payload={"secure_url": "https://x", "public_id": "cv.pdf"})
    store.session.post.side_effect = [_response(503), ok]

    stored = store.upload(b"%PDF", public_id="cv.pdf", folder="")

    assert stored.url == "https://x"
    assert store.session.post.call_count == 2


def test_success_without_url_is_upstream_error(store):
    store.session.post.return_value = _response(payload={"status": "pending"})

    with pytest.raises(UpstreamError, match="unexpected response"):
        store.upload(b"%PDF", public_id="cv.pdf", folder="recruitment")

    assert store.session.post.call_count == 1
