"""Cloudinary object store over the REST upload API, with connection reuse and retry logic."""

import hashlib
import logging
import time
from typing import Any, Dict, Optional

import requests

from core.exceptions import UpstreamError
from core.http_retry import http_retry
from core.storage.interfaces import ObjectStore, StoredObject

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.cloudinary.com/v1_1"

# Parameters Cloudinary excludes from the request signature
_UNSIGNED_PARAMS = {"file", "api_key", "resource_type", "cloud_name"}


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """SHA-1 signature over the sorted, non-empty parameters."""
    payload = "&".join(
        f"{key}={_format_value(value)}"
        for key, value in sorted(params.items())
        if key not in _UNSIGNED_PARAMS and value not in (None, "")
    )
    return hashlib.sha1(f"{payload}{api_secret}".encode("utf-8")).hexdigest()


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class CloudinaryStore(ObjectStore):
    """
    Signed uploads to Cloudinary.

    Responsibilities:
    - Own a requests.Session for connection reuse
    - Sign each request with the API secret
    - Retry timeouts and 5xx responses
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        timeout_seconds: float = 20.0,
        base_url: str = API_BASE_URL
    ):
        if not (cloud_name and api_key and api_secret):
            raise ValueError("Cloudinary requires cloud_name, api_key and api_secret")

        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()

        logger.info(f"CloudinaryStore initialized: cloud={cloud_name}, timeout={timeout_seconds}s")

    def _signed(self, params: Dict[str, Any]) -> Dict[str, str]:
        params = {k: v for k, v in params.items() if v not in (None, "")}
        params["timestamp"] = int(time.time())
        params["signature"] = sign_params(params, self.api_secret)
        params["api_key"] = self.api_key
        return {k: _format_value(v) for k, v in params.items()}

    @http_retry()
    def _post(self, resource_type: str, action: str, data: Dict[str, str], files: Optional[Dict] = None) -> Dict:
        url = f"{self.base_url}/{self.cloud_name}/{resource_type}/{action}"
        response = self.session.post(url, data=data, files=files, timeout=self.timeout_seconds)
        response.raise_for_status()
        return response.json()

    def upload(
        self,
        content: bytes,
        public_id: str,
        folder: str,
        resource_type: str = "raw",
        transformation: Optional[str] = None,
        overwrite: bool = True
    ) -> StoredObject:
        data = self._signed({
            "public_id": public_id,
            "folder": folder,
            "overwrite": overwrite,
            "invalidate": overwrite,
            "transformation": transformation,
        })

        try:
            result = self._post(resource_type, "upload", data, files={"file": (public_id, content)})
        except requests.RequestException as e:
            raise UpstreamError(f"Cloudinary upload failed: {_error_message(e)}", cause=e) from e

        try:
            url, stored_id = result["secure_url"], result["public_id"]
        except (KeyError, TypeError) as e:
            raise UpstreamError(f"Cloudinary upload returned an unexpected response: {result!r:.200}", cause=e) from e

        logger.info(f"Uploaded {stored_id} ({result.get('bytes', len(content))} bytes)")
        return StoredObject(
            url=url,
            public_id=stored_id,
            resource_type=result.get("resource_type", resource_type),
            size=int(result.get("bytes", len(content))),
        )

    def delete(self, public_id: str, resource_type: str = "raw") -> None:
        data = self._signed({"public_id": public_id, "invalidate": True})
        try:
            result = self._post(resource_type, "destroy", data)
        except requests.RequestException as e:
            raise UpstreamError(f"Cloudinary delete failed: {_error_message(e)}", cause=e) from e
        logger.info(f"Deleted {public_id}: {result.get('result')}")


def _error_message(exc: requests.RequestException) -> str:
    response = getattr(exc, "response", None)
    if response is not None:
        try:
            return response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            return f"HTTP {response.status_code}"
    return str(exc)
