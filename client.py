"""
HTTP client for the listing API.

The client is an explicit instance wrapping a requests.Session, so callers
decide base URL, headers and timeouts instead of relying on process-wide
defaults.
"""

import json
import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import requests

from config import API_BASE_URL, API_TIMEOUT_SECONDS
from errors import ApiError

logger = logging.getLogger(__name__)

PhotoInput = Union[str, Path, Tuple[str, bytes, str]]


def _photo_part(photo: PhotoInput) -> Tuple[str, Tuple[str, bytes, str]]:
    """("photos", (filename, content, mime)) for a path or a ready tuple."""
    if isinstance(photo, tuple):
        return "photos", photo
    path = Path(photo)
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return "photos", (path.name, path.read_bytes(), mime)


def _error_messages(response: requests.Response) -> List[str]:
    try:
        payload = response.json()
    except ValueError:
        return [f"HTTP {response.status_code}"]
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, list):
        return [str(item) for item in error]
    if error:
        return [str(error)]
    return [f"HTTP {response.status_code}"]


class PropertyClient:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: str = API_BASE_URL,
        timeout: float = API_TIMEOUT_SECONDS,
    ):
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning("Listing API unreachable", extra={"url": url, "error": str(e)})
            raise ApiError([f"Could not reach listing API: {e}"])

        if not response.ok:
            messages = _error_messages(response)
            logger.info("Listing API error", extra={"url": url, "status": response.status_code})
            raise ApiError(messages, status_code=response.status_code)
        return response.json()

    def _send(self, method: str, path: str, payload: Dict[str, Any],
              photos: Optional[List[PhotoInput]]) -> Dict[str, Any]:
        if photos:
            files = [_photo_part(photo) for photo in photos]
            data = {"data": json.dumps(payload)}
            result = self._request(method, path, data=data, files=files)
        else:
            result = self._request(method, path, json=payload)
        return result["data"]

    def list_properties(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/properties")["data"]

    def get_property(self, property_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/properties/{property_id}")["data"]

    def create_property(self, payload: Dict[str, Any],
                        photos: Optional[List[PhotoInput]] = None) -> Dict[str, Any]:
        """JSON when there are no photos, multipart (data + photos) otherwise."""
        return self._send("POST", "/api/properties", payload, photos)

    def update_property(self, property_id: str, payload: Dict[str, Any],
                        photos: Optional[List[PhotoInput]] = None) -> Dict[str, Any]:
        return self._send("PUT", f"/api/properties/{property_id}", payload, photos)

    def delete_property(self, property_id: str) -> None:
        self._request("DELETE", f"/api/properties/{property_id}")
