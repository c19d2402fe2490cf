"""Google Drive v3 REST client authenticated with an API key."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode

if TYPE_CHECKING:
    from drive_gallery.config import AppConfig

logger = logging.getLogger(__name__)

DRIVE_BASE_URL = "https://www.googleapis.com/drive/v3"
DEFAULT_TIMEOUT_SECONDS = 60.0
_REDACTED = "REDACTED"
MAX_ERROR_BODY_CHARS = 2000


class DriveApiError(Exception):
    """Raised when the Drive API returns a non-2xx response or cannot be reached.

    ``status_code`` is 0 for transport failures where no response arrived.
    """

    def __init__(self, status_code: int, url: str, body: str, context: str = "") -> None:
        prefix = f"{context}: " if context else ""
        super().__init__(f"{prefix}Drive API error {status_code} for {url}: {body}")
        self.status_code = status_code
        self.url = url
        self.body = body
        self.context = context


class DriveClient:
    """Thin client for Drive v3 GET endpoints."""

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        """Initialise the client.

        Args:
            api_key: Google API key with Drive API access.
            timeout: Socket timeout in seconds for each request.
        """
        self._api_key = api_key
        self._timeout = timeout

    def build_url(self, path: str, params: dict[str, str] | None = None) -> str:
        """Return the full request URL, including the API key."""
        query = dict(params or {})
        query["key"] = self._api_key
        return f"{DRIVE_BASE_URL}{path}?{urlencode(query)}"

    def redact(self, url: str) -> str:
        """Strip the API key from a URL before it is logged or raised."""
        return url.replace(f"key={self._api_key}", f"key={_REDACTED}")

    def get(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Perform a GET request against the Drive API.

        Args:
            path: URL path relative to DRIVE_BASE_URL (must start with '/').
            params: Query parameters, without the API key.

        Returns:
            Parsed JSON response body as a dict.

        Raises:
            DriveApiError: If the API returns a non-2xx status code, the
                request fails at the transport level, or the body is not a
                JSON object.
        """
        url = self.build_url(path, params)
        safe_url = self.redact(url)
        req = urllib_request.Request(url, headers={"Accept": "application/json"}, method="GET")
        logger.debug("[get] requesting; url:%s", safe_url)
        try:
            with urllib_request.urlopen(req, timeout=self._timeout) as resp:
                status = resp.status
                body = resp.read()
        except HTTPError as exc:
            raw = exc.read().decode("utf-8", errors="replace")
            logger.error("[get] Drive API request failed; status:%d;url:%s", exc.code, safe_url)
            raise DriveApiError(exc.code, safe_url, raw) from exc
        except URLError as exc:
            logger.error("[get] Drive API unreachable; url:%s;reason:%s", safe_url, exc.reason)
            raise DriveApiError(0, safe_url, str(exc.reason)) from exc
        except OSError as exc:
            # Timeouts and resets while reading the body are not URLErrors.
            logger.error("[get] Drive API connection failed; url:%s;error:%r", safe_url, exc)
            raise DriveApiError(0, safe_url, repr(exc)) from exc

        try:
            data = json.loads(body)
        except ValueError as exc:
            text = body.decode("utf-8", errors="replace")[:MAX_ERROR_BODY_CHARS]
            logger.error(
                "[get] Drive API returned non-JSON body; status:%s;url:%s", status, safe_url
            )
            raise DriveApiError(status, safe_url, text) from exc
        if not isinstance(data, dict):
            detail = f"expected a JSON object, got {type(data).__name__}"
            raise DriveApiError(status, safe_url, detail)
        return data


def drive_client_from_config(config: AppConfig) -> DriveClient:
    """Construct a DriveClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DriveClient instance.
    """
    return DriveClient(api_key=config.api_key, timeout=config.timeout_seconds)
