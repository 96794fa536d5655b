"""HTTP client for reading the site's statistics endpoint."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .config import SourceSettings

logger = logging.getLogger(__name__)


class HTTPClient:
    """HTTP client wrapping a requests session.

    A single GET per run, so there is no retry or rate limiting here:
    failures surface to the caller as ``requests.RequestException``.
    """

    def __init__(self, settings: SourceSettings | None = None) -> None:
        self.settings = settings or SourceSettings()
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """Send a GET request.

        Args:
            url: Target URL.
            params: Query parameters.
            headers: Extra headers (merged with session defaults).

        Returns:
            requests.Response object.

        Raises:
            requests.RequestException: On connection failure, timeout or
                a 4xx/5xx status.
        """
        logger.debug("GET %s", url)
        resp = self._session.get(
            url,
            params=params,
            headers=headers,
            timeout=self.settings.request_timeout,
            verify=self.settings.verify_tls,
        )
        resp.raise_for_status()
        return resp

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``url`` and decode the JSON body."""
        return self.get(url, params=params).json()

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> HTTPClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
