"""Download source images over HTTP(S)."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .errors import FetchError

logger = logging.getLogger(__name__)


def fetch_image(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> bytes:
    """
    GET `url` and return the full response body.

    No timeout is applied unless one is passed in; the hosting runtime's
    invocation deadline is the effective bound.

    Raises:
        FetchError: on a non-2xx status (``status_code`` set) or on a
            network-level failure (chained to the underlying exception).
    """
    http = session or requests
    try:
        resp = http.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise FetchError(f"Error fetching image from URL {url}: {exc}") from exc

    if not 200 <= resp.status_code < 300:
        raise FetchError(
            f"Failed to fetch image from {url}. Status code: {resp.status_code}",
            status_code=resp.status_code,
            details={"url": url},
        )

    logger.debug("Fetched %d bytes from %s", len(resp.content), url)
    return resp.content
