"""
High-level resize pipeline.

`process_image_bytes` is the bytes-in/bytes-out core shared by the queue
worker, the HTTP API and the local test script. `ResizePipeline` adds the
I/O ends around it:
url -> fetch -> validate format -> transform -> publish -> signed link.

A shared `requests.Session` is only used when one thread drives the pipeline
(the queue handler). `requests` does not guarantee a Session is thread-safe,
so the threadpooled HTTP API builds its pipeline with ``shared_session=False``.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import requests

from . import config
from .fetcher import fetch_image
from .formats import validate_format
from .publisher import AccessLink, Publisher, build_s3_client
from .transform import Dimensions, TransformOptions, parse_dimensions, transform

logger = logging.getLogger(__name__)

Fetch = Callable[[str], bytes]


def process_image_bytes(
    image_bytes: bytes,
    dims: Dimensions,
    options: Optional[TransformOptions] = None,
) -> bytes:
    """
    Validate the source format and produce the resized JPEG.

    Raises:
        FormatError: the bytes are not a JPEG or PNG.
        TransformError: the codec failed.
    """
    detected = validate_format(image_bytes)
    logger.debug("Detected source format %s (%s)", detected.extension, detected.mime_type)
    return transform(image_bytes, dims, options)


class ResizePipeline:
    """One message's worth of work, with its collaborators injected."""

    def __init__(
        self,
        fetch: Fetch,
        publisher: Publisher,
        options: Optional[TransformOptions] = None,
    ) -> None:
        self._fetch = fetch
        self._publisher = publisher
        self._options = options or TransformOptions()

    @classmethod
    def from_settings(
        cls, settings: Optional[config.Settings] = None, shared_session: bool = True
    ) -> "ResizePipeline":
        """Build the process-wide pipeline: one S3 client and, optionally, one HTTP session."""
        settings = settings or config.get_settings()
        session = requests.Session() if shared_session else None
        timeout = settings.request_timeout_seconds

        def fetch(url: str) -> bytes:
            return fetch_image(url, session=session, timeout=timeout)

        publisher = Publisher.from_settings(build_s3_client(settings), settings)
        return cls(fetch, publisher, TransformOptions.from_settings(settings))

    def run(self, image_url: str, identifier: str, size: str) -> AccessLink:
        dims = parse_dimensions(size)
        image_bytes = self._fetch(image_url)
        resized = process_image_bytes(image_bytes, dims, self._options)
        return self._publisher.publish(identifier, resized)
