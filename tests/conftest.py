"""
Pytest configuration and shared fixtures for the resize service tests.
"""

from functools import partial
from io import BytesIO
from typing import Dict, Optional, Tuple
from unittest.mock import MagicMock

import boto3
from botocore.client import Config as BotoConfig
import pytest
import requests
from PIL import Image

from resize_service.config import Settings
from resize_service.fetcher import fetch_image
from resize_service.pipeline import ResizePipeline
from resize_service.publisher import Publisher
from resize_service.queue_worker import Dispatcher

TEST_BUCKET = "test-bucket"


def make_image(fmt: str = "PNG", size: Tuple[int, int] = (64, 48), mode: str = "RGB", color=(200, 40, 40)) -> bytes:
    """Encode a solid-color test image."""
    if mode in ("RGBA", "LA") and isinstance(color, tuple) and len(color) == 3:
        color = color + (128,) if mode == "RGBA" else (color[0], 128)
    if mode == "L" and isinstance(color, tuple):
        color = color[0]
    image = Image.new(mode, size, color)
    buf = BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


# Decodable by Pillow but outside the accepted formats.
WEBP_BYTES = make_image("WEBP", (16, 16))


def fake_response(status_code: int = 200, content: bytes = b"") -> MagicMock:
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    # Same semantics as requests: anything below 400 is "ok".
    resp.ok = status_code < 400
    resp.content = content
    return resp


def fake_session(routes: Dict[str, MagicMock]) -> MagicMock:
    """A `requests.Session` stand-in answering from a url -> response table."""
    session = MagicMock(spec=requests.Session)

    def get(url, timeout=None):
        if url not in routes:
            raise requests.ConnectionError(f"Name or service not known: {url}")
        return routes[url]

    session.get.side_effect = get
    return session


class RecordingS3Client:
    """Keeps uploaded objects in memory; presigning is done by a real boto3 client."""

    def __init__(self, signer) -> None:
        self._signer = signer
        self.objects: Dict[str, Dict] = {}
        self.put_calls = []

    def put_object(self, Bucket: str, Key: str, Body, ContentType: Optional[str] = None):
        self.put_calls.append(Key)
        self.objects[Key] = {"bucket": Bucket, "body": Body, "content_type": ContentType}
        return {"ETag": '"0123456789abcdef"'}

    def generate_presigned_url(self, ClientMethod, Params=None, ExpiresIn=3600):
        return self._signer.generate_presigned_url(ClientMethod, Params=Params, ExpiresIn=ExpiresIn)


@pytest.fixture
def settings():
    return Settings(bucket_name=TEST_BUCKET)


@pytest.fixture
def s3_client():
    """Real boto3 client with dummy credentials; never reaches the network in tests."""
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        config=BotoConfig(signature_version="s3v4"),
    )


@pytest.fixture
def recording_s3(s3_client):
    return RecordingS3Client(s3_client)


@pytest.fixture
def png_bytes():
    return make_image("PNG", (320, 240))


@pytest.fixture
def jpeg_bytes():
    return make_image("JPEG", (320, 240))


@pytest.fixture
def make_dispatcher(recording_s3):
    """Build a dispatcher over a fake HTTP route table and the recording S3 client."""

    def _build(routes: Dict[str, MagicMock]) -> Dispatcher:
        session = fake_session(routes)
        pipeline = ResizePipeline(
            fetch=partial(fetch_image, session=session),
            publisher=Publisher(recording_s3, TEST_BUCKET),
        )
        return Dispatcher(pipeline)

    return _build

