"""
Object store writes for resized images.

A publish is two puts: the JPEG under ``<id>.jpg`` and a presigned GET URL
for it under ``<id>_url.txt``. The puts are not transactional; if the second
one fails the image stays in the bucket without a link object.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from . import config
from .errors import BucketNotFoundError, PublishError, StorageAccessDeniedError

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPE = "image/jpeg"
LINK_CONTENT_TYPE = "text/plain"


@dataclass(frozen=True)
class AccessLink:
    image_key: str
    link_key: str
    url: str
    expires_in: int


def image_key_for(identifier: str) -> str:
    return f"{identifier}.jpg"


def link_key_for(identifier: str) -> str:
    return f"{identifier}_url.txt"


def build_s3_client(settings: Optional[config.Settings] = None):
    """
    Construct an S3 client from settings.

    Explicit keys, region and endpoint are optional; anything left unset falls
    back to boto3's default credential and region chain.
    """
    settings = settings or config.get_settings()
    session = boto3.session.Session()
    return session.client(
        service_name="s3",
        region_name=settings.aws_region,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        endpoint_url=settings.s3_endpoint_url,
        config=BotoConfig(signature_version="s3v4"),
    )


class Publisher:
    """Writes resized images and their signed links to one bucket."""

    def __init__(self, client: Any, bucket: Optional[str], expires_in: int = 60) -> None:
        self._client = client
        self.bucket = bucket
        self.expires_in = expires_in

    @classmethod
    def from_settings(cls, client: Any, settings: Optional[config.Settings] = None) -> "Publisher":
        settings = settings or config.get_settings()
        return cls(client, settings.bucket_name, expires_in=settings.signed_url_expires_seconds)

    def publish(self, identifier: str, buffer: bytes) -> AccessLink:
        """
        Upload `buffer` as ``<identifier>.jpg`` and store a signed link to it.

        Raises:
            BucketNotFoundError: the bucket does not exist.
            StorageAccessDeniedError: the credentials may not write to it.
            PublishError: any other store or signing failure.
        """
        image_key = image_key_for(identifier)
        link_key = link_key_for(identifier)
        if not self.bucket:
            logger.error("Error uploading image %s: no destination bucket configured (BUCKET_NAME).", image_key)
            raise PublishError(f"No destination bucket configured for {image_key}", bucket=self.bucket)
        try:
            result = self._client.put_object(
                Bucket=self.bucket,
                Key=image_key,
                Body=buffer,
                ContentType=IMAGE_CONTENT_TYPE,
            )
            logger.info("Image uploaded to s3://%s/%s etag=%s", self.bucket, image_key, result.get("ETag"))

            url = self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": image_key},
                ExpiresIn=self.expires_in,
            )
            self._client.put_object(
                Bucket=self.bucket,
                Key=link_key,
                Body=url.encode("utf-8"),
                ContentType=LINK_CONTENT_TYPE,
            )
            logger.info("Pre-signed URL stored in s3://%s/%s", self.bucket, link_key)
        except ClientError as exc:
            raise self._translate_client_error(exc, image_key) from exc
        except BotoCoreError as exc:
            logger.error("Error uploading image %s to bucket %r: %s", image_key, self.bucket, exc)
            raise PublishError(
                f"Store error uploading {image_key}: {exc}", bucket=self.bucket
            ) from exc

        return AccessLink(image_key=image_key, link_key=link_key, url=url, expires_in=self.expires_in)

    def _translate_client_error(self, exc: ClientError, key: str) -> PublishError:
        error = exc.response.get("Error", {})
        code = error.get("Code")
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        logger.error("Error uploading image %s to S3: %s", key, exc)

        if code == "NoSuchBucket":
            logger.error('Bucket "%s" not found.', self.bucket)
            return BucketNotFoundError(
                f"Bucket {self.bucket!r} not found", bucket=self.bucket, error_code=code
            )
        if code == "AccessDenied" or status == 403:
            logger.error(
                'Access denied to bucket "%s". Ensure correct permissions are set.', self.bucket
            )
            return StorageAccessDeniedError(
                f"Access denied to bucket {self.bucket!r}", bucket=self.bucket, error_code=code
            )
        return PublishError(
            f"Store error uploading {key}: {error.get('Message') or code}",
            bucket=self.bucket,
            error_code=code,
        )
