"""
Exceptions raised along the resize pipeline.

Each stage raises its own subclass of `ResizeServiceError` and chains the
underlying library error with ``raise ... from``. Only the publisher and the
dispatcher log; everything else propagates untouched.
"""

from typing import Any, Dict, Optional


class ResizeServiceError(Exception):
    """Base exception for all pipeline failures."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.details = details or {}

    def __str__(self):
        if self.operation:
            return f"{self.operation}: {super().__str__()}"
        return super().__str__()


class ParseError(ResizeServiceError):
    """Malformed message payload, image list, or size string."""


class FetchError(ResizeServiceError):
    """Non-2xx response or network failure while downloading the source."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, operation=kwargs.pop("operation", "fetch"), **kwargs)
        self.status_code = status_code


class FormatError(ResizeServiceError):
    """Missing or unsupported image signature."""

    def __init__(self, message: str, detected: Optional[str] = None, **kwargs):
        super().__init__(message, operation=kwargs.pop("operation", "detect_format"), **kwargs)
        self.detected = detected


class TransformError(ResizeServiceError):
    """Decode, resize or encode failure from the imaging library."""


class PublishError(ResizeServiceError):
    """Object store write or signing failure."""

    def __init__(
        self,
        message: str,
        bucket: Optional[str] = None,
        error_code: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, operation=kwargs.pop("operation", "publish"), **kwargs)
        self.bucket = bucket
        self.error_code = error_code


class BucketNotFoundError(PublishError):
    pass


class StorageAccessDeniedError(PublishError):
    pass


class ProcessingError(ResizeServiceError):
    """A batch aborted on its first failing message."""
