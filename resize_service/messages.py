"""
Inbound queue message models.

A message body is JSON, and its ``imageUrl`` field is itself a JSON-encoded
string holding a list of ``{"image": <url>}`` objects. Both layers are
decoded and validated explicitly; anything malformed becomes a `ParseError`.
"""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Union

from pydantic import BaseModel, ValidationError

from .errors import ParseError


class ImageReference(BaseModel):
    image: str


class InboundMessage(BaseModel):
    imageUrl: str
    userSearch: str
    imageSize: str

    def image_references(self) -> List[ImageReference]:
        """Decode the nested ``imageUrl`` list; it must be a non-empty array."""
        try:
            raw = json.loads(self.imageUrl)
        except ValueError as exc:
            raise ParseError(f"imageUrl is not valid JSON: {exc}", operation="parse_image_list") from exc
        if not isinstance(raw, list):
            raise ParseError("imageUrl must encode a JSON array", operation="parse_image_list")
        if not raw:
            raise ParseError("imageUrl contains no images", operation="parse_image_list")
        try:
            return [ImageReference.model_validate(item) for item in raw]
        except ValidationError as exc:
            raise ParseError(f"Invalid image reference: {exc}", operation="parse_image_list") from exc

    def first_image_url(self) -> str:
        return self.image_references()[0].image


def parse_message(body: Union[str, bytes, Mapping[str, Any]]) -> InboundMessage:
    """Build an `InboundMessage` from a raw JSON body (or an already-decoded mapping)."""
    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except ValueError as exc:
            raise ParseError(f"Message body is not valid JSON: {exc}", operation="parse_message") from exc
    if not isinstance(body, Mapping):
        raise ParseError("Message body must be a JSON object", operation="parse_message")
    try:
        return InboundMessage.model_validate(body)
    except ValidationError as exc:
        raise ParseError(f"Invalid message: {exc}", operation="parse_message") from exc


def record_body(record: Union[str, bytes, Mapping[str, Any]]) -> Union[str, bytes, Mapping[str, Any]]:
    """Return the message body of a queue record (SQS-style ``{"body": ...}`` or bare)."""
    if isinstance(record, Mapping) and "body" in record:
        return record["body"]
    return record
