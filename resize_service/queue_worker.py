"""
Queue batch dispatcher.

Records are processed one after another in delivery order. The first failure
stops the batch and is reported as a single `ProcessingError`; redelivery is
left to the queue.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Sequence, Union

from .errors import ProcessingError
from .messages import InboundMessage, parse_message, record_body
from .pipeline import ResizePipeline
from .publisher import AccessLink

logger = logging.getLogger(__name__)

Record = Union[str, bytes, Mapping[str, Any]]


class Dispatcher:
    def __init__(self, pipeline: ResizePipeline) -> None:
        self._pipeline = pipeline

    def process_message(self, message: InboundMessage) -> AccessLink:
        """Resize the first image of `message` and publish it under ``userSearch``."""
        image_url = message.first_image_url()
        logger.info(
            "Processing image url=%s id=%s size=%s", image_url, message.userSearch, message.imageSize
        )
        return self._pipeline.run(image_url, message.userSearch, message.imageSize)

    def process_record(self, record: Record) -> AccessLink:
        message = parse_message(record_body(record))
        logger.info("Message received: %s", message.model_dump())
        return self.process_message(message)

    def handle(self, batch: Sequence[Record]) -> List[AccessLink]:
        """
        Process every record in `batch` sequentially.

        Raises:
            ProcessingError: on the first failing record; later records are
                not attempted.
        """
        links: List[AccessLink] = []
        try:
            for record in batch:
                links.append(self.process_record(record))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Error processing queue batch after %d record(s): %s", len(links), exc)
            raise ProcessingError("Failed to process images", operation="handle_batch") from exc

        logger.info("Image processing complete for all %d record(s).", len(links))
        return links

