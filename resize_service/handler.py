"""
Queue runtime entry point.

`lambda_handler` receives a batch of records whose bodies are inbound
resize messages. The dispatcher (and with it the HTTP session and S3 client)
is built on first use and reused for the life of the process.
"""

from __future__ import annotations

from functools import lru_cache
import json
import logging
from typing import Any, Mapping

from . import config
from .queue_worker import Dispatcher
from .pipeline import ResizePipeline

settings = config.get_settings()
config.configure_logging(settings)
logger = logging.getLogger(__name__)


@lru_cache()
def get_dispatcher() -> Dispatcher:
    return Dispatcher(ResizePipeline.from_settings(settings))


def lambda_handler(event: Mapping[str, Any], context: Any = None) -> None:
    logger.info("Triggered by queue event: %s", json.dumps(event, default=str))
    get_dispatcher().handle(event.get("Records", []))
