"""
FastAPI layer exposing the resize pipeline.

Endpoints:
 - GET /health
 - POST /resize   (one inbound message, processed synchronously)
 - POST /batch    (queue-shaped ``{"Records": [...]}`` push delivery)
"""

from __future__ import annotations

from functools import lru_cache
import logging
from typing import Any, List

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from . import config
from .errors import (
    FetchError,
    FormatError,
    ParseError,
    ProcessingError,
    PublishError,
    TransformError,
)
from .messages import InboundMessage
from .pipeline import ResizePipeline
from .queue_worker import Dispatcher

settings = config.get_settings()
config.configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title="Image Resize Service", version="0.1.0")


class ResizeResponse(BaseModel):
    imageKey: str
    linkKey: str
    url: str
    expiresIn: int


class BatchRequest(BaseModel):
    Records: List[Any]


class BatchResponse(BaseModel):
    processed: int


@lru_cache()
def get_dispatcher() -> Dispatcher:
    return Dispatcher(ResizePipeline.from_settings(settings, shared_session=False))


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/resize", response_model=ResizeResponse)
def resize(body: InboundMessage, dispatcher: Dispatcher = Depends(get_dispatcher)):
    try:
        link = dispatcher.process_message(body)
    except (ParseError, FormatError, FetchError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TransformError as exc:
        logger.exception("Resize failed for %s: %s", body.userSearch, exc)
        raise HTTPException(status_code=422, detail="Image could not be processed") from exc
    except PublishError as exc:
        raise HTTPException(status_code=502, detail="Upload to storage failed") from exc

    return ResizeResponse(
        imageKey=link.image_key,
        linkKey=link.link_key,
        url=link.url,
        expiresIn=link.expires_in,
    )


@app.post("/batch", response_model=BatchResponse)
def batch(body: BatchRequest, dispatcher: Dispatcher = Depends(get_dispatcher)):
    try:
        links = dispatcher.handle(body.Records)
    except ProcessingError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return BatchResponse(processed=len(links))
