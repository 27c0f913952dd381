"""Fetch a IIIF resource and classify it by its declared type."""

from __future__ import annotations

import asyncio
from typing import Any

from .logger import get_logger
from .models import FetchedResource
from .utils import get_json

logger = get_logger(__name__)


def classify_resource(data: Any) -> str | None:
    """Return the IIIF type declared by `data`, without any JSON-LD prefix.

    IIIF v3 uses `type` ("Manifest"), v2 uses `@type` ("sc:Manifest").
    Empty or non-object payloads have no type.
    """
    if not isinstance(data, dict) or not data:
        return None
    declared = data.get("type") or data.get("@type")
    if isinstance(declared, list):
        declared = declared[0] if declared else None
    if not declared:
        return None
    return str(declared).rsplit(":", 1)[-1]


async def fetch_resource(url: str) -> FetchedResource:
    """Fetch `url` off the event loop and classify the decoded payload.

    Network and decode errors propagate unchanged.
    """
    data = await asyncio.to_thread(get_json, url)
    resource_type = classify_resource(data)
    logger.debug("Fetched %s (type=%s)", url, resource_type)
    return FetchedResource(type=resource_type, data=data)
