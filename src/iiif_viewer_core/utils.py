"""HTTP and JSON helpers shared by the fetch layer."""

from __future__ import annotations

from typing import Any

import requests
from requests import RequestException

from .config_manager import get_config_manager
from .logger import get_logger, summarize_for_debug

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "application/ld+json,application/json;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
}


def _log_request_exception(url: str, exc: RequestException) -> None:
    logger.error("Failed to fetch JSON from %s: %s", url, exc)
    response = getattr(exc, "response", None)
    if response is not None:
        status_code = getattr(response, "status_code", None)
        if status_code is not None:
            logger.error("HTTP Status: %s", status_code)
        response_text = getattr(response, "text", None)
        if response_text:
            logger.debug("Response preview: %s", summarize_for_debug(response_text))


def _log_json_error(url: str, resp: requests.Response, exc: ValueError) -> None:
    logger.error("JSON parsing error from %s: %s", url, exc)
    try:
        logger.debug("Response preview: %s", summarize_for_debug(resp.text))
    except Exception:  # pylint: disable=broad-exception-caught
        logger.debug("Failed to read response preview", exc_info=True)


def get_json(url: str, headers: dict | None = None, timeout: int | None = None) -> Any:
    """Fetch and decode JSON from a URL.

    A single attempt is made: HTTP and decode errors are logged and re-raised
    so the caller sees the failure immediately.
    """
    if headers is None:
        headers = DEFAULT_HEADERS
    if timeout is None:
        timeout = get_config_manager().get_request_timeout()

    logger.debug("Fetching JSON from %s", url)

    try:
        resp = requests.get(url, headers=headers, timeout=timeout)
        resp.raise_for_status()
    except RequestException as e:
        _log_request_exception(url, e)
        raise

    if not resp.content:
        return None

    try:
        return resp.json()
    except ValueError as e:
        _log_json_error(url, resp, e)
        raise
