import asyncio

import pytest
import requests

from iiif_viewer_core import utils
from iiif_viewer_core.resource import classify_resource, fetch_resource


class _FakeResponse:
    def __init__(self, payload=None, status_code=200, content=b"{}"):
        self._payload = payload
        self.status_code = status_code
        self.content = content
        self.text = content.decode("utf-8", "replace")

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"type": "AnnotationPage"}, "AnnotationPage"),
        ({"@type": "sc:Manifest"}, "Manifest"),
        ({"@type": ["sc:Collection"]}, "Collection"),
        ({"id": "x"}, None),
        ({}, None),
        (None, None),
        ([1, 2], None),
    ],
)
def test_classify_resource(payload, expected):
    assert classify_resource(payload) == expected


def test_fetch_resource_classifies_payload(monkeypatch):
    seen = {}

    def _get(url, headers=None, timeout=None):
        seen.update(url=url, timeout=timeout)
        return _FakeResponse({"type": "AnnotationPage", "items": []})

    monkeypatch.setattr(utils.requests, "get", _get)

    resource = asyncio.run(fetch_resource("https://example.org/search?q=x"))

    assert resource.type == "AnnotationPage"
    assert resource.data == {"type": "AnnotationPage", "items": []}
    assert seen == {"url": "https://example.org/search?q=x", "timeout": 15}


def test_fetch_resource_uses_configured_timeout(monkeypatch, _isolated_settings):
    _isolated_settings.set_setting("network.request_timeout", 3)
    seen = {}

    def _get(url, headers=None, timeout=None):
        seen["timeout"] = timeout
        return _FakeResponse({"type": "Manifest"})

    monkeypatch.setattr(utils.requests, "get", _get)

    asyncio.run(fetch_resource("https://example.org/manifest"))

    assert seen["timeout"] == 3


def test_http_errors_propagate(monkeypatch):
    monkeypatch.setattr(utils.requests, "get", lambda *a, **kw: _FakeResponse(status_code=500))

    with pytest.raises(requests.HTTPError):
        asyncio.run(fetch_resource("https://example.org/broken"))


def test_decode_errors_propagate(monkeypatch):
    monkeypatch.setattr(
        utils.requests, "get", lambda *a, **kw: _FakeResponse(ValueError("no json"), content=b"<html>")
    )

    with pytest.raises(ValueError):
        asyncio.run(fetch_resource("https://example.org/html"))


def test_empty_body_has_no_type(monkeypatch):
    monkeypatch.setattr(utils.requests, "get", lambda *a, **kw: _FakeResponse(content=b""))

    resource = asyncio.run(fetch_resource("https://example.org/empty"))

    assert resource.type is None
    assert resource.data is None
