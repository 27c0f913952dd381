import asyncio

import pytest

from iiif_viewer_core import loader
from iiif_viewer_core.errors import ResourceError
from iiif_viewer_core.resource import classify_resource
from iiif_viewer_core.models import FetchedResource


@pytest.fixture
def serve(monkeypatch):
    payloads = {}
    calls = []

    async def _fetch(url):
        calls.append(url)
        data = payloads[url]
        return FetchedResource(type=classify_resource(data), data=data)

    monkeypatch.setattr(loader, "fetch_resource", _fetch)
    return payloads, calls


def test_single_manifest(serve):
    payloads, calls = serve
    url = "https://example.org/manifest.json"
    payloads[url] = {"id": url, "type": "Manifest", "label": {"en": ["Single"]}, "items": []}

    result = asyncio.run(loader.parse_resource(url))

    assert calls == [url]
    assert result.first_manifest.name == "Single"
    assert result.manifest_urls == [url]
    assert result.total_manifests == 1
    assert result.collection is None


def test_collection_loads_first_manifest(serve):
    payloads, calls = serve
    coll_url = "https://example.org/collection.json"
    payloads[coll_url] = {
        "@id": coll_url,
        "@type": "sc:Collection",
        "label": "Archive",
        "manifests": [{"@id": "https://example.org/m1"}, {"@id": "https://example.org/m2"}],
    }
    payloads["https://example.org/m1"] = {"@id": "https://example.org/m1", "@type": "sc:Manifest", "label": "First"}

    result = asyncio.run(loader.parse_resource(coll_url))

    assert calls == [coll_url, "https://example.org/m1"]
    assert result.first_manifest.name == "First"
    assert result.manifest_urls == ["https://example.org/m1", "https://example.org/m2"]
    assert result.total_manifests == 2
    assert result.collection.name == "Archive"


def test_empty_collection_raises(serve):
    payloads, _ = serve
    url = "https://example.org/empty-collection"
    payloads[url] = {"type": "Collection", "items": []}

    with pytest.raises(ResourceError) as excinfo:
        asyncio.run(loader.parse_resource(url))
    assert excinfo.value.url == url


def test_unexpected_type_raises(serve):
    payloads, _ = serve
    url = "https://example.org/page"
    payloads[url] = {"type": "AnnotationPage"}

    with pytest.raises(ResourceError, match="Invalid or empty response"):
        asyncio.run(loader.parse_resource(url))
