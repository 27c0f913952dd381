"""Load a IIIF content URL into a manifest plus its collection context."""

from __future__ import annotations

from .errors import ResourceError
from .logger import get_logger
from .models import COLLECTION, MANIFEST, ParsedManifest, ParsedResource
from .parsers import CollectionParser, ManifestParser
from .resource import fetch_resource

logger = get_logger(__name__)


async def load_manifest(url: str) -> ParsedManifest:
    """Fetch and parse a single manifest."""
    resource = await fetch_resource(url)
    if resource.type != MANIFEST:
        raise ResourceError.invalid_response(url)
    return ManifestParser.parse(resource.data, fallback_name=url)


async def parse_resource(url: str) -> ParsedResource:
    """Fetch `url` and return its first manifest with the surrounding collection, if any.

    A manifest URL yields a one-element manifest list and no collection. A
    collection URL yields every member manifest URL and fetches the first one.
    """
    resource = await fetch_resource(url)

    if resource.type == MANIFEST:
        manifest = ManifestParser.parse(resource.data, fallback_name=url)
        return ParsedResource(first_manifest=manifest, manifest_urls=[url], total_manifests=1)

    if resource.type == COLLECTION:
        collection = CollectionParser.parse(resource.data, fallback_name=url)
        if not collection.manifest_urls:
            logger.warning("Collection %s lists no manifests", url)
            raise ResourceError(f"Collection {url} does not contain any manifest", url=url)

        logger.info("Loaded collection '%s' with %d manifest(s)", collection.name, len(collection.manifest_urls))
        first = await load_manifest(collection.manifest_urls[0])
        return ParsedResource(
            first_manifest=first,
            manifest_urls=list(collection.manifest_urls),
            total_manifests=len(collection.manifest_urls),
            collection=collection,
        )

    raise ResourceError.invalid_response(url)
