"""Value objects shared by the search aggregator, the loader and the store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ANNOTATION_PAGE = "AnnotationPage"
MANIFEST = "Manifest"
COLLECTION = "Collection"


@dataclass(frozen=True)
class SearchSnippet:
    """One text-quote match returned by a IIIF Content Search service."""

    id: str
    exact: str
    canvas_target: str | None
    annotation_id: str | None = None
    motivation: str | None = None
    prefix: str | None = None
    suffix: str | None = None
    part_of: str | None = None
    language: str | None = None


@dataclass(frozen=True)
class FetchedResource:
    """A decoded JSON payload classified by its declared IIIF type."""

    type: str | None
    data: Any


@dataclass
class ParsedManifest:
    id: str | None
    name: str
    canvases: list[dict[str, Any]] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    search_service: str | None = None
    autocomplete_service: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class ParsedCollection:
    id: str | None
    name: str
    manifest_urls: list[str] = field(default_factory=list)
    search_service: str | None = None
    autocomplete_service: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class ParsedResource:
    """Result of loading a content URL: the first manifest plus collection context."""

    first_manifest: ParsedManifest
    manifest_urls: list[str]
    total_manifests: int
    collection: ParsedCollection | None = None
