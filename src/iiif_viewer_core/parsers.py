"""Parsers for already-fetched IIIF JSON (annotation pages, manifests, collections).

Parsers operate on data only; network IO and logging belong to the
surrounding service layer.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Final

from .models import ParsedCollection, ParsedManifest

TEXT_QUOTE_SELECTOR: Final = "TextQuoteSelector"

SEARCH_SERVICE_TYPES: Final = {"SearchService1", "SearchService2"}
AUTOCOMPLETE_SERVICE_TYPES: Final = {"AutoCompleteService1", "AutoCompleteService2"}


def resource_id(value: Any) -> str | None:
    """Return the identifier of a IIIF reference.

    References may be a plain string, an object with `id`/`@id`, or a list
    of either (the first one wins).
    """
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        found = value.get("id") or value.get("@id")
        return str(found) if found else None
    return None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _first_language(value: Any) -> str | None:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, str) and value:
        return value
    return None


def _first_dict_value(value_map: dict[str, Any], fallback: str) -> str:
    """Return first meaningful value of a IIIF language map."""
    for value in value_map.values():
        if isinstance(value, list) and value:
            return str(value[0])
        if value and not isinstance(value, list):
            return str(value)
    return fallback


def extract_label(data: dict[str, Any], fallback: str = "") -> str:
    """Extract a human-readable label from v3 language maps or v2 literal labels."""
    label = data.get("label")
    if not label:
        return fallback
    if isinstance(label, dict):
        if "@value" in label:
            return str(label["@value"])
        return _first_dict_value(label, fallback)
    if isinstance(label, list):
        if not label:
            return fallback
        first = label[0]
        if isinstance(first, dict):
            return str(first.get("@value") or fallback)
        return str(first)
    return str(label)


class AnnotationPageParser:
    """Navigate a Content Search annotation page.

    The page's `items` are the top-level hits (each targeting a canvas) and
    its `annotations` hold nested annotation pages whose items carry the
    text-quote selectors pointing back at those hits.
    """

    def __init__(self, page: dict[str, Any]):
        self.page = page if isinstance(page, dict) else {}

    def iterate_annotations(self) -> Iterator[dict[str, Any]]:
        """Yield the page's top-level annotation entries."""
        for entry in _as_list(self.page.get("items")):
            if isinstance(entry, dict):
                yield entry

    def nested_pages(self) -> list[dict[str, Any]]:
        """Return the nested annotation pages attached to this page."""
        return [nested for nested in _as_list(self.page.get("annotations")) if isinstance(nested, dict)]

    def iterate_nested_items(self, entry: dict[str, Any], position: int) -> Iterator[dict[str, Any]]:
        """Yield the nested match items that belong to `entry`.

        An item belongs to an entry when its target source is the entry id.
        Items whose source is missing or names no entry of this page belong
        to the entry sitting at the same position as their nested page (the
        last entry when there are more nested pages than entries).
        """
        entry_id = resource_id(entry)
        entry_ids = {resource_id(e) for e in self.iterate_annotations()} - {None}
        last_position = len(list(self.iterate_annotations())) - 1

        for page_index, nested in enumerate(self.nested_pages()):
            owner = min(page_index, last_position)
            for item in _as_list(nested.get("items")):
                if not isinstance(item, dict):
                    continue
                source = target_source(item)
                if source is not None and source in entry_ids:
                    if source == entry_id:
                        yield item
                elif owner == position:
                    yield item

    def next_page(self) -> str | None:
        """Return the URL of the following page, if the page declares one."""
        return resource_id(self.page.get("next"))

    def part_of(self) -> str | None:
        """Return the page-level `partOf` reference, if any."""
        return resource_id(self.page.get("partOf"))


def target_source(item: dict[str, Any]) -> str | None:
    """Return the source of an annotation's specific-resource target."""
    for target in _as_list(item.get("target")):
        if isinstance(target, dict) and target.get("source") is not None:
            return resource_id(target["source"])
    return None


def target_id(item: dict[str, Any]) -> str | None:
    """Return the identifier of an annotation's target (its canvas for a hit)."""
    target = item.get("target")
    if isinstance(target, list):
        target = target[0] if target else None
    if isinstance(target, dict):
        return resource_id(target) or resource_id(target.get("source"))
    return resource_id(target)


def text_quote_selector(item: dict[str, Any]) -> dict[str, Any] | None:
    """Return the first TextQuoteSelector declared on the item's targets."""
    for target in _as_list(item.get("target")):
        if not isinstance(target, dict):
            continue
        for selector in _as_list(target.get("selector")):
            if isinstance(selector, dict) and selector.get("type") == TEXT_QUOTE_SELECTOR:
                return selector
    return None


def annotation_language(item: dict[str, Any], selector: dict[str, Any] | None = None) -> str | None:
    """Return the language declared on the item, its body, its target or its selector."""
    if language := _first_language(item.get("language")):
        return language
    for body in _as_list(item.get("body")):
        if isinstance(body, dict) and (language := _first_language(body.get("language"))):
            return language
    for target in _as_list(item.get("target")):
        if isinstance(target, dict) and (language := _first_language(target.get("language"))):
            return language
    if selector:
        return _first_language(selector.get("language"))
    return None


def _service_kind(service: dict[str, Any]) -> str | None:
    declared = str(service.get("type") or service.get("@type") or "")
    profile = " ".join(str(p) for p in _as_list(service.get("profile")))

    if declared in SEARCH_SERVICE_TYPES or ("/search/" in profile and profile.rstrip("/").endswith("search")):
        return "search"
    if declared in AUTOCOMPLETE_SERVICE_TYPES or profile.rstrip("/").endswith("autocomplete"):
        return "autocomplete"
    return None


def find_services(data: dict[str, Any]) -> tuple[str | None, str | None]:
    """Return `(search_endpoint, autocomplete_endpoint)` declared by a manifest or collection.

    Autocomplete services are nested inside the search service.
    """
    search: str | None = None
    autocomplete: str | None = None

    for service in _as_list(data.get("service")):
        if not isinstance(service, dict) or _service_kind(service) != "search":
            continue
        search = search or resource_id(service)
        for nested in _as_list(service.get("service")):
            if isinstance(nested, dict) and _service_kind(nested) == "autocomplete":
                autocomplete = autocomplete or resource_id(nested)

    return search, autocomplete


class ManifestParser:
    """Turn decoded IIIF Presentation v2/v3 manifest JSON into a ParsedManifest."""

    @staticmethod
    def parse(data: dict[str, Any], fallback_name: str = "") -> ParsedManifest:
        """Parse a manifest payload."""
        search, autocomplete = find_services(data)
        canvases = ManifestParser._canvases(data)
        return ParsedManifest(
            id=resource_id(data),
            name=extract_label(data, fallback_name),
            canvases=[{"id": resource_id(c), "label": extract_label(c)} for c in canvases],
            images=[url for c in canvases if (url := ManifestParser._canvas_image(c))],
            search_service=search,
            autocomplete_service=autocomplete,
            raw=data,
        )

    @staticmethod
    def _canvases(data: dict[str, Any]) -> list[dict[str, Any]]:
        sequences = data.get("sequences")
        if isinstance(sequences, list) and sequences and isinstance(sequences[0], dict):
            return [c for c in _as_list(sequences[0].get("canvases")) if isinstance(c, dict)]
        return [c for c in _as_list(data.get("items")) if isinstance(c, dict)]

    @staticmethod
    def _canvas_image(canvas: dict[str, Any]) -> str | None:
        """Return the image resource painted on a canvas (v2 images or v3 annotation bodies)."""
        for image in _as_list(canvas.get("images")):
            if isinstance(image, dict) and (url := resource_id(image.get("resource"))):
                return url

        for page in _as_list(canvas.get("items")):
            if not isinstance(page, dict):
                continue
            for annot in _as_list(page.get("items")):
                if isinstance(annot, dict) and (url := resource_id(annot.get("body"))):
                    return url
        return None


class CollectionParser:
    """Turn decoded IIIF Presentation v2/v3 collection JSON into a ParsedCollection."""

    @staticmethod
    def parse(data: dict[str, Any], fallback_name: str = "") -> ParsedCollection:
        """Parse a collection payload."""
        search, autocomplete = find_services(data)
        return ParsedCollection(
            id=resource_id(data),
            name=extract_label(data, fallback_name),
            manifest_urls=CollectionParser._manifest_urls(data),
            search_service=search,
            autocomplete_service=autocomplete,
            raw=data,
        )

    @staticmethod
    def _manifest_urls(data: dict[str, Any]) -> list[str]:
        urls: list[str] = []

        # v3: items typed "Manifest"; v2: "manifests" or "members" typed "sc:Manifest"
        for member in _as_list(data.get("items")) + _as_list(data.get("members")):
            if not isinstance(member, dict):
                continue
            declared = str(member.get("type") or member.get("@type") or "")
            if declared.rsplit(":", 1)[-1] == "Manifest" and (url := resource_id(member)):
                urls.append(url)

        for member in _as_list(data.get("manifests")):
            if url := resource_id(member):
                urls.append(url)

        return urls


__all__ = [
    "AnnotationPageParser",
    "CollectionParser",
    "ManifestParser",
    "annotation_language",
    "extract_label",
    "find_services",
    "resource_id",
    "target_id",
    "target_source",
    "text_quote_selector",
]
