"""IIIF Content Search aggregation.

`search_annotations` walks a chain of annotation pages and flattens the
text-quote matches they contain into `SearchSnippet` objects.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from .config_manager import get_config_manager
from .errors import ResourceError
from .logger import get_logger
from .models import ANNOTATION_PAGE, SearchSnippet
from .parsers import (
    AnnotationPageParser,
    annotation_language,
    resource_id,
    target_id,
    target_source,
    text_quote_selector,
)
from .resource import fetch_resource

logger = get_logger(__name__)


def build_search_url(search_url: str, query: str) -> str:
    """Append `query` to a search service endpoint as the `q` parameter."""
    separator = "&" if "?" in search_url else "?"
    return f"{search_url}{separator}q={quote(query)}"


def _snippet_from_item(
    item: dict[str, Any], entry: dict[str, Any], part_of: str | None
) -> SearchSnippet | None:
    selector = text_quote_selector(item)
    if selector is None or not selector.get("exact"):
        return None

    canvas = target_id(entry)
    return SearchSnippet(
        id=resource_id(item),
        annotation_id=target_source(item) or canvas,
        motivation=item.get("motivation"),
        prefix=selector.get("prefix"),
        exact=str(selector["exact"]),
        suffix=selector.get("suffix"),
        canvas_target=canvas,
        part_of=part_of or resource_id(entry.get("partOf")),
        language=annotation_language(item, selector),
    )


def extract_snippets(page: dict[str, Any]) -> list[SearchSnippet]:
    """Extract the snippets of a single annotation page, in entry-then-item order."""
    parser = AnnotationPageParser(page)
    part_of = parser.part_of()

    snippets: list[SearchSnippet] = []
    for position, entry in enumerate(parser.iterate_annotations()):
        for item in parser.iterate_nested_items(entry, position):
            if snippet := _snippet_from_item(item, entry, part_of):
                snippets.append(snippet)
    return snippets


async def search_annotations(url: str, *, max_pages: int | None = None) -> list[SearchSnippet]:
    """Fetch every annotation page reachable from `url` and return their snippets.

    Pages are fetched sequentially by following `next` links, at most
    `max_pages` of them (`search.max_pages` from config when omitted).
    Reaching the limit is not an error: the snippets collected so far are
    returned.

    Raises:
        ResourceError: a fetched payload is not an AnnotationPage.
    """
    if max_pages is None:
        max_pages = get_config_manager().get_max_search_pages()

    snippets: list[SearchSnippet] = []
    pages_fetched = 0
    next_url: str | None = url

    while next_url and pages_fetched < max_pages:
        resource = await fetch_resource(next_url)
        pages_fetched += 1

        if resource.type != ANNOTATION_PAGE:
            raise ResourceError.invalid_response(next_url)

        snippets.extend(extract_snippets(resource.data))
        next_url = AnnotationPageParser(resource.data).next_page()

    logger.debug("Search %s: %d snippet(s) from %d page(s)", url, len(snippets), pages_fetched)
    return snippets
