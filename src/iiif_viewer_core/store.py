"""View state orchestrator.

`IIIFStore` owns the viewer's `ViewState` for one session and is the only
thing that mutates it. Every transition is a method; the presentation layer
reads `store.state` after each call and re-renders from it.

All transitions run on a single event loop. Awaiting methods may be
observed half-way (for instance `error` cleared before `search_results` is
filled) and overlapping requests are not de-duplicated: whichever finishes
last writes its result.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from .lang_utils import extract_languages_from_annotations
from .loader import parse_resource
from .logger import get_logger
from .models import ParsedCollection, ParsedManifest, ParsedResource, SearchSnippet
from .search import build_search_url, search_annotations

logger = get_logger(__name__)

SEARCH_FAILED_MESSAGE = "Search failed. Please try again."
LOAD_FAILED_MESSAGE = "Failed to load IIIF content."
MANIFEST_FAILED_MESSAGE = "Failed to load manifest."

TAB_METADATA = "metadata"
TAB_SEARCH_RESULTS = "searchResults"

SearchFn = Callable[[str], Awaitable[list[SearchSnippet]]]
LoaderFn = Callable[[str], Awaitable[ParsedResource]]


@dataclass
class ViewState:
    content_url: str | None = None
    current_manifest: ParsedManifest | None = None
    current_collection: ParsedCollection | None = None
    manifest_urls: list[str] = field(default_factory=list)
    selected_manifest_index: int = 0
    total_manifests: int = 0
    manifest_metadata: dict[str, Any] = field(default_factory=lambda: {"label": ""})
    collection_metadata: dict[str, Any] = field(default_factory=lambda: {"label": ""})
    search_url: str | None = None
    autocomplete_url: str | None = None
    search_results: list[SearchSnippet] = field(default_factory=list)
    selected_search_result_id: str | None = None
    active_panel_tab: str = TAB_METADATA
    selected_language: str | None = None
    searching: bool = False
    error: str | None = None


class IIIFStore:
    """State container plus the transitions allowed on it.

    `search` and `loader` are the aggregator and manifest-loading
    collaborators; tests inject fakes.
    """

    def __init__(self, search: SearchFn | None = None, loader: LoaderFn | None = None):
        self._search = search or search_annotations
        self._loader = loader or parse_resource
        self.state = ViewState()

    def reset(self) -> None:
        """Return to the empty baseline state."""
        self.state = ViewState()

    # --- setters -------------------------------------------------------

    def set_content_url(self, url: str | None) -> None:
        self.state.content_url = url

    def set_selected_search_result_id(self, result_id: str | None) -> None:
        self.state.selected_search_result_id = result_id

    def set_active_panel_tab(self, tab: str) -> None:
        self.state.active_panel_tab = tab

    def set_selected_language(self, code: str | None) -> None:
        self.state.selected_language = code or None

    def set_error(self, message: str | None) -> None:
        self.state.error = message

    # --- manifest / collection ----------------------------------------

    def handle_manifest_update(
        self,
        manifest: ParsedManifest,
        manifest_urls: list[str],
        total_manifests: int,
        collection: ParsedCollection | None,
    ) -> None:
        """Fold a freshly loaded manifest (and its collection) into the state.

        A search service declared by the collection always wins over the
        manifest's, so a collection-wide query survives paging through
        member manifests.
        """
        state = self.state
        state.current_manifest = manifest
        state.manifest_urls = list(manifest_urls)
        state.total_manifests = total_manifests
        state.current_collection = collection

        if collection is not None and collection.search_service:
            state.search_url = collection.search_service
            state.autocomplete_url = collection.autocomplete_service
        elif manifest is not None and manifest.search_service:
            state.search_url = manifest.search_service
            state.autocomplete_url = manifest.autocomplete_service
        else:
            state.search_url = None
            state.autocomplete_url = None

        state.manifest_metadata = {"label": manifest.name if manifest is not None else ""}
        if collection is not None:
            state.collection_metadata = {"label": collection.name}
        else:
            state.collection_metadata = {"label": ""}

    async def load_content(self, url: str) -> None:
        """Load a manifest or collection URL and make it the current content."""
        self.set_content_url(url)
        try:
            resource = await self._loader(url)
        except Exception as exc:
            logger.error("Failed to load IIIF content from %s: %s", url, exc, exc_info=True)
            self.state.error = LOAD_FAILED_MESSAGE
            return

        self.handle_manifest_update(
            resource.first_manifest, resource.manifest_urls, resource.total_manifests, resource.collection
        )
        self.state.selected_manifest_index = 0
        self.state.search_results = []
        self.state.selected_search_result_id = None
        self.state.error = None
        logger.info("Loaded %s (%d manifest(s))", url, resource.total_manifests)

    async def fetch_manifest_by_index(self, index: int) -> None:
        """Switch to the manifest at `index` within the loaded collection.

        The collection and the already-resolved search endpoint are kept as
        they are.
        """
        urls = self.state.manifest_urls
        if index < 0 or index >= len(urls):
            logger.debug("Ignoring manifest index %s (have %d)", index, len(urls))
            return

        url = urls[index]
        try:
            resource = await self._loader(url)
        except Exception as exc:
            logger.error("Failed to load manifest %s: %s", url, exc, exc_info=True)
            self.state.error = MANIFEST_FAILED_MESSAGE
            return

        self.state.current_manifest = resource.first_manifest
        self.state.manifest_metadata = {"label": resource.first_manifest.name}
        self.state.selected_manifest_index = index
        self.state.error = None

    async def next_manifest(self) -> None:
        if self.state.selected_manifest_index + 1 < self.state.total_manifests:
            await self.fetch_manifest_by_index(self.state.selected_manifest_index + 1)

    async def previous_manifest(self) -> None:
        if self.state.selected_manifest_index > 0:
            await self.fetch_manifest_by_index(self.state.selected_manifest_index - 1)

    # --- search ----------------------------------------------------------

    async def handle_search(self, query: str) -> None:
        """Run a search against the resolved endpoint and replace the results.

        Does nothing when no search endpoint is known. Failures are logged
        and surface to the UI only as a fixed message with empty results.
        """
        if not self.state.search_url:
            return

        url = build_search_url(self.state.search_url, query)
        self.state.searching = True
        self.state.error = None
        try:
            results = await self._search(url)
        except Exception as exc:
            logger.error("Search failed for %s: %s", url, exc, exc_info=True)
            self.state.error = SEARCH_FAILED_MESSAGE
            self.state.search_results = []
        else:
            self.state.search_results = list(results)
            self.state.active_panel_tab = TAB_SEARCH_RESULTS
            self.state.error = None
        finally:
            self.state.searching = False

    def visible_search_results(self) -> list[SearchSnippet]:
        """Results filtered by the selected language.

        Results that declare no language are always shown.
        """
        selected = self.state.selected_language
        if not selected:
            return list(self.state.search_results)
        return [r for r in self.state.search_results if not r.language or r.language == selected]

    def available_languages(self) -> list[dict[str, str]]:
        """Languages present in the current results, as `{code, name}` entries.

        Each result is handed to the language extractor as a textual-body
        annotation, so names come from the configured language table.
        """
        annotations = [
            {"id": r.id, "body": {"type": "TextualBody", "value": r.exact, "language": r.language}}
            for r in self.state.search_results
            if r.language
        ]
        return extract_languages_from_annotations(annotations)
