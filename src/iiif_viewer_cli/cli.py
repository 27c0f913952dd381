import argparse
import asyncio
import sys

from iiif_viewer_core import __version__
from iiif_viewer_core.config_manager import get_config_manager
from iiif_viewer_core.logger import get_logger, setup_logging
from iiif_viewer_core.store import IIIFStore

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    app_name = get_config_manager().get_setting("ui.app_name", "IIIF Search Viewer")
    parser = argparse.ArgumentParser(description=app_name)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("url", help="URL of a IIIF manifest or collection")
    parser.add_argument("-s", "--search", metavar="QUERY", help="Full-text query sent to the search service")
    parser.add_argument(
        "-m",
        "--manifest-index",
        type=int,
        default=0,
        help="Manifest to show when the URL is a collection (0-based)",
    )
    parser.add_argument("-l", "--lang", metavar="CODE", help="Only show results in this language")
    parser.add_argument("--max-pages", type=int, help="Maximum number of search result pages to fetch")
    return parser


def _render_header(store: IIIFStore) -> None:
    state = store.state
    if state.current_collection is not None:
        print(f"📚 Collection: {state.collection_metadata['label']}")
        print(f"   Manifest {state.selected_manifest_index + 1}/{state.total_manifests}")
    print(f"📖 Manifest: {state.manifest_metadata['label']}")
    if state.current_manifest is not None:
        print(f"   Canvases: {len(state.current_manifest.canvases)}")
    print(f"🔎 Search service: {state.search_url or 'none'}")


def _render_results(store: IIIFStore) -> None:
    results = store.visible_search_results()
    print(f"\n{len(results)} result(s)\n" + "=" * 80)
    if not results:
        print("No search results found.")
        return

    for result in results:
        text = f"{result.prefix or ''}[{result.exact}]{result.suffix or ''}".replace("\n", " ")
        lang = f" ({result.language})" if result.language else ""
        print(f"- {text}{lang}")
        print(f"    canvas: {result.canvas_target}")
        if result.part_of:
            print(f"    manifest: {result.part_of}")

    languages = store.available_languages()
    if languages:
        print("\nLanguages: " + ", ".join(f"{lang['code'].upper()} {lang['name']}" for lang in languages))


async def _run(store: IIIFStore, args: argparse.Namespace) -> int:
    await store.load_content(args.url)
    if store.state.error:
        print(f"❌ Error: {store.state.error}")
        return 1

    total = store.state.total_manifests
    if not 0 <= args.manifest_index < total:
        print(f"❌ Error: manifest index {args.manifest_index} is out of range (0-{total - 1}).")
        return 1

    if args.manifest_index:
        await store.fetch_manifest_by_index(args.manifest_index)
        if store.state.error:
            print(f"❌ Error: {store.state.error}")
            return 1

    _render_header(store)

    if args.search:
        if not store.state.search_url:
            print("⚠️  This resource does not declare a search service.")
            return 1
        store.set_selected_language(args.lang)
        await store.handle_search(args.search)
        if store.state.error:
            print(f"❌ Error: {store.state.error}")
            return 1
        _render_results(store)

    return 0


def main(argv=None):
    """CLI entry point."""
    setup_logging()
    args = _build_parser().parse_args(argv)

    if args.max_pages is not None:
        get_config_manager().set_setting("search.max_pages", args.max_pages)

    try:
        code = asyncio.run(_run(IIIFStore(), args))
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
