"""Language discovery over IIIF annotations and the configured language table."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .config_manager import get_config_manager


def _language_table(languages: Iterable[dict[str, str]] | None) -> dict[str, str]:
    if languages is None:
        languages = get_config_manager().get_languages()
    return {str(lang["code"]): str(lang.get("name") or lang["code"]) for lang in languages if lang.get("code")}


def language_name(code: str, languages: Iterable[dict[str, str]] | None = None) -> str:
    """Return the configured display name for `code`, or the code itself."""
    return _language_table(languages).get(code, code)


def _codes_in_annotation(anno: Any) -> set[str]:
    codes: set[str] = set()
    if not isinstance(anno, dict):
        return codes

    body = anno.get("body")
    bodies = body if isinstance(body, list) else [body] if body else []
    for item in bodies:
        if not isinstance(item, dict):
            continue
        # language map: {"en": ["..."], "de": ["..."]}
        if isinstance(item.get("value"), dict):
            codes.update(str(code) for code in item["value"])
        if item.get("language"):
            codes.add(str(item["language"]))

    if isinstance(anno.get("label"), dict):
        codes.update(str(code) for code in anno["label"])

    return codes


def extract_languages_from_annotations(
    annotations: Iterable[Any], languages: Iterable[dict[str, str]] | None = None
) -> list[dict[str, str]]:
    """Collect the distinct languages declared by a set of annotations.

    Returns one `{"code", "name"}` entry per language code, the name taken
    from the configured language table (or `languages` when given).
    """
    found: set[str] = set()
    for anno in annotations or []:
        found |= _codes_in_annotation(anno)

    names = _language_table(languages)
    return [{"code": code, "name": names.get(code, code)} for code in sorted(found)]
