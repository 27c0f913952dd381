import json

from iiif_viewer_core.config_manager import ConfigManager


def test_load_merges_file_over_defaults(tmp_path):
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"settings": {"search": {"max_pages": 3}}}), encoding="utf-8")

    cm = ConfigManager.load(cfg)

    assert cm.get_max_search_pages() == 3
    assert cm.get_request_timeout() == 15
    assert {"code": "en", "name": "English"} in cm.get_languages()


def test_missing_file_is_never_written(tmp_path):
    """The viewer only reads config.json; settings changes stay in memory."""
    cfg = tmp_path / "config.json"

    cm = ConfigManager.load(cfg)
    cm.set_setting("search.max_pages", 2)

    assert cm.get_max_search_pages() == 2
    assert not cfg.exists()
    assert not hasattr(cm, "save")


def test_invalid_values_fall_back_to_defaults(tmp_path):
    cm = ConfigManager.load(tmp_path / "config.json")
    cm.set_setting("search.max_pages", "many")
    cm.set_setting("network.request_timeout", 0)
    cm.set_setting("languages", [{"code": "la"}, {"name": "no code"}, "junk"])

    assert cm.get_max_search_pages() == 10
    assert cm.get_request_timeout() == 1
    assert cm.get_languages() == [{"code": "la", "name": "la"}]
