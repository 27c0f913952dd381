"""Test bootstrap.

Ensures the sources are importable, keeps logs out of the working tree and
restores any setting a test changes.
"""

from __future__ import annotations

import contextlib
import copy
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _config_manager():
    from iiif_viewer_core.config_manager import get_config_manager

    return get_config_manager()


def _drop_log_handlers():
    from iiif_viewer_core.logger import app_logger

    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        with contextlib.suppress(Exception):
            handler.close()


def pytest_configure():
    """Redirect session logging to a temporary folder before test collection."""
    session_logs_dir = Path(tempfile.mkdtemp(prefix="iiif-viewer-pytest-logs-")) / "logs"
    _config_manager().set_logs_dir(str(session_logs_dir))
    _drop_log_handlers()


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path):
    """Give every test its own log folder and a pristine copy of the settings."""
    from iiif_viewer_core.logger import setup_logging

    cm = _config_manager()
    original = copy.deepcopy(cm.data)

    cm.set_logs_dir(str(tmp_path / "logs"))
    _drop_log_handlers()
    setup_logging()

    yield cm

    _drop_log_handlers()
    cm.data.clear()
    cm.data.update(original)
