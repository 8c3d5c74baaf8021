import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from gunud import create_app  # noqa: E402
from gunud.routes.puzzle_api import clear_puzzle_cache  # noqa: E402

_ENV_KEYS = (
    "GUNUD_INCLUDE_HAZARD",
    "GUNUD_PAR_BUFFER",
    "GUNUD_STRICT_GENERATION",
    "GUNUD_DISABLE_CACHE",
    "GUNUD_LOG_JSON",
    "GUNUD_LOG_LEVEL",
)


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True})
    return app


@pytest.fixture(autouse=True)
def _clean_generation_env(monkeypatch):
    """Keep developer shell settings from leaking into generation."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    clear_puzzle_cache()
    yield
    clear_puzzle_cache()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def app_config(test_app):
    """Temporarily override Flask config keys; restored after the test."""
    saved = dict(test_app.config)
    yield test_app.config
    test_app.config.clear()
    test_app.config.update(saved)
