"""Root test configuration - session-level cleanup of runtime artifacts"""

from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["blogcore.db", "test.db"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep BLOGCORE_* variables from the outer shell out of every test."""
    for name in ("DB_URL", "ADMIN_TOKEN", "LOG_LEVEL", "API_PREFIX", "APP_NAME", "ASSET_BASE_URL"):
        monkeypatch.delenv(f"BLOGCORE_{name}", raising=False)
