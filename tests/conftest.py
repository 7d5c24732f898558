from __future__ import annotations

import pytest

from commit_stats.config import reset_config_cache


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    for name in ("COMMIT_STATS_KEY_ORDER", "COMMIT_STATS_MAX_BODY_BYTES", "COMMIT_STATS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()
