from datetime import datetime

import pytest

from grain.application.config import GrainConfig
from grain.domain.state import AppState

# Thursday of ISO week 2024-20 (Mon 2024-05-13 .. Sun 2024-05-19)
FIXED_NOW = datetime(2024, 5, 16, 12, 0)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point GRAIN_HOME at a temp dir and clear any GRAIN_* overrides."""
    home = tmp_path / "grain-home"
    monkeypatch.setenv("GRAIN_HOME", str(home))
    monkeypatch.delenv("GRAIN_WEEKLY_GOAL", raising=False)
    monkeypatch.delenv("GRAIN_BREAK_START", raising=False)
    return home


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def config():
    return GrainConfig(weekly_goal=90, break_start=12)


@pytest.fixture
def state(config):
    return AppState(config=config)
