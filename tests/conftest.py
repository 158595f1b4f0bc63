from __future__ import annotations

import pytest
from helpers import RecordingBus, StubExecutor, instrument

from gearlink.config import get_settings
from gearlink.core import CommandResult


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("GEARLINK_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture
def two_instruments() -> StubExecutor:
    return StubExecutor(
        {"list_devices": CommandResult.ok(instruments=[instrument("A", True), instrument("B")])}
    )
