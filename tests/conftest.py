"""Shared fixtures for propstore tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from propstore.events import ConfigChanged, InProcessEventBus
from propstore.settings import get_store_settings
from propstore.store import PropertyStore, default_store

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

PROPERTIES_FILE = "properties.json"


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep lazy configuration away from the real home directory."""
    monkeypatch.setenv("PROPSTORE_BASE_DIR", str(tmp_path / "default-config"))
    get_store_settings.cache_clear()
    default_store.cache_clear()
    yield
    get_store_settings.cache_clear()
    default_store.cache_clear()


@pytest.fixture()
def bus() -> InProcessEventBus:
    return InProcessEventBus()


@pytest.fixture()
def events(bus: InProcessEventBus) -> list[ConfigChanged]:
    """Every event published on ``bus`` during the test."""
    received: list[ConfigChanged] = []
    bus.subscribe(received.append)
    return received


@pytest.fixture()
def config_dir(tmp_path: Path) -> Path:
    return tmp_path / "config"


@pytest.fixture()
def config_file(config_dir: Path) -> Path:
    return config_dir / PROPERTIES_FILE


@pytest.fixture()
def store(bus: InProcessEventBus, config_dir: Path) -> PropertyStore:
    """A configured store writing to a temporary directory."""
    s = PropertyStore(event_bus=bus)
    s.configure(config_dir, PROPERTIES_FILE)
    return s
