"""Entry point for the desktop example."""

from __future__ import annotations

import sys
from pathlib import Path

from propstore import (
    ConfigChanged,
    InProcessEventBus,
    PropertyStore,
    configure_logging,
    get_logger,
)

from .settings import DesktopSettings

logger = get_logger(__name__)


def _log_change(event: ConfigChanged) -> None:
    name = event.item.name if event.item is not None else None
    logger.info("setting_changed", key=event.key, item=name)


def run(base_dir: str | Path | None = None, opened: list[str] | None = None) -> DesktopSettings:
    """Open the store, record opened files and flip the theme toggle.

    Returns the settings group so callers can inspect the outcome.
    """
    bus = InProcessEventBus()
    bus.subscribe(_log_change)

    store = PropertyStore(event_bus=bus)
    store.configure(base_dir)
    with store:
        settings = DesktopSettings(store)
        for path in opened or []:
            settings.remember_file(path)
        settings.dark_mode.toggle()
        for item in settings:
            logger.info("setting", item=str(item))
    return settings


if __name__ == "__main__":
    configure_logging()
    run(opened=sys.argv[1:])
