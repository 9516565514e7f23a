"""Settings group for the desktop example."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from propstore import Configuration

if TYPE_CHECKING:
    from propstore import PropertyStore


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class WindowGeometry(BaseModel):
    """Main window placement, persisted as a JSON object."""

    x: int = 100
    y: int = 100
    width: int = Field(default=1280, gt=0)
    height: int = Field(default=800, gt=0)
    maximized: bool = False


MAX_RECENT_FILES = 10


class DesktopSettings(Configuration):
    """User-facing preferences of the desktop app.

    Every item is declared once, in ``__init__``, so a second
    ``DesktopSettings`` over the same store shares the stored values.
    """

    def __init__(self, store: PropertyStore | None = None) -> None:
        super().__init__("Desktop", store=store)
        self.window = self.declare(
            "Window",
            "ui.window",
            WindowGeometry(),
            description="Main window geometry",
        )
        self.theme = self.declare("Theme", "ui.theme", Theme.SYSTEM)
        self.dark_mode = self.declare("Dark mode", "ui.dark_mode", False)
        self.recent_files = self.declare(
            "Recent files",
            "files.recent",
            [],
            value_type=list[str],
        )
        self.sync_token = self.declare(
            "Sync token",
            "sync.token",
            "",
            secret=True,
            description="Token for the settings sync service",
        )

    def remember_file(self, path: str) -> list[str]:
        """Move ``path`` to the front of the recent files list."""
        recent = [p for p in self.recent_files.get() if p != path]
        recent.insert(0, path)
        del recent[MAX_RECENT_FILES:]
        self.recent_files.set(recent)
        return recent
