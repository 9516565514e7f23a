"""Desktop App -- minimal example of declaring settings with propstore.

Defines a ``DesktopSettings`` group with typed items (window geometry,
theme, a dark-mode toggle, recent files and a secret sync token) and a
small ``run`` entry point that opens the store, touches a few values and
saves on exit.

Modules:
    settings: DesktopSettings group, WindowGeometry model, Theme enum
    app:      Entry point (run) wiring logging, store and event bus
"""

from .app import run
from .settings import DesktopSettings, Theme, WindowGeometry

__all__ = ["DesktopSettings", "Theme", "WindowGeometry", "run"]
