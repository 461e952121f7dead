"""
Runtime context — where the application and its packaged resources live.

The roots are set ONCE at startup by whichever entry point launches
the app:

    - CLI:    main.py   → apply_config(config) → set_app_root / set_resources_root
    - Tests:  conftest  → set_resources_root(tmp_path)

Design notes:
    - Module-level singleton (not a class).  Simple, no over-engineering.
    - get_resources_root() returns None when the runtime has no packaged
      resources directory — the bundle resolver simply skips that candidate.
    - Thread-safe for reads (Python GIL + simple reference assignment).
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

# Environment override for the packaged-resources root
RESOURCES_ENV_VAR = "VAI_RESOURCES_PATH"

_app_root: Optional[Path] = None
_resources_root: Optional[Path] = None


def set_app_root(root: Path | None) -> None:
    """Register the application installation root for the current process."""
    global _app_root
    _app_root = root


def get_app_root() -> Path:
    """Return the application installation root.

    Defaults to the directory that holds the ``src`` package.
    """
    if _app_root is not None:
        return _app_root
    return Path(__file__).resolve().parent.parent.parent


def set_resources_root(root: Path | None) -> None:
    """Register the packaged-resources root for the current process."""
    global _resources_root
    _resources_root = root


def get_resources_root() -> Optional[Path]:
    """Return the packaged-resources root, or None if the runtime has none.

    Precedence: explicit registration > ``VAI_RESOURCES_PATH`` >
    PyInstaller's ``sys._MEIPASS`` when frozen.
    """
    if _resources_root is not None:
        return _resources_root

    env_root = os.environ.get(RESOURCES_ENV_VAR)
    if env_root:
        return Path(env_root)

    meipass = getattr(sys, "_MEIPASS", None)
    if getattr(sys, "frozen", False) and meipass:
        return Path(meipass)

    return None
