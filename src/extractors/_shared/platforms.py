"""
Platform and user-directory helpers shared by the browser families.

Path resolution is parameterised on platform, home directory and environment
so the locators can be exercised for every OS from any OS.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping, Optional

LINUX = "linux"
MACOS = "darwin"
WINDOWS = "win32"


def normalize_platform(platform: Optional[str] = None) -> str:
    """
    Reduce a ``sys.platform``-style string to linux/darwin/win32.

    Anything that is neither macOS nor Windows is treated as Linux (the BSDs
    use the same XDG layout and keyring for Chromium).
    """
    platform = (platform or sys.platform).lower()
    if platform.startswith("darwin") or platform in ("macos", "mac", "osx"):
        return MACOS
    if platform.startswith("win") or platform.startswith("cygwin"):
        return WINDOWS
    return LINUX


def home_dir(home: Optional[Path] = None) -> Path:
    return Path(home) if home is not None else Path.home()


def windows_app_data(
    variable: str,
    fallback: str,
    *,
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Resolve ``%LOCALAPPDATA%`` / ``%APPDATA%``.

    Args:
        variable: Environment variable name
        fallback: Path relative to the home directory used when unset
    """
    env = os.environ if env is None else env
    value = env.get(variable)
    if value:
        return Path(value)
    return home_dir(home) / fallback
