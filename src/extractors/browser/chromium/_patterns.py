"""
Chromium browser family file path patterns.

Covers the Chromium-based browsers whose cookies can be read:
- Google Chrome
- Chromium (open-source)
- Microsoft Edge
- Brave

Each browser has different install paths per OS. All of them use the same
internal structure: a "User Data" root holding the ``Local State`` file and
one directory per profile (``Default``, ``Profile 1``, ...).

Usage:
    from extractors.browser.chromium._patterns import (
        CHROMIUM_BROWSERS,
        get_profile_root,
        get_cookie_db_candidates,
    )

    root = get_profile_root("chrome", "linux", home=Path("/home/alice"))
    # /home/alice/.config/google-chrome
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from extractors._shared.platforms import (
    LINUX,
    MACOS,
    WINDOWS,
    home_dir,
    normalize_platform,
    windows_app_data,
)


# Browser-specific profile roots and OS credential names
# Keys are browser identifiers, values are per-OS roots
# (relative to home on Linux/macOS, to %LOCALAPPDATA% on Windows), the macOS
# Keychain service/account and the Secret Service "application" attribute.
CHROMIUM_BROWSERS: Dict[str, Dict[str, Any]] = {
    # =========================================================================
    # Google Chrome
    # =========================================================================
    "chrome": {
        "profile_roots": {
            LINUX: ".config/google-chrome",
            MACOS: "Library/Application Support/Google/Chrome",
            WINDOWS: "Google/Chrome/User Data",
        },
        "keychain": ("Chrome Safe Storage", "Chrome"),
        "secret_application": "chrome",
    },
    # =========================================================================
    # Chromium (open-source browser)
    # =========================================================================
    "chromium": {
        "profile_roots": {
            LINUX: ".config/chromium",
            MACOS: "Library/Application Support/Chromium",
            WINDOWS: "Chromium/User Data",
        },
        "keychain": ("Chromium Safe Storage", "Chromium"),
        "secret_application": "chromium",
    },
    # =========================================================================
    # Microsoft Edge
    # =========================================================================
    "edge": {
        "profile_roots": {
            LINUX: ".config/microsoft-edge",
            MACOS: "Library/Application Support/Microsoft Edge",
            WINDOWS: "Microsoft/Edge/User Data",
        },
        "keychain": ("Microsoft Edge Safe Storage", "Microsoft Edge"),
        "secret_application": "microsoft-edge",
    },
    # =========================================================================
    # Brave Browser
    # =========================================================================
    "brave": {
        "profile_roots": {
            LINUX: ".config/BraveSoftware/Brave-Browser",
            MACOS: "Library/Application Support/BraveSoftware/Brave-Browser",
            WINDOWS: "BraveSoftware/Brave-Browser/User Data",
        },
        "keychain": ("Brave Safe Storage", "Brave"),
        "secret_application": "brave",
    },
}

DEFAULT_PROFILE = "Default"
LOCAL_STATE_FILE = "Local State"

# Cookie database paths relative to the profile directory, in lookup order
CHROMIUM_COOKIE_PATHS: List[str] = [
    # Chrome 96+ moved cookies to Network/ subdirectory
    "Network/Cookies",
    "Cookies",
]


def _browser_info(browser: str) -> Dict[str, Any]:
    if browser not in CHROMIUM_BROWSERS:
        raise ValueError(f"Unknown browser: {browser}. Valid: {list(CHROMIUM_BROWSERS.keys())}")
    return CHROMIUM_BROWSERS[browser]


def get_profile_root(
    browser: str,
    platform: Optional[str] = None,
    *,
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Resolve the "User Data" root of a Chromium browser.

    Args:
        browser: Browser key (chrome, chromium, edge, brave)
        platform: ``sys.platform``-style string (default: current)
        home: Home directory override
        env: Environment override (for ``%LOCALAPPDATA%``)

    Returns:
        Absolute path of the browser's profile root (not checked for existence)
    """
    platform = normalize_platform(platform)
    relative = _browser_info(browser)["profile_roots"][platform]
    if platform == WINDOWS:
        base = windows_app_data("LOCALAPPDATA", "AppData/Local", home=home, env=env)
    else:
        base = home_dir(home)
    return base / relative


def get_cookie_db_candidates(profile_dir: Path) -> List[Path]:
    """Cookie database locations inside a profile directory, newest layout first."""
    return [profile_dir / relative for relative in CHROMIUM_COOKIE_PATHS]


def get_local_state_path(profile_dir: Path) -> Path:
    """``Local State`` sits in the root one level above the profile directory."""
    return profile_dir.parent / LOCAL_STATE_FILE


def get_keychain_entry(browser: str) -> tuple[str, str]:
    """macOS Keychain (service, account) holding the cookie password."""
    return _browser_info(browser)["keychain"]


def get_secret_application(browser: str) -> str:
    """Secret Service ``application`` attribute of the cookie password item."""
    return _browser_info(browser)["secret_application"]
