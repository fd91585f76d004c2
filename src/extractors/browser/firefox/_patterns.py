"""
Firefox browser family file path patterns.

Firefox uses randomized profile names (e.g., abc123.default-release) listed in
``profiles.ini`` under the Firefox root directory:

- Linux:   ~/.mozilla/firefox
- macOS:   ~/Library/Application Support/Firefox
- Windows: %APPDATA%/Mozilla/Firefox

The default profile is chosen the way Firefox itself does: the ``Default=`` of
the first ``[Install*]`` section (per-installation default, Firefox 67+),
else the ``[Profile*]`` section marked ``Default=1``, else the first profile.

Usage:
    from extractors.browser.firefox._patterns import (
        get_profile_root,
        find_default_profile,
    )

    root = get_profile_root("linux", home=Path("/home/alice"))
    profile_dir = find_default_profile(root)
"""

from __future__ import annotations

import configparser
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from core.logging import get_logger
from extractors._shared.platforms import (
    LINUX,
    MACOS,
    WINDOWS,
    home_dir,
    normalize_platform,
    windows_app_data,
)

LOGGER = get_logger("extractors.browser.firefox.patterns")


# Browser-specific profile roots, relative to home on Linux/macOS and to
# %APPDATA% on Windows
FIREFOX_BROWSERS: Dict[str, Dict[str, Any]] = {
    "firefox": {
        "profile_roots": {
            LINUX: ".mozilla/firefox",
            MACOS: "Library/Application Support/Firefox",
            WINDOWS: "Mozilla/Firefox",
        },
    },
}

PROFILES_INI = "profiles.ini"
COOKIE_DB_FILE = "cookies.sqlite"
PROFILES_SUBDIR = "Profiles"  # macOS/Windows keep profiles one level down


def get_profile_root(
    platform: Optional[str] = None,
    *,
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    browser: str = "firefox",
) -> Path:
    """
    Resolve the Firefox root directory holding ``profiles.ini``.

    Returns:
        Absolute path (not checked for existence)
    """
    platform = normalize_platform(platform)
    relative = FIREFOX_BROWSERS[browser]["profile_roots"][platform]
    if platform == WINDOWS:
        base = windows_app_data("APPDATA", "AppData/Roaming", home=home, env=env)
    else:
        base = home_dir(home)
    return base / relative


def read_profiles_ini(root: Path) -> Optional[configparser.ConfigParser]:
    """
    Parse ``<root>/profiles.ini``.

    Returns:
        Parser, or None when the file is missing or unparseable
    """
    ini_path = root / PROFILES_INI
    if not ini_path.is_file():
        return None
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        with open(ini_path, "r", encoding="utf-8", errors="replace") as f:
            parser.read_file(f)
    except (OSError, configparser.Error) as e:
        LOGGER.warning("Cannot parse %s: %s", ini_path, e)
        return None
    return parser


def _profile_sections(parser: configparser.ConfigParser) -> List[str]:
    return [s for s in parser.sections() if s.startswith("Profile")]


def _profile_path(root: Path, parser: configparser.ConfigParser, section: str) -> Optional[Path]:
    path = parser.get(section, "Path", fallback=None)
    if not path:
        return None
    if parser.get(section, "IsRelative", fallback="1").strip() == "0":
        return Path(path)
    return root / path


def find_default_profile(root: Path) -> Optional[Path]:
    """
    Locate the default profile directory under a Firefox root.

    Returns:
        Profile directory path, or None when no profile is listed
    """
    parser = read_profiles_ini(root)
    if parser is None:
        return None

    for section in parser.sections():
        if section.startswith("Install"):
            default = parser.get(section, "Default", fallback=None)
            if default:
                default_path = Path(default)
                return default_path if default_path.is_absolute() else root / default_path

    sections = _profile_sections(parser)
    for section in sections:
        if parser.get(section, "Default", fallback="0").strip() == "1":
            return _profile_path(root, parser, section)

    if sections:
        return _profile_path(root, parser, sections[0])
    return None


def find_named_profile(root: Path, profile: str) -> Optional[Path]:
    """
    Locate a profile by directory name or by its ``Name=`` in profiles.ini.

    Returns:
        Profile directory path, or None when nothing matches
    """
    for candidate in (root / profile, root / PROFILES_SUBDIR / profile):
        if candidate.is_dir():
            return candidate

    parser = read_profiles_ini(root)
    if parser is None:
        return None
    for section in _profile_sections(parser):
        if parser.get(section, "Name", fallback=None) == profile:
            return _profile_path(root, parser, section)
    return None
