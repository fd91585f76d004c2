"""
Cookie store discovery.

Turns a browser identifier plus an optional explicit path or profile name
into a BrowserTarget naming the files to read. Resolution is pure path work:
files are tested for existence, never opened (``profiles.ini`` aside).

Usage:
    from extractors.browser.discovery import resolve_target

    target = resolve_target("chrome", profile="Profile 1")
    target = resolve_target(BrowserKind.FIREFOX, explicit_path="~/backup/cookies.sqlite")
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Union

from core.enums import BrowserKind
from core.logging import get_logger
from core.records import BrowserTarget
from ..exceptions import StoreNotFoundError
from .chromium import _patterns as chromium_patterns
from .firefox import _patterns as firefox_patterns

LOGGER = get_logger("extractors.browser.discovery")


def resolve_target(
    browser: Union[BrowserKind, str],
    explicit_path: Optional[Union[str, Path]] = None,
    profile: Optional[str] = None,
    *,
    platform: Optional[str] = None,
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> BrowserTarget:
    """
    Resolve where a browser's cookie database lives.

    Args:
        browser: Browser kind (or its identifier string)
        explicit_path: Cookie database file or profile directory; skips the
                       default-location search
        profile: Profile directory name (Chromium ``Default``/``Profile 1``;
                 Firefox directory or profiles.ini ``Name=``)
        platform: ``sys.platform``-style override
        home: Home directory override
        env: Environment override (``%LOCALAPPDATA%``/``%APPDATA%``)

    Returns:
        BrowserTarget

    Raises:
        StoreNotFoundError: No cookie database at the given or default location
        ValueError: Unknown browser identifier
    """
    if not isinstance(browser, BrowserKind):
        browser = BrowserKind.parse(browser)

    if browser.is_chromium:
        target = _resolve_chromium(browser, explicit_path, profile, platform, home, env)
    else:
        target = _resolve_firefox(browser, explicit_path, profile, platform, home, env)
    LOGGER.debug("Resolved %s to %s", browser.value, target.database_path)
    return target


def _first_existing(candidates) -> Optional[Path]:
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


# =============================================================================
# Chromium family
# =============================================================================

def _resolve_chromium(
    browser: BrowserKind,
    explicit_path: Optional[Union[str, Path]],
    profile: Optional[str],
    platform: Optional[str],
    home: Optional[Path],
    env: Optional[Mapping[str, str]],
) -> BrowserTarget:
    label = browser.value
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if path.is_file():
            database_path = path
            # <profile>/Network/Cookies or <profile>/Cookies
            parent = path.parent
            profile_dir = parent.parent if parent.name == "Network" else parent
        elif path.is_dir():
            database_path = _first_existing(chromium_patterns.get_cookie_db_candidates(path))
            if database_path is None:
                raise StoreNotFoundError(f"No Cookies database in {path}", source=label)
            profile_dir = path
        else:
            raise StoreNotFoundError(f"Cookie database not found: {path}", source=label)
    else:
        root = chromium_patterns.get_profile_root(browser.value, platform, home=home, env=env)
        profile_dir = root / (profile or chromium_patterns.DEFAULT_PROFILE)
        database_path = _first_existing(chromium_patterns.get_cookie_db_candidates(profile_dir))
        if database_path is None:
            raise StoreNotFoundError(
                f"No {browser.display_name} cookie database in {profile_dir}", source=label,
            )

    local_state = chromium_patterns.get_local_state_path(profile_dir)
    return BrowserTarget(
        browser=browser,
        database_path=database_path,
        profile_dir=profile_dir,
        local_state_path=local_state if local_state.is_file() else None,
        profile=profile or (profile_dir.name if explicit_path is None else None),
    )


# =============================================================================
# Firefox
# =============================================================================

def _resolve_firefox(
    browser: BrowserKind,
    explicit_path: Optional[Union[str, Path]],
    profile: Optional[str],
    platform: Optional[str],
    home: Optional[Path],
    env: Optional[Mapping[str, str]],
) -> BrowserTarget:
    label = browser.value
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if path.is_file():
            return BrowserTarget(browser=browser, database_path=path, profile_dir=path.parent, profile=profile)
        if path.is_dir():
            database_path = path / firefox_patterns.COOKIE_DB_FILE
            if not database_path.is_file():
                raise StoreNotFoundError(f"No cookies.sqlite in {path}", source=label)
            return BrowserTarget(browser=browser, database_path=database_path, profile_dir=path, profile=profile)
        raise StoreNotFoundError(f"Cookie database not found: {path}", source=label)

    root = firefox_patterns.get_profile_root(platform, home=home, env=env)
    if profile:
        profile_dir = firefox_patterns.find_named_profile(root, profile)
        if profile_dir is None:
            raise StoreNotFoundError(f"No Firefox profile named '{profile}' under {root}", source=label)
    else:
        profile_dir = firefox_patterns.find_default_profile(root)
        if profile_dir is None:
            raise StoreNotFoundError(f"No Firefox profile listed in {root / firefox_patterns.PROFILES_INI}", source=label)

    database_path = profile_dir / firefox_patterns.COOKIE_DB_FILE
    if not database_path.is_file():
        raise StoreNotFoundError(f"No cookies.sqlite in {profile_dir}", source=label)
    return BrowserTarget(
        browser=browser,
        database_path=database_path,
        profile_dir=profile_dir,
        profile=profile or profile_dir.name,
    )
