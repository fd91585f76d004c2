"""
Tests for cookie store discovery.

Every test resolves against a fake home directory with an explicit platform,
so nothing depends on the browsers installed on the test machine.
"""

import pytest

from core.enums import BrowserKind
from extractors.browser.discovery import resolve_target
from extractors.exceptions import StoreNotFoundError

from tests.fixtures.helpers import (
    create_chromium_cookies_db,
    create_firefox_cookies_db,
    write_profiles_ini,
)


@pytest.fixture
def chrome_root(tmp_path):
    return tmp_path / ".config" / "google-chrome"


@pytest.fixture
def firefox_root(tmp_path):
    return tmp_path / ".mozilla" / "firefox"


# =============================================================================
# Chromium family
# =============================================================================

class TestResolveChromium:
    """Tests for Chromium default locations and explicit paths."""

    def test_default_profile(self, tmp_path, chrome_root):
        db_path = create_chromium_cookies_db(chrome_root / "Default" / "Network" / "Cookies")
        target = resolve_target("chrome", platform="linux", home=tmp_path)
        assert target.browser is BrowserKind.CHROME
        assert target.database_path == db_path
        assert target.profile_dir == chrome_root / "Default"
        assert target.profile == "Default"
        assert target.local_state_path is None

    def test_local_state_when_present(self, tmp_path, chrome_root):
        create_chromium_cookies_db(chrome_root / "Default" / "Network" / "Cookies")
        (chrome_root / "Local State").write_text("{}", encoding="utf-8")
        target = resolve_target(BrowserKind.CHROME, platform="linux", home=tmp_path)
        assert target.local_state_path == chrome_root / "Local State"

    def test_named_profile_old_layout(self, tmp_path):
        """Before Chrome 96 the database sat directly in the profile."""
        root = tmp_path / ".config" / "BraveSoftware" / "Brave-Browser"
        db_path = create_chromium_cookies_db(root / "Profile 1" / "Cookies")
        target = resolve_target("brave", profile="Profile 1", platform="linux", home=tmp_path)
        assert target.database_path == db_path
        assert target.profile == "Profile 1"

    def test_macos_layout(self, tmp_path):
        root = tmp_path / "Library" / "Application Support" / "Microsoft Edge"
        db_path = create_chromium_cookies_db(root / "Default" / "Network" / "Cookies")
        target = resolve_target("edge", platform="darwin", home=tmp_path)
        assert target.database_path == db_path

    def test_explicit_database_file(self, tmp_path):
        db_path = create_chromium_cookies_db(tmp_path / "backup" / "Default" / "Network" / "Cookies")
        (tmp_path / "backup" / "Local State").write_text("{}", encoding="utf-8")
        target = resolve_target("chromium", explicit_path=db_path, platform="linux", home=tmp_path)
        assert target.database_path == db_path
        assert target.profile_dir == tmp_path / "backup" / "Default"
        assert target.local_state_path == tmp_path / "backup" / "Local State"

    def test_explicit_profile_directory(self, tmp_path):
        profile_dir = tmp_path / "copy" / "Default"
        db_path = create_chromium_cookies_db(profile_dir / "Network" / "Cookies")
        target = resolve_target("chrome", explicit_path=str(profile_dir), platform="linux", home=tmp_path)
        assert target.database_path == db_path
        assert target.profile_dir == profile_dir

    def test_missing_default(self, tmp_path):
        with pytest.raises(StoreNotFoundError, match="Google Chrome"):
            resolve_target("chrome", platform="linux", home=tmp_path)

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(StoreNotFoundError):
            resolve_target("chrome", explicit_path=tmp_path / "nothing-here", platform="linux", home=tmp_path)

    def test_explicit_directory_without_database(self, tmp_path):
        (tmp_path / "empty").mkdir()
        with pytest.raises(StoreNotFoundError, match="No Cookies database"):
            resolve_target("chrome", explicit_path=tmp_path / "empty", platform="linux", home=tmp_path)


# =============================================================================
# Firefox
# =============================================================================

class TestResolveFirefox:
    """Tests for Firefox profile resolution."""

    def test_default_profile(self, tmp_path, firefox_root):
        write_profiles_ini(firefox_root, "[Profile0]\nName=default\nPath=abcd.default\nDefault=1\n")
        db_path = create_firefox_cookies_db(firefox_root / "abcd.default" / "cookies.sqlite")
        target = resolve_target("firefox", platform="linux", home=tmp_path)
        assert target.browser is BrowserKind.FIREFOX
        assert target.database_path == db_path
        assert target.profile == "abcd.default"
        assert target.local_state_path is None

    def test_named_profile(self, tmp_path, firefox_root):
        write_profiles_ini(
            firefox_root,
            "[Profile0]\nName=default\nPath=a.default\nDefault=1\n\n"
            "[Profile1]\nName=work\nPath=b.work\n",
        )
        db_path = create_firefox_cookies_db(firefox_root / "b.work" / "cookies.sqlite")
        target = resolve_target("firefox", profile="work", platform="linux", home=tmp_path)
        assert target.database_path == db_path
        assert target.profile == "work"

    def test_windows_appdata(self, tmp_path):
        roaming = tmp_path / "Roaming"
        root = roaming / "Mozilla" / "Firefox"
        write_profiles_ini(root, "[Profile0]\nName=default\nPath=Profiles/x.default-release\n")
        db_path = create_firefox_cookies_db(root / "Profiles" / "x.default-release" / "cookies.sqlite")
        target = resolve_target(
            "firefox", platform="win32", home=tmp_path, env={"APPDATA": str(roaming)},
        )
        assert target.database_path == db_path

    def test_explicit_file(self, tmp_path):
        db_path = create_firefox_cookies_db(tmp_path / "exported.sqlite")
        target = resolve_target("firefox", explicit_path=db_path, platform="linux", home=tmp_path)
        assert target.database_path == db_path
        assert target.profile_dir == tmp_path

    def test_explicit_profile_directory(self, tmp_path):
        db_path = create_firefox_cookies_db(tmp_path / "profile" / "cookies.sqlite")
        target = resolve_target("firefox", explicit_path=tmp_path / "profile", platform="linux", home=tmp_path)
        assert target.database_path == db_path

    def test_no_profiles_ini(self, tmp_path):
        with pytest.raises(StoreNotFoundError, match="No Firefox profile"):
            resolve_target("firefox", platform="linux", home=tmp_path)

    def test_unknown_profile(self, tmp_path, firefox_root):
        write_profiles_ini(firefox_root, "[Profile0]\nName=default\nPath=a.default\n")
        with pytest.raises(StoreNotFoundError, match="nobody"):
            resolve_target("firefox", profile="nobody", platform="linux", home=tmp_path)

    def test_profile_without_cookies(self, tmp_path, firefox_root):
        write_profiles_ini(firefox_root, "[Profile0]\nName=default\nPath=a.default\n")
        (firefox_root / "a.default").mkdir()
        with pytest.raises(StoreNotFoundError, match="No cookies.sqlite"):
            resolve_target("firefox", platform="linux", home=tmp_path)


def test_unknown_browser(tmp_path):
    with pytest.raises(ValueError):
        resolve_target("lynx", platform="linux", home=tmp_path)
