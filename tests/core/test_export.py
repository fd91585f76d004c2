"""
Tests for cookie export formats.

Tests cover:
- Netscape cookies.txt lines and header
- HTTPie session document
- Human-readable grouped listing
- Field validation and format dispatch
"""

import io
import json

import pytest

from core.enums import OutputFormat, SameSite
from core.export import (
    NETSCAPE_HEADER,
    build_httpie_session,
    export_cookies,
    export_human,
    export_httpie_session,
    export_netscape,
)
from core.records import CookieRecord
from extractors.exceptions import SerializeError

JAN_2024 = 1704067200


@pytest.fixture
def records():
    return [
        CookieRecord(
            domain=".example.com",
            path="/",
            name="sid",
            value="abc",
            expires_at=JAN_2024,
            secure=True,
            http_only=True,
            same_site=SameSite.LAX,
            source="firefox:default",
        ),
        CookieRecord(domain="www.example.com", path="/app", name="pref", value="dark"),
    ]


def render(exporter, records):
    stream = io.StringIO()
    exporter(records, stream)
    return stream.getvalue()


# =============================================================================
# Netscape
# =============================================================================

class TestNetscape:
    """Tests for export_netscape."""

    def test_lines(self, records):
        assert render(export_netscape, records) == (
            "# Netscape HTTP Cookie File\n"
            ".example.com\tTRUE\t/\tTRUE\t1704067200\tsid\tabc\n"
            "www.example.com\tFALSE\t/app\tFALSE\t0\tpref\tdark\n"
        )

    def test_empty(self):
        assert render(export_netscape, []) == NETSCAPE_HEADER + "\n"

    def test_input_order_is_kept(self, records):
        lines = render(export_netscape, list(reversed(records))).splitlines()
        assert lines[1].startswith("www.example.com")
        assert lines[2].startswith(".example.com")

    @pytest.mark.parametrize("field,bad", [
        ("value", "a\tb"),
        ("name", "a\nb"),
        ("domain", "example.com\r"),
        ("path", "/\t"),
    ])
    def test_rejects_separators(self, field, bad):
        """Tabs and line breaks would corrupt the tab-separated format."""
        values = {"domain": "example.com", "path": "/", "name": "n", "value": "v"}
        values[field] = bad
        stream = io.StringIO()
        with pytest.raises(SerializeError):
            export_netscape([CookieRecord(**values)], stream)
        assert stream.getvalue() == ""


# =============================================================================
# HTTPie
# =============================================================================

class TestHttpieSession:
    """Tests for the HTTPie session document."""

    def test_document(self, records):
        document = json.loads(render(export_httpie_session, records))
        assert set(document) == {"headers", "cookies", "auth"}
        assert document["headers"] == []
        assert document["auth"] == {"type": None, "username": None, "password": None}

        first, second = document["cookies"]
        assert first["name"] == "sid"
        assert first["value"] == "abc"
        assert first["domain"] == ".example.com"
        assert first["path"] == "/"
        assert first["secure"] is True
        assert first["expires"] == JAN_2024
        assert first["rest"] == {"HttpOnly": None}
        assert second["expires"] is None
        assert second["rest"] == {}

    def test_build_keeps_order(self, records):
        session = build_httpie_session(records)
        assert [c["name"] for c in session["cookies"]] == ["sid", "pref"]

    def test_empty(self):
        assert json.loads(render(export_httpie_session, []))["cookies"] == []


# =============================================================================
# Human-readable
# =============================================================================

class TestHuman:
    """Tests for export_human."""

    def test_single_cookie(self, records):
        assert render(export_human, records[:1]) == (
            ".example.com\n"
            "\n"
            "--------------------\n"
            "\n"
            "Name: sid\n"
            "Value: abc\n"
            "Path: /\n"
            "Secure: true\n"
            "HttpOnly: true\n"
            "SameSite: Lax\n"
            "Expires: Mon, 01 Jan 2024 00:00:00 GMT\n"
            "\n"
            "\n"
        )

    def test_session_cookie(self, records):
        output = render(export_human, records[1:])
        assert "Expires: Session" in output
        assert "SameSite: Unspecified" in output

    def test_grouped_by_domain(self):
        records = [
            CookieRecord(domain="b.org", path="/", name="one", value="1"),
            CookieRecord(domain=".a.com", path="/", name="two", value="2"),
            CookieRecord(domain="b.org", path="/", name="three", value="3"),
        ]
        lines = render(export_human, records).splitlines()
        assert lines[0] == ".a.com"
        assert lines.index("b.org") > lines.index("Name: two")
        # One header per domain, cookies keep their order inside a group
        assert lines.count("b.org") == 1
        assert lines.index("Name: one") < lines.index("Name: three")

    def test_empty(self):
        assert render(export_human, []) == ""


# =============================================================================
# Dispatch
# =============================================================================

class TestExportCookies:
    """Tests for export_cookies."""

    def test_enum_and_name(self, records):
        by_enum = io.StringIO()
        by_name = io.StringIO()
        export_cookies(records, OutputFormat.NETSCAPE, by_enum)
        export_cookies(records, "netscape", by_name)
        assert by_enum.getvalue() == by_name.getvalue()

    def test_httpie_alias(self, records):
        stream = io.StringIO()
        export_cookies(iter(records), "httpie", stream)
        assert len(json.loads(stream.getvalue())["cookies"]) == 2

    def test_unknown_format(self, records):
        with pytest.raises(ValueError):
            export_cookies(records, "har", io.StringIO())
