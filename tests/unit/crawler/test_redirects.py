"""Tests for redirect signal detection and cookie accumulation."""

import pytest
from landingqa.crawler.redirects import CookieJar, find_script_redirect, resolve_redirect


@pytest.mark.unit
class TestFindScriptRedirect:
    @pytest.mark.parametrize(
        "body,expected",
        [
            ('<script>var redirectUrl = "https://a.example.com/x";</script>', ("redirecturl", "https://a.example.com/x")),
            ("<script>window.location.href='https://b.example.com/y';</script>", ("window.location", "https://b.example.com/y")),
            ('<script>window.location = "/relative";</script>', ("window.location", "/relative")),
            (
                "<script>window.location.replace('https://c.example.com/z')</script>",
                ("window.location.replace", "https://c.example.com/z"),
            ),
            (
                '<meta http-equiv="refresh" content="0; url=https://d.example.com/w">',
                ("meta-refresh", "https://d.example.com/w"),
            ),
            ("<META HTTP-EQUIV='Refresh' CONTENT='5;URL=/next'>", ("meta-refresh", "/next")),
        ],
    )
    def test_patterns(self, body, expected):
        assert find_script_redirect(body) == expected

    def test_priority_when_several_patterns_match(self):
        body = (
            '<meta http-equiv="refresh" content="0; url=https://meta.example.com/">'
            "<script>window.location.href='https://script.example.com/';</script>"
        )
        assert find_script_redirect(body) == ("window.location", "https://script.example.com/")

    def test_html_entities_unescaped(self):
        body = '<meta http-equiv="refresh" content="0; url=https://e.example.com/?a=1&amp;b=2">'
        assert find_script_redirect(body) == ("meta-refresh", "https://e.example.com/?a=1&b=2")

    def test_no_redirect(self):
        assert find_script_redirect("<p>Just a page</p>") is None
        assert find_script_redirect("") is None


@pytest.mark.unit
class TestResolveRedirect:
    def test_location_header_wins(self):
        body = "<script>window.location.href='https://ignored.example.com/';</script>"
        target = resolve_redirect("https://a.example.com/start", 302, {"Location": "/landing"}, body)
        assert target == "https://a.example.com/landing"

    def test_redirect_status_without_location_scans_body(self):
        body = "<script>window.location.href='https://x.example.com/y';</script>"
        assert resolve_redirect("https://a.example.com/", 302, {}, body) == "https://x.example.com/y"

    def test_relative_body_target_resolves_against_current_url(self):
        body = '<meta http-equiv="refresh" content="0; url=next/page">'
        assert resolve_redirect("https://a.example.com/dir/start", 301, {}, body) == "https://a.example.com/dir/next/page"

    def test_success_body_not_scanned_by_default(self):
        body = '<meta http-equiv="refresh" content="0; url=https://x.example.com/">'
        assert resolve_redirect("https://a.example.com/", 200, {}, body) is None
        assert resolve_redirect("https://a.example.com/", 200, {}, body, scan_success_bodies=True) == "https://x.example.com/"

    def test_final_response(self):
        assert resolve_redirect("https://a.example.com/", 200, {}, "<p>done</p>") is None
        assert resolve_redirect("https://a.example.com/", 404, {"Location": "/x"}, "") is None


@pytest.mark.unit
class TestCookieJar:
    def test_accumulates_name_value_pairs(self):
        jar = CookieJar()
        jar.update(["a=1; Path=/; HttpOnly"])
        jar.update(["b=2", "c=3; Secure"])
        assert jar.header() == "a=1; b=2; c=3"
        assert jar.names() == ["a", "b", "c"]
        assert len(jar) == 3

    def test_later_value_overrides(self):
        jar = CookieJar()
        jar.update(["session=old", "other=x"])
        jar.update(["session=new"])
        assert jar.header() == "session=new; other=x"

    def test_empty_jar_has_no_header(self):
        jar = CookieJar()
        jar.update(["malformed", "=novalue"])
        assert jar.header() is None
