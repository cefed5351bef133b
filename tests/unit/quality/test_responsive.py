"""Tests for the responsiveness heuristic."""

import pytest
from landingqa.config import ResponsiveConfig
from landingqa.exceptions import AuxiliaryCheckError
from landingqa.protocols import CheckStatus
from landingqa.quality.responsive import ResponsiveChecker

FIXED_HTML = """<html><head><title>Old newsletter</title></head>
<body><table width="800"><tr><td style="width: 700px; color: red">Wide layout</td></tr></table></body></html>"""


@pytest.mark.unit
class TestResponsiveChecker:
    def test_responsive_page(self, landing_html):
        report = ResponsiveChecker().check(landing_html)
        assert report.status is CheckStatus.OK
        assert report.responsive is True
        assert report.has_viewport_meta
        assert report.media_query_count == 1
        assert report.fixed_width_elements == 0
        assert report.verdict.startswith("YES")

    def test_fixed_width_page(self):
        report = ResponsiveChecker().check(FIXED_HTML)
        assert report.responsive is False
        assert not report.has_viewport_meta
        assert report.fixed_width_elements == 2
        assert report.verdict.startswith("NO")

    def test_viewport_without_media_queries_but_fixed_widths(self):
        html = '<html><head><meta name="viewport" content="width=device-width"></head><body><div style="width:900px">x</div></body></html>'
        report = ResponsiveChecker().check(html)
        assert report.has_viewport_meta
        assert report.responsive is False

    def test_width_limit_is_configurable(self):
        report = ResponsiveChecker(ResponsiveConfig(fixed_width_limit=1000)).check(FIXED_HTML)
        assert report.fixed_width_elements == 0

    def test_empty_html_raises(self):
        with pytest.raises(AuxiliaryCheckError):
            ResponsiveChecker().check("   ")

    @pytest.mark.asyncio
    async def test_run_degrades_to_unavailable(self):
        report = await ResponsiveChecker().run("")
        assert report.status is CheckStatus.UNAVAILABLE
        assert report.error

    @pytest.mark.asyncio
    async def test_run_skipped_when_disabled(self, landing_html):
        report = await ResponsiveChecker(ResponsiveConfig(enabled=False)).run(landing_html)
        assert report.status is CheckStatus.SKIPPED
