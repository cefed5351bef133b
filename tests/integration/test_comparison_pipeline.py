"""
End-to-end tests of the comparison pipeline.

The reference document is a real .docx; the landing page sits behind a
click-tracking redirect and is served by aioresponses.
"""

import pytest
from aioresponses import aioresponses
from landingqa.config import GrammarConfig
from landingqa.exceptions import FetchError, InputError, ParseError
from landingqa.pipeline import ComparisonPipeline
from landingqa.protocols import CheckStatus, MatchVerdict, OverallStatus

TRACKED_URL = "https://click.example.net/t/abc123"
LANDING_URL = "https://shop.example.com/spring"

LANDING_HTML = """<!DOCTYPE html>
<html>
<head><meta name="viewport" content="width=device-width, initial-scale=1"></head>
<body>
  <h1>Spring sale starts today for everyone</h1>
  <p>Save twenty percent on every order placed before the end of the month.
     <a href="https://shop.example.com/sale?utm_source=email&amp;utm_campaign=spring">Shop the sale</a></p>
  <p>Garden tools are back in stock this week only</p>
  <img src="https://cdn.example.com/hero.jpg" alt="Spring flowers on a table">
</body>
</html>"""


@pytest.fixture
def reference_docx(make_docx):
    return make_docx(
        [
            ("Spring sale starts today for ", "https://help.example.com/contact", "everyone"),
            (
                "Save twenty percent on every order placed before the end of the month. ",
                "https://shop.example.com/sale",
                "Shop the sale",
            ),
            "Our new catalogue features garden tools and outdoor furniture",
        ]
    )


def _mock_landing(m):
    m.get(TRACKED_URL, status=302, headers={"Location": LANDING_URL, "Set-Cookie": "cid=42; Path=/"})
    m.get(LANDING_URL, status=200, body=LANDING_HTML, content_type="text/html")


@pytest.mark.integration
class TestComparisonPipeline:
    @pytest.mark.asyncio
    async def test_end_to_end_report(self, test_config, reference_docx):
        pipeline = ComparisonPipeline(test_config)
        with aioresponses() as m:
            _mock_landing(m)

            report = await pipeline.run(reference_docx, TRACKED_URL)

        assert report.overall_status is OverallStatus.FAIL
        assert report.page.final_url == LANDING_URL
        assert report.page.redirect_chain == [TRACKED_URL]

        assert len(report.text.matched) == 2
        assert all(result.alignment.f1 == 1.0 for result in report.text.matched)
        assert len(report.text.partial_match) == 0
        assert len(report.text.not_found) == 1
        assert report.text.not_found[0].verdict is MatchVerdict.NOT_FOUND
        assert report.text.not_found[0].block.content.startswith("Our new catalogue")

        assert [link.href for link in report.links.missing] == ["https://help.example.com/contact"]
        sale = next(check for check in report.links.checks if check.doc_href == "https://shop.example.com/sale")
        assert sale.found
        assert sale.utm_in_page

        assert report.images.counts()["OK"] == 1
        assert report.grammar.status is CheckStatus.SKIPPED
        assert report.responsive.status is CheckStatus.OK
        assert report.responsive.responsive is True

    @pytest.mark.asyncio
    async def test_matching_document_passes(self, test_config, tmp_path):
        path = tmp_path / "copy.txt"
        path.write_text(
            "Spring sale starts today for everyone\nhttps://shop.example.com/sale\n\n"
            "Garden tools are back in stock this week only",
            encoding="utf-8",
        )
        pipeline = ComparisonPipeline(test_config)
        with aioresponses() as m:
            _mock_landing(m)

            report = await pipeline.run(path, TRACKED_URL)

        assert report.overall_status is OverallStatus.PASS
        assert report.to_dict()["textComparison"]["summary"]["overallScore"] == 100

    @pytest.mark.asyncio
    async def test_grammar_outage_does_not_fail_comparison(self, test_config, reference_docx):
        test_config.grammar = GrammarConfig(endpoint="https://lt.example.com")
        pipeline = ComparisonPipeline(test_config)
        with aioresponses() as m:
            _mock_landing(m)
            m.post("https://lt.example.com/v2/check", status=503, repeat=True)

            report = await pipeline.run(reference_docx, TRACKED_URL)

        assert report.grammar.status is CheckStatus.UNAVAILABLE
        assert "503" in report.grammar.error
        assert report.to_dict()["grammar"]["status"] == "unavailable"

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self, test_config, reference_docx):
        pipeline = ComparisonPipeline(test_config)
        with aioresponses() as m:
            m.get(TRACKED_URL, status=404)

            with pytest.raises(FetchError) as exc_info:
                await pipeline.run(reference_docx, TRACKED_URL)

        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_parse_failure_propagates(self, test_config, tmp_path):
        path = tmp_path / "broken.docx"
        path.write_bytes(b"not a document")
        with pytest.raises(ParseError):
            await ComparisonPipeline(test_config).run(path, TRACKED_URL)

    @pytest.mark.asyncio
    async def test_invalid_url_rejected(self, test_config, reference_docx):
        with pytest.raises(InputError):
            await ComparisonPipeline(test_config).run(reference_docx, "not a url")
