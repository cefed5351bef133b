"""
Shared test configuration for LandingQA.

Provides isolated configuration, an initialized HTTP client, deterministic
backoff and small HTML/document builders used across the suite.
"""

# Standard library imports
import asyncio
from pathlib import Path
from typing import AsyncGenerator

# Third-party imports
import pytest
import pytest_asyncio
from docx import Document
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn

# Local imports
from landingqa.config import Config, GrammarConfig, WebConfig
from landingqa.crawler.http_client import HttpClient

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")
    config.addinivalue_line("markers", "network: Tests requiring network access")


# ============================================================================
# Core Test Fixtures
# ============================================================================


@pytest_asyncio.fixture(autouse=True)
async def cleanup_tasks() -> AsyncGenerator[None, None]:
    """Cancel any asyncio tasks a test leaves behind."""
    tasks_before = asyncio.all_tasks()
    yield
    for task in asyncio.all_tasks() - tasks_before:
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Configuration with short backoff, no grammar service and a private upload directory."""
    config = Config(
        web=WebConfig(upload_dir=tmp_path / "uploads"),
        grammar=GrammarConfig(enabled=False),
    )
    config.crawler.timeout = 5.0
    config.crawler.backoff_base_seconds = 0.01
    config.crawler.user_agent = "TestBot/1.0"
    return config


@pytest_asyncio.fixture
async def http_client(test_config: Config) -> AsyncGenerator[HttpClient, None]:
    """Initialized HTTP client using the test configuration."""
    client = HttpClient(test_config)
    await client.initialize()
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def deterministic_jitter():
    """Make backoff jitter deterministic for testing."""
    from unittest.mock import patch

    with patch("random.uniform", return_value=1.0):
        yield


# ============================================================================
# Content Fixtures
# ============================================================================


@pytest.fixture
def landing_html() -> str:
    """A small email landing page with text, links and images."""
    return """<!DOCTYPE html>
<html>
<head>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Spring Sale</title>
  <style>@media (max-width: 600px) { .hero { width: 100%; } }</style>
  <script>var tracking = "ignore me completely";</script>
</head>
<body>
  <h1>Spring sale starts today</h1>
  <p>Save twenty percent on every order placed before the end of the month.</p>
  <p>Free shipping on all orders over fifty dollars.</p>
  <a href="https://shop.example.com/sale?utm_source=email&amp;utm_medium=newsletter">Shop the sale</a>
  <a href="/account">My account</a>
  <img src="https://cdn.example.com/hero.jpg" alt="Spring flowers on a table">
  <img src="https://track.example.com/open/tracking-pixel.gif" width="1" height="1" alt="">
</body>
</html>"""


def add_hyperlink(paragraph, url: str, text: str) -> None:
    """Append a ``w:hyperlink`` with one run to a python-docx paragraph."""
    r_id = paragraph.part.relate_to(url, RT.HYPERLINK, is_external=True)
    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), r_id)
    run = OxmlElement("w:r")
    text_element = OxmlElement("w:t")
    text_element.text = text
    run.append(text_element)
    hyperlink.append(run)
    paragraph._p.append(hyperlink)


@pytest.fixture
def make_docx(tmp_path: Path):
    """Build a .docx from paragraphs; ``(text, url)`` tuples become hyperlinks."""

    def _make(paragraphs, name: str = "reference.docx", table_rows=None) -> Path:
        document = Document()
        for item in paragraphs:
            if isinstance(item, tuple):
                prefix, url, link_text = item
                paragraph = document.add_paragraph(prefix)
                add_hyperlink(paragraph, url, link_text)
            else:
                document.add_paragraph(item)
        if table_rows:
            table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
            for row, values in zip(table.rows, table_rows):
                for cell, value in zip(row.cells, values):
                    cell.text = value
        path = tmp_path / name
        document.save(str(path))
        return path

    return _make
