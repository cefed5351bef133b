"""Command-line interface for LandingQA."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
import structlog
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from landingqa import __version__
from landingqa.config import Config, settings
from landingqa.exceptions import LandingQAError
from landingqa.observability import configure_logging
from landingqa.pipeline import ComparisonPipeline
from landingqa.report import ComparisonReport

console = Console()
logger = structlog.get_logger(__name__)

_STATUS_STYLES = {
    "PASS": "bold green",
    "FAIL": "bold red",
    "FULL MATCH": "green",
    "PARTIAL MATCH": "yellow",
    "NOT FOUND": "red",
}


def _load_config(config_path: Optional[Path], log_level: Optional[str]) -> Config:
    config = Config.from_yaml(config_path) if config_path else Config.model_validate(settings.model_dump())
    if log_level:
        config.monitoring.log_level = log_level
    return config


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """LandingQA - compare a reference document against a live landing page."""
    ctx.ensure_object(dict)
    loaded = _load_config(Path(config) if config else None, log_level)
    ctx.obj["config"] = loaded
    configure_logging(loaded.monitoring)


@cli.command()
@click.option("--host", default=None, help="Host to bind the API server to")
@click.option("--port", default=None, type=int, help="Port to bind the API server to")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Start the HTTP API."""
    from landingqa.web import run_web_server

    config: Config = ctx.obj["config"]
    console.print(
        f"[blue]Starting LandingQA API on http://{host or config.web.host}:{port or config.web.port}[/blue]"
    )
    run_web_server(config, host=host, port=port)


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("url")
@click.option("--json", "as_json", is_flag=True, help="Print the full report as JSON")
@click.pass_context
def check(ctx: click.Context, document: Path, url: str, as_json: bool) -> None:
    """Compare DOCUMENT against the landing page at URL."""
    config: Config = ctx.obj["config"]
    pipeline = ComparisonPipeline(config)

    try:
        report = asyncio.run(pipeline.run(document, url))
    except LandingQAError as e:
        console.print(f"[red]Comparison failed: {e}[/red]")
        sys.exit(2)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report)

    sys.exit(0 if report.overall_status.value == "PASS" else 1)


def _print_report(report: ComparisonReport) -> None:
    data = report.to_dict()
    text: Dict[str, Any] = data["textComparison"]
    links: Dict[str, Any] = data["linkComparison"]
    images: Dict[str, Any] = data["imageAudit"]

    status = data["overallStatus"]
    console.print(
        Panel.fit(
            f"[{_STATUS_STYLES[status]}]{status}[/{_STATUS_STYLES[status]}]\n"
            f"Final URL: {escape(data['finalUrl'])}\n"
            f"Text score: {text['summary']['overallScore']}%",
            title="LandingQA",
        )
    )

    table = Table(title="Text Comparison")
    table.add_column("Status")
    table.add_column("Match", justify="right")
    table.add_column("Reference text", overflow="fold")
    for bucket in ("matched", "partialMatch", "notFound"):
        for block in text["details"][bucket]:
            style = _STATUS_STYLES[block["status"]]
            table.add_row(
                f"[{style}]{block['status']}[/{style}]",
                f"{block['matchPercentage']}%",
                escape(block["originalText"]),
            )
    console.print(table)

    if links["details"]:
        link_table = Table(title="Links")
        link_table.add_column("Text")
        link_table.add_column("Href", overflow="fold")
        link_table.add_column("On page")
        for link in links["details"]:
            color = "green" if link["foundOnPage"] == "YES" else "red"
            link_table.add_row(
                escape(link["text"]),
                escape(link["docHref"]),
                f"[{color}]{link['foundOnPage']}[/{color}]",
            )
        console.print(link_table)

    flagged = [image for image in images["details"] if image["status"] != "OK"]
    if flagged:
        image_table = Table(title="Image Alt Text")
        image_table.add_column("Status")
        image_table.add_column("Severity")
        image_table.add_column("Source", overflow="fold")
        for image in flagged:
            image_table.add_row(image["status"], image["severity"] or "", escape(image["src"]))
        console.print(image_table)

    console.print(f"Grammar: {data['grammar']['status']}  Responsive: {data['responsive']['status']}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
