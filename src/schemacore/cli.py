"""Command-line interface for SchemaCore."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any, Dict, Optional

import click
import structlog
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from schemacore import __version__
from schemacore.config import Config, find_config_file
from schemacore.extractor import DurationUnit, ExtractionEngine, ExtractionReport, iso_duration_to_seconds
from schemacore.extractor.durations import normalize_duration
from schemacore.observability import configure_logging

console = Console()
logger = structlog.get_logger(__name__)


def load_config(config_path: Optional[Path]) -> Config:
    if config_path is not None:
        return Config.from_yaml(config_path)
    found = find_config_file()
    if found is not None:
        return Config.from_yaml(found)
    return Config()


def render_report_table(report: ExtractionReport) -> None:
    summary = Table(title="Content Analysis")
    summary.add_column("Field", style="cyan")
    summary.add_column("Value", style="magenta")

    summary.add_row("resource type", report.resource_type.value)
    summary.add_row("interactivity", report.interactivity_type.value)
    summary.add_row("time required", report.time_required or "-")
    if report.video:
        summary.add_row("video", report.video.content_url or report.video.embed_url or report.video.platform.value)
        summary.add_row("video duration", str(report.video.duration_seconds or "-"))
    else:
        summary.add_row("video", "-")
    summary.add_row("chapters", str(len(report.chapters)))
    summary.add_row("transcript", f"{len(report.transcript)} chars" if report.transcript else "-")
    for key, value in report.signals.to_dict().items():
        summary.add_row(f"signals.{key}", str(value))
    console.print(summary)

    if report.steps:
        render_steps_table(report)

    if report.chapters:
        chapters = Table(title="Chapters")
        chapters.add_column("#", style="cyan")
        chapters.add_column("Start", style="green")
        chapters.add_column("Name")
        for chapter in report.chapters:
            chapters.add_row(str(chapter.position), str(chapter.start_offset_seconds), chapter.name)
        console.print(chapters)


def render_steps_table(report: ExtractionReport) -> None:
    table = Table(title="Steps")
    table.add_column("#", style="cyan")
    table.add_column("Name", style="magenta")
    table.add_column("Text")
    for step in report.steps:
        table.add_row(str(step.position), step.name or "", step.text)
    console.print(table)


def emit_json(data: Dict[str, Any], output: Optional[str]) -> None:
    formatted = json.dumps(data, indent=2, ensure_ascii=False)
    click.echo(formatted)
    if output:
        Path(output).write_text(formatted, encoding="utf-8")
        console.print(f"[green]Report saved to {output}[/green]")


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """SchemaCore - extract steps, videos, chapters and labels from rich-text content."""
    ctx.ensure_object(dict)
    try:
        loaded = load_config(Path(config) if config else None)
    except (ValidationError, FileNotFoundError) as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    if log_level:
        loaded.monitoring.log_level = log_level
    configure_logging(loaded.monitoring)
    ctx.obj["config"] = loaded


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--permalink", help="Page URL used for chapter deep links")
@click.option("--image", "principal_image", help="Fallback thumbnail for the video")
@click.option("--no-resolve", is_flag=True, help="Skip video duration and oEmbed lookups")
@click.option("--output", "-o", type=click.Path(), help="Write the JSON report to a file")
@click.option(
    "--format",
    "output_format",
    default="json",
    type=click.Choice(["json", "table"]),
    help="Output format",
)
@click.pass_context
def analyze(
    ctx: click.Context,
    source: IO[str],
    permalink: Optional[str],
    principal_image: Optional[str],
    no_resolve: bool,
    output: Optional[str],
    output_format: str,
) -> None:
    """Run every extractor over a content file (use - for stdin)."""
    content = source.read()
    logger.debug("Analyzing content", source=getattr(source, "name", "-"), length=len(content))
    with ExtractionEngine.from_settings(ctx.obj["config"]) as engine:
        report = engine.analyze(
            content,
            permalink=permalink,
            principal_image=principal_image,
            resolve_video=not no_resolve,
        )

    if output_format == "table":
        render_report_table(report)
    else:
        emit_json(report.to_dict(), output)


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option(
    "--format",
    "output_format",
    default="table",
    type=click.Choice(["json", "table"]),
    help="Output format",
)
@click.pass_context
def steps(ctx: click.Context, source: IO[str], output_format: str) -> None:
    """Extract instructional steps from a content file."""
    engine = ExtractionEngine(settings=ctx.obj["config"].extraction)
    found = engine.extract_steps(source.read())

    if output_format == "json":
        emit_json({"steps": [step.to_dict() for step in found]}, None)
    elif not found:
        console.print("[yellow]No steps found[/yellow]")
    else:
        render_steps_table(ExtractionReport(steps=found))


@cli.command()
@click.argument("value")
@click.option(
    "--unit",
    default=DurationUnit.MINUTES.value,
    type=click.Choice([unit.value for unit in DurationUnit]),
    help="Unit assumed for bare numbers",
)
def duration(value: str, unit: str) -> None:
    """Normalize a duration (number, HH:MM:SS, free text or ISO) to ISO-8601."""
    iso = normalize_duration(value, DurationUnit(unit))
    click.echo(f"{iso}\t{iso_duration_to_seconds(iso)}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
