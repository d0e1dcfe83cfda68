"""CLI for ImageInsight.

Commands:
    analyze <path>   - Analyze an image (text, faces, objects, barcodes, saliency)
    categories       - List the analysis categories and their request tokens
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from image_insight.errors import AnalysisError
from image_insight.models.enums import AnalysisCategory
from image_insight.models.features import AnalysisResults
from image_insight.reporting.formatter import build_structured_view, summarize
from image_insight.services.analyzer import VisionAnalyzer
from image_insight.tools.vision_tool import vision_analyze_image
from image_insight.utils.categories import VALID_TOKENS

app = typer.Typer(
    name="image-insight",
    help="ImageInsight: structured, ranked feature extraction from still images",
    no_args_is_help=True,
)
console = Console()


def run_async(coro):
    """Run an async coroutine in sync context."""
    return asyncio.run(coro)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.command()
def analyze(
    path: Annotated[str, typer.Argument(help="Image path or file:// URI")],
    types: Annotated[
        list[str] | None,
        typer.Option(
            "--type",
            "-t",
            help="Analysis type (repeatable or comma-separated): " + ", ".join(VALID_TOKENS),
        ),
    ] = None,
    no_confidence: Annotated[
        bool, typer.Option("--no-confidence", help="Hide confidence scores")
    ] = False,
    report: Annotated[
        bool, typer.Option("--report", help="Print the text report the LLM tool returns")
    ] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of tables")] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logging")
    ] = False,
):
    """Analyze one image.

    Runs the pipeline: preprocess → extract per category → rank text → format.
    """
    configure_logging(verbose)
    requested = types or [c.value for c in AnalysisCategory]
    include_confidence = not no_confidence

    if report:
        envelope = run_async(vision_analyze_image(path, requested, include_confidence))
        if as_json:
            console.print_json(envelope.model_dump_json())
        else:
            console.print(envelope.prompt_representation(), markup=False)
        if not envelope.is_success:
            raise typer.Exit(1)
        return

    try:
        results = run_async(VisionAnalyzer().analyze(path, requested, include_confidence))
    except AnalysisError as e:
        console.print(f"[red]Error ({e.kind.value}):[/red] {e.message}")
        raise typer.Exit(1) from e

    if as_json:
        console.print_json(build_structured_view(results).model_dump_json())
        return

    _print_results(Path(path).name, results)


@app.command()
def categories():
    """List analysis categories and the request tokens that select them."""
    table = Table(title="Analysis Categories")
    table.add_column("Category")
    table.add_column("Tokens")
    table.add_column("Description")

    tokens_for = {
        AnalysisCategory.OBJECTS_AND_SCENES: "objects, scenes",
    }
    for category in AnalysisCategory:
        table.add_row(
            category.display_name,
            tokens_for.get(category, category.value),
            category.description,
        )

    console.print(table)


def _print_results(name: str, results: AnalysisResults) -> None:
    size = results.image_size
    header = [f"[bold]Summary:[/bold] {summarize(results)}"]
    if size:
        header.append(f"[bold]Size:[/bold] {size.width}x{size.height}")
    header.append(f"[bold]Items:[/bold] {results.result_count}")
    console.print(Panel("\n".join(header), title=f"Image: {name}"))

    show_confidence = results.include_confidence
    requested = results.requested

    if AnalysisCategory.TEXT in requested and results.text:
        table = Table(title="Text (by prominence)")
        table.add_column("Priority", justify="right")
        table.add_column("Text")
        table.add_column("~pt", justify="right")
        if show_confidence:
            table.add_column("Confidence", justify="right")
        for item in results.text:
            row = [
                str(item.priority),
                item.text,
                f"{item.estimated_point_size:.0f}" if item.estimated_point_size else "-",
            ]
            if show_confidence:
                row.append(f"{item.confidence_percent}%")
            table.add_row(*row)
        console.print(table)

    if AnalysisCategory.FACES in requested and results.faces:
        table = Table(title="Faces")
        table.add_column("#", justify="right")
        table.add_column("Box (x, y, w, h)")
        table.add_column("Landmarks")
        for index, face in enumerate(results.faces, start=1):
            box = face.box
            landmarks = ", ".join(face.landmarks.detected_names()) if face.landmarks else "-"
            table.add_row(
                str(index),
                f"{box.x:.2f}, {box.y:.2f}, {box.width:.2f}, {box.height:.2f}",
                landmarks or "-",
            )
        console.print(table)

    if AnalysisCategory.OBJECTS_AND_SCENES in requested and results.objects:
        table = Table(title="Objects & Scenes")
        table.add_column("Label")
        table.add_column("Confidence", justify="right")
        for obj in sorted(results.objects, key=lambda o: o.confidence, reverse=True):
            table.add_row(obj.display_name, f"{obj.confidence_percent}%" if show_confidence else "-")
        console.print(table)

    if AnalysisCategory.BARCODES in requested and results.barcodes:
        table = Table(title="Barcodes")
        table.add_column("Symbology")
        table.add_column("Payload")
        for code in results.barcodes:
            table.add_row(code.symbology_display_name, code.payload)
        console.print(table)

    if AnalysisCategory.SALIENCY in requested and results.saliency:
        console.print(
            f"[bold]Salient regions:[/bold] {results.salient_region_count}"
        )

    for category, message in results.failures.items():
        console.print(f"[yellow]{category.display_name} failed:[/yellow] {message}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
