"""Command line interface for htmldocs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from htmldocs.build.builder import BuildStats, DocsBuilder, OutputCollisionError, find_orphans
from htmldocs.config import DEFAULT_SOURCE_DIR, DocsConfig
from htmldocs.utils.files import primary_page
from htmldocs.web.app import app as web_app


console = Console()
app = typer.Typer(help="htmldocs - build an HTML site from Markdown docs")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_config(
    source: Path,
    output: Optional[Path],
    template: Optional[Path] = None,
    **options: bool,
) -> DocsConfig:
    config = DocsConfig(source_dir=source, output_dir=output, template_path=template, **options)
    return config.resolve(Path.cwd())


def _print_orphans(orphans: list[str]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Orphaned page")
    for name in orphans:
        table.add_row(name)
    console.print(table)


def _print_summary(stats: BuildStats) -> None:
    console.print(
        f"Processed: {stats.processed}, created: {stats.created}, "
        f"updated: {stats.updated}, rewritten: {stats.rewritten}, "
        f"failed: {len(stats.failed)}"
    )
    for path in stats.failed:
        console.print(f"[red]Failed:[/red] {path}")
    for path in stats.rewrite_failed:
        console.print(f"[red]Link rewrite failed:[/red] {path}")
    for name in stats.collisions:
        console.print(f"[yellow]Collision:[/yellow] several sources write {name}")
    if stats.orphans:
        console.print(f"[yellow]{len(stats.orphans)} orphaned page(s) found:[/yellow]")
        _print_orphans(stats.orphans)
    else:
        console.print("No orphaned pages.")


@app.command()
def build(
    source: Path = typer.Option(DEFAULT_SOURCE_DIR, "--source", "-s", help="Markdown docs root"),
    output: Path = typer.Option(None, "--output", "-o", help="Output directory (default: <source>/html-docs)"),
    template: Path = typer.Option(None, "--template", "-t", help="HTML page template"),
    backup: bool = typer.Option(False, "--backup", help="Snapshot the output directory first"),
    flatten_links: bool = typer.Option(False, "--flatten-links", help="Point links at flat page names"),
    strict: bool = typer.Option(False, "--strict", help="Fail when two sources share a page name"),
    fail_on_error: bool = typer.Option(False, "--fail-on-error", help="Exit 1 if any file failed"),
    open_output: bool = typer.Option(False, "--open", help="Open the result when done"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Convert Markdown docs to HTML and rewrite cross-references."""
    _setup_logging(verbose)
    config = _build_config(
        source,
        output,
        template,
        backup=backup,
        verbose=verbose,
        flatten_links=flatten_links,
        strict_collisions=strict,
    )

    console.print(f"Building [bold]{config.source_dir}[/bold] into [bold]{config.output_dir}[/bold]...")
    try:
        stats = DocsBuilder(config).build()
    except FileNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="--source") from exc
    except OutputCollisionError as exc:
        raise typer.BadParameter(str(exc), param_hint="--strict") from exc

    _print_summary(stats)

    if open_output:
        target = primary_page(config.output_dir) or config.output_dir
        typer.launch(str(target))

    if fail_on_error and not stats.ok:
        raise typer.Exit(code=1)


@app.command()
def orphans(
    source: Path = typer.Option(DEFAULT_SOURCE_DIR, "--source", "-s", help="Markdown docs root"),
    output: Path = typer.Option(None, "--output", "-o", help="Output directory"),
) -> None:
    """List generated pages that no longer have a source file."""
    config = _build_config(source, output)
    if not config.output_dir.exists():
        console.print("[yellow]Output directory not found, nothing to check.[/yellow]")
        return
    try:
        names = find_orphans(config)
    except FileNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="--source") from exc

    if not names:
        console.print("No orphaned pages.")
        return
    _print_orphans(names)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    source: Path = typer.Option(DEFAULT_SOURCE_DIR, "--source", "-s", help="Markdown docs root"),
    output: Path = typer.Option(None, "--output", "-o", help="Output directory"),
) -> None:
    """Preview the generated pages in a browser."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    config = _build_config(source, output)
    if not config.output_dir.exists():
        console.print("[yellow]Warning: output directory not found, run 'build' first.[/yellow]")

    web_app.state.config = config
    console.print(f"Serving {config.output_dir} on http://{host}:{port}")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
