"""Command-line entry point for the ``notiondocs`` exporter.

Exports a Notion page tree (or a database) into a Docusaurus ``docs``
directory::

    notiondocs -t "$NOTION_TOKEN" -r <root page id> -o ./docs
    notiondocs -r <database id> --database -o ./docs --assets ./static

Exit codes: ``0`` on success, ``1`` when the export aborts, ``2`` on
invalid usage.
"""

from __future__ import annotations

import logging
from typing import Optional

import typer

from notiondocs.config import ExportConfig
from notiondocs.context import ExportContext
from notiondocs.errors import NotiondocsError
from notiondocs.exporter import TreeExporter
from notiondocs.observability import configure_logging, get_logger

app = typer.Typer(
    name="notiondocs",
    help="Export a Notion page tree as Docusaurus Markdown.",
    add_completion=False,
    rich_markup_mode=None,
)

log = get_logger("notiondocs.cli")

EXIT_EXPORT_FAILED = 1
EXIT_USAGE = 2


def _configure_logging(verbosity: int) -> None:
    """Map ``-v`` count to a level: 0=WARNING, 1=INFO, 2+=DEBUG."""
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    configure_logging(level)


@app.command()
def export(
    token: str = typer.Option(
        "",
        "--token",
        "-t",
        envvar="NOTION_TOKEN",
        help="Notion integration token.",
        show_default=False,
    ),
    root: str = typer.Option(
        "",
        "--root",
        "-r",
        help="Id of the root page (or database with --database).",
        metavar="ID",
    ),
    output: str = typer.Option("./output", "--output", "-o", help="Output directory."),
    docs: str = typer.Option("/docs", "--docs", help="Docs root prefixed to absolute slugs."),
    assets: str = typer.Option("./static", "--assets", help="Static assets directory."),
    database: bool = typer.Option(
        False,
        "--database",
        help="Treat --root as a database and export its rows.",
    ),
    no_images: bool = typer.Option(
        False,
        "--no-images",
        help="Keep remote image URLs instead of downloading images.",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v INFO, -vv DEBUG).",
    ),
) -> None:
    """Export the tree below --root into --output."""
    _configure_logging(verbose)

    if not token or not root:
        typer.echo("Error: both --token and --root are required.", err=True)
        raise typer.Exit(EXIT_USAGE)

    try:
        config = ExportConfig(
            token=token,
            docs_root=docs,
            assets_dir=assets,
            download_images=not no_images,
        )
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(EXIT_USAGE)

    try:
        with ExportContext.create(config) as ctx:
            result = TreeExporter(ctx).export(
                root,
                output,
                root_type="database" if database else "page",
            )
    except NotiondocsError as exc:
        log.error(
            "Export failed",
            extra={"extra_fields": {"code": exc.code, "error": exc.message}},
        )
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(EXIT_EXPORT_FAILED)

    typer.echo(f"Exported {result.pages_written} page(s) to {result.output_dir}")
    if result.warnings:
        typer.echo(f"{len(result.warnings)} warning(s); rerun with -v for details.", err=True)


def main(argv: Optional[list[str]] = None) -> None:
    """Console-script entry point."""
    app(args=argv, prog_name="notiondocs")
