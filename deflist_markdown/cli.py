"""
Shows how the definition lists of a Markdown file are recognised.
Prints the role of every definition-list line, the reading-view HTML,
or the stylesheet for the configured styling.
"""

from __future__ import annotations

from pathlib import Path

import click
from loguru import logger

from .config import ConfigError, DeflistConfig, build_config
from .document import TextDocument
from .engine import DocumentDecorationEngine, ViewUpdate
from .filesystem import get_max_file_size, normalize_filepath, read_markdown
from .formatter import format_markdown
from .log import configure_logging
from .models import LineRole
from .stylesheet import render_stylesheet

__all__ = ["cli"]

ROLE_LABELS = {
    LineRole.TERM: "term",
    LineRole.DEFINITION_TEXT: "definition",
    LineRole.DEFINITION_LIST_ITEM: "definition-list-item",
    LineRole.PLAIN: "plain",
}


def describe_roles(content: str) -> list[str]:
    """Return one ``number<TAB>role<TAB>text`` row per definition-list line."""
    document = TextDocument.from_text(content)
    engine = DocumentDecorationEngine(document)
    engine.update(ViewUpdate.scroll(document))
    return [
        f"{line.number}\t{ROLE_LABELS[role]}\t{line.text}"
        for line, role in engine.roles()
        if role is not None
    ]


def _read_input(filepath: str, config: DeflistConfig) -> str:
    base_dir = Path.cwd().resolve()
    try:
        path = normalize_filepath(filepath, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        return read_markdown(path, max_file_size)
    except IOError as error:
        raise click.ClickException(str(error)) from error


@click.command()
@click.version_option(package_name="deflist-markdown")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["roles", "html", "css"]),
    default="roles",
    show_default=True,
    help="What to print",
)
@click.option("--term-color", help="Term colour as #rrggbb")
@click.option("--bold/--no-bold", "term_bold", default=None, help="Bold terms")
@click.option("--italic/--no-italic", "term_italic", default=None, help="Italic terms")
@click.option("--indentation", "definition_indentation", type=int, help="Definition indentation in pixels")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (repeatable)")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False), required=False)
def cli(
    filepath: str | None,
    output_format: str = "roles",
    term_color: str | None = None,
    term_bold: bool | None = None,
    term_italic: bool | None = None,
    definition_indentation: int | None = None,
    verbose: int = 0,
):
    """
    Entry point for inspecting the definition lists of a Markdown file.

    Args:
        filepath: Path to the Markdown file to process; not needed for ``css``.
        output_format: ``roles``, ``html`` or ``css``.
        term_color: Override for the term colour.
        term_bold: Override for bold terms.
        term_italic: Override for italic terms.
        definition_indentation: Override for the definition indentation.
        verbose: Log verbosity.

    Raises:
        click.BadParameter: If the path or configuration overrides are invalid.
        click.ClickException: If the file cannot be read safely.
        click.UsageError: If no file is given for ``roles`` or ``html``.

    Examples:
        deflist-markdown glossary.md
        deflist-markdown --format css --no-bold --indentation 20
    """
    if verbose:
        configure_logging(verbose)

    search_path = Path(filepath).resolve().parent if filepath else Path.cwd()
    try:
        config = build_config(
            search_path,
            term_color=term_color,
            term_bold=term_bold,
            term_italic=term_italic,
            definition_indentation=definition_indentation,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    if output_format == "css":
        click.echo(render_stylesheet(config), nl=False)
        return

    if filepath is None:
        raise click.UsageError(f"FILEPATH is required for --format {output_format}")

    content = _read_input(filepath, config)
    logger.info("Read {} characters from {}", len(content), filepath)

    if output_format == "html":
        click.echo(format_markdown(content))
        return

    for row in describe_roles(content):
        click.echo(row)


if __name__ == "__main__":
    cli()
