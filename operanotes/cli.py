"""CLI entry point for Opera note exporter."""

import logging
from pathlib import Path

import click

from . import __version__
from . import parser
from . import tomboy
from .models import ExportOptions


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr; INFO and up by default, DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


@click.command()
@click.version_option(version=__version__, prog_name="opera-note-exporter")
@click.argument("input", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "--export-trash",
    type=bool,
    default=False,
    show_default=True,
    help="If true, notes in the trash folder are exported too",
)
@click.option("--tag", default="", help="Tag which is added to all exported notes")
@click.option(
    "--tags-to-notebooks",
    type=bool,
    default=False,
    show_default=True,
    help="If true, tags are converted to Tomboy notebooks",
)
@click.option("--verbose", "-v", is_flag=True, help="Also show per-line and per-file debug messages")
def main(
    input: Path,
    output: Path,
    export_trash: bool,
    tag: str,
    tags_to_notebooks: bool,
    verbose: bool,
):
    """Convert an Opera notes export (INPUT) into Tomboy notes in OUTPUT.

    OUTPUT must be an existing directory; each note is written there
    as <uid>.note.
    """
    setup_logging(verbose)

    options = ExportOptions(
        input=input,
        output=output,
        export_trash=export_trash,
        default_tag=tag,
        tags_to_notebooks=tags_to_notebooks,
    )

    try:
        notes = parser.parse_export(options)
    except parser.InputFileError as e:
        raise click.ClickException(str(e))
    except parser.ExportParseError as e:
        raise click.ClickException(f"Parse error: {e}")

    report = tomboy.write_notes(notes, options)
    click.echo(
        f"Exported {len(report.written)} notes to {output} "
        f"({report.skipped_empty} empty skipped, {report.failed} failed)"
    )


if __name__ == "__main__":
    main()
