"""Tomboy XML rendering and write layer."""

import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from .models import ExportOptions, ExportReport, Note

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".note"
NOTEBOOK_PREFIX = "system:notebook:"
TOMBOY_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"

NOTE_HEADER = (
    '<note version="0.3"'
    ' xmlns:link="http://beatniksoftware.com/tomboy/link"'
    ' xmlns:size="http://beatniksoftware.com/tomboy/size"'
    ' xmlns="http://beatniksoftware.com/tomboy">\n'
)

# Layout fields Tomboy expects in every note
NOTE_FOOTER = (
    "\t<cursor-position>0</cursor-position>\n"
    "\t<width>450</width>\n"
    "\t<height>360</height>\n"
    "\t<x>0</x>\n"
    "\t<y>0</y>\n"
    "\t<open-on-startup>False</open-on-startup>\n"
    "</note>\n"
)

_XML_ESCAPES = {
    "&": "&amp;",
    '"': "&quot;",
    "'": "&apos;",
    "<": "&lt;",
    ">": "&gt;",
}


class NoteExportError(Exception):
    """Base exception for notes that cannot be exported."""
    pass


class MissingUidError(NoteExportError):
    """Note has no unique identifier to name its file."""
    pass


class NoteWriteError(NoteExportError):
    """Note file could not be created."""
    pass


def escape_xml(text: str) -> str:
    """Escape a string for use as XML element content.

    Only the five XML special characters are replaced; everything else is
    passed through unchanged.
    """
    return "".join(_XML_ESCAPES.get(ch, ch) for ch in text)


def format_tomboy_date(dt: datetime | None) -> str:
    """Format a timestamp the way Tomboy stores it.

    Notes without a creation time get the Unix epoch in local time.
    """
    if dt is None:
        dt = datetime.fromtimestamp(0)
    return dt.strftime(TOMBOY_DATE_FORMAT)


def render_note(note: Note, tags_to_notebooks: bool = False) -> str:
    """Render a note as a Tomboy XML document.

    Args:
        note: The note to render
        tags_to_notebooks: If True, tags are emitted as Tomboy notebooks

    Returns:
        The complete XML document
    """
    # The export only has a creation time, so it fills all three dates
    datestr = format_tomboy_date(note.creation_time)
    prefix = NOTEBOOK_PREFIX if tags_to_notebooks else ""

    parts = [
        NOTE_HEADER,
        f"\t<title>{escape_xml(note.title)}</title>\n",
        '\t<text xml:space="preserve"><note-content version="0.1">'
        f"{escape_xml(note.body)}</note-content></text>\n",
        f"\t<last-change-date>{datestr}</last-change-date>\n",
        f"\t<last-metadata-change-date>{datestr}</last-metadata-change-date>\n",
        f"\t<create-date>{datestr}</create-date>\n",
        "\t<tags>\n",
    ]
    for tag in note.tags:
        parts.append(f"\t\t<tag>{prefix}{escape_xml(tag)}</tag>\n")
    parts.append("\t</tags>\n")
    parts.append(NOTE_FOOTER)
    return "".join(parts)


def note_path(note: Note, output_dir: Path) -> Path:
    """Return the path a note is written to."""
    return Path(output_dir) / f"{note.uid}{NOTE_SUFFIX}"


def write_note(note: Note, options: ExportOptions) -> Path | None:
    """Write a single note into the output directory.

    Returns:
        The path of the written file, or None if the note was empty

    Raises:
        MissingUidError: If the note has no uid
        NoteWriteError: If the file cannot be created
    """
    if not note.body:
        logger.info("Skipping empty note %r", note.title)
        return None

    if not note.uid:
        raise MissingUidError(f"Note {note.title!r} does not have UID")

    path = note_path(note, options.output)
    # Written files end with a blank line after </note>
    content = render_note(note, tags_to_notebooks=options.tags_to_notebooks) + "\n"
    try:
        path.write_text(content, encoding="utf-8", errors="surrogateescape")
    except OSError as e:
        raise NoteWriteError(f"Failed to create file {path}: {e}") from e

    logger.debug("Wrote %s", path)
    return path


def write_notes(notes: Iterable[Note], options: ExportOptions) -> ExportReport:
    """Write every note, reporting failures without stopping.

    Args:
        notes: Parsed notes, in export order
        options: Run options (output directory, notebook conversion)

    Returns:
        Counts of written, skipped and failed notes
    """
    report = ExportReport()
    for note in notes:
        try:
            path = write_note(note, options)
        except NoteExportError as e:
            logger.error("Failed to create note: %s", e)
            report.failed += 1
            continue

        if path is None:
            report.skipped_empty += 1
        else:
            report.written.append(path)

    return report
