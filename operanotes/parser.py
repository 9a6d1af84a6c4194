"""Line parser for Opera Hotlist notes exports (notes.adr)."""

import logging
from collections.abc import Iterable
from pathlib import Path

from .models import NO_TITLE, ExportOptions, Note, ParseState

logger = logging.getLogger(__name__)

# Record markers and property names used by the export
FOLDER_MARKER = "#FOLDER"
NOTE_MARKER = "#NOTE"
PROP_TRASH_FOLDER = "TRASH FOLDER"
PROP_UNIQUEID = "UNIQUEID"
PROP_NAME = "NAME"
PROP_CREATED = "CREATED"

# Separator inside NAME values; a doubled STX is a line break in the body
STX = "\x02"

MAX_TIMESTAMP = 2**32 - 1


class ExportParseError(Exception):
    """Base exception for errors that abort parsing of an export."""
    pass


class InputFileError(ExportParseError):
    """Export file could not be opened."""
    pass


class InvalidTimestampError(ExportParseError):
    """CREATED value is not an unsigned 32-bit integer."""

    def __init__(self, line_no: int, value: str):
        super().__init__(f"Line {line_no}: invalid CREATED timestamp {value!r}")
        self.line_no = line_no
        self.value = value


class OrphanPropertyError(ExportParseError):
    """A note property appeared before any #NOTE marker."""

    def __init__(self, line_no: int, prop: str):
        super().__init__(f"Line {line_no}: {prop} found before any {NOTE_MARKER} record")
        self.line_no = line_no
        self.prop = prop


def property_name(line: str) -> str:
    """Get the name of the property on the line.

    The name is everything before the first '=', after skipping one leading
    tab. A line without '=' is all name.
    """
    if line.startswith("\t"):
        line = line[1:]
    return line.partition("=")[0]


def property_value(line: str) -> str:
    """Get the value of the property on the line, or '' if there is no '='."""
    return line.partition("=")[2]


def classify_line(line: str) -> tuple[str, str]:
    """Split a raw export line into (property name, property value)."""
    line = line.rstrip("\r\n")
    return property_name(line), property_value(line)


def parse_folder_name(value: str) -> str:
    """Return the first non-empty STX-separated token of a folder NAME value."""
    for token in value.split(STX):
        if token:
            return token
    return ""


def parse_note_title(value: str) -> str:
    """Return the note title from a NAME value.

    The title is the text before the first STX byte. Values without any STX
    byte have no title part and get the placeholder.
    """
    if STX not in value:
        return NO_TITLE
    for token in value.split(STX):
        if token:
            return token
    return NO_TITLE


def parse_note_body(value: str) -> str:
    """Return the note body from a NAME value, doubled STX becoming newlines."""
    return value.replace(STX * 2, "\n")


def parse_timestamp(value: str, line_no: int) -> int:
    """Parse a CREATED value as Unix epoch seconds.

    Raises:
        InvalidTimestampError: If the value is not an unsigned 32-bit integer
    """
    if not (value.isascii() and value.isdigit()):
        raise InvalidTimestampError(line_no, value)
    seconds = int(value)
    if seconds > MAX_TIMESTAMP:
        raise InvalidTimestampError(line_no, value)
    return seconds


class OperaNoteParser:
    """Builds a list of notes from the lines of an Opera notes export.

    The parser owns the growing note list; the note being filled in is always
    the last one.
    """

    def __init__(self, options: ExportOptions):
        self.options = options
        self.state = ParseState()
        self.notes: list[Note] = []

    def parse_file(self) -> list[Note]:
        """Parse the export file named by the options.

        Raises:
            InputFileError: If the file cannot be opened
            InvalidTimestampError: If a CREATED value is malformed
            OrphanPropertyError: If a note property precedes every #NOTE
        """
        path = Path(self.options.input)
        try:
            fh = path.open(encoding="utf-8", errors="surrogateescape", newline="")
        except OSError as e:
            raise InputFileError(f"Failed to open input file {path}: {e}") from e

        with fh:
            return self.parse_lines(fh)

    def parse_lines(self, lines: Iterable[str]) -> list[Note]:
        """Run the state machine over lines and return the parsed notes."""
        for line_no, line in enumerate(lines, start=1):
            self._parse_line(line_no, line)

        logger.info("Parsed %d notes", len(self.notes))
        return self.notes

    def _current_note(self, line_no: int, prop: str) -> Note:
        if not self.notes:
            raise OrphanPropertyError(line_no, prop)
        return self.notes[-1]

    def _parse_line(self, line_no: int, line: str) -> None:
        state = self.state
        prop, value = classify_line(line)

        if prop == FOLDER_MARKER:
            state.in_folder = True
            state.in_trash = False
            return
        elif prop == PROP_TRASH_FOLDER and value == "YES":
            state.in_trash = True

        if state.in_trash and not self.options.export_trash:
            logger.debug("Line %d: skipped (trash folder)", line_no)
            return

        if prop == NOTE_MARKER:
            state.in_folder = False
            note = Note()
            if self.options.default_tag:
                note.add_tag(self.options.default_tag)
            if state.folder_name:
                note.add_tag(state.folder_name)
            self.notes.append(note)
        elif prop == PROP_UNIQUEID and not state.in_folder:
            self._current_note(line_no, prop).uid = value
        elif prop == PROP_NAME:
            if state.in_folder:
                state.folder_name = parse_folder_name(value)
                logger.debug("Line %d: entering folder %r", line_no, state.folder_name)
            else:
                note = self._current_note(line_no, prop)
                note.title = parse_note_title(value)
                note.body = parse_note_body(value)
        elif prop == PROP_CREATED:
            seconds = parse_timestamp(value, line_no)
            # Folder headers carry their own timestamp
            if not state.in_folder:
                self._current_note(line_no, prop).set_creation_time_from_unix(seconds)


def parse_export(options: ExportOptions) -> list[Note]:
    """Parse the export file named by options into a list of notes."""
    return OperaNoteParser(options).parse_file()
