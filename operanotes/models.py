"""Data models for Opera note export."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

# Title used when a NAME value carries no title token
NO_TITLE = "<no-title>"


@dataclass
class Note:
    """Represents one note from an Opera notes export."""

    title: str = NO_TITLE
    body: str = ""
    tags: list[str] = field(default_factory=list)
    uid: str = ""
    creation_time: datetime | None = None

    def add_tag(self, tag: str) -> None:
        self.tags.append(tag)

    def set_creation_time_from_unix(self, seconds: int) -> None:
        """Set creation time from Unix epoch seconds, converted to local time."""
        self.creation_time = datetime.fromtimestamp(seconds)


@dataclass
class ExportOptions:
    """Options for a single export run."""

    input: Path
    output: Path
    export_trash: bool = False
    default_tag: str = ""
    tags_to_notebooks: bool = False


@dataclass
class ParseState:
    """Transient state of the export parser."""

    folder_name: str = ""
    in_folder: bool = False
    in_trash: bool = False


@dataclass
class ExportReport:
    """Outcome of writing a list of notes."""

    written: list[Path] = field(default_factory=list)
    skipped_empty: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return len(self.written) + self.skipped_empty + self.failed
