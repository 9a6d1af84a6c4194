"""Shared fixtures for operanotes tests."""

from pathlib import Path

import pytest

from operanotes.models import ExportOptions

STX = "\x02"


def write_export(directory: Path, content: str, name: str = "notes.adr") -> Path:
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture()
def out_dir(tmp_path: Path) -> Path:
    out = tmp_path / "exported"
    out.mkdir()
    return out


@pytest.fixture()
def options(tmp_path: Path, out_dir: Path) -> ExportOptions:
    return ExportOptions(input=tmp_path / "notes.adr", output=out_dir)
