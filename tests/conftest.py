"""Shared pytest fixtures for the properties editor tests."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from pteditor.file_pair import FilePair

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def source_path() -> Path:
    return FIXTURES_DIR / "pte.properties"


@pytest.fixture
def dest_path() -> Path:
    return FIXTURES_DIR / "pte_fr.properties"


@pytest.fixture
def pair_files(tmp_path: Path, source_path: Path, dest_path: Path) -> tuple[Path, Path]:
    """Writable copies of the fixture pair."""
    src = tmp_path / source_path.name
    dest = tmp_path / dest_path.name
    shutil.copy(source_path, src)
    shutil.copy(dest_path, dest)
    return src, dest


@pytest.fixture
def pair(pair_files: tuple[Path, Path]) -> FilePair:
    return FilePair.open(*pair_files)


@pytest.fixture
def make_pair(tmp_path: Path):
    """Build a pair from in-memory file contents (bytes or str)."""

    def _make(source: bytes | str, dest: bytes | str) -> FilePair:
        src = tmp_path / "strings.properties"
        dst = tmp_path / "strings_fr.properties"
        for path, data in ((src, source), (dst, dest)):
            if isinstance(data, str):
                data = data.encode("iso-8859-1")
            path.write_bytes(data)
        return FilePair.open(src, dst)

    return _make
