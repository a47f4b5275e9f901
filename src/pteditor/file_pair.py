"""Source/destination file pair, aligned row by row by key.

``FilePair`` owns the parsed contents of both files as one list of pair
rows.  Row ``i`` holds the source and the destination half of the same
conceptual line, so inserting a row always inserts into both files at
once.  All edits go through :meth:`FilePair.set_value` and
:meth:`FilePair.insert_row`; a view only translates its indices.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from itertools import zip_longest
from pathlib import Path
from typing import Protocol

from pteditor.models import (
    CellStatus,
    Column,
    CommentEntry,
    CommentLine,
    KeyEntry,
    KeyLine,
    LineEntry,
    ParsedFile,
    normalize_value,
)
from pteditor.props_io import parse_properties, write_properties

logger = logging.getLogger(__name__)

PROPERTIES_SUFFIX = ".properties"


class PairListener(Protocol):
    """Notification sink for a view showing a FilePair."""

    def rows_about_to_be_inserted(self, row: int) -> None: ...

    def rows_inserted(self, row: int) -> None: ...

    def cell_changed(self, row: int, column: Column) -> None: ...

    def contents_changed(self) -> None: ...


def find_source_path(dest_path: str | Path) -> Path | None:
    """Derive the source file of ``name_xx.properties``.

    Removes one ``_xx`` suffix (``strings_fr_CA.properties`` ->
    ``strings_fr.properties``); if that file does not exist and another
    suffix remains, removes that one too (``strings.properties``).

    Returns the first candidate that exists, or None.

    Raises:
        ValueError: Unless the filename ends with ``_xx.properties``.
    """
    dest_path = Path(dest_path)
    name = dest_path.name
    stem = name[: -len(PROPERTIES_SUFFIX)] if name.endswith(PROPERTIES_SUFFIX) else ""
    base, _, suffix = stem.rpartition("_")
    if not base or not suffix:
        raise ValueError(f"Destination filename must end with _xx.properties: {name}")

    candidate = dest_path.with_name(base + PROPERTIES_SUFFIX)
    if not candidate.exists():
        base2, _, suffix2 = base.rpartition("_")
        if base2 and suffix2:
            candidate = dest_path.with_name(base2 + PROPERTIES_SUFFIX)
    return candidate if candidate.exists() else None


# ── Alignment ───────────────────────────────────────────────────


@dataclass
class _Block:
    """Comment lines followed by the key line they precede (or None at EOF)."""

    comments: list[CommentLine] = field(default_factory=list)
    key_line: KeyLine | None = None


def _blocks(doc: ParsedFile | None) -> tuple[list[_Block], list[CommentLine]]:
    """Split a file into key blocks and its trailing comment run."""
    blocks: list[_Block] = []
    pending: list[CommentLine] = []
    if doc is not None:
        for line in doc.lines:
            if isinstance(line, KeyLine):
                blocks.append(_Block(pending, line))
                pending = []
            else:
                pending.append(line)
    return blocks, pending


def _comment_rows(
    src: list[CommentLine], dest: list[CommentLine]
) -> list[CommentEntry]:
    rows = []
    for s, d in zip_longest(src, dest):
        rows.append(CommentEntry(
            source_text=s.text if s else None,
            dest_text=d.text if d else None,
            line_number=(s or d).line_number,
            source_line=s.line_number if s else None,
            dest_line=d.line_number if d else None,
            source_eol=s.eol if s else None,
            dest_eol=d.eol if d else None,
        ))
    return rows


def _key_row(src: KeyLine | None, dest: KeyLine | None) -> KeyEntry:
    first = src or dest
    row = KeyEntry(key=first.key, line_number=first.line_number)
    if src is not None:
        row.source_value = normalize_value(src.value)
        row.source_spaced_equals = src.spaced_equals
        row.source_raw = src.raw
        row.source_line = src.line_number
        row.source_eol = src.eol
    if dest is not None:
        row.dest_value = normalize_value(dest.value)
        row.dest_spaced_equals = dest.spaced_equals
        row.dest_raw = dest.raw
        row.dest_line = dest.line_number
        row.dest_eol = dest.eol
    if src is None:
        row.source_spaced_equals = dest.spaced_equals
    elif dest is None:
        row.dest_spaced_equals = src.spaced_equals
    return row


def align_files(src: ParsedFile | None, dest: ParsedFile | None) -> list[LineEntry]:
    """Build the pair rows of two parsed files.

    Source order drives the rows.  The n-th source occurrence of a key is
    paired with its n-th destination occurrence.  Unpaired destination
    blocks are placed just before the next paired destination block, so
    every destination line gets a row.
    """
    src_blocks, src_tail = _blocks(src)
    dest_blocks, dest_tail = _blocks(dest)

    waiting: dict[str, deque[int]] = {}
    for j, block in enumerate(dest_blocks):
        waiting.setdefault(block.key_line.key, deque()).append(j)
    matches: list[int | None] = []
    for block in src_blocks:
        queue = waiting.get(block.key_line.key)
        matches.append(queue.popleft() if queue else None)
    matched = {j for j in matches if j is not None}

    rows: list[LineEntry] = []
    next_dest = 0

    def emit_unmatched(upto: int) -> None:
        for j in range(next_dest, upto):
            if j in matched:
                continue
            block = dest_blocks[j]
            rows.extend(_comment_rows([], block.comments))
            rows.append(_key_row(None, block.key_line))

    for block, j in zip(src_blocks, matches):
        if j is None:
            rows.extend(_comment_rows(block.comments, []))
            rows.append(_key_row(block.key_line, None))
            continue
        if j >= next_dest:
            emit_unmatched(j)
            next_dest = j + 1
        rows.extend(_comment_rows(block.comments, dest_blocks[j].comments))
        rows.append(_key_row(block.key_line, dest_blocks[j].key_line))

    # Unpaired destination blocks after the last paired one
    emit_unmatched(len(dest_blocks))
    rows.extend(_comment_rows(src_tail, dest_tail))
    return rows


# ── File pair ───────────────────────────────────────────────────


class FilePair:
    """A source language file and its destination (translation) file.

    Rows are 0-based.  ``size()`` is the number of real rows; a view may
    show one more "append" row at index ``size()``, and editing that row
    through :meth:`set_value` creates a real row there.

    Flags:
      - ``unsaved_source`` / ``unsaved_dest``: set by accepted edits to
        that side, cleared by a successful save of that side.
      - ``unsaved_inserted_rows``: rows were inserted and may still need
        committing by :meth:`convert_inserted_rows`.
    """

    def __init__(self, source_path: str | Path, dest_path: str | Path, *, strict: bool = False):
        self.source_path = Path(source_path)
        self.dest_path = Path(dest_path)
        self.strict = strict
        self.listener: PairListener | None = None

        self.unsaved_source = False
        self.unsaved_dest = False
        self.unsaved_inserted_rows = False

        self._source_doc: ParsedFile | None = None
        self._dest_doc: ParsedFile | None = None
        self._rows: list[LineEntry] = []
        self._source_keys: set[str] = set()
        self._dest_keys: set[str] = set()
        self._dest_only: frozenset[str] = frozenset()

    @classmethod
    def open(cls, source_path: str | Path, dest_path: str | Path, *, strict: bool = False) -> FilePair:
        """Create a pair and parse both files."""
        pair = cls(source_path, dest_path, strict=strict)
        pair.parse_source()
        pair.parse_destination()
        return pair

    def __repr__(self) -> str:
        return f"FilePair({str(self.source_path)!r}, {str(self.dest_path)!r}, rows={len(self._rows)})"

    # ── Parsing ─────────────────────────────────────────────────

    def parse_source(self) -> None:
        """(Re)read the source file and rebuild the rows.

        Raises:
            FileAccessError: If the file cannot be read; the pair is unchanged.
        """
        self._source_doc = parse_properties(self.source_path, strict=self.strict)
        self._rebuild()

    def parse_destination(self) -> None:
        """(Re)read the destination file and rebuild the rows."""
        self._dest_doc = parse_properties(self.dest_path, strict=self.strict)
        self._rebuild()

    def _rebuild(self) -> None:
        self._rows = align_files(self._source_doc, self._dest_doc)
        self.unsaved_source = False
        self.unsaved_dest = False
        self.unsaved_inserted_rows = False
        self._refresh_keys()
        if self._dest_only:
            logger.info(
                "%d key(s) only in %s: %s",
                len(self._dest_only), self.dest_path.name, ", ".join(sorted(self._dest_only)),
            )
        if self.listener is not None:
            self.listener.contents_changed()

    def _key_entries(self) -> list[KeyEntry]:
        return [row for row in self._rows if isinstance(row, KeyEntry)]

    def _refresh_keys(self) -> None:
        # A key line counts for its file even when its value is empty
        self._source_keys = {row.key for row in self._key_entries() if row.on_side(True)}
        self._dest_keys = {row.key for row in self._key_entries() if row.on_side(False)}
        self._dest_only = frozenset(self._dest_keys - self._source_keys)

    # ── Queries ─────────────────────────────────────────────────

    def row_count(self) -> int:
        return len(self._rows)

    def size(self) -> int:
        return len(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def get_row(self, row: int) -> LineEntry:
        if not 0 <= row < len(self._rows):
            raise IndexError(f"row {row} out of range (0..{len(self._rows) - 1})")
        return self._rows[row]

    def rows(self) -> list[LineEntry]:
        return list(self._rows)

    @property
    def source_doc(self) -> ParsedFile | None:
        return self._source_doc

    @property
    def dest_doc(self) -> ParsedFile | None:
        return self._dest_doc

    @property
    def destination_only_keys(self) -> frozenset[str]:
        return self._dest_only

    def is_key_destination_only(self, key: str) -> bool:
        return key in self._dest_only

    @property
    def has_unsaved_changes(self) -> bool:
        return self.unsaved_source or self.unsaved_dest

    def untranslated_keys(self) -> list[str]:
        """Committed keys with a source value but no destination value yet."""
        return [
            row.key
            for row in self._key_entries()
            if not row.is_new
            and row.key is not None
            and row.source_value is not None
            and row.dest_value is None
            and not row.is_no_localize
        ]

    @staticmethod
    def _check_column(column: int) -> Column:
        try:
            return Column(column)
        except ValueError:
            raise IndexError(f"column {column} out of range (0..2)") from None

    def _check_row(self, row: int, *, allow_append: bool = True) -> None:
        limit = len(self._rows) + (1 if allow_append else 0)
        if not 0 <= row < limit:
            raise IndexError(f"row {row} out of range (0..{limit - 1})")

    def get_cell(self, row: int, column: int) -> str:
        """Display text of a cell; the append row is empty."""
        column = self._check_column(column)
        self._check_row(row)
        if row == len(self._rows):
            return ""
        return self._rows[row].get_text(column)

    def is_cell_editable(self, row: int, column: int) -> bool:
        column = self._check_column(column)
        self._check_row(row)
        if row == len(self._rows):
            return True
        return self._rows[row].is_editable(column)

    def cell_status(self, row: int, column: int) -> CellStatus:
        column = self._check_column(column)
        self._check_row(row)
        if row == len(self._rows):
            return CellStatus.DEFAULT
        return self._rows[row].status(column, self._dest_only)

    # ── Mutations ───────────────────────────────────────────────

    def insert_row(self, anchor_row: int, before: bool) -> int:
        """Insert an empty, uncommitted key row above or below *anchor_row*.

        *anchor_row* may be the append row (``size()``); the new row then
        goes at the end.  Returns the new row's index.
        """
        self._check_row(anchor_row)
        if anchor_row == len(self._rows) or before:
            row = anchor_row
        else:
            row = anchor_row + 1

        spaced = self._source_doc.prefers_spaced_equals() if self._source_doc else False
        entry = KeyEntry(is_new=True, source_spaced_equals=spaced, dest_spaced_equals=spaced)
        if self.listener is not None:
            self.listener.rows_about_to_be_inserted(row)
        self._rows.insert(row, entry)
        self.unsaved_inserted_rows = True
        if self.listener is not None:
            self.listener.rows_inserted(row)
        return row

    def set_value(self, row: int, column: int, new_value: str | None) -> bool:
        """Edit one cell.  Returns True if anything changed.

        Disallowed edits (clearing a committed key's source value,
        renaming a committed key, writing a no-localize destination) are
        ignored and return False, as is an edit to the current value.
        """
        column = self._check_column(column)
        self._check_row(row)

        if row == len(self._rows):
            if not (new_value or "").strip():
                return False
            self.insert_row(row, before=False)
        elif (new_value or "") == self._rows[row].get_text(column):
            return False

        entry = self._rows[row]
        sides = entry.set_text(column, new_value)
        if not sides:
            return False

        if Column.SOURCE in sides:
            self.unsaved_source = True
        if Column.DEST in sides:
            self.unsaved_dest = True
        if column == Column.KEY:
            self.unsaved_inserted_rows = True
        if not entry.is_new:
            self._refresh_keys()

        if self.listener is not None:
            self.listener.cell_changed(row, column)
        return True

    def convert_inserted_rows(self) -> bool:
        """Commit inserted rows that now have a non-empty, unique key.

        Returns True if any row was committed.
        """
        rows = self._key_entries()
        committed = {row.key for row in rows if not row.is_new and row.key is not None}
        changed = False
        for row in rows:
            if not row.is_new or row.key is None:
                continue
            if row.key in committed:
                logger.warning("Row %d: key %r already exists, not committed",
                               self._rows.index(row), row.key)
                continue
            row.is_new = False
            committed.add(row.key)
            changed = True

        self.unsaved_inserted_rows = False
        if changed:
            self._refresh_keys()
        return changed

    # ── Saving ──────────────────────────────────────────────────

    def extract_contents_for_side(self, is_source: bool) -> ParsedFile:
        """Lines of one file, in that file's order, ready for the writer.

        Lines read from the file keep their original position.  A line
        that is new to the file follows the nearest row above it that
        was read from the file.  Rows without a line in that file (and
        uncommitted rows) are left out.
        """
        doc = self._source_doc if is_source else self._dest_doc
        path = self.source_path if is_source else self.dest_path
        out = ParsedFile(path=str(path), newline=doc.newline if doc else "\n")

        placed: list[tuple[tuple[int, int, int], CommentLine | KeyLine]] = []
        anchor = 0
        for seq, row in enumerate(self._rows):
            line_no = row.file_line(is_source)
            if line_no is not None:
                anchor = line_no
            if not row.on_side(is_source):
                continue
            order = (line_no, 0, seq) if line_no is not None else (anchor, 1, seq)
            placed.append((order, row.to_line(is_source)))

        placed.sort(key=lambda item: item[0])
        out.lines.extend(line for _, line in placed)
        return out

    def save_source(self, path: str | Path | None = None, *, backup: bool = False) -> None:
        """Write the source file and clear ``unsaved_source``.

        Raises:
            FileAccessError: If writing fails; flags are left unchanged.
        """
        self._save(True, path, backup)
        self.unsaved_source = False

    def save_destination(self, path: str | Path | None = None, *, backup: bool = False) -> None:
        """Write the destination file and clear ``unsaved_dest``."""
        self._save(False, path, backup)
        self.unsaved_dest = False

    def _save(self, is_source: bool, path: str | Path | None, backup: bool) -> None:
        if self.unsaved_inserted_rows and self.convert_inserted_rows():
            if self.listener is not None:
                self.listener.contents_changed()
        write_properties(self.extract_contents_for_side(is_source), path, backup=backup)
