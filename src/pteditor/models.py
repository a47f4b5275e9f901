"""Data models for the properties translator's editor.

Two layers live here:

* Per-file lines (``CommentLine`` / ``KeyLine``) collected in a
  ``ParsedFile``.  These are what the parser produces and what the
  writer consumes.
* Pair rows (``CommentEntry`` / ``KeyEntry``), one per row of the
  side-by-side view, each holding both the source and the destination
  half of that row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum

logger = logging.getLogger(__name__)

# Keys starting with this prefix are never translated.
KEY_PREFIX_NO_LOCALIZE = "_nolocaliz"


class Column(IntEnum):
    KEY = 0
    SOURCE = 1
    DEST = 2


class CellStatus(Enum):
    """Presentation status of one cell of the pair view."""

    DEFAULT = "default"
    SHARED_KEY_OK = "shared_key_ok"
    # Key has no value in the source file
    SOURCE_VALUE_MISSING = "source_value_missing"
    # Source has a value, destination not yet: ready to translate
    DESTINATION_VALUE_MISSING = "destination_value_missing"
    DESTINATION_ONLY_ORPHAN = "destination_only_orphan"
    READ_ONLY_NOT_LOCALIZED = "read_only_not_localized"
    # Key column of a non-blank comment row
    COMMENT_KEY_COLUMN = "comment_key_column"


# ── Per-file lines ──────────────────────────────────────────────


@dataclass
class CommentLine:
    """A comment or blank line, kept verbatim (leading spaces included)."""

    text: str = ""
    line_number: int = 0
    # Terminator that followed the line; None = use the file's newline
    eol: str | None = None


@dataclass
class KeyLine:
    """One logical ``key=value`` line, possibly spanning continuations."""

    key: str
    value: str = ""
    spaced_equals: bool = False
    # Verbatim text of the logical line, or None when it must be rendered
    raw: str | None = None
    line_number: int = 0
    eol: str | None = None


@dataclass
class FormatIssue:
    line_number: int
    message: str


@dataclass
class ParsedFile:
    """Ordered lines of one properties file."""

    lines: list[CommentLine | KeyLine] = field(default_factory=list)
    path: str | None = None
    newline: str = "\n"
    issues: list[FormatIssue] = field(default_factory=list)

    def keys(self) -> list[str]:
        return [ln.key for ln in self.lines if isinstance(ln, KeyLine)]

    def prefers_spaced_equals(self) -> bool:
        """True if most key lines use ``key = value`` rather than ``key=value``."""
        styles = [ln.spaced_equals for ln in self.lines if isinstance(ln, KeyLine)]
        if not styles:
            return False
        return sum(styles) * 2 > len(styles)


# ── Pair rows ───────────────────────────────────────────────────


def normalize_value(value: str | None) -> str | None:
    """Whitespace-only becomes empty; empty is stored as absent (None)."""
    if value is None or not value.strip():
        return None
    return value


def normalize_comment(value: str | None) -> str:
    text = (value or "").strip()
    if text and text[0] not in "#!":
        text = "# " + text
    return text


@dataclass
class LineEntry:
    """One row of the side-by-side view."""

    # 1-based line in the file the row came from (diagnostics only)
    line_number: int = field(default=0, kw_only=True)
    # Inserted by the user and not yet committed
    is_new: bool = field(default=False, kw_only=True)
    # 1-based line of this row in each file; None = not read from that file
    source_line: int | None = field(default=None, kw_only=True, repr=False)
    dest_line: int | None = field(default=None, kw_only=True, repr=False)
    source_eol: str | None = field(default=None, kw_only=True, repr=False)
    dest_eol: str | None = field(default=None, kw_only=True, repr=False)

    @property
    def is_comment(self) -> bool:
        return False

    def file_line(self, is_source: bool) -> int | None:
        return self.source_line if is_source else self.dest_line

    def get_text(self, column: Column) -> str:
        raise NotImplementedError

    def is_editable(self, column: Column) -> bool:
        raise NotImplementedError

    def on_side(self, is_source: bool) -> bool:
        """Does this row have a line in the source (or destination) file?"""
        raise NotImplementedError

    def status(self, column: Column, destination_only: frozenset[str]) -> CellStatus:
        raise NotImplementedError

    def set_text(self, column: Column, new_value: str | None) -> frozenset[Column]:
        """Apply an edit; returns the file columns (SOURCE/DEST) it changed.

        A rejected or unchanged edit returns an empty set.
        """
        raise NotImplementedError

    def to_line(self, is_source: bool) -> CommentLine | KeyLine:
        """This row's line in the source (or destination) file."""
        raise NotImplementedError


@dataclass
class CommentEntry(LineEntry):
    """Comment or blank row.  ``None`` text = no line in that file."""

    source_text: str | None = None
    dest_text: str | None = None

    @property
    def is_comment(self) -> bool:
        return True

    def get_text(self, column: Column) -> str:
        if column == Column.SOURCE:
            return self.source_text or ""
        if column == Column.DEST:
            return self.dest_text or ""
        return ""

    def is_editable(self, column: Column) -> bool:
        return column != Column.KEY

    def on_side(self, is_source: bool) -> bool:
        text = self.source_text if is_source else self.dest_text
        return text is not None

    def is_blank(self) -> bool:
        return not (self.source_text or "").strip() and not (self.dest_text or "").strip()

    def status(self, column: Column, destination_only: frozenset[str]) -> CellStatus:
        if column == Column.KEY and not self.is_blank():
            return CellStatus.COMMENT_KEY_COLUMN
        return CellStatus.DEFAULT

    def set_text(self, column: Column, new_value: str | None) -> frozenset[Column]:
        if column == Column.KEY:
            logger.debug("Ignoring edit of key column in comment row")
            return frozenset()
        text = normalize_comment(new_value)
        current = self.source_text if column == Column.SOURCE else self.dest_text
        # Clearing leaves a blank line; an absent line stays absent
        if text == current or (current is None and not text):
            return frozenset()
        if column == Column.SOURCE:
            self.source_text = text
        else:
            self.dest_text = text
        return frozenset({column})

    def to_line(self, is_source: bool) -> CommentLine:
        return CommentLine(
            text=(self.source_text if is_source else self.dest_text) or "",
            line_number=self.file_line(is_source) or self.line_number,
            eol=self.source_eol if is_source else self.dest_eol,
        )


@dataclass
class KeyEntry(LineEntry):
    """Key row holding the source and destination values of one key.

    ``key`` may be None only while ``is_new`` is set.  Absent and empty
    values are both None; the ``*_raw`` fields keep each file's original
    text until that side is edited, for byte-identical output, so a
    parsed ``key=`` line is still written back.
    """

    key: str | None = None
    source_value: str | None = None
    dest_value: str | None = None
    source_spaced_equals: bool = False
    dest_spaced_equals: bool = False
    source_raw: str | None = field(default=None, repr=False)
    dest_raw: str | None = field(default=None, repr=False)

    @property
    def is_no_localize(self) -> bool:
        return self.key is not None and self.key.startswith(KEY_PREFIX_NO_LOCALIZE)

    def get_text(self, column: Column) -> str:
        if column == Column.KEY:
            return self.key or ""
        if column == Column.SOURCE:
            return self.source_value or ""
        return self.dest_value or ""

    def is_editable(self, column: Column) -> bool:
        if column == Column.KEY:
            return self.is_new
        if column == Column.DEST and self.is_no_localize:
            return False
        return True

    def on_side(self, is_source: bool) -> bool:
        if self.key is None or self.is_new:
            return False
        if is_source:
            return self.source_value is not None or self.source_raw is not None
        return self.dest_value is not None or self.dest_raw is not None

    def status(self, column: Column, destination_only: frozenset[str]) -> CellStatus:
        if self.key is None or column == Column.KEY:
            return CellStatus.DEFAULT
        if column == Column.SOURCE:
            if self.source_value is None:
                return CellStatus.SOURCE_VALUE_MISSING
        else:
            if self.is_no_localize:
                return CellStatus.READ_ONLY_NOT_LOCALIZED
            if self.dest_value is None and self.source_value is not None:
                return CellStatus.DESTINATION_VALUE_MISSING
            if self.key in destination_only:
                return CellStatus.DESTINATION_ONLY_ORPHAN
        if self.source_value is not None and self.dest_value is not None:
            return CellStatus.SHARED_KEY_OK
        return CellStatus.DEFAULT

    def set_text(self, column: Column, new_value: str | None) -> frozenset[Column]:
        if column == Column.KEY:
            if not self.is_new:
                logger.debug("Ignoring rename of committed key %r", self.key)
                return frozenset()
            key = (new_value or "").strip() or None
            if key == self.key:
                return frozenset()
            self.key = key
            self.source_raw = self.dest_raw = None
            if self.dest_value:
                return frozenset({Column.SOURCE, Column.DEST})
            return frozenset({Column.SOURCE})

        value = normalize_value(new_value)
        if column == Column.SOURCE:
            if value == self.source_value:
                return frozenset()
            if value is None and not self.is_new:
                logger.debug("Ignoring removal of source value for %r", self.key)
                return frozenset()
            self.source_value = value
            self.source_raw = None
            return frozenset({Column.SOURCE})

        if value == self.dest_value:
            return frozenset()
        if self.is_no_localize:
            logger.debug("Ignoring destination edit of no-localize key %r", self.key)
            return frozenset()
        if self.dest_value is None and self.dest_raw is None and value is not None:
            # First translation of the key: follow the source line's style
            self.dest_spaced_equals = self.source_spaced_equals
        self.dest_value = value
        self.dest_raw = None
        return frozenset({Column.DEST})

    def to_line(self, is_source: bool) -> KeyLine:
        if is_source:
            value, spaced, raw, eol = (
                self.source_value, self.source_spaced_equals, self.source_raw, self.source_eol
            )
        else:
            value, spaced, raw, eol = (
                self.dest_value, self.dest_spaced_equals, self.dest_raw, self.dest_eol
            )
        return KeyLine(
            key=self.key,
            value=value or "",
            spaced_equals=spaced,
            raw=raw,
            line_number=self.file_line(is_source) or self.line_number,
            eol=eol,
        )
