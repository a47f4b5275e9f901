""".properties file parser and writer.

Files are read and written as ISO-8859-1, with ``\\uXXXX`` escapes for
everything outside printable ASCII.  Produces faithful round-trip
output: every line that was not edited is written back exactly as it
was read, continuation lines, spacing and line terminators included.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from pathlib import Path

from pteditor.models import CommentLine, FormatIssue, KeyLine, ParsedFile

logger = logging.getLogger(__name__)

ENCODING = "iso-8859-1"

_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_LINE_RE = re.compile(r"([^\r\n]*)(\r\n|\r|\n)")
_HEX_RE = re.compile(r"[0-9a-fA-F]{4}")

_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ESCAPES = {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}


class PropsError(Exception):
    """Base class for properties file errors."""


class FileAccessError(PropsError, OSError):
    """A properties file is missing, unreadable, or unwritable."""

    def __init__(self, path: str | Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = str(path)
        self.reason = reason


class PropsFormatError(PropsError, ValueError):
    """Malformed content, raised only when parsing with ``strict=True``."""

    def __init__(self, path: str | None, line_number: int, message: str):
        super().__init__(f"{path or '<bytes>'}:{line_number}: {message}")
        self.path = path
        self.line_number = line_number


# ── Escape codec ────────────────────────────────────────────────


def _u_escape(ch: str) -> str:
    code = ord(ch)
    if code > 0xFFFF:
        # Properties escapes are UTF-16 code units
        code -= 0x10000
        return f"\\u{0xD800 + (code >> 10):04X}\\u{0xDC00 + (code & 0x3FF):04X}"
    return f"\\u{code:04X}"


def _combine_surrogates(text: str) -> str:
    if not any(0xD800 <= ord(ch) <= 0xDFFF for ch in text):
        return text
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def unescape(text: str, issues: list[str] | None = None) -> str:
    """Decode properties escapes.

    A malformed ``\\u`` escape is kept literally; a description of it is
    appended to *issues* when given.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        i += 1
        if i >= n:
            break
        ch = text[i]
        if ch == "u":
            digits = text[i + 1 : i + 5]
            if _HEX_RE.fullmatch(digits):
                out.append(chr(int(digits, 16)))
                i += 5
                continue
            if issues is not None:
                issues.append(f"malformed \\uxxxx escape: \\u{digits}")
            out.append("\\u")
            i += 1
            continue
        out.append(_UNESCAPES.get(ch, ch))
        i += 1
    return _combine_surrogates("".join(out))


def escape_value(value: str) -> str:
    out: list[str] = []
    for i, ch in enumerate(value):
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch == " " and i == 0:
            out.append("\\ ")
        elif " " <= ch <= "~":
            out.append(ch)
        else:
            out.append(_u_escape(ch))
    return "".join(out)


def escape_key(key: str) -> str:
    out: list[str] = []
    for ch in key:
        if ch in " =:#!":
            out.append("\\" + ch)
        else:
            out.append(escape_value(ch))
    return "".join(out)


def escape_comment(text: str) -> str:
    """Comments are not unescaped by readers; only non-Latin-1 chars are escaped."""
    return "".join(ch if ord(ch) <= 0xFF else _u_escape(ch) for ch in text)


# ── Parsing ─────────────────────────────────────────────────────


def _split_physical_lines(text: str) -> list[tuple[str, str]]:
    """Split into (content, terminator) pairs; only CR, LF, CRLF break lines."""
    lines: list[tuple[str, str]] = []
    pos = 0
    for m in _LINE_RE.finditer(text):
        lines.append((m.group(1), m.group(2)))
        pos = m.end()
    if pos < len(text):
        lines.append((text[pos:], ""))
    return lines


def _continues(content: str) -> bool:
    """A line continues if it ends in an odd number of backslashes."""
    count = len(content) - len(content.rstrip("\\"))
    return count % 2 == 1


def _split_key_value(logical: str) -> tuple[str, str, str]:
    """Split a logical line into (escaped key, separator, escaped value)."""
    n = len(logical)
    i = 0
    while i < n:
        ch = logical[i]
        if ch == "\\":
            i += 2
            continue
        if ch in _SEPARATORS or ch in _WHITESPACE:
            break
        i += 1
    key_end = min(i, n)

    j = key_end
    while j < n and logical[j] in _WHITESPACE:
        j += 1
    if j < n and logical[j] in _SEPARATORS:
        j += 1
        while j < n and logical[j] in _WHITESPACE:
            j += 1
    return logical[:key_end], logical[key_end:j], logical[j:]


def parse_properties_text(
    text: str,
    path: str | None = None,
    *,
    strict: bool = False,
) -> ParsedFile:
    """Parse decoded file text into a ParsedFile.

    Raises:
        PropsFormatError: On a malformed escape, only if *strict*.
    """
    physical = _split_physical_lines(text)
    newline = next((eol for _, eol in physical if eol), "\n")
    doc = ParsedFile(path=path, newline=newline)

    idx = 0
    while idx < len(physical):
        content, eol = physical[idx]
        line_number = idx + 1
        stripped = content.lstrip(_WHITESPACE)

        if not stripped or stripped[0] in "#!":
            doc.lines.append(CommentLine(text=content, line_number=line_number, eol=eol))
            idx += 1
            continue

        # Join continuation lines into one logical line
        raw_parts = [content]
        logical = stripped
        while _continues(content) and idx + 1 < len(physical):
            logical = logical[:-1]
            raw_parts.append(eol)
            idx += 1
            content, eol = physical[idx]
            raw_parts.append(content)
            logical += content.lstrip(_WHITESPACE)
        if _continues(logical):
            # Backslash on the last line of the file
            logical = logical[:-1]
        idx += 1

        key_text, separator, value_text = _split_key_value(logical)
        problems: list[str] = []
        key = unescape(key_text, problems)
        value = unescape(value_text, problems)
        for problem in problems:
            if strict:
                raise PropsFormatError(path, line_number, problem)
            logger.warning("%s:%d: %s (kept as-is)", path or "<bytes>", line_number, problem)
            doc.issues.append(FormatIssue(line_number, problem))

        doc.lines.append(KeyLine(
            key=key,
            value=value,
            spaced_equals=any(ch in _WHITESPACE for ch in separator),
            raw="".join(raw_parts),
            line_number=line_number,
            eol=eol,
        ))

    return doc


def parse_properties_bytes(
    data: bytes,
    path: str | None = None,
    *,
    strict: bool = False,
) -> ParsedFile:
    return parse_properties_text(data.decode(ENCODING), path, strict=strict)


def parse_properties(path: str | Path, *, strict: bool = False) -> ParsedFile:
    """Parse a .properties file.

    Raises:
        FileAccessError: If the file is missing or unreadable.
        PropsFormatError: On a malformed escape, only if *strict*.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise FileAccessError(path, exc.strerror or str(exc)) from exc
    doc = parse_properties_bytes(data, str(path), strict=strict)
    logger.debug("Parsed %s: %d lines, %d keys", path, len(doc.lines), len(doc.keys()))
    return doc


# ── Writing ─────────────────────────────────────────────────────


def render_line(line: CommentLine | KeyLine) -> str:
    """Text of one line, without its terminator."""
    if isinstance(line, CommentLine):
        return escape_comment(line.text or "")
    if line.raw is not None:
        return line.raw
    separator = " = " if line.spaced_equals else "="
    return escape_key(line.key) + separator + escape_value(line.value)


def serialize_properties(doc: ParsedFile) -> bytes:
    parts: list[str] = []
    last = len(doc.lines) - 1
    for i, line in enumerate(doc.lines):
        parts.append(render_line(line))
        eol = line.eol if line.eol is not None else doc.newline
        if not eol and i < last:
            # Was the last line of the file, now followed by more lines
            eol = doc.newline
        parts.append(eol)
    return "".join(parts).encode(ENCODING)


def write_properties(
    doc: ParsedFile,
    path: str | Path | None = None,
    *,
    backup: bool = False,
) -> None:
    """Write a ParsedFile atomically.

    Atomic write:
      1. Writes to a temporary file in the same directory.
      2. Uses os.replace() to atomically swap into place.
      3. If *backup* is True and the target file exists, creates a
         .bak copy before overwriting.

    Raises:
        FileAccessError: On any I/O failure; the target is left untouched.
    """
    if path is None:
        if doc.path is None:
            raise ValueError("No path given and the document has none")
        path = doc.path
    path = Path(path)
    data = serialize_properties(doc)

    tmp_path = None
    fd = -1
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".properties.tmp")
        os.write(fd, data)
        os.close(fd)
        fd = -1  # mark as closed

        if backup and path.exists():
            bak_path = path.with_suffix(path.suffix + ".bak")
            shutil.copy2(str(path), str(bak_path))

        os.replace(tmp_path, str(path))
    except OSError as exc:
        if fd >= 0:
            os.close(fd)
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise FileAccessError(path, exc.strerror or str(exc)) from exc

    logger.info("Wrote %s (%d bytes)", path, len(data))
