"""Entry point for the Properties Translator's Editor.

Usage::

    pteditor strings_fr.properties                      # source derived: strings.properties
    pteditor strings.properties strings_fr.properties
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from pteditor.file_pair import find_source_path

logger = logging.getLogger(__name__)


def resolve_paths(args: list[str]) -> tuple[Path, Path] | None:
    """Map command-line arguments to (source, destination).

    Returns None for no arguments.

    Raises:
        ValueError: If the destination name has no ``_xx`` suffix.
        FileNotFoundError: If no source file can be found for it.
    """
    if not args:
        return None
    if len(args) >= 2:
        return Path(args[0]), Path(args[1])
    dest = Path(args[0])
    source = find_source_path(dest)
    if source is None:
        raise FileNotFoundError(f"No source file on disk for {dest}")
    return source, dest


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    try:
        paths = resolve_paths(sys.argv[1:])
    except (ValueError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        sys.exit(2)

    from PySide6.QtWidgets import QApplication
    from pteditor.main_window import MainWindow

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("Properties Translator's Editor")
    app.setOrganizationName("pteditor")

    window = MainWindow()
    if paths is not None:
        window.load_pair(*paths)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
