"""Main application window: wires the file pair, table model and view."""

from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtGui import QKeySequence
from PySide6.QtWidgets import (
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QStatusBar,
    QToolBar,
)

from pteditor import config
from pteditor.file_pair import FilePair, find_source_path
from pteditor.props_io import PropsError
from pteditor.table_model import PairTableModel
from pteditor.table_view import PairTableView

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "This editor shows the comments, keys, and texts of the source and destination files.\n"
    "Click a cell to change source or destination text. Keys can be typed only in new rows.\n"
    "New items can be added in the last row, or inserted by right-clicking a row.\n"
    "To save changes and continue editing, use Save Source or Save Destination.\n\n"
    "Green: not translated yet.  Red: key missing from the source file, or only in the "
    "destination file.  Gray: not editable, such as a comment's key column or a key that "
    "is not localized."
)

_FILE_FILTER = "Properties files (*.properties);;All files (*)"


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Properties Translator's Editor")
        self.resize(900, 600)

        # Core state
        self._pair: FilePair | None = None

        # Table model & view
        self._model = PairTableModel(self)
        self._view = PairTableView(self)
        self._view.setModel(self._model)
        self.setCentralWidget(self._view)
        self._view.insert_requested.connect(self._insert_row)

        # Dirty flags change through model edits
        self._model.dataChanged.connect(self._on_pair_changed)
        self._model.rowsInserted.connect(self._on_pair_changed)
        self._model.modelReset.connect(self._on_pair_changed)

        self._status = QStatusBar(self)
        self.setStatusBar(self._status)

        self._build_menus()
        self._build_toolbar()
        self._on_pair_changed()

    # ── Menu construction ───────────────────────────────────────

    def _sc(self, action_name: str) -> QKeySequence:
        """Shortcut helper."""
        return QKeySequence(config.get_shortcut(action_name))

    def _build_menus(self) -> None:
        mb = self.menuBar()

        file_menu = mb.addMenu("&File")
        self._act_open = file_menu.addAction("&Open Destination…", self._file_open)
        self._act_open.setShortcut(self._sc("file_open"))
        self._act_open_pair = file_menu.addAction("Open Source && &Destination…", self._file_open_pair)
        self._act_open_pair.setShortcut(self._sc("file_open_pair"))

        file_menu.addSeparator()
        self._act_save_src = file_menu.addAction("Save &Source", self.save_source)
        self._act_save_src.setShortcut(self._sc("file_save_source"))
        self._act_save_dest = file_menu.addAction("&Save Destination", self.save_destination)
        self._act_save_dest.setShortcut(self._sc("file_save_dest"))

        file_menu.addSeparator()
        self._act_quit = file_menu.addAction("&Quit", self.close)
        self._act_quit.setShortcut(self._sc("file_quit"))

        edit_menu = mb.addMenu("&Edit")
        self._act_insert_above = edit_menu.addAction(
            "Insert Row &Above", lambda: self._insert_row(self._view.current_row(), True)
        )
        self._act_insert_above.setShortcut(self._sc("edit_insert_above"))
        self._act_insert_below = edit_menu.addAction(
            "Insert Row &Below", lambda: self._insert_row(self._view.current_row(), False)
        )
        self._act_insert_below.setShortcut(self._sc("edit_insert_below"))

        help_menu = mb.addMenu("&Help")
        self._act_help = help_menu.addAction("&How to Use…", self._show_help)
        self._act_help.setShortcut(self._sc("help_show"))

    def _build_toolbar(self) -> None:
        tb = QToolBar("Main")
        tb.setMovable(False)
        self.addToolBar(tb)
        tb.addAction(self._act_help)
        tb.addSeparator()
        tb.addAction(self._act_save_src)
        tb.addAction(self._act_save_dest)

    # ── Status ──────────────────────────────────────────────────

    def _on_pair_changed(self, *_args) -> None:
        pair = self._pair
        self._act_save_src.setEnabled(pair is not None and pair.unsaved_source)
        self._act_save_dest.setEnabled(pair is not None and pair.unsaved_dest)
        for act in (self._act_insert_above, self._act_insert_below):
            act.setEnabled(pair is not None)
        self._update_title()
        self._update_status()

    def _update_title(self) -> None:
        if self._pair is None:
            self.setWindowTitle("Properties Translator's Editor")
            return
        dirty = " •" if self._pair.has_unsaved_changes else ""
        self.setWindowTitle(f"{self._pair.dest_path.name}{dirty}")

    def _update_status(self) -> None:
        if self._pair is None:
            self._status.showMessage("No files loaded")
            return
        untranslated = len(self._pair.untranslated_keys())
        orphans = len(self._pair.destination_only_keys)
        self._status.showMessage(
            f"{self._pair.source_path.name} → {self._pair.dest_path.name}  |  "
            f"{self._pair.size()} rows  |  {untranslated} untranslated  |  "
            f"{orphans} only in destination"
        )

    # ── File operations ─────────────────────────────────────────

    def _file_open(self) -> None:
        if not self.check_unsaved_before_close():
            return
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Destination Language File", "", _FILE_FILTER
        )
        if not path:
            return
        try:
            source = find_source_path(path)
        except ValueError as exc:
            QMessageBox.warning(self, "Open", str(exc))
            return
        if source is None:
            source, _ = QFileDialog.getOpenFileName(
                self, "Open Source Language File", str(Path(path).parent), _FILE_FILTER
            )
            if not source:
                return
        self.load_pair(source, path)

    def _file_open_pair(self) -> None:
        if not self.check_unsaved_before_close():
            return
        source, _ = QFileDialog.getOpenFileName(self, "Open Source Language File", "", _FILE_FILTER)
        if not source:
            return
        dest, _ = QFileDialog.getOpenFileName(
            self, "Open Destination Language File", str(Path(source).parent), _FILE_FILTER
        )
        if not dest:
            return
        self.load_pair(source, dest)

    def load_pair(self, source: str | Path, dest: str | Path) -> bool:
        """Parse both files and show them; returns True on success."""
        strict = bool(config.get_behavior("strict_escapes", False))
        try:
            pair = FilePair.open(source, dest, strict=strict)
        except PropsError as exc:
            logger.error("Could not open %s / %s: %s", source, dest, exc)
            QMessageBox.critical(self, "Open failed", f"Could not open files:\n{exc}")
            return False

        issues = (pair.source_doc.issues if pair.source_doc else []) + (
            pair.dest_doc.issues if pair.dest_doc else []
        )
        self._pair = pair
        self._model.set_pair(pair)
        if issues:
            self._status.showMessage(f"{len(issues)} malformed escape(s) kept as-is", 5000)
        if pair.size() > 0:
            self._view.select_cell(0, 2)
        return True

    def save_source(self) -> bool:
        return self._save(is_source=True)

    def save_destination(self) -> bool:
        return self._save(is_source=False)

    def _save(self, is_source: bool) -> bool:
        if self._pair is None:
            return False
        self._view.commit_current_edit()
        backup = bool(config.get_behavior("backup_on_save", False))
        try:
            if is_source:
                self._pair.save_source(backup=backup)
            else:
                self._pair.save_destination(backup=backup)
        except PropsError as exc:
            logger.error("Save failed: %s", exc)
            QMessageBox.critical(self, "Save failed", str(exc))
            return False
        self._on_pair_changed()
        return True

    def save_changes_to_any(self) -> bool:
        ok = True
        if self._pair is not None and self._pair.unsaved_dest:
            ok = self.save_destination() and ok
        if self._pair is not None and self._pair.unsaved_source:
            ok = self.save_source() and ok
        return ok

    def check_unsaved_before_close(self) -> bool:
        """Return True if it's OK to drop the current pair."""
        self._view.commit_current_edit()
        if self._pair is None or not self._pair.has_unsaved_changes:
            return True
        ans = QMessageBox.question(
            self,
            "Unsaved Changes",
            "Do you want to save changes before closing?",
            QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel,
            QMessageBox.Save,
        )
        if ans == QMessageBox.Save:
            return self.save_changes_to_any()
        return ans == QMessageBox.Discard

    # ── Edits ───────────────────────────────────────────────────

    def _insert_row(self, anchor_row: int, before: bool) -> None:
        if self._pair is None or anchor_row < 0:
            return
        row = self._model.insert_row(anchor_row, before)
        self._view.select_cell(row, 0)

    def _show_help(self) -> None:
        QMessageBox.information(self, "Help", HELP_TEXT)

    # ── Overrides ───────────────────────────────────────────────

    def closeEvent(self, event) -> None:
        if self.check_unsaved_before_close():
            event.accept()
        else:
            event.ignore()
