"""QTableView for the side-by-side pair grid.

Provides:
  - Single-click editing of editable cells
  - Right-click menu to insert a row above or below the clicked row
  - Per-column font sizes from the settings
"""

from __future__ import annotations

from PySide6.QtCore import QPoint, Qt, Signal
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QAbstractItemDelegate,
    QAbstractItemView,
    QHeaderView,
    QMenu,
    QStyledItemDelegate,
    QTableView,
)

from pteditor import config


class _ColumnFontDelegate(QStyledItemDelegate):
    """Applies the configured font size of each column."""

    def initStyleOption(self, option, index):
        super().initStyleOption(option, index)
        size = config.get_font_size(config.COLUMN_NAMES[index.column()])
        font = QFont(option.font)
        font.setPointSize(size)
        option.font = font

    def createEditor(self, parent, option, index):
        editor = super().createEditor(parent, option, index)
        if editor is not None:
            font = QFont(editor.font())
            font.setPointSize(config.get_font_size(config.COLUMN_NAMES[index.column()]))
            editor.setFont(font)
        return editor


class PairTableView(QTableView):
    """Three-column grid: key, source value, destination value."""

    # Emitted from the context menu: anchor row, before (True) or after
    insert_requested = Signal(int, bool)

    def __init__(self, parent=None):
        super().__init__(parent)

        # Appearance
        self.setWordWrap(True)
        self.setTextElideMode(Qt.ElideRight)
        self.setSelectionMode(QTableView.SingleSelection)
        self.setSelectionBehavior(QTableView.SelectItems)

        # Don't require double-click to edit
        self.setEditTriggers(
            QAbstractItemView.CurrentChanged
            | QAbstractItemView.SelectedClicked
            | QAbstractItemView.DoubleClicked
            | QAbstractItemView.EditKeyPressed
        )
        self.setItemDelegate(_ColumnFontDelegate(self))

        # Column sizing: key interactive, values share the rest
        header = self.horizontalHeader()
        header.setSectionResizeMode(QHeaderView.Stretch)
        header.setSectionResizeMode(0, QHeaderView.Interactive)
        header.setStretchLastSection(True)

        vheader = self.verticalHeader()
        vheader.setSectionResizeMode(QHeaderView.ResizeToContents)

        # Table right-click menu
        self.setContextMenuPolicy(Qt.CustomContextMenu)
        self.customContextMenuRequested.connect(self._show_context_menu)

    def _show_context_menu(self, pos: QPoint) -> None:
        row = self.rowAt(pos.y())
        if row < 0:
            return
        menu = QMenu(self)
        act_above = menu.addAction("Insert row above")
        act_below = menu.addAction("Insert row below")
        chosen = menu.exec(self.viewport().mapToGlobal(pos))
        if chosen is None:
            return
        self.commit_current_edit()
        self.insert_requested.emit(row, chosen is act_above)

    def commit_current_edit(self) -> None:
        """Finish an open cell editor so its text reaches the model."""
        if self.state() == QAbstractItemView.EditingState:
            editor = self.indexWidget(self.currentIndex()) or self.focusWidget()
            if editor is not None:
                self.commitData(editor)
                self.closeEditor(editor, QAbstractItemDelegate.EndEditHint.NoHint)

    # ── Navigation helpers ──────────────────────────────────────

    def current_row(self) -> int:
        idx = self.currentIndex()
        return idx.row() if idx.isValid() else -1

    def select_cell(self, row: int, col: int) -> None:
        """Move selection to a specific cell and restore focus."""
        model = self.model()
        if model is None:
            return
        if 0 <= row < model.rowCount() and 0 <= col < model.columnCount():
            idx = model.index(row, col)
            self.setCurrentIndex(idx)
            self.scrollTo(idx)
            self.setFocus(Qt.OtherFocusReason)
