"""Qt table model backed by a FilePair.

Three columns: Key, Source value, Destination value.  The model shows
one row more than the pair has; typing into that last row appends a new
row to both files.  All decisions are made by the FilePair; this class
only maps indices and roles.
"""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QColor

from pteditor.file_pair import FilePair
from pteditor.models import CellStatus, Column

STATUS_COLORS: dict[CellStatus, QColor] = {
    CellStatus.SOURCE_VALUE_MISSING: QColor(255, 120, 120),
    CellStatus.DESTINATION_ONLY_ORPHAN: QColor(255, 120, 120),
    CellStatus.DESTINATION_VALUE_MISSING: QColor(150, 255, 150),
    CellStatus.COMMENT_KEY_COLUMN: QColor(211, 211, 211),
    CellStatus.READ_ONLY_NOT_LOCALIZED: QColor(211, 211, 211),
}

STATUS_TIPS: dict[CellStatus, str] = {
    CellStatus.SOURCE_VALUE_MISSING: "Key has no value in the source file",
    CellStatus.DESTINATION_ONLY_ORPHAN: "Key exists only in the destination file",
    CellStatus.DESTINATION_VALUE_MISSING: "Not translated yet",
    CellStatus.READ_ONLY_NOT_LOCALIZED: "Key is not localized",
}


class PairTableModel(QAbstractTableModel):
    """Key (col 0), Source (col 1) and Destination (col 2)."""

    COLUMNS = ("Key", "Source", "Destination")

    def __init__(self, parent=None):
        super().__init__(parent)
        self._pair: FilePair | None = None

    # ── Public API ──────────────────────────────────────────────

    @property
    def pair(self) -> FilePair | None:
        return self._pair

    def set_pair(self, pair: FilePair | None) -> None:
        """Replace the underlying pair and refresh the view."""
        if self._pair is not None:
            self._pair.listener = None
        self.beginResetModel()
        self._pair = pair
        if pair is not None:
            pair.listener = self
        self.endResetModel()

    def insert_row(self, anchor_row: int, before: bool) -> int:
        """Insert an empty row next to *anchor_row*; returns its index."""
        return self._pair.insert_row(anchor_row, before)

    # ── PairListener ────────────────────────────────────────────

    def rows_about_to_be_inserted(self, row: int) -> None:
        self.beginInsertRows(QModelIndex(), row, row)

    def rows_inserted(self, row: int) -> None:
        self.endInsertRows()

    def cell_changed(self, row: int, column: Column) -> None:
        # Status of the whole row may change (e.g. a key was typed in)
        self.dataChanged.emit(self.index(row, 0), self.index(row, len(self.COLUMNS) - 1))

    def contents_changed(self) -> None:
        self.beginResetModel()
        self.endResetModel()

    # ── QAbstractTableModel overrides ───────────────────────────

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        if parent.isValid() or self._pair is None:
            return 0
        return self._pair.size() + 1

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self.COLUMNS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:
        if not index.isValid() or self._pair is None:
            return None
        row, col = index.row(), index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            return self._pair.get_cell(row, col)
        if role == Qt.BackgroundRole:
            return STATUS_COLORS.get(self._pair.cell_status(row, col))
        if role == Qt.ToolTipRole:
            return STATUS_TIPS.get(self._pair.cell_status(row, col))
        return None

    def setData(self, index: QModelIndex, value: Any, role: int = Qt.EditRole) -> bool:
        if not index.isValid() or self._pair is None or role != Qt.EditRole:
            return False
        text = "" if value is None else str(value)
        return self._pair.set_value(index.row(), index.column(), text)

    def headerData(
        self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole
    ) -> Any:
        if orientation == Qt.Vertical:
            if role == Qt.DisplayRole:
                return str(section + 1)
            return None
        if not 0 <= section < len(self.COLUMNS):
            return None
        if role == Qt.DisplayRole:
            if self._pair is not None and section == Column.SOURCE:
                return self._pair.source_path.name
            if self._pair is not None and section == Column.DEST:
                return self._pair.dest_path.name
            return self.COLUMNS[section]
        if role == Qt.ToolTipRole:
            if self._pair is not None and section == Column.SOURCE:
                return str(self._pair.source_path.absolute())
            if self._pair is not None and section == Column.DEST:
                return str(self._pair.dest_path.absolute())
            return "Unique key to retrieve this text from the application"
        return None

    def flags(self, index: QModelIndex) -> Qt.ItemFlags:
        if not index.isValid() or self._pair is None:
            return Qt.NoItemFlags
        base = Qt.ItemIsEnabled | Qt.ItemIsSelectable
        if self._pair.is_cell_editable(index.row(), index.column()):
            return base | Qt.ItemIsEditable
        return base
