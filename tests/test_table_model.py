"""Tests for the Qt table model over a FilePair (no widgets needed)."""

from __future__ import annotations

import pytest

pytest.importorskip("PySide6")

from PySide6.QtCore import QCoreApplication, Qt  # noqa: E402

from pteditor.file_pair import FilePair  # noqa: E402
from pteditor.table_model import STATUS_COLORS, PairTableModel  # noqa: E402
from pteditor.models import CellStatus  # noqa: E402


@pytest.fixture(scope="module", autouse=True)
def qt_app():
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def model(pair: FilePair) -> PairTableModel:
    m = PairTableModel()
    m.set_pair(pair)
    return m


class TestPairTableModel:
    def test_extra_append_row(self, model: PairTableModel, pair: FilePair):
        assert model.rowCount() == pair.size() + 1
        assert model.columnCount() == 3
        assert model.data(model.index(pair.size(), 1)) == ""

    def test_empty_model(self):
        assert PairTableModel().rowCount() == 0

    def test_display_text(self, model: PairTableModel):
        assert model.data(model.index(3, 0)) == "editor.window_title"
        assert model.data(model.index(3, 2), Qt.EditRole) == "Éditeur de traductions"

    def test_background_from_status(self, model: PairTableModel):
        assert model.data(model.index(5, 2), Qt.BackgroundRole) == STATUS_COLORS[
            CellStatus.DESTINATION_VALUE_MISSING
        ]
        assert model.data(model.index(3, 2), Qt.BackgroundRole) is None

    def test_flags(self, model: PairTableModel):
        assert model.flags(model.index(3, 2)) & Qt.ItemIsEditable
        assert not model.flags(model.index(3, 0)) & Qt.ItemIsEditable
        assert not model.flags(model.index(12, 2)) & Qt.ItemIsEditable

    def test_header_shows_file_names(self, model: PairTableModel):
        assert model.headerData(0, Qt.Horizontal) == "Key"
        assert model.headerData(1, Qt.Horizontal) == "pte.properties"
        assert model.headerData(2, Qt.Horizontal) == "pte_fr.properties"

    def test_set_data_edits_pair(self, model: PairTableModel, pair: FilePair):
        changed = []
        model.dataChanged.connect(lambda *args: changed.append((args[0].row(), args[1].column())))
        assert model.setData(model.index(5, 2), "Enregistrer")
        assert pair.get_row(5).dest_value == "Enregistrer"
        assert changed == [(5, 2)]

    def test_typing_in_append_row_adds_row(self, model: PairTableModel, pair: FilePair):
        counts = []
        model.rowsAboutToBeInserted.connect(lambda *args: counts.append(("before", args[1], model.rowCount())))
        model.rowsInserted.connect(lambda *args: counts.append(("after", args[1], model.rowCount())))
        size = pair.size()
        assert model.setData(model.index(size, 0), "new.key")
        assert counts == [("before", size, size + 1), ("after", size, size + 2)]
        assert model.rowCount() == size + 2
        assert model.data(model.index(size, 0)) == "new.key"
