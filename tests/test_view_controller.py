"""Tests for the view controller and record store."""

from recordgrid.data.record_store import RecordStore
from recordgrid.data.view_controller import ViewController


def make_view():
    rows = [{"Name": f"R{i}", "Value": i} for i in range(5)]
    view = ViewController(["Name", "Value"])
    view.set_view(rows)
    return view, rows


class TestViewController:
    """Tests for row and cell access."""

    def test_sequence_protocol(self):
        view, rows = make_view()
        assert len(view) == 5
        assert view[2] is rows[2]

    def test_get_rows_window(self):
        view, _ = make_view()
        assert view.get_rows(1, 3) == [["R1", "1"], ["R2", "2"]]

    def test_get_rows_clamped(self):
        view, _ = make_view()
        assert view.get_rows(-5, 100) == view.get_rows(0, 5)
        assert view.get_rows(10, 20) == []

    def test_out_of_range_cells(self):
        view, _ = make_view()
        assert view.record_at(99) is None
        assert view.cell_value(0, 9) is None
        assert view.cell_display(99, 0) == ""

    def test_missing_key_displays_empty(self):
        view = ViewController(["Name", "Other"])
        view.set_view([{"Name": "A"}])
        assert view.get_rows(0, 1) == [["A", ""]]

    def test_set_view_invalidates_row_index(self):
        view, rows = make_view()
        assert view.row_index_of(rows[4]) == 4
        view.set_view(list(reversed(rows)))
        assert view.row_index_of(rows[4]) == 0
        assert view.row_count == 5

    def test_set_view_changes_columns(self):
        view, _ = make_view()
        view.set_view(view.rows, ["Value"])
        assert view.columns == ["Value"]
        assert view.column_index("Name") is None

    def test_headers_formatted(self):
        view = ViewController(["DocumentPath"])
        assert view.headers == ["document path"]

    def test_initial_sizing_once(self):
        view, _ = make_view()
        assert view.consume_initial_sizing() is True
        assert view.consume_initial_sizing() is False

    def test_rows_are_references(self):
        view, rows = make_view()
        rows[0]["Name"] = "Edited"
        assert view.cell_display(0, 0) == "Edited"


class TestRecordStore:
    """Tests for the record store."""

    def test_identities_assigned_on_load(self):
        records = [{"Name": "A"}, {"Name": "B"}]
        store = RecordStore(records, ["Name"])
        assert len(store) == 2
        assert store.identity_of(records[0]) != store.identity_of(records[1])
        assert store.record_for(store.identity_of(records[1])) is records[1]

    def test_remove_records_by_reference(self):
        records = [{"Name": "A"}, {"Name": "A"}]
        store = RecordStore(records, ["Name"])
        assert store.remove_records([records[1]]) == 1
        assert store.records == [records[0]]
        assert store.records[0] is records[0]
        assert len(store) == 1

    def test_remove_nothing(self):
        store = RecordStore([{"Name": "A"}], ["Name"])
        assert store.remove_records([]) == 0
        assert store.remove_records([{"Name": "A"}]) == 0

    def test_store_copies_list_not_records(self):
        records = [{"Name": "A"}]
        store = RecordStore(records, ["Name"])
        records.append({"Name": "B"})
        assert len(store) == 1
        assert store.records[0] is records[0]
