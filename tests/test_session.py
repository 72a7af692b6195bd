"""Tests for GridSession: the end-to-end engine flow without Tk."""

import pytest

from recordgrid.data.host import InMemoryHost
from recordgrid.data.session import GridSession
from recordgrid.models.constants import SEARCH_TEXT_KEY
from recordgrid.models.targets import Circle, Document
from recordgrid.services.transform_service import TransformSpec
from recordgrid.settings import EngineSettings, SessionOptions

COLUMNS = ["Name", "Layer", "Handle"]


class FakeScheduler:
    """Records after() calls instead of running a Tk event loop."""

    def __init__(self):
        self.pending = {}
        self.count = 0

    def after(self, ms, func):
        self.count += 1
        after_id = f"after#{self.count}"
        self.pending[after_id] = func
        return after_id

    def after_cancel(self, after_id):
        self.pending.pop(after_id, None)

    def run_pending(self):
        callbacks = list(self.pending.values())
        self.pending.clear()
        for func in callbacks:
            func()


@pytest.fixture
def records():
    return [
        {"Name": "Wall 1", "Layer": "A-WALL", "Handle": "1"},
        {"Name": "Door 1", "Layer": "A-DOOR", "Handle": "2"},
        {"Name": "Wall 10", "Layer": "A-WALL", "Handle": "3"},
        {"Name": "Beam", "Layer": "S-BEAM", "Handle": "4"},
    ]


@pytest.fixture
def session(records):
    return GridSession(records, COLUMNS)


def visible_names(session):
    return [record["Name"] for record in session.view.rows]


class TestQueryAndSort:
    """Tests for filtering and sorting through the session."""

    def test_glob_round_trip(self, session):
        session.set_query("A*")
        assert visible_names(session) == ["Wall 1", "Door 1", "Wall 10"]
        session.set_query("")
        assert len(session.view) == 4

    def test_query_and_its_negation_show_all(self, session):
        session.set_query("layer:A-WALL,-layer:A-WALL")
        assert len(session.view) == 4

    def test_visibility_changes_columns(self, session):
        session.set_query("$name")
        assert session.view.columns == ["Name"]

    def test_click_header_sorts_naturally(self, session):
        session.click_header("Name")
        assert visible_names(session) == ["Beam", "Door 1", "Wall 1", "Wall 10"]
        session.click_header("Name")
        assert visible_names(session) == ["Wall 10", "Wall 1", "Door 1", "Beam"]

    def test_view_changed_callbacks(self, session):
        calls = []
        session.on_view_changed.append(lambda: calls.append(session.view.row_count))
        session.set_query("beam")
        assert calls == [1]

    def test_refresh_resets_selection(self, session):
        session.selected_rows = [0, 1]
        session.toggle_edit_mode()
        session.tracker.set_current_cell(0, 0)
        session.set_query("wall")
        assert session.selected_rows == []
        assert session.tracker.selected_cells == []

    def test_initial_selection_clamped(self, records):
        options = SessionOptions(initial_selection=[1, 9])
        session = GridSession(records, COLUMNS, options)
        assert session.selected_rows == [1]


class TestDebounce:
    def test_small_sets_filter_immediately(self, records):
        scheduler = FakeScheduler()
        session = GridSession(records, COLUMNS, scheduler=scheduler)
        session.set_query("beam")
        assert scheduler.pending == {}
        assert len(session.view) == 1

    def test_large_sets_are_debounced(self, records):
        scheduler = FakeScheduler()
        settings = EngineSettings(debounce_record_threshold=2)
        session = GridSession(records, COLUMNS, settings=settings, scheduler=scheduler)

        session.set_query("b")
        session.set_query("be")
        session.set_query("beam")
        assert len(session.view) == 4
        assert len(scheduler.pending) == 1

        scheduler.run_pending()
        assert visible_names(session) == ["Beam"]

    def test_flush_query(self, records):
        scheduler = FakeScheduler()
        settings = EngineSettings(debounce_record_threshold=0)
        session = GridSession(records, COLUMNS, settings=settings, scheduler=scheduler)
        session.set_query("door")
        session.flush_query()
        assert visible_names(session) == ["Door 1"]
        assert scheduler.pending == {}

    def test_confirm_uses_pending_query(self, records):
        """Row indexes refer to the typed query even before the timer fires."""
        scheduler = FakeScheduler()
        settings = EngineSettings(debounce_record_threshold=2)
        session = GridSession(records, COLUMNS, settings=settings, scheduler=scheduler)
        session.set_query("beam")
        assert session.confirm(rows=[0]) == [records[3]]
        assert scheduler.pending == {}

    def test_cancel_drops_pending_query(self, records):
        scheduler = FakeScheduler()
        settings = EngineSettings(debounce_record_threshold=2)
        session = GridSession(records, COLUMNS, settings=settings, scheduler=scheduler)
        calls = []
        session.on_view_changed.append(lambda: calls.append(session.view.row_count))

        session.set_query("beam")
        session.cancel()
        assert scheduler.pending == {}
        assert calls == []
        assert session.result == []

    def test_header_click_supersedes_pending_query(self, records):
        scheduler = FakeScheduler()
        settings = EngineSettings(debounce_record_threshold=2)
        session = GridSession(records, COLUMNS, settings=settings, scheduler=scheduler)
        session.set_query("wall")
        session.click_header("Name")
        assert scheduler.pending == {}
        assert visible_names(session) == ["Wall 1", "Wall 10"]

    def test_delete_uses_pending_query(self, records):
        deleted = []

        def on_delete(doomed):
            deleted.extend(doomed)
            return True

        scheduler = FakeScheduler()
        settings = EngineSettings(debounce_record_threshold=2)
        session = GridSession(
            records,
            COLUMNS,
            SessionOptions(on_delete=on_delete),
            settings=settings,
            scheduler=scheduler,
        )
        session.set_query("beam")
        assert session.delete_rows([0]) == 1
        assert deleted == [records[3]]
        assert scheduler.pending == {}
        assert visible_names(session) == []

    def test_export_uses_pending_query(self, records, tmp_path):
        scheduler = FakeScheduler()
        settings = EngineSettings(debounce_record_threshold=2)
        session = GridSession(records, COLUMNS, settings=settings, scheduler=scheduler)
        session.set_query("beam")

        path = tmp_path / "view.csv"
        assert session.export_csv(str(path)) == 1
        assert path.read_text(encoding="utf-8").splitlines()[1:] == ["Beam,S-BEAM,4"]
        assert scheduler.pending == {}


class TestOutcomes:
    """Tests for how a session ends."""

    def test_finish_selection(self, session, records):
        session.selected_rows = [1, 3]
        assert session.confirm() == [records[1], records[3]]
        assert session.closed

    def test_create_from_search(self, records):
        options = SessionOptions(allow_create_from_search=True)
        session = GridSession(records, COLUMNS, options)
        session.set_query("  new layer  ")
        assert session.confirm() == [{SEARCH_TEXT_KEY: "new layer"}]

    def test_create_from_search_not_allowed(self, session):
        session.set_query("zzz")
        assert session.confirm() == []
        assert session.closed

    def test_escape_leaves_edit_mode_first(self, session):
        session.toggle_edit_mode()
        assert session.escape() is False
        assert not session.tracker.is_edit_mode
        assert session.escape() is True
        assert session.closed
        assert session.result == []

    def test_cancel_restores_values(self, session, records):
        session.toggle_edit_mode()
        session.tracker.edit_cell(0, "Layer", "X")
        session.cancel()
        assert records[0]["Layer"] == "A-WALL"
        assert session.result == []

    def test_commit_without_host_returns_touched(self, session, records):
        session.toggle_edit_mode()
        session.tracker.edit_cell(2, "Name", "Renamed")
        assert session.confirm() == [records[2]]
        assert session.edits_applied
        assert session.last_commit.applied == 1
        assert records[2]["Name"] == "Renamed"

    def test_edit_mode_enter_without_edits(self, session):
        session.toggle_edit_mode()
        assert session.confirm() == []
        assert session.closed

    def test_title_text(self, session):
        session.set_query("wall")
        session.selected_rows = [0]
        assert session.title_text == "Records - Selected: 1, Filtered: 2, Total: 4"
        session.toggle_edit_mode()
        assert session.title_text.endswith("[EDIT MODE]")


class TestEditing:
    def test_paste_and_transform(self, session, records):
        session.toggle_edit_mode()
        session.tracker.select_cells([(0, 1), (1, 1)])
        assert session.paste("Z-LAYER") == (2, 0)
        assert session.apply_transform(TransformSpec(find_text="Z-", replace_text="A-")) == 2
        assert [records[0]["Layer"], records[1]["Layer"]] == ["A-LAYER", "A-LAYER"]

    def test_commit_through_host(self):
        drawing = Document("/work/plan.dwg")
        circle = drawing.add(Circle())
        records = [{"Handle": circle.handle, "Layer": "0"}]
        session = GridSession(records, ["Handle", "Layer"], host=InMemoryHost([drawing]))

        session.toggle_edit_mode()
        session.tracker.edit_cell(0, "Layer", "A-WALL")
        assert session.confirm() == [records[0]]
        assert circle.layer == "A-WALL"
        assert session.last_commit.summary() == "Applied 1 of 1 edits"

    def test_pending_cells_follow_records_through_sort(self, session, records):
        session.toggle_edit_mode()
        session.tracker.edit_cell(0, "Layer", "X")
        assert session.pending_cells() == [(0, 1)]

        session.click_header("Name")
        assert visible_names(session)[2] == "Wall 1"
        assert session.pending_cells() == [(2, 1)]

    def test_pending_cells_skip_hidden_rows(self, session):
        session.toggle_edit_mode()
        session.tracker.edit_cell(0, "Layer", "X")
        session.set_query("door")
        assert session.pending_cells() == []
        session.set_query("$name")
        assert session.pending_cells() == []


class TestDelete:
    def test_delete_requires_callback(self, session):
        session.selected_rows = [0]
        assert session.delete_rows() == 0
        assert len(session.store) == 4

    def test_delete_removes_from_store_and_view(self, records):
        deleted = []

        def on_delete(doomed):
            deleted.extend(doomed)
            return True

        session = GridSession(records, COLUMNS, SessionOptions(on_delete=on_delete))
        session.set_query("wall")
        assert session.delete_rows([1]) == 1
        assert deleted == [records[2]]
        assert visible_names(session) == ["Wall 1"]
        assert len(session.store) == 3

    def test_delete_declined(self, records):
        session = GridSession(records, COLUMNS, SessionOptions(on_delete=lambda r: False))
        assert session.delete_rows([0]) == 0
        assert len(session.store) == 4

    def test_no_delete_in_edit_mode(self, records):
        session = GridSession(records, COLUMNS, SessionOptions(on_delete=lambda r: True))
        session.toggle_edit_mode()
        assert session.delete_rows([0]) == 0


class TestExport:
    def test_exports_visible_view(self, session, tmp_path):
        session.set_query("$name door")
        path = tmp_path / "view.csv"
        assert session.export_csv(str(path)) == 1
        assert path.read_text(encoding="utf-8").splitlines() == ["name", "Door 1"]
