"""Tests for the commit pipeline."""

import pytest

from recordgrid.data.edit_tracker import EditTracker
from recordgrid.data.host import InMemoryHost
from recordgrid.data.record_store import RecordStore
from recordgrid.data.view_controller import ViewController
from recordgrid.models.targets import Circle, Document
from recordgrid.services.apply_handlers import default_registry
from recordgrid.services.commit_service import CommitResult, CommitService

COLUMNS = ["Handle", "DocumentPath", "Layer", "Radius"]

PLAN = "/work/plan.dwg"
DETAIL = "/work/detail.dwg"


def make_tracker(records):
    store = RecordStore(records, COLUMNS)
    view = ViewController(COLUMNS)
    view.set_view(list(store.records))
    tracker = EditTracker(view, store.identities)
    tracker.toggle_edit_mode()
    return tracker


@pytest.fixture
def documents():
    plan = Document(PLAN)
    detail = Document(DETAIL)
    circles = [plan.add(Circle()), plan.add(Circle()), detail.add(Circle())]
    return plan, detail, circles


@pytest.fixture
def host(documents):
    plan, detail, _ = documents
    return InMemoryHost([plan, detail], current_path=PLAN)


def records_for(circles):
    return [
        {"Handle": c.handle, "DocumentPath": c.document.path, "Layer": "0", "Radius": "1"}
        for c in circles
    ]


class TestCommitResult:
    def test_summary(self):
        result = CommitResult(applied=2, processed=3, failures=1)
        assert result.summary() == "Applied 2 of 3 edits, 1 failed"
        assert result.edits_applied

    def test_empty(self):
        assert not CommitResult().edits_applied


class TestCommitService:
    """Tests for applying pending edits."""

    def test_no_pending_is_noop(self, host):
        tracker = make_tracker([])
        result = CommitService(host).commit(tracker)
        assert (result.applied, result.processed) == (0, 0)
        assert host.lock_log == []

    def test_applies_edits_and_clears_pending(self, host, documents):
        _, _, circles = documents
        records = records_for(circles)
        tracker = make_tracker(records)
        tracker.edit_cell(0, "Layer", "A-WALL")
        tracker.edit_cell(2, "Radius", "4")

        result = CommitService(host).commit(tracker)

        assert (result.applied, result.processed, result.failures) == (2, 2, 0)
        assert circles[0].layer == "A-WALL"
        assert circles[2].radius == 4.0
        assert not tracker.has_pending
        assert tracker.touched_records == [records[0], records[2]]

    def test_failing_edit_does_not_stop_others(self, host, documents):
        """Three edits where the second one's handler raises: two apply."""
        _, _, circles = documents
        records = records_for(circles[:2])
        tracker = make_tracker(records)
        tracker.edit_cell(0, "Layer", "A-WALL")
        tracker.edit_cell(1, "Radius", "not a number")
        tracker.edit_cell(1, "Layer", "A-DOOR")

        result = CommitService(host).commit(tracker)

        assert (result.applied, result.processed, result.failures) == (2, 3, 1)
        assert circles[0].layer == "A-WALL"
        assert circles[1].layer == "A-DOOR"
        assert circles[1].radius == 1.0
        assert any("Radius" in d for d in result.diagnostics)
        assert not tracker.has_pending

    def test_current_document_first(self, host, documents):
        _, _, circles = documents
        records = records_for([circles[2], circles[0]])
        tracker = make_tracker(records)
        tracker.edit_cell(0, "Layer", "D")
        tracker.edit_cell(1, "Layer", "P")

        CommitService(host).commit(tracker)

        assert host.lock_log == [PLAN, DETAIL]

    def test_locked_document_is_skipped(self, host, documents):
        _, _, circles = documents
        tracker = make_tracker(records_for(circles))
        tracker.edit_cell(0, "Layer", "X")
        tracker.edit_cell(2, "Layer", "Y")
        host.lock_externally(DETAIL)

        result = CommitService(host).commit(tracker)

        assert (result.applied, result.skipped) == (1, 1)
        assert circles[0].layer == "X"
        assert circles[2].layer == "0"
        assert not tracker.has_pending

    def test_missing_handle_is_skipped(self, host):
        records = [{"Handle": "DEAD", "DocumentPath": PLAN, "Layer": "0"}, {"Layer": "0"}]
        tracker = make_tracker(records)
        tracker.edit_cell(0, "Layer", "X")
        tracker.edit_cell(1, "Layer", "Y")

        result = CommitService(host).commit(tracker)

        assert (result.applied, result.skipped) == (0, 2)
        assert len(result.diagnostics) == 2

    def test_cached_object_ref_used_for_current_document(self, host):
        circle = Circle()
        tracker = make_tracker([{"ObjectRef": circle, "Layer": "0"}])
        tracker.edit_cell(0, "Layer", "CACHED")

        result = CommitService(host, default_registry()).commit(tracker)

        assert result.applied == 1
        assert circle.layer == "CACHED"

    def test_unhandled_column_reports_diagnostic(self, host, documents):
        _, _, circles = documents
        tracker = make_tracker(records_for(circles[:1]))
        tracker.edit_record(tracker.view.record_at(0), "Contents", "text")

        result = CommitService(host).commit(tracker)

        assert (result.applied, result.failures, result.processed) == (0, 0, 1)
        assert "No handler" in result.diagnostics[0]
