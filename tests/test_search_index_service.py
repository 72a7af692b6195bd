"""Unit tests for SearchIndexService."""

from recordgrid.models.record import IdentityTable
from recordgrid.services.search_index_service import SearchIndexService


class TestSearchIndexService:
    """Basic tests for SearchIndexService."""

    def test_empty_service(self):
        """New service has nothing indexed."""
        service = SearchIndexService()
        assert len(service) == 0
        assert service.row_text(1) == ""
        assert service.column_text(1, "Name") == ""

    def test_rebuild_index_lowercases(self):
        identities = IdentityTable()
        records = [{"Name": "Circle", "Layer": "A-WALL", "Radius": 2.5}]
        service = SearchIndexService()
        service.rebuild_index(records, ["Name", "Layer", "Radius"], identities)

        identity = identities.peek(records[0])
        assert service.column_text(identity, "Layer") == "a-wall"
        assert service.column_text(identity, "Radius") == "2.5"
        assert service.row_text(identity) == "circle a-wall 2.5"

    def test_missing_columns_are_skipped(self):
        identities = IdentityTable()
        records = [{"Name": "Arc"}]
        service = SearchIndexService()
        service.rebuild_index(records, ["Name", "Layer"], identities)

        identity = identities.peek(records[0])
        assert service.column_text(identity, "Layer") == ""
        assert service.row_text(identity) == "arc"

    def test_rebuild_clears_previous(self):
        identities = IdentityTable()
        first = {"Name": "Old"}
        second = {"Name": "New"}
        service = SearchIndexService()
        service.rebuild_index([first], ["Name"], identities)
        service.rebuild_index([second], ["Name"], identities)

        assert service.column_text(identities.peek(first), "Name") == ""
        assert service.column_text(identities.peek(second), "Name") == "new"
        assert len(service) == 1

    def test_unindexed_identity_falls_back_to_record(self):
        service = SearchIndexService()
        service.rebuild_index([], ["Name"], IdentityTable())
        record = {"Name": "Live"}
        assert service.column_text(99, "Name", record) == "live"
        assert service.row_text(99, record) == "live"

    def test_edits_do_not_update_index(self):
        """Matching uses the indexed text until the next rebuild."""
        identities = IdentityTable()
        record = {"Name": "Before"}
        service = SearchIndexService()
        service.rebuild_index([record], ["Name"], identities)

        record["Name"] = "After"
        assert service.column_text(identities.peek(record), "Name") == "before"
