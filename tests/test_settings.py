"""Tests for session options and engine settings."""

from recordgrid.settings import EngineSettings, SessionOptions


class TestEngineSettings:
    def test_default_allow_list(self):
        settings = EngineSettings()
        assert settings.is_column_editable("Layer")
        assert settings.is_column_editable("attr_TITLE")
        assert not settings.is_column_editable("Handle")

    def test_custom_allow_list(self):
        settings = EngineSettings(editable_columns=frozenset({"handle"}), editable_prefixes=())
        assert settings.is_column_editable("Handle")
        assert not settings.is_column_editable("Layer")

    def test_should_debounce_above_threshold(self):
        settings = EngineSettings(debounce_record_threshold=200)
        assert not settings.should_debounce(200)
        assert settings.should_debounce(201)

    def test_colors_are_per_instance(self):
        first, second = EngineSettings(), EngineSettings()
        first.colors["readonly_cell_bg"] = "red"
        assert second.colors["readonly_cell_bg"] != "red"


class TestSessionOptions:
    def test_defaults(self):
        options = SessionOptions()
        assert options.initial_selection == ()
        assert options.on_delete is None
        assert not options.allow_create_from_search
