"""Tests for the settings store handed to the engine."""

import json

import pytest

from regression_system.core import ConfigurationError, SettingsStore


class TestSettingsStore:
    """Tests for get/set/reset semantics."""

    def test_defaults_are_stringified(self, store):
        """Test that defaults are stored the way LEAN stores them."""
        assert store.get("forward-console-messages") == "true"
        assert store.get("data-folder") == "../../../Data/"

    def test_set_overrides_default(self, store):
        store.set("symbol-minute-limit", 100)
        assert store.get("symbol-minute-limit") == "100"

    def test_set_bool_lowercase(self, store):
        store.set("forward-console-messages", False)
        assert store.get("forward-console-messages") == "false"

    def test_get_missing_returns_default(self, store):
        assert store.get("missing-key") is None
        assert store.get("missing-key", "fallback") == "fallback"

    def test_reset_restores_defaults(self, store):
        """Test that reset drops overrides and keys added since."""
        store.set("symbol-minute-limit", "100")
        store.set("quandl-auth-token", "token")

        store.reset()

        assert store.get("symbol-minute-limit") == "10000"
        assert "quandl-auth-token" not in store

    def test_reset_is_idempotent(self, store):
        """Test that resetting twice equals resetting once."""
        store.set("symbol-minute-limit", "100")
        store.reset()
        once = store.snapshot()
        store.reset()

        assert store.snapshot() == once

    def test_snapshot_is_a_copy(self, store):
        snapshot = store.snapshot()
        snapshot["data-folder"] = "elsewhere"

        assert store.get("data-folder") == "../../../Data/"

    def test_get_value_decodes_json(self):
        store = SettingsStore({"regression-test-languages": ["CSharp"]})
        assert store.get_value("regression-test-languages") == ["CSharp"]

    def test_get_value_plain_string(self, store):
        assert store.get_value("data-folder") == "../../../Data/"

    def test_get_value_missing_returns_default(self, store):
        assert store.get_value("regression-test-languages", ["Python"]) == ["Python"]


class TestSettingsFile:
    """Tests for loading defaults from a LEAN config.json."""

    def test_from_file_strips_comment_lines(self, temp_dir):
        config_file = temp_dir / "config.json"
        config_file.write_text(
            "{\n"
            "  // algorithm settings\n"
            '  "environment": "backtesting",\n'
            '  "data-folder": "../Data/"\n'
            "}\n"
        )

        store = SettingsStore.from_file(config_file)

        assert store.get("environment") == "backtesting"
        assert store.get("data-folder") == "../Data/"

    def test_from_file_extra_values_win(self, temp_dir):
        config_file = temp_dir / "config.json"
        config_file.write_text(json.dumps({"data-folder": "../Data/"}))

        store = SettingsStore.from_file(config_file, {"data-folder": "/data"})

        assert store.get("data-folder") == "/data"
        store.set("data-folder", "other")
        store.reset()
        assert store.get("data-folder") == "/data"

    def test_from_file_missing_raises(self, temp_dir):
        with pytest.raises(ConfigurationError, match="Error reading"):
            SettingsStore.from_file(temp_dir / "missing.json")

    def test_from_file_invalid_json_raises(self, temp_dir):
        config_file = temp_dir / "config.json"
        config_file.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            SettingsStore.from_file(config_file)

    def test_from_file_non_object_raises(self, temp_dir):
        config_file = temp_dir / "config.json"
        config_file.write_text("[1, 2]")

        with pytest.raises(ConfigurationError, match="JSON object"):
            SettingsStore.from_file(config_file)
