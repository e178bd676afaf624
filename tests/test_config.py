"""Tests for YAML config loading."""
from pathlib import Path

from kanban_sync.config import Config


def test_defaults_when_file_missing(tmp_path):
    cfg = Config.load(str(tmp_path / "nope.yaml"))
    assert cfg.quiet_period_ms == 800
    assert cfg.port == 3000
    assert cfg.export_filename == "kanban-export.json"
    assert not cfg.cache_path.startswith("~")


def test_yaml_overrides_and_unknown_keys_ignored(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "quiet_period_ms: 300\n"
        "server_url: null\n"
        "state_file: ~/kanban/state.json\n"
        "colour_scheme: dark\n"
    )
    cfg = Config.load(str(path))
    assert cfg.quiet_period_ms == 300
    assert cfg.server_url is None
    assert cfg.state_file == str(Path.home() / "kanban" / "state.json")
    assert not hasattr(cfg, "colour_scheme")


def test_broken_yaml_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("quiet_period_ms: [unclosed\n")
    assert Config.load(str(path)).quiet_period_ms == 800


def test_broken_yaml_is_logged(tmp_path, caplog):
    path = tmp_path / "config.yaml"
    path.write_text("port: [unclosed\n")
    with caplog.at_level("WARNING", logger="kanban_sync.config"):
        Config.load(str(path))
    assert "Config unreadable" in caplog.text
