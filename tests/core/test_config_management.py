# tests/core/test_config_management.py
import json
import logging

import pytest

from mutflex_shell.core.context.shell_context import ShellContext
from mutflex_shell.core.handlers.config_handler import handle_config
from mutflex_shell.core.managers.config_manager import ConfigManager
from mutflex_shell.core.utils.configure_logging import LogWithTqdm, configure_logger
from mutflex_shell.core.utils.path_utils import PathUtils

# Een standaard, voorspelbare configuratie voor onze tests
MOCK_SETTINGS_CONTENT = {
    "debug": {
        "level": "WARNING"
    },
    "editor": {
        "layout_direction": "rtl",
        "visual_edit": {
            "debounce_ms": 300,
            "flush_on_teardown": False
        }
    }
}


@pytest.fixture
def config_env(tmp_path, monkeypatch, uploads):
    """
    Een geïsoleerde testomgeving voor de ConfigManager:
    - Creëert een tijdelijke package root met een nep 'settings.json'.
    - Monkeypatched PathUtils om naar deze tijdelijke locatie te wijzen.
    - Herlaadt na afloop de echte configuratie, zodat andere tests er geen last van hebben.
    """
    package_root = tmp_path / "mutflex_shell"
    package_root.mkdir()
    (package_root / "settings.json").write_text(json.dumps(MOCK_SETTINGS_CONTENT))

    monkeypatch.setattr(PathUtils, 'get_shell_package_root', lambda: package_root)

    manager = ConfigManager()
    manager.reset()
    yield manager, ShellContext(uploads=uploads)

    monkeypatch.undo()
    manager.reset()


def test_config_manager_is_a_singleton():
    assert ConfigManager() is ConfigManager()


def test_config_manager_load(config_env):
    manager, _ = config_env
    config = manager.get_all()
    assert config["debug"]["level"] == "WARNING"
    assert config["editor"]["visual_edit"]["debounce_ms"] == 300


def test_config_manager_get_nested(config_env):
    manager, _ = config_env
    assert manager.get_nested("editor.layout_direction") == "rtl"
    assert manager.get_nested("non.existent.key", "default") == "default"


def test_config_manager_set_nested_casts_types(config_env):
    """Nieuwe waarden krijgen het type van de bestaande waarde."""
    manager, _ = config_env

    manager.set_nested("editor.visual_edit.debounce_ms", "500")
    assert manager.get_nested("editor.visual_edit.debounce_ms") == 500

    manager.set_nested("editor.visual_edit.flush_on_teardown", "true")
    assert manager.get_nested("editor.visual_edit.flush_on_teardown") is True

    manager.set_nested("new_feature.enabled", "yes")
    assert manager.get_nested("new_feature.enabled") == "yes"


def test_config_manager_reset(config_env):
    manager, _ = config_env
    manager.set_nested("debug.level", "DEBUG")
    manager.reset()
    assert manager.get_nested("debug.level") == "WARNING"


def test_missing_settings_file_gives_empty_config(tmp_path, monkeypatch):
    monkeypatch.setattr(PathUtils, 'get_shell_package_root', lambda: tmp_path)
    manager = ConfigManager()
    try:
        manager.reset()
        assert manager.get_all() == {}
    finally:
        monkeypatch.undo()
        manager.reset()


# --- Tests voor de 'config' command handler ---

def test_handle_config_list(config_env, capsys):
    _, ctx = config_env
    assert handle_config(["list"], ctx) == 0
    output_json = json.loads(capsys.readouterr().out)
    assert output_json["editor"]["layout_direction"] == "rtl"


def test_handle_config_get(config_env, capsys):
    _, ctx = config_env
    assert handle_config(["get", "editor.visual_edit.debounce_ms"], ctx) == 0
    assert capsys.readouterr().out.strip() == "300"
    assert handle_config(["get", "editor.nothing"], ctx) == 1


def test_handle_config_set(config_env, capsys):
    manager, ctx = config_env
    assert handle_config(["set", "editor.layout_direction", "ltr"], ctx) == 0
    assert "Config updated: editor.layout_direction = ltr" in capsys.readouterr().out
    assert manager.get_nested("editor.layout_direction") == "ltr"


def test_handle_config_reset(config_env, capsys):
    manager, ctx = config_env
    handle_config(["set", "debug.level", "CRITICAL"], ctx)
    handle_config(["reset"], ctx)
    assert "Configuration has been reset" in capsys.readouterr().out
    assert manager.get_nested("debug.level") == "WARNING"


def test_debounce_setting_reaches_new_surfaces(config_env):
    """Een gewijzigde debounce geldt voor daarna geopende editors."""
    manager, ctx = config_env
    manager.set_nested("editor.visual_edit.debounce_ms", "50")
    editor = ctx.open_editor("<p>x</p>")
    assert editor.visual._debouncer.delay == pytest.approx(0.05)


def test_settings_file_can_be_overridden_by_env(tmp_path, monkeypatch):
    """MUTFLEX_SETTINGS wijst naar een ander instellingenbestand."""
    custom = tmp_path / "site.json"
    custom.write_text(json.dumps({"editor": {"layout_direction": "ltr"}}))
    monkeypatch.setenv("MUTFLEX_SETTINGS", str(custom))

    manager = ConfigManager()
    try:
        manager.reset()
        assert manager.get_nested("editor.layout_direction") == "ltr"
    finally:
        monkeypatch.undo()
        manager.reset()


def test_broken_settings_file_gives_empty_config(tmp_path, monkeypatch):
    (tmp_path / "settings.json").write_text("{not json")
    monkeypatch.setattr(PathUtils, 'get_shell_package_root', lambda: tmp_path)
    manager = ConfigManager()
    try:
        manager.reset()
        assert manager.get_all() == {}
    finally:
        monkeypatch.undo()
        manager.reset()


def test_configure_logger_installs_single_tqdm_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        handler = configure_logger("debug", {"article_editor": "ERROR"}, {"werkzeug": "CRITICAL"})
        assert root.handlers == [handler]
        assert isinstance(handler, LogWithTqdm)
        assert root.level == logging.DEBUG
        assert logging.getLogger("article_editor").level == logging.ERROR
        assert logging.getLogger("werkzeug").level == logging.CRITICAL
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        logging.getLogger("article_editor").setLevel(logging.NOTSET)
        logging.getLogger("werkzeug").setLevel(logging.NOTSET)
