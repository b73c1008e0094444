from __future__ import annotations

import json

from engine.blocks import ActionBlock, BlockRegistry
from engine.configs.settings import Settings, settings
from engine.utils.logging.logger import log_error, log_info, log_print, log_warn


def test_log_info_is_gated_by_verbose_setting(monkeypatch, capsys) -> None:
    monkeypatch.setattr(settings, "BLOCK_LOG_VERBOSE", False)
    log_info("hidden {}", 1)
    assert capsys.readouterr().out == ""

    monkeypatch.setattr(settings, "BLOCK_LOG_VERBOSE", True)
    log_info("shown {}", 2)
    captured = capsys.readouterr()
    assert "[INFO" in captured.out
    assert "shown 2" in captured.out


def test_print_warn_and_error_always_output(monkeypatch, capsys) -> None:
    monkeypatch.setattr(settings, "BLOCK_LOG_VERBOSE", False)

    log_print("code {}", "x")
    log_warn("warn {}", "y")
    log_error("literal {} braces")

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("[PRINT") and lines[0].endswith("code x")
    assert lines[1].startswith("[WARN") and lines[1].endswith("warn y")
    # 无参数时不做格式化
    assert lines[2].endswith("literal {} braces")


def test_snap_prints_details_when_attach_verbose(monkeypatch, capsys) -> None:
    registry = BlockRegistry()
    parent = ActionBlock(registry, (0.0, 0.0))
    child = ActionBlock(registry, (3.0, 44.0))

    monkeypatch.setattr(settings, "BLOCK_ATTACH_VERBOSE", True)
    assert child.try_attach_in_some_connection(parent) is True

    captured = capsys.readouterr()
    assert "[吸附]" in captured.out
    assert "(-3.00, -4.00)" in captured.out
    assert "[连接]" in captured.out


def test_snap_is_silent_by_default(capsys) -> None:
    registry = BlockRegistry()
    parent = ActionBlock(registry, (0.0, 0.0))
    child = ActionBlock(registry, (3.0, 44.0))

    assert child.try_attach_in_some_connection(parent) is True
    assert capsys.readouterr().out == ""


def test_settings_save_and_load_user_file(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(Settings, "_config_file", None)
    Settings.set_config_path(tmp_path)

    writer = Settings()
    writer.BLOCK_SNAP_RADIUS = 32.5
    writer.BLOCK_DRAG_VERBOSE = True
    assert writer.save() is True

    config_file = tmp_path / "app" / "runtime" / "cache" / "user_settings.json"
    saved = json.loads(config_file.read_text(encoding="utf-8"))
    assert saved["BLOCK_SNAP_RADIUS"] == 32.5
    assert saved["BLOCK_CODE_INDENT"] == "    "

    reader = Settings()
    assert reader.BLOCK_SNAP_RADIUS == 20.0
    assert reader.load() is True
    assert reader.BLOCK_SNAP_RADIUS == 32.5
    assert reader.BLOCK_DRAG_VERBOSE is True


def test_settings_without_config_path_skip_io(monkeypatch) -> None:
    monkeypatch.setattr(Settings, "_config_file", None)

    instance = Settings()
    assert instance.save() is False
    assert instance.load() is False


def test_debug_mode_toggles_all_verbose_flags() -> None:
    Settings.enable_debug_mode()
    assert Settings.BLOCK_LOG_VERBOSE and Settings.BLOCK_ATTACH_VERBOSE and Settings.BLOCK_DRAG_VERBOSE

    Settings.disable_debug_mode()
    assert not (Settings.BLOCK_LOG_VERBOSE or Settings.BLOCK_ATTACH_VERBOSE or Settings.BLOCK_DRAG_VERBOSE)


def test_settings_load_skips_unknown_and_mistyped_keys(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.setattr(Settings, "_config_file", tmp_path / "user_settings.json")
    Settings._config_file.write_text(
        json.dumps(
            {
                "BLOCK_SNAP_RADIUS": 12,
                "BLOCK_CODE_INDENT": 4,
                "BLOCK_DRAG_VERBOSE": "yes",
                "GRID_SIZE": 8,
            }
        ),
        encoding="utf-8",
    )

    instance = Settings()
    assert instance.load() is True

    assert instance.BLOCK_SNAP_RADIUS == 12.0
    assert isinstance(instance.BLOCK_SNAP_RADIUS, float)
    assert instance.BLOCK_CODE_INDENT == "    "
    assert instance.BLOCK_DRAG_VERBOSE is False
    warnings = [line for line in capsys.readouterr().out.splitlines() if line.startswith("[WARN")]
    assert len(warnings) == 3


def test_reset_to_defaults_clears_loaded_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(Settings, "_config_file", tmp_path / "user_settings.json")
    Settings._config_file.write_text(
        json.dumps({"BLOCK_SNAP_RADIUS": 50.0, "BLOCK_CODE_INDENT": "\t"}),
        encoding="utf-8",
    )

    assert settings.load() is True
    assert settings.BLOCK_SNAP_RADIUS == 50.0
    settings.BLOCK_ATTACH_VERBOSE = True

    Settings.reset_to_defaults()

    assert settings.BLOCK_SNAP_RADIUS == 20.0
    assert settings.BLOCK_CODE_INDENT == "    "
    assert settings.BLOCK_ATTACH_VERBOSE is False
    assert "BLOCK_SNAP_RADIUS" not in vars(settings)
