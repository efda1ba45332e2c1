"""Tests for QSettings-backed configuration and logging setup."""

import logging
import logging.handlers
from pathlib import Path
from typing import Iterator, List

import pytest

from keyframe_studio.animation.models import LoopMode
from keyframe_studio.settings import AppSettings, ConfigError, ConfigVersion
from keyframe_studio.utils.logging_config import ColoredFormatter, CSVFormatter, setup_logging


@pytest.fixture
def app_settings(ini_settings) -> AppSettings:
    return AppSettings(settings=ini_settings)


@pytest.fixture
def root_handlers() -> Iterator[List[logging.Handler]]:
    """Restore the root logger's handlers after setup_logging() replaced them."""
    root = logging.getLogger()
    saved = list(root.handlers)
    level = root.level
    yield saved
    for handler in root.handlers:
        if handler not in saved:
            handler.close()
    root.handlers[:] = saved
    root.setLevel(level)


class TestAppSettings:
    """Test profile handling, version stamp and first run."""

    def test_first_run_stamp(self, app_settings: AppSettings) -> None:
        assert app_settings.version == ConfigVersion.CURRENT.value
        assert app_settings.is_first_run
        app_settings.set_first_run_complete()
        assert not app_settings.is_first_run

    def test_old_version_is_restamped(self, ini_settings) -> None:
        ini_settings.setValue("default/app/version", "0.9")
        ini_settings.setValue("default/app/first_run", False)
        settings = AppSettings(settings=ini_settings)
        assert settings.version == ConfigVersion.CURRENT.value
        assert not settings.is_first_run

    def test_profile_group(self, ini_settings) -> None:
        AppSettings(profile="testing", settings=ini_settings)
        assert ini_settings.group() == "testing"

    def test_settings_file_path(self, app_settings: AppSettings, ini_settings) -> None:
        assert app_settings.get_settings_file_path() == ini_settings.fileName()


class TestEditorSettings:
    """Test editor defaults, clamping and rejected values."""

    def test_defaults(self, app_settings: AppSettings) -> None:
        editor = app_settings.editor
        assert editor.default_duration == 2000
        assert editor.default_loop_mode is LoopMode.PINGPONG
        assert editor.default_easing == "easeInOutQuad"
        assert editor.frame_interval == 16
        assert editor.keyframe_hitbox == 6
        assert editor.rotation_unit == "radians"

    def test_duration_clamped(self, app_settings: AppSettings) -> None:
        app_settings.editor.default_duration = 50
        assert app_settings.editor.default_duration == 100
        app_settings.editor.default_duration = 45000
        assert app_settings.editor.default_duration == 30000

    def test_loop_mode_round_trip(self, app_settings: AppSettings) -> None:
        app_settings.editor.default_loop_mode = "hold"
        assert app_settings.editor.default_loop_mode is LoopMode.HOLD

    def test_invalid_values_raise(self, app_settings: AppSettings) -> None:
        with pytest.raises(ConfigError):
            app_settings.editor.default_loop_mode = "sideways"
        with pytest.raises(ConfigError):
            app_settings.editor.default_easing = "wobbly"
        with pytest.raises(ConfigError):
            app_settings.editor.rotation_unit = "gradians"

    def test_stored_garbage_loop_mode_falls_back(self, app_settings: AppSettings) -> None:
        app_settings.settings.setValue("editor/default_loop_mode", "sideways")
        assert app_settings.editor.default_loop_mode is LoopMode.PINGPONG


class TestValidation:
    """Test AppSettings.validate()."""

    def test_fresh_settings_are_valid(self, app_settings: AppSettings) -> None:
        result = app_settings.validate()
        assert result.is_valid
        assert result.errors == []

    def test_unknown_easing_is_error(self, app_settings: AppSettings) -> None:
        app_settings.settings.setValue("editor/default_easing", "wobbly")
        result = app_settings.validate()
        assert not result.is_valid
        assert any("wobbly" in error for error in result.errors)

    def test_clamped_duration_is_warning(self, app_settings: AppSettings) -> None:
        app_settings.settings.setValue("editor/default_duration", 50)
        result = app_settings.validate()
        assert result.is_valid
        assert any("clamped" in warning for warning in result.warnings)

    def test_missing_recent_files_pruned(self, app_settings: AppSettings, tmp_path: Path) -> None:
        existing = tmp_path / "kept.json"
        existing.write_text("{}")
        app_settings.ui.add_recent_file(tmp_path / "gone.json")
        app_settings.ui.add_recent_file(existing)

        result = app_settings.validate()
        assert result.is_valid
        assert len(result.warnings) == 1
        assert app_settings.ui.recent_files == [str(existing)]


class TestLogging:
    """Test logging setup and formatters."""

    def test_console_only(self, app_settings: AppSettings, root_handlers) -> None:
        app_settings.logging.console_log_level = "warning"
        setup_logging(app_settings)
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert handlers[0].level == logging.WARNING
        assert isinstance(handlers[0].formatter, ColoredFormatter)

    def test_file_logging(self, app_settings: AppSettings, root_handlers, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        app_settings.logging.console_logging = False
        app_settings.logging.file_logging = True
        setup_logging(app_settings)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.handlers.RotatingFileHandler)
        assert (tmp_path / "logs" / "keyframe_studio.csv").exists()

    def test_invalid_level_is_ignored(self, app_settings: AppSettings) -> None:
        app_settings.logging.console_log_level = "LOUD"
        assert app_settings.logging.console_log_level == "INFO"

    def test_csv_formatter_escapes_quotes(self) -> None:
        record = logging.LogRecord("keyframe_studio.test", logging.INFO, __file__, 12, 'say "hi"', None, None)
        line = CSVFormatter().format(record)
        assert line.endswith('"say ""hi"""')
        assert '"keyframe_studio.test"' in line

    def test_colored_formatter(self) -> None:
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
        line = ColoredFormatter(fmt="%(levelname)s %(message)s").format(record)
        assert line.startswith("\033[33mWARNING\033[0m")
