import pytest

pytest.importorskip("PyQt6.QtCore")

from PyQt6.QtCore import QSettings

from shadernudge.core.placeholder import StagingMode
from shadernudge.editor.settings import EditorSettings, NudgeConfig


@pytest.fixture
def settings(qapp, tmp_path):
    return EditorSettings(QSettings(str(tmp_path / "shadernudge.ini"), QSettings.Format.IniFormat))


def test_defaults(settings):
    config = settings.nudge_config()
    assert config == NudgeConfig()
    assert config.host == "localhost"
    assert config.port == 8765
    assert config.start_timeout == 5.0
    assert config.placeholder == "u_inline1f"
    assert config.staging_mode is StagingMode.REPLACE
    assert config.variant == "nudgebox"
    assert config.formatter is None


def test_round_trip(settings):
    config = NudgeConfig(
        host="127.0.0.1",
        port=9000,
        start_timeout=2.5,
        stop_timeout=1.0,
        placeholder="u_live",
        staging_mode=StagingMode.OFFSET,
        variant="slider",
        formatter=["clang-format", "-style=file"],
    )
    settings.set_nudge_config(config)
    settings.sync()
    assert settings.nudge_config() == config


def test_bad_values_fall_back_to_defaults(settings):
    settings.set(EditorSettings.KEY_PORT, "eighty")
    settings.set(EditorSettings.KEY_START_TIMEOUT, "soon")
    settings.set(EditorSettings.KEY_STAGING_MODE, "sideways")
    settings.set(EditorSettings.KEY_VARIANT, "knob")
    config = settings.nudge_config()
    assert config.port == 8765
    assert config.start_timeout == 5.0
    assert config.staging_mode is StagingMode.REPLACE
    assert config.variant == "nudgebox"


def test_last_file_path_must_exist(settings, tmp_path):
    shader = tmp_path / "a.frag"
    settings.set_last_file_path(shader)
    assert settings.get_last_file_path() is None
    shader.write_text("void main() {}")
    assert settings.get_last_file_path() == shader
