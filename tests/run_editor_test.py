import pytest

pytest.importorskip("PyQt6.QtWidgets")

from PyQt6.QtGui import QColor, QPalette

from shadernudge.editor.run_editor import DARK_COLORS, apply_dark_palette, build_arg_parser


def test_arguments():
    args = build_arg_parser().parse_args(
        ["shader.frag", "--port", "9000", "--formatter", "clang-format -style=file", "--log-level", "DEBUG"]
    )
    assert args.file == "shader.frag"
    assert args.port == 9000
    assert args.host is None
    assert args.formatter == "clang-format -style=file"
    assert args.log_level == "DEBUG"


def test_arguments_default_to_settings():
    args = build_arg_parser().parse_args([])
    assert args.file is None
    assert args.port is None
    assert args.log_level == "INFO"


def test_dark_palette_colours_editor_roles(qapp):
    previous = qapp.palette()
    try:
        apply_dark_palette(qapp)
        palette = qapp.palette()
        assert palette.color(QPalette.ColorRole.Base) == DARK_COLORS[QPalette.ColorRole.Base]
        assert palette.color(QPalette.ColorRole.Highlight) == DARK_COLORS[QPalette.ColorRole.Highlight]

        apply_dark_palette(qapp, {QPalette.ColorRole.Base: QColor(0, 0, 0)})
        assert qapp.palette().color(QPalette.ColorRole.Base) == QColor(0, 0, 0)
    finally:
        qapp.setPalette(previous)
