import sys

from shadernudge.core.persistence import DiskPersistence


def test_save_writes_utf8(tmp_path):
    path = tmp_path / "shader.frag"
    result = DiskPersistence().save(str(path), "// température\nfloat x = 1.0;\n")
    assert result.success
    assert result.formatted_content is None
    assert path.read_text(encoding="utf-8") == "// température\nfloat x = 1.0;\n"


def test_save_reports_os_error(tmp_path):
    result = DiskPersistence().save(str(tmp_path), "x")
    assert not result.success
    assert result.error


def test_formatter_output_is_written_and_returned(tmp_path):
    path = tmp_path / "shader.frag"
    formatter = [sys.executable, "-c", "import sys; sys.stdout.write(sys.stdin.read().upper())"]
    result = DiskPersistence(formatter).save(str(path), "float x = 1.0;")
    assert result.success
    assert result.formatted_content == "FLOAT X = 1.0;"
    assert path.read_text(encoding="utf-8") == "FLOAT X = 1.0;"


def test_failing_formatter_keeps_content(tmp_path):
    path = tmp_path / "shader.frag"
    formatter = [sys.executable, "-c", "import sys; sys.exit(3)"]
    result = DiskPersistence(formatter).save(str(path), "float x = 1.0;")
    assert result.success
    assert result.formatted_content is None
    assert path.read_text(encoding="utf-8") == "float x = 1.0;"


def test_missing_formatter_keeps_content(tmp_path):
    path = tmp_path / "shader.frag"
    result = DiskPersistence(["shadernudge-no-such-formatter"]).save(str(path), "a")
    assert result.success
    assert path.read_text(encoding="utf-8") == "a"
