from conftest import needs_posix
from incremental_formatter.formatting.runner import (
    FormatterRunner,
    format_command_line,
    resolve_executable,
)
from incremental_formatter.models import (
    STATUS_FAILED,
    STATUS_NOT_STARTED,
    STATUS_OK,
    STATUS_TIMEOUT,
)


def test_build_command_without_style():
    argv = FormatterRunner().build_command("clang-format", "/src/a.cpp")
    assert argv == ["clang-format", "-i", "/src/a.cpp"]


def test_build_command_with_style():
    argv = FormatterRunner().build_command("clang-format", "/src/a.cpp", "/cfg/my style/.clang-format")
    assert argv == ["clang-format", "-style=file:/cfg/my style/.clang-format", "-i", "/src/a.cpp"]
    assert format_command_line(argv) == 'clang-format "-style=file:/cfg/my style/.clang-format" -i /src/a.cpp'


def test_resolve_executable(tmp_path, monkeypatch):
    tool = tmp_path / "bin" / "my-format"
    tool.parent.mkdir()
    tool.write_text("")

    assert resolve_executable(str(tool)) == str(tool)
    assert resolve_executable(str(tmp_path / "bin" / "missing")) is None
    assert resolve_executable("") is None
    assert resolve_executable(None) is None

    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}" if name == "clang-format" else None)
    assert resolve_executable("clang-format") == "/usr/bin/clang-format"
    assert resolve_executable("not-a-real-formatter") is None


@needs_posix
def test_run_success_rewrites_file(fake_formatter, tmp_path):
    target = tmp_path / "a.cpp"
    target.write_text("int a;   \n")

    result = FormatterRunner().run(str(fake_formatter), target)

    assert result.success
    assert result.status == STATUS_OK
    assert result.exit_code == 0
    assert target.read_text() == "int a;\n"
    assert result.command_line.endswith(f"-i {target}")


@needs_posix
def test_run_failure_captures_streams(fake_formatter, tmp_path):
    target = tmp_path / "broken.cpp"
    target.write_text("FAIL\n")

    result = FormatterRunner().run(str(fake_formatter), target)

    assert not result.success
    assert result.status == STATUS_FAILED
    assert result.exit_code == 3
    assert "stdout noise" in result.stdout
    assert "cannot format" in result.stderr


def test_run_missing_binary_is_not_an_exception(tmp_path):
    missing = str(tmp_path / "no-such-formatter")
    result = FormatterRunner().run(missing, tmp_path / "a.cpp")

    assert not result.success
    assert result.status == STATUS_NOT_STARTED
    assert result.exit_code is None
    assert result.command_line == f"{missing} (failed to start)"
    assert result.stderr


@needs_posix
def test_run_timeout(fake_formatter, tmp_path):
    target = tmp_path / "slow.cpp"
    target.write_text("SLEEP\n")

    result = FormatterRunner(timeout=0.5).run(str(fake_formatter), target)

    assert not result.success
    assert result.status == STATUS_TIMEOUT
    assert "Timed out" in result.stderr


@needs_posix
def test_query_version(fake_formatter):
    assert FormatterRunner().query_version(str(fake_formatter)) == "fake-format version 1.0.0"


def test_query_version_missing_binary(tmp_path, caplog):
    assert FormatterRunner().query_version(str(tmp_path / "nothing")) is None
    assert "Failed to detect formatter version" in caplog.text
