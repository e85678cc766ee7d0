import os
import stat
import sys
import textwrap
import threading
from pathlib import Path

import pytest

from incremental_formatter.models import InvocationResult, STATUS_FAILED

FAKE_FORMATTER = textwrap.dedent("""\
    #!{python}
    # Stand-in for clang-format: strips trailing whitespace in place.
    import sys, time

    args = sys.argv[1:]
    if args == ["--version"]:
        print("fake-format version 1.0.0")
        print("second line is ignored")
        sys.exit(0)

    path = args[-1]
    with open(path, encoding="utf-8") as f:
        text = f.read()

    if "SLEEP" in text:
        time.sleep(10)
    if "FAIL" in text:
        print("stdout noise for " + path)
        sys.stderr.write("error: cannot format " + path + "\\n")
        sys.exit(3)

    lines = [line.rstrip() for line in text.splitlines()]
    with open(path, "w", encoding="utf-8") as f:
        f.write("\\n".join(lines) + "\\n")
""")

needs_posix = pytest.mark.skipif(sys.platform == "win32", reason="fake formatter relies on a shebang")


@pytest.fixture
def fake_formatter(tmp_path):
    """Path to an executable script that behaves like a tiny formatter."""
    script = tmp_path / "bin" / "fake-format"
    script.parent.mkdir()
    script.write_text(FAKE_FORMATTER.format(python=sys.executable), encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


class RecordingRunner:
    """Runner double: records calls, fails files whose name contains 'bad'."""

    def __init__(self):
        self.calls = []
        self.version_queries = 0
        self._lock = threading.Lock()

    def run(self, exe, file, style_config=None):
        with self._lock:
            self.calls.append((exe, Path(file), style_config))
        if "bad" in Path(file).name:
            return InvocationResult(False, "", f"error in {file}", 1, f"{exe} -i {file}", STATUS_FAILED)
        Path(file).write_text(Path(file).read_text() + "// formatted\n")
        return InvocationResult(True, "", "", 0, f"{exe} -i {file}")

    def query_version(self, exe):
        with self._lock:
            self.version_queries += 1
        return "recording-format 0.1"

    @property
    def formatted(self):
        return sorted(p.name for _, p, _ in self.calls)


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def exe(tmp_path):
    """An existing (never executed) file so executable resolution succeeds."""
    path = tmp_path / "tools" / "formatter"
    path.parent.mkdir()
    path.write_text("")
    return str(path)


@pytest.fixture
def src(tmp_path):
    root = tmp_path / "src"
    root.mkdir()
    return root
