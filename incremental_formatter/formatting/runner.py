import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from .. import config
from ..models import (
    InvocationResult,
    STATUS_OK,
    STATUS_FAILED,
    STATUS_NOT_STARTED,
    STATUS_TIMEOUT,
)


def resolve_executable(path_or_name: Optional[str]) -> Optional[str]:
    """
    Turns the configured formatter into something we can launch.

    - Anything with a directory part must point at an existing file.
    - A bare name ("clang-format") is looked up on PATH.
    Returns None when neither works.
    """
    if not path_or_name or not str(path_or_name).strip():
        return None

    candidate = str(path_or_name).strip()
    if os.path.isabs(candidate) or os.path.dirname(candidate):
        full = os.path.abspath(candidate)
        return full if os.path.isfile(full) else None

    return shutil.which(candidate)


def quoted(arg: str) -> str:
    return f'"{arg}"' if any(c.isspace() for c in arg) else arg


def format_command_line(argv: List[str]) -> str:
    """Display form of argv, quoting anything with whitespace in it."""
    return " ".join(quoted(a) for a in argv)


class FormatterRunner:
    """
    Runs the external formatter on one file at a time.

    Never raises for process problems: a binary that won't start, a non-zero
    exit and a timeout all come back as an unsuccessful InvocationResult so the
    dispatcher can treat them the same way.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def build_command(self, exe: str, file: Union[str, Path], style_config: Optional[str] = None) -> List[str]:
        argv = [exe]
        if style_config:
            # Explicit config file instead of letting the tool search upwards
            argv.append(config.STYLE_FILE_ARG.format(style_config))
        argv.append(config.IN_PLACE_FLAG)
        argv.append(str(file))
        return argv

    def run(self, exe: str, file: Union[str, Path], style_config: Optional[str] = None) -> InvocationResult:
        argv = self.build_command(exe, file, style_config)
        command_line = format_command_line(argv)

        try:
            # run() drains both pipes before waiting, so a chatty formatter
            # can't deadlock on a full pipe buffer.
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            # run() has already killed the child at this point
            return InvocationResult(
                success=False,
                stdout=_as_text(e.stdout),
                stderr=f"Timed out after {self.timeout} seconds formatting {file}",
                exit_code=None,
                command_line=command_line,
                status=STATUS_TIMEOUT,
            )
        except OSError as e:
            return InvocationResult(
                success=False,
                stdout="",
                stderr=str(e),
                exit_code=None,
                command_line=f"{exe} (failed to start)",
                status=STATUS_NOT_STARTED,
            )

        ok = proc.returncode == 0
        return InvocationResult(
            success=ok,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            exit_code=proc.returncode,
            command_line=command_line,
            status=STATUS_OK if ok else STATUS_FAILED,
        )

    def query_version(self, exe: str) -> Optional[str]:
        """First line of `<exe> --version`, or None if it can't be read."""
        try:
            proc = subprocess.run(
                [exe, config.VERSION_FLAG],
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logging.warning(f"Failed to detect formatter version: {e}")
            return None

        lines = (proc.stdout or "").strip().splitlines()
        return lines[0].strip() if lines else None


def _as_text(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
