import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Union

from . import config

# InvocationResult.status values
STATUS_OK = "ok"
STATUS_FAILED = "failed"            # ran and returned non-zero
STATUS_NOT_STARTED = "not_started"  # missing binary, permission denied...
STATUS_TIMEOUT = "timeout"


@dataclass
class InvocationResult:
    """
    Outcome of running the formatter on a single file.
    """
    success: bool
    stdout: str
    stderr: str
    exit_code: Optional[int]
    command_line: str
    status: str = STATUS_OK


@dataclass
class FormatOptions:
    """
    Everything a caller hands to the dispatcher for one run.

    `extensions` and `ignore_patterns` accept either a pipe separated string
    or a list of strings. `max_processes` is a positive integer or "auto".
    """
    root: Path
    formatter: str = config.DEFAULT_FORMATTER
    stamp_dir: Optional[Path] = None    # defaults to <root>/.format-stamps
    extensions: Union[str, List[str]] = config.DEFAULT_EXTENSIONS
    ignore_patterns: Union[str, List[str], None] = None
    max_processes: Union[str, int] = config.DEFAULT_MAX_PROCESSES
    style_config: Optional[str] = None
    timeout: Optional[float] = None     # seconds per invocation, None = wait forever
    session_id: Optional[str] = None
    progress: bool = False

    def resolved_stamp_dir(self, root: Path) -> Path:
        return Path(self.stamp_dir) if self.stamp_dir else root / config.STAMP_DIR_NAME


@dataclass
class RunSummary:
    """
    Aggregate counts for a single run.

    Workers bump counters concurrently, so every mutation goes through
    `increment` / `mark_failed`, which hold the lock.
    """
    scanned: int = 0
    ignored: int = 0
    skipped: int = 0
    eligible: int = 0
    reformatted: int = 0
    failed: int = 0
    success: bool = True
    ignored_files: List[Path] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def increment(self, counter: str, amount: int = 1):
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    def mark_failed(self):
        with self._lock:
            self.failed += 1
            self.success = False

    @property
    def summary_line(self) -> str:
        return f"{self.reformatted} of {self.eligible} files have been reformatted ({self.ignored} ignored)"
