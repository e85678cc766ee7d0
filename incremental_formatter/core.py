import logging
import os
import queue
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Tuple

from tqdm import tqdm

from .exceptions import ConfigurationError, ScanError
from .formatting.runner import FormatterRunner, resolve_executable
from .models import FormatOptions, RunSummary
from .options import parse_extensions, parse_pipe_list, resolve_max_processes
from .scanning.filesystem import SourceCollector
from .scanning.ignore import IgnoreFilter
from .session import SessionBannerCache
from .stamps.store import FingerprintStore

# (level, message) pairs produced by one worker for one file
LogBatch = List[Tuple[int, str]]


class FormatDispatcher:
    def __init__(self,
                 runner: Optional[FormatterRunner] = None,
                 banner_cache: Optional[SessionBannerCache] = None):
        self.runner = runner
        self.banner_cache = banner_cache

    def run(self, options: FormatOptions) -> RunSummary:
        """
        Executes one incremental formatting pass.
        1. Resolve (root, executable, extensions) - raises ConfigurationError
        2. Collect candidate files
        3. Filter out ignored files
        4. Decide which files changed since their last stamp
        5. Execute the formatter on those, N at a time
        6. Commit new stamps for the ones that succeeded
        7. Summarize

        A failing file never stops the others; it only flips summary.success.
        """
        summary = RunSummary()

        # --- Step 1: Resolve ---
        root, exe, extensions = self.resolve(options)
        runner = self.runner or FormatterRunner(timeout=options.timeout)
        logging.debug(f"Formatter: {exe}")

        # --- Step 2: Collect ---
        ignore = IgnoreFilter(parse_pipe_list(options.ignore_patterns))
        try:
            collected = SourceCollector(extensions).collect(root)
        except ScanError as e:
            logging.warning(f"Error while collecting source files: {e}")
            collected = []

        summary.scanned = len(collected)
        if not collected:
            logging.debug("No input files available for formatting.")
            logging.info(summary.summary_line)
            return summary

        self._emit_banner(runner, exe, options.session_id)

        stamp_dir = options.resolved_stamp_dir(root)
        stamp_dir.mkdir(parents=True, exist_ok=True)
        store = FingerprintStore(root, stamp_dir)

        # --- Steps 3 & 4: Filter / Decide ---
        to_format: List[Path] = []
        for file in collected:
            if ignore.is_ignored(file):
                summary.increment("ignored")
                summary.ignored_files.append(file)
                continue

            if not store.needs_formatting(file):
                logging.debug(f"Skipping {file}, unchanged.")
                summary.increment("skipped")
                continue

            to_format.append(file)

        summary.eligible = len(to_format)

        # --- Steps 5 & 6: Execute / Commit ---
        if to_format:
            max_workers = resolve_max_processes(options.max_processes)
            logging.debug(f"Formatting {len(to_format)} files with {max_workers} workers")
            self._execute(to_format, runner, exe, options, store, summary, max_workers)

        # --- Step 7: Summarize ---
        logging.info(summary.summary_line)
        for f in summary.ignored_files:
            logging.debug(f"Ignored {f}")

        return summary

    def resolve(self, options: FormatOptions) -> Tuple[Path, str, List[str]]:
        """Validates the run configuration; raises ConfigurationError before anything touches disk."""
        if not options.root or not str(options.root).strip():
            raise ConfigurationError("Root directory must be set.")

        root = Path(os.path.abspath(options.root))
        if not root.is_dir():
            raise ConfigurationError(f"Root directory does not exist: {root}")

        exe = resolve_executable(options.formatter)
        if exe is None:
            raise ConfigurationError(f"Could not find formatter executable: {options.formatter}")

        extensions = parse_extensions(options.extensions)
        if not extensions:
            raise ConfigurationError(f"No extensions provided ('{options.extensions}').")

        return root, exe, extensions

    def _emit_banner(self, runner: FormatterRunner, exe: str, session_id: Optional[str]):
        """Logs the formatter version, once per session when a cache is shared."""
        if session_id and self.banner_cache is not None:
            if not self.banner_cache.claim(session_id):
                return

        version = runner.query_version(exe)
        if version:
            logging.info(f"Using {version}")

    def _execute(self,
                 files: List[Path],
                 runner: FormatterRunner,
                 exe: str,
                 options: FormatOptions,
                 store: FingerprintStore,
                 summary: RunSummary,
                 max_workers: int):
        # Workers push one batch per file; we drain after the pool is done so
        # a file's multi-line error output stays in one piece.
        log_queue: "queue.SimpleQueue[LogBatch]" = queue.SimpleQueue()

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self._format_one, file, runner, exe, options.style_config, store, summary, log_queue): file
                for file in files
            }
            for future in tqdm(as_completed(futures), total=len(futures), desc="Formatting",
                               disable=not options.progress):
                file = futures[future]
                try:
                    future.result()
                except Exception as e:
                    # Anything _format_one didn't anticipate still counts as a failed file
                    log_queue.put([(logging.ERROR, f"Failed to format {file}: {e}")])
                    summary.mark_failed()

        while not log_queue.empty():
            for level, message in log_queue.get():
                logging.log(level, message)

    def _format_one(self,
                    file: Path,
                    runner: FormatterRunner,
                    exe: str,
                    style_config: Optional[str],
                    store: FingerprintStore,
                    summary: RunSummary,
                    log_queue: "queue.SimpleQueue[LogBatch]"):
        batch: LogBatch = [(logging.INFO, f"Formatting {file}...")]

        result = runner.run(exe, file, style_config)

        if result.success:
            store.refresh(file)
            summary.increment("reformatted")
        else:
            batch.append((logging.ERROR, f"Failed to format {file} ({result.status}, exit code {result.exit_code})"))
            batch.append((logging.DEBUG, f"Command executed: {result.command_line}"))
            if result.stdout.strip():
                batch.append((logging.ERROR, result.stdout.rstrip()))
            if result.stderr.strip():
                batch.append((logging.ERROR, result.stderr.rstrip()))
            summary.mark_failed()

        log_queue.put(batch)
