import os
import logging
from pathlib import Path
from typing import Iterator, List, Iterable, Set

from ..exceptions import ScanError


class SourceCollector:
    """
    Finds candidate source files under a root directory.

    The walk is an explicit-stack DFS (no recursion, so deep trees are fine).
    A directory that can't be listed just contributes nothing; only a failure
    on the root itself is raised to the caller.
    """

    def __init__(self, extensions: Iterable[str]):
        self.extensions: Set[str] = {e.lower() for e in extensions}

    def collect(self, root: Path) -> List[Path]:
        """
        Returns absolute paths of matching files, de-duplicated and sorted
        case-insensitively so every run sees the same order. Symlinked files
        are included; symlinked directories are not followed.
        """
        root = Path(os.path.abspath(root))

        seen = set()
        results = []
        for path in self._iter_files(root):
            if path.suffix.lower() not in self.extensions:
                continue
            # normcase folds case only where the filesystem does (Windows)
            key = os.path.normcase(str(path))
            if key in seen:
                continue
            seen.add(key)
            results.append(path)

        results.sort(key=lambda p: str(p).lower())
        return results

    def _iter_files(self, root: Path) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                # PermissionError, ENAMETOOLONG, vanished directories...
                if current == root:
                    raise ScanError(f"Cannot read root directory {root}: {e}") from e
                logging.warning(f"Skipping unreadable directory {current}: {e}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                try:
                    if e.is_dir(follow_symlinks=False):
                        dirs.append(Path(e.path))
                    elif e.is_file():
                        files.append(Path(e.path))
                except OSError as err:
                    logging.warning(f"Cannot stat {e.path}: {err}")

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f
