"""
Parsing helpers for the loosely typed values build systems hand us.
"""
import os
from typing import Iterable, List, Optional, Union

from . import config


def parse_pipe_list(value: Union[str, Iterable[str], None]) -> List[str]:
    """
    Splits a pipe separated string (or flattens a list of them).
    Entries are trimmed, de-duplicated case-insensitively (first spelling wins)
    and sorted case-insensitively.
    """
    if value is None:
        return []
    if isinstance(value, str):
        raw = value.split("|")
    else:
        raw = []
        for item in value:
            raw.extend(item.split("|"))

    seen = set()
    items = []
    for item in raw:
        item = item.strip()
        if not item or item.lower() in seen:
            continue
        seen.add(item.lower())
        items.append(item)

    items.sort(key=str.lower)
    return items


def parse_extensions(value: Union[str, Iterable[str], None]) -> List[str]:
    """Normalizes extensions to lowercase with a leading '.'."""
    exts = set()
    for item in parse_pipe_list(value):
        ext = item.lower() if item.startswith(".") else "." + item.lower()
        if ext != ".":
            exts.add(ext)
    # Sort after normalizing; "cpp" and ".H" only compare sensibly once both have a dot
    return sorted(exts)


def resolve_max_processes(value: Union[str, int, None]) -> int:
    """
    "auto" -> number of logical processors.
    Positive integer (or numeric string) -> that value.
    Anything else -> 1.
    """
    if isinstance(value, str) and value.strip().lower() == config.AUTO_PROCESSES:
        return max(1, os.cpu_count() or 1)

    try:
        n = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1
    return max(1, n)


def parse_timeout(value: Optional[str]) -> Optional[float]:
    """Empty, zero or negative means no timeout."""
    if value is None or str(value).strip() == "":
        return None
    seconds = float(value)
    return seconds if seconds > 0 else None
