import logging
import re
from pathlib import Path
from typing import Iterable, List, Union


class IgnoreFilter:
    """
    Case-insensitive regex rules tested against a file's full path.
    A rule only has to match somewhere in the path (re.search).
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self.rules: List[re.Pattern] = []
        for pattern in patterns:
            if not pattern or not pattern.strip():
                continue
            try:
                self.rules.append(re.compile(pattern, re.IGNORECASE))
            except re.error as e:
                logging.warning(f"Invalid ignore regex '{pattern}': {e}")

    def is_ignored(self, path: Union[str, Path]) -> bool:
        if not self.rules:
            return False

        text = str(path)
        for rule in self.rules:
            try:
                if rule.search(text):
                    return True
            except Exception as e:
                # One broken rule must not take the whole scan down
                logging.debug(f"Ignore regex '{rule.pattern}' failed on {text}: {e}")
        return False
