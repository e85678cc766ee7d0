import hashlib
import logging
from pathlib import Path
from typing import Optional

from .. import config
from ..exceptions import FileHashError


class FileHasher:
    def compute_hash(self, path: Path) -> str:
        """
        Computes the SHA-256 content digest of the whole file.

        Unlike a timestamp this survives checkouts, restores and clock skew,
        at the cost of one full read per candidate file per run.
        """
        h = hashlib.sha256()
        try:
            with open(path, 'rb') as f:
                while chunk := f.read(config.HASH_CHUNK_SIZE):
                    h.update(chunk)
        except OSError as e:
            raise FileHashError(f"Failed to compute hash for {path}: {e}") from e
        return h.hexdigest()

    def try_compute_hash(self, path: Path) -> Optional[str]:
        """Same as compute_hash, but logs and returns None on failure."""
        try:
            return self.compute_hash(path)
        except FileHashError as e:
            logging.warning(str(e))
            return None

    @staticmethod
    def hash_text(text: str) -> str:
        return hashlib.sha256(text.encode('utf-8')).hexdigest()
