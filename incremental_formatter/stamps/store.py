"""
Fingerprint (stamp) storage.

One plain-text file per successfully formatted source file, holding the hex
SHA-256 of the file's content right after formatting. A stamp is only ever
written once the formatter has reported success for that file, so the worst
a crash can do is cause a redundant reformat on the next run.
"""
import logging
import os
from pathlib import Path, PurePath
from typing import Optional

from .. import config
from ..exceptions import FileHashError, StampError
from ..scanning.hasher import FileHasher


def sanitize_name(name: str) -> str:
    """Keeps letters, digits, '_' and '-'; everything else becomes '_'."""
    return "".join(c if c.isalnum() or c in "_-" else "_" for c in name)


class FingerprintStore:
    def __init__(self, root: Path, stamp_dir: Path, hasher: Optional[FileHasher] = None):
        self.root = Path(os.path.abspath(root))
        self.stamp_dir = Path(stamp_dir)
        self.hasher = hasher or FileHasher()

    # --- Keys ---

    def stamp_name(self, file: Path) -> str:
        """
        <sanitized file name>_<sha256 of root-relative path>.stamp

        The key uses the path relative to the root, in POSIX form, so moving
        the whole project (or sharing stamps across machines) keeps them valid.
        """
        file = Path(file)
        try:
            relative = PurePath(os.path.relpath(os.path.abspath(file), self.root)).as_posix()
        except ValueError:
            # Different drive on Windows; fall back to the bare name
            relative = file.name

        return f"{sanitize_name(file.name)}_{self.hasher.hash_text(relative)}{config.STAMP_EXTENSION}"

    def stamp_path(self, file: Path) -> Path:
        return self.stamp_dir / self.stamp_name(file)

    # --- Digests ---

    def compute_digest(self, file: Path) -> Optional[str]:
        return self.hasher.try_compute_hash(file)

    def read_stamp(self, file: Path) -> Optional[str]:
        """Returns the recorded digest, or None if there is no usable stamp."""
        stamp = self.stamp_path(file)
        try:
            return stamp.read_text(encoding="utf-8").strip() or None
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logging.warning(f"Failed to read stamp {stamp}: {e}")
            return None

    def needs_formatting(self, file: Path) -> bool:
        """
        True unless both the current digest and the recorded one are known
        and equal. Any doubt means the file gets formatted again.
        """
        current = self.compute_digest(file)
        if current is None:
            return True

        recorded = self.read_stamp(file)
        if recorded is None:
            return True

        return current.lower() != recorded.lower()

    def record_success(self, file: Path, digest: str) -> bool:
        """
        Persists the digest for a file that was just formatted successfully.
        Returns False (after logging a warning) if the stamp couldn't be written;
        the next run will then simply format the file again.
        """
        stamp = self.stamp_path(file)
        try:
            self._write_stamp(stamp, digest)
        except StampError as e:
            logging.warning(str(e))
            return False
        return True

    def refresh(self, file: Path) -> bool:
        """Re-hashes a freshly formatted file and records the result."""
        try:
            digest = self.hasher.compute_hash(file)
        except FileHashError as e:
            logging.warning(f"{e}; stamp not updated")
            return False
        return self.record_success(file, digest)

    def _write_stamp(self, stamp: Path, digest: str):
        tmp = stamp.with_name(f"{stamp.name}.{os.getpid()}.tmp")
        try:
            stamp.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(digest, encoding="utf-8")
            os.replace(tmp, stamp)
        except OSError as e:
            try:
                tmp.unlink()
            except OSError:
                pass
            raise StampError(f"Failed to update stamp {stamp}: {e}") from e
