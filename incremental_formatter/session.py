import threading
from typing import Set


class SessionBannerCache:
    """
    Remembers which build sessions have already seen the version banner.

    Owned by the caller and passed in explicitly, so several dispatcher runs
    inside one build can share it without any module-level state.
    """

    def __init__(self):
        self._seen: Set[str] = set()
        self._lock = threading.Lock()

    def claim(self, session_id: str) -> bool:
        """True the first time a session id is seen, False afterwards."""
        with self._lock:
            if session_id in self._seen:
                return False
            self._seen.add(session_id)
            return True

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._seen
