import uuid
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, List

from cachetools import LRUCache

from healthvision.schemas import SessionHistoryEntry


def new_session_id() -> str:
    return str(uuid.uuid4())


class SessionStore(ABC):
    """Append-only per-session interaction log."""

    @abstractmethod
    def append(self, session_id: str, entry: SessionHistoryEntry) -> None:
        ...

    @abstractmethod
    def recent(self, session_id: str, n: int) -> List[SessionHistoryEntry]:
        """Last ``n`` entries, most recent first; empty for unknown sessions."""

    @abstractmethod
    def count(self, session_id: str) -> int:
        ...


class InMemorySessionStore(SessionStore):
    """Process-lifetime store with bounded memory.

    Least-recently used sessions are evicted past ``max_sessions`` and the
    oldest entries of a session are dropped past ``max_entries``.
    """

    def __init__(self, max_sessions: int = 1000, max_entries: int = 50):
        if max_sessions < 1 or max_entries < 1:
            raise ValueError("max_sessions and max_entries must be positive")
        self.max_entries = max_entries
        self._sessions: LRUCache = LRUCache(maxsize=max_sessions)

    def append(self, session_id: str, entry: SessionHistoryEntry) -> None:
        entries: Deque[SessionHistoryEntry] = self._sessions.get(session_id)
        if entries is None:
            entries = deque(maxlen=self.max_entries)
            self._sessions[session_id] = entries
        entries.append(entry)

    def recent(self, session_id: str, n: int) -> List[SessionHistoryEntry]:
        entries = self._sessions.get(session_id)
        if not entries or n <= 0:
            return []
        # Copies, so callers cannot reach the stored lists.
        return [entry.model_copy(deep=True) for entry in list(reversed(entries))[:n]]

    def count(self, session_id: str) -> int:
        entries = self._sessions.get(session_id)
        return len(entries) if entries else 0

    def __len__(self) -> int:
        return len(self._sessions)
