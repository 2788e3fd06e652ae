"""In-memory registry of draft sessions."""

import threading
import time
from dataclasses import dataclass, field
from typing import Optional, Union

from draft_oracle.models.draft import DraftFormat, DraftSession
from draft_oracle.services.draft_service import DraftService, SessionExists

SESSION_TTL_SECONDS = 60 * 60


@dataclass
class ManagedSession:
    """Current value of a session plus bookkeeping."""

    session: DraftSession
    created_at: float = field(default_factory=time.time)
    last_access: float = field(default_factory=time.time)


class DraftSessionManager:
    """Keeps independent draft sessions by id.

    Each session is an isolated value; the manager only swaps in the latest
    value after a successful transition.
    """

    def __init__(self, draft_service: Optional[DraftService] = None, ttl_seconds: float = SESSION_TTL_SECONDS):
        self.draft_service = draft_service or DraftService()
        self.ttl_seconds = ttl_seconds
        self._sessions: dict[str, ManagedSession] = {}
        self._lock = threading.Lock()

    def create_session(self, draft_format: Union[DraftFormat, str] = DraftFormat.COMPETITIVE) -> DraftSession:
        self.prune_expired()
        session = self.draft_service.create_session(draft_format)
        with self._lock:
            self._sessions[session.session_id] = ManagedSession(session=session)
        return session

    def add_session(self, session: DraftSession) -> DraftSession:
        """Register an externally built session (e.g. a restored draft).

        Raises:
            SessionExists: If a live session already uses the same id
        """
        self.prune_expired()
        with self._lock:
            if session.session_id in self._sessions:
                raise SessionExists(session.session_id)
            self._sessions[session.session_id] = ManagedSession(session=session)
        return session

    def get_session(self, session_id: str, now: Optional[float] = None) -> Optional[DraftSession]:
        """Get a session by id, or None if unknown or expired."""
        now = time.time() if now is None else now
        with self._lock:
            managed = self._sessions.get(session_id)
            if managed is None:
                return None
            if (now - managed.last_access) >= self.ttl_seconds:
                del self._sessions[session_id]
                return None
            managed.last_access = now
            return managed.session

    def replace_session(self, session: DraftSession) -> None:
        """Store the result of a transition as the session's current value."""
        with self._lock:
            managed = self._sessions.get(session.session_id)
            if managed is None:
                self._sessions[session.session_id] = ManagedSession(session=session)
            else:
                managed.session = session
                managed.last_access = time.time()

    def remove_session(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def prune_expired(self, now: Optional[float] = None) -> int:
        """Drop sessions idle longer than the TTL. Returns the number removed."""
        now = time.time() if now is None else now
        with self._lock:
            expired = [
                sid for sid, managed in self._sessions.items()
                if (now - managed.last_access) >= self.ttl_seconds
            ]
            for sid in expired:
                del self._sessions[sid]
        return len(expired)

    def list_sessions(self) -> list[dict]:
        """List all active sessions (for debugging)."""
        with self._lock:
            return [
                {
                    "session_id": m.session.session_id,
                    "format": m.session.format.value,
                    "current_index": m.session.current_index,
                    "total_turns": len(m.session.sequence),
                }
                for m in self._sessions.values()
            ]
