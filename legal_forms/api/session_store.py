"""In-memory store of API edit sessions"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from legal_forms.services.documents import EditSession

logger = logging.getLogger(__name__)


class SessionEntry:
    """An edit session plus its bookkeeping"""

    def __init__(self, session_id: str, session: EditSession):
        self.session_id = session_id
        self.session = session
        self.created_at = datetime.now()
        self.last_active = datetime.now()

    def touch(self):
        self.last_active = datetime.now()


class SessionStore:
    """Live edit sessions keyed by uuid.

    Expired sessions are evicted on access; there is no background task.
    """

    def __init__(self, ttl_minutes: int = 30, max_sessions: int = 1000):
        self._sessions: dict[str, SessionEntry] = {}
        self._ttl = timedelta(minutes=ttl_minutes)
        self._max = max_sessions
        self._lock = asyncio.Lock()

    def _expired(self, entry: SessionEntry, now: datetime) -> bool:
        return (now - entry.last_active) >= self._ttl

    async def add(self, session: EditSession) -> SessionEntry:
        """Register a new session and return its entry"""
        async with self._lock:
            self._evict_expired()
            if len(self._sessions) >= self._max:
                self._evict_oldest()
            entry = SessionEntry(str(uuid4()), session)
            self._sessions[entry.session_id] = entry
            return entry

    async def get(self, session_id: str) -> Optional[SessionEntry]:
        """Get session by ID, returns None if not found or expired"""
        async with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            if self._expired(entry, datetime.now()):
                del self._sessions[session_id]
                logger.debug(f"Session {session_id} expired")
                return None
            entry.touch()
            return entry

    async def delete(self, session_id: str) -> bool:
        async with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def _evict_expired(self) -> int:
        """Remove expired sessions (called under lock)"""
        now = datetime.now()
        expired = [sid for sid, entry in self._sessions.items() if self._expired(entry, now)]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)

    def _evict_oldest(self):
        """Remove the oldest session to make room (called under lock)"""
        if not self._sessions:
            return
        oldest_id = min(self._sessions, key=lambda sid: self._sessions[sid].last_active)
        del self._sessions[oldest_id]

    @property
    def active_count(self) -> int:
        return len(self._sessions)
