from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from recurate.core.config import settings

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    ABSENT = "absent"


@dataclass
class Session:
    """Server-side login record.

    user_id, display_name and is_admin are a snapshot taken at login time and
    are not re-read from the database on later requests.
    """

    token: str
    user_id: int
    display_name: str
    is_admin: bool
    created_at: float
    last_activity: float = field(default=0.0)


class SessionStore:
    """In-process session table keyed by opaque token, with idle expiry.

    Every read-check-refresh of last_activity happens under one lock, so a
    request that sees its session as valid has also bumped it.
    """

    def __init__(
        self,
        idle_timeout_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.idle_timeout_seconds = idle_timeout_seconds
        self.clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _is_expired(self, session: Session, now: float) -> bool:
        return now - session.last_activity > self.idle_timeout_seconds

    def create(self, user_id: int, display_name: str, is_admin: bool) -> Session:
        now = self.clock()
        session = Session(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            display_name=display_name,
            is_admin=bool(is_admin),
            created_at=now,
            last_activity=now,
        )
        with self._lock:
            self._sessions[session.token] = session
        return session

    def get(self, token: Optional[str]) -> Optional[Session]:
        """Look up a live session without refreshing it."""
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is None or self._is_expired(session, self.clock()):
                return None
            return session

    def check(self, token: Optional[str]) -> Tuple[SessionState, Optional[Session]]:
        """Validate and refresh a session in one step.

        Expired sessions are destroyed here, so the same token reads as
        ABSENT on every later call.
        """
        if not token:
            return SessionState.ABSENT, None
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return SessionState.ABSENT, None
            now = self.clock()
            if self._is_expired(session, now):
                del self._sessions[token]
                logger.info(f"Session expired for user {session.user_id}")
                return SessionState.EXPIRED, None
            session.last_activity = now
            return SessionState.ACTIVE, session

    def destroy(self, token: Optional[str]) -> None:
        """Remove a session. Unknown or empty tokens are ignored."""
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def purge_expired(self) -> int:
        """Drop every expired session; returns how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [t for t, s in self._sessions.items() if self._is_expired(s, now)]
            for token in expired:
                del self._sessions[token]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


session_store = SessionStore(idle_timeout_seconds=settings.session_idle_timeout_seconds)
