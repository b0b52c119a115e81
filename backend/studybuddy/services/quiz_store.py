# studybuddy/services/quiz_store.py
import logging
import threading
import time
import uuid
from typing import Callable, Dict, Optional, Tuple

from studybuddy.config import settings
from studybuddy.services.quiz_session import Configuring, QuizEvent, QuizState, transition

logger = logging.getLogger(__name__)


class QuizSessionStore:
    """In-memory quiz sessions (one per user interaction, never persisted).

    Every read or event refreshes a session's last-touched time; sessions idle
    for longer than ``ttl`` seconds are evicted. ``ttl <= 0`` disables eviction.
    All access goes through one lock, so ``apply`` is an atomic
    read-transition-write even when routes run in the threadpool.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = settings.QUIZ_SESSION_TTL if ttl is None else ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, Tuple[QuizState, float]] = {}

    def _expired(self, touched: float, now: float) -> bool:
        return self.ttl > 0 and now - touched > self.ttl

    def _evict_expired(self, now: float):
        stale = [sid for sid, (_, touched) in self._sessions.items() if self._expired(touched, now)]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            logger.info("[QUIZ] evicted %d idle session(s)", len(stale))

    def _live(self, sid: str, now: float) -> Optional[QuizState]:
        entry = self._sessions.get(sid)
        if entry is None:
            return None
        if self._expired(entry[1], now):
            del self._sessions[sid]
            return None
        return entry[0]

    def create(self) -> str:
        sid = f"quiz_{uuid.uuid4().hex[:12]}"
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            self._sessions[sid] = (Configuring(), now)
        return sid

    def get(self, sid: str) -> Optional[QuizState]:
        with self._lock:
            now = self._clock()
            state = self._live(sid, now)
            if state is not None:
                self._sessions[sid] = (state, now)
            return state

    def apply(self, sid: str, event: QuizEvent) -> QuizState:
        """Run one event; the stored state only changes if the transition succeeds."""
        with self._lock:
            now = self._clock()
            state = self._live(sid, now)
            if state is None:
                raise KeyError(sid)
            new_state = transition(state, event)
            self._sessions[sid] = (new_state, now)
            return new_state

    def delete(self, sid: str) -> bool:
        with self._lock:
            return self._sessions.pop(sid, None) is not None

    def clear(self):
        with self._lock:
            self._sessions.clear()

    def __contains__(self, sid: str) -> bool:
        return self.get(sid) is not None

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired(self._clock())
            return len(self._sessions)


store = QuizSessionStore()


def get_quiz_store() -> QuizSessionStore:
    return store
