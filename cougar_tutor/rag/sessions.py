"""
Session Store - In-memory conversation history, keyed by session id.

Sessions only live as long as the process. Every new session starts with
the tutor persona as its first (system) turn; after that, turns are only
ever appended.

Memory is bounded two ways:
- at most MAX_SESSIONS sessions are kept; the least recently used is evicted
- sessions idle for longer than SESSION_TTL_SECONDS are dropped when touched

All operations are synchronous, so on the asyncio event loop a single
get_or_create() or append() never interleaves with another one. Two requests
for the same session can still interleave between their awaits.
"""

import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Literal

from cougar_tutor.config import MAX_SESSIONS, PERSONA_PROMPT, SESSION_TTL_SECONDS
from cougar_tutor.utils.logger import get_logger

logger = get_logger(__name__)

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class Turn:
    """One role-tagged message in a conversation."""

    role: Role
    content: str

    def to_message(self) -> dict[str, str]:
        """Format the turn the way chat APIs expect it."""
        return {"role": self.role, "content": self.content}


@dataclass
class Session:
    """
    Ordered conversation history for one session id.

    Attributes:
        session_id: Opaque key supplied by the client
        turns: Conversation turns, oldest first
        last_active: time.monotonic() of the last access
    """

    session_id: str
    turns: list[Turn] = field(default_factory=list)
    last_active: float = field(default_factory=time.monotonic)

    @property
    def messages(self) -> list[dict[str, str]]:
        """History formatted as a chat message list."""
        return [turn.to_message() for turn in self.turns]

    def __len__(self) -> int:
        return len(self.turns)


class SessionStore:
    """
    Process-lifetime mapping from session id to conversation history.

    Example:
        store = SessionStore()
        session = store.get_or_create("abc")
        store.append("abc", Turn("user", "What is a limit?"))
        print(session.messages)
    """

    def __init__(
        self,
        persona_prompt: str | None = None,
        max_sessions: int | None = None,
        ttl_seconds: float | None = None,
        clock=time.monotonic,
    ):
        """
        Initialize the store.

        Args:
            persona_prompt: System prompt seeded into every new session
            max_sessions: Session count bound (0 disables it)
            ttl_seconds: Idle time after which a session is dropped (0 disables it)
            clock: Time source, replaceable in tests
        """
        self.persona_prompt = persona_prompt or PERSONA_PROMPT
        self.max_sessions = MAX_SESSIONS if max_sessions is None else max_sessions
        self.ttl_seconds = SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._sessions: OrderedDict[str, Session] = OrderedDict()

    def __contains__(self, session_id: str) -> bool:
        # Membership does not count as activity
        session = self._sessions.get(session_id)
        return session is not None and not self._is_expired(session, self._clock())

    def __len__(self) -> int:
        """Number of live sessions. Expired ones are purged first."""
        self._purge_expired()
        return len(self._sessions)

    def _is_expired(self, session: Session, now: float) -> bool:
        return bool(self.ttl_seconds) and now - session.last_active > self.ttl_seconds

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [sid for sid, session in self._sessions.items() if self._is_expired(session, now)]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info("Purged %d expired session(s)", len(expired))

    def get(self, session_id: str) -> Session | None:
        """Return the session if it exists and has not expired."""
        session = self._sessions.get(session_id)
        if session is None:
            return None

        now = self._clock()
        if self._is_expired(session, now):
            logger.info("Session %s expired after %.0fs idle", session_id, now - session.last_active)
            del self._sessions[session_id]
            return None

        session.last_active = now
        self._sessions.move_to_end(session_id)
        return session

    def get_or_create(self, session_id: str) -> Session:
        """
        Return the session for session_id, creating it if needed.

        A new session holds exactly one turn: the system persona prompt.
        """
        session = self.get(session_id)
        if session is not None:
            return session

        session = Session(
            session_id=session_id,
            turns=[Turn("system", self.persona_prompt)],
            last_active=self._clock(),
        )
        self._sessions[session_id] = session
        self._evict()
        return session

    def append(self, session_id: str, turn: Turn) -> Session:
        """Append a turn to the session, creating the session if needed."""
        session = self.get_or_create(session_id)
        session.turns.append(turn)
        return session

    def clear(self) -> None:
        """Forget every session."""
        self._sessions.clear()

    def _evict(self) -> None:
        """Drop least recently used sessions until the count bound holds."""
        if not self.max_sessions:
            return
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("Evicted least recently used session %s", evicted_id)
