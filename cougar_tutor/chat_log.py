"""
Chat log - Write-only record of every message exchanged with the tutor.

Entries go to a SQLite table. The pipeline never reads them back; they are
for instructors reviewing how students use the tutor. Writes are best
effort: a failed write raises LoggingError, which the pipeline logs and
otherwise ignores.
"""

import asyncio
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol

from cougar_tutor.config import CHAT_LOG_DB_PATH
from cougar_tutor.errors import LoggingError


class ChatLogSink(Protocol):
    """Anything the pipeline can hand chat log entries to."""

    async def write(self, session_id: str, context: str, role: str, content: str) -> None: ...


class ChatLog:
    """
    SQLite-backed chat log.

    Example:
        chat_log = ChatLog()
        await chat_log.write("abc", "free_use", "user", "What is a limit?")
    """

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path or CHAT_LOG_DB_PATH)
        self._initialized = False

    @contextmanager
    def _get_conn(self):
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create the chat_log table and its index if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._get_conn() as conn:
            conn.execute("""
            CREATE TABLE IF NOT EXISTS chat_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL,
                context TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_chat_log_session ON chat_log(session_id, created_at)")
            conn.commit()
        self._initialized = True

    def write_sync(self, session_id: str, context: str, role: str, content: str) -> None:
        """Insert one entry. Raises LoggingError on any storage failure."""
        try:
            if not self._initialized:
                self.init_db()
            with self._get_conn() as conn:
                conn.execute(
                    "INSERT INTO chat_log (session_id, context, role, content) VALUES (?, ?, ?, ?)",
                    (session_id, context, role, content),
                )
                conn.commit()
        except (sqlite3.Error, OSError) as exc:
            raise LoggingError(f"Failed to write chat log entry: {exc}") from exc

    async def write(self, session_id: str, context: str, role: str, content: str) -> None:
        """Insert one entry from a worker thread."""
        await asyncio.to_thread(self.write_sync, session_id, context, role, content)

    def get_session_entries(self, session_id: str) -> list[dict]:
        """Return a session's entries, oldest first (for review tooling)."""
        if not self.db_path.exists():
            return []
        with self._get_conn() as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                "SELECT session_id, context, role, content, created_at FROM chat_log "
                "WHERE session_id = ? ORDER BY id",
                (session_id,),
            )
            return [dict(row) for row in cursor.fetchall()]
