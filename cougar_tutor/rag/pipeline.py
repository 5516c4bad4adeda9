"""
Chat Pipeline - Turns one student message into one tutor reply.

    message -> book resolution -> session -> retrieval -> assembly
            -> completion -> LaTeX normalization -> session -> reply

Chat log writes run as background tasks. Their failures are logged here and
never reach the caller.
"""

import asyncio

from cougar_tutor.chat_log import ChatLog, ChatLogSink
from cougar_tutor.config import DEFAULT_CONTEXT_TAG
from cougar_tutor.errors import LoggingError
from cougar_tutor.rag.assembler import ConversationAssembler
from cougar_tutor.rag.books import resolve_book
from cougar_tutor.rag.generator import Generator, normalize_latex
from cougar_tutor.rag.retriever import Retriever
from cougar_tutor.rag.sessions import SessionStore, Turn
from cougar_tutor.utils.logger import get_logger

logger = get_logger(__name__)


class ChatPipeline:
    """
    Complete tutoring pipeline combining retrieval and generation.

    Example:
        pipeline = ChatPipeline()
        reply = await pipeline.handle("/openstax what is a limit?", session_id="abc")
    """

    def __init__(
        self,
        retriever: Retriever | None = None,
        generator: Generator | None = None,
        sessions: SessionStore | None = None,
        chat_log: ChatLogSink | None = None,
        persist_context: bool | None = None,
    ):
        self.retriever = retriever or Retriever()
        self.generator = generator or Generator()
        self.sessions = sessions if sessions is not None else SessionStore()
        self.chat_log = chat_log or ChatLog()
        self.assembler = ConversationAssembler(self.sessions, persist_context=persist_context)
        self._log_tasks: set[asyncio.Task] = set()

    async def handle(
        self,
        message: str,
        session_id: str,
        context: str = DEFAULT_CONTEXT_TAG,
        default_book: str | None = None,
    ) -> str:
        """
        Answer one message.

        Args:
            message: Raw message from the student
            session_id: Conversation key supplied by the client
            context: Usage tag recorded in the chat log
            default_book: Book to use when the message has no book command

        Returns:
            The normalized reply, also stored as an assistant turn

        Raises:
            EmbeddingError: If the question could not be embedded
            CompletionError: If the chat model call failed
        """
        selection = resolve_book(message, default_book)
        session = self.sessions.get_or_create(session_id)
        self._log(session_id, context, "user", message)

        retrieval = await self.retriever.retrieve(selection.query, selection.book)
        messages = self.assembler.assemble(session, retrieval, selection.query)

        reply = normalize_latex(await self.generator.complete(messages))

        self.sessions.append(session_id, Turn("assistant", reply))
        self._log(session_id, context, "assistant", reply)
        return reply

    def _log(self, session_id: str, context: str, role: str, content: str) -> None:
        """Schedule a chat log write without waiting for it."""
        task = asyncio.create_task(self._write_log(session_id, context, role, content))
        self._log_tasks.add(task)
        task.add_done_callback(self._log_tasks.discard)

    async def _write_log(self, session_id: str, context: str, role: str, content: str) -> None:
        try:
            await self.chat_log.write(session_id, context, role, content)
        except LoggingError as exc:
            logger.warning("Chat log write failed for session %s: %s", session_id, exc)
        except Exception:
            logger.exception("Unexpected chat log failure for session %s", session_id)

    async def drain(self) -> None:
        """Wait for pending chat log writes (used on shutdown and in tests)."""
        if self._log_tasks:
            await asyncio.gather(*self._log_tasks, return_exceptions=True)
