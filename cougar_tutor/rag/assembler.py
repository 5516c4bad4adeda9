"""
Conversation Assembler - Builds the message list sent to the chat model.

Order of the outgoing messages:
1. Session history (persona prompt first, then earlier user/assistant turns)
2. One system turn with this request's reference passages, if any
3. The student's question

By default the reference turn is only sent with the request it belongs to.
With PERSIST_REFERENCE_CONTEXT it is stored in the session as well, so every
later request resends it.
"""

from cougar_tutor.config import CONTEXT_PREAMBLE, PERSIST_REFERENCE_CONTEXT
from cougar_tutor.rag.books import book_label
from cougar_tutor.rag.retriever import RetrievalResult
from cougar_tutor.rag.sessions import Session, SessionStore, Turn


def build_context_turn(retrieval: RetrievalResult) -> Turn | None:
    """Build the reference-material system turn, or None without passages."""
    if not retrieval.has_results:
        return None

    preamble = CONTEXT_PREAMBLE.format(source=book_label(retrieval.book))
    body = retrieval.format_for_prompt()
    return Turn("system", f"{preamble}\n\n--- {book_label(retrieval.book)} ---\n{body}")


class ConversationAssembler:
    """
    Merges history, reference passages and the new question.

    Example:
        assembler = ConversationAssembler(store)
        messages = assembler.assemble(session, retrieval, "What is a limit?")
    """

    def __init__(self, sessions: SessionStore, persist_context: bool | None = None):
        self.sessions = sessions
        self.persist_context = PERSIST_REFERENCE_CONTEXT if persist_context is None else persist_context

    def assemble(self, session: Session, retrieval: RetrievalResult, query: str) -> list[dict[str, str]]:
        """
        Record the question in the session and return the messages to send.

        Args:
            session: Session the question belongs to
            retrieval: Passages retrieved for the question (may be empty)
            query: Effective question text

        Returns:
            Ordered list of {"role", "content"} dicts
        """
        context_turn = build_context_turn(retrieval)
        user_turn = Turn("user", query)

        if self.persist_context:
            if context_turn is not None:
                session = self.sessions.append(session.session_id, context_turn)
            session = self.sessions.append(session.session_id, user_turn)
            return session.messages

        messages = session.messages
        self.sessions.append(session.session_id, user_turn)
        if context_turn is not None:
            messages.append(context_turn.to_message())
        messages.append(user_turn.to_message())
        return messages
