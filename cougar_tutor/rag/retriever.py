"""
Retriever - Finds textbook passages relevant to a student's question.

This module handles the retrieval part of RAG:
1. Takes the question and the selected book
2. Converts the question to an embedding
3. Searches the vector store, filtered to that book
4. Cleans every passage with the sanitizer

An embedding failure aborts the request (EmbeddingError). A failed search
does not: it is logged and the tutor answers without reference material.
"""

import asyncio
from dataclasses import dataclass, field

from cougar_tutor.config import RETRIEVAL_TOP_K
from cougar_tutor.embeddings.embedder import Embedder, get_embedder
from cougar_tutor.embeddings.vector_store import VectorStore
from cougar_tutor.errors import EmbeddingError, RetrievalError
from cougar_tutor.rag.sanitizer import sanitize
from cougar_tutor.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Passage:
    """A sanitized textbook passage."""

    content: str
    page: int | None = None
    source: str = ""
    score: float = 0.0


@dataclass
class RetrievalResult:
    """
    Passages retrieved for one question, most relevant first.

    Attributes:
        query: The question that was searched
        book: The book the search was restricted to
        passages: Sanitized passages in the vector store's ranking order
    """

    query: str
    book: str
    passages: list[Passage] = field(default_factory=list)

    @property
    def has_results(self) -> bool:
        return len(self.passages) > 0

    def format_for_prompt(self) -> str:
        """
        Join the passages into one block of reference text.

        Each passage is tagged with its page when the chunk metadata has one,
        so the model can point students at the right page.
        """
        formatted_parts = []
        for passage in self.passages:
            if passage.page is not None:
                formatted_parts.append(f"[Page {passage.page}]\n{passage.content}")
            else:
                formatted_parts.append(passage.content)
        return "\n\n---\n\n".join(formatted_parts)


class Retriever:
    """
    Retrieves relevant passages from the vector store.

    Example:
        retriever = Retriever()
        result = await retriever.retrieve("What is the chain rule?", book="openstax")
        print(f"Found {len(result.passages)} passages")
    """

    def __init__(
        self,
        embedder: Embedder | None = None,
        vector_store: VectorStore | None = None,
        top_k: int | None = None,
    ):
        """
        Initialize the retriever.

        Args:
            embedder: Embedder instance (uses global if not provided)
            vector_store: VectorStore instance (creates new if not provided)
            top_k: Number of passages to retrieve
        """
        self.embedder = embedder or get_embedder()
        self.vector_store = vector_store or VectorStore()
        self.top_k = top_k or RETRIEVAL_TOP_K

    async def retrieve(self, query: str, book: str) -> RetrievalResult:
        """
        Retrieve passages for a question from one book.

        Args:
            query: The student's question (book command already removed)
            book: Corpus identifier to filter on

        Returns:
            RetrievalResult, empty if the search failed

        Raises:
            EmbeddingError: If the question could not be embedded
        """
        query_embedding = await self.embedder.embed(query)
        if not query_embedding:
            raise EmbeddingError("No embedding returned for query")

        try:
            results = await asyncio.to_thread(
                self.vector_store.search,
                query_embedding,
                top_k=self.top_k,
                where={"book": book},
            )
        except RetrievalError as exc:
            logger.error("Retrieval failed for book %s, continuing without context: %s", book, exc)
            return RetrievalResult(query=query, book=book)

        passages = []
        for result in results:
            content = sanitize(result.text)
            if not content:
                continue
            passages.append(
                Passage(
                    content=content,
                    page=result.page,
                    source=result.metadata.get("source_file", ""),
                    score=result.score,
                )
            )

        logger.debug("Retrieved %d passages from %s", len(passages), book)
        return RetrievalResult(query=query, book=book, passages=passages)
