"""Shared fixtures for the Calculus Cougar test suite."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from cougar_tutor.embeddings.vector_store import SearchResult
from cougar_tutor.errors import LoggingError, RetrievalError
from cougar_tutor.rag.generator import Generator
from cougar_tutor.rag.pipeline import ChatPipeline
from cougar_tutor.rag.retriever import Retriever
from cougar_tutor.rag.sessions import SessionStore

# ---------------------------------------------------------------------------
# Canned textbook passages
# ---------------------------------------------------------------------------

FAKE_RESULTS = [
    SearchResult(
        text="**The Chain Rule**\nWe differentiate composite functions u\\sin g the chain rule.",
        score=0.91,
        metadata={"book": "openstax", "page": 231, "source_file": "calculus-volume-1.pdf"},
        id="openstax:calc:10",
    ),
    SearchResult(
        text="Let the function 1 be differentiable at a.\nAccess for free at openstax.org",
        score=0.84,
        metadata={"book": "openstax", "page": 232, "source_file": "calculus-volume-1.pdf"},
        id="openstax:calc:11",
    ),
]

# ---------------------------------------------------------------------------
# Fakes for the embedding API, the vector store, the chat API and the log sink
# ---------------------------------------------------------------------------


class FakeEmbedder:
    """Embedder that returns a fixed vector without calling a model."""

    def __init__(self, vector=None, error: Exception | None = None):
        self.vector = [0.1, 0.2, 0.3] if vector is None else vector
        self.error = error
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.vector

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed(text) for text in texts]


class FakeVectorStore:
    """VectorStore that returns canned results without touching ChromaDB."""

    def __init__(self, results=None, fail: bool = False):
        self.results = list(FAKE_RESULTS) if results is None else results
        self.fail = fail
        self.searches: list[dict] = []

    @property
    def count(self) -> int:
        return len(self.results)

    def search(self, query_embedding, top_k=None, where=None):
        self.searches.append({"embedding": query_embedding, "top_k": top_k, "where": where})
        if self.fail:
            raise RetrievalError("vector store unavailable")
        return list(self.results)

    def get_stats(self) -> dict:
        return {
            "collection_name": "calculus_books",
            "document_count": self.count,
            "books": ["openstax"],
            "persist_directory": "/tmp/fake_chroma",
        }


class FakeChatClient:
    """Stand-in for ollama.AsyncClient.chat."""

    def __init__(self, content="Let's think about it: what is $f'(x)$?", error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    async def chat(self, model, messages, options=None, **_):
        self.calls.append({"model": model, "messages": [dict(m) for m in messages], "options": options})
        if self.error:
            raise self.error
        return {"message": {"role": "assistant", "content": self.content}}


class RecordingChatLog:
    """Chat log sink that keeps entries in memory."""

    def __init__(self):
        self.entries: list[tuple[str, str, str, str]] = []

    async def write(self, session_id, context, role, content):
        self.entries.append((session_id, context, role, content))


class FailingChatLog:
    """Chat log sink whose every write fails."""

    def __init__(self):
        self.attempts = 0

    async def write(self, session_id, context, role, content):
        self.attempts += 1
        raise LoggingError("log database is read-only")


def build_pipeline(
    embedder=None,
    vector_store=None,
    chat_client=None,
    chat_log=None,
    persist_context=False,
) -> ChatPipeline:
    """ChatPipeline wired entirely to fakes."""
    retriever = Retriever(embedder=embedder or FakeEmbedder(), vector_store=vector_store or FakeVectorStore())
    generator = Generator(model="fake-model", client=chat_client or FakeChatClient())
    return ChatPipeline(
        retriever=retriever,
        generator=generator,
        sessions=SessionStore(),
        chat_log=chat_log or RecordingChatLog(),
        persist_context=persist_context,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def embedder():
    return FakeEmbedder()


@pytest.fixture()
def vector_store():
    return FakeVectorStore()


@pytest.fixture()
def chat_client():
    return FakeChatClient()


@pytest.fixture()
def chat_log():
    return RecordingChatLog()


@pytest.fixture()
def pipeline(embedder, vector_store, chat_client, chat_log):
    return build_pipeline(embedder, vector_store, chat_client, chat_log)


@pytest.fixture()
def test_client(pipeline):
    """
    TestClient serving a pipeline built from fakes.

    No Ollama, ChromaDB or SQLite access happens, so tests run in
    milliseconds without any external dependencies.
    """
    from cougar_tutor.interfaces.web_app import create_app

    with TestClient(create_app(pipeline)) as client:
        yield client


@pytest.fixture()
def failing_test_client():
    """TestClient whose chat API is down."""
    from cougar_tutor.interfaces.web_app import create_app

    client = FakeChatClient(error=ConnectionError("connection refused by upstream 10.0.0.7"))
    with TestClient(create_app(build_pipeline(chat_client=client))) as test_client:
        yield test_client


@pytest.fixture()
def mock_chroma_client():
    """Chroma client double whose collection is a MagicMock."""
    client = MagicMock()
    client.get_or_create_collection.return_value = MagicMock()
    return client

