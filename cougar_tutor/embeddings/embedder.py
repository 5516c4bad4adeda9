"""
Embedder - Converts text to vector embeddings.

Two backends share one async interface:

- OllamaEmbedder asks the Ollama server for an embedding (the default).
- LocalEmbedder runs a sentence-transformers model in-process. Encoding is
  CPU-bound, so it runs in a worker thread to keep the event loop free.

IMPORTANT: always query a collection with the same model it was built with.
If you index with 'nomic-embed-text', you must query with it too.

Example:
    embedder = get_embedder()
    vector = await embedder.embed("What is a derivative?")
    vectors = await embedder.embed_batch(["chunk 1", "chunk 2"])
"""

import asyncio
from typing import Protocol, runtime_checkable

import ollama
from sentence_transformers import SentenceTransformer

from cougar_tutor.config import (
    EMBEDDING_BACKEND,
    EMBEDDING_MODEL,
    LOCAL_EMBEDDING_MODEL,
    OLLAMA_BASE_URL,
    REQUEST_TIMEOUT_SECONDS,
)
from cougar_tutor.errors import EmbeddingError
from cougar_tutor.utils.logger import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Embedder(Protocol):
    """Anything that can turn text into vectors."""

    async def embed(self, text: str) -> list[float]: ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]: ...


class OllamaEmbedder:
    """
    Gets embeddings from an Ollama server.

    Raises EmbeddingError when the server cannot be reached or answers
    without a vector.
    """

    def __init__(self, model: str | None = None, client: ollama.AsyncClient | None = None):
        """
        Args:
            model: Embedding model served by Ollama (default from config)
            client: Pre-built AsyncClient (mainly for tests)
        """
        self.model = model or EMBEDDING_MODEL
        self._client = client or ollama.AsyncClient(host=OLLAMA_BASE_URL, timeout=REQUEST_TIMEOUT_SECONDS)

    async def _request(self, texts: list[str]) -> list[list[float]]:
        try:
            response = await self._client.embed(model=self.model, input=texts)
        except Exception as exc:
            logger.error("Embedding request to Ollama failed: %s", exc)
            raise EmbeddingError(f"Embedding request failed: {exc}") from exc

        embeddings = response.get("embeddings") if response else None
        if not embeddings or len(embeddings) != len(texts) or not all(embeddings):
            raise EmbeddingError("Embedding API returned no embedding")
        return [list(vector) for vector in embeddings]

    async def embed(self, text: str) -> list[float]:
        """Embed a single text."""
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")
        return (await self._request([text]))[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts in one request."""
        if not texts:
            return []
        return await self._request(texts)


class LocalEmbedder:
    """
    Converts text to embeddings with a local sentence-transformers model.

    The model is loaded lazily on first use (first run downloads ~90MB for
    MiniLM; later runs use the cached copy).
    """

    def __init__(self, model_name: str | None = None):
        self.model_name = model_name or LOCAL_EMBEDDING_MODEL
        self._model: SentenceTransformer | None = None

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the model on first use."""
        if self._model is None:
            logger.info("Loading embedding model: %s", self.model_name)
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def _encode(self, texts: list[str]) -> list[list[float]]:
        embeddings = self.model.encode(texts, convert_to_numpy=True, show_progress_bar=False)
        return [embedding.tolist() for embedding in embeddings]

    async def embed(self, text: str) -> list[float]:
        """Embed a single text in a worker thread."""
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")
        return (await self.embed_batch([text]))[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts in a worker thread."""
        if not texts:
            return []
        try:
            vectors = await asyncio.to_thread(self._encode, texts)
        except Exception as exc:
            logger.error("Local embedding failed: %s", exc)
            raise EmbeddingError(f"Local embedding failed: {exc}") from exc
        if len(vectors) != len(texts) or not all(vectors):
            raise EmbeddingError("Embedding model returned no embedding")
        return vectors


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

# Global embedder instance (singleton pattern)
_global_embedder: Embedder | None = None


def create_embedder(backend: str | None = None) -> Embedder:
    """Build the embedder for a backend name ("ollama" or "local")."""
    backend = (backend or EMBEDDING_BACKEND).lower()
    if backend == "ollama":
        return OllamaEmbedder()
    if backend == "local":
        return LocalEmbedder()
    raise ValueError(f"Unknown embedding backend: {backend!r} (expected 'ollama' or 'local')")


def get_embedder() -> Embedder:
    """
    Get or create the global embedder instance.

    This ensures we only load a local model once, saving memory.
    """
    global _global_embedder
    if _global_embedder is None:
        _global_embedder = create_embedder()
    return _global_embedder
