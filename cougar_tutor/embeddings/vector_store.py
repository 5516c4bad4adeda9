"""
Vector Store - Stores and searches textbook chunks using ChromaDB.

All books share one collection. Every chunk carries a "book" metadata
field, and searches filter on it, so adding a textbook never needs a new
collection.

How it works:
1. Store: text + embedding + metadata (book, page, source_file) -> ChromaDB
2. Query: question embedding + {"book": ...} filter -> ranked passages
"""

from dataclasses import dataclass
from pathlib import Path

import chromadb

from cougar_tutor.config import CHROMA_DB_DIR, COLLECTION_NAME, RETRIEVAL_TOP_K
from cougar_tutor.errors import RetrievalError
from cougar_tutor.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SearchResult:
    """
    A single search result from the vector store.

    Attributes:
        text: The stored chunk text
        score: Similarity score (higher = more similar)
        metadata: book, page, source_file
        id: Unique identifier
    """

    text: str
    score: float
    metadata: dict
    id: str

    @property
    def page(self) -> int | None:
        """Page number the chunk came from, if known."""
        page = self.metadata.get("page")
        return int(page) if page not in (None, "") else None

    @property
    def book(self) -> str:
        return self.metadata.get("book", "")


class VectorStore:
    """
    ChromaDB-backed store for textbook chunks.

    Example:
        store = VectorStore()
        store.add_documents(
            texts=["A limit describes ...", "The derivative ..."],
            embeddings=[[0.1, ...], [0.3, ...]],
            metadatas=[{"book": "openstax", "page": 73}, {"book": "openstax", "page": 140}],
        )
        results = store.search(query_embedding, top_k=3, where={"book": "openstax"})
    """

    def __init__(
        self,
        collection_name: str | None = None,
        persist_directory: str | Path | None = None,
        client=None,
    ):
        """
        Initialize the vector store.

        Args:
            collection_name: Name of the collection to use/create
            persist_directory: Where to store the database files
            client: Pre-built Chroma client (e.g. chromadb.EphemeralClient() in tests)
        """
        self.collection_name = collection_name or COLLECTION_NAME
        self.persist_directory = Path(persist_directory or CHROMA_DB_DIR)

        if client is None:
            self.persist_directory.mkdir(parents=True, exist_ok=True)
            client = chromadb.PersistentClient(path=str(self.persist_directory))
        self._client = client

        # Cosine distance: 0 = identical, 2 = opposite
        self._collection = self._get_collection()

    def _get_collection(self):
        return self._client.get_or_create_collection(
            name=self.collection_name,
            metadata={
                "description": "Calculus textbook chunks",
                "hnsw:space": "cosine",
            },
        )

    @property
    def count(self) -> int:
        """Get the number of chunks in the collection."""
        return self._collection.count()

    def add_documents(
        self,
        texts: list[str],
        embeddings: list[list[float]],
        metadatas: list[dict] | None = None,
        ids: list[str] | None = None,
    ) -> None:
        """
        Add chunks to the vector store.

        Raises:
            ValueError: If texts and embeddings have mismatched lengths
        """
        if len(texts) != len(embeddings):
            raise ValueError("texts and embeddings must have same length")

        if not texts:
            return

        if ids is None:
            existing_count = self.count
            ids = [f"doc_{existing_count + i}" for i in range(len(texts))]

        if metadatas is None:
            metadatas = [{} for _ in texts]

        self._collection.add(documents=texts, embeddings=embeddings, metadatas=metadatas, ids=ids)
        logger.info("Added %d chunks to '%s' (%d total)", len(texts), self.collection_name, self.count)

    def search(
        self,
        query_embedding: list[float],
        top_k: int | None = None,
        where: dict | None = None,
    ) -> list[SearchResult]:
        """
        Search for the chunks closest to an embedding.

        Args:
            query_embedding: The embedding vector to search with
            top_k: Number of results to return (default RETRIEVAL_TOP_K)
            where: Optional metadata filter, e.g. {"book": "openstax"}

        Returns:
            SearchResult objects in Chroma's ranking order (most similar first)

        Raises:
            RetrievalError: If the Chroma query fails
        """
        query_kwargs = {
            "query_embeddings": [query_embedding],
            "n_results": top_k or RETRIEVAL_TOP_K,
            "include": ["documents", "metadatas", "distances"],
        }
        if where:
            query_kwargs["where"] = where

        try:
            results = self._collection.query(**query_kwargs)
        except Exception as exc:
            raise RetrievalError(f"Vector search failed: {exc}") from exc

        search_results = []
        if results and results["documents"] and results["documents"][0]:
            documents = results["documents"][0]
            metadatas = results["metadatas"][0] if results["metadatas"] else [{}] * len(documents)
            distances = results["distances"][0] if results["distances"] else [0.0] * len(documents)
            ids = results["ids"][0] if results["ids"] else [""] * len(documents)

            for doc, meta, dist, doc_id in zip(documents, metadatas, distances, ids):
                search_results.append(
                    SearchResult(text=doc, score=max(0.0, 1 - dist), metadata=meta or {}, id=doc_id)
                )

        return search_results

    def delete_book(self, book: str) -> None:
        """Remove every chunk belonging to one book."""
        self._collection.delete(where={"book": book})

    def get_stats(self) -> dict:
        """
        Get statistics about the collection.

        Returns:
            Dict with chunk count and the books seen in a sample of metadata
        """
        count = self.count
        books = set()
        if count > 0:
            result = self._collection.get(limit=min(count, 100), include=["metadatas"])
            for meta in result["metadatas"] or []:
                if meta and "book" in meta:
                    books.add(meta["book"])

        return {
            "collection_name": self.collection_name,
            "document_count": count,
            "books": sorted(books),
            "persist_directory": str(self.persist_directory),
        }
