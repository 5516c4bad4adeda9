"""
Embeddings module - Handles embedding generation and vector storage.

This module is responsible for:
1. Converting questions and chunks to embeddings
2. Storing and searching embeddings in ChromaDB
"""

from .embedder import Embedder, LocalEmbedder, OllamaEmbedder, get_embedder
from .vector_store import SearchResult, VectorStore

__all__ = ["Embedder", "LocalEmbedder", "OllamaEmbedder", "get_embedder", "SearchResult", "VectorStore"]
