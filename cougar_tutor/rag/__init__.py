"""
RAG module - Retrieval-Augmented Generation pipeline.

This module is responsible for:
1. Choosing the book and keeping conversation history
2. Retrieving and cleaning textbook passages for a question
3. Assembling the conversation and generating replies with Ollama
"""

from .books import BookSelection, resolve_book
from .generator import Generator, normalize_latex
from .pipeline import ChatPipeline
from .retriever import Passage, RetrievalResult, Retriever
from .sanitizer import sanitize
from .sessions import Session, SessionStore, Turn

__all__ = [
    "BookSelection",
    "ChatPipeline",
    "Generator",
    "Passage",
    "RetrievalResult",
    "Retriever",
    "Session",
    "SessionStore",
    "Turn",
    "normalize_latex",
    "resolve_book",
    "sanitize",
]
