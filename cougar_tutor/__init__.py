"""
Calculus Cougar - a retrieval-augmented Socratic calculus tutor backend.

This package provides:
- Per-session conversation history for the tutor
- Textbook retrieval from ChromaDB with OCR clean-up
- Reply generation through Ollama
- HTTP and CLI interfaces
- PDF ingestion for new textbooks
"""

__version__ = "0.1.0"
