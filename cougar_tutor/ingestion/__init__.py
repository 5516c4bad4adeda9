"""
Ingestion module - Loads textbook PDFs into the vector store.

This module is responsible for:
1. Extracting page text from PDF files
2. Splitting pages into chunks tagged with book and page
"""

from .chunker import TextChunk, TextChunker
from .pdf_parser import DocumentContent, PageContent, PDFParser

__all__ = ["DocumentContent", "PageContent", "PDFParser", "TextChunk", "TextChunker"]
