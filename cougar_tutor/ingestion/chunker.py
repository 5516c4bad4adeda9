"""
Text Chunker - Splits textbook pages into overlapping chunks for embedding.

Chunks never cross a page boundary, so every chunk can carry the page it
came from. The retriever uses that page number to tag passages.

Example:
    Text: "ABCDEFGHIJ" (10 chars)
    Chunk size: 5, Overlap: 2

    Chunk 1: "ABCDE"
    Chunk 2: "DEFGH"  <- 'DE' overlaps with chunk 1
    Chunk 3: "GHIJ"   <- 'GH' overlaps with chunk 2
"""

import re
from dataclasses import dataclass, field

from cougar_tutor.config import CHUNK_OVERLAP, CHUNK_SIZE


@dataclass
class TextChunk:
    """
    A chunk of textbook text with its metadata.

    Attributes:
        text: The chunk content
        chunk_index: Position of this chunk in the book (0-indexed)
        metadata: book, page, source_file
    """

    text: str
    chunk_index: int
    metadata: dict = field(default_factory=dict)


class TextChunker:
    """
    Splits text into overlapping chunks, preferring natural boundaries.

    Split points are searched for near the target size, in this order:
    sentence end, line break, space, exact position.

    Example:
        chunker = TextChunker(chunk_size=800, chunk_overlap=100)
        chunks = chunker.chunk_pages([(1, "page one text"), (2, "...")], book="openstax")
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE, chunk_overlap: int = CHUNK_OVERLAP, min_chunk_size: int = 20):
        """
        Raises:
            ValueError: If overlap >= chunk_size or sizes are invalid
        """
        if chunk_overlap >= chunk_size:
            raise ValueError("Overlap must be less than chunk size")
        if chunk_size < 50:
            raise ValueError("Chunk size must be at least 50 characters")
        if min_chunk_size < 1:
            raise ValueError("Minimum chunk size must be positive")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.min_chunk_size = min_chunk_size
        self.sentence_endings = re.compile(r"[.!?]\s+")

    def _find_split_point(self, text: str, target_pos: int) -> int:
        # Look back up to 100 chars from the target
        search_start = max(0, target_pos - 100)
        window = text[search_start:target_pos]

        sentence_matches = list(self.sentence_endings.finditer(window))
        if sentence_matches:
            return search_start + sentence_matches[-1].end()

        newline_pos = window.rfind("\n")
        if newline_pos > len(window) // 2:
            return search_start + newline_pos + 1

        space_pos = window.rfind(" ")
        if space_pos != -1:
            return search_start + space_pos + 1

        return target_pos

    def split(self, text: str) -> list[str]:
        """Split one block of text into overlapping pieces."""
        text = text.strip() if text else ""
        if not text:
            return []

        pieces = []
        start = 0
        while start < len(text):
            end = start + self.chunk_size
            if end >= len(text):
                end = len(text)
            else:
                end = self._find_split_point(text, end)

            piece = text[start:end].strip()
            if len(piece) >= self.min_chunk_size:
                pieces.append(piece)

            if end >= len(text):
                break

            # Always move forward, even when the split point sits inside the overlap
            next_start = end - self.chunk_overlap
            start = next_start if next_start > start else end

        return pieces

    def chunk_pages(self, pages: list[tuple[int, str]], book: str, source_file: str = "") -> list[TextChunk]:
        """
        Chunk a book page by page.

        Args:
            pages: (page_number, page_text) tuples
            book: Corpus identifier stored on every chunk
            source_file: Name of the PDF the pages came from

        Returns:
            TextChunk objects indexed sequentially across all pages
        """
        chunks = []
        for page_number, page_text in pages:
            for piece in self.split(page_text):
                chunks.append(
                    TextChunk(
                        text=piece,
                        chunk_index=len(chunks),
                        metadata={"book": book, "page": page_number, "source_file": source_file},
                    )
                )
        return chunks
