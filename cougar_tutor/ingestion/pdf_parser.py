"""
PDF Parser - Extracts page text from textbook PDFs.

Uses pymupdf (fitz). Only light clean-up happens here; the OCR fixes in
cougar_tutor.rag.sanitizer run at retrieval time, so improving a rule never
requires re-ingesting a book.
"""

import re
from dataclasses import dataclass
from pathlib import Path

import fitz  # pymupdf - the library is called 'fitz' historically


@dataclass
class PageContent:
    """
    Text of a single PDF page.

    Attributes:
        page_number: 1-indexed page number
        text: Extracted text content
    """

    page_number: int
    text: str


@dataclass
class DocumentContent:
    """
    Text of a whole PDF.

    Attributes:
        filename: Name of the PDF file
        total_pages: Total number of pages (including empty ones)
        pages: Non-empty pages in order
    """

    filename: str
    total_pages: int
    pages: list[PageContent]

    def page_tuples(self) -> list[tuple[int, str]]:
        """Pages as (page_number, text) tuples, the shape the chunker takes."""
        return [(page.page_number, page.text) for page in self.pages]


class PDFParser:
    """
    Parses PDF files page by page.

    Example:
        parser = PDFParser()
        content = parser.parse_pdf("calculus-volume-1.pdf")
        print(content.total_pages)
    """

    def _clean_extracted_text(self, text: str) -> str:
        text = re.sub(r"\n{3,}", "\n\n", text)
        text = re.sub(r" {2,}", " ", text)

        # Lines that are just a short number are page numbers
        lines = [line for line in text.split("\n") if not (line.strip().isdigit() and len(line.strip()) < 4)]
        return "\n".join(lines).strip()

    def parse_pdf(self, pdf_path: str | Path) -> DocumentContent:
        """
        Parse a single PDF file.

        Raises:
            FileNotFoundError: If the PDF file doesn't exist
            RuntimeError: If the PDF cannot be opened
        """
        pdf_path = Path(pdf_path)
        if not pdf_path.exists():
            raise FileNotFoundError(f"PDF not found: {pdf_path}")

        try:
            doc = fitz.open(pdf_path)
        except Exception as e:
            raise RuntimeError(f"Failed to open PDF {pdf_path}: {e}") from e

        pages = []
        with doc:
            total_pages = len(doc)
            for page_index in range(total_pages):
                cleaned = self._clean_extracted_text(doc[page_index].get_text())
                if cleaned:
                    pages.append(PageContent(page_number=page_index + 1, text=cleaned))

        return DocumentContent(filename=pdf_path.name, total_pages=total_pages, pages=pages)
