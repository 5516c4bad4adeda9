#!/usr/bin/env python3
"""
Ingest textbook PDFs into the vector store used by the tutor.

Every chunk is tagged with the book id given on the command line; that is
the value students select with /openstax, /unbound or the client's
defaultBook.

Run with:
    python scripts/ingest_books.py --book openstax books/calculus-volume-1.pdf
    python scripts/ingest_books.py --book unbound --clear notes/*.pdf
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from cougar_tutor.config import BOOKS, CHUNK_OVERLAP, CHUNK_SIZE
from cougar_tutor.embeddings.embedder import get_embedder
from cougar_tutor.embeddings.vector_store import VectorStore
from cougar_tutor.errors import TutorError
from cougar_tutor.ingestion.chunker import TextChunker
from cougar_tutor.ingestion.pdf_parser import PDFParser

console = Console()

EMBED_BATCH_SIZE = 32


async def ingest_pdf(pdf_path: Path, book: str, store: VectorStore, parser: PDFParser, chunker: TextChunker) -> int:
    """Parse, chunk, embed and store one PDF. Returns the number of chunks added."""
    document = parser.parse_pdf(pdf_path)
    chunks = chunker.chunk_pages(document.page_tuples(), book=book, source_file=document.filename)
    if not chunks:
        console.print(f"[yellow]No text found in {pdf_path.name}, skipping[/yellow]")
        return 0

    embedder = get_embedder()
    stem = pdf_path.stem

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task(f"Embedding {pdf_path.name}", total=len(chunks))
        for i in range(0, len(chunks), EMBED_BATCH_SIZE):
            batch = chunks[i : i + EMBED_BATCH_SIZE]
            embeddings = await embedder.embed_batch([chunk.text for chunk in batch])
            store.add_documents(
                texts=[chunk.text for chunk in batch],
                embeddings=embeddings,
                metadatas=[chunk.metadata for chunk in batch],
                ids=[f"{book}:{stem}:{chunk.chunk_index}" for chunk in batch],
            )
            progress.advance(task, len(batch))

    console.print(f"[green]{pdf_path.name}: {document.total_pages} pages, {len(chunks)} chunks[/green]")
    return len(chunks)


async def ingest_books(book: str, pdf_paths: list[Path], clear_existing: bool = False) -> int:
    """Ingest a set of PDFs into one book."""
    console.print(Panel.fit(f"[bold blue]Ingesting {len(pdf_paths)} PDF(s) into '{book}'[/bold blue]"))
    if book not in BOOKS:
        console.print(f"[yellow]'{book}' is not in config.BOOKS; it will be labelled '{book.title()}'[/yellow]")

    store = VectorStore()
    if clear_existing:
        console.print(f"[yellow]Removing existing chunks for '{book}'[/yellow]")
        store.delete_book(book)

    parser = PDFParser()
    chunker = TextChunker(chunk_size=CHUNK_SIZE, chunk_overlap=CHUNK_OVERLAP)

    total = 0
    for pdf_path in pdf_paths:
        try:
            total += await ingest_pdf(pdf_path, book, store, parser, chunker)
        except (FileNotFoundError, RuntimeError, TutorError) as e:
            console.print(f"[red]Failed to ingest {pdf_path}: {e}[/red]")

    console.print(f"\n[bold green]Done. Added {total} chunks; collection now holds {store.count}.[/bold green]")
    return total


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Ingest textbook PDFs into the tutor's vector store")
    parser.add_argument("pdfs", nargs="+", type=Path, help="PDF files to ingest")
    parser.add_argument("--book", required=True, help="Book id to tag the chunks with (e.g. openstax)")
    parser.add_argument("--clear", action="store_true", help="Remove the book's existing chunks first")

    args = parser.parse_args()
    asyncio.run(ingest_books(args.book.lower(), args.pdfs, clear_existing=args.clear))


if __name__ == "__main__":
    main()
