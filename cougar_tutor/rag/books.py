"""
Book resolution - decides which textbook a message should be answered from.

Students can prefix a message with a book command to override the book the
client selected, for example:

    "/openstax derivative rules"   -> openstax, "derivative rules"
    "unbound: chain rule examples" -> unbound,  "chain rule examples"
"""

import re
from dataclasses import dataclass

from cougar_tutor.config import BOOK_COMMANDS, BOOKS, DEFAULT_BOOK


@dataclass(frozen=True)
class BookSelection:
    """
    The book chosen for one request.

    Attributes:
        book: Corpus identifier used to filter the vector store
        query: Message text with any book command removed
    """

    book: str
    query: str


def _command_pattern(prefix: str) -> str:
    # Slash commands need whitespace or the end of the message after them
    if prefix.startswith("/"):
        return re.escape(prefix) + r"(?=\s|$)"
    return re.escape(prefix)


# Longest prefixes first so "/openstax" wins over "/os"
_COMMAND_RES: list[tuple[re.Pattern, str]] = [
    (re.compile(r"^\s*" + _command_pattern(prefix) + r"\s*", re.IGNORECASE), book)
    for book, prefixes in BOOK_COMMANDS.items()
    for prefix in sorted(prefixes, key=len, reverse=True)
]


def resolve_book(message: str, default_book: str | None = None) -> BookSelection:
    """
    Pick the book for a message and strip any book command from it.

    Args:
        message: Raw message typed by the student
        default_book: Book selected by the client (falls back to DEFAULT_BOOK)

    Returns:
        BookSelection with the book id and the effective query. If the
        command was the whole message, the original message is kept as
        the query.
    """
    for pattern, book in _COMMAND_RES:
        match = pattern.match(message)
        if match:
            remainder = message[match.end():].strip()
            return BookSelection(book=book, query=remainder or message)

    return BookSelection(book=default_book or DEFAULT_BOOK, query=message)


def book_label(book: str) -> str:
    """Human-readable name of a book, used when labelling context."""
    info = BOOKS.get(book)
    if info:
        return info["label"]
    return book.replace("_", " ").replace("-", " ").title()
