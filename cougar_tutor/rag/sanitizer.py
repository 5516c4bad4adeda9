"""
Sanitizer - Cleans retrieved textbook passages before they reach the LLM.

The textbook PDFs were converted with an OCR/LaTeX pipeline that left
predictable noise behind: words that contain a trig function name come out as
LaTeX commands ("u\\sin g" instead of "using"), function names become digits
("function 1"), and every page carries markdown markers and a footer.

Each fix is a (pattern, replacement) rule. Rules run in order, so add new
OCR fixes to the table rather than to the code. Text that matches no rule
passes through unchanged.
"""

import re

# =============================================================================
# RULE TABLE
# =============================================================================

# Words mangled into LaTeX commands by the OCR step.
# "u\sin g" must run before "\sin ce" would get the chance to touch it.
OCR_RULES: list[tuple[str, str]] = [
    (r"u\\sin\s*g", "using"),
    (r"\\sin\s*ce", "since"),
    (r"ins\\tan\s*ce", "instance"),
    (r"dis\\tan\s*ce", "distance"),
    (r"cons\\tan\s*t", "constant"),
    (r"impor\\tan\s*t", "important"),
]

# Function names that came out of OCR as digits.
PLACEHOLDER_RULES: list[tuple[str, str]] = [
    (r"\b(function|graph of)\s+1\b(?![.,]?\d)", r"\1 f"),
]

MARKDOWN_RULES: list[tuple[str, str]] = [
    (r"\*\*|__", ""),
    (r"(?m)^[ \t]*(?:#{1,6}[ \t]+)+", ""),
]

FOOTER_RULES: list[tuple[str, str]] = [
    (r"(?im)^.*\b(?:access|download) for free at\b.*$", ""),
    (r"(?im)^.*\bopenstax book is available for free at\b.*$", ""),
]

WHITESPACE_RULES: list[tuple[str, str]] = [
    (r"[^\S\n]+", " "),
    (r"(?m)^ +| +$", ""),
    (r"\n{3,}", "\n\n"),
]

# Markdown goes first: bold markers can split an OCR word, a placeholder
# phrase or a footer ("**function** 1", "**Access** for free at").
SANITIZE_RULES: list[tuple[str, str]] = (
    MARKDOWN_RULES + OCR_RULES + PLACEHOLDER_RULES + FOOTER_RULES + WHITESPACE_RULES
)

_COMPILED_RULES = [(re.compile(pattern), replacement) for pattern, replacement in SANITIZE_RULES]


# =============================================================================
# PUBLIC API
# =============================================================================


def sanitize(text: str) -> str:
    """
    Remove OCR artifacts and markdown noise from a retrieved passage.

    Args:
        text: Raw passage text from the vector store

    Returns:
        Cleaned text. Running it through sanitize() again returns it unchanged.

    Example:
        sanitize("**Example** u\\sin g the function 1")
        # -> "Example using the function f"
    """
    if not text:
        return ""

    for pattern, replacement in _COMPILED_RULES:
        text = pattern.sub(replacement, text)

    return text.strip()
