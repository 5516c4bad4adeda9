"""
Generator - Gets the tutor's reply from the chat model.

This module handles the generation part of RAG:
1. Sends the assembled message list to Ollama with fixed sampling options
2. Extracts the reply text (or a fallback when the model returns nothing)
3. Rewrites LaTeX delimiters into the dollar style the front end renders

A failed call raises CompletionError. There are no retries.
"""

import re

import ollama

from cougar_tutor.config import (
    CHAT_MODEL,
    FALLBACK_REPLY,
    MAX_OUTPUT_TOKENS,
    OLLAMA_BASE_URL,
    REQUEST_TIMEOUT_SECONDS,
    TEMPERATURE,
)
from cougar_tutor.errors import CompletionError
from cougar_tutor.utils.logger import get_logger

logger = get_logger(__name__)

# =============================================================================
# LATEX DELIMITER NORMALIZATION
# =============================================================================

# Display rules run first so "\[" is never read as part of an inline span.
LATEX_RULES: list[tuple[str, str]] = [
    (r"\\\[(.*?)\\\]", r"$$\1$$"),
    (r"\$begin:math:display\$(.*?)\$end:math:display\$", r"$$\1$$"),
    (r"\\\((.*?)\\\)", r"$\1$"),
    (r"\$begin:math:text\$(.*?)\$end:math:text\$", r"$\1$"),
]

_COMPILED_LATEX_RULES = [(re.compile(pattern, re.DOTALL), replacement) for pattern, replacement in LATEX_RULES]


def normalize_latex(text: str) -> str:
    """
    Convert \\( ... \\) and \\[ ... \\] math into $ ... $ and $$ ... $$.

    Purely cosmetic: the LaTeX inside the delimiters is not checked.
    """
    for pattern, replacement in _COMPILED_LATEX_RULES:
        text = pattern.sub(replacement, text)
    return text


# =============================================================================
# COMPLETION CLIENT
# =============================================================================


class Generator:
    """
    Sends conversations to the chat model.

    Example:
        generator = Generator()
        reply = await generator.complete([
            {"role": "system", "content": "You are a tutor."},
            {"role": "user", "content": "What is a limit?"},
        ])
    """

    def __init__(self, model: str | None = None, client: ollama.AsyncClient | None = None):
        """
        Initialize the generator.

        Args:
            model: Ollama model name (uses config default if not provided)
            client: Pre-built AsyncClient (mainly for tests)
        """
        self.model = model or CHAT_MODEL
        self.options = {"temperature": TEMPERATURE, "num_predict": MAX_OUTPUT_TOKENS}
        self._client = client or ollama.AsyncClient(host=OLLAMA_BASE_URL, timeout=REQUEST_TIMEOUT_SECONDS)

    async def complete(self, messages: list[dict[str, str]]) -> str:
        """
        Get the model's reply to a conversation.

        Args:
            messages: Ordered {"role", "content"} dicts

        Returns:
            The reply text, or FALLBACK_REPLY if the model returned no content

        Raises:
            CompletionError: If the request fails or the response is unreadable
        """
        try:
            response = await self._client.chat(model=self.model, messages=messages, options=self.options)
        except Exception as exc:
            logger.error("Error communicating with Ollama: %s", exc)
            raise CompletionError(f"Completion request failed: {exc}") from exc

        try:
            message = response.get("message") if response else None
            content = message.get("content") if message else None
        except (AttributeError, TypeError) as exc:
            raise CompletionError(f"Unreadable completion response: {exc}") from exc

        if not content or not str(content).strip():
            logger.warning("Model %s returned no content, using fallback reply", self.model)
            return FALLBACK_REPLY

        return str(content)
