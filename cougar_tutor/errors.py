"""
Exceptions raised by the tutor pipeline.

Embedding and completion failures abort a request. Retrieval and logging
failures are caught close to where they happen and never reach the caller.
"""


class TutorError(Exception):
    """Base class for every error raised by cougar_tutor."""


class InputError(TutorError):
    """The inbound request body is malformed or missing required fields."""


class EmbeddingError(TutorError):
    """The embedding backend failed or returned no vector."""


class RetrievalError(TutorError):
    """The vector store search failed."""


class CompletionError(TutorError):
    """The completion API call failed or its response could not be read."""


class LoggingError(TutorError):
    """Writing to the chat log failed."""
