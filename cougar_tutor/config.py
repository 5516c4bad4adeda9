"""
Configuration settings for the Calculus Cougar tutor backend.

This file centralizes all configuration so you can easily adjust parameters.
Values that change between deployments (URLs, model names, limits) can be
overridden with environment variables or a local .env file.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    return raw.strip() if raw and raw.strip() else default


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, value)


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return max(minimum, value)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Base directory (where this project lives)
BASE_DIR = Path(__file__).parent.parent

# Data storage directory
DATA_DIR = Path(_env_str("COUGAR_DATA_DIR", str(BASE_DIR / "data")))

# ChromaDB storage location
CHROMA_DB_DIR = DATA_DIR / "chroma_db"

# SQLite file that receives the chat log
CHAT_LOG_DB_PATH = Path(_env_str("CHAT_LOG_DB_PATH", str(DATA_DIR / "chat_log.db")))

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOG_LEVEL = _env_str("LOG_LEVEL", "INFO").upper()

# =============================================================================
# OLLAMA CONFIGURATION
# =============================================================================

# Ollama API base URL (default local installation)
OLLAMA_BASE_URL = _env_str("OLLAMA_BASE_URL", "http://localhost:11434")

# Chat model used for tutoring replies
CHAT_MODEL = _env_str("CHAT_MODEL", "llama3.2")

# Per-request timeout handed to the Ollama HTTP client
REQUEST_TIMEOUT_SECONDS = _env_float("REQUEST_TIMEOUT_SECONDS", 60.0, minimum=1.0)

# Sampling parameters sent with every completion request
TEMPERATURE = 0.6
MAX_OUTPUT_TOKENS = 500

# =============================================================================
# EMBEDDING CONFIGURATION
# =============================================================================

# "ollama" asks the Ollama server for embeddings,
# "local" runs a sentence-transformers model in-process.
EMBEDDING_BACKEND = _env_str("EMBEDDING_BACKEND", "ollama").lower()

# Embedding model served by Ollama
EMBEDDING_MODEL = _env_str("EMBEDDING_MODEL", "nomic-embed-text")

# Local sentence-transformers model (384-dimensional vectors)
LOCAL_EMBEDDING_MODEL = _env_str("LOCAL_EMBEDDING_MODEL", "all-MiniLM-L6-v2")

# IMPORTANT: a collection must be queried with the same model it was built with.
# Switching backends means re-running scripts/ingest_books.py.

# =============================================================================
# CHROMADB / RETRIEVAL CONFIGURATION
# =============================================================================

# One collection holds every book; chunks carry a "book" metadata field
COLLECTION_NAME = _env_str("COLLECTION_NAME", "calculus_books")

# Number of passages retrieved per question
RETRIEVAL_TOP_K = 3

# =============================================================================
# CHUNKING CONFIGURATION (ingestion only)
# =============================================================================

CHUNK_SIZE = 800
CHUNK_OVERLAP = 100

# =============================================================================
# BOOKS
# =============================================================================

BOOKS: dict[str, dict] = {
    "openstax": {
        "label": "OpenStax Calculus Volume 1",
        "description": "Free, peer-reviewed introductory calculus textbook.",
    },
    "unbound": {
        "label": "Calculus Unbound",
        "description": "Supplementary calculus notes and worked examples.",
    },
}

DEFAULT_BOOK = _env_str("DEFAULT_BOOK", "openstax")

# Case-insensitive message prefixes that override the selected book.
# Slash commands need a space (or the end of the message) after them;
# colon forms may run straight into the question.
BOOK_COMMANDS: dict[str, tuple[str, ...]] = {
    "openstax": ("/openstax", "openstax:", "/os"),
    "unbound": ("/unbound", "unbound:", "/ub"),
}

# =============================================================================
# SESSION CONFIGURATION
# =============================================================================

# Sessions live in memory only. 0 disables the corresponding bound.
MAX_SESSIONS = _env_int("MAX_SESSIONS", 1000)
SESSION_TTL_SECONDS = _env_int("SESSION_TTL_SECONDS", 6 * 60 * 60)

# When True the retrieved-reference system turn is stored in the session
# history and resent on every later request. When False it is only sent
# with the request it was retrieved for.
PERSIST_REFERENCE_CONTEXT = _env_bool("PERSIST_REFERENCE_CONTEXT", False)

# =============================================================================
# HTTP CONFIGURATION
# =============================================================================

DEFAULT_CONTEXT_TAG = "free_use"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

GENERIC_ERROR_MESSAGE = "Error communicating with the tutor service"

# =============================================================================
# LLM PROMPT TEMPLATES
# =============================================================================

PERSONA_PROMPT = """You are The Calculus Cougar, a Socratic calculus tutor for college students.

VERY IMPORTANT RULE:
- Always format mathematics using LaTeX with dollar delimiters:
    * Inline math must be written as $ ... $
    * Display math must be written as $$ ... $$
- Never use \\( ... \\) or \\[ ... \\] unless the student specifically types it that way.

Tutoring philosophy:
- Use the OpenStax Calculus Volume 1 textbook as your primary reference.
- Do not just give answers; instead, ask guiding questions and encourage students to explain their reasoning.
- Scaffold solutions step by step, offering hints and suggestions.
- Keep tone patient, encouraging, supportive.
- If a student seems stuck, give them a gentle nudge rather than the full solution immediately.
- Share study strategies when useful."""

CONTEXT_PREAMBLE = """Reference material from {source} that may help with the student's next question.
Use it to ground your explanation and stay consistent with the book's notation.
Mention page numbers when pointing the student to the book. If the material
is not relevant to the question, ignore it and tutor as usual."""

FALLBACK_REPLY = "Sorry, I could not generate a response."
