"""
Web interface - HTTP API for the Calculus Cougar tutor.

Endpoints:
    POST    /api/chat   {message, sessionId, context?, defaultBook?} -> {reply}
    OPTIONS /api/chat   CORS preflight
    GET     /health     liveness + basic counts

Every response carries permissive CORS headers so a static front end on
another origin can call the API.

Run with:
    uvicorn cougar_tutor.interfaces.web_app:app --reload
"""

import json
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cougar_tutor.config import CORS_HEADERS, DEFAULT_BOOK, DEFAULT_CONTEXT_TAG, GENERIC_ERROR_MESSAGE
from cougar_tutor.errors import CompletionError, EmbeddingError, InputError
from cougar_tutor.rag.pipeline import ChatPipeline
from cougar_tutor.utils.logger import get_logger

logger = get_logger(__name__)


class ChatRequest(BaseModel):
    """Body of POST /api/chat."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1, alias="sessionId")
    context: str = DEFAULT_CONTEXT_TAG
    default_book: str = Field(DEFAULT_BOOK, alias="defaultBook")

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value


def parse_chat_request(body: bytes) -> ChatRequest:
    """
    Parse and validate a raw request body.

    Raises:
        InputError: If the body is not JSON or misses required fields
    """
    try:
        payload = json.loads(body or b"")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InputError("Request body must be valid JSON") from exc

    if not isinstance(payload, dict):
        raise InputError("Request body must be a JSON object")

    try:
        return ChatRequest.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise InputError(f"Missing or invalid fields: {', '.join(fields)}") from exc


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(pipeline: ChatPipeline | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        pipeline: ChatPipeline to serve (built from config if not provided)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.pipeline.drain()

    app = FastAPI(title="Calculus Cougar Tutor", lifespan=lifespan)
    app.state.pipeline = pipeline or ChatPipeline()

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.options("/api/chat")
    async def chat_preflight() -> Response:
        return Response(status_code=200)

    @app.post("/api/chat")
    async def chat(request: Request) -> JSONResponse:
        try:
            chat_request = parse_chat_request(await request.body())
        except InputError as exc:
            logger.info("Rejected chat request: %s", exc)
            return _error(400, str(exc))

        pipeline: ChatPipeline = request.app.state.pipeline
        try:
            reply = await pipeline.handle(
                chat_request.message,
                session_id=chat_request.session_id,
                context=chat_request.context,
                default_book=chat_request.default_book,
            )
        except (EmbeddingError, CompletionError) as exc:
            logger.error("Chat request for session %s failed: %s", chat_request.session_id, exc)
            return _error(500, GENERIC_ERROR_MESSAGE)
        except Exception:
            logger.exception("Unexpected error handling session %s", chat_request.session_id)
            return _error(500, GENERIC_ERROR_MESSAGE)

        return JSONResponse(status_code=200, content={"reply": reply})

    @app.get("/health")
    async def health(request: Request) -> dict:
        pipeline: ChatPipeline = request.app.state.pipeline
        try:
            chunks = pipeline.retriever.vector_store.count
        except Exception as exc:
            logger.warning("Could not count vector store chunks: %s", exc)
            chunks = None
        return {"status": "ok", "sessions": len(pipeline.sessions), "chunks": chunks}

    return app


_app: FastAPI | None = None


def __getattr__(name: str):
    # Build the module-level app lazily, once, so importing create_app stays cheap
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(name)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
