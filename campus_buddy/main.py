# campus_buddy/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import time
import uuid

from campus_buddy.api.routes import router, llm_client, document_ai
from campus_buddy.observability.logger import setup_logging
from campus_buddy.observability.metrics import metrics_tracker
from campus_buddy.observability.posthog_client import posthog_client

VERSION = "1.0.0"

# Logging must be configured before the first module logger fires
setup_logging(log_level="INFO")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):

    providers = llm_client.get_usage_stats()

    logger.info(
        "campus_buddy_started",
        extra={
            "version": VERSION,
            "document_ai_available": document_ai.available,
            **providers,
        },
    )

    if not any(providers.values()):
        logger.warning(
            "no_chat_provider",
            extra={"hint": "Set MISTRAL_API_KEY or GEMINI_API_KEY; /ai-chat will return 500"},
        )

    yield

    logger.info("campus_buddy_stopped")


app = FastAPI(
    title="Campus Buddy API",
    description="College helpdesk: AI chat with SyncSpot community fallback",
    version=VERSION,
    lifespan=lifespan,
)

# The browser front-end calls these endpoints cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _record_outcome(status_code: int, latency: float):

    # 4xx responses are caller mistakes, not service failures
    if status_code >= 500:
        metrics_tracker.record_failure()
    else:
        metrics_tracker.record_success(latency)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """
    Tag each request with an id, then log and meter it.
    """

    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    user_id = request.headers.get("x-user-id")

    posthog_client.identify_user(
        distinct_id=user_id or request_id,
        properties={"path": request.url.path, "signed_in": bool(user_id)},
    )

    base_fields = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "user_id": user_id,
    }

    logger.info("request_received", extra=base_fields)

    started = time.time()

    try:
        response = await call_next(request)

    except Exception as e:
        metrics_tracker.record_failure()
        logger.error(
            "request_crashed",
            extra={**base_fields, "error": str(e), "error_type": type(e).__name__},
            exc_info=True,
        )
        raise

    latency = time.time() - started

    _record_outcome(response.status_code, latency)

    logger.info(
        "request_finished",
        extra={
            **base_fields,
            "status_code": response.status_code,
            "latency_seconds": round(latency, 3),
        },
    )

    response.headers["X-Request-ID"] = request_id

    return response


app.include_router(router)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):

    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        "unhandled_error",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "error": str(exc),
        },
        exc_info=True,
    )

    posthog_client.track_error(
        distinct_id=request_id,
        error_type=type(exc).__name__,
        error_message=str(exc),
        endpoint=request.url.path,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Campus Buddy hit an unexpected error. Please try again.",
            "request_id": request_id,
        },
    )


@app.get("/")
async def index():

    return {
        "message": "Campus Buddy API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics",
        "chat": "/ai-chat",
        "syncspot": "/syncspot/questions",
    }
