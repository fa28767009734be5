import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import get_settings
from core.exceptions import ProviderError, RecordNotFound, StorageError
from db.database import init_db
from services.dispatcher import build_dispatcher
from utils.logging import configure_logging

# Routers
from routers.ai import router as ai_router
from routers.chat_route import router as chat_router
from routers.storage_route import router as storage_router

settings = get_settings()

# Logging Configuration
configure_logging(settings.log_level)
logger = logging.getLogger("writing_assistant")


# Lifespan Events (Startup/Shutdown)
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up Writing Assistant API...")
    init_db()
    app.state.dispatcher = build_dispatcher(settings)
    yield
    logger.info("Shutting down Writing Assistant API...")


# FastAPI App Setup
app = FastAPI(
    title=settings.app_name,
    description="Grammar checking, paraphrasing, humanizing, AI detection and chat over multiple LLM providers.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=settings.docs_url,
    redoc_url=settings.redoc_url,
)

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# Error Handlers
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "header"))
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "; ".join(problems) or "Invalid request body"
    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "message": message},
    )


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    logger.error(f"Provider failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "AI provider request failed", "message": exc.message},
    )


@app.exception_handler(RecordNotFound)
async def not_found_handler(request: Request, exc: RecordNotFound):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "Not found", "message": str(exc)},
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Database error", "message": "An internal server error occurred."},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error", "message": "An internal server error occurred."},
    )


# Routers
app.include_router(ai_router, prefix=settings.api_prefix, tags=["Writing Tools"])

app.include_router(chat_router, prefix=settings.api_prefix, tags=["Chat"])

app.include_router(storage_router, prefix=settings.api_prefix, tags=["Storage"])


# Health & Root Endpoints
@app.get("/health", tags=["System"], summary="Health Check")
async def health_check(request: Request):
    """Check if the API is healthy and which providers are live."""
    logger.info("Health check requested")
    dispatcher = getattr(request.app.state, "dispatcher", None)
    return {
        "status": "ok",
        "providers": dispatcher.available_providers() if dispatcher else {},
    }


@app.get("/", tags=["Root"], summary="API Root")
async def root():
    """Welcome message and basic info."""
    return {"message": "Welcome to the Writing Assistant API"}
