"""
Academic Ranking Service - FastAPI Application Entry Point.

This module:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Converts service errors into the {"success": false, ...} envelope
5. Registers all API route handlers
6. Creates tables and seeds default data on startup (SQLite)

Layout:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: accounts, scoring, ranking, reference data, dashboards
- logging_config.py: Structured logging configuration
- database.py: Database connection management
"""

import os
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gradebook.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from gradebook.errors import ServiceError
from gradebook.routes import auth, users, scores, ranking, students, reference, dashboard
from gradebook.database import DATABASE_URL, create_tables, session_scope
from gradebook.services.seed import seed_defaults

# Register all models with Base.metadata
import gradebook.models  # noqa: F401

SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "1") == "1"

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if DATABASE_URL.startswith("sqlite"):
        log_with_context(logger, "INFO", "Using SQLite: creating tables directly")
        create_tables()
    if SEED_ON_STARTUP:
        with session_scope() as db:
            seed_defaults(db)
    yield


app = FastAPI(
    title="Academic Ranking Service",
    description=(
        "Records student scores, computes weighted subject averages and GPAs, "
        "and produces class and school rank listings."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# Every request gets a UUID that is attached to all log entries
# and returned in the X-Request-ID header.
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


# ──────────────────────────────────────────────────────────────
# Error envelopes
# ──────────────────────────────────────────────────────────────
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    log_with_context(logger, "WARNING",
        f"{request.method} {request.url.path} refused: {exc.message}",
        extra_data={"code": exc.code, "status_code": exc.status_code})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    log_with_context(logger, "INFO",
        f"{request.method} {request.url.path} rejected: invalid input",
        extra_data={"errors": len(exc.errors())})
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": "Invalid request data",
            "code": "INVALID_VALUE",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


# ──────────────────────────────────────────────────────────────
# Register API routes
# ──────────────────────────────────────────────────────────────
app.include_router(auth.router, tags=["Auth"])
app.include_router(users.router, tags=["Users"])
app.include_router(scores.router, tags=["Scores"])
app.include_router(ranking.router, tags=["Ranking"])
app.include_router(students.router, tags=["Students"])
app.include_router(reference.router, tags=["Reference data"])
app.include_router(dashboard.router, tags=["Dashboard"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "academic-ranking", "version": "1.0.0"}
