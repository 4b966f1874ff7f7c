"""
FastAPI Application - Civic RAG Assistant

Main entry point for the REST API.

Run locally with:
    python -m civicrag.api.main            # PORT env var, default 8000
    python -m civicrag.api.main --reload
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .dependencies import build_services
from .schemas import ErrorResponse, HealthResponse
from ..db.session import Database
from .. import __version__

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = __version__


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan events.

    Opens the database handle and wires services on startup; disposes the
    handle on shutdown.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"Civic RAG Assistant API v{VERSION}")
    logger.info("=" * 60)

    database = Database().open()
    app.state.database = database

    if database.ping():
        logger.info("Database connection successful")
    else:
        logger.error("Database connection failed; requests will fail until it is reachable")

    app.state.services = build_services(database)
    logger.info(f"API started on port {os.getenv('PORT', '8000')}")

    yield

    # Shutdown
    logger.info("Shutting down API...")
    database.close()


# Create FastAPI app
app = FastAPI(
    title="Civic RAG Assistant API",
    description="""
    Grounded answers about National Assembly representatives, the Constitution,
    election law, bills and parliamentary proceedings.

    ## Features
    - Streaming chat answers grounded in retrieved records
    - Document upload and ingestion (PDF, HTML, text)

    ## Example Questions
    - "Who is the MNA for NA-1?"
    - "What does Article 25 say?"
    - "Did any MNA from Punjab present a bill on education?"
    """,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests"""
    start_time = time.time()

    logger.info(f"→ {request.method} {request.url.path}")

    response = await call_next(request)

    duration = (time.time() - start_time) * 1000
    logger.info(f"← {response.status_code} ({duration:.0f}ms)")

    return response


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    errors = exc.errors()
    logger.warning(f"Validation error: {errors}")

    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            detail=f"Validation error: {errors[0]['msg']}",
            error_code="VALIDATION_ERROR"
        ).model_dump(mode='json')
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            detail="Internal server error. Please try again later.",
            error_code="INTERNAL_ERROR"
        ).model_dump(mode='json')
    )


@app.get("/", tags=["Root"])
async def root():
    """API info"""
    return {
        "name": "Civic RAG Assistant API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "chat": "/api/chat",
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """
    Health check endpoint.

    Always reports the app as healthy while it is running; database
    reachability is reported separately.
    """
    database = getattr(request.app.state, "database", None)

    database_status = "disconnected"
    if database is not None and database.is_open and database.ping():
        database_status = "connected"

    return HealthResponse(
        status="healthy",
        database=database_status,
        version=VERSION
    )


# Import routers
from .routers import chat, documents

app.include_router(chat.router, prefix="/api", tags=["Chat"])
app.include_router(documents.router, prefix="/api", tags=["Documents"])


if __name__ == "__main__":
    import sys

    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()
    uvicorn.run(
        "civicrag.api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload="--reload" in sys.argv,
        log_level="info"
    )
