#!/usr/bin/env python3
"""
Recruitment Document Pipeline - FastAPI Application

Résumé intake, candidate and job records, competence file generation and
search, with automatic API documentation.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from core.exceptions import ServiceException
from .config import get_config
from .exceptions import (
    service_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .models.responses import HealthResponse
from .rate_limit import add_rate_limit_handlers
from .routers import (
    candidates_router,
    jobs_router,
    competence_files_router,
    search_router,
    files_router,
    quotes_router
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"

# Create FastAPI app
app = FastAPI(
    title="Recruitment Document API",
    description="Résumé extraction, competence file generation and candidate search",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure rate limiting
add_rate_limit_handlers(app)

# Register exception handlers
app.add_exception_handler(ServiceException, service_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers
app.include_router(candidates_router)
app.include_router(jobs_router)
app.include_router(competence_files_router)
app.include_router(search_router)
app.include_router(files_router)
app.include_router(quotes_router)


@app.get("/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", service="recruitment-api", version=APP_VERSION)


def main():
    """Run the web server."""
    import uvicorn

    config = get_config()
    logger.info(f"Starting Recruitment API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
