"""
Panel Daemon Key Service
FastAPI Application Entry Point
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from panel.db.session import close_db, init_db
from panel.routes.remote_routes import router as remote_router
from panel.utils.exceptions import DataValidationError, RecordNotFoundError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup"""
    logger.info("Starting up panel daemon key service...")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}", exc_info=True)
        raise

    yield

    logger.info("Shutting down panel daemon key service...")
    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {str(e)}", exc_info=True)


app = FastAPI(
    title="Panel Daemon Key Service",
    description="Daemon key lifecycle for the game server panel",
    version="1.0.0",
    lifespan=lifespan,
)


def error_response(status_code: int, message: str, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "status_code": status_code},
    )


@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request: Request, exc: RecordNotFoundError):
    logger.info(f"Not found: {str(exc)} - Path: {request.url.path}")
    return error_response(status.HTTP_404_NOT_FOUND, "Resource not found", "NOT_FOUND")


@app.exception_handler(DataValidationError)
async def validation_handler(request: Request, exc: DataValidationError):
    logger.warning(f"Validation failed: {str(exc)} - Path: {request.url.path}")
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc), "VALIDATION_ERROR")


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to catch unhandled exceptions
    Logs error and returns generic error message to client
    """
    logger.error(
        f"Unhandled exception: {str(exc)} - Path: {request.url.path}", exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An internal error occurred. Please try again later.",
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


# Include routers
app.include_router(remote_router, prefix="/api/remote", tags=["Remote"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}
