"""
Lawrence County GIS Scraper web API
FastAPI
"""
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from lawrence_gis.utils.logging_config import setup_default_logging
from lawrence_gis.web.routers import api


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_default_logging()
    logger.info("Lawrence GIS API starting up...")
    yield
    logger.info("Lawrence GIS API shutting down...")


app = FastAPI(
    title="Lawrence GIS",
    description="Lawrence County, PA GIS property scraper",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(api.router, prefix="/api")


def _generate_error_id() -> str:
    """Generate a short error ID for tracking."""
    return str(uuid.uuid4())[:8].upper()


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    error_id = _generate_error_id()
    logger.opt(exception=exc).error(f"Unhandled error [ID: {error_id}]: {request.method} {request.url}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "error_id": error_id},
    )
