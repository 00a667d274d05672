"""
app/main.py

Picture Compare FastAPI Application
Perceptual image hashing + hash comparison for near-duplicate detection.

Endpoints:
  POST /api/hash           → pHash of an uploaded image
  POST /api/hash-batch     → pHash of several uploaded images
  POST /api/compare        → Compare two hashes
  POST /api/compare-batch  → Compare one hash with many candidates
  GET  /health             → Liveness + uptime
  GET  /                   → API info

Run with:
  uvicorn app.main:app --port 3000
"""

import os
import time
import logging
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.auth import require_api_key
from app.config import Settings
from app.hash_service import HashService
from app.image_routes import router as image_router
from app.schemas import HealthResponse

logger = logging.getLogger("picture_compare.api")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Picture Compare API",
        description=(
            "Perceptual image hashing (pHash) and hash comparison. "
            "Upload images to get 256-bit fingerprints; compare fingerprints "
            "to detect near-duplicates."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.hash_service = HashService(settings)
    app.state.start_time = time.time()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Request logging ───────────────────────────────────────────────────────

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        t_start = time.time()
        response = await call_next(request)
        elapsed_ms = (time.time() - t_start) * 1000
        logger.info(f"{request.method} {request.url.path} → {response.status_code} ({elapsed_ms:.1f}ms)")
        return response

    # ── Error envelope: {"success": false, "error": "..."} ────────────────────

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return _error(exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error(500, "Internal error")

    # ── Routes ────────────────────────────────────────────────────────────────

    app.include_router(
        image_router,
        prefix="/api",
        tags=["Images"],
        dependencies=[Depends(require_api_key)],
    )

    @app.get("/", tags=["Info"])
    async def root():
        return {
            "message": "Picture Compare API",
            "version": settings.app_version,
            "endpoints": {
                "POST /api/hash":          "Computes pHash for an image",
                "POST /api/hash-batch":    "Computes pHash for multiple images",
                "POST /api/compare":       "Compares two image hashes",
                "POST /api/compare-batch": "Compares one hash with multiple candidate hashes",
            },
        }

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health():
        return HealthResponse(
            status="healthy",
            version=settings.app_version,
            timestamp=datetime.now(timezone.utc).isoformat(),
            uptime=round(time.time() - app.state.start_time, 2),
        )

    logger.info(f"API key {'is set' if settings.api_key else 'is not set'}")
    logger.info(f"File size limit: {settings.file_size_limit_mb}MB")
    return app


app = create_app()


def main():
    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )


if __name__ == "__main__":
    main()
