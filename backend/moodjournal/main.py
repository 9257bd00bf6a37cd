"""
Mood Journal API
================
FastAPI application entry point. Mount routers and error handlers here.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from moodjournal.config import get_settings
from moodjournal.db.store import StorageError
from moodjournal.routers import analytics, insights, mood_entries, quotes

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Mood Journal API",
    description="Mood logging with AI-assisted reflection analysis",
    version="0.1.0",
    docs_url="/api/docs" if settings.environment != "production" else None,
    redoc_url="/api/redoc" if settings.environment != "production" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(mood_entries.router)
app.include_router(analytics.router)
app.include_router(insights.router)
app.include_router(quotes.router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Clients treat any rejected payload as a plain 400
    errors = [
        {key: err[key] for key in ("loc", "msg", "type") if key in err}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "message": "Invalid request data",
                "code": "invalid_payload",
                "errors": jsonable_encoder(errors),
            }
        },
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": {"message": "Storage backend failed", "code": "storage_error"}},
    )


@app.get("/api/v1/health")
async def health_check() -> dict:
    return {"status": "ok", "service": "moodjournal-api"}
