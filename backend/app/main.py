"""Punto de entrada de la API usando FastAPI.

Este módulo crea la aplicación, configura CORS, registra los routers y
arranca (y detiene) la limpieza periódica de jobs caducados dentro del
`lifespan`, de modo que el primer barrido termina antes de aceptar tráfico.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.jobs import cleanup_router
from app.api.jobs import router as jobs_router
from app.core.config import get_settings
from app.core.logging import configure_logging
from app.services.job_store import cleanup_scheduler, job_service

settings = get_settings()
logger = logging.getLogger(__name__)

ENDPOINTS = (
    ("GET", "/api/jobs", "Get all jobs"),
    ("GET", "/api/jobs/:id", "Get specific job"),
    ("POST", "/api/jobs", "Create new job"),
    ("PUT", "/api/jobs/:id", "Update job"),
    ("DELETE", "/api/jobs/:id", "Delete job"),
    ("POST", "/api/cleanup", "Manual cleanup"),
)


def log_banner() -> None:
    """Resumen de arranque: dirección, entorno, rutas y política de limpieza."""
    logger.info("Server running on http://localhost:%s", settings.port)
    logger.info("Environment: %s", settings.environment)
    logger.info("API Endpoints:")
    for method, path, description in ENDPOINTS:
        logger.info("  %-6s %-15s - %s", method, path, description)
    logger.info("Auto-cleanup runs every %s", settings.cleanup_interval)
    logger.info(
        "Jobs are deleted %s after estimated end time", settings.retention_window
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    # Barrido inicial antes de aceptar peticiones; luego, tarea periódica
    await cleanup_scheduler.start()
    log_banner()
    try:
        yield
    finally:
        await cleanup_scheduler.stop()


# Instancia principal de FastAPI; aquí es donde se montan rutas y middleware.
app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configurable via `settings.allowed_origins` (definido en .env)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(o) for o in settings.allowed_origins],
    allow_credentials=settings.allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Todas las respuestas de error usan la forma `{"error": ...}`."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Cuerpo ilegible o sin los campos mínimos: error del cliente (400)."""
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        message = "Invalid JSON"
    else:
        message = "Invalid job payload"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message, "detail": jsonable_encoder(errors)},
    )


@app.get("/health")
def health():
    return {"status": "ok", "jobs": job_service.count()}


app.include_router(jobs_router, prefix="/api")
app.include_router(cleanup_router, prefix="/api")
