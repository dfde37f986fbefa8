"""
CareerNest Payments — FastAPI Application Entry Point

Aggregates all routers, configures logging and middleware,
and initializes the database on startup.
"""
import logging
import os
import time
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from careernest.config import get_settings
from careernest.database import SessionLocal, init_db
from careernest.routes import mentor_router, catalog_router, webhook_router, admin_router
from careernest.schemas.schemas import HealthResponse
from careernest.services.catalog_service import ensure_default_catalog

settings = get_settings()

logger = logging.getLogger("careernest")

# ─── Application Instance ───────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Mentor payment collection and AI service checkout over MTN MoMo. "
        "Covers session and request listings, earnings statistics, collection "
        "requests, status polling and gateway callbacks."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

BOOT_TIME = time.time()


def configure_logging() -> None:
    """Console + LOG_DIR/server.log handlers on the package logger."""
    if logger.handlers:
        return
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    file_handler = logging.FileHandler(os.path.join(settings.LOG_DIR, "server.log"))
    file_handler.setFormatter(formatter)

    logger.addHandler(console)
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)


# ─── Startup ─────────────────────────────────────────────────────────
@app.on_event("startup")
def on_startup():
    """Initialize logging and database tables, seed the catalog, log boot info."""
    configure_logging()
    init_db()

    if settings.SEED_AI_SERVICES:
        db = SessionLocal()
        try:
            added = ensure_default_catalog(db)
        finally:
            db.close()
        if added:
            logger.info("Seeded %d AI services", added)

    logger.info(
        "\n%s\n  %s v%s\n  TIME: %s\n  MOMO MODE: %s (%s)\n  DATABASE: %s\n  DEBUG: %s\n%s",
        "=" * 60,
        settings.APP_NAME,
        settings.APP_VERSION,
        datetime.now().isoformat(),
        settings.MOMO_MODE,
        "[OK] credentials loaded" if settings.MOMO_COLLECTIONS_API_KEY else "[!] no credentials",
        settings.DATABASE_URL,
        settings.DEBUG,
        "=" * 60,
    )


# ─── Middleware ──────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with timing."""
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 1)

    if request.url.path.startswith("/api"):
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration)

    return response


# ─── API Routers ─────────────────────────────────────────────────────
app.include_router(mentor_router)
app.include_router(catalog_router)
app.include_router(webhook_router)
app.include_router(admin_router)


@app.get("/health", tags=["Health"], response_model=HealthResponse)
def deep_health():
    """Health check including database connectivity."""
    db_ok = False
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception:
        logger.exception("Health check: database unreachable")
    finally:
        db.close()

    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        database="connected" if db_ok else "disconnected",
        gateway_mode=settings.MOMO_MODE,
        version=settings.APP_VERSION,
        uptime_seconds=round(time.time() - BOOT_TIME, 1),
    )
