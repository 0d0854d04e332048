import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scan2eat.core.config import ACCESS_TOKEN_HEADER, CORS_ORIGINS, DATABASE_URL, ENV
from scan2eat.core.database import Base, engine
from scan2eat.core.errors import register_exception_handlers
from scan2eat.core.logging_setup import configure_logging
from scan2eat.core.startup_checks import (
    ensure_migrations_applied,
    validate_database_environment,
    verify_database_connection,
)
from scan2eat.middleware.observability import ObservabilityMiddleware
from scan2eat.middleware.rate_limit import ApiRateLimitMiddleware
import scan2eat.models  # registers the models on Base.metadata

from scan2eat.routers.analytics import router as analytics_router
from scan2eat.routers.live import router as live_router
from scan2eat.routers.menu import router as menu_router
from scan2eat.routers.orders import router as orders_router

configure_logging()

logger = logging.getLogger(__name__)
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="scan2eat API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", ACCESS_TOKEN_HEADER, "X-Request-ID"],
)
app.add_middleware(ApiRateLimitMiddleware)
app.add_middleware(ObservabilityMiddleware)

register_exception_handlers(app)


def _startup_tasks() -> None:
    try:
        logger.info("[STARTUP] env=%s", ENV)
        validate_database_environment()
        verify_database_connection(engine=engine)
        if DATABASE_URL.startswith("sqlite"):
            Base.metadata.create_all(bind=engine)
        else:
            ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("[STARTUP] ERROR startup failed")
        raise


# Routers
app.include_router(orders_router)
app.include_router(menu_router)
app.include_router(analytics_router)
app.include_router(live_router)


@app.get("/health")
def health():
    return {"status": "ok"}
