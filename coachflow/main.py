"""Application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from coachflow import __version__
from coachflow.api.container import get_container
from coachflow.api.dependencies import limiter
from coachflow.api.routes.workflow import router as workflow_router
from coachflow.shared.logging import setup_logging

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: configure logging. Shutdown: close the cache store connection."""
    container = get_container()
    c = container.config
    setup_logging(
        level=c.log_level,
        file_path=c.log_file or "",
        rotation_max_mb=c.log_rotation_max_mb,
        rotation_backups=c.log_rotation_backups,
    )
    log.info("startup_complete", cache_backend=c.cache.backend)
    yield
    log.info("shutdown_begin")
    store = container.cache_store
    if hasattr(store, "close"):
        try:
            await store.close()
        except Exception:  # noqa: BLE001
            log.debug("cache_store_close_error", exc_info=True)
    log.info("shutdown_complete")


app = FastAPI(
    title="Coachflow",
    version=__version__,
    description="Workflow orchestration for resume and interview coaching agents",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_container().config.security.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(workflow_router)


@app.get("/health")
@limiter.limit("100/minute")
async def health(request: Request) -> dict:
    """Health check with model backend availability."""
    container = get_container()
    return {
        "status": "ok",
        "service": "coachflow",
        "cache_backend": container.config.cache.backend,
        "llm_available": await container.model.is_available(),
    }
