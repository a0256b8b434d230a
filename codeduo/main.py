"""Application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from codeduo import __version__
from codeduo.api.container import get_container
from codeduo.api.dependencies import limiter
from codeduo.api.routes.collaboration import router as collaboration_router
from codeduo.api.routes.models import router as models_router
from codeduo.shared.logging import setup_logging

log = structlog.get_logger()


def _apply_logging_config(container):
    """Apply logging from container config (stdout + optional file)."""
    c = container.config
    setup_logging(
        level=c.log_level,
        file_path=c.log_file or "",
        rotation_max_mb=c.log_rotation_max_mb,
        rotation_backups=c.log_rotation_backups,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: setup logging. Shutdown: close HTTP clients."""
    container = get_container()
    _apply_logging_config(container)
    log.info(
        "startup_complete",
        ollama_host=container.config.ollama.host,
        openai_base_url=container.config.openai.base_url,
        openai_key_configured=bool(container.config.openai.api_key),
    )
    yield
    log.info("shutdown_begin")
    await container.aclose()
    log.info("shutdown_complete")


app = FastAPI(
    title="codeduo",
    version=__version__,
    description="Coder/reviewer agent collaboration streamed over SSE",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS
container = get_container()
app.add_middleware(
    CORSMiddleware,
    allow_origins=container.config.security.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(collaboration_router)
app.include_router(models_router)


@app.get("/health")
@limiter.limit("100/minute")
async def health(request: Request) -> dict:
    """Health check with local daemon availability."""
    container = get_container()
    return {
        "status": "ok",
        "service": "codeduo",
        "ollama_available": await container.ollama.is_available(),
    }
