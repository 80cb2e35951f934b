import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from publish_protect import __version__
from publish_protect.api.deps import get_cma_client, get_rules, get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()

    # Load rules on startup (fail-fast)
    try:
        get_rules()
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    yield

    if get_cma_client.cache_info().currsize:
        await get_cma_client().aclose()
        get_cma_client.cache_clear()


app = FastAPI(
    title="Publish Protect API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from publish_protect.api.routes import schedule, status  # noqa: E402

app.include_router(schedule.router, prefix="/api", tags=["Schedule"])
app.include_router(status.router, prefix="/api", tags=["Status"])


# CORS (the dialog runs inside the editor web app)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "https://app.contentful.com",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
