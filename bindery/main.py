import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bindery.api import (
    binders_router,
    cards_router,
    health_router,
    reorder_router,
)
from bindery.config import settings
from bindery.db.database import init_db
from bindery.models.failure import KnownError, create_unknown_failure

logger = logging.getLogger(__name__)


def _app_version() -> str:
    try:
        return pkg_version("bindery")
    except PackageNotFoundError:
        return "0.0.0"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=_app_version(),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Render every classified failure in the ApiResponse envelope."""
    if exc.status_code >= 500:
        logger.error("%s: %s (%s)", type(exc).__name__, exc.message, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def unknown_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Unclassified failures still leave in the envelope, without internals."""
    logger.error("Unhandled %s", type(exc).__name__, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=create_unknown_failure(exc).model_dump(mode="json"),
    )


app.include_router(binders_router)
app.include_router(cards_router)
app.include_router(health_router)
app.include_router(reorder_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
