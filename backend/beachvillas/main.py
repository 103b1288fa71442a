"""BeachVillas: FastAPI application entry point."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from beachvillas.api.errors import register_exception_handlers
from beachvillas.api.routes.admin import router as admin_router
from beachvillas.api.routes.auth import router as auth_router
from beachvillas.api.routes.bookings import router as bookings_router
from beachvillas.api.routes.host import router as host_router
from beachvillas.api.routes.messages import router as messages_router
from beachvillas.api.routes.notifications import router as notifications_router
from beachvillas.api.routes.profile import router as profile_router
from beachvillas.api.routes.reviews import router as reviews_router
from beachvillas.api.routes.search import router as search_router
from beachvillas.api.routes.villas import router as villas_router
from beachvillas.config import settings

# Configure root logger so all beachvillas.* loggers output to stderr (captured by Docker).
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("beachvillas.access")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    yield
    # Shutdown: dispose engine connections
    from beachvillas.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Vacation villa marketplace: listings, search, bookings, messaging, reviews and admin.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Access log line per request: method, path, status and duration."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %s %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


register_exception_handlers(app)

# Routers
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(villas_router)
app.include_router(search_router)
app.include_router(bookings_router)
app.include_router(host_router)
app.include_router(messages_router)
app.include_router(reviews_router)
app.include_router(notifications_router)
app.include_router(admin_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


def mount_spa(app: FastAPI, static_dir: str | Path) -> bool:
    """Serve a built single-page app with an ``index.html`` fallback.

    Registered last so API routes always win. Returns ``False`` when there
    is no bundle to serve.
    """
    root = Path(static_dir).resolve()
    index = root / "index.html"
    if not index.is_file():
        return False

    @app.get("/{full_path:path}", include_in_schema=False)
    async def spa(full_path: str) -> FileResponse:
        candidate = (root / full_path).resolve()
        if candidate.is_relative_to(root) and candidate.is_file():
            return FileResponse(candidate)
        if Path(full_path).suffix:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
        return FileResponse(index)

    logger.info("Serving SPA bundle from %s", root)
    return True


mount_spa(app, settings.static_dir)
