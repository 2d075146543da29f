"""FastAPI application factory and main entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from news_admin.config import get_settings
from news_admin.database import init_db
from news_admin.errors import NewsAdminError
from news_admin.log import setup_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    setup_logging(settings)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    if settings.create_tables:
        await init_db()
        logger.info(f"Tables created: {settings.database_url}")
    logger.info(f"Database ready: {settings.database_url}")

    yield

    # Shutdown
    logger.info("Shutting down application")


async def service_error_handler(request: Request, exc: NewsAdminError) -> JSONResponse:
    """Store failures surface as 502 with a readable message; the client may retry manually."""
    logger.error(f"[API] {request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc)},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NewsAdminError, service_error_handler)

    # Health check endpoint
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    # Import and include routers
    from news_admin.routers import auth, categories, news, sources, stats

    # Public routes (no auth required)
    app.include_router(auth.router, prefix=settings.api_prefix)
    app.include_router(categories.router, prefix=settings.api_prefix)

    # Admin routes (auth required)
    app.include_router(news.router, prefix=settings.api_prefix)
    app.include_router(sources.router, prefix=settings.api_prefix)
    app.include_router(stats.router, prefix=settings.api_prefix)

    return app


# Create app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("news_admin.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
