"""FastAPI application factory."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from p2g.api.routes import health, sync as sync_routes
from p2g.db.engine import get_engine


def create_app() -> FastAPI:
    """Build and return the FastAPI app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Creates the database and tables on first start
        get_engine()
        yield

    app = FastAPI(
        title="P2G API",
        description="Peloton to Garmin Connect workout sync",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(sync_routes.router, prefix="/sync", tags=["sync"])

    return app


# Module-level app instance for uvicorn
app = create_app()
