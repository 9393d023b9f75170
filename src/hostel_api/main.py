"""FastAPI application for the hostel inventory ledger.

The DynamoDB handle is created in the application lifespan, shared by every
request, and closed on shutdown. Tests pass their own Settings and
DynamoDBService to create_app().
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from hostel_api.dependencies import build_services
from hostel_api.exceptions import register_exception_handlers
from hostel_api.middleware.correlation import CorrelationIdMiddleware
from hostel_api.routes import (
    availability_router,
    health_router,
    inventory_router,
    reservations_router,
)
from hostel_ledger import __version__
from hostel_ledger.config import Settings
from hostel_ledger.services.dynamodb import DynamoDBService
from hostel_ledger.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, db: DynamoDBService | None = None) -> FastAPI:
    """Build the API application.

    Args:
        settings: Runtime settings. Defaults to Settings.from_env().
        db: Storage handle to use instead of creating one at startup.
            A handle passed in is left open on shutdown.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        storage = db or DynamoDBService(settings)
        app.state.services = build_services(storage, settings)
        logger.info("Ledger API started (tables prefixed %s)", settings.table_prefix)
        try:
            yield
        finally:
            if db is None:
                storage.close()

    app = FastAPI(
        title="Hostel Inventory Ledger API",
        description="REST API for room availability, inventory and reservations",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(app)

    # All routes live under /api to match the API Gateway path pattern
    app.include_router(health_router, prefix="/api")
    app.include_router(availability_router, prefix="/api")
    app.include_router(inventory_router, prefix="/api")
    app.include_router(reservations_router, prefix="/api")

    @app.get("/api/ping")
    async def ping() -> dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(),
            "service": "hostel-ledger-api",
        }

    return app


app = create_app()

# Lambda handler - the lifespan builds the storage handle on cold start
handler = Mangum(app, lifespan="auto")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = False) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: False)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("hostel_api.main:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
