import time
from contextlib import asynccontextmanager
from typing import Optional
from uuid import uuid4

from fastapi import FastAPI, Request

from inventory_api.api.v1.routes_auth import router as auth_router
from inventory_api.api.v1.routes_products import router as products_router
from inventory_api.api.v1.routes_purchases import router as purchases_router
from inventory_api.core.config import Settings, get_settings
from inventory_api.core.errors import register_exception_handlers
from inventory_api.core.logging_config import LogContext, configure_logging, get_logger
from inventory_api.db.base import Database

logger = get_logger("http")


async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    with LogContext.bind(request_id=request_id):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request_completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
    response.headers["X-Request-ID"] = request_id
    return response


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """Build the application around an explicit settings object and database handle.

    Run with ``uvicorn inventory_api.main:create_app --factory``.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.LOG_LEVEL)
    database = database or Database(settings.DB_URL, echo=settings.DB_ECHO)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.ping()
        if settings.CREATE_TABLES:
            await database.create_all()
        logger.info("server_started", extra={"environment": settings.ENVIRONMENT})
        yield
        await database.dispose()
        logger.info("server_stopped")

    app = FastAPI(title="Inventory API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database

    register_exception_handlers(app, production=settings.is_production)
    app.middleware("http")(log_requests)

    app.include_router(auth_router)
    app.include_router(products_router)
    app.include_router(purchases_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api")
    async def api_index():
        return {
            "success": True,
            "message": "Inventory API",
            "version": app.version,
            "endpoints": {
                "auth": "/api/auth",
                "products": "/api/products",
                "purchases": "/api/purchases",
            },
        }

    return app
