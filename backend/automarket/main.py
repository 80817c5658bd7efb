# backend/automarket/main.py

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from sqlalchemy import text

from .config import Settings, get_settings
from .database import build_engine, build_session_factory
from .errors import register_exception_handlers
from .middleware.audit import audit_middleware
from .models import Base
from .redis_client import build_redis
from .routers import auto_parts, bookings, broadcasts, services, users, vehicles, workshops
from .services.broadcast_expiry import broadcast_expiry_loop
from .services.events import EventEmitter
from .utils.maps import build_http_client

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = build_engine(settings.resolved_database_url)
        if settings.auto_create_schema:
            Base.metadata.create_all(bind=engine)

        app.state.settings = settings
        app.state.engine = engine
        app.state.session_factory = build_session_factory(engine)
        app.state.redis = build_redis(settings.redis_url)
        app.state.events = EventEmitter(app.state.redis)
        app.state.http = build_http_client(settings.maps_expand_timeout)

        expiry_task = None
        if settings.broadcast_expiry_interval_seconds > 0:
            expiry_task = asyncio.create_task(
                broadcast_expiry_loop(
                    app.state.session_factory,
                    app.state.events,
                    settings.broadcast_expiry_interval_seconds,
                )
            )

        logger.info("AutoMarket API started")
        try:
            yield
        finally:
            if expiry_task is not None:
                expiry_task.cancel()
                try:
                    await expiry_task
                except asyncio.CancelledError:
                    pass
            app.state.http.close()
            app.state.redis.close()
            engine.dispose()
            logger.info("AutoMarket API stopped")

    app = FastAPI(title="AutoMarket API", lifespan=lifespan)

    app.middleware("http")(audit_middleware)
    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(services.router)
    app.include_router(bookings.router)
    app.include_router(vehicles.router)
    app.include_router(auto_parts.router)
    app.include_router(workshops.router)
    app.include_router(broadcasts.router)

    @app.get("/health")
    def health(request: Request):
        state = request.app.state

        try:
            with state.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            db_status = "ok"
        except Exception as e:
            logger.error(f"Health check: database unavailable: {e}")
            db_status = "unavailable"

        try:
            redis_status = "ok" if state.redis.ping() else "unavailable"
        except Exception as e:
            logger.error(f"Health check: redis unavailable: {e}")
            redis_status = "unavailable"

        return {"database": db_status, "redis": redis_status}

    return app


configure_logging(get_settings().log_level)
app = create_app()
