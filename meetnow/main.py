"""
HTTP surface of the order core: orders, chat, meetup confirmation, ratings.
Viewer identity comes from the X-User-Id header.
Run: uvicorn meetnow.main:app
"""
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from meetnow.config import Settings, settings
from meetnow.errors import MeetNowError
from meetnow.metrics import get_metrics_bytes, get_metrics_content_type
from meetnow.redis_client import RedisStatusBridge, create_redis
from meetnow.routes import chat, orders
from meetnow.services import build_services

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def create_app(cfg: Settings | None = None, transport=None) -> FastAPI:
    cfg = cfg or settings
    services = build_services(cfg, transport=transport)
    bridge = None
    if cfg.redis_url:
        bridge = RedisStatusBridge(create_redis(cfg.redis_url), cfg.notification_channel)
        services.relay.subscribe(bridge)
        logger.info("Bridging status changes to Redis channel %s", cfg.notification_channel)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await services.sender.drain()
        services.confirmation.close()
        if bridge is not None:
            await bridge.aclose()

    app = FastAPI(title=cfg.app_name, lifespan=lifespan)
    app.state.services = services
    app.include_router(orders.router)
    app.include_router(chat.router)

    @app.exception_handler(MeetNowError)
    async def meetnow_error_handler(request: Request, exc: MeetNowError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": type(exc).__name__, "detail": exc.detail},
        )

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "orders": len(services.store)}

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus scrape endpoint."""
        return Response(
            content=get_metrics_bytes(),
            media_type=get_metrics_content_type(),
        )

    return app


app = create_app()
