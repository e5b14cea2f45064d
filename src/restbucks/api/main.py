from __future__ import annotations

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from restbucks.api.error_handling import register_exception_handlers
from restbucks.api.middleware.request_id import RequestIDMiddleware
from restbucks.api.routes.drinks import router as drinks_router
from restbucks.api.routes.health import router as health_router
from restbucks.api.routes.metrics import router as metrics_router
from restbucks.api.routes.orders import router as orders_router
from restbucks.api.routes.payment import router as payment_router
from restbucks.api.routes.root import router as root_router
from restbucks.infrastructure.engine.barista import EngineSettings, run_barista
from restbucks.infrastructure.observability.logging_config import configure_logging
from restbucks.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("restbucks.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "route", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "route"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()

    if env in {"dev", "test"}:
        return ["*"]

    default_value = "https://restbucks.example.com"
    raw_value = os.getenv("CORS_ALLOW_ORIGINS", default_value)
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self._observe(request, 500, started, failed=True)
            raise

        self._observe(request, response.status_code, started)
        return response

    @staticmethod
    def _observe(request: Request, status_code: int, started: float, failed: bool = False) -> None:
        elapsed = time.perf_counter() - started
        route = _route_template(request)
        REQUEST_COUNT.labels(method=request.method, route=route, status_code=str(status_code)).inc()
        REQUEST_LATENCY.labels(method=request.method, route=route).observe(elapsed)

        extra = {
            "method": request.method,
            "path": request.url.path,
            "route": route,
            "status_code": status_code,
            "duration_ms": round(elapsed * 1000, 2),
        }
        if failed:
            logger.exception("request_error", extra=extra)
        else:
            logger.info("request_complete", extra=extra)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = EngineSettings.from_env()
    barista_task: asyncio.Task[None] | None = None
    if settings.enabled:
        barista_task = asyncio.create_task(run_barista(settings))
    app.state.barista_task = barista_task
    try:
        yield
    finally:
        if barista_task is not None:
            barista_task.cancel()
            with suppress(asyncio.CancelledError):
                await barista_task


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Restbucks", version="0.1.0", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(drinks_router)
    app.include_router(orders_router)
    app.include_router(payment_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "Location", "X-Request-Id"],
    )

    configure_otel(app)
    return app


app = create_app()
