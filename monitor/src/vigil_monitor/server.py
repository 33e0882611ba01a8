"""Entrypoint for running the monitor API and check worker under uvicorn."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from vigil_commons.observability.logging import shutdown_logging
from vigil_monitor.infrastructure.http.middleware import request_logging_middleware
from vigil_monitor.infrastructure.http.routes import add_status_routes
from vigil_monitor.infrastructure.observability.logging import configure_logging
from vigil_monitor.runtime.bootstrap import RuntimeContext, build_runtime, close_runtime_resources
from vigil_monitor.runtime.check_worker import create_check_worker
from vigil_monitor.runtime.settings import Settings

WORKER_STOP_TIMEOUT_SECONDS = 30.0


def create_app(runtime: RuntimeContext, *, start_worker: bool = True) -> FastAPI:
    worker = create_check_worker(
        service=runtime.service,
        poll_interval_seconds=runtime.settings.poll_interval_seconds,
        cycle_timeout_seconds=runtime.settings.cycle_timeout_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if start_worker:
            worker.start()
        yield
        worker.stop(timeout=WORKER_STOP_TIMEOUT_SECONDS)
        close_runtime_resources(runtime)
        shutdown_logging()

    app = FastAPI(title="Vigil Monitor API", version="0.1.0", lifespan=lifespan)
    app.middleware("http")(request_logging_middleware)
    add_status_routes(app, runtime.route_deps)
    return app


def configure_from_settings(settings: Settings) -> None:
    configure_logging(settings.observability)


def main() -> None:
    import uvicorn

    settings = Settings.load()
    configure_from_settings(settings)
    runtime = build_runtime(settings)
    app = create_app(runtime)
    config = uvicorn.Config(
        app,
        host=settings.http_host,
        port=settings.http_port,
        # logging already setup
        log_config=None,
    )
    uvicorn.Server(config).run()


__all__ = ["configure_from_settings", "create_app", "main"]
