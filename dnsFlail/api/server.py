"""Read-only HTTP view of the generator's counters."""
from __future__ import annotations

import time

import uvicorn
from fastapi import FastAPI

from dnsFlail.generator.stats import StatsCounter
from dnsFlail.logging_config import get_logger

logger = get_logger("api")


def ok(data: object) -> dict:
    return {"status": "ok", "data": data}


def create_app(stats: StatsCounter) -> FastAPI:
    """Build the stats app around one shared counter."""
    app = FastAPI(title="dnsflail-stats", version="0.1.0")
    started_at = time.time()

    @app.get("/")
    async def root():
        return {"status": "ok", "service": "dnsflail"}

    @app.get("/health")
    async def health():
        return ok({"uptime_seconds": round(time.time() - started_at, 3)})

    @app.get("/stats")
    async def read_stats():
        return ok(stats.snapshot().model_dump())

    return app


def build_stats_server(app: FastAPI, port: int, host: str = "127.0.0.1") -> uvicorn.Server:
    """Create a uvicorn server for the stats app.

    The caller awaits ``server.serve()`` in its own event loop and sets
    ``server.should_exit`` to shut it down.
    """
    config = uvicorn.Config(app, host=host, port=port, log_level="warning", access_log=False)
    logger.info(
        f"Statistics endpoint at http://{host}:{port}/stats",
        extra={"port": port, "state": "serving"},
    )
    return uvicorn.Server(config)
