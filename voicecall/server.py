"""Main FastAPI server for the voice call pipeline."""

from __future__ import annotations

import time
import logging
from typing import Any
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket
from fastapi.responses import ORJSONResponse

from voicecall.config.websocket import WS_ENDPOINT_PATH
from voicecall.runtime.logging import configure_logging
from voicecall.runtime.dependencies import build_runtime_deps
from voicecall.handlers.websocket.manager import handle_websocket_connection

logger = logging.getLogger(__name__)

configure_logging()


@asynccontextmanager
async def _lifespan(app: FastAPI):
    runtime_deps = await build_runtime_deps()
    app.state.runtime_deps = runtime_deps
    logger.info("runtime: ready (max connections %s)", runtime_deps.connections.max_connections)
    try:
        yield
    finally:
        deps = getattr(app.state, "runtime_deps", None)
        if deps is not None:
            await deps.shutdown()


app = FastAPI(default_response_class=ORJSONResponse, lifespan=_lifespan)


@app.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok", "websocket": WS_ENDPOINT_PATH}


@app.get("/health")
async def health() -> dict[str, Any]:
    runtime_deps = getattr(app.state, "runtime_deps", None)
    admission = runtime_deps.connections.snapshot() if runtime_deps is not None else {"connected_clients": 0}
    return {"status": "ok", **admission, "timestamp": time.time()}


@app.websocket(WS_ENDPOINT_PATH)
async def websocket_endpoint(websocket: WebSocket) -> None:
    runtime_deps = getattr(app.state, "runtime_deps", None)
    if runtime_deps is None:
        raise RuntimeError("Runtime dependencies are not initialized")
    await handle_websocket_connection(websocket, runtime_deps)
