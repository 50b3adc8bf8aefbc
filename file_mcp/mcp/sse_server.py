"""SSE (Server-Sent Events) transport for the file MCP server.

This module exposes the same tools over HTTP using SSE, which is useful
for web-based MCP clients, testing, and scenarios where stdio transport
is not available.

Run with:
    python -m file_mcp.mcp.sse_server

or, under uvicorn directly:
    uvicorn --factory file_mcp.mcp.sse_server:create_sse_app

The server starts on http://0.0.0.0:8000 by default.
SSE endpoint: GET  /sse
Message post: POST /messages
Health check: GET  /health
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from file_mcp.config import Settings, settings
from file_mcp.mcp.registry import ToolRegistry, ToolValidationError, UnknownToolError
from file_mcp.mcp.server import build_registry
from file_mcp.services.tracing import Tracer

logger = logging.getLogger("mcp.sse")

PROTOCOL_VERSION = "2024-11-05"

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


def _rpc_result(rpc_id: Any, result: dict) -> dict:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def _rpc_error(rpc_id: Any, code: int, message: str) -> dict:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


async def handle_rpc(
    registry: ToolRegistry, body: Any, config: Settings = settings
) -> dict:
    """Route one JSON-RPC request and build its response."""
    if not isinstance(body, dict):
        return _rpc_error(None, INVALID_REQUEST, "Request must be a single JSON-RPC object")

    method = body.get("method", "")
    params = body.get("params") or {}
    rpc_id = body.get("id")

    if not isinstance(params, dict):
        return _rpc_error(rpc_id, INVALID_PARAMS, "params must be an object")

    if method == "initialize":
        return _rpc_result(
            rpc_id,
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {"listChanged": False}},
                "serverInfo": {
                    "name": config.mcp_server_name,
                    "version": config.mcp_server_version,
                },
            },
        )

    if method == "tools/list":
        tools = registry.list_tools()
        return _rpc_result(
            rpc_id, {"tools": [t.model_dump(by_alias=True, exclude_none=True) for t in tools]}
        )

    if method == "tools/call":
        try:
            envelope = await registry.dispatch(
                params.get("name", ""), params.get("arguments") or {}
            )
        except (UnknownToolError, ToolValidationError) as exc:
            return _rpc_error(rpc_id, INVALID_PARAMS, str(exc))
        return _rpc_result(rpc_id, envelope.model_dump())

    return _rpc_error(rpc_id, METHOD_NOT_FOUND, f"Method '{method}' not found")


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_sse_app(
    registry: ToolRegistry | None = None,
    tracer: Tracer | None = None,
    config: Settings = settings,
) -> FastAPI:
    """Build the FastAPI application serving *registry* over SSE."""
    if registry is None:
        tracer = tracer or Tracer.from_settings(config)
        registry = build_registry(tracer, config)

    # In-memory message queues keyed by session_id
    sessions: dict[str, asyncio.Queue] = {}
    counter = itertools.count(1)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup / shutdown for the SSE application."""
        logger.info(
            "MCP SSE transport starting on %s:%s", config.fastapi_host, config.fastapi_port
        )
        yield
        logger.info("MCP SSE transport shutting down")
        sessions.clear()
        if tracer is not None:
            tracer.close()

    app = FastAPI(
        title=f"{config.mcp_server_name} – SSE Transport",
        version=config.mcp_server_version,
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.sessions = sessions

    # ── Health ────────────────────────────────────────────────────────────

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "transport": "sse",
            "version": config.mcp_server_version,
            "tools": registry.names,
        }

    # ── SSE endpoint ──────────────────────────────────────────────────────

    @app.get("/sse")
    async def sse_endpoint(request: Request):
        """Server-Sent Events stream for MCP protocol messages.

        The client opens this endpoint to receive messages from the MCP
        server.  The client posts requests to ``/messages?session_id=<id>``
        and reads the server responses from this stream.
        """
        session_id = f"session-{next(counter)}"
        queue: asyncio.Queue = asyncio.Queue()
        sessions[session_id] = queue

        async def event_generator():
            # First event: tell the client where to POST requests
            yield {"event": "endpoint", "data": f"/messages?session_id={session_id}"}

            try:
                while True:
                    if await request.is_disconnected():
                        break
                    try:
                        message = await asyncio.wait_for(queue.get(), timeout=30.0)
                        yield {"event": "message", "data": json.dumps(message, default=str)}
                    except asyncio.TimeoutError:
                        yield {"comment": "keepalive"}
            finally:
                sessions.pop(session_id, None)

        return EventSourceResponse(event_generator())

    # ── Message endpoint (client → server) ────────────────────────────────

    @app.post("/messages")
    async def messages_endpoint(request: Request, session_id: str):
        """Receive a JSON-RPC request from the client, process it, and
        push the response onto the SSE stream for the matching session.
        """
        queue = sessions.get(session_id)
        if queue is None:
            return JSONResponse(
                status_code=404,
                content={"error": f"Session '{session_id}' not found. Connect to /sse first."},
            )

        try:
            body = await request.json()
        except ValueError:
            await queue.put(_rpc_error(None, PARSE_ERROR, "Request body is not valid JSON"))
            return Response(status_code=202, content="Accepted")
        logger.debug("SSE recv session=%s body=%s", session_id, body)

        await queue.put(await handle_rpc(registry, body, config))
        return Response(status_code=202, content="Accepted")

    return app


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "file_mcp.mcp.sse_server:create_sse_app",
        factory=True,
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
