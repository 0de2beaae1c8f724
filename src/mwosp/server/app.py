"""FastAPI server exposing the MWOSP-v1 protocol.

Clients speak the protocol over a WebSocket; every text frame is one
protocol line. An HTTP polling variant with the same dispatcher and
render engine underneath is available for manual testing:

    GET    /health        -> {"status": "ok", ...}
    WS     /              <-> MWOSP-v1 lines
    GET    /render        -> full render, one command per line
    POST   /click         <- {"x": 10, "y": 40}
    POST   /input         <- {"text": "hello"}
    POST   /command       <- {"line": "SetStorage a 1"}
    DELETE /session       -> drops the polling session

HTTP requests are correlated by the ``X-MWOSP-Session`` header or the
``mwosp_session`` cookie; a new session id is issued when neither is
present and echoed back in both. Idle polling sessions expire after
``server.http_session_ttl`` seconds and at most ``server.http_max_sessions``
are kept.
"""

from __future__ import annotations

import logging
import secrets
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from mwosp.config.settings import Settings
from mwosp.core.dispatcher import Dispatcher
from mwosp.protocol.codec import encode
from mwosp.server.connection import Connection, SessionRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class ClickRequest(BaseModel):
    x: int = Field(description="Tap x-coordinate in client pixels")
    y: int = Field(description="Tap y-coordinate in client pixels")


class TextInputRequest(BaseModel):
    text: str = Field(description="Text typed on the client")


class CommandRequest(BaseModel):
    line: str = Field(description="Raw MWOSP-v1 protocol line")


class HealthResponse(BaseModel):
    status: str = "ok"
    protocol: str = "MWOSP-v1"
    connections: int = 0
    http_sessions: int = 0


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_dispatcher(settings: Settings) -> Dispatcher:
    cfg = settings.session
    return Dispatcher(
        default_width=cfg.default_width,
        default_height=cfg.default_height,
        default_port=cfg.default_port,
        search_target=cfg.search_target,
    )


def create_app(
    settings: Settings | None = None,
    dispatcher: Dispatcher | None = None,
) -> FastAPI:
    """Create the MWOSP server application.

    Args:
        settings: Server configuration. Defaults to ``Settings()``.
        dispatcher: Optional pre-configured Dispatcher (for testing).
    """
    if settings is None:
        settings = Settings()
    server_cfg = settings.server

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("MWOSP server ready (websocket path %s)", server_cfg.websocket_path)
        yield
        app.state.registry.clear()
        logger.info("MWOSP server stopped")

    app = FastAPI(
        title="MWOSP Server",
        description="Remote-UI protocol server for thin display clients",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.dispatcher = dispatcher or create_dispatcher(settings)
    app.state.registry = SessionRegistry(
        app.state.dispatcher,
        max_sessions=server_cfg.http_max_sessions,
        idle_timeout=server_cfg.http_session_ttl,
    )
    app.state.connections = 0

    @app.get("/health")
    async def health_check() -> HealthResponse:
        return HealthResponse(
            connections=app.state.connections,
            http_sessions=len(app.state.registry),
        )

    # -------------------------------------------------------------------
    # WebSocket transport
    # -------------------------------------------------------------------

    @app.websocket(server_cfg.websocket_path)
    async def protocol_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        client = websocket.client
        peer = f"{client.host}:{client.port}" if client else "-"
        conn = Connection(app.state.dispatcher, peer=peer)
        conn.on_connect()
        app.state.connections += 1
        try:
            while not conn.closed:
                line = await websocket.receive_text()
                for reply in conn.on_message(line):
                    await websocket.send_text(reply)
            await websocket.close()
        except WebSocketDisconnect:
            logger.debug("WebSocket closed by peer (%s)", peer)
        finally:
            conn.on_disconnect()
            app.state.connections -= 1

    if not server_cfg.enable_http:
        return app

    # -------------------------------------------------------------------
    # HTTP polling variant
    # -------------------------------------------------------------------

    def _session_id(request: Request) -> str:
        return (
            request.headers.get(server_cfg.session_header)
            or request.cookies.get(server_cfg.session_cookie)
            or secrets.token_hex(8)
        )

    def _exchange(request: Request, line: str) -> PlainTextResponse:
        """One decode -> dispatch -> encode cycle for a polling client."""
        registry: SessionRegistry = app.state.registry
        session_id = _session_id(request)
        conn = registry.get_or_create(session_id)
        lines = conn.on_message(line)
        if conn.closed:
            registry.drop(session_id)
        response = PlainTextResponse("\n".join(lines))
        response.headers[server_cfg.session_header] = session_id
        response.set_cookie(server_cfg.session_cookie, session_id, httponly=True)
        return response

    @app.get("/render", response_class=PlainTextResponse)
    async def get_render(request: Request) -> PlainTextResponse:
        return _exchange(request, "NeedRender")

    @app.post("/click", response_class=PlainTextResponse)
    async def post_click(request: Request, body: ClickRequest) -> PlainTextResponse:
        return _exchange(request, encode("Click", body.x, body.y))

    @app.post("/input", response_class=PlainTextResponse)
    async def post_input(request: Request, body: TextInputRequest) -> PlainTextResponse:
        return _exchange(request, encode("Input", body.text))

    @app.post("/command", response_class=PlainTextResponse)
    async def post_command(request: Request, body: CommandRequest) -> PlainTextResponse:
        return _exchange(request, body.line)

    @app.delete("/session")
    async def delete_session(request: Request) -> dict[str, str]:
        session_id = _session_id(request)
        dropped = app.state.registry.drop(session_id)
        return {"status": "ok" if dropped else "unknown", "session": session_id}

    return app


# ---------------------------------------------------------------------------
# Standalone entry point
# ---------------------------------------------------------------------------

def main(settings: Settings | None = None) -> None:
    """Run the MWOSP server."""
    settings = settings or Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
