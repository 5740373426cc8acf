"""Flask application exposing the MCP server over HTTP and SSE."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from . import __version__ as PACKAGE_VERSION
from .client import GHLApiClient
from .config import Config
from .handlers import default_groups
from .mcp import MCPServer, SSEConnection, ToolInvoker, ToolRegistry
from .mcp.server import MCP_PROTOCOL_VERSION, SERVER_NAME
from .mcp.sse import TimerFactory

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "health": "/",
    "mcp_sse": "/sse",
    "tools": "/api/tools",
    "genai_tools": "/api/genai/tools",
    "genai_execute": "/api/genai/tools/{toolName}",
}

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_registry(config: Config, client: Optional[GHLApiClient] = None) -> ToolRegistry:
    """Create the CRM client (unless given) and register every handler group."""

    if client is None:
        client = GHLApiClient(**config.ghl_credentials())
    return ToolRegistry.build(default_groups(client))


def create_app(
    config: Optional[Config] = None,
    registry: Optional[ToolRegistry] = None,
    *,
    timer_factory: TimerFactory = threading.Timer,
) -> Flask:
    """Application factory.

    ``registry`` is built from ``config`` when omitted; it is frozen before the
    first request is served.
    """

    config = config or Config()
    if registry is None:
        registry = build_registry(config)
    if not registry.frozen:
        registry.freeze()

    invoker = ToolInvoker(registry)
    server = MCPServer(registry, invoker)
    sse_settings = config.sse_settings()

    app = Flask(__name__)
    app.config.update(
        GHL_CONFIG=config,
        TOOL_REGISTRY=registry,
        MCP_SERVER=server,
    )
    CORS(
        app,
        origins="*",
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Authorization"],
        max_age=86400,
    )

    def new_connection() -> SSEConnection:
        return SSEConnection(timer_factory=timer_factory, **sse_settings)

    def stream_response(connection: SSEConnection) -> Response:
        return Response(
            connection.stream(),
            status=200,
            mimetype="text/event-stream",
            headers=SSE_HEADERS,
        )

    @app.before_request
    def answer_preflight():
        if request.method == "OPTIONS":
            return Response(status=200)
        logger.info("%s %s", request.method, request.path)
        return None

    @app.route("/", methods=["GET"])
    @app.route("/health", methods=["GET"])
    def health():
        return jsonify(
            {
                "status": "healthy",
                "server": SERVER_NAME,
                "version": PACKAGE_VERSION,
                "protocol": MCP_PROTOCOL_VERSION,
                "timestamp": _timestamp(),
                "tools": registry.names(),
                "endpoints": ENDPOINTS,
            }
        )

    @app.route("/sse", methods=["GET"])
    def sse_open():
        connection = new_connection()
        connection.open()
        return stream_response(connection)

    @app.route("/sse", methods=["POST"])
    def sse_message():
        body = request.get_data()
        try:
            message = json.loads(body)
        except ValueError as exc:
            logger.warning("JSON parse error on /sse: %s", exc)
            connection = new_connection()
            connection.open(handshake=False)
            connection.fail(MCPServer.parse_error_response())
            return stream_response(connection)

        # The deadline only runs once the response exists; a slow tool call
        # must not close the stream before its answer is queued.
        response = asyncio.run(server.handle_message(message))
        connection = new_connection()
        connection.open(handshake=False)
        connection.respond(response)
        return stream_response(connection)

    @app.route("/api/tools", methods=["GET"])
    def list_tools():
        tools = [descriptor.to_dict() for descriptor in registry.descriptors()]
        return jsonify(
            {
                "success": True,
                "tools": tools,
                "count": len(tools),
                "categories": registry.categories(),
            }
        )

    @app.route("/api/genai/tools", methods=["GET"])
    def genai_tools():
        return jsonify(
            {
                "tools": [
                    {
                        "name": descriptor.name,
                        "description": descriptor.description,
                        "parameters": descriptor.to_dict()["inputSchema"],
                    }
                    for descriptor in registry.descriptors()
                ]
            }
        )

    @app.route("/api/genai/tools/<tool_name>", methods=["POST"])
    def genai_execute(tool_name: str):
        try:
            payload = json.loads(request.get_data() or b"{}")
        except ValueError as exc:
            logger.warning("Invalid JSON for tool %s: %s", tool_name, exc)
            return (
                jsonify(
                    {
                        "success": False,
                        "error": "Invalid JSON in request body",
                        "details": str(exc),
                        "metadata": {"tool": tool_name, "timestamp": _timestamp()},
                    }
                ),
                400,
            )

        parameters = payload.get("parameters") if isinstance(payload, dict) else None
        if parameters is None:
            parameters = {}
        if not isinstance(parameters, dict):
            return (
                jsonify(
                    {
                        "success": False,
                        "error": "parameters must be an object",
                        "metadata": {"tool": tool_name, "timestamp": _timestamp()},
                    }
                ),
                400,
            )

        outcome = asyncio.run(invoker.execute(tool_name, parameters))
        return _json_or_500(outcome.body, outcome.status, tool_name, parameters)

    @app.errorhandler(404)
    @app.errorhandler(405)
    def not_found(_error):
        logger.info("Unknown endpoint %s %s", request.method, request.path)
        return jsonify({"error": "Not found", "available_endpoints": ENDPOINTS}), 404

    logger.info(
        "%s %s ready with %s tools", SERVER_NAME, PACKAGE_VERSION, len(registry)
    )
    return app


def _json_or_500(body: Dict[str, Any], status: int, tool_name: str, parameters: Any):
    """Serialize a tool outcome, reporting results that are not JSON-encodable."""

    try:
        return Response(json.dumps(body), status=status, mimetype="application/json")
    except (TypeError, ValueError) as exc:
        logger.error("Result of tool %s is not serializable: %s", tool_name, exc)
        return (
            jsonify(
                {
                    "success": False,
                    "error": f"Result is not JSON serializable: {exc}",
                    "metadata": {
                        "tool": tool_name,
                        "timestamp": _timestamp(),
                        "parameters": parameters,
                    },
                }
            ),
            500,
        )
