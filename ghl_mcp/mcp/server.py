"""JSON-RPC dispatcher implementing the Model Context Protocol surface."""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Dict

from .. import __version__ as PACKAGE_VERSION
from .errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    MCPError,
    ToolExecutionError,
)
from .invoker import ToolInvoker
from .registry import ToolRegistry
from .validation import (
    JSONRPC_VERSION,
    invalid_parameters_problem,
    missing_parameters_problem,
    validate_envelope,
)

logger = logging.getLogger(__name__)

MCP_PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "ghl-mcp-server"


class MCPServer:
    """Stateless MCP method dispatcher over a frozen tool registry.

    ``handle_message`` is total: every decoded message yields exactly one
    response object and no exception escapes to the transport.
    """

    def __init__(self, registry: ToolRegistry, invoker: ToolInvoker | None = None):
        """Bind the dispatcher to the registry built at startup."""

        self.registry = registry
        self.invoker = invoker or ToolInvoker(registry)
        self._methods: Dict[str, Callable[[Dict[str, Any]], Awaitable[Any]]] = {
            "initialize": self._handle_initialize,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
            "ping": self._handle_ping,
        }

    @property
    def server_info(self) -> Dict[str, str]:
        return {"name": SERVER_NAME, "version": PACKAGE_VERSION}

    async def handle_message(self, message: Any) -> Dict[str, Any]:
        """Process a single JSON-RPC message and return the response object."""

        message_id = message.get("id") if isinstance(message, dict) else None
        try:
            problem = validate_envelope(message)
            if problem is not None:
                return self._error_response(message_id, problem)

            method = message["method"]
            logger.info("MCP request %s (id=%s)", method, message_id)
            logger.debug("MCP request payload: %s", message)

            handler = self._methods.get(method)
            if handler is None:
                raise MCPError(code=METHOD_NOT_FOUND, message=f"Method not found: {method}")

            params = message.get("params")
            if not isinstance(params, dict):
                params = {}

            result = await self._invoke_handler(handler, params)
            response = {"jsonrpc": JSONRPC_VERSION, "id": message_id, "result": result}
            json.dumps(response)
        except MCPError as exc:
            logger.info("MCP error %s for id=%s: %s", exc.code, message_id, exc.message)
            return self._error_response(message_id, exc)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Unhandled exception while processing MCP message")
            return self._error_response(
                message_id,
                MCPError(code=INTERNAL_ERROR, message="Internal error", data=str(exc)),
            )

        logger.debug("MCP response payload for id=%s: %s", message_id, response)
        return response

    async def _invoke_handler(
        self,
        handler: Callable[[Dict[str, Any]], Awaitable[Any]],
        params: Dict[str, Any],
    ) -> Any:
        try:
            return await handler(params)
        except MCPError:
            raise
        except ToolExecutionError as exc:
            raise MCPError(
                code=INTERNAL_ERROR,
                message=f"Tool execution failed: {exc}",
                data={"tool": exc.tool},
            ) from exc

    async def _handle_initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Announce protocol version, capabilities and server identity."""

        client_info = params.get("clientInfo")
        if isinstance(client_info, dict):
            logger.info(
                "Initialize from client %s %s",
                client_info.get("name"),
                client_info.get("version"),
            )
        return {
            "protocolVersion": MCP_PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": self.server_info,
        }

    async def _handle_tools_list(self, _params: Dict[str, Any]) -> Dict[str, Any]:
        """Return the catalog of registered tools."""

        return {"tools": [descriptor.to_dict() for descriptor in self.registry.descriptors()]}

    async def _handle_tools_call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Invoke a named tool and return MCP tool-call content."""

        name = params.get("name")
        arguments = params.get("arguments")

        if not isinstance(name, str) or not name.strip():
            raise MCPError(code=INVALID_PARAMS, message="name must be a non-empty string")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise MCPError(code=INVALID_PARAMS, message="arguments must be an object")

        descriptor = self.registry.descriptor(name)
        if descriptor is None:
            raise MCPError(
                code=METHOD_NOT_FOUND,
                message=f"Unknown tool: {name}",
                data={"availableTools": self.registry.names()},
            )

        problem = missing_parameters_problem(descriptor, arguments)
        if problem is not None:
            raise MCPError(
                code=INVALID_PARAMS,
                message=problem["message"],
                data={"missing": problem["missing"], "required": problem["required"]},
            )

        problem = invalid_parameters_problem(descriptor, arguments)
        if problem is not None:
            raise MCPError(
                code=INVALID_PARAMS,
                message=problem["message"],
                data={"invalid": problem["invalid"]},
            )

        result = await self.invoker.call(name, arguments)
        return {"content": [{"type": "text", "text": self._render(result)}]}

    async def _handle_ping(self, _params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    @staticmethod
    def _render(result: Any) -> str:
        if isinstance(result, str):
            return result
        return json.dumps(result, indent=2)

    @staticmethod
    def _error_response(message_id: Any, error: MCPError) -> Dict[str, Any]:
        """Return a JSON-RPC error response payload."""

        return {"jsonrpc": JSONRPC_VERSION, "id": message_id, "error": error.to_dict()}

    @classmethod
    def parse_error_response(cls) -> Dict[str, Any]:
        """Response for a body that is not valid JSON; its id is always null."""

        return cls._error_response(None, MCPError(code=PARSE_ERROR, message="Parse error"))
