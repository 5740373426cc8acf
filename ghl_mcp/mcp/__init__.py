"""Model Context Protocol core for the GoHighLevel MCP Server."""

from .errors import DuplicateToolError, MCPError, ToolExecutionError
from .invoker import ToolInvoker, ToolOutcome
from .registry import HandlerGroup, ToolDescriptor, ToolRegistry
from .server import MCPServer
from .sse import SSEConnection

__all__ = [
    "DuplicateToolError",
    "HandlerGroup",
    "MCPError",
    "MCPServer",
    "SSEConnection",
    "ToolDescriptor",
    "ToolExecutionError",
    "ToolInvoker",
    "ToolOutcome",
    "ToolRegistry",
]
