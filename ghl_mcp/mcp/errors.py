"""Error types shared by the MCP dispatcher, registry and transports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


@dataclass
class MCPError(Exception):
    """Structured error raised for MCP request failures."""

    code: int
    message: str
    data: Optional[Any] = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error into a JSON-RPC compliant dictionary."""

        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


class DuplicateToolError(RuntimeError):
    """Raised at startup when two handler groups declare the same tool name."""

    def __init__(self, name: str, existing: str, incoming: str):
        super().__init__(
            f"Tool '{name}' from group '{incoming}' is already registered by '{existing}'"
        )
        self.name = name
        self.existing = existing
        self.incoming = incoming


class ToolExecutionError(Exception):
    """A handler group's executor failed while running a tool."""

    def __init__(self, tool: str, cause: BaseException):
        super().__init__(str(cause) or cause.__class__.__name__)
        self.tool = tool
        self.cause = cause
