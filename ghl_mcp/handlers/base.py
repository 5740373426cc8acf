"""Shared plumbing for CRM tool handler groups."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..client import GHLApiClient
from ..mcp.registry import ToolDescriptor

logger = logging.getLogger(__name__)


def tool(
    name: str,
    description: str,
    properties: Optional[Dict[str, Any]] = None,
    required: Sequence[str] = (),
) -> ToolDescriptor:
    """Build a descriptor with a JSON-Schema object for its parameters."""

    return ToolDescriptor(
        name=name,
        description=description,
        input_schema={
            "type": "object",
            "properties": dict(properties or {}),
            "required": list(required),
        },
    )


class ToolGroup:
    """Base class for a handler group backed by the CRM client.

    Subclasses declare ``category``, the ``TOOLS`` they own and a
    ``_tool_handlers`` mapping from tool name to bound method.
    """

    category = "base"
    TOOLS: Sequence[ToolDescriptor] = ()

    def __init__(self, client: GHLApiClient):
        self.client = client

    def list_tools(self) -> List[ToolDescriptor]:
        return list(self.TOOLS)

    def execute(self, name: str, args: Dict[str, Any]) -> Any:
        handler = self._tool_handlers().get(name)
        if handler is None:
            raise ValueError(f"Unknown {self.category} tool: {name}")
        logger.debug("Dispatching %s to %s group", name, self.category)
        return handler(args)

    def _tool_handlers(self) -> Dict[str, Callable[[Dict[str, Any]], Any]]:
        raise NotImplementedError


def int_arg(args: Dict[str, Any], key: str, default: int) -> int:
    value = args.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{key} must be a positive integer")
    return value


def str_list_arg(args: Dict[str, Any], key: str) -> List[str]:
    value = args.get(key)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key} must be a list of strings")
    return value
