"""Pure checks applied to messages and tool arguments before dispatch."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .errors import INVALID_REQUEST, MCPError
from .registry import ToolDescriptor

JSONRPC_VERSION = "2.0"


def validate_envelope(message: Any) -> Optional[MCPError]:
    """Return an ``InvalidRequest`` problem for a malformed envelope, else ``None``."""

    if not isinstance(message, dict):
        return MCPError(
            code=INVALID_REQUEST, message="Invalid Request: message must be an object"
        )
    if message.get("jsonrpc") != JSONRPC_VERSION:
        return MCPError(
            code=INVALID_REQUEST, message="Invalid Request: jsonrpc must be '2.0'"
        )
    if not isinstance(message.get("method"), str):
        return MCPError(
            code=INVALID_REQUEST, message="Invalid Request: method must be a string"
        )
    return None


def missing_parameters(
    descriptor: ToolDescriptor, arguments: Mapping[str, Any]
) -> List[str]:
    """Required parameter names absent from ``arguments``, in declaration order."""

    return [name for name in descriptor.required if name not in arguments]


def missing_parameters_problem(
    descriptor: ToolDescriptor, arguments: Mapping[str, Any]
) -> Optional[Dict[str, Any]]:
    """Describe missing parameters the way both transports report them."""

    missing = missing_parameters(descriptor, arguments)
    if not missing:
        return None
    return {
        "message": f"Missing required parameters: {', '.join(missing)}",
        "missing": missing,
        "required": list(descriptor.required),
        "provided": list(arguments.keys()),
    }


_JSON_TYPES = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
}


def invalid_parameters(
    descriptor: ToolDescriptor, arguments: Mapping[str, Any]
) -> Dict[str, str]:
    """Check supplied arguments against their declared ``type``, ``enum`` and ``minimum``.

    Only properties the descriptor declares are checked; unknown keys and
    unknown schema types pass through to the executor.
    """

    properties = descriptor.input_schema.get("properties") or {}
    problems: Dict[str, str] = {}
    for name, schema in properties.items():
        if name not in arguments or not isinstance(schema, Mapping):
            continue
        value = arguments[name]

        expected = _JSON_TYPES.get(schema.get("type"))
        if expected is not None:
            if isinstance(value, bool) and bool not in expected:
                problems[name] = f"must be of type {schema['type']}"
                continue
            if not isinstance(value, expected):
                problems[name] = f"must be of type {schema['type']}"
                continue

        enum = schema.get("enum")
        if enum is not None and value not in enum:
            problems[name] = f"must be one of {', '.join(map(str, enum))}"
            continue

        minimum = schema.get("minimum")
        if minimum is not None and isinstance(value, (int, float)) and value < minimum:
            problems[name] = f"must be at least {minimum}"
    return problems


def invalid_parameters_problem(
    descriptor: ToolDescriptor, arguments: Mapping[str, Any]
) -> Optional[Dict[str, Any]]:
    invalid = invalid_parameters(descriptor, arguments)
    if not invalid:
        return None
    details = "; ".join(f"{name} {reason}" for name, reason in invalid.items())
    return {
        "message": f"Invalid parameters: {details}",
        "invalid": invalid,
        "provided": list(arguments.keys()),
    }
