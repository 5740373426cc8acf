"""Invoke registered tools and normalize their outcomes."""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from .errors import ToolExecutionError
from .registry import ToolRegistry
from .validation import invalid_parameters_problem, missing_parameters_problem

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class ToolOutcome:
    """HTTP status and JSON body produced by the REST execution path."""

    status: int
    body: Dict[str, Any]

    @property
    def success(self) -> bool:
        return bool(self.body.get("success"))


class ToolInvoker:
    """Route tool calls to their owning handler group."""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    async def call(self, name: str, arguments: Dict[str, Any]) -> Any:
        """Run ``name`` and return its raw result.

        Raises ``KeyError`` when the tool is unknown and ``ToolExecutionError``
        when the executor fails. Callers are expected to have resolved and
        validated the tool first.
        """

        group = self.registry.resolve(name)
        if group is None:
            raise KeyError(name)

        logger.info("Executing tool %s", name)
        try:
            result = group.execute(name, arguments)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Tool %s failed: %s", name, exc)
            logger.debug("Tool %s failure details", name, exc_info=True)
            raise ToolExecutionError(name, exc) from exc
        logger.info("Tool %s executed successfully", name)
        return result

    async def execute(self, name: str, parameters: Dict[str, Any]) -> ToolOutcome:
        """Run a tool outside the JSON-RPC envelope for the REST bridge."""

        descriptor = self.registry.descriptor(name)
        if descriptor is None:
            logger.warning("REST execution requested for unknown tool %s", name)
            return ToolOutcome(
                404,
                {
                    "success": False,
                    "error": f"Tool '{name}' not found",
                    "available_tools": self.registry.names(),
                    "metadata": {"tool": name, "timestamp": _timestamp()},
                },
            )

        problem = missing_parameters_problem(descriptor, parameters)
        if problem is not None:
            return ToolOutcome(
                400,
                {
                    "success": False,
                    "error": problem["message"],
                    "required_parameters": problem["required"],
                    "provided_parameters": problem["provided"],
                    "metadata": {"tool": name, "timestamp": _timestamp()},
                },
            )

        problem = invalid_parameters_problem(descriptor, parameters)
        if problem is not None:
            return ToolOutcome(
                400,
                {
                    "success": False,
                    "error": problem["message"],
                    "invalid_parameters": problem["invalid"],
                    "provided_parameters": problem["provided"],
                    "metadata": {"tool": name, "timestamp": _timestamp()},
                },
            )

        started = time.monotonic()
        try:
            result = await self.call(name, parameters)
        except ToolExecutionError as exc:
            return ToolOutcome(
                500,
                {
                    "success": False,
                    "error": str(exc),
                    "metadata": {
                        "tool": name,
                        "timestamp": _timestamp(),
                        "parameters": parameters,
                    },
                },
            )

        return ToolOutcome(
            200,
            {
                "success": True,
                "result": result,
                "metadata": {
                    "tool": name,
                    "timestamp": _timestamp(),
                    "parameters": parameters,
                    "execution_time": round(time.monotonic() - started, 6),
                },
            },
        )
