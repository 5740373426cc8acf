"""Shared fixtures for the GHL MCP Server test suite."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from ghl_mcp.config import Config
from ghl_mcp.handlers.base import tool
from ghl_mcp.mcp import ToolRegistry


class DummyGroup:
    """Handler group that records calls and returns canned results."""

    def __init__(self, category: str, descriptors, results: Dict[str, Any] | None = None):
        self.category = category
        self._descriptors = list(descriptors)
        self.results = results or {}
        self.calls: List[tuple] = []

    def list_tools(self):
        return list(self._descriptors)

    def execute(self, name: str, args: Dict[str, Any]) -> Any:
        self.calls.append((name, dict(args)))
        result = self.results.get(name, {"ok": True, "tool": name})
        if isinstance(result, BaseException):
            raise result
        return result


class AsyncDummyGroup(DummyGroup):
    async def execute(self, name: str, args: Dict[str, Any]) -> Any:
        return super().execute(name, args)


class FakeTimer:
    """Stand-in for ``threading.Timer`` that only fires when told to."""

    def __init__(self, interval: float, function):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function()


class FakeScheduler:
    def __init__(self):
        self.timers: List[FakeTimer] = []

    def __call__(self, interval, function):
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    def with_interval(self, interval: float) -> List[FakeTimer]:
        return [timer for timer in self.timers if timer.interval == interval]

    def live(self) -> List[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled]


@pytest.fixture()
def search_group():
    return DummyGroup(
        "genai",
        [
            tool(
                "search",
                "Search the CRM",
                {"query": {"type": "string"}, "limit": {"type": "integer"}},
                required=["query"],
            ),
            tool(
                "retrieve",
                "Retrieve one record",
                {"id": {"type": "string"}, "type": {"type": "string", "enum": ["contact"]}},
                required=["id", "type"],
            ),
        ],
        results={"search": "3 results", "retrieve": {"id": "c1", "type": "contact"}},
    )


@pytest.fixture()
def contact_group():
    return DummyGroup(
        "contact",
        [
            tool(
                "create_contact",
                "Create a contact",
                {
                    "email": {"type": "string"},
                    "phone": {"type": "string"},
                    "firstName": {"type": "string"},
                    "source": {"type": "string"},
                },
                required=["email", "phone", "firstName"],
            ),
            tool("broken_tool", "Always fails"),
        ],
        results={"broken_tool": RuntimeError("GHL API error 500: upstream exploded")},
    )


@pytest.fixture()
def registry(search_group, contact_group):
    return ToolRegistry.build([search_group, contact_group])


@pytest.fixture()
def scheduler():
    return FakeScheduler()


@pytest.fixture()
def config(tmp_path):
    cfg = Config(str(tmp_path / "config.yml"), environ={})
    cfg.set("sse", "heartbeat_interval", 0.1)
    cfg.set("sse", "max_duration", 0.35)
    cfg.set("sse", "tools_changed_delay", 0.01)
    cfg.set("sse", "close_delay", 0.01)
    return cfg
