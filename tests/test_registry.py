"""Tests for tool registration and name routing."""

from __future__ import annotations

import pytest

from ghl_mcp.handlers.base import tool
from ghl_mcp.mcp import DuplicateToolError, ToolRegistry

from conftest import DummyGroup


def test_descriptors_keep_registration_order(registry):
    assert registry.names() == ["search", "retrieve", "create_contact", "broken_tool"]
    assert [d.name for d in registry.descriptors()] == registry.names()
    assert len(registry) == 4


def test_resolve_routes_to_owning_group(registry, search_group, contact_group):
    assert registry.resolve("search") is search_group
    assert registry.resolve("create_contact") is contact_group


def test_resolve_unknown_name_returns_none(registry):
    assert registry.resolve("nope") is None
    assert registry.descriptor("nope") is None
    assert "nope" not in registry


def test_duplicate_name_across_groups_is_rejected(search_group):
    clash = DummyGroup("contact", [tool("search", "Another search")])
    with pytest.raises(DuplicateToolError) as excinfo:
        ToolRegistry.build([search_group, clash])

    assert excinfo.value.name == "search"
    assert excinfo.value.existing == "genai"
    assert excinfo.value.incoming == "contact"


def test_duplicate_name_within_one_group_is_rejected():
    group = DummyGroup("contact", [tool("get_contact", "a"), tool("get_contact", "b")])
    with pytest.raises(DuplicateToolError):
        ToolRegistry.build([group])


def test_failed_registration_leaves_registry_untouched(search_group):
    registry = ToolRegistry()
    registry.register(search_group)
    clash = DummyGroup("other", [tool("fresh", "ok"), tool("retrieve", "clash")])

    with pytest.raises(DuplicateToolError):
        registry.register(clash)

    assert registry.names() == ["search", "retrieve"]
    assert "other" not in registry.categories()


def test_frozen_registry_rejects_registration(registry):
    assert registry.frozen
    with pytest.raises(RuntimeError):
        registry.register(DummyGroup("late", [tool("late_tool", "too late")]))


def test_categories_count_tools_per_group(registry):
    assert registry.categories() == {"genai": 2, "contact": 2}


def test_descriptor_wire_format(registry):
    payload = registry.descriptor("retrieve").to_dict()
    assert payload["name"] == "retrieve"
    assert payload["description"] == "Retrieve one record"
    assert payload["inputSchema"]["required"] == ["id", "type"]
    assert payload["inputSchema"]["properties"]["type"]["enum"] == ["contact"]


def test_descriptor_is_immutable(registry):
    descriptor = registry.descriptor("search")
    with pytest.raises(AttributeError):
        descriptor.name = "renamed"
