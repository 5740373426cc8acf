"""Name-based routing of tools to the handler group that owns them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

from .errors import DuplicateToolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDescriptor:
    """Immutable description of a callable tool."""

    name: str
    description: str
    input_schema: Mapping[str, Any] = field(default_factory=dict)

    @property
    def required(self) -> Tuple[str, ...]:
        """Required parameter names in declaration order."""

        required = self.input_schema.get("required") or ()
        return tuple(name for name in required if isinstance(name, str))

    def to_dict(self) -> Dict[str, Any]:
        """MCP wire representation used by ``tools/list``."""

        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": _plain(self.input_schema),
        }


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


@runtime_checkable
class HandlerGroup(Protocol):
    """A set of related tools backed by one executor."""

    category: str

    def list_tools(self) -> List[ToolDescriptor]:
        ...

    def execute(self, name: str, args: Dict[str, Any]) -> Any:
        ...


class ToolRegistry:
    """Ordered mapping from tool name to descriptor and owning handler group.

    The registry is populated once at startup and frozen before serving, so
    concurrent request handlers may read it without locking.
    """

    def __init__(self) -> None:
        self._descriptors: Dict[str, ToolDescriptor] = {}
        self._owners: Dict[str, HandlerGroup] = {}
        self._categories: Dict[str, int] = {}
        self._frozen = False

    @classmethod
    def build(cls, groups: Iterable[HandlerGroup]) -> "ToolRegistry":
        """Register every group in order and freeze the result."""

        registry = cls()
        for group in groups:
            registry.register(group)
        registry.freeze()
        logger.info(
            "Registered %s tools across %s groups",
            len(registry),
            len(registry.categories()),
        )
        return registry

    def register(self, group: HandlerGroup) -> None:
        """Append ``group``'s tools, rejecting names that are already taken."""

        if self._frozen:
            raise RuntimeError("Tool registry is frozen; register groups at startup")

        category = getattr(group, "category", group.__class__.__name__)
        tools = list(group.list_tools())

        seen: Dict[str, ToolDescriptor] = {}
        for descriptor in tools:
            owner = self._owners.get(descriptor.name)
            if owner is not None:
                raise DuplicateToolError(
                    descriptor.name, getattr(owner, "category", "?"), category
                )
            if descriptor.name in seen:
                raise DuplicateToolError(descriptor.name, category, category)
            seen[descriptor.name] = descriptor

        for name, descriptor in seen.items():
            self._descriptors[name] = descriptor
            self._owners[name] = group
        self._categories[category] = self._categories.get(category, 0) + len(seen)
        logger.debug("Registered %s tools for group %s", len(seen), category)

    def freeze(self) -> None:
        """Forbid further registration."""

        self._frozen = True
        self._descriptors = MappingProxyType(self._descriptors)  # type: ignore[assignment]
        self._owners = MappingProxyType(self._owners)  # type: ignore[assignment]

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve(self, name: str) -> Optional[HandlerGroup]:
        """Return the group that owns ``name`` or ``None`` when unknown."""

        return self._owners.get(name)

    def descriptor(self, name: str) -> Optional[ToolDescriptor]:
        return self._descriptors.get(name)

    def descriptors(self) -> List[ToolDescriptor]:
        return list(self._descriptors.values())

    def names(self) -> List[str]:
        return list(self._descriptors.keys())

    def categories(self) -> Dict[str, int]:
        return dict(self._categories)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)
