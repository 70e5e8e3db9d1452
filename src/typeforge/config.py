"""Declarative JSON module descriptions.

A description names the module, optionally declares user types, and lists
containers in dependency order::

    {
        "module": "containers",
        "source_count": null,
        "source_threshold": 4096,
        "allocator": "stdlib",
        "types": {
            "Value": {"default_create": "ValueCreate", "copy": "ValueCopy",
                      "equal": "ValueEqual", "code": "ValueHash",
                      "interface": "#include \\"value.h\\""}
        },
        "containers": [
            {"kind": "vector", "name": "IntVector", "element": "int"},
            {"kind": "hash_map", "name": "IntMap", "key": "int", "element": "Value"}
        ]
    }
"""

from __future__ import annotations

import json
from typing import Any

from .containers import make_container
from .entity import PUBLIC
from .errors import ConfigurationError
from .memory import DEFAULT_ALLOCATOR, Allocator, BDWAllocator
from .module import Module
from .std import coerce
from .types import Operation, Synthetic, Type

_TYPE_CODE_KEYS = ("signature", "interface", "declarations", "definitions", "visibility")
_CONTAINER_KEYS = ("kind", "name", "element", "key", "visibility", "salt")


def _allocator(name: str | None) -> Allocator:
    if name in (None, "stdlib"):
        return DEFAULT_ALLOCATOR
    if name == "bdw":
        return BDWAllocator()
    raise ConfigurationError(f"unknown allocator '{name}' (expected 'stdlib' or 'bdw')")


def _synthetic(name: str, description: dict[str, Any]) -> Synthetic:
    operations = {}
    for key, value in description.items():
        if key in _TYPE_CODE_KEYS:
            continue
        operations[Operation.parse(key).value] = value
    return Synthetic(
        description.get("signature", name),
        interface=description.get("interface", ""),
        declarations=description.get("declarations", ""),
        definitions=description.get("definitions", ""),
        visibility=description.get("visibility", PUBLIC),
        **operations,
    )


class _Resolver:
    """Resolves type names to containers, user types or standard C types."""

    def __init__(self):
        self.names: dict[str, Type] = {}

    def define(self, name: str, type: Type):
        if name in self.names:
            raise ConfigurationError(f"type '{name}' is defined twice")
        self.names[name] = type

    def resolve(self, name: Any) -> Type:
        if not isinstance(name, str):
            raise ConfigurationError(f"type reference must be a string, got {name!r}")
        if name in self.names:
            return self.names[name]
        return coerce(name)


def build_module(description: dict[str, Any], source_count: int | None = None,
                 source_threshold: int | None = None) -> Module:
    """Build a module from a parsed description; arguments override its knobs."""
    if not isinstance(description, dict) or "module" not in description:
        raise ConfigurationError("module description must be an object with a 'module' name")
    if source_count is None:
        source_count = description.get("source_count")
    if source_threshold is None:
        source_threshold = description.get("source_threshold")
    module = Module(description["module"], source_count=source_count,
                    source_threshold=source_threshold)
    memory = _allocator(description.get("allocator"))
    resolver = _Resolver()
    for name, entry in description.get("types", {}).items():
        resolver.define(name, _synthetic(name, entry))
    for entry in description.get("containers", []):
        unknown = set(entry) - set(_CONTAINER_KEYS)
        if unknown:
            raise ConfigurationError(f"unknown container settings: {', '.join(sorted(unknown))}")
        for required in ("kind", "name", "element"):
            if required not in entry:
                raise ConfigurationError(f"container description lacks '{required}': {entry!r}")
        key = resolver.resolve(entry["key"]) if "key" in entry else None
        container = make_container(
            entry["kind"], entry["name"], resolver.resolve(entry["element"]),
            entry.get("visibility", PUBLIC), key=key, memory=memory, salt=entry.get("salt"))
        resolver.define(entry["name"], container)
        module.add(container)
    return module


def load_description(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)
