"""Container kinds and the registry used to instantiate them by name."""

from __future__ import annotations

from ..entity import PUBLIC
from ..errors import ConfigurationError
from ..types import Type
from .container import Container
from .lists import List, ListRange
from .maps import HashMap, HashMapRange, MapNode
from .sets import HashSet, HashSetRange
from .vector import Vector, VectorRange

KINDS: dict[str, type[Container]] = {
    "vector": Vector,
    "list": List,
    "hash_set": HashSet,
    "hash_map": HashMap,
}


def make_container(kind: str, name: str, element: Type | str, visibility: str = PUBLIC,
                   key: Type | str | None = None, **options) -> Container:
    """Instantiate the container *kind* named *name* over *element*.

    ``key`` is required by ``hash_map`` and rejected by every other kind;
    remaining keyword options (``memory``, ``hasher``, ``salt``) are passed on.
    """
    if kind not in KINDS:
        raise ConfigurationError(
            f"unknown container kind '{kind}' (expected one of {', '.join(KINDS)})")
    cls = KINDS[kind]
    if cls is HashMap:
        if key is None:
            raise ConfigurationError(f"{name}: hash_map requires a key type")
        return HashMap(name, key, element, visibility, **options)
    if key is not None:
        raise ConfigurationError(f"{name}: {kind} does not take a key type")
    return cls(name, element, visibility, **options)


__all__ = [
    "Container", "Vector", "VectorRange", "List", "ListRange", "HashSet", "HashSetRange",
    "HashMap", "HashMapRange", "MapNode", "KINDS", "make_container",
]
