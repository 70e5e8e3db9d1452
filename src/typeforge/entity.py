"""Dependency-tracked units of generated code.

An Entity renders four code regions:

    interface declarations   -> header (type definitions, macros)
    interface definitions    -> header for public entities, replicated into
                                every consuming source for internal ones
    forward declarations     -> every source whose closure contains the entity
    definitions              -> exactly one source

An internal entity within reach of a public one also exports the prototypes
of its external functions to the header, since the public inline code there
may call them.  Entities declare the entities they depend on.  Dependencies order the output
(a dependency is always emitted before its dependents); references only pull
an entity into the module without constraining the order.
"""

from __future__ import annotations

import itertools
import textwrap
from functools import cached_property
from typing import Iterable, KeysView

from .errors import ConfigurationError

PUBLIC = "public"
INTERNAL = "internal"
VISIBILITIES = (PUBLIC, INTERNAL)

# Declaration order, used to stabilize entities of equal rank
_sequence = itertools.count()


def check_visibility(visibility: str) -> str:
    if visibility not in VISIBILITIES:
        raise ConfigurationError(
            f"unknown visibility '{visibility}' (expected one of {', '.join(VISIBILITIES)})")
    return visibility


class Builder:
    """Accumulates chunks of C text for one region.

    The length of a builder is the size of the text it renders and is what
    module distribution balances.
    """

    def __init__(self):
        self._chunks: list[str] = []

    def write(self, text: str) -> Builder:
        text = textwrap.dedent(str(text)).strip("\n")
        if text.strip():
            self._chunks.append(text)
        return self

    def extend(self, other: Builder) -> Builder:
        self._chunks.extend(other._chunks)
        return self

    def __str__(self) -> str:
        return "".join(chunk + "\n" for chunk in self._chunks)

    def __len__(self) -> int:
        return sum(len(chunk) + 1 for chunk in self._chunks)

    def __bool__(self) -> bool:
        return bool(self._chunks)


class Entity:
    """A node of the dependency graph with renderable code regions."""

    def __init__(self, visibility: str = PUBLIC):
        self.visibility = check_visibility(visibility)
        self.sequence = next(_sequence)
        self._dependencies: dict[Entity, None] = {}
        self._references: dict[Entity, None] = {}
        self._closure: dict[Entity, None] | None = None
        self._rank: int | None = None
        self._ranking = False

    @property
    def public(self) -> bool:
        return self.visibility == PUBLIC

    @property
    def internal(self) -> bool:
        return self.visibility == INTERNAL

    # --- Dependency graph ---

    def depends_on(self, *entities: Entity) -> Entity:
        """Declare ordering dependencies: each of *entities* is emitted first."""
        self._check_open()
        for entity in entities:
            if entity is not None and entity is not self:
                self._dependencies[entity] = None
        return self

    def references(self, *entities: Entity) -> Entity:
        """Declare entities that must be generated along with this one."""
        self._check_open()
        for entity in entities:
            if entity is not None and entity is not self:
                self._references[entity] = None
        return self

    def _check_open(self):
        if self._closure is not None or self._rank is not None:
            raise ConfigurationError(
                f"dependencies of {self!r} are sealed once its closure has been computed")

    def direct_dependencies(self) -> frozenset[Entity]:
        return frozenset(self._dependencies)

    def closure(self) -> KeysView[Entity]:
        """Self-inclusive transitive closure over dependencies and references.

        Computed on the first call and cached; later calls return the same
        view without side effects.  The view preserves discovery order.
        """
        if self._closure is None:
            collected: dict[Entity, None] = {}
            self._collect(collected)
            self._closure = collected
        return self._closure.keys()

    def _collect(self, collected: dict[Entity, None]):
        if self in collected:
            return
        collected[self] = None
        for entity in itertools.chain(self._dependencies, self._references):
            entity._collect(collected)

    @property
    def rank(self) -> int:
        """Depth in the dependency graph: 0 for leaves, 1 + max over dependencies."""
        if self._rank is None:
            if self._ranking:
                raise ConfigurationError(f"dependency cycle through {self!r}")
            self._ranking = True
            try:
                self._rank = 1 + max((entity.rank for entity in self._dependencies), default=-1)
            finally:
                self._ranking = False
        return self._rank

    def order_key(self) -> tuple[int, int]:
        return (self.rank, self.sequence)

    # --- Code regions ---

    def interface_declarations(self, stream: Builder):
        pass

    def interface_definitions(self, stream: Builder):
        pass

    def forward_declarations(self, stream: Builder):
        pass

    def definitions(self, stream: Builder):
        pass

    def exported_declarations(self, stream: Builder):
        pass

    @cached_property
    def interface(self) -> Builder:
        """Text this entity contributes to the header."""
        stream = Builder()
        self.interface_declarations(stream)
        if self.public:
            self.interface_definitions(stream)
        return stream

    @cached_property
    def declarations(self) -> Builder:
        """Text replicated into every source that needs this entity."""
        stream = Builder()
        if self.internal:
            self.interface_definitions(stream)
        self.forward_declarations(stream)
        return stream

    @cached_property
    def exports(self) -> Builder:
        """Header text of an internal entity that public code depends on."""
        stream = Builder()
        if self.internal:
            self.exported_declarations(stream)
        return stream

    @cached_property
    def implementation(self) -> Builder:
        stream = Builder()
        self.definitions(stream)
        return stream

    @property
    def complexity(self) -> int:
        return len(self.declarations) + len(self.implementation)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} #{self.sequence}>"


def ordered(entities: Iterable[Entity]) -> list[Entity]:
    """Sort entities so that dependencies precede their dependents."""
    return sorted(entities, key=Entity.order_key)


class Code(Entity):
    """A free-standing fragment of C code."""

    def __init__(self, interface: str = "", declarations: str = "", definitions: str = "",
                 dependencies: Iterable[Entity] = (), visibility: str = PUBLIC):
        super().__init__(visibility)
        self._interface_code = interface
        self._declaration_code = declarations
        self._definition_code = definitions
        self.depends_on(*dependencies)

    def interface_declarations(self, stream: Builder):
        stream.write(self._interface_code)

    def forward_declarations(self, stream: Builder):
        stream.write(self._declaration_code)

    def definitions(self, stream: Builder):
        stream.write(self._definition_code)


class SystemHeader(Code):
    """An ``#include <...>`` directive placed in the header."""

    def __init__(self, name: str):
        super().__init__(interface=f"#include <{name}>")
        self.name = name

    def __repr__(self) -> str:
        return f"<SystemHeader {self.name}>"


_system_headers: dict[str, SystemHeader] = {}


def system_header(name: str) -> SystemHeader:
    """Shared entity for a system header, so each is included once."""
    if name not in _system_headers:
        _system_headers[name] = SystemHeader(name)
    return _system_headers[name]
