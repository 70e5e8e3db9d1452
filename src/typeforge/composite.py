"""Composite types: C structs with a table of generated methods.

A composite owns a table of ``Method`` objects keyed by logical name.  The
special operations (create, destroy, copy, move, equal, compare, hash code)
are ordinary entries of that table, each guarded by the capability that
makes it meaningful; a method whose guard fails is neither emitted nor
callable.  The table is populated by ``_configure()`` on first use, after
the whole object graph is constructed.
"""

from __future__ import annotations

import textwrap
from typing import Any, Callable, Iterable

from .entity import PUBLIC, Builder, Code
from .errors import ConfigurationError, UnknownOperationError
from .functions import Function
from .hasher import DEFAULT_HASHER, Hasher, kind_salt
from .memory import DEFAULT_ALLOCATOR, Allocator
from .naming import Name, Once, decorate
from .std import ASSERT_H, STDDEF_H, STRING_H
from .types import Capability, Operation, Type

PRELUDE = Code(interface="""
#ifndef TF_EXTERN
    #ifdef __cplusplus
        #define TF_EXTERN extern "C"
    #else
        #define TF_EXTERN extern
    #endif
#endif
#ifndef TF_INLINE
    #define TF_INLINE static inline
#endif
#ifndef TF_STATIC
    #define TF_STATIC static
#endif
""", dependencies=(ASSERT_H, STDDEF_H, STRING_H))


class Method(Function):
    """A generated function belonging to a composite type."""

    def __init__(self, owner: Composite, key: str, name: Name, parameters, result: Any = "void",
                 refs: int = 1, inline: bool = False, private: bool = False,
                 guard: Callable[[], bool] | None = None, doc: str = ""):
        super().__init__(name, parameters, result, refs)
        self.owner = owner
        self.key = key
        self.inline = inline
        self.private = private
        self.doc = doc
        self.body: str | Callable[[], str] | None = None
        self._guard = guard
        self._live: bool | None = None

    def define(self, body: str | Callable[[], str]) -> Method:
        """Set the C body; a callable is rendered only if the method is live."""
        self.body = body
        return self

    @property
    def live(self) -> bool:
        """Whether the method is generated; the guard is evaluated once."""
        if self._live is None:
            self._live = True if self._guard is None else bool(self._guard())
        return self._live

    def _doc_comment(self) -> str:
        if self.private:
            return "/** @private */"
        if not self.doc:
            return ""
        return f"/** @brief {self.doc} */"

    def declaration(self) -> str:
        macro = "TF_INLINE" if self.inline else "TF_EXTERN"
        comment = self._doc_comment()
        prototype = f"{macro} {self.prototype};"
        return f"{comment}\n{prototype}" if comment else prototype

    def definition(self) -> str:
        if self.body is None:
            raise ConfigurationError(f"method {self.name} of {self.owner.signature} has no body")
        body = self.body() if callable(self.body) else self.body
        body = textwrap.indent(textwrap.dedent(body).strip("\n"), "    ")
        prefix = "TF_INLINE " if self.inline else ""
        return f"{prefix}{self.prototype} {{\n{body}\n}}"


class Composite(Type):
    """Base of generated struct types (containers, ranges, internal nodes)."""

    kind = "composite"
    owns_storage = False

    def __init__(self, signature: Name, visibility: str = PUBLIC,
                 memory: Allocator | None = None, hasher: Hasher | None = None,
                 salt: int | None = None):
        super().__init__(signature, visibility)
        self.memory = memory or DEFAULT_ALLOCATOR
        self.hasher = hasher or DEFAULT_HASHER
        self.salt = kind_salt(self.kind) if salt is None else salt
        self._table: dict[str, Method] | None = None
        self._configuring = False
        self.depends_on(PRELUDE, self.memory, self.hasher)

    @property
    def prefix(self) -> str:
        return self.signature

    def decorate(self, name: str) -> str:
        return decorate(self.prefix, name)

    def identifier(self, name: str) -> Once:
        """Lazily decorated identifier of an auxiliary symbol."""
        return Once(lambda: self.decorate(name))

    # --- Method table ---

    @property
    def methods(self) -> dict[str, Method]:
        if self._table is None:
            self._table = {}
            self._configuring = True
            try:
                self._configure()
            finally:
                self._configuring = False
        return self._table

    def __getitem__(self, key: str) -> Method:
        methods = self.methods
        if key not in methods:
            raise UnknownOperationError(key, self.signature)
        return methods[key]

    def __contains__(self, key: str) -> bool:
        return key in self.methods

    def live_methods(self) -> list[Method]:
        return [method for method in self.methods.values() if method.live]

    def def_method(self, key: str, parameters: Iterable[tuple[str, Any]], result: Any = "void",
                   refs: int = 1, name: Name | None = None, inline: bool = False,
                   guard: Callable[[], bool] | None = None, doc: str = "") -> Method:
        if not self._configuring:
            raise ConfigurationError(
                f"methods of {self.signature} can only be defined while it is configured")
        if key in self._table:
            raise ConfigurationError(f"method '{key}' of {self.signature} is already defined")
        if name is None:
            name = self.identifier(key)
        method = Method(self, key, name, parameters, result, refs, inline,
                        private=key.startswith("_"), guard=guard, doc=doc)
        self._table[key] = method
        return method

    def _drop_method(self, key: str):
        self._table.pop(key, None)

    def _configure(self):
        """Define the special methods; subclasses add theirs and supply bodies."""
        value, const = self, self.const_type
        self.def_method(Operation.DEFAULT_CREATE.value, [("self", value)], name=self.identifier("create"),
                        guard=lambda: self.default_constructible, doc="Create an empty value.")
        self.def_method(Operation.DESTROY.value, [("self", value)],
                        guard=lambda: self.destructible, doc="Release all resources held by the value.")
        self.def_method(Operation.COPY.value, [("self", value), ("source", const)], refs=2,
                        guard=lambda: self.copyable, doc="Create a deep copy of source.")
        self.def_method(Operation.MOVE.value, [("self", value), ("source", value)], refs=2,
                        guard=lambda: self.movable, doc="Transfer the contents of source, leaving it empty.")
        self.def_method(Operation.EQUAL.value, [("self", const), ("other", const)], "int", refs=2,
                        guard=lambda: self.comparable, doc="Test two values for equality.")
        self.def_method(Operation.COMPARE.value, [("self", const), ("other", const)], "int", refs=2,
                        guard=lambda: self.orderable, doc="Three-way comparison of two values.")
        self.def_method(Operation.CODE.value, [("self", const)], "size_t",
                        guard=lambda: self.hashable, doc="Compute the hash code of the value.")

    # --- Capabilities ---

    def members(self) -> tuple[Type, ...]:
        """Constituent types whose capabilities the composite inherits."""
        return ()

    def declares(self, operation: Operation | str) -> bool:
        return Operation.parse(operation).value in self.methods

    def _capability(self, capability: Capability) -> bool:
        if capability is Capability.DESTRUCTIBLE:
            return self.declares(Operation.DESTROY) and (
                self.owns_storage or any(member.destructible for member in self.members()))
        return super()._capability(capability)

    def _render(self, operation: Operation, *arguments: Any) -> str:
        method = self.methods[operation.value]
        if not method.live:
            raise ConfigurationError(
                f"{self.signature} does not support {operation.value} with its current element types")
        return method.call(*arguments)

    # --- Code regions ---

    def _type_declaration(self, stream: Builder):
        raise NotImplementedError

    def _static_definitions(self, stream: Builder):
        pass

    def interface_declarations(self, stream: Builder):
        self._type_declaration(stream)

    def interface_definitions(self, stream: Builder):
        methods = self.live_methods()
        for method in methods:
            stream.write(method.declaration())
        for method in methods:
            if method.inline:
                stream.write(method.definition())

    def exported_declarations(self, stream: Builder):
        for method in self.live_methods():
            if not method.inline:
                stream.write(method.declaration())

    def definitions(self, stream: Builder):
        self._static_definitions(stream)
        for method in self.live_methods():
            if not method.inline:
                stream.write(method.definition())
