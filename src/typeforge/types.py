"""Type descriptors and the capability model.

A type descriptor names a C type and knows which special operations the
type supports and how to render each of them as a C expression.  Containers
query the capabilities of their element types to decide which of their own
operations to generate.
"""

from __future__ import annotations

from enum import Enum
from functools import cached_property
from typing import Any, Iterable

from .entity import PUBLIC, Builder, Entity
from .errors import ConfigurationError, UnknownOperationError
from .functions import Function
from .naming import Name


class Operation(Enum):
    """Special operations a type may declare."""

    DEFAULT_CREATE = "default_create"
    CUSTOM_CREATE = "custom_create"
    DESTROY = "destroy"
    COPY = "copy"
    MOVE = "move"
    EQUAL = "equal"
    COMPARE = "compare"
    CODE = "hash_code"

    @classmethod
    def parse(cls, value: Any) -> Operation:
        if isinstance(value, cls):
            return value
        key = str(value)
        if key == "code":
            return cls.CODE
        try:
            return cls(key)
        except ValueError:
            raise UnknownOperationError(key) from None


class Capability(Enum):
    DEFAULT_CONSTRUCTIBLE = "default_constructible"
    CUSTOM_CONSTRUCTIBLE = "custom_constructible"
    DESTRUCTIBLE = "destructible"
    COPYABLE = "copyable"
    MOVABLE = "movable"
    COMPARABLE = "comparable"
    ORDERABLE = "orderable"
    HASHABLE = "hashable"

    @classmethod
    def parse(cls, value: Any) -> Capability:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            raise UnknownOperationError(str(value)) from None


# Operation whose declaration a capability requires
DECLARED_BY = {
    Capability.DEFAULT_CONSTRUCTIBLE: Operation.DEFAULT_CREATE,
    Capability.CUSTOM_CONSTRUCTIBLE: Operation.CUSTOM_CREATE,
    Capability.DESTRUCTIBLE: Operation.DESTROY,
    Capability.COPYABLE: Operation.COPY,
    Capability.MOVABLE: Operation.MOVE,
    Capability.COMPARABLE: Operation.EQUAL,
    Capability.ORDERABLE: Operation.COMPARE,
    Capability.HASHABLE: Operation.CODE,
}


class Type(Entity):
    """Base descriptor of a C type usable as a container element."""

    def __init__(self, signature: Name, visibility: str = PUBLIC):
        super().__init__(visibility)
        self._signature = signature
        self._capabilities: dict[Capability, bool] = {}

    @property
    def signature(self) -> str:
        return str(self._signature)

    def __str__(self) -> str:
        return self.signature

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._signature}>"

    @cached_property
    def const_type(self) -> str:
        return f"const {self.signature}"

    @cached_property
    def ptr_type(self) -> str:
        return f"{self.signature}*"

    @cached_property
    def const_ptr_type(self) -> str:
        return f"const {self.signature}*"

    # --- Capabilities ---

    def declares(self, operation: Operation | str) -> bool:
        raise NotImplementedError

    def supports(self, capability: Capability | str) -> bool:
        """Whether the type has *capability*; computed once and memoized."""
        capability = Capability.parse(capability)
        if capability not in self._capabilities:
            self._capabilities[capability] = bool(self._capability(capability))
        return self._capabilities[capability]

    def _capability(self, capability: Capability) -> bool:
        declared = self.declares(DECLARED_BY[capability])
        if capability is Capability.HASHABLE:
            return declared and self.comparable
        return declared

    @property
    def default_constructible(self) -> bool:
        return self.supports(Capability.DEFAULT_CONSTRUCTIBLE)

    @property
    def custom_constructible(self) -> bool:
        return self.supports(Capability.CUSTOM_CONSTRUCTIBLE)

    @property
    def destructible(self) -> bool:
        """Whether values need explicit teardown."""
        return self.supports(Capability.DESTRUCTIBLE)

    @property
    def copyable(self) -> bool:
        return self.supports(Capability.COPYABLE)

    @property
    def movable(self) -> bool:
        return self.supports(Capability.MOVABLE)

    @property
    def comparable(self) -> bool:
        return self.supports(Capability.COMPARABLE)

    @property
    def orderable(self) -> bool:
        return self.supports(Capability.ORDERABLE)

    @property
    def hashable(self) -> bool:
        return self.supports(Capability.HASHABLE)

    # --- Rendering of special operations ---

    def render(self, operation: Operation | str, *arguments: Any) -> str:
        operation = Operation.parse(operation)
        if not self.declares(operation):
            raise ConfigurationError(f"{self.signature} does not declare {operation.value}")
        return self._render(operation, *arguments)

    def _render(self, operation: Operation, *arguments: Any) -> str:
        raise NotImplementedError

    def default_create(self, value) -> str:
        return self.render(Operation.DEFAULT_CREATE, value)

    def custom_create(self, value, *arguments) -> str:
        return self.render(Operation.CUSTOM_CREATE, value, *arguments)

    def destroy(self, value) -> str:
        return self.render(Operation.DESTROY, value)

    def copy(self, value, source) -> str:
        return self.render(Operation.COPY, value, source)

    def move(self, value, source) -> str:
        return self.render(Operation.MOVE, value, source)

    def equal(self, value, other) -> str:
        return self.render(Operation.EQUAL, value, other)

    def compare(self, value, other) -> str:
        return self.render(Operation.COMPARE, value, other)

    def code(self, value) -> str:
        return self.render(Operation.CODE, value)


class Primitive(Type):
    """A C scalar type with value semantics.

    Every operation is a plain C expression; nothing needs teardown, so
    primitives are never destructible.
    """

    _TEMPLATES = {
        Operation.DEFAULT_CREATE: "(({0}) = 0)",
        Operation.CUSTOM_CREATE: "(({0}) = ({1}))",
        Operation.COPY: "(({0}) = ({1}))",
        Operation.MOVE: "(({0}) = ({1}))",
        Operation.EQUAL: "(({0}) == ({1}))",
        Operation.COMPARE: "(({0}) == ({1}) ? 0 : (({0}) > ({1}) ? +1 : -1))",
        Operation.CODE: "((size_t)({0}))",
    }

    def __init__(self, signature: str, headers: Iterable[Entity] = ()):
        super().__init__(signature)
        self.depends_on(*headers)

    def declares(self, operation: Operation | str) -> bool:
        return Operation.parse(operation) in self._TEMPLATES

    def _render(self, operation: Operation, *arguments: Any) -> str:
        template = self._TEMPLATES[operation]
        expected = 2 if "{1}" in template else 1
        if len(arguments) != expected:
            raise ConfigurationError(
                f"{operation.value} on {self.signature} takes {expected} arguments")
        return template.format(*arguments)


class Synthetic(Type):
    """A user type whose operations are implemented by user-supplied C functions.

    Operations are given by name (a string, wrapped into a ``Function`` with
    the conventional signature) or as ready ``Function`` objects, whose
    arity must match the slot.  ``custom_create`` has no conventional
    signature and must be a ``Function``.
    """

    def __init__(self, signature: str, interface: str = "", declarations: str = "",
                 definitions: str = "", dependencies: Iterable[Entity] = (),
                 visibility: str = PUBLIC, **operations: str | Function):
        super().__init__(signature, visibility)
        self._interface_code = interface
        self._declaration_code = declarations
        self._definition_code = definitions
        self.depends_on(*dependencies)
        self._functions: dict[Operation, Function] = {}
        for key, function in operations.items():
            if function is None:
                continue
            operation = Operation.parse(key)
            self._functions[operation] = self._slot(operation, function)

    def _conventional(self, operation: Operation, name: str) -> Function:
        value, const = self.signature, self.const_type
        if operation in (Operation.DEFAULT_CREATE, Operation.DESTROY):
            return Function(name, [("self", value)], refs=1)
        if operation in (Operation.COPY, Operation.MOVE):
            return Function(name, [("self", value), ("source", const)], refs=2)
        if operation is Operation.EQUAL:
            return Function(name, [("self", const), ("other", const)], "int", refs=2)
        if operation is Operation.COMPARE:
            return Function(name, [("self", const), ("other", const)], "int", refs=2)
        if operation is Operation.CODE:
            return Function(name, [("self", const)], "size_t", refs=1)
        raise ConfigurationError(
            f"{operation.value} of {self.signature} must be given as a Function")

    def _slot(self, operation: Operation, function: str | Function) -> Function:
        if not isinstance(function, Function):
            return self._conventional(operation, str(function))
        if operation is Operation.CUSTOM_CREATE:
            if function.refs < 1:
                raise ConfigurationError(
                    f"{function.name} cannot initialize {self.signature}: first parameter must be a reference")
            return function
        expected = self._conventional(operation, function.name)
        if not function.compatible_with(expected.arity, expected.refs):
            raise ConfigurationError(
                f"{function.name} is incompatible with the {operation.value} slot of {self.signature}")
        return function

    def function(self, operation: Operation | str) -> Function:
        operation = Operation.parse(operation)
        if operation not in self._functions:
            raise ConfigurationError(f"{self.signature} does not declare {operation.value}")
        return self._functions[operation]

    def declares(self, operation: Operation | str) -> bool:
        return Operation.parse(operation) in self._functions

    def _render(self, operation: Operation, *arguments: Any) -> str:
        return self._functions[operation].call(*arguments)

    def interface_declarations(self, stream: Builder):
        stream.write(self._interface_code)

    def forward_declarations(self, stream: Builder):
        stream.write(self._declaration_code)

    def definitions(self, stream: Builder):
        stream.write(self._definition_code)
