"""Typed C function descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .errors import ConfigurationError
from .naming import Name


@dataclass(frozen=True)
class Parameter:
    name: str
    type: Any
    """Type descriptor or plain C type text; rendered with ``str()``."""

    by_reference: bool = False

    def __str__(self) -> str:
        pointer = "*" if self.by_reference else ""
        return f"{self.type}{pointer} {self.name}"


class Function:
    """A C function signature with a rebindable display name.

    The first ``refs`` parameters are passed by reference: they are declared
    as pointers and call sites take the address of the matching arguments.
    """

    def __init__(self, name: Name, parameters: Iterable[tuple[str, Any]] = (),
                 result: Any = "void", refs: int = 0):
        parameters = list(parameters)
        if refs < 0 or refs > len(parameters):
            raise ConfigurationError(
                f"function '{name}' converts {refs} of {len(parameters)} parameters to references")
        self._name = name
        self.parameters = tuple(
            Parameter(pname, ptype, index < refs)
            for index, (pname, ptype) in enumerate(parameters))
        self.result = result
        self.refs = refs

    @property
    def name(self) -> str:
        return str(self._name)

    def rename(self, name: Name):
        self._name = name

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def prototype(self) -> str:
        params = ", ".join(str(p) for p in self.parameters) or "void"
        return f"{self.result} {self.name}({params})"

    def call(self, *arguments: Any) -> str:
        """Render a call expression, taking addresses of reference arguments."""
        if len(arguments) != self.arity:
            raise ConfigurationError(
                f"{self.name} expects {self.arity} arguments, got {len(arguments)}")
        rendered = [
            f"&({argument})" if parameter.by_reference else str(argument)
            for parameter, argument in zip(self.parameters, arguments)
        ]
        return f"{self.name}({', '.join(rendered)})"

    __call__ = call

    def compatible_with(self, arity: int, refs: int) -> bool:
        return self.arity == arity and self.refs == refs

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Function({self.prototype!r})"
