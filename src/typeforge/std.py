"""Standard C scalar types and the system headers they need."""

from __future__ import annotations

import re

from .entity import system_header
from .errors import ConfigurationError
from .types import Primitive, Type

STDDEF_H = system_header("stddef.h")
STDLIB_H = system_header("stdlib.h")
STRING_H = system_header("string.h")
ASSERT_H = system_header("assert.h")
LIMITS_H = system_header("limits.h")
STDBOOL_H = system_header("stdbool.h")
STDINT_H = system_header("stdint.h")

# Canonical spelling -> headers required to use the type
_CATALOGUE = {
    "char": (),
    "signed char": (),
    "unsigned char": (),
    "short": (),
    "unsigned short": (),
    "int": (),
    "unsigned": (),
    "long": (),
    "unsigned long": (),
    "long long": (),
    "unsigned long long": (),
    "float": (),
    "double": (),
    "long double": (),
    "size_t": (STDDEF_H,),
    "ptrdiff_t": (STDDEF_H,),
    "_Bool": (),
    "bool": (STDBOOL_H,),
    "int8_t": (STDINT_H,),
    "uint8_t": (STDINT_H,),
    "int16_t": (STDINT_H,),
    "uint16_t": (STDINT_H,),
    "int32_t": (STDINT_H,),
    "uint32_t": (STDINT_H,),
    "int64_t": (STDINT_H,),
    "uint64_t": (STDINT_H,),
    "intptr_t": (STDINT_H,),
    "uintptr_t": (STDINT_H,),
}

_ALIASES = {
    "short int": "short",
    "signed short": "short",
    "unsigned short int": "unsigned short",
    "signed": "int",
    "signed int": "int",
    "unsigned int": "unsigned",
    "long int": "long",
    "signed long": "long",
    "unsigned long int": "unsigned long",
    "long long int": "long long",
    "unsigned long long int": "unsigned long long",
}

_primitives: dict[str, Primitive] = {}


def _normalize(name: str) -> str:
    name = re.sub(r"\s+", " ", name.strip())
    return _ALIASES.get(name, name)


def primitive(name: str) -> Primitive:
    """Shared descriptor of the standard C type *name*."""
    key = _normalize(name)
    if key not in _CATALOGUE:
        raise ConfigurationError(f"'{name}' is not a standard C type")
    if key not in _primitives:
        _primitives[key] = Primitive(key, _CATALOGUE[key])
    return _primitives[key]


def is_primitive(name: str) -> bool:
    return _normalize(name) in _CATALOGUE


def coerce(value: Type | str) -> Type:
    """Turn a type descriptor or the name of a standard C type into a descriptor."""
    if isinstance(value, Type):
        return value
    if isinstance(value, str):
        return primitive(value)
    raise ConfigurationError(f"cannot use {value!r} as a type")
