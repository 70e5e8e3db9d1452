"""Identifier synthesis for generated C symbols.

Every generated function and type name is derived from a type prefix and a
logical operation name, e.g. ``decorate("IntVector", "push_back")`` gives
``IntVectorPushBack``.  Leading underscores on the logical name mark
internal symbols and survive decoration unless the prefix is already
internal.
"""

from __future__ import annotations

import re
from typing import Callable, Union

# Trailing marker used by in-place variants (``sort!``, ``empty?``)
_MARKER_RE = re.compile(r"[!?]$")
_LEADING_RE = re.compile(r"^(_+)")


def decorate(prefix: str, name: str) -> str:
    """Build the identifier for logical operation *name* of type *prefix*."""
    name = _MARKER_RE.sub("", str(name), count=1)
    match = _LEADING_RE.match(name)
    underscores = match.group(1) if match else ""
    name = name[len(underscores):]
    camel = "".join(segment[:1].upper() + segment[1:] for segment in name.split("_"))
    identifier = f"{prefix}{camel}"
    if underscores and not prefix.startswith("_"):
        identifier = underscores + identifier
    return identifier


class Once:
    """A string computed on first use and frozen afterwards.

    Used for identifiers derived from a prefix that is not final at the time
    the owning object is constructed.
    """

    def __init__(self, compute: Callable[[], str]):
        self._compute = compute
        self._value: str | None = None

    def __str__(self) -> str:
        if self._value is None:
            self._value = str(self._compute())
            self._compute = None
        return self._value

    def __repr__(self) -> str:
        return f"Once({str(self)!r})"


Name = Union[str, Once]
