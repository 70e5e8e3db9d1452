"""Incremental hash accumulation for hashable containers."""

from __future__ import annotations

import hashlib

from .entity import Code
from .std import LIMITS_H, STDDEF_H

SEED_MACRO = "TF_HASHER_SEED"

_SEED_DEFINITION = f"""
#ifndef {SEED_MACRO}
    #define {SEED_MACRO} 0
#endif
"""


class Hasher(Code):
    """Rotate-and-xor accumulator over ``size_t`` state.

    The seed is a C macro so that builds may override it at compile time.
    """

    type = "size_t"

    def __init__(self):
        super().__init__(interface=_SEED_DEFINITION, dependencies=(STDDEF_H, LIMITS_H))

    def init(self, state: str, salt: int = 0) -> str:
        return f"{state} = ({SEED_MACRO} ^ (size_t){salt}U)"

    def update(self, state: str, value: str) -> str:
        return f"{state} = (({state} << 1) | ({state} >> (sizeof({state})*CHAR_BIT - 1))) ^ ({value})"

    def finish(self, state: str) -> str:
        return state


def kind_salt(kind: str) -> int:
    """Stable 32-bit salt derived from a container kind name."""
    return int(hashlib.sha256(kind.encode("utf-8")).hexdigest()[:8], 16)


DEFAULT_HASHER = Hasher()
