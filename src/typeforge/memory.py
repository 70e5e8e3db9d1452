"""Pluggable memory allocators used by generated containers."""

from __future__ import annotations

from .entity import Code, system_header
from .std import STDLIB_H


class Allocator(Code):
    """Heap allocation through the C standard library."""

    def __init__(self):
        super().__init__(dependencies=(STDLIB_H,))

    def allocate(self, type, count="1", zero: bool = False) -> str:
        """C expression yielding storage for *count* values of *type*."""
        if zero:
            return f"({type}*)calloc({count}, sizeof({type}))"
        return f"({type}*)malloc(({count})*sizeof({type}))"

    def free(self, pointer) -> str:
        return f"free({pointer})"


class BDWAllocator(Allocator):
    """Allocation through the Boehm-Demers-Weiser garbage collector.

    ``GC_malloc`` always returns cleared memory, so zero-filling needs no
    separate call.
    """

    def __init__(self):
        Code.__init__(self, dependencies=(system_header("gc.h"),))

    def allocate(self, type, count="1", zero: bool = False) -> str:
        return f"({type}*)GC_malloc(({count})*sizeof({type}))"

    def free(self, pointer) -> str:
        return f"GC_free({pointer})"


DEFAULT_ALLOCATOR = Allocator()
