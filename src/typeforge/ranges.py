"""Range types: non-owning cursors over containers.

Ranges form a fixed ladder of tiers, each adding operations to the one
below it:

    Input          create, empty, pop_front, front_view, front
    Forward        + save
    Bidirectional  + pop_back, back_view, back
    RandomAccess   + size, view, get

``front``, ``back`` and ``get`` return copies and exist only for copyable
elements.  Concrete ranges (one per container kind) supply the bodies of
the traversal primitives; the copying accessors are generic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .composite import Composite

if TYPE_CHECKING:
    from .containers.container import Container


class Range(Composite):
    """Base range: constructible only from a reference to its iterable."""

    kind = "range"
    inline = True

    def __init__(self, iterable: Container):
        super().__init__(iterable.identifier("range"), iterable.visibility,
                         iterable.memory, iterable.hasher)
        self.iterable = iterable
        self.depends_on(iterable)

    @property
    def element(self):
        return self.iterable.element

    def _configure(self):
        iterable = self.iterable
        self.def_method("custom_create", [("self", self), ("iterable", iterable.const_type)], refs=2,
                        name=self.identifier("create"), inline=self.inline,
                        doc=f"Create a range over all elements of a {iterable.signature}.")
        get_range = self.def_method("get_range", [("iterable", iterable.const_type)], self,
                                    name=iterable.identifier("get_range"), inline=True,
                                    doc="Return a range over all elements of iterable.")
        get_range.define(f"""
{self} range;
assert(iterable);
{self['custom_create']}(&range, iterable);
return range;
""")

    def _copy_out(self, accessor: str, *arguments: str) -> str:
        """Body returning a copy of the element referenced by *accessor*."""
        element = self.element
        call = f"{self[accessor]}({', '.join(('self',) + arguments)})"
        return f"""
{element} result;
const {element}* e = {call};
assert(e);
{element.copy("result", "*e")};
return result;
"""


class InputRange(Range):
    def _configure(self):
        super()._configure()
        value, const, element = self, self.const_type, self.element
        self.def_method("empty", [("self", const)], "int", inline=self.inline,
                        doc="Test whether the range is exhausted.")
        self.def_method("pop_front", [("self", value)], inline=self.inline,
                        doc="Advance the front position; the range must not be empty.")
        self.def_method("front_view", [("self", const)], element.const_ptr_type, inline=self.inline,
                        doc="Return a reference to the front element.")
        self.def_method("front", [("self", const)], element, inline=True,
                        guard=lambda: self.element.copyable,
                        doc="Return a copy of the front element.").define(lambda: self._copy_out("front_view"))


class ForwardRange(InputRange):
    def _configure(self):
        super()._configure()
        self.def_method("save", [("self", self), ("origin", self.const_type)], refs=2, inline=True,
                        doc="Clone the current position of origin.").define("""
assert(self);
assert(origin);
*self = *origin;
""")


class BidirectionalRange(ForwardRange):
    def _configure(self):
        super()._configure()
        value, const, element = self, self.const_type, self.element
        self.def_method("pop_back", [("self", value)], inline=self.inline,
                        doc="Retreat the back position; the range must not be empty.")
        self.def_method("back_view", [("self", const)], element.const_ptr_type, inline=self.inline,
                        doc="Return a reference to the back element.")
        self.def_method("back", [("self", const)], element, inline=True,
                        guard=lambda: self.element.copyable,
                        doc="Return a copy of the back element.").define(lambda: self._copy_out("back_view"))


class RandomAccessRange(BidirectionalRange):
    def _configure(self):
        super()._configure()
        const, element = self.const_type, self.element
        self.def_method("size", [("self", const)], "size_t", inline=self.inline,
                        doc="Return the number of elements left in the range.")
        self.def_method("view", [("self", const), ("index", "size_t")], element.const_ptr_type,
                        inline=self.inline, doc="Return a reference to the element at index.")
        self.def_method("get", [("self", const), ("index", "size_t")], element, inline=True,
                        guard=lambda: self.element.copyable,
                        doc="Return a copy of the element at index.").define(lambda: self._copy_out("view", "index"))
