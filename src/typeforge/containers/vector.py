"""Vector: a fixed-size contiguous array with a random-access range."""

from __future__ import annotations

from ..entity import Builder
from ..ranges import RandomAccessRange
from ..std import STDLIB_H
from .container import Container, Hashable, Sequential


class VectorRange(RandomAccessRange):
    """Half-open window ``[position, end)`` over a vector."""

    def _type_declaration(self, stream: Builder):
        stream.write(f"""
typedef struct {{
    {self.iterable.const_ptr_type} iterable;
    size_t position, end;
}} {self};
""")

    def _configure(self):
        super()._configure()
        vector = self.iterable
        self["custom_create"].define(f"""
assert(self);
assert(iterable);
self->iterable = iterable;
self->position = 0;
self->end = {vector['size']}(iterable);
""")
        self["empty"].define("""
assert(self);
return self->position >= self->end;
""")
        self["size"].define("""
assert(self);
return self->end - self->position;
""")
        self["pop_front"].define(f"""
assert(!{self['empty']}(self));
++self->position;
""")
        self["pop_back"].define(f"""
assert(!{self['empty']}(self));
--self->end;
""")
        self["front_view"].define(f"""
assert(!{self['empty']}(self));
return {vector['view']}(self->iterable, self->position);
""")
        self["back_view"].define(f"""
assert(!{self['empty']}(self));
return {vector['view']}(self->iterable, self->end - 1);
""")
        self["view"].define(f"""
assert(self);
assert(index < {self['size']}(self));
return {vector['view']}(self->iterable, self->position + index);
""")


class Vector(Sequential, Hashable, Container):
    """Contiguous array of elements whose size changes only through ``resize``."""

    kind = "vector"
    range_class = VectorRange

    def _build(self):
        self.depends_on(STDLIB_H)

    def _type_declaration(self, stream: Builder):
        stream.write(f"""
/** @brief Contiguous array of {self.element} values. */
typedef struct {{
    {self.element.ptr_type} elements;
    size_t element_count;
}} {self};
""")

    def _allocate(self, count: str) -> str:
        return self.memory.allocate(self.element, count)

    def _destroy_elements(self, first: str, last: str) -> str:
        """Loop tearing down ``elements[first..last)`` if elements need it."""
        element = self.element
        if not element.destructible:
            return ""
        return f"""
{{
    size_t slot;
    for(slot = {first}; slot < {last}; ++slot) {{
        {element.destroy("self->elements[slot]")};
    }}
}}
"""

    def _static_definitions(self, stream: Builder):
        element = self.element
        if not element.orderable:
            return
        stream.write(f"""
static int {self.identifier("_ascend")}(const void* lp, const void* rp) {{
    const {element}* l = (const {element}*)lp;
    const {element}* r = (const {element}*)rp;
    return {element.compare("*l", "*r")};
}}
static int {self.identifier("_descend")}(const void* lp, const void* rp) {{
    return -{self.identifier("_ascend")}(lp, rp);
}}
""")

    def _configure(self):
        super()._configure()
        value, const, element = self, self.const_type, self.element

        self["default_create"].inline = True
        self["default_create"].define("""
assert(self);
self->element_count = 0;
self->elements = NULL;
""")
        self.def_method("custom_create", [("self", value), ("size", "size_t")], name=self.identifier("create_size"),
                        guard=lambda: self.element.default_constructible,
                        doc="Create a vector of size default-constructed elements.").define(lambda: f"""
size_t index;
assert(self);
if((self->element_count = size) > 0) {{
    self->elements = {self._allocate("size")};
    for(index = 0; index < size; ++index) {{
        {element.default_create("self->elements[index]")};
    }}
}} else {{
    self->elements = NULL;
}}
""")
        self.def_method("create_set", [("self", value), ("size", "size_t"), ("value", element.const_type)],
                        guard=lambda: self.element.copyable,
                        doc="Create a vector of size copies of value.").define(lambda: f"""
size_t index;
assert(self);
if((self->element_count = size) > 0) {{
    self->elements = {self._allocate("size")};
    for(index = 0; index < size; ++index) {{
        {element.copy("self->elements[index]", "value")};
    }}
}} else {{
    self->elements = NULL;
}}
""")
        self["destroy"].define(lambda: f"""
assert(self);
{self._destroy_elements("0", "self->element_count")}
{self.memory.free("self->elements")};
""")
        self["copy"].define(lambda: f"""
size_t index;
assert(self);
assert(source);
if((self->element_count = source->element_count) > 0) {{
    self->elements = {self._allocate("source->element_count")};
    for(index = 0; index < source->element_count; ++index) {{
        {element.copy("self->elements[index]", "source->elements[index]")};
    }}
}} else {{
    self->elements = NULL;
}}
""")
        self["move"].inline = True
        self["move"].define("""
assert(self);
assert(source);
*self = *source;
source->elements = NULL;
source->element_count = 0;
""")
        self["equal"].define(lambda: f"""
size_t index;
assert(self);
assert(other);
if(self->element_count != other->element_count) return 0;
for(index = 0; index < self->element_count; ++index) {{
    if(!{element.equal("self->elements[index]", "other->elements[index]")}) return 0;
}}
return 1;
""")
        self["size"].define("""
assert(self);
return self->element_count;
""")
        self["empty"].define("""
assert(self);
return self->element_count == 0;
""")
        self.def_method("check_position", [("self", const), ("position", "size_t")], "int", inline=True,
                        doc="Test whether position is a valid element index.").define("""
assert(self);
return position < self->element_count;
""")
        self.def_method("view", [("self", const), ("position", "size_t")], element.const_ptr_type, inline=True,
                        doc="Return a reference to the element at position.").define(f"""
assert(self);
assert({self['check_position']}(self, position));
return &(self->elements[position]);
""")
        self.def_method("get", [("self", const), ("position", "size_t")], element, inline=True,
                        guard=lambda: self.element.copyable,
                        doc="Return a copy of the element at position.").define(lambda: f"""
{element} result;
const {element}* e = {self['view']}(self, position);
{element.copy("result", "*e")};
return result;
""")
        self.def_method("set", [("self", value), ("position", "size_t"), ("value", element.const_type)],
                        guard=lambda: self.element.copyable,
                        doc="Replace the element at position with a copy of value.").define(lambda: f"""
assert(self);
assert({self['check_position']}(self, position));
{self._destroy_elements("position", "position + 1")}
{element.copy("self->elements[position]", "value")};
""")
        self.def_method("resize", [("self", value), ("new_size", "size_t")],
                        guard=lambda: self.element.default_constructible,
                        doc="Grow or shrink the vector, default-constructing new elements.").define(lambda: f"""
size_t index, size;
assert(self);
size = self->element_count;
if(size != new_size) {{
    {element.ptr_type} elements = NULL;
    if(new_size > 0) {{
        elements = {self._allocate("new_size")};
        for(index = 0; index < size && index < new_size; ++index) {{
            elements[index] = self->elements[index];
        }}
        for(index = size; index < new_size; ++index) {{
            {element.default_create("elements[index]")};
        }}
    }}
    {self._destroy_elements("new_size", "size")}
    {self.memory.free("self->elements")};
    self->elements = elements;
    self->element_count = new_size;
}}
""")
        self.def_method("sort", [("self", value), ("direction", "int")],
                        guard=lambda: self.element.orderable,
                        doc="Sort elements ascending for positive direction, descending otherwise.").define(lambda: f"""
assert(self);
if(self->element_count > 1) {{
    qsort(self->elements, self->element_count, sizeof({element}),
        direction > 0 ? {self.identifier("_ascend")} : {self.identifier("_descend")});
}}
""")
