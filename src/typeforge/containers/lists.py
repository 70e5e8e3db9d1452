"""List: a singly linked list with a forward range."""

from __future__ import annotations

from ..entity import Builder
from ..ranges import ForwardRange
from .container import Container, Hashable, Sequential


class ListRange(ForwardRange):
    def _type_declaration(self, stream: Builder):
        stream.write(f"""
typedef struct {{
    const {self.iterable.node}* node;
}} {self};
""")

    def _configure(self):
        super()._configure()
        self["custom_create"].define("""
assert(self);
assert(iterable);
self->node = iterable->head_node;
""")
        self["empty"].define("""
assert(self);
return self->node == NULL;
""")
        self["pop_front"].define(f"""
assert(!{self['empty']}(self));
self->node = self->node->next_node;
""")
        self["front_view"].define(f"""
assert(!{self['empty']}(self));
return &self->node->element;
""")


class List(Sequential, Hashable, Container):
    """Singly linked list; elements are added and removed at the front."""

    kind = "list"
    range_class = ListRange

    def _build(self):
        self.node = self.identifier("_node")

    def _type_declaration(self, stream: Builder):
        stream.write(f"""
typedef struct {self.node} {self.node};
struct {self.node} {{
    {self.element} element;
    {self.node}* next_node;
}};
/** @brief Singly linked list of {self.element} values. */
typedef struct {{
    {self.node}* head_node;
    size_t node_count;
}} {self};
""")

    def _free_node(self, node: str) -> str:
        """Statements releasing *node* together with its element."""
        element = self.element
        teardown = f"{element.destroy(f'{node}->element')};\n" if element.destructible else ""
        return f"{teardown}{self.memory.free(node)};"

    def _configure(self):
        super()._configure()
        value, const, element, node = self, self.const_type, self.element, self.node

        self["default_create"].inline = True
        self["default_create"].define("""
assert(self);
self->head_node = NULL;
self->node_count = 0;
""")
        self["destroy"].define(lambda: f"""
{node}* node;
assert(self);
node = self->head_node;
while(node) {{
    {node}* this_node = node;
    node = node->next_node;
    {self._free_node("this_node")}
}}
""")
        self["copy"].define(lambda: f"""
const {node}* node;
{node}** tail;
assert(self);
assert(source);
{self['default_create']}(self);
tail = &self->head_node;
for(node = source->head_node; node; node = node->next_node) {{
    {node}* new_node = {self.memory.allocate(node)};
    {element.copy("new_node->element", "node->element")};
    new_node->next_node = NULL;
    *tail = new_node;
    tail = &new_node->next_node;
    ++self->node_count;
}}
""")
        self["move"].inline = True
        self["move"].define("""
assert(self);
assert(source);
*self = *source;
source->head_node = NULL;
source->node_count = 0;
""")
        self["equal"].define(lambda: f"""
const {node} *lt, *rt;
assert(self);
assert(other);
if(self->node_count != other->node_count) return 0;
for(lt = self->head_node, rt = other->head_node; lt && rt; lt = lt->next_node, rt = rt->next_node) {{
    if(!{element.equal("lt->element", "rt->element")}) return 0;
}}
return 1;
""")
        self["size"].define("""
assert(self);
return self->node_count;
""")
        self["empty"].define("""
assert(self);
return self->node_count == 0;
""")
        self.def_method("front_view", [("self", const)], element.const_ptr_type, inline=True,
                        doc="Return a reference to the first element.").define(f"""
assert(!{self['empty']}(self));
return &self->head_node->element;
""")
        self.def_method("front", [("self", const)], element, inline=True,
                        guard=lambda: self.element.copyable,
                        doc="Return a copy of the first element.").define(lambda: f"""
{element} result;
const {element}* e = {self['front_view']}(self);
{element.copy("result", "*e")};
return result;
""")
        self.def_method("push_front", [("self", value), ("value", element.const_type)],
                        guard=lambda: self.element.copyable,
                        doc="Prepend a copy of value.").define(lambda: f"""
{node}* node;
assert(self);
node = {self.memory.allocate(node)};
{element.copy("node->element", "value")};
node->next_node = self->head_node;
self->head_node = node;
++self->node_count;
""")
        self.def_method("pull_front", [("self", value)], element,
                        doc="Unlink the first element and hand it over to the caller.").define(lambda: f"""
{node}* node;
{element} result;
assert(!{self['empty']}(self));
node = self->head_node;
result = node->element;
self->head_node = node->next_node;
--self->node_count;
{self.memory.free("node")};
return result;
""")
        self.def_method("pop_front", [("self", value)],
                        doc="Remove and destroy the first element.").define(lambda: f"""
{node}* node;
assert(!{self['empty']}(self));
node = self->head_node;
self->head_node = node->next_node;
--self->node_count;
{self._free_node("node")}
""")
        self.def_method("remove", [("self", value), ("value", element.const_type)], "int",
                        guard=lambda: self.element.comparable,
                        doc="Remove the first element equal to value; return whether one was found.").define(lambda: f"""
{node} *node, *prev_node = NULL;
assert(self);
for(node = self->head_node; node; prev_node = node, node = node->next_node) {{
    if({element.equal("node->element", "value")}) {{
        if(prev_node) prev_node->next_node = node->next_node;
        else self->head_node = node->next_node;
        --self->node_count;
        {self._free_node("node")}
        return 1;
    }}
}}
return 0;
""")
