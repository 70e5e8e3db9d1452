"""HashSet: separate-chaining hash set with a forward range."""

from __future__ import annotations

from ..entity import PUBLIC, Builder
from ..errors import ConfigurationError
from ..hasher import Hasher
from ..memory import Allocator
from ..naming import Name
from ..ranges import ForwardRange
from ..types import Type
from .container import Container, Hashable

# Minimum number of buckets of a set
MIN_BUCKETS = 16


class HashSetRange(ForwardRange):
    """Walks the buckets in order and each bucket chain front to back."""

    def _type_declaration(self, stream: Builder):
        stream.write(f"""
typedef struct {{
    {self.iterable.const_ptr_type} iterable;
    const {self.iterable.node}* node;
    size_t bucket;
}} {self};
""")

    def _configure(self):
        super()._configure()
        self.def_method("_advance", [("self", self)], inline=True).define("""
while(!self->node && self->bucket < self->iterable->bucket_count) {
    self->node = self->iterable->buckets[self->bucket++];
}
""")
        self["custom_create"].define(f"""
assert(self);
assert(iterable);
self->iterable = iterable;
self->node = NULL;
self->bucket = 0;
{self['_advance']}(self);
""")
        self["empty"].define("""
assert(self);
return self->node == NULL;
""")
        self["pop_front"].define(f"""
assert(!{self['empty']}(self));
self->node = self->node->next_node;
{self['_advance']}(self);
""")
        self["front_view"].define(f"""
assert(!{self['empty']}(self));
return &self->node->element;
""")


class HashSet(Hashable, Container):
    """Unordered collection of distinct hashable elements.

    The bucket array doubles when the element count reaches the bucket
    count, unless capacity management was disabled at creation.
    """

    kind = "hash_set"
    ordered = False
    range_class = HashSetRange

    def __init__(self, signature: Name, element: Type | str, visibility: str = PUBLIC,
                 memory: Allocator | None = None, hasher: Hasher | None = None,
                 salt: int | None = None, set_operations: bool = True):
        self.set_operations = set_operations
        super().__init__(signature, element, visibility, memory, hasher, salt)

    def _build(self):
        if not self.element.hashable:
            raise ConfigurationError(
                f"element type {self.element.signature} of {self.signature} must be hashable")
        self.node = self.identifier("_node")

    def _type_declaration(self, stream: Builder):
        stream.write(f"""
typedef struct {self.node} {self.node};
struct {self.node} {{
    {self.element} element;
    {self.node}* next_node;
}};
/** @brief Hash set of {self.element} values. */
typedef struct {{
    {self.node}** buckets;
    size_t bucket_count, element_count;
    int manage_capacity;
}} {self};
""")

    def _bucket(self, value: str, count: str = "self->bucket_count") -> str:
        return f"({self.element.code(value)} % {count})"

    def _free_node(self, node: str) -> str:
        element = self.element
        teardown = f"{element.destroy(f'{node}->element')};\n" if element.destructible else ""
        return f"{teardown}{self.memory.free(node)};"

    def _configure(self):
        super()._configure()
        value, const, element, node = self, self.const_type, self.element, self.node
        walker = self.range

        self.def_method("custom_create", [("self", value), ("capacity", "size_t"), ("manage_capacity", "int")],
                        name=self.identifier("create_capacity"),
                        doc="Create an empty set with room for capacity elements.").define(lambda: f"""
assert(self);
self->element_count = 0;
self->manage_capacity = manage_capacity;
self->bucket_count = capacity > {MIN_BUCKETS} ? capacity : {MIN_BUCKETS};
self->buckets = {self.memory.allocate(f"{node}*", "self->bucket_count", zero=True)};
""")
        self["default_create"].inline = True
        self["default_create"].define(lambda: f"""
{self['custom_create']}(self, 0, 1);
""")
        self["destroy"].define(lambda: f"""
size_t index;
assert(self);
for(index = 0; index < self->bucket_count; ++index) {{
    {node}* node = self->buckets[index];
    while(node) {{
        {node}* this_node = node;
        node = node->next_node;
        {self._free_node("this_node")}
    }}
}}
{self.memory.free("self->buckets")};
""")
        self["copy"].define(lambda: f"""
{walker} r;
assert(self);
assert(source);
{self['custom_create']}(self, source->bucket_count, source->manage_capacity);
for(r = {walker['get_range']}(source); !{walker['empty']}(&r); {walker['pop_front']}(&r)) {{
    {self['put']}(self, *{walker['front_view']}(&r));
}}
""")
        self["move"].define(lambda: f"""
assert(self);
assert(source);
*self = *source;
{self['default_create']}(source);
""")
        self["equal"].define(lambda: f"""
{walker} r;
assert(self);
assert(other);
if(self->element_count != other->element_count) return 0;
for(r = {walker['get_range']}(self); !{walker['empty']}(&r); {walker['pop_front']}(&r)) {{
    if(!{self['contains']}(other, *{walker['front_view']}(&r))) return 0;
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
        self["lookup"].define(lambda: f"""
const {node}* node;
assert(self);
for(node = self->buckets[{self._bucket("value")}]; node; node = node->next_node) {{
    if({element.equal("node->element", "value")}) return &node->element;
}}
return NULL;
""")
        self.def_method("view", [("self", const), ("value", element.const_type)], element.const_ptr_type,
                        inline=True, doc="Return a reference to the element equal to value or NULL.").define(f"""
return {self['lookup']}(self, value);
""")
        self.def_method("_rehash", [("self", value)]).define(lambda: f"""
size_t index, bucket_count;
{node}** buckets;
assert(self);
bucket_count = self->bucket_count * 2;
buckets = {self.memory.allocate(f"{node}*", "bucket_count", zero=True)};
for(index = 0; index < self->bucket_count; ++index) {{
    {node}* node = self->buckets[index];
    while(node) {{
        {node}* next_node = node->next_node;
        size_t bucket = {self._bucket("node->element", "bucket_count")};
        node->next_node = buckets[bucket];
        buckets[bucket] = node;
        node = next_node;
    }}
}}
{self.memory.free("self->buckets")};
self->buckets = buckets;
self->bucket_count = bucket_count;
""")
        self.def_method("put", [("self", value), ("value", element.const_type)], "int",
                        guard=lambda: self.element.copyable,
                        doc="Insert a copy of value unless an equal element exists; return whether it was inserted.").define(lambda: f"""
{node}* node;
size_t bucket;
assert(self);
if({self['contains']}(self, value)) return 0;
if(self->manage_capacity && self->element_count >= self->bucket_count) {self['_rehash']}(self);
bucket = {self._bucket("value")};
node = {self.memory.allocate(node)};
{element.copy("node->element", "value")};
node->next_node = self->buckets[bucket];
self->buckets[bucket] = node;
++self->element_count;
return 1;
""")
        self.def_method("remove", [("self", value), ("value", element.const_type)], "int",
                        doc="Remove the element equal to value; return whether one was found.").define(lambda: f"""
{node} *node, *prev_node = NULL;
size_t bucket;
assert(self);
bucket = {self._bucket("value")};
for(node = self->buckets[bucket]; node; prev_node = node, node = node->next_node) {{
    if({element.equal("node->element", "value")}) {{
        if(prev_node) prev_node->next_node = node->next_node;
        else self->buckets[bucket] = node->next_node;
        --self->element_count;
        {self._free_node("node")}
        return 1;
    }}
}}
return 0;
""")
        self.def_method("force", [("self", value), ("value", element.const_type)], "int",
                        guard=lambda: self.element.copyable,
                        doc="Insert a copy of value replacing an equal element; return whether one was replaced.").define(f"""
int removed;
assert(self);
removed = {self['remove']}(self, value);
{self['put']}(self, value);
return removed;
""")
        if self.set_operations:
            self._configure_set_operations()

    def _configure_set_operations(self):
        value, const, node = self, self.const_type, self.node
        walker = self.range
        loop = f"for(r = {walker['get_range']}({{0}}); !{walker['empty']}(&r); {walker['pop_front']}(&r))"
        front = f"*{walker['front_view']}(&r)"

        self.def_method("subset", [("self", const), ("other", const)], "int", refs=2,
                        doc="Test whether every element of self is contained in other.").define(lambda: f"""
{walker} r;
assert(self);
assert(other);
if(self->element_count > other->element_count) return 0;
{loop.format("self")} {{
    if(!{self['contains']}(other, {front})) return 0;
}}
return 1;
""")
        self.def_method("disjoint", [("self", const), ("other", const)], "int", refs=2,
                        doc="Test whether self and other share no element.").define(lambda: f"""
{walker} r;
assert(self);
assert(other);
{loop.format("self")} {{
    if({self['contains']}(other, {front})) return 0;
}}
return 1;
""")
        self.def_method("join", [("self", value), ("other", const)], refs=2,
                        guard=lambda: self.element.copyable,
                        doc="Add copies of all elements of other (union).").define(lambda: f"""
{walker} r;
assert(self);
assert(other);
{loop.format("other")} {{
    {self['put']}(self, {front});
}}
""")
        self.def_method("subtract", [("self", value), ("other", const)], refs=2,
                        doc="Remove all elements contained in other (difference).").define(lambda: f"""
{walker} r;
assert(self);
assert(other);
{loop.format("other")} {{
    {self['remove']}(self, {front});
}}
""")
        self.def_method("intersect", [("self", value), ("other", const)], refs=2,
                        doc="Keep only the elements also contained in other (intersection).").define(lambda: f"""
size_t index;
assert(self);
assert(other);
for(index = 0; index < self->bucket_count; ++index) {{
    {node}** link = &self->buckets[index];
    while(*link) {{
        {node}* node = *link;
        if({self['contains']}(other, node->element)) {{
            link = &node->next_node;
        }} else {{
            *link = node->next_node;
            --self->element_count;
            {self._free_node("node")}
        }}
    }}
}}
""")
        self.def_method("disjoin", [("self", value), ("other", const)], refs=2,
                        guard=lambda: self.element.copyable,
                        doc="Keep the elements contained in exactly one of self and other (symmetric difference).").define(lambda: f"""
{walker} r;
assert(self);
assert(other);
{loop.format("other")} {{
    if(!{self['remove']}(self, {front})) {self['put']}(self, {front});
}}
""")
