"""HashMap: key to element mapping built over an internal HashSet of nodes."""

from __future__ import annotations

from ..composite import Composite
from ..entity import INTERNAL, PUBLIC, Builder
from ..errors import ConfigurationError
from ..hasher import Hasher
from ..memory import Allocator
from ..naming import Name
from ..ranges import ForwardRange
from ..std import coerce
from ..types import Capability, Type
from .container import Container, Sequential
from .sets import HashSet


class MapNode(Composite):
    """A (key, element) pair; equality and hashing consider the key only."""

    kind = "hash_map_node"

    def __init__(self, owner: HashMap):
        super().__init__(owner.identifier("_node"), INTERNAL, owner.memory, owner.hasher, owner.salt)
        self.key = owner.key
        self.element = owner.element
        self.depends_on(self.key, self.element)

    def members(self) -> tuple[Type, ...]:
        return (self.key, self.element)

    def _capability(self, capability: Capability) -> bool:
        if capability in (Capability.COMPARABLE, Capability.HASHABLE):
            return self.key.supports(capability)
        if capability in (Capability.COPYABLE, Capability.CUSTOM_CONSTRUCTIBLE):
            return self.key.copyable and self.element.copyable
        return super()._capability(capability)

    def _type_declaration(self, stream: Builder):
        stream.write(f"""
typedef struct {{
    {self.key} key;
    {self.element} element;
}} {self};
""")

    def _configure(self):
        super()._configure()
        for key in ("default_create", "move", "compare"):
            self._drop_method(key)
        key, element = self.key, self.element

        self.def_method("custom_create", [("self", self), ("key", key.const_type), ("element", element.const_type)],
                        name=self.identifier("create"),
                        guard=lambda: self.custom_constructible).define(lambda: f"""
assert(self);
{key.copy("self->key", "key")};
{element.copy("self->element", "element")};
""")
        self["copy"].define(lambda: f"""
assert(self);
assert(source);
{self['custom_create']}(self, source->key, source->element);
""")
        self["destroy"].define(lambda: "\n".join(
            ["assert(self);"]
            + [f"{member.destroy(f'self->{field}')};"
               for field, member in (("key", key), ("element", element)) if member.destructible]))
        self["equal"].define(lambda: f"""
assert(self);
assert(other);
return {key.equal("self->key", "other->key")};
""")
        self["hash_code"].define(lambda: f"""
assert(self);
return {key.code("self->key")};
""")


class HashMapRange(ForwardRange):
    """Forward range over the map's nodes, exposing elements and keys."""

    # Delegates to the internal set range, which is not visible in the header
    inline = False

    def __init__(self, iterable: HashMap):
        super().__init__(iterable)
        self.depends_on(iterable.set.range)

    def _type_declaration(self, stream: Builder):
        stream.write(f"""
typedef struct {{
    {self.iterable.set.range} range;
}} {self};
""")

    def _configure(self):
        super()._configure()
        inner, key = self.iterable.set.range, self.iterable.key
        self["custom_create"].define(f"""
assert(self);
assert(iterable);
{inner['custom_create']}(&self->range, &iterable->set);
""")
        self["empty"].define(f"""
assert(self);
return {inner['empty']}(&self->range);
""")
        self["pop_front"].define(f"""
assert(self);
{inner['pop_front']}(&self->range);
""")
        self["front_view"].define(f"""
assert(self);
return &{inner['front_view']}(&self->range)->element;
""")
        self.def_method("key_front_view", [("self", self.const_type)], key.const_ptr_type,
                        doc="Return a reference to the key of the front mapping.").define(f"""
assert(self);
return &{inner['front_view']}(&self->range)->key;
""")
        self.def_method("key_front", [("self", self.const_type)], key, inline=True,
                        guard=lambda: self.iterable.key.copyable,
                        doc="Return a copy of the key of the front mapping.").define(lambda: f"""
{key} result;
const {key}* e = {self['key_front_view']}(self);
{key.copy("result", "*e")};
return result;
""")


class HashMap(Sequential, Container):
    """Hash map from keys to elements.

    The map owns an internal set of nodes; ``put`` inserts only new keys
    while ``set`` replaces an existing mapping by removing it first.
    """

    kind = "hash_map"
    range_class = HashMapRange

    def __init__(self, signature: Name, key: Type | str, element: Type | str, visibility: str = PUBLIC,
                 memory: Allocator | None = None, hasher: Hasher | None = None, salt: int | None = None):
        self.key = coerce(key)
        super().__init__(signature, element, visibility, memory, hasher, salt)

    def _build(self):
        if not self.key.hashable:
            raise ConfigurationError(
                f"key type {self.key.signature} of {self.signature} must be hashable")
        self.node = MapNode(self)
        self.set = HashSet(self.identifier("_set"), self.node, INTERNAL,
                           self.memory, self.hasher, self.salt, set_operations=False)
        self.depends_on(self.key, self.node, self.set)

    def members(self) -> tuple[Type, ...]:
        return (self.key, self.element)

    def _type_declaration(self, stream: Builder):
        stream.write(f"""
/** @brief Hash map from {self.key} keys to {self.element} elements. */
typedef struct {{
    {self.set} set;
}} {self};
""")

    def _probe(self, with_element: bool = False) -> str:
        """Statements filling a stack node for set lookups."""
        fill = "probe.element = value;\n" if with_element else ""
        return f"""
memset(&probe, 0, sizeof(probe));
probe.key = key;
{fill}"""

    def _configure(self):
        super()._configure()
        value, const, key, element = self, self.const_type, self.key, self.element
        node, inner = self.node, self.set

        self.def_method("custom_create", [("self", value), ("capacity", "size_t"), ("manage_capacity", "int")],
                        name=self.identifier("create_capacity"),
                        doc="Create an empty map with room for capacity mappings.").define(f"""
assert(self);
{inner['custom_create']}(&self->set, capacity, manage_capacity);
""")
        self["default_create"].define(f"""
assert(self);
{inner['default_create']}(&self->set);
""")
        self["destroy"].define(f"""
assert(self);
{inner['destroy']}(&self->set);
""")
        self["copy"].define(lambda: f"""
assert(self);
assert(source);
{inner['copy']}(&self->set, &source->set);
""")
        self["move"].define(f"""
assert(self);
assert(source);
*self = *source;
{self['default_create']}(source);
""")
        self["equal"].define(lambda: f"""
{inner.range} r;
assert(self);
assert(other);
if({inner['size']}(&self->set) != {inner['size']}(&other->set)) return 0;
for(r = {inner.range['get_range']}(&self->set); !{inner.range['empty']}(&r); {inner.range['pop_front']}(&r)) {{
    const {node}* node = {inner.range['front_view']}(&r);
    const {node}* other_node = {inner['lookup']}(&other->set, *node);
    if(!other_node || !{element.equal("node->element", "other_node->element")}) return 0;
}}
return 1;
""")
        self["hash_code"].define(lambda: f"""
{inner.range} r;
{self.hasher.type} hasher, sum = 0;
assert(self);
{self.hasher.init("hasher", self.salt)};
for(r = {inner.range['get_range']}(&self->set); !{inner.range['empty']}(&r); {inner.range['pop_front']}(&r)) {{
    const {node}* node = {inner.range['front_view']}(&r);
    {self.hasher.type} pair;
    {self.hasher.init("pair", self.salt)};
    {self.hasher.update("pair", key.code("node->key"))};
    {self.hasher.update("pair", element.code("node->element"))};
    sum += {self.hasher.finish("pair")};
}}
{self.hasher.update("hasher", "sum")};
return {self.hasher.finish("hasher")};
""")
        self["size"].define(f"""
assert(self);
return {inner['size']}(&self->set);
""")
        self["size"].inline = False
        self["empty"].define(f"""
assert(self);
return {inner['empty']}(&self->set);
""")
        self["empty"].inline = False
        self.def_method("view", [("self", const), ("key", key.const_type)], element.const_ptr_type,
                        doc="Return a reference to the element mapped to key or NULL.").define(f"""
{node} probe;
const {node}* node;
assert(self);
{self._probe()}
node = {inner['lookup']}(&self->set, probe);
return node ? &node->element : NULL;
""")
        self.def_method("lookup_key", [("self", const), ("key", key.const_type)], key.const_ptr_type,
                        doc="Return a reference to the stored key equal to key or NULL.").define(f"""
{node} probe;
const {node}* node;
assert(self);
{self._probe()}
node = {inner['lookup']}(&self->set, probe);
return node ? &node->key : NULL;
""")
        self.def_method("contains_key", [("self", const), ("key", key.const_type)], "int", inline=True,
                        doc="Test whether key is mapped.").define(f"""
return {self['view']}(self, key) != NULL;
""")
        self.def_method("get", [("self", const), ("key", key.const_type)], element, inline=True,
                        guard=lambda: self.element.copyable,
                        doc="Return a copy of the element mapped to key, which must be present.").define(lambda: f"""
{element} result;
const {element}* e = {self['view']}(self, key);
assert(e);
{element.copy("result", "*e")};
return result;
""")
        self.def_method("put", [("self", value), ("key", key.const_type), ("value", element.const_type)], "int",
                        guard=lambda: self.node.copyable,
                        doc="Map key to a copy of value unless key is already mapped; return whether it was inserted.").define(lambda: f"""
{node} probe;
assert(self);
{self._probe(with_element=True)}
return {inner['put']}(&self->set, probe);
""")
        self.def_method("remove", [("self", value), ("key", key.const_type)], "int",
                        doc="Remove the mapping of key; return whether one existed.").define(f"""
{node} probe;
assert(self);
{self._probe()}
return {inner['remove']}(&self->set, probe);
""")
        self.def_method("set", [("self", value), ("key", key.const_type), ("value", element.const_type)], "int",
                        guard=lambda: self.node.copyable,
                        doc="Map key to a copy of value replacing any prior mapping; return whether one existed.").define(lambda: f"""
int removed;
assert(self);
removed = {self['remove']}(self, key);
{self['put']}(self, key, value);
return removed;
""")
