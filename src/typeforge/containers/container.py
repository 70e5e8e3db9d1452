"""Container base class and the mixins shared by container kinds."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..composite import Composite
from ..entity import PUBLIC
from ..hasher import Hasher
from ..memory import Allocator
from ..naming import Name
from ..std import coerce
from ..types import DECLARED_BY, Capability, Type

if TYPE_CHECKING:
    from ..ranges import Range

# Capabilities a container has only if every member type has them too
_MEMBER_BOUND = (
    Capability.COPYABLE,
    Capability.MOVABLE,
    Capability.COMPARABLE,
    Capability.ORDERABLE,
    Capability.HASHABLE,
)


class Container(Composite):
    """A composite owning heap storage for values of an element type.

    Every container declares creation and destruction; copying, moving,
    equality, ordering and hashing are generated only when the element
    types support them.
    """

    owns_storage = True
    range_class: type[Range]

    def __init__(self, signature: Name, element: Type | str, visibility: str = PUBLIC,
                 memory: Allocator | None = None, hasher: Hasher | None = None,
                 salt: int | None = None):
        super().__init__(signature, visibility, memory, hasher, salt)
        self.element = coerce(element)
        self.depends_on(self.element)
        self._build()
        self.range = self.range_class(self)
        self.references(self.range)

    def _build(self):
        """Hook for constructing internal entities before the range exists."""

    def members(self) -> tuple[Type, ...]:
        return (self.element,)

    def _capability(self, capability: Capability) -> bool:
        declared = self.declares(DECLARED_BY[capability])
        if capability in _MEMBER_BOUND:
            return declared and all(member.supports(capability) for member in self.members())
        return declared

    def _configure(self):
        super()._configure()
        # No container kind defines an ordering of its values
        self._drop_method("compare")
        const, element = self.const_type, self.element
        self.def_method("size", [("self", const)], "size_t", inline=True,
                        doc="Return the number of contained elements.")
        self.def_method("empty", [("self", const)], "int", inline=True,
                        doc="Test whether the container holds no elements.")
        self.def_method("lookup", [("self", const), ("value", element.const_type)], element.const_ptr_type,
                        guard=lambda: self.element.comparable,
                        doc="Return a reference to an element equal to value or NULL.")
        self.def_method("contains", [("self", const), ("value", element.const_type)], "int", inline=True,
                        guard=lambda: self.element.comparable,
                        doc="Test whether an element equal to value is contained.").define(
            lambda: f"return {self['lookup']}(self, value) != NULL;")
        self.def_method("purge", [("self", self)],
                        guard=lambda: self.destructible and self.default_constructible,
                        doc="Remove and destroy all elements.").define(lambda: f"""
{self['destroy']}(self);
{self['default_create']}(self);
""")


class Sequential:
    """Linear search over the container's range."""

    def _configure(self):
        super()._configure()
        self["lookup"].define(lambda: self._sequential_lookup())

    def _sequential_lookup(self) -> str:
        walker, element = self.range, self.element
        return f"""
{walker} r;
assert(self);
for(r = {walker['get_range']}(self); !{walker['empty']}(&r); {walker['pop_front']}(&r)) {{
    const {element}* e = {walker['front_view']}(&r);
    if({element.equal("*e", "value")}) return e;
}}
return NULL;
"""


class Hashable:
    """Hash code computed over the container's range.

    Sequences combine element hashes in iteration order; unordered
    containers sum them first so that equal contents hash equally whatever
    their internal layout.
    """

    ordered = True

    def _configure(self):
        super()._configure()
        self["hash_code"].define(lambda: self._range_hash_code())

    def _range_hash_code(self) -> str:
        walker, element, hasher = self.range, self.element, self.hasher
        if self.ordered:
            accumulate = hasher.update("hasher", element.code("*e"))
            declare, finish = "", ""
        else:
            accumulate = f"sum += {element.code('*e')}"
            declare = "size_t sum = 0;"
            finish = f"{hasher.update('hasher', 'sum')};"
        return f"""
{walker} r;
{hasher.type} hasher;
{declare}
assert(self);
{hasher.init("hasher", self.salt)};
for(r = {walker['get_range']}(self); !{walker['empty']}(&r); {walker['pop_front']}(&r)) {{
    const {element}* e = {walker['front_view']}(&r);
    {accumulate};
}}
{finish}
return {hasher.finish("hasher")};
"""
