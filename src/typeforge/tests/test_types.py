"""Tests for type descriptors and the capability model."""

import pytest

from src.typeforge.errors import ConfigurationError, UnknownOperationError
from src.typeforge.functions import Function
from src.typeforge.std import STDDEF_H, STDINT_H, coerce, is_primitive, primitive
from src.typeforge.types import Capability, Operation, Synthetic


class TestOperations:
    def test_parse_names(self):
        assert Operation.parse("copy") is Operation.COPY
        assert Operation.parse("hash_code") is Operation.CODE
        assert Operation.parse("code") is Operation.CODE
        assert Operation.parse(Operation.MOVE) is Operation.MOVE

    def test_unknown_operation(self):
        with pytest.raises(UnknownOperationError) as info:
            Operation.parse("frobnicate")
        assert info.value.operation == "frobnicate"

    def test_unknown_capability(self):
        with pytest.raises(UnknownOperationError):
            primitive("int").supports("frobnicable")

    def test_unknown_operation_is_configuration_error(self):
        assert issubclass(UnknownOperationError, ConfigurationError)


class TestPrimitive:
    def test_int_capabilities(self):
        t = primitive("int")
        assert t.default_constructible
        assert t.custom_constructible
        assert t.copyable
        assert t.movable
        assert t.comparable
        assert t.orderable
        assert t.hashable
        assert not t.destructible

    def test_supports_by_name_and_enum(self):
        t = primitive("double")
        assert t.supports("copyable")
        assert t.supports(Capability.HASHABLE)

    def test_aliases_share_descriptor(self):
        assert primitive("unsigned int") is primitive("unsigned")
        assert primitive("long  int") is primitive("long")
        assert coerce("int") is primitive("int")

    def test_headers_become_dependencies(self):
        assert STDDEF_H in primitive("size_t").closure()
        assert STDINT_H in primitive("uint32_t").closure()
        assert list(primitive("int").closure()) == [primitive("int")]

    def test_expressions(self):
        t = primitive("int")
        assert t.default_create("x") == "((x) = 0)"
        assert t.copy("a", "b") == "((a) = (b))"
        assert t.equal("a", "b") == "((a) == (b))"
        assert t.compare("a", "b") == "((a) == (b) ? 0 : ((a) > (b) ? +1 : -1))"
        assert t.code("v") == "((size_t)(v))"

    def test_destroy_is_not_declared(self):
        with pytest.raises(ConfigurationError):
            primitive("int").destroy("x")

    def test_wrong_arity(self):
        with pytest.raises(ConfigurationError):
            primitive("int").copy("a")

    def test_derived_spellings(self):
        t = primitive("int")
        assert t.const_type == "const int"
        assert t.ptr_type == "int*"
        assert t.const_ptr_type == "const int*"

    def test_unknown_name(self):
        assert not is_primitive("struct foo")
        with pytest.raises(ConfigurationError):
            coerce("struct foo")

    def test_coerce_rejects_non_types(self):
        with pytest.raises(ConfigurationError):
            coerce(42)


class TestSynthetic:
    def make_value(self):
        return Synthetic("Value", default_create="ValueCreate", destroy="ValueDestroy",
                         copy="ValueCopy", equal="ValueEqual", code="ValueHash")

    def test_capabilities_follow_declarations(self):
        value = self.make_value()
        assert value.default_constructible
        assert value.destructible
        assert value.copyable
        assert value.comparable
        assert value.hashable
        assert not value.movable
        assert not value.orderable
        assert not value.custom_constructible

    def test_conventional_calls(self):
        value = self.make_value()
        assert value.copy("a", "b") == "ValueCopy(&(a), &(b))"
        assert value.equal("a", "b") == "ValueEqual(&(a), &(b))"
        assert value.code("v") == "ValueHash(&(v))"
        assert value.destroy("v") == "ValueDestroy(&(v))"

    def test_conventional_signatures(self):
        value = self.make_value()
        assert value.function("copy").prototype == "void ValueCopy(Value* self, const Value* source)"
        assert value.function("code").prototype == "size_t ValueHash(const Value* self)"

    def test_hashable_requires_comparable(self):
        value = Synthetic("Blob", code="BlobHash")
        assert value.declares("hash_code")
        assert not value.hashable

    def test_incompatible_function(self):
        with pytest.raises(ConfigurationError):
            Synthetic("Value", copy=Function("ValueCopy", [("self", "Value")], refs=1))

    def test_custom_create_needs_function(self):
        with pytest.raises(ConfigurationError):
            Synthetic("Value", custom_create="ValueInit")

    def test_custom_create_needs_reference(self):
        with pytest.raises(ConfigurationError):
            Synthetic("Value", custom_create=Function("ValueInit", [("n", "int")]))

    def test_custom_create_function(self):
        init = Function("ValueInit", [("self", "Value"), ("n", "int")], refs=1)
        value = Synthetic("Value", custom_create=init)
        assert value.custom_constructible
        assert value.custom_create("x", 3) == "ValueInit(&(x), 3)"

    def test_unknown_slot(self):
        with pytest.raises(UnknownOperationError):
            Synthetic("Value", frobnicate="ValueFrobnicate")

    def test_code_regions(self):
        value = Synthetic("Value", interface='#include "value.h"', copy="ValueCopy")
        assert str(value.interface) == '#include "value.h"\n'
        assert not value.implementation
