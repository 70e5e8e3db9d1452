"""Tests for identifier synthesis."""

import pytest

from src.typeforge.errors import ConfigurationError
from src.typeforge.functions import Function
from src.typeforge.naming import Once, decorate


class TestDecorate:
    def test_camel_case(self):
        assert decorate("IntVector", "push_back") == "IntVectorPushBack"

    def test_single_word(self):
        assert decorate("IntVector", "size") == "IntVectorSize"

    def test_internal_name_keeps_underscore(self):
        assert decorate("IntVector", "_internal_put") == "_IntVectorInternalPut"

    def test_internal_prefix_absorbs_underscore(self):
        assert decorate("_Internal", "_reset") == "_InternalReset"

    def test_several_leading_underscores(self):
        assert decorate("Map", "__node") == "__MapNode"

    def test_markers_are_stripped(self):
        assert decorate("IntVector", "sort!") == "IntVectorSort"
        assert decorate("IntVector", "empty?") == "IntVectorEmpty"

    def test_only_one_marker_is_stripped(self):
        assert decorate("X", "a!!") == "XA!"

    def test_deterministic(self):
        assert decorate("IntList", "pop_front") == decorate("IntList", "pop_front")


class TestOnce:
    def test_computed_lazily_and_once(self):
        calls = []

        def compute():
            calls.append(1)
            return "IntVectorRange"

        name = Once(compute)
        assert calls == []
        assert str(name) == "IntVectorRange"
        assert f"{name}" == "IntVectorRange"
        assert len(calls) == 1

    def test_follows_late_prefix(self):
        prefix = ["Draft"]
        name = Once(lambda: decorate(prefix[0], "create"))
        prefix[0] = "IntVector"
        assert str(name) == "IntVectorCreate"


class TestFunction:
    def test_prototype(self):
        f = Function("Add", [("self", "Vec"), ("other", "const Vec"), ("n", "int")], "int", refs=2)
        assert f.prototype == "int Add(Vec* self, const Vec* other, int n)"

    def test_void_prototype(self):
        assert Function("Reset").prototype == "void Reset(void)"

    def test_call_takes_addresses_of_references(self):
        f = Function("Add", [("self", "Vec"), ("other", "const Vec"), ("n", "int")], "int", refs=2)
        assert f.call("a", "b", 3) == "Add(&(a), &(b), 3)"
        assert f("a", "b", 3) == "Add(&(a), &(b), 3)"

    def test_rename(self):
        f = Function("Add", [("self", "Vec")], refs=1)
        f.rename(Once(lambda: "VecAdd"))
        assert f.call("v") == "VecAdd(&(v))"

    def test_wrong_argument_count(self):
        f = Function("Add", [("self", "Vec")], refs=1)
        with pytest.raises(ConfigurationError):
            f.call("a", "b")

    def test_too_many_references(self):
        with pytest.raises(ConfigurationError):
            Function("Add", [("self", "Vec")], refs=2)

    def test_compatibility(self):
        f = Function("Copy", [("self", "Vec"), ("source", "const Vec")], refs=2)
        assert f.compatible_with(2, 2)
        assert not f.compatible_with(2, 1)
