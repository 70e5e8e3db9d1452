"""Tests for the entity graph: closures, ranks and code regions."""

import pytest

from src.typeforge.entity import INTERNAL, Builder, Code, Entity, ordered, system_header
from src.typeforge.errors import ConfigurationError


class TestClosure:
    def test_diamond(self):
        a = Code()
        b = Code(dependencies=[a])
        c = Code(dependencies=[a])
        d = Code(dependencies=[b, c])
        assert set(d.closure()) == {a, b, c, d}
        assert list(d.closure())[0] is d
        assert set(b.closure()) == {a, b}

    def test_cached(self):
        a = Code()
        b = Code(dependencies=[a])
        assert b.closure() == b.closure()
        assert list(b.closure()) == [b, a]

    def test_references_join_closure_but_not_rank(self):
        container = Code()
        cursor = Code(dependencies=[container])
        container.references(cursor)
        assert set(container.closure()) == {container, cursor}
        assert container.rank == 0
        assert cursor.rank == 1

    def test_self_dependency_ignored(self):
        a = Code()
        a.depends_on(a)
        assert a.direct_dependencies() == frozenset()

    def test_sealed_after_closure(self):
        a = Code()
        a.closure()
        with pytest.raises(ConfigurationError):
            a.depends_on(Code())
        with pytest.raises(ConfigurationError):
            a.references(Code())

    def test_sealed_after_rank(self):
        a = Code()
        assert a.rank == 0
        with pytest.raises(ConfigurationError):
            a.depends_on(Code())


class TestRank:
    def test_rank_is_longest_path(self):
        a = Code()
        b = Code(dependencies=[a])
        c = Code(dependencies=[a, b])
        assert (a.rank, b.rank, c.rank) == (0, 1, 2)

    def test_cycle_detected(self):
        a = Code()
        b = Code(dependencies=[a])
        a.depends_on(b)
        assert set(a.closure()) == {a, b}
        with pytest.raises(ConfigurationError):
            a.rank

    def test_ordered_puts_dependencies_first(self):
        a = Code()
        b = Code(dependencies=[a])
        c = Code()
        d = Code(dependencies=[b])
        assert ordered([d, c, b, a]) == [a, c, b, d]


class TestRegions:
    def test_public_code(self):
        e = Code(interface="#define X 1", declarations="int f(void);",
                 definitions="int f(void) { return 1; }")
        assert str(e.interface) == "#define X 1\n"
        assert str(e.declarations) == "int f(void);\n"
        assert str(e.implementation) == "int f(void) { return 1; }\n"
        assert e.complexity == len("int f(void);\n") + len("int f(void) { return 1; }\n")

    def test_internal_definitions_are_replicated(self):
        class Helper(Entity):
            def interface_definitions(self, stream):
                stream.write("static inline int one(void) { return 1; }")

        public, internal = Helper(), Helper(INTERNAL)
        assert "one" in str(public.interface)
        assert not public.declarations
        assert not internal.interface
        assert "one" in str(internal.declarations)

    def test_unknown_visibility(self):
        with pytest.raises(ConfigurationError):
            Code(visibility="protected")

    def test_system_header_shared(self):
        assert system_header("stdio.h") is system_header("stdio.h")
        assert str(system_header("stdio.h").interface) == "#include <stdio.h>\n"


class TestBuilder:
    def test_dedents_and_skips_blank_chunks(self):
        stream = Builder()
        stream.write("""
            int x;
            int y;
        """)
        stream.write("   \n")
        assert str(stream) == "int x;\nint y;\n"
        assert len(stream) == len("int x;\nint y;\n")

    def test_empty(self):
        assert not Builder()
        assert str(Builder()) == ""
