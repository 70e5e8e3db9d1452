"""Tests for module distribution and rendering."""

import math
import os

import pytest

from src.typeforge.containers import HashMap, HashSet, List, Vector
from src.typeforge.entity import Code
from src.typeforge.errors import ConfigurationError
from src.typeforge.module import Module
from src.typeforge.std import primitive


def build(name="demo", **options) -> Module:
    module = Module(name, **options)
    vector = Vector("IntVector", "int")
    module.add(vector, List("IntList", "int"), HashSet("IntSet", "int"),
               HashMap("IntMap", "int", "int"), Vector("IntVectorVector", vector))
    return module


class TestArtifactNames:
    def test_single_source(self):
        module = build()
        assert [a.file_name for a in module.artifacts()] == ["demo_auto.h", "demo_auto.c"]

    def test_numbered_sources(self):
        module = build(source_count=3)
        assert [a.file_name for a in module.artifacts()] == [
            "demo_auto.h", "demo_auto1.c", "demo_auto2.c", "demo_auto3.c"]

    def test_header_guard(self):
        header = build().header.text()
        assert "#ifndef DEMO_AUTO_H\n#define DEMO_AUTO_H\n" in header
        assert header.endswith("#endif\n")
        assert header.startswith("/* Automatically generated by typeforge")

    def test_count_from_threshold(self):
        module = build(source_threshold=2000)
        total = sum(entity.complexity for entity in module.entities())
        assert len(module.sources) == max(1, math.ceil(total / 2000))
        assert len(module.sources) > 1

    def test_invalid_settings(self):
        with pytest.raises(ConfigurationError):
            Module("demo", source_count=0)
        with pytest.raises(ConfigurationError):
            Module("demo", source_threshold=0)
        with pytest.raises(ConfigurationError):
            Module("bad name")


class TestEntities:
    def test_union_of_closures(self):
        module = build()
        entities = module.entities()
        assert primitive("int") in entities
        vector = module.registered()[0]
        assert vector.range in entities
        assert len(entities) == len(set(entities))

    def test_add_after_distribution(self):
        module = build()
        module.sources
        with pytest.raises(ConfigurationError):
            module.add(List("LateList", "int"))

    def test_header_follows_dependencies(self):
        module = Module("demo")
        inner = Vector("IntVector", "int")
        module.add(Vector("IntVectorVector", inner))
        header = module.header.text()
        assert header.index("} IntVector;") < header.index("} IntVectorVector;")
        assert header.index("#define TF_INLINE") < header.index("} IntVector;")
        assert header.index("#include <stdlib.h>") < header.index("} IntVector;")


class TestDistribution:
    def test_each_entity_assigned_once(self):
        module = build(source_count=4)
        assigned = [entity for source in module.sources for entity in source.assigned]
        assert len(assigned) == len(module.entities())
        assert set(assigned) == set(module.entities())

    def test_load_balance(self):
        module = build(source_count=3)
        sizes = [source.complexity for source in module.sources]
        largest = max(entity.complexity for entity in module.entities())
        assert max(sizes) - min(sizes) <= largest

    def test_declarations_precede_definitions(self):
        module = build(source_count=3)
        for source in module.sources:
            text = source.text()
            for entity in source.assigned:
                if not entity.implementation:
                    continue
                position = text.index(str(entity.implementation))
                for dependency in entity.closure():
                    if dependency.declarations:
                        assert text.index(str(dependency.declarations)) < position

    def test_internal_helpers_replicated(self):
        module = build(source_count=3)
        for source in module.sources:
            if any(isinstance(entity, HashMap) for entity in source.assigned):
                assert "TF_INLINE size_t _IntMapSetSize(const _IntMapSet* self)" in source.text()

    def test_deterministic(self):
        assert build(source_count=2).contents() == build(source_count=2).contents()


class TestRender:
    def test_writes_artifacts_and_state(self, tmp_path):
        module = build()
        paths = module.render(str(tmp_path))
        assert [os.path.basename(p) for p in paths] == ["demo_auto.h", "demo_auto.c"]
        for name, text in build().contents().items():
            assert (tmp_path / name).read_text() == text
        state = (tmp_path / "demo.state").read_text().splitlines()
        assert len(state) == 2
        assert all(" *demo_auto." in line for line in state)
        assert not [p for p in os.listdir(tmp_path) if p.endswith("~")]

    def test_unchanged_artifacts_untouched(self, tmp_path):
        build().render(str(tmp_path))
        header = tmp_path / "demo_auto.h"
        os.utime(header, (1, 1))
        build().render(str(tmp_path))
        assert os.stat(header).st_mtime == 1

    def test_changed_artifacts_rewritten(self, tmp_path):
        build().render(str(tmp_path))
        header = tmp_path / "demo_auto.h"
        os.utime(header, (1, 1))
        module = Module("demo")
        module.add(Vector("IntVector", "int"))
        module.render(str(tmp_path))
        assert os.stat(header).st_mtime != 1
        assert "IntMap" not in header.read_text()

    def test_stale_artifacts_removed(self, tmp_path):
        build(source_count=2).render(str(tmp_path))
        assert (tmp_path / "demo_auto2.c").exists()
        build().render(str(tmp_path))
        assert not (tmp_path / "demo_auto1.c").exists()
        assert not (tmp_path / "demo_auto2.c").exists()
        assert (tmp_path / "demo_auto.c").exists()

    def test_failure_leaves_no_partial_file(self, tmp_path):
        class Broken(Code):
            def interface_declarations(self, stream):
                raise RuntimeError("broken entity")

        module = Module("broken")
        module.add(Vector("IntVector", "int"), Broken())
        with pytest.raises(RuntimeError):
            module.render(str(tmp_path))
        assert os.listdir(tmp_path) == []
