"""Modules: distribution of entities over one header and K source files.

Rendering proceeds as follows:

1. Collect every entity reachable from the registered ones.
2. Put the interface of every entity into the header, dependencies first,
   along with the exports of internal entities that public ones need.
3. Choose the number of sources, either fixed or from the total size of
   the entities and a size threshold.
4. Assign each entity to the currently smallest source.
5. Render each source as the declarations of everything its entities
   need, followed by the definitions of the entities assigned to it.
"""

from __future__ import annotations

import hashlib
import io
import logging
import math
import os
import re
from typing import TextIO

from . import __version__
from .entity import Entity, ordered
from .errors import ConfigurationError
from .state import RenderState

logger = logging.getLogger("typeforge")

DEFAULT_SOURCE_THRESHOLD = 16 * 1024

CAP = f"/* Automatically generated by typeforge {__version__}. Do not edit. */"


class _DigestStream:
    """Writes through to a file while hashing everything written."""

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._hash = hashlib.sha256()

    def write(self, text: str):
        self._stream.write(text)
        self._hash.update(text.encode("utf-8"))

    def hexdigest(self) -> str:
        return self._hash.hexdigest()


class Artifact:
    """One generated file."""

    def __init__(self, module: Module):
        self.module = module

    @property
    def file_name(self) -> str:
        raise NotImplementedError

    def render_contents(self, stream):
        raise NotImplementedError

    def text(self) -> str:
        stream = io.StringIO()
        self.render_contents(stream)
        return stream.getvalue()


class Header(Artifact):
    @property
    def file_name(self) -> str:
        return f"{self.module.name}_auto.{self.module.header_extension}"

    @property
    def guard(self) -> str:
        return re.sub(r"\W", "_", self.file_name).upper()

    def render_contents(self, stream):
        stream.write(f"{CAP}\n#ifndef {self.guard}\n#define {self.guard}\n")
        exposed = self.module.exposed()
        for entity in ordered(self.module.entities()):
            stream.write(str(entity.interface))
            if entity in exposed:
                stream.write(str(entity.exports))
        stream.write("#endif\n")


class Source(Artifact):
    def __init__(self, module: Module, index: int, count: int):
        super().__init__(module)
        self.index = index
        self.count = count
        self.assigned: list[Entity] = []
        self.complexity = 0

    @property
    def file_name(self) -> str:
        suffix = "" if self.count == 1 else str(self.index)
        return f"{self.module.name}_auto{suffix}.{self.module.source_extension}"

    def add(self, entity: Entity):
        self.assigned.append(entity)
        self.complexity += entity.complexity

    def dependencies(self) -> list[Entity]:
        """Every entity the assigned ones need, including themselves."""
        needed: dict[Entity, None] = {}
        for entity in self.assigned:
            needed.update(dict.fromkeys(entity.closure()))
        return ordered(needed)

    def render_contents(self, stream):
        stream.write(f'{CAP}\n#include "{self.module.header.file_name}"\n')
        for entity in self.dependencies():
            stream.write(str(entity.declarations))
        for entity in ordered(self.assigned):
            stream.write(str(entity.implementation))


class Module:
    """A named set of entities rendered into ``<name>_auto`` artifacts.

    ``source_count`` fixes the number of source files; otherwise it is
    derived from ``source_threshold``.
    """

    def __init__(self, name: str, source_count: int | None = None,
                 source_threshold: int | None = None,
                 header_extension: str = "h", source_extension: str = "c"):
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name or ""):
            raise ConfigurationError(f"invalid module name '{name}'")
        if source_count is not None and source_count < 1:
            raise ConfigurationError(f"source count must be at least 1, got {source_count}")
        if source_threshold is not None and source_threshold < 1:
            raise ConfigurationError(f"source threshold must be positive, got {source_threshold}")
        self.name = name
        self.source_count = source_count
        self.source_threshold = source_threshold or DEFAULT_SOURCE_THRESHOLD
        self.header_extension = header_extension
        self.source_extension = source_extension
        self._registered: dict[Entity, None] = {}
        self._entities: list[Entity] | None = None
        self._header: Header | None = None
        self._sources: list[Source] | None = None

    def add(self, *entities: Entity) -> Module:
        if self._entities is not None:
            raise ConfigurationError(f"module {self.name} has already been distributed")
        for entity in entities:
            self._registered[entity] = None
        return self

    def registered(self) -> list[Entity]:
        return list(self._registered)

    def entities(self) -> list[Entity]:
        """Union of the closures of the registered entities, in registration order."""
        if self._entities is None:
            collected: dict[Entity, None] = {}
            for entity in self._registered:
                collected.update(dict.fromkeys(entity.closure()))
            self._entities = list(collected)
        return self._entities

    def exposed(self) -> set[Entity]:
        """Internal entities in the closure of some public entity."""
        reachable: set[Entity] = set()
        for entity in self.entities():
            if entity.public:
                reachable.update(entity.closure())
        return {entity for entity in reachable if entity.internal}

    @property
    def header(self) -> Header:
        if self._header is None:
            self._header = Header(self)
        return self._header

    @property
    def sources(self) -> list[Source]:
        if self._sources is None:
            self._sources = self._distribute()
        return self._sources

    def _distribute(self) -> list[Source]:
        entities = self.entities()
        total = sum(entity.complexity for entity in entities)
        count = self.source_count or max(1, math.ceil(total / self.source_threshold))
        logger.debug("module %s: %d entities, total size %d, %d source(s)",
                     self.name, len(entities), total, count)
        sources = [Source(self, index + 1, count) for index in range(count)]
        for entity in entities:
            target = min(sources, key=lambda source: source.complexity)
            target.add(entity)
            logger.debug("  %r -> %s", entity, target.file_name)
        return sources

    def artifacts(self) -> list[Artifact]:
        return [self.header, *self.sources]

    def contents(self) -> dict[str, str]:
        """Rendered text of every artifact keyed by file name."""
        return {artifact.file_name: artifact.text() for artifact in self.artifacts()}

    @property
    def state_file(self) -> str:
        return f"{self.name}.state"

    def render(self, directory: str = ".") -> list[str]:
        """Write the artifacts into *directory*; return the paths of all artifacts.

        Artifacts whose content did not change since the previous run are
        left untouched and artifacts the previous run produced but this one
        does not are removed.
        """
        state = RenderState(os.path.join(directory, self.state_file))
        paths = [self._write(directory, artifact, state) for artifact in self.artifacts()]
        for file_name in state.stale():
            path = os.path.join(directory, file_name)
            if os.path.exists(path):
                os.remove(path)
                logger.info("Removed stale %s", path)
        state.save()
        return paths

    def _write(self, directory: str, artifact: Artifact, state: RenderState) -> str:
        path = os.path.join(directory, artifact.file_name)
        temporary = path + "~"
        try:
            with open(temporary, "w", encoding="utf-8", newline="\n") as f:
                stream = _DigestStream(f)
                artifact.render_contents(stream)
        except BaseException:
            if os.path.exists(temporary):
                os.remove(temporary)
            raise
        file_digest = stream.hexdigest()
        if state.unchanged(artifact.file_name, file_digest) and os.path.exists(path):
            os.remove(temporary)
            logger.info("%s is up to date", path)
        else:
            os.replace(temporary, path)
            logger.info("Wrote %s", path)
        state.record(artifact.file_name, file_digest)
        return path

