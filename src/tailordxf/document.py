from __future__ import annotations

import fnmatch
import io
import re
from dataclasses import dataclass, field
from os import PathLike
from typing import Any, Callable, Iterable, Iterator

from .diagnostics import Diagnostic, Diagnostics
from .entity import Block, Entity
from .errors import DXFOpenError
from .tags import PairSource, TagReader, TagSource

SUPPORTED_ENTITY_TYPES = (
    "LINE",
    "POINT",
    "TEXT",
    "INSERT",
    "POLYLINE",
)
TERMINATOR = "EOF"


def read(
    path: str | PathLike[str],
    *,
    encoding: str = "utf-8",
    errors: str = "replace",
    cancel: Callable[[], bool] | None = None,
    timeout: float | None = None,
    diagnostics: Diagnostics | None = None,
) -> "Document":
    try:
        stream = open(path, encoding=encoding, errors=errors)
    except OSError as exc:
        raise DXFOpenError(f"cannot open DXF file: {path}") from exc
    with stream:
        source = TagReader(stream, diagnostics=diagnostics)
        return _parse(source, path=str(path), cancel=cancel, timeout=timeout)


def readstr(
    text: str,
    *,
    cancel: Callable[[], bool] | None = None,
    timeout: float | None = None,
    diagnostics: Diagnostics | None = None,
) -> "Document":
    source = TagReader(io.StringIO(text, newline=None), diagnostics=diagnostics)
    return _parse(source, path=None, cancel=cancel, timeout=timeout)


def read_tags(
    pairs: Iterable[tuple[int | str, str]],
    *,
    cancel: Callable[[], bool] | None = None,
    timeout: float | None = None,
    diagnostics: Diagnostics | None = None,
) -> "Document":
    source = PairSource(pairs, diagnostics=diagnostics)
    return _parse(source, path=None, cancel=cancel, timeout=timeout)


def _parse(
    source: TagSource,
    *,
    path: str | None,
    cancel: Callable[[], bool] | None,
    timeout: float | None,
) -> "Document":
    from .reader import DXFReader
    from .sink import DocumentBuilder

    builder = DocumentBuilder(source.diagnostics)
    terminated = DXFReader(source, builder, cancel=cancel, timeout=timeout).read_all()
    return builder.finish(path=path, terminated=terminated)


@dataclass(frozen=True)
class Section:
    name: str
    header: dict[str, Any] = field(default_factory=dict)
    entities: tuple[Entity, ...] = ()
    blocks: tuple[Block, ...] = ()


@dataclass(frozen=True)
class Document:
    path: str | None
    sections: tuple[Section, ...] = ()
    unsectioned: Section | None = None
    diagnostics: tuple[Diagnostic, ...] = ()
    terminated: bool = True

    def section(self, name: str) -> Section | None:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    @property
    def header(self) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for section in self.sections:
            if section.name == "HEADER":
                merged.update(section.header)
        return merged

    @property
    def dxfversion(self) -> str | None:
        version = self.header.get("$ACADVER")
        return version if isinstance(version, str) else None

    @property
    def blocks(self) -> dict[str, Block]:
        out: dict[str, Block] = {}
        for section in self._all_sections():
            for block in section.blocks:
                out[block.name] = block
        return out

    def modelspace(self) -> "Layout":
        return Layout(self, "MODELSPACE")

    def block_layout(self, name: str) -> "Layout":
        if name not in self.blocks:
            raise ValueError(f"unknown block: {name}")
        return Layout(self, name)

    def _all_sections(self) -> Iterator[Section]:
        yield from self.sections
        if self.unsectioned is not None:
            yield self.unsectioned


@dataclass(frozen=True)
class Layout:
    doc: Document
    name: str

    def iter_entities(self, types: str | Iterable[str] | None = None) -> Iterator[Entity]:
        return self.query(types)

    def query(self, types: str | Iterable[str] | None = None) -> Iterator[Entity]:
        type_set = set(_normalize_types(types))
        for entity in self._entities():
            if entity.dxftype in type_set:
                yield entity

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities())

    def __len__(self) -> int:
        return len(self._entities())

    def _entities(self) -> tuple[Entity, ...]:
        if self.name == "MODELSPACE":
            entities: list[Entity] = []
            for section in self.doc.sections:
                if section.name == "ENTITIES":
                    entities.extend(section.entities)
            if self.doc.unsectioned is not None:
                entities.extend(self.doc.unsectioned.entities)
            return tuple(entities)
        block = self.doc.blocks.get(self.name)
        if block is None:
            return ()
        return block.entities


def _normalize_types(types: str | Iterable[str] | None) -> list[str]:
    default_types = list(SUPPORTED_ENTITY_TYPES)
    if types is None:
        return default_types
    if isinstance(types, str):
        tokens = re.split(r"[,\s]+", types.strip())
    else:
        tokens = list(types)

    normalized = [token.strip().upper() for token in tokens if token and token.strip()]
    if not normalized:
        return default_types

    if any(token in {"*", "ALL"} for token in normalized):
        return default_types

    selected: list[str] = []
    seen = set()

    for token in normalized:
        if any(ch in token for ch in "*?[]"):
            for name in SUPPORTED_ENTITY_TYPES:
                if fnmatch.fnmatchcase(name, token) and name not in seen:
                    seen.add(name)
                    selected.append(name)
            continue

        if token in SUPPORTED_ENTITY_TYPES and token not in seen:
            seen.add(token)
            selected.append(token)

    return selected
