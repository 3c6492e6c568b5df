from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from .diagnostics import (
    ATTRIB_SEQEND,
    ENTITY_OUTSIDE_SECTION,
    NESTED_SCOPE,
    ORPHAN_END,
    ORPHAN_VERTEX,
    UNCLOSED_SCOPE,
    Diagnostics,
)
from .document import Document, Section
from .entity import Block, Entity, Insert, Polyline, Vertex


class DocumentSink:
    """Receives begin/end/add events from the reader, in stream order."""

    def begin_section(self, name: str, header: dict[str, Any] | None = None) -> None:
        raise NotImplementedError

    def end_section(self) -> None:
        raise NotImplementedError

    def begin_block(self, block: Block) -> None:
        raise NotImplementedError

    def end_block(self) -> None:
        raise NotImplementedError

    def add_entity(self, entity: Entity) -> None:
        raise NotImplementedError

    def begin_polyline(self, polyline: Polyline) -> None:
        raise NotImplementedError

    def append_vertex(self, vertex: Vertex) -> None:
        raise NotImplementedError

    def end_sequence(self) -> None:
        raise NotImplementedError


@dataclass
class _SectionDraft:
    name: str
    header: dict[str, Any] = field(default_factory=dict)
    entities: list[Entity] = field(default_factory=list)
    blocks: list[Block] = field(default_factory=list)

    def freeze(self) -> Section:
        return Section(
            name=self.name,
            header=dict(self.header),
            entities=tuple(self.entities),
            blocks=tuple(self.blocks),
        )


class DocumentBuilder(DocumentSink):
    """Stages sink events and publishes a Document once the parse is done.

    Each grouping kind (section, block, polyline) has at most one open scope.
    Events that break that discipline are reported and repaired by closing the
    open scope; close events without an open scope are reported and ignored.
    """

    def __init__(self, diagnostics: Diagnostics | None = None) -> None:
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self._sections: list[Section] = []
        self._section: _SectionDraft | None = None
        self._unsectioned = _SectionDraft(name="")
        self._block: Block | None = None
        self._block_entities: list[Entity] = []
        self._polyline: Polyline | None = None
        self._vertices: list[Vertex] = []
        # ATTRIB records are skipped, so an INSERT event is directly followed by their SEQEND.
        self._after_insert = False

    def begin_section(self, name: str, header: dict[str, Any] | None = None) -> None:
        self._after_insert = False
        if self._section is not None:
            self.diagnostics.report(
                NESTED_SCOPE,
                f"section {name!r} opened while section {self._section.name!r} is open",
                record="SECTION",
            )
            self._close_section()
        elif self._block is not None:
            self.diagnostics.report(
                NESTED_SCOPE,
                f"section {name!r} opened while block {self._block.name!r} is open",
                record="SECTION",
            )
            self._close_block()
        else:
            self._close_polyline(f"closed by section {name!r}")
        self._section = _SectionDraft(name=name, header=dict(header or {}))

    def end_section(self) -> None:
        self._after_insert = False
        if self._section is None:
            self.diagnostics.report(ORPHAN_END, "ENDSEC without an open section", record="ENDSEC")
            return
        self._close_section()

    def begin_block(self, block: Block) -> None:
        self._after_insert = False
        if self._block is not None:
            self.diagnostics.report(
                NESTED_SCOPE,
                f"block {block.name!r} opened while block {self._block.name!r} is open",
                record="BLOCK",
            )
            self._close_block()
        else:
            self._close_polyline(f"closed by block {block.name!r}")
        if self._section is None:
            self.diagnostics.report(
                ENTITY_OUTSIDE_SECTION,
                f"block {block.name!r} is not inside a section",
                record="BLOCK",
            )
        self._block = block
        self._block_entities = []

    def end_block(self) -> None:
        self._after_insert = False
        if self._block is None:
            self.diagnostics.report(ORPHAN_END, "ENDBLK without an open block", record="ENDBLK")
            return
        self._close_block()

    def add_entity(self, entity: Entity) -> None:
        self._close_polyline(f"closed by {entity.dxftype}")
        self._entity_list(entity.dxftype).append(entity)
        self._after_insert = isinstance(entity, Insert)

    def begin_polyline(self, polyline: Polyline) -> None:
        self._after_insert = False
        if self._polyline is not None:
            self.diagnostics.report(
                NESTED_SCOPE,
                "POLYLINE opened while another polyline has no SEQEND",
                record="POLYLINE",
            )
            self._close_polyline()
        # Registered with its container at SEQEND, once the vertices are known.
        self._polyline = polyline
        self._vertices = []

    def append_vertex(self, vertex: Vertex) -> None:
        self._after_insert = False
        if self._polyline is None:
            self.diagnostics.report(ORPHAN_VERTEX, "VERTEX without an open polyline", record="VERTEX")
            return
        self._vertices.append(vertex)

    def end_sequence(self) -> None:
        if self._polyline is None:
            if self._after_insert:
                self._after_insert = False
                self.diagnostics.report(
                    ATTRIB_SEQEND, "SEQEND closes the attributes of an INSERT", record="SEQEND"
                )
            else:
                self.diagnostics.report(ORPHAN_END, "SEQEND without an open polyline", record="SEQEND")
            return
        self._close_polyline()

    def finish(self, *, path: str | None = None, terminated: bool = True) -> Document:
        why = "still open at end of stream"
        if self._section is not None:
            self._close_section(why)
        else:
            self._close_block(why)
        unsectioned = None
        if self._unsectioned.entities or self._unsectioned.blocks:
            unsectioned = self._unsectioned.freeze()
        return Document(
            path=path,
            sections=tuple(self._sections),
            unsectioned=unsectioned,
            diagnostics=tuple(self.diagnostics),
            terminated=terminated,
        )

    def _entity_list(self, dxftype: str) -> list[Entity]:
        if self._block is not None:
            return self._block_entities
        if self._section is not None:
            return self._section.entities
        self.diagnostics.report(
            ENTITY_OUTSIDE_SECTION,
            f"{dxftype} is not inside a section",
            record=dxftype,
        )
        return self._unsectioned.entities

    def _close_polyline(self, why: str | None = None) -> None:
        if self._polyline is None:
            return
        if why is not None:
            self.diagnostics.report(UNCLOSED_SCOPE, f"polyline without SEQEND {why}", record="POLYLINE")
        polyline = replace(self._polyline, vertices=tuple(self._vertices))
        self._polyline = None
        self._vertices = []
        self._entity_list(polyline.dxftype).append(polyline)

    def _close_block(self, why: str | None = None) -> None:
        if self._block is None:
            self._close_polyline(why)
            return
        self._close_polyline(f"closed by end of block {self._block.name!r}")
        if why is not None:
            self.diagnostics.report(
                UNCLOSED_SCOPE,
                f"block {self._block.name!r} without ENDBLK {why}",
                record="BLOCK",
            )
        block = replace(self._block, entities=tuple(self._block_entities))
        self._block = None
        self._block_entities = []
        target = self._section if self._section is not None else self._unsectioned
        target.blocks.append(block)

    def _close_section(self, why: str | None = None) -> None:
        assert self._section is not None
        self._close_block(f"closed by end of section {self._section.name!r}")
        if why is not None:
            self.diagnostics.report(
                UNCLOSED_SCOPE,
                f"section {self._section.name!r} without ENDSEC {why}",
                record="SECTION",
            )
        self._sections.append(self._section.freeze())
        self._section = None
