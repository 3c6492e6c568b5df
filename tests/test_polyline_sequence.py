from __future__ import annotations

import tailordxf
from tailordxf.diagnostics import UNHANDLED_FIELD
from tailordxf.entity import Line, Polyline, Vertex
from tailordxf.reader import DXFReader
from tailordxf.tags import PairSource
from tests._dxf_helpers import RecordingSink, entities_section

POLYLINE_RECORDS = [
    [(0, "POLYLINE"), (8, "P"), (66, "1"), (70, "1")],
    [(0, "VERTEX"), (8, "P"), (10, "0"), (20, "0"), (30, "9"), (70, "0")],
    [(0, "VERTEX"), (8, "P"), (10, "2"), (20, "1"), (42, "0.5")],
    [(0, "SEQEND"), (8, "P")],
]


def test_polyline_events_keep_vertex_order() -> None:
    sink = RecordingSink()

    DXFReader(PairSource(entities_section(*POLYLINE_RECORDS)), sink).read_all()

    assert sink.events == [
        ("begin_section", "ENTITIES"),
        ("begin_polyline", Polyline(layer="P", flags=1)),
        ("append_vertex", Vertex(layer="P", x=0.0, y=0.0, flags=0)),
        ("append_vertex", Vertex(layer="P", x=2.0, y=1.0, flags=0)),
        ("end_sequence",),
        ("end_section",),
    ]


def test_polyline_is_published_with_its_vertices() -> None:
    doc = tailordxf.read_tags(entities_section(*POLYLINE_RECORDS))

    (polyline,) = doc.modelspace()
    assert polyline.layer == "P"
    assert polyline.flags == 1
    assert polyline.closed is True
    assert polyline.vertices == (
        Vertex(layer="P", x=0.0, y=0.0),
        Vertex(layer="P", x=2.0, y=1.0),
    )
    assert polyline.to_points() == [(0.0, 0.0, 0.0), (2.0, 1.0, 0.0)]
    # Group 66 is implied; vertex z and bulge are dropped without a report.
    assert doc.diagnostics == ()


def test_polyline_unknown_fields_are_reported_but_vertex_fields_are_not() -> None:
    doc = tailordxf.read_tags(
        entities_section(
            [(0, "POLYLINE"), (8, "P"), (10, "0"), (20, "0"), (30, "0")],
            [(0, "VERTEX"), (10, "1"), (20, "1"), (30, "1"), (40, "0.2"), (41, "0.3")],
            [(0, "SEQEND")],
        )
    )

    assert [(item.record, item.code) for item in doc.diagnostics] == [
        ("POLYLINE", 10),
        ("POLYLINE", 20),
        ("POLYLINE", 30),
    ]
    assert all(item.kind == UNHANDLED_FIELD for item in doc.diagnostics)
    (polyline,) = doc.modelspace()
    assert polyline.vertices == (Vertex(x=1.0, y=1.0),)


def test_polyline_keeps_its_place_among_entities() -> None:
    doc = tailordxf.read_tags(
        entities_section(
            [(0, "LINE"), (8, "before")],
            *POLYLINE_RECORDS,
            [(0, "LINE"), (8, "after")],
        )
    )

    entities = list(doc.modelspace())
    assert [entity.dxftype for entity in entities] == ["LINE", "POLYLINE", "LINE"]
    assert entities[0] == Line(layer="before")
    assert entities[2] == Line(layer="after")


def test_polyline_flags_are_kept_raw() -> None:
    doc = tailordxf.read_tags(
        entities_section([(0, "POLYLINE"), (70, "72")], [(0, "SEQEND")])
    )

    (polyline,) = doc.modelspace()
    assert polyline.flags == 72
    assert polyline.closed is False
    assert polyline.vertices == ()


def test_polyline_inside_block_stays_in_block() -> None:
    doc = tailordxf.read_tags(
        [(0, "SECTION"), (2, "BLOCKS"), (0, "BLOCK"), (2, "SHAPE")]
        + [pair for record in POLYLINE_RECORDS for pair in record]
        + [(0, "ENDBLK"), (0, "ENDSEC"), (0, "EOF")]
    )

    (polyline,) = doc.blocks["SHAPE"].entities
    assert len(polyline.vertices) == 2
    assert list(doc.modelspace()) == []
    assert doc.diagnostics == ()
