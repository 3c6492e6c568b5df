from __future__ import annotations

import logging

import pytest

import tailordxf
from tailordxf.diagnostics import MISSING_EOF, STREAM_CORRUPTION, UNKNOWN_RECORD, Diagnostics
from tailordxf.entity import Line, Point, Text
from tailordxf.errors import ReadCancelled
from tailordxf.reader import DXFReader
from tailordxf.tags import DXFTag, PairSource
from tests._dxf_helpers import LINE_SECTION, RecordingSink, entities_section


def test_read_tags_builds_single_line_in_entities_section() -> None:
    doc = tailordxf.read_tags(LINE_SECTION)

    assert doc.terminated is True
    assert [section.name for section in doc.sections] == ["ENTITIES"]
    (line,) = doc.sections[0].entities
    assert line == Line(layer="0", x1=1.0, y1=2.0, z1=0.0, x2=3.0, y2=4.0, z2=0.0)
    assert line.start == (1.0, 2.0, 0.0)
    assert line.end == (3.0, 4.0, 0.0)
    assert doc.diagnostics == ()


def test_unknown_records_are_skipped_without_losing_neighbours() -> None:
    doc = tailordxf.read_tags(
        entities_section(
            [(0, "LINE"), (8, "A"), (10, "1"), (11, "2")],
            [(0, "CIRCLE"), (8, "A"), (10, "5"), (20, "5"), (40, "1")],
            [(0, "POINT"), (8, "B"), (10, "7")],
            [(0, "LWPOLYLINE"), (90, "2"), (10, "0"), (20, "0"), (10, "1"), (20, "1")],
            [(0, "TEXT"), (1, "after"), (8, "C")],
        )
    )

    entities = list(doc.modelspace())
    assert [entity.dxftype for entity in entities] == ["LINE", "POINT", "TEXT"]
    assert entities[0] == Line(layer="A", x1=1.0, x2=2.0)
    assert entities[1] == Point(layer="B", x=7.0)
    assert entities[2] == Text(text="after", layer="C")
    assert [item.record for item in doc.diagnostics if item.kind == UNKNOWN_RECORD] == [
        "CIRCLE",
        "LWPOLYLINE",
    ]


def test_reading_stops_at_eof_record() -> None:
    pairs = LINE_SECTION + [
        (0, "SECTION"),
        (2, "BLOCKS"),
        (0, "POINT"),
        (0, "ENDSEC"),
    ]
    source = PairSource(pairs)
    sink = RecordingSink()

    assert DXFReader(source, sink).read_all() is True
    assert [event[0] for event in sink.events] == ["begin_section", "add_entity", "end_section"]
    assert source.peek() == DXFTag(0, "SECTION")


def test_eof_stops_document_even_with_trailing_records() -> None:
    doc = tailordxf.read_tags(LINE_SECTION + [(0, "SECTION"), (2, "BLOCKS"), (0, "ENDSEC")])

    assert [section.name for section in doc.sections] == ["ENTITIES"]
    assert doc.diagnostics == ()


def test_missing_eof_is_soft_terminator() -> None:
    doc = tailordxf.read_tags(LINE_SECTION[:-1])

    assert doc.terminated is False
    assert len(list(doc.modelspace())) == 1
    assert [item.kind for item in doc.diagnostics] == [MISSING_EOF]


def test_field_tags_at_record_boundary_are_reported_and_skipped() -> None:
    doc = tailordxf.read_tags([(999, "junk"), (5, "2A")] + LINE_SECTION)

    (item,) = doc.diagnostics
    assert item.kind == STREAM_CORRUPTION
    assert item.code == 999
    assert item.value == "junk"
    assert len(list(doc.modelspace().query("LINE"))) == 1


def test_record_keyword_is_compared_without_surrounding_spaces() -> None:
    doc = tailordxf.read_tags(entities_section([(0, "  LINE "), (8, "X")]))

    assert list(doc.modelspace()) == [Line(layer="X")]


def test_diagnostics_callback_and_document_share_reports() -> None:
    seen = []
    diagnostics = Diagnostics(on_report=seen.append)

    doc = tailordxf.read_tags(entities_section([(0, "ARC"), (40, "1")]), diagnostics=diagnostics)

    assert [item.kind for item in seen] == [UNKNOWN_RECORD]
    assert doc.diagnostics == tuple(seen)
    assert diagnostics.counts() == {UNKNOWN_RECORD: 1}


def test_diagnostics_are_logged(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="tailordxf"):
        tailordxf.read_tags(entities_section([(0, "ARC"), (40, "1")]))

    assert "skipping unsupported record 'ARC'" in caplog.text


def test_unknown_record_diagnostic_has_line_number() -> None:
    text = "0\nSECTION\n2\nENTITIES\n0\nHATCH\n0\nENDSEC\n0\nEOF\n"

    doc = tailordxf.readstr(text)

    (item,) = doc.diagnostics
    assert item.kind == UNKNOWN_RECORD
    assert item.line == 5


def test_cancel_callback_stops_reading() -> None:
    calls = []

    def cancel() -> bool:
        calls.append(1)
        return len(calls) > 2

    with pytest.raises(ReadCancelled):
        tailordxf.read_tags(LINE_SECTION, cancel=cancel)
    assert len(calls) == 3


def test_timeout_stops_reading() -> None:
    with pytest.raises(ReadCancelled, match="timed out"):
        tailordxf.read_tags(LINE_SECTION, timeout=0)


def test_generous_timeout_does_not_interfere() -> None:
    doc = tailordxf.read_tags(LINE_SECTION, timeout=60)

    assert doc.terminated is True
