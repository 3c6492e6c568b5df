from __future__ import annotations

import time
from typing import Any, Callable, ClassVar

from .diagnostics import MISSING_EOF, STREAM_CORRUPTION, UNHANDLED_FIELD, UNKNOWN_RECORD
from .document import TERMINATOR
from .entity import Block, Insert, Line, Point, Polyline, Text, Vertex
from .errors import ReadCancelled
from .sink import DocumentSink
from .tags import TagSource, to_float, to_int

_Field = tuple[str, Callable[[str], Any]]

_BLOCK_FIELDS: dict[int, _Field] = {
    2: ("name", str),
    8: ("layer", str),
    70: ("flags", to_int),
    10: ("x", to_float),
    20: ("y", to_float),
    30: ("z", to_float),
}
_INSERT_FIELDS: dict[int, _Field] = {
    2: ("block", str),
    8: ("layer", str),
    10: ("x", to_float),
    20: ("y", to_float),
    30: ("z", to_float),
}
_TEXT_FIELDS: dict[int, _Field] = {
    1: ("text", str),
    8: ("layer", str),
    10: ("x", to_float),
    20: ("y", to_float),
    30: ("z", to_float),
    40: ("size", to_float),
    50: ("rotation", to_float),
}
_LINE_FIELDS: dict[int, _Field] = {
    8: ("layer", str),
    10: ("x1", to_float),
    20: ("y1", to_float),
    30: ("z1", to_float),
    11: ("x2", to_float),
    21: ("y2", to_float),
    31: ("z2", to_float),
}
_POINT_FIELDS: dict[int, _Field] = {
    8: ("layer", str),
    10: ("x", to_float),
    20: ("y", to_float),
    30: ("z", to_float),
}
_POLYLINE_FIELDS: dict[int, _Field] = {
    8: ("layer", str),
    70: ("flags", to_int),
}
# Vertices are 2D: group code 30 is never read.
_VERTEX_FIELDS: dict[int, _Field] = {
    8: ("layer", str),
    10: ("x", to_float),
    20: ("y", to_float),
    70: ("flags", to_int),
}

# Recognized codes whose values are not kept.
_TEXT_IGNORED = frozenset({7})
_INSERT_IGNORED = frozenset({66})
_POINT_IGNORED = frozenset({38, 39, 50})
_POLYLINE_IGNORED = frozenset({66})


def _header_value(values: list[Any]) -> Any:
    if len(values) == 1:
        return values[0]
    return tuple(values)


class DXFReader:
    """Drives a TagSource record by record and reports what it finds to a sink.

    Records start with a code 0 tag whose value names the record kind. Known
    kinds are read by the handlers in ``_HANDLERS``; anything else is skipped
    up to the next code 0 tag. Reading stops at the ``EOF`` record or when the
    source runs dry.
    """

    def __init__(
        self,
        source: TagSource,
        sink: DocumentSink,
        *,
        cancel: Callable[[], bool] | None = None,
        timeout: float | None = None,
    ) -> None:
        self.source = source
        self.sink = sink
        self.diagnostics = source.diagnostics
        self._cancel = cancel
        self._timeout = timeout
        self._deadline = None if timeout is None else time.monotonic() + timeout

    def read_all(self) -> bool:
        """Read records until EOF; returns False if the stream ended without one."""
        while True:
            self._check_cancelled()
            tag = self.source.advance_any()
            if tag is None:
                self.diagnostics.report(
                    MISSING_EOF,
                    f"stream ended without an {TERMINATOR} record",
                    line=self.source.line,
                )
                return False
            self.diagnostics.position = self.source.line

            if tag.code != 0:
                self.diagnostics.report(
                    STREAM_CORRUPTION,
                    f"expected a record start, got group code {tag.code}",
                    code=tag.code,
                    value=tag.value,
                )
                self.source.skip_to_next_record()
                continue

            keyword = tag.value.strip()
            if keyword == TERMINATOR:
                return True
            handler = self._HANDLERS.get(keyword)
            if handler is None:
                self.diagnostics.report(
                    UNKNOWN_RECORD,
                    f"skipping unsupported record {keyword!r}",
                    record=keyword,
                )
                self.source.skip_to_next_record()
                continue
            handler(self)

    def _check_cancelled(self) -> None:
        if self._cancel is not None and self._cancel():
            raise ReadCancelled("read cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise ReadCancelled(f"read timed out after {self._timeout} seconds")

    def _read_fields(
        self,
        record: str,
        fields: dict[int, _Field],
        *,
        ignored: frozenset[int] = frozenset(),
        report_unhandled: bool = True,
    ) -> dict[str, Any]:
        values: dict[str, Any] = {}
        while True:
            tag = self.source.advance_if_nonzero()
            if tag is None:
                return values
            target = fields.get(tag.code)
            if target is not None:
                name, convert = target
                values[name] = convert(tag.value)
                continue
            if tag.code in ignored or not report_unhandled:
                continue
            self.diagnostics.report(
                UNHANDLED_FIELD,
                f"unhandled group code {tag.code} ({tag.value!r}) in {record}",
                record=record,
                code=tag.code,
                value=tag.value,
                line=self.source.line,
            )

    def _read_section(self) -> None:
        # Code 9 starts a header variable; the tags after it are its value.
        name = ""
        header: dict[str, Any] = {}
        variable: str | None = None
        values: list[Any] = []
        while True:
            tag = self.source.advance_if_nonzero()
            if tag is None:
                break
            if tag.code == 9:
                if variable is not None:
                    header[variable] = _header_value(values)
                variable = tag.value.strip()
                values = []
            elif variable is not None:
                values.append(tag.typed())
            elif tag.code == 2:
                name = tag.value
        if variable is not None:
            header[variable] = _header_value(values)
        self.sink.begin_section(name, header)

    def _read_endsec(self) -> None:
        self.source.skip_to_next_record()
        self.sink.end_section()

    def _read_block(self) -> None:
        values = self._read_fields("BLOCK", _BLOCK_FIELDS, report_unhandled=False)
        self.sink.begin_block(Block(**values))

    def _read_endblk(self) -> None:
        self.source.skip_to_next_record()
        self.sink.end_block()

    def _read_insert(self) -> None:
        self.sink.add_entity(Insert(**self._read_fields("INSERT", _INSERT_FIELDS, ignored=_INSERT_IGNORED)))

    def _read_text(self) -> None:
        self.sink.add_entity(Text(**self._read_fields("TEXT", _TEXT_FIELDS, ignored=_TEXT_IGNORED)))

    def _read_line(self) -> None:
        self.sink.add_entity(Line(**self._read_fields("LINE", _LINE_FIELDS)))

    def _read_point(self) -> None:
        self.sink.add_entity(Point(**self._read_fields("POINT", _POINT_FIELDS, ignored=_POINT_IGNORED)))

    def _read_polyline(self) -> None:
        # Group 66 (vertices follow) is implied for POLYLINE.
        values = self._read_fields("POLYLINE", _POLYLINE_FIELDS, ignored=_POLYLINE_IGNORED)
        self.sink.begin_polyline(Polyline(**values))

    def _read_vertex(self) -> None:
        values = self._read_fields("VERTEX", _VERTEX_FIELDS, report_unhandled=False)
        self.sink.append_vertex(Vertex(**values))

    def _read_seqend(self) -> None:
        self.source.skip_to_next_record()
        self.sink.end_sequence()

    _HANDLERS: ClassVar[dict[str, Callable[["DXFReader"], None]]] = {
        "SECTION": _read_section,
        "ENDSEC": _read_endsec,
        "BLOCK": _read_block,
        "ENDBLK": _read_endblk,
        "INSERT": _read_insert,
        "TEXT": _read_text,
        "LINE": _read_line,
        "POINT": _read_point,
        "POLYLINE": _read_polyline,
        "VERTEX": _read_vertex,
        "SEQEND": _read_seqend,
    }

