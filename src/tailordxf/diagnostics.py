from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterator

logger = logging.getLogger("tailordxf")
logger.addHandler(logging.NullHandler())

UNKNOWN_RECORD = "unknown-record"
UNHANDLED_FIELD = "unhandled-field"
STREAM_CORRUPTION = "stream-corruption"
INVALID_GROUP_CODE = "invalid-group-code"
TRUNCATED_TAG = "truncated-tag"
MISSING_EOF = "missing-eof"
ORPHAN_END = "orphan-end"
ORPHAN_VERTEX = "orphan-vertex"
NESTED_SCOPE = "nested-scope"
UNCLOSED_SCOPE = "unclosed-scope"
ENTITY_OUTSIDE_SECTION = "entity-outside-section"
ATTRIB_SEQEND = "attrib-seqend"

# Per-record notes are expected in real files; everything else hints at a damaged stream.
_DEBUG_KINDS = {UNKNOWN_RECORD, UNHANDLED_FIELD, ENTITY_OUTSIDE_SECTION, ATTRIB_SEQEND}


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    message: str
    record: str | None = None
    code: int | None = None
    value: str | None = None
    line: int | None = None

    def __str__(self) -> str:
        where = f"line {self.line}: " if self.line is not None else ""
        return f"{where}{self.kind}: {self.message}"


class Diagnostics:
    """Collects recoverable irregularities found while reading a stream.

    Every report is kept in order, mirrored to the ``tailordxf`` logger and
    passed to ``on_report`` when given.
    """

    def __init__(self, on_report: Callable[[Diagnostic], None] | None = None) -> None:
        self._items: list[Diagnostic] = []
        self._on_report = on_report
        self.position: int | None = None

    def report(
        self,
        kind: str,
        message: str,
        *,
        record: str | None = None,
        code: int | None = None,
        value: str | None = None,
        line: int | None = None,
    ) -> Diagnostic:
        if line is None:
            line = self.position
        item = Diagnostic(kind=kind, message=message, record=record, code=code, value=value, line=line)
        self._items.append(item)
        level = logging.DEBUG if kind in _DEBUG_KINDS else logging.WARNING
        logger.log(level, "%s", item)
        if self._on_report is not None:
            self._on_report(item)
        return item

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def of_kind(self, kind: str) -> list[Diagnostic]:
        return [item for item in self._items if item.kind == kind]

    def counts(self) -> Counter[str]:
        return Counter(item.kind for item in self._items)
