from __future__ import annotations

from typing import Any, Iterable, Iterator, NamedTuple

from .diagnostics import INVALID_GROUP_CODE, TRUNCATED_TAG, Diagnostics

_FLOAT_CODE_RANGES = (
    (10, 59),
    (110, 149),
    (210, 239),
    (460, 469),
    (1010, 1059),
)
_INT_CODE_RANGES = (
    (60, 99),
    (160, 179),
    (270, 289),
    (370, 389),
    (400, 409),
    (420, 429),
    (440, 459),
    (1060, 1071),
)


def tag_type(code: int) -> str:
    for low, high in _FLOAT_CODE_RANGES:
        if low <= code <= high:
            return "float"
    for low, high in _INT_CODE_RANGES:
        if low <= code <= high:
            return "int"
    return "str"


def _numeric_text(value: str) -> str | None:
    # int() and float() also take digit separators and non-ASCII digits.
    text = value.strip()
    if "_" in text or not text.isascii():
        return None
    return text


def to_int(value: str) -> int:
    text = _numeric_text(value)
    if text is None:
        return 0
    try:
        return int(text)
    except ValueError:
        return 0


def to_float(value: str) -> float:
    text = _numeric_text(value)
    if text is None:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


class DXFTag(NamedTuple):
    code: int
    value: str

    def typed(self) -> Any:
        kind = tag_type(self.code)
        if kind == "float":
            return to_float(self.value)
        if kind == "int":
            return to_int(self.value)
        return self.value


class TagSource:
    """Ordered (code, value) pairs with one tag of lookahead.

    Subclasses only produce the next tag; record boundary handling lives here
    so every source honours the same consumption rules.
    """

    def __init__(self, *, diagnostics: Diagnostics | None = None) -> None:
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.line: int | None = None
        self._pending: tuple[DXFTag, int | None] | None = None
        self._exhausted = False

    def _read_next(self) -> tuple[DXFTag, int | None] | None:
        raise NotImplementedError

    def peek(self) -> DXFTag | None:
        if self._pending is None and not self._exhausted:
            self._pending = self._read_next()
            if self._pending is None:
                self._exhausted = True
        if self._pending is None:
            return None
        return self._pending[0]

    def advance_any(self) -> DXFTag | None:
        tag = self.peek()
        if tag is None:
            return None
        assert self._pending is not None
        self.line = self._pending[1]
        self._pending = None
        return tag

    def advance_if_nonzero(self) -> DXFTag | None:
        # A code 0 tag stays buffered for the dispatcher.
        tag = self.peek()
        if tag is None or tag.code == 0:
            return None
        return self.advance_any()

    def skip_to_next_record(self) -> int:
        skipped = 0
        while self.advance_if_nonzero() is not None:
            skipped += 1
        return skipped

    def __iter__(self) -> Iterator[DXFTag]:
        while True:
            tag = self.advance_any()
            if tag is None:
                return
            yield tag


class TagReader(TagSource):
    """Tokenizes ASCII DXF text: a group code line followed by a value line."""

    def __init__(self, lines: Iterable[str], *, diagnostics: Diagnostics | None = None) -> None:
        super().__init__(diagnostics=diagnostics)
        self._lines = iter(lines)
        self._line_number = 0

    def _read_next(self) -> tuple[DXFTag, int | None] | None:
        while True:
            code_line = next(self._lines, None)
            if code_line is None:
                return None
            self._line_number += 1
            code_line_number = self._line_number
            if code_line_number == 1:
                code_line = code_line.lstrip("\ufeff")

            value_line = next(self._lines, None)
            if value_line is None:
                if code_line.strip():
                    self.diagnostics.report(
                        TRUNCATED_TAG,
                        f"group code {code_line.strip()!r} has no value line",
                        value=code_line.strip(),
                        line=code_line_number,
                    )
                return None
            self._line_number += 1

            try:
                code = int(code_line.strip())
            except ValueError:
                self.diagnostics.report(
                    INVALID_GROUP_CODE,
                    f"group code line {code_line.strip()!r} is not an integer",
                    value=code_line.strip(),
                    line=code_line_number,
                )
                continue
            return DXFTag(code, value_line.rstrip()), code_line_number


class PairSource(TagSource):
    """Adapts pairs produced by an external tokenizer."""

    def __init__(
        self,
        pairs: Iterable[tuple[int | str, str]],
        *,
        diagnostics: Diagnostics | None = None,
    ) -> None:
        super().__init__(diagnostics=diagnostics)
        self._pairs = iter(pairs)

    def _read_next(self) -> tuple[DXFTag, int | None] | None:
        for code, value in self._pairs:
            try:
                tag_code = int(code)
            except (TypeError, ValueError):
                self.diagnostics.report(
                    INVALID_GROUP_CODE,
                    f"group code {code!r} is not an integer",
                    value=str(code),
                )
                continue
            return DXFTag(tag_code, str(value).rstrip()), None
        return None
