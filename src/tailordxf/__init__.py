from typing import Sequence

from .diagnostics import Diagnostic, Diagnostics
from .document import Document, Layout, Section, read, read_tags, readstr
from .entity import Block, Insert, Line, Point, Polyline, Text, Vertex
from .errors import DXFError, DXFOpenError, ReadCancelled
from .reader import DXFReader
from .sink import DocumentBuilder, DocumentSink
from .tags import DXFTag, PairSource, TagReader, TagSource

__all__ = [
    "read",
    "readstr",
    "read_tags",
    "Document",
    "Layout",
    "Section",
    "Block",
    "Insert",
    "Line",
    "Point",
    "Polyline",
    "Text",
    "Vertex",
    "Diagnostic",
    "Diagnostics",
    "DXFReader",
    "DocumentBuilder",
    "DocumentSink",
    "DXFTag",
    "TagSource",
    "TagReader",
    "PairSource",
    "DXFError",
    "DXFOpenError",
    "ReadCancelled",
]


def main(argv: Sequence[str] | None = None) -> int:
    from tailordxf.cli import main as cli_main

    return cli_main(argv)
