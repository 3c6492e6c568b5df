from __future__ import annotations

import argparse
import logging
import sys
from collections import OrderedDict
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Sequence

from .diagnostics import Diagnostic
from .document import SUPPORTED_ENTITY_TYPES, read


def _package_version() -> str:
    try:
        return version("tailordxf")
    except PackageNotFoundError:
        return "0.0.0"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tailordxf", description="Read and inspect ASCII DXF files.")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_package_version()}",
    )
    subparsers = parser.add_subparsers(dest="command")

    inspect_parser = subparsers.add_parser("inspect", help="Show basic DXF information.")
    inspect_parser.add_argument("path", help="Path to DXF file.")
    inspect_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show more diagnostics per kind.",
    )
    inspect_parser.add_argument(
        "--encoding",
        default="utf-8",
        help="Text encoding of the file, e.g. cp1252 for pre-2007 DXF.",
    )
    inspect_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up after this many seconds.",
    )
    inspect_parser.add_argument(
        "--log-level",
        default=None,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Also log diagnostics to stderr at this level.",
    )
    return parser


def _run_inspect(
    path: str,
    *,
    verbose: bool = False,
    encoding: str = "utf-8",
    timeout: float | None = None,
) -> int:
    file_path = Path(path)
    if not file_path.exists():
        print(f"error: file not found: {file_path}", file=sys.stderr)
        return 2

    try:
        doc = read(file_path, encoding=encoding, timeout=timeout)
    except Exception as exc:
        print(f"error: failed to read DXF: {exc}", file=sys.stderr)
        return 2

    counts: OrderedDict[str, int] = OrderedDict()
    total = 0
    for entity in doc.modelspace():
        counts[entity.dxftype] = counts.get(entity.dxftype, 0) + 1
        total += 1

    print(f"file: {file_path}")
    print(f"version: {doc.dxfversion or 'unknown'}")
    print(f"terminated: {'yes' if doc.terminated else 'no'}")
    print(f"sections: {' '.join(section.name for section in doc.sections)}")
    print(f"total_entities: {total}")
    for dxftype in SUPPORTED_ENTITY_TYPES:
        count = counts.get(dxftype, 0)
        if count > 0:
            print(f"{dxftype}: {count}")
    print(f"blocks: {len(doc.blocks)}")
    if doc.unsectioned is not None:
        print(f"unsectioned_entities: {len(doc.unsectioned.entities)}")

    by_kind: dict[str, list[Diagnostic]] = {}
    for item in doc.diagnostics:
        by_kind.setdefault(item.kind, []).append(item)
    print(f"diagnostics: {len(doc.diagnostics)}")
    top_n = 10 if verbose else 3
    for kind, items in sorted(by_kind.items()):
        print(f"diag[{kind}]: {len(items)}")
        for item in items[:top_n]:
            print(f"  {item}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "inspect":
        if args.log_level:
            logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
        return _run_inspect(
            args.path,
            verbose=bool(args.verbose),
            encoding=args.encoding,
            timeout=args.timeout,
        )

    parser.print_help()
    return 0
