from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

Point3D = tuple[float, float, float]


@dataclass(frozen=True)
class Insert:
    dxftype: ClassVar[str] = "INSERT"

    block: str = ""
    layer: str = ""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @property
    def insert(self) -> Point3D:
        return (self.x, self.y, self.z)

    def to_points(self) -> list[Point3D]:
        return [self.insert]


@dataclass(frozen=True)
class Text:
    dxftype: ClassVar[str] = "TEXT"

    text: str = ""
    layer: str = ""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    size: float = 0.0
    rotation: float = 0.0

    @property
    def insert(self) -> Point3D:
        return (self.x, self.y, self.z)

    def to_points(self) -> list[Point3D]:
        return [self.insert]


@dataclass(frozen=True)
class Line:
    dxftype: ClassVar[str] = "LINE"

    layer: str = ""
    x1: float = 0.0
    y1: float = 0.0
    z1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    z2: float = 0.0

    @property
    def start(self) -> Point3D:
        return (self.x1, self.y1, self.z1)

    @property
    def end(self) -> Point3D:
        return (self.x2, self.y2, self.z2)

    def to_points(self) -> list[Point3D]:
        return [self.start, self.end]


@dataclass(frozen=True)
class Point:
    dxftype: ClassVar[str] = "POINT"

    layer: str = ""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @property
    def location(self) -> Point3D:
        return (self.x, self.y, self.z)

    def to_points(self) -> list[Point3D]:
        return [self.location]


@dataclass(frozen=True)
class Vertex:
    dxftype: ClassVar[str] = "VERTEX"

    layer: str = ""
    x: float = 0.0
    y: float = 0.0
    flags: int = 0

    def to_points(self) -> list[Point3D]:
        return [(self.x, self.y, 0.0)]


@dataclass(frozen=True)
class Polyline:
    """Flags are kept as read:
    1 closed, 2 curve-fit, 4 spline-fit, 8 3D polyline, 16 3D mesh,
    32 mesh closed in N, 64 polyface mesh, 128 continuous linetype.
    """

    dxftype: ClassVar[str] = "POLYLINE"

    layer: str = ""
    flags: int = 0
    vertices: tuple[Vertex, ...] = ()

    @property
    def closed(self) -> bool:
        return bool(self.flags & 1)

    def to_points(self) -> list[Point3D]:
        # Closed polylines are represented by the flag, not a repeated first point.
        return [(vertex.x, vertex.y, 0.0) for vertex in self.vertices]


@dataclass(frozen=True)
class Block:
    """Flags: 1 anonymous, 2 has attributes, 4 xref, 8 xref overlay,
    16 externally dependent, 32 resolved xref, 64 referenced xref.
    """

    dxftype: ClassVar[str] = "BLOCK"

    name: str = ""
    layer: str = ""
    flags: int = 0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    entities: tuple["Entity", ...] = ()

    @property
    def base_point(self) -> Point3D:
        return (self.x, self.y, self.z)


Entity = Union[Insert, Text, Line, Point, Polyline]
