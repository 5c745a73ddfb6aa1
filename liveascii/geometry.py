"""Plain 2D/3D geometry helpers used when rasterising triangles."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Vec3:
    """A point in space; rasterisation only looks at ``x`` and ``y``."""

    x: float
    y: float
    z: float


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in the xy plane."""

    minx: float
    miny: float
    maxx: float
    maxy: float


@dataclass(frozen=True)
class Triangle:
    """Three vertices."""

    v1: Vec3
    v2: Vec3
    v3: Vec3

    def get_box(self) -> BoundingBox:
        """Return the smallest axis-aligned box around the triangle."""
        xs = (self.v1.x, self.v2.x, self.v3.x)
        ys = (self.v1.y, self.v2.y, self.v3.y)
        return BoundingBox(minx=min(xs), miny=min(ys), maxx=max(xs), maxy=max(ys))

    def signed_area(self) -> float:
        """Return the area in the xy plane, positive for counter-clockwise order."""
        a, b, c = self.v1, self.v2, self.v3
        return 0.5 * ((b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x))