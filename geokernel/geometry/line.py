# geokernel/geometry/line.py
from enum import Enum
from typing import Any, Optional, Sequence, Tuple, Union
from pydantic import Field, field_validator, model_validator
import logging
from geokernel.geometry.point import (
    Point, Vector, PointLike, as_point, as_point2, as_points, approx, furthest_point,
)
from geokernel.geometry.constants import EPSILON
from geokernel.utils.base_model import ImmutableModel

logger = logging.getLogger(__name__)


class Line(ImmutableModel):
    """
    A pair of points used as a line, a ray or a segment.

    The same two points describe all three loci: a line is unbounded in
    both directions, a ray is bounded at `start` only, and a segment is
    bounded at both ends. Boundedness is supplied to the operations that
    care about it (see LineKind), not stored here.

    Zero-length lines can be represented; operations that need a direction
    reject them.
    """
    start: Vector = Field(description="First point (the origin of a ray)")
    end: Vector = Field(description="Second point")

    @field_validator("start", "end", mode="before")
    @classmethod
    def validate_point(cls, v: Any) -> Vector:
        """Accept any point-like value."""
        return as_point(v)

    @model_validator(mode="after")
    def validate_dimensions(self):
        """Both points must have the same dimension."""
        if type(self.start) is not type(self.end):
            raise ValueError(
                f"Line endpoints must have the same dimension, got {self.start} and {self.end}"
            )
        return self

    @property
    def dim(self) -> int:
        return self.start.dim

    @property
    def length(self) -> float:
        """Get the length of the line segment."""
        return self.start.distance_to(self.end)

    @property
    def midpoint(self) -> Vector:
        """Get the midpoint of the line segment."""
        return self.start.midpoint(self.end)

    @property
    def direction_vector(self) -> Vector:
        """Get the direction vector from start to end (vector pointing along the line)."""
        return self.end - self.start

    @property
    def unit_direction_vector(self) -> Vector:
        """Get the unit direction vector (normalized direction vector)."""
        return self.direction_vector.unit()

    @property
    def normal_vector(self) -> Point:
        """Get the normal vector (perpendicular to the line, 90° counterclockwise rotation)."""
        if self.dim != 2:
            raise ValueError("normal_vector is only defined for 2D lines")
        direction = self.direction_vector
        return Point(x=-direction.y, y=direction.x)

    def point_at(self, t: float) -> Vector:
        """Point at parameter t, where t=0 is start and t=1 is end."""
        return self.start + self.direction_vector * t

    def reversed(self) -> "Line":
        return self.with_changes(start=self.end, end=self.start)

    def __str__(self) -> str:
        return f"Line({self.start} -> {self.end})"


LineLike = Union[Line, Sequence[PointLike]]


def as_line(value: LineLike) -> Line:
    """Coerce a Line or a pair of point-likes into a Line."""
    if isinstance(value, Line):
        return value
    points = list(value)
    if len(points) != 2:
        raise ValueError(f"A line needs exactly 2 points, got {len(points)}")
    return Line(start=points[0], end=points[1])


class LineKind(str, Enum):
    """How far a pair of points extends."""
    LINE = "line"
    RAY = "ray"
    SEGMENT = "segment"

    @property
    def bounds(self) -> Tuple[bool, bool]:
        """Boundedness at (start, end)."""
        return {
            LineKind.LINE: (False, False),
            LineKind.RAY: (True, False),
            LineKind.SEGMENT: (True, True),
        }[self]


BoundsLike = Union[LineKind, bool, Sequence[bool]]


def as_bounds(bounded: BoundsLike) -> Tuple[bool, bool]:
    """
    Normalize a boundedness argument to a (start, end) pair.

    A LineKind maps to its bounds, a single bool applies to both ends, and
    a pair gives each end separately.
    """
    if isinstance(bounded, LineKind):
        return bounded.bounds
    if isinstance(bounded, bool):
        return (bounded, bounded)
    pair = tuple(bounded)
    if len(pair) != 2 or not all(isinstance(b, bool) for b in pair):
        raise ValueError(f"Bounds must be a LineKind, a bool or a pair of bools, got {bounded!r}")
    return pair


def within_bounds(t: float, bounded: BoundsLike, eps: float = EPSILON) -> bool:
    """
    True if parameter t is allowed by `bounded`.

    A bounded start requires t >= 0 and a bounded end requires t <= 1, both
    relaxed by eps so that hits exactly at an endpoint survive rounding.
    """
    lower, upper = as_bounds(bounded)
    if lower and t < -eps:
        return False
    if upper and t > 1 + eps:
        return False
    return True


def distance_from_line(line: LineLike, pt: PointLike) -> float:
    """
    Calculate the perpendicular distance from a point to an unbounded line.

    Works in 2D and 3D. The point-to-start vector is projected onto the
    unit direction and the norm of the residual is returned.
    """
    line = as_line(line)
    d = as_point(pt) - line.start
    n = line.unit_direction_vector
    return (d - n * d.dot(n)).norm()


def point_on_segment(point: PointLike, segment: LineLike, eps: float = EPSILON) -> bool:
    """
    Check if a point lies on a segment.

    Endpoints are tested first, so a zero-length segment never reaches the
    distance test. Otherwise the point must lie within the segment's
    bounding box (grown by `eps`) and within `eps` of the segment's line.
    """
    p = as_point(point)
    seg = as_line(segment)
    if approx(p, seg.start, eps) or approx(p, seg.end, eps):
        return True
    for a, c, b in zip(seg.start.as_tuple(), p.as_tuple(), seg.end.as_tuple()):
        if not min(a, b) - eps <= c <= max(a, b) + eps:
            return False
    return distance_from_line(seg, p) <= eps


def side_of_line(point: PointLike, line: LineLike) -> float:
    """
    Signed side test of a 2D point against a directed line.

    Returns the cross product of (end - start) and (point - start):
    positive if the point is left of the line, zero if on it, negative
    if right of it.
    """
    line = as_line(line)
    p = as_point2(point)
    if line.dim != 2:
        raise ValueError("side_of_line requires a 2D line")
    return line.direction_vector.cross(p - line.start)


def collinear(a: PointLike, b: PointLike, c: PointLike, eps: float = EPSILON) -> bool:
    """True if the three points lie (within eps) on one line."""
    a, b, c = as_points([a, b, c])
    if approx(a, b, eps):
        return True
    return distance_from_line(Line(start=a, end=b), c) < eps


def line_normal(p1: Union[PointLike, LineLike], p2: Optional[PointLike] = None) -> Point:
    """
    Unit normal of a 2D line, rotated 90° counterclockwise from its direction.

    Accepts either two points or a single line.
    """
    line = as_line(p1) if p2 is None else Line(start=p1, end=p2)
    if line.dim != 2:
        raise ValueError("line_normal requires a 2D line")
    return line.normal_vector.unit()


def find_noncollinear_points(points: Sequence[PointLike],
                             eps: float = EPSILON) -> Optional[Tuple[int, int, int]]:
    """
    Find indices of three well separated, non-collinear points.

    The first point is paired with the point furthest from it, and the
    third is the one furthest from the line through those two, which
    maximizes the area of the triangle for that base.

    Returns:
        (0, b, c) or None if every point is collinear within eps
    """
    pts = as_points(points)
    if len(pts) < 3:
        return None
    pa = pts[0]
    b = furthest_point(pa, pts)
    if pa.distance_to(pts[b]) <= eps:
        logger.debug(f"All {len(pts)} points coincide; no noncollinear triple")
        return None
    base = Line(start=pa, end=pts[b])
    distances = [distance_from_line(base, p) for p in pts]
    c = max(range(len(pts)), key=lambda i: distances[i])
    if distances[c] < eps:
        logger.debug(f"All {len(pts)} points are collinear; no noncollinear triple")
        return None
    return (0, b, c)


def points_are_collinear(points: Sequence[PointLike], eps: float = EPSILON) -> bool:
    """True if fewer than three points are given or they all lie on one line."""
    if len(points) < 3:
        return True
    return find_noncollinear_points(points, eps) is None
