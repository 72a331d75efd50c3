# geokernel/geometry/intersection.py
"""Line, ray and segment intersection and closest-point queries."""
from typing import Optional, Tuple
from pydantic import Field
import logging
from geokernel.geometry.point import Point, Vector, PointLike, as_point
from geokernel.geometry.line import (
    Line, LineLike, LineKind, BoundsLike, as_line, collinear, line_normal, within_bounds,
)
from geokernel.geometry.constants import EPSILON
from geokernel.utils.base_model import ImmutableModel

logger = logging.getLogger(__name__)


class LineIntersection(ImmutableModel):
    """
    Result of intersecting two unbounded 2D lines.

    For crossing lines, `point` is the intersection, `t` its position along
    the first line and `u` its position along the second (0 at start, 1 at
    end). For parallel lines `point`, `t` and `u` are None and `coincident`
    tells whether the two lines are the same line.
    """
    point: Optional[Point] = Field(default=None, description="Intersection point")
    t: Optional[float] = Field(default=None, description="Parameter along the first line")
    u: Optional[float] = Field(default=None, description="Parameter along the second line")
    coincident: bool = Field(default=False, description="Parallel lines that overlap")

    @property
    def parallel(self) -> bool:
        return self.point is None


def _require_2d(*lines: Line) -> None:
    for line in lines:
        if line.dim != 2:
            raise ValueError(f"Line intersection requires 2D lines, got {line}")


def general_line_intersection(line1: LineLike, line2: LineLike,
                              eps: float = EPSILON) -> LineIntersection:
    """
    Intersect two unbounded 2D lines.

    Line 1 is start1 + t * dir1 and line 2 is start2 + u * dir2. The lines
    are parallel when the determinant of the two directions is within eps
    of zero.
    """
    line1 = as_line(line1)
    line2 = as_line(line2)
    _require_2d(line1, line2)

    d1x, d1y = line1.direction_vector.x, line1.direction_vector.y
    d2x, d2y = line2.direction_vector.x, line2.direction_vector.y

    det = d1x * d2y - d1y * d2x

    if abs(det) < eps:
        coincident = collinear(line1.start, line1.end, line2.start, eps)
        logger.debug(f"Lines are parallel (det={det:.2e}, coincident={coincident})")
        return LineIntersection(coincident=coincident)

    dx = line2.start.x - line1.start.x
    dy = line2.start.y - line1.start.y

    t = (dx * d2y - dy * d2x) / det
    u = (dx * d1y - dy * d1x) / det

    return LineIntersection(
        point=Point(x=line1.start.x + t * d1x, y=line1.start.y + t * d1y),
        t=t,
        u=u,
    )


def bounded_line_intersection(line1: LineLike, line2: LineLike,
                              bounded1: BoundsLike = LineKind.LINE,
                              bounded2: BoundsLike = LineKind.LINE,
                              eps: float = EPSILON) -> Optional[Point]:
    """
    Intersect two 2D lines, each of which may be a line, ray or segment.

    Parameters on bounded ends are accepted within eps of their limit so
    that intersections at endpoints are not lost to rounding.
    """
    result = general_line_intersection(line1, line2, eps)
    if result.parallel:
        return None
    if not within_bounds(result.t, bounded1, eps):
        return None
    if not within_bounds(result.u, bounded2, eps):
        return None
    return result.point


def line_intersection(line1: LineLike, line2: LineLike, eps: float = EPSILON) -> Optional[Point]:
    """Intersection of two unbounded lines, or None if they are parallel."""
    return bounded_line_intersection(line1, line2, LineKind.LINE, LineKind.LINE, eps)


def line_ray_intersection(line: LineLike, ray: LineLike, eps: float = EPSILON) -> Optional[Point]:
    return bounded_line_intersection(line, ray, LineKind.LINE, LineKind.RAY, eps)


def line_segment_intersection(line: LineLike, segment: LineLike,
                              eps: float = EPSILON) -> Optional[Point]:
    return bounded_line_intersection(line, segment, LineKind.LINE, LineKind.SEGMENT, eps)


def ray_intersection(ray1: LineLike, ray2: LineLike, eps: float = EPSILON) -> Optional[Point]:
    return bounded_line_intersection(ray1, ray2, LineKind.RAY, LineKind.RAY, eps)


def ray_segment_intersection(ray: LineLike, segment: LineLike,
                             eps: float = EPSILON) -> Optional[Point]:
    return bounded_line_intersection(ray, segment, LineKind.RAY, LineKind.SEGMENT, eps)


def segment_intersection(segment1: LineLike, segment2: LineLike,
                         eps: float = EPSILON) -> Optional[Point]:
    """Intersection of two segments, or None if they are parallel or don't meet."""
    return bounded_line_intersection(segment1, segment2, LineKind.SEGMENT, LineKind.SEGMENT, eps)


def lines_coincident(line1: LineLike, line2: LineLike, eps: float = EPSILON) -> bool:
    """True if two 2D lines are parallel and lie on top of each other."""
    return general_line_intersection(line1, line2, eps).coincident


def _perpendicular_foot(line: Line, pt: Vector) -> Tuple[float, Vector]:
    """Parameter and position of the foot of the perpendicular from pt."""
    if line.start == line.end:
        raise ValueError("Cannot drop a perpendicular onto a zero-length line")
    if line.dim == 2:
        perpendicular = Line(start=pt, end=pt + line_normal(line))
        result = general_line_intersection(line, perpendicular)
        if not result.parallel:
            return result.t, result.point
    # 3D lines, and 2D lines too short for a stable determinant
    direction = line.direction_vector
    t = (pt - line.start).dot(direction) / direction.dot(direction)
    return t, line.point_at(t)


def closest_point_on_line(line: LineLike, pt: PointLike) -> Vector:
    """
    Find the point on an unbounded line nearest to a given point.

    In 2D the line is intersected with the perpendicular through the point;
    3D lines use the projection parameter directly.
    A zero-length line raises ValueError.
    """
    _, foot = _perpendicular_foot(as_line(line), as_point(pt))
    return foot


def closest_point_on_segment(segment: LineLike, pt: PointLike) -> Vector:
    """
    Find the point on a segment nearest to a given point.

    A perpendicular foot outside the segment is clamped to the nearer
    endpoint. A zero-length segment returns its start point.
    """
    segment = as_line(segment)
    p = as_point(pt)
    if segment.start == segment.end:
        return segment.start
    t, foot = _perpendicular_foot(segment, p)
    if t <= 0:
        return segment.start
    if t >= 1:
        return segment.end
    return foot
