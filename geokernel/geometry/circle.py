# geokernel/geometry/circle.py
"""Circle construction and tangency."""
from typing import Any, List, Optional
from pydantic import Field, field_validator
import math
import logging
from geokernel.geometry.point import (
    Point, Point3, Vector, PointLike, UP, as_point, as_point2, as_point3, as_points,
    approx, vector_angle,
)
from geokernel.geometry.line import (
    Line, LineLike, LineKind, BoundsLike, as_line, collinear, within_bounds,
)
from geokernel.geometry.intersection import line_intersection
from geokernel.geometry.plane import plane_from_3_points
from geokernel.geometry.transform import plane_transform
from geokernel.geometry.constants import EPSILON
from geokernel.utils.base_model import ImmutableModel

logger = logging.getLogger(__name__)


def _check_radius(radius: float) -> None:
    if not (radius > 0 and math.isfinite(radius)):
        raise ValueError(f"Radius must be positive and finite, got {radius}")


class Circle(ImmutableModel):
    """
    A circle given by its center and radius.

    `normal` is the axis of the circle's plane; 2D circles use +Z.
    """
    center: Vector = Field(description="Center point")
    radius: float = Field(description="Radius, strictly positive")
    normal: Point3 = Field(default=UP, description="Unit normal of the circle's plane")

    @field_validator("center", mode="before")
    @classmethod
    def validate_center(cls, v: Any) -> Vector:
        return as_point(v)

    @field_validator("radius")
    @classmethod
    def validate_radius(cls, value: float) -> float:
        """Validate that the radius is positive and finite."""
        _check_radius(value)
        return value


class TangentCircle(ImmutableModel):
    """
    A circle tangent to two rays from a common vertex.

    The tangent points and angles are only filled in when requested.
    """
    center: Vector = Field(description="Center of the tangent circle")
    normal: Point3 = Field(description="Unit normal of the plane holding both rays")
    tangent1: Optional[Vector] = Field(default=None, description="Tangent point on the first ray")
    tangent2: Optional[Vector] = Field(default=None, description="Tangent point on the second ray")
    angle1: Optional[float] = Field(default=None, description="Signed angle to tangent1 in degrees")
    angle2: Optional[float] = Field(default=None, description="Signed angle to tangent2 in degrees")


class PointTangent(ImmutableModel):
    """A tangent point on a circle together with its polar angle (degrees)."""
    angle: float = Field(description="Angle of the tangent point around the center, in degrees")
    point: Point = Field(description="Tangent point on the circle")


def _signed_angle(v_from: Vector, v_to: Vector, axis: Point3) -> float:
    """Angle in degrees from one vector to another, signed about `axis`."""
    a = as_point3(v_from)
    b = as_point3(v_to)
    return math.degrees(math.atan2(a.cross(b).dot(axis), a.dot(b)))


def circle_from_2_tangents(pt1: PointLike, pt2: PointLike, pt3: PointLike, radius: float,
                           tangents: bool = False, eps: float = EPSILON) -> Optional[TangentCircle]:
    """
    Find the circle of a given radius tangent to two rays.

    The rays start at the vertex `pt2` and pass through `pt1` and `pt3`.
    The center lies on the angle bisector at radius / sin(half angle) from
    the vertex.

    Args:
        pt1: Point on the first ray
        pt2: Common vertex of the rays
        pt3: Point on the second ray
        radius: Radius of the circle
        tangents: Also compute the tangent points and their angles, measured
            from the center-to-vertex direction about the normal

    Returns:
        The tangent circle, or None if the points are collinear
    """
    _check_radius(radius)
    p1, p2, p3 = as_points([pt1, pt2, pt3])
    if collinear(p1, p2, p3, eps):
        logger.debug(f"Rays through {p1}, {p2}, {p3} are collinear; no tangent circle")
        return None
    v1 = (p1 - p2).unit()
    v2 = (p3 - p2).unit()
    bisector = ((v1 + v2) / 2).unit()
    normal = as_point3(v1).cross(as_point3(v2)).unit()
    half_angle = math.radians(vector_angle(v1, v2)) / 2
    hyp = radius / math.sin(half_angle)
    center = p2 + bisector * hyp
    if not tangents:
        return TangentCircle(center=center, normal=normal)

    along = hyp * math.cos(half_angle)
    tp1 = p2 + v1 * along
    tp2 = p2 + v2 * along
    return TangentCircle(
        center=center,
        normal=normal,
        tangent1=tp1,
        tangent2=tp2,
        angle1=_signed_angle(p2 - center, tp1 - center, normal),
        angle2=_signed_angle(p2 - center, tp2 - center, normal),
    )


def circle_from_3_points(pt1: PointLike, pt2: PointLike, pt3: PointLike,
                         eps: float = EPSILON) -> Optional[Circle]:
    """
    Find the circle passing through three points.

    3D points are flattened onto the plane they define, solved in 2D and
    lifted back. The circle normal is the triangle normal, flipped if
    needed so that its z component is non-negative.

    Returns:
        The circle, or None if the points are collinear
    """
    p1, p2, p3 = as_points([pt1, pt2, pt3])
    if collinear(p1, p2, p3, eps):
        logger.debug(f"Points {p1}, {p2}, {p3} are collinear; no circumscribed circle")
        return None

    if isinstance(p1, Point3):
        xform = plane_transform(plane_from_3_points(p1, p2, p3, eps))
        flat = circle_from_3_points(*xform.project([p1, p2, p3]), eps=eps)
        if flat is None:
            return None
        center = xform.to_world(flat.center)
        normal = (p1 - p2).cross(p3 - p2).unit()
        sign = -1.0 if normal.z < 0 else 1.0
        # Adding 0.0 clears negative zeros
        normal = Point3(x=sign * normal.x + 0.0, y=sign * normal.y + 0.0, z=sign * normal.z + 0.0)
        return Circle(center=center, radius=center.distance_to(p2), normal=normal)

    v1 = p1 - p2
    v2 = p3 - p2
    mid1 = p2 + v1 / 2
    mid2 = p2 + v2 / 2
    bisector1 = Line(start=mid1, end=mid1 + Point(x=-v1.y, y=v1.x))
    bisector2 = Line(start=mid2, end=mid2 + Point(x=-v2.y, y=v2.x))
    center = line_intersection(bisector1, bisector2, eps)
    if center is None:
        return None
    return Circle(center=center, radius=center.distance_to(p2), normal=UP)


def circle_point_tangents(center: PointLike, radius: float, point: PointLike,
                          eps: float = EPSILON) -> List[PointTangent]:
    """
    Find the points where lines through `point` touch a 2D circle.

    Returns:
        Two tangents for an external point, the point itself when it lies
        on the circle, and an empty list when it is inside
    """
    _check_radius(radius)
    c = as_point2(center)
    p = as_point2(point)
    delta = p - c
    dist = delta.norm()
    base_angle = math.degrees(math.atan2(delta.y, delta.x))
    if approx(dist, radius, eps):
        return [PointTangent(angle=base_angle, point=p)]
    if dist < radius:
        return []
    relative = math.degrees(math.acos(radius / dist))
    result = []
    for angle in (base_angle + relative, base_angle - relative):
        theta = math.radians(angle)
        result.append(PointTangent(
            angle=angle,
            point=Point(x=c.x + radius * math.cos(theta), y=c.y + radius * math.sin(theta)),
        ))
    return result


def circle_circle_tangents(c1: PointLike, r1: float, c2: PointLike, r2: float,
                           eps: float = EPSILON) -> List[Line]:
    """
    Find the lines tangent to two 2D circles.

    Each tangent is returned as a Line from its contact point on the first
    circle to its contact point on the second. The two external tangents
    come first, then the two internal ones. Internal tangents exist only
    when the circles do not overlap, and tangents that collapse to a single
    point (circles touching there) are left out.

    Returns:
        Up to four tangent lines; none when one circle lies inside the other
    """
    _check_radius(r1)
    _check_radius(r2)
    c1 = as_point2(c1)
    c2 = as_point2(c2)
    dist = c1.distance_to(c2)
    if dist < eps:
        logger.debug("Concentric circles have no common tangents")
        return []
    u = (c2 - c1) / dist

    ratios = [(r2 - r1) / dist, (r2 - r1) / dist, (-r2 - r1) / dist, (-r2 - r1) / dist]
    sides = [-1, 1, -1, 1]
    external = [1, 1, -1, -1]
    if 1 - ratios[2] ** 2 >= 0:
        count = 4
    elif 1 - ratios[0] ** 2 >= 0:
        count = 2
    else:
        count = 0

    tangents = []
    for i in range(count):
        ratio = ratios[i]
        s = sides[i] * math.sqrt(max(0.0, 1 - ratio ** 2))
        n = Point(x=ratio * u.x - s * u.y, y=s * u.x + ratio * u.y)
        start = c1 - n * r1
        end = c2 - n * (external[i] * r2)
        if not approx(start, end, eps):
            tangents.append(Line(start=start, end=end))
    return tangents


def circle_line_intersection(center: PointLike, radius: float, line: LineLike,
                             bounded: BoundsLike = LineKind.LINE,
                             eps: float = EPSILON) -> List[Point]:
    """
    Intersect a 2D circle with a line, ray or segment.

    Returns:
        Zero, one (tangent) or two points, ordered along the line
    """
    _check_radius(radius)
    c = as_point2(center)
    line = as_line(line)
    if line.dim != 2:
        raise ValueError("circle_line_intersection requires a 2D line")
    direction = line.direction_vector
    length_sq = direction.dot(direction)
    if length_sq == 0:
        raise ValueError("Cannot intersect a circle with a zero-length line")
    t0 = (c - line.start).dot(direction) / length_sq
    foot = line.point_at(t0)
    dist = foot.distance_to(c)
    if dist > radius + eps:
        return []
    if abs(dist - radius) <= eps:
        params = [t0]
    else:
        half = math.sqrt(radius ** 2 - dist ** 2) / math.sqrt(length_sq)
        params = [t0 - half, t0 + half]
    return [line.point_at(t) for t in params if within_bounds(t, bounded, eps)]
