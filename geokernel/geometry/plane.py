# geokernel/geometry/plane.py
from typing import List, Optional, Sequence, Tuple, Union
from pydantic import Field, field_validator, model_validator
import math
import logging
from geokernel.geometry.point import (
    Point3, PointLike, ORIGIN, as_point3,
)
from geokernel.geometry.line import (
    Line, LineLike, LineKind, BoundsLike, as_line, collinear, find_noncollinear_points,
    within_bounds,
)
from geokernel.geometry.constants import EPSILON
from geokernel.utils.base_model import ImmutableModel

logger = logging.getLogger(__name__)


class Plane(ImmutableModel):
    """
    A plane Ax + By + Cz = D.

    Planes built by this kernel always carry a unit normal (A, B, C), which
    makes D the signed distance of the plane from the origin along that
    normal. Planes supplied by callers only need a non-zero normal; every
    query normalizes before measuring.
    """
    a: float = Field(description="X component of the normal")
    b: float = Field(description="Y component of the normal")
    c: float = Field(description="Z component of the normal")
    d: float = Field(description="Offset: value of the normal dotted with any point on the plane")

    @field_validator("a", "b", "c", "d")
    @classmethod
    def validate_coefficients(cls, value: float) -> float:
        """Validate that coefficients are finite numbers."""
        if not math.isfinite(value):
            raise ValueError(f"Plane coefficient must be a finite number, got {value}")
        return value

    @model_validator(mode="after")
    def validate_normal(self):
        """The normal vector cannot be zero."""
        if self.a == 0 and self.b == 0 and self.c == 0:
            raise ValueError("Plane normal cannot be the zero vector")
        return self

    @property
    def normal_vector(self) -> Point3:
        """The (A, B, C) coefficients as a vector, not normalized."""
        return Point3(x=self.a, y=self.b, z=self.c)

    @property
    def normal(self) -> Point3:
        """Unit normal of the plane."""
        return self.normal_vector.unit()

    @property
    def offset(self) -> float:
        """Signed distance of the plane from the origin along its unit normal."""
        return self.d / self.normal_vector.norm()

    def normalized(self) -> "Plane":
        """Equivalent plane with a unit normal."""
        length = self.normal_vector.norm()
        return self.with_changes(a=self.a / length, b=self.b / length,
                                 c=self.c / length, d=self.d / length)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.a, self.b, self.c, self.d)

    def __str__(self) -> str:
        return f"Plane({self.a}x + {self.b}y + {self.c}z = {self.d})"


PlaneLike = Union[Plane, Sequence[float]]


def as_plane(value: PlaneLike) -> Plane:
    """Coerce a Plane or an (A, B, C, D) sequence into a Plane."""
    if isinstance(value, Plane):
        return value
    coeffs = list(value)
    if len(coeffs) != 4:
        raise ValueError(f"A plane needs exactly 4 coefficients, got {len(coeffs)}")
    return Plane(a=coeffs[0], b=coeffs[1], c=coeffs[2], d=coeffs[3])


def plane_from_normal(normal: PointLike, point: PointLike = ORIGIN) -> Plane:
    """Plane with the given normal passing through `point`."""
    n = as_point3(normal).unit()
    return Plane(a=n.x, b=n.y, c=n.z, d=n.dot(as_point3(point)))


def plane_from_3_points(p1: PointLike, p2: PointLike, p3: PointLike,
                        eps: float = EPSILON) -> Optional[Plane]:
    """
    Plane through three points.

    The normal is the unit cross product (p3 - p1) x (p2 - p1), so the
    orientation depends on the point order; any permutation yields the
    same plane with the same or opposite normal. 2D points are taken to
    lie on the z=0 plane.

    Returns:
        The plane, or None if the points are collinear
    """
    p1, p2, p3 = as_point3(p1), as_point3(p2), as_point3(p3)
    if collinear(p1, p2, p3, eps):
        logger.debug(f"Collinear points {p1}, {p2}, {p3} do not define a plane")
        return None
    normal = (p3 - p1).cross(p2 - p1).unit()
    return Plane(a=normal.x, b=normal.y, c=normal.z, d=normal.dot(p1))


def plane_from_points(points: Sequence[PointLike], fast: bool = False,
                      eps: float = EPSILON) -> Optional[Plane]:
    """
    Plane through a set of points.

    Three well separated points are picked to build the plane. Unless
    `fast` is set, every point must lie within eps of it.

    Returns:
        The plane, or None if the points are collinear or not coplanar
    """
    pts = [as_point3(p) for p in points]
    indices = find_noncollinear_points(pts, eps)
    if indices is None:
        return None
    plane = plane_from_3_points(*(pts[i] for i in indices), eps=eps)
    if plane is None:
        return None
    if not fast and not points_on_plane(pts, plane, eps):
        logger.debug(f"{len(pts)} points are not coplanar within {eps}")
        return None
    return plane


def plane_normal(plane: PlaneLike) -> Point3:
    return as_plane(plane).normal


def plane_offset(plane: PlaneLike) -> float:
    return as_plane(plane).offset


def distance_from_plane(plane: PlaneLike, point: PointLike) -> float:
    """Signed distance, positive on the side the normal points toward."""
    plane = as_plane(plane)
    return plane.normal.dot(as_point3(point)) - plane.offset


def closest_point_on_plane(plane: PlaneLike, point: PointLike) -> Point3:
    plane = as_plane(plane)
    p = as_point3(point)
    return p - plane.normal * distance_from_plane(plane, p)


def projection_on_plane(plane: PlaneLike, points: Sequence[PointLike]) -> List[Point3]:
    """Project each point orthogonally onto the plane."""
    plane = as_plane(plane)
    return [closest_point_on_plane(plane, p) for p in points]


def plane_point_nearest_origin(plane: PlaneLike) -> Point3:
    plane = as_plane(plane)
    return plane.normal * plane.offset


def in_front_of_plane(plane: PlaneLike, point: PointLike, eps: float = EPSILON) -> bool:
    """True if the point is strictly on the side the normal points toward."""
    return distance_from_plane(plane, point) > eps


def points_on_plane(points: Sequence[PointLike], plane: PlaneLike, eps: float = EPSILON) -> bool:
    """True if every point lies within eps of the plane."""
    plane = as_plane(plane)
    return all(abs(distance_from_plane(plane, p)) <= eps for p in points)


def coplanar(points: Sequence[PointLike], eps: float = EPSILON) -> bool:
    """
    True if the points define a plane and all lie on it.

    Fewer than three points, or points that are all collinear, do not
    define a plane and are reported as not coplanar.
    """
    if len(points) < 3:
        return False
    return plane_from_points(points, eps=eps) is not None


def plane_line_angle(plane: PlaneLike, line: LineLike) -> float:
    """
    Angle between a line and a plane, in degrees.

    Positive when the line runs toward the side the normal points at,
    zero when the line is parallel to the plane.
    """
    line = _as_line3(line)
    direction = line.direction_vector
    if direction.dot(direction) == 0:
        raise ValueError("Cannot measure the angle of a zero-length line")
    sin_angle = direction.dot(plane_normal(plane)) / direction.norm()
    return math.degrees(math.asin(max(-1.0, min(1.0, sin_angle))))


def _as_line3(line: LineLike) -> Line:
    line = as_line(line)
    return Line(start=as_point3(line.start), end=as_point3(line.end))


def general_plane_line_intersection(plane: PlaneLike, line: LineLike,
                                    eps: float = EPSILON) -> Optional[Tuple[Union[Point3, Line], Optional[float]]]:
    """
    Intersect a plane with an unbounded line.

    Returns:
        (point, t) for a single crossing at parameter t along the line,
        (line, None) when the line lies in the plane,
        None when the line is parallel to the plane and off it
    """
    plane = as_plane(plane)
    line = _as_line3(line)
    u = line.direction_vector
    n = plane.normal
    w = line.start - plane_point_nearest_origin(plane)
    denominator = n.dot(u)
    if abs(denominator) < eps:
        if abs(n.dot(w)) < eps:
            return (line, None)
        logger.debug(f"{line} is parallel to {plane}")
        return None
    t = -n.dot(w) / denominator
    return (line.point_at(t), t)


def plane_line_intersection(plane: PlaneLike, line: LineLike,
                            bounded: BoundsLike = LineKind.LINE,
                            eps: float = EPSILON) -> Union[Point3, Line, None]:
    """
    Intersect a plane with a line, ray or segment.

    Returns:
        The crossing point; the line itself if it lies in the plane; None if
        it is parallel to the plane, or the crossing falls outside the
        bounded range.
    """
    result = general_plane_line_intersection(plane, line, eps)
    if result is None:
        return None
    found, t = result
    if t is None:
        return found
    if not within_bounds(t, bounded, eps):
        return None
    return found


def _det3(r1: Point3, r2: Point3, r3: Point3) -> float:
    return r1.dot(r2.cross(r3))


def plane_intersection(plane1: PlaneLike, plane2: PlaneLike, plane3: Optional[PlaneLike] = None,
                       eps: float = EPSILON) -> Union[Point3, Line, None]:
    """
    Intersect two or three planes.

    Three planes meet in a point, found by solving the 3x3 system of their
    coefficient rows. Two planes meet in a line running along n1 x n2.

    Returns:
        A Point3 for three planes, a Line for two, or None if the planes
        do not meet in a unique point or line
    """
    planes = [as_plane(plane1).normalized(), as_plane(plane2).normalized()]
    if plane3 is not None:
        planes.append(as_plane(plane3).normalized())
        n1, n2, n3 = (p.normal_vector for p in planes)
        det = _det3(n1, n2, n3)
        if abs(det) < eps:
            logger.debug("Three planes share no unique point")
            return None
        d1, d2, d3 = (p.d for p in planes)
        return (n2.cross(n3) * d1 + n3.cross(n1) * d2 + n1.cross(n2) * d3) / det

    n1, n2 = (p.normal_vector for p in planes)
    direction = n1.cross(n2)
    if direction.norm() < eps:
        logger.debug("Planes are parallel; no line of intersection")
        return None
    # Fix the coordinate along the dominant direction component at zero and
    # solve the remaining 2x2 system.
    dir_coords = direction.as_tuple()
    k = max(range(3), key=lambda i: abs(dir_coords[i]))
    i, j = [axis for axis in range(3) if axis != k]
    r1 = n1.as_tuple()
    r2 = n2.as_tuple()
    det = r1[i] * r2[j] - r1[j] * r2[i]
    d1, d2 = planes[0].d, planes[1].d
    coords = [0.0, 0.0, 0.0]
    coords[i] = (d1 * r2[j] - d2 * r1[j]) / det
    coords[j] = (r1[i] * d2 - r2[i] * d1) / det
    point = Point3(x=coords[0], y=coords[1], z=coords[2])
    return Line(start=point, end=point + direction)
