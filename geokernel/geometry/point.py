# geokernel/geometry/point.py
from typing import Any, List, Mapping, Sequence, Tuple, Union
from pydantic import Field, field_validator
import math
from geokernel.geometry.constants import EPSILON
from geokernel.utils.base_model import ImmutableModel


class Point(ImmutableModel):
    """
    Represents a 2D point (or 2D vector) in Cartesian coordinates.

    This class provides the vector operations needed by the geometry kernel,
    with appropriate handling of floating-point precision.
    """
    x: float = Field(description="X coordinate")
    y: float = Field(description="Y coordinate")

    @field_validator("x", "y")
    @classmethod
    def validate_coordinates(cls, value: float) -> float:
        """Validate that coordinates are finite numbers."""
        if not math.isfinite(value):
            raise ValueError(f"Coordinate must be a finite number, got {value}")
        return value

    @property
    def dim(self) -> int:
        return 2

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """Calculate the Euclidean distance to another point."""
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2)

    def is_close_to(self, other: "Point", tolerance: float = None) -> bool:
        """
        Check if this point is close to another point within the specified tolerance.

        Args:
            other: The point to compare with
            tolerance: Maximum distance between points to be considered equal.
                      If None, uses the default EPSILON value.

        Returns:
            True if points are within the tolerance distance of each other
        """
        if tolerance is None:
            tolerance = EPSILON
        return self.distance_to(other) <= tolerance

    def __add__(self, other: "Point") -> "Point":
        """Vector addition of two points."""
        _check_same_dim(self, other)
        return Point(x=self.x + other.x, y=self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        """Vector subtraction of two points."""
        _check_same_dim(self, other)
        return Point(x=self.x - other.x, y=self.y - other.y)

    def __neg__(self) -> "Point":
        return Point(x=-self.x, y=-self.y)

    def __mul__(self, factor: float) -> "Point":
        return self.scale(factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> "Point":
        return self.scale(1.0 / divisor)

    def scale(self, factor: float) -> "Point":
        """Scale the point coordinates by a factor."""
        return Point(x=self.x * factor, y=self.y * factor)

    def dot(self, other: "Point") -> float:
        _check_same_dim(self, other)
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Point") -> float:
        """Scalar (z component) cross product of two 2D vectors."""
        _check_same_dim(self, other)
        return self.x * other.y - self.y * other.x

    def norm(self) -> float:
        return math.hypot(self.x, self.y)

    def unit(self) -> "Point":
        """Unit vector in the direction of this vector."""
        length = self.norm()
        if length == 0:
            raise ValueError("Cannot normalize a zero-length vector")
        return self.scale(1.0 / length)

    def midpoint(self, other: "Point") -> "Point":
        """Calculate the midpoint between this point and another point."""
        _check_same_dim(self, other)
        return Point(x=(self.x + other.x) / 2, y=(self.y + other.y) / 2)

    def polar_angle(self) -> float:
        """
        Calculate the polar angle of the point (from origin).
        Returns angle in radians, in range [0, 2π).
        """
        angle = math.atan2(self.y, self.x)
        if angle < 0:
            angle += 2 * math.pi
        return angle

    def to_3d(self, z: float = 0.0) -> "Point3":
        return Point3(x=self.x, y=self.y, z=z)

    def format_as_tuple(self) -> str:
        """Format the point as a tuple string."""
        return f"({self.x}, {self.y})"

    def __str__(self) -> str:
        return self.format_as_tuple()


class Point3(ImmutableModel):
    """
    Represents a 3D point (or 3D vector) in Cartesian coordinates.
    """
    x: float = Field(description="X coordinate")
    y: float = Field(description="Y coordinate")
    z: float = Field(description="Z coordinate")

    @field_validator("x", "y", "z")
    @classmethod
    def validate_coordinates(cls, value: float) -> float:
        """Validate that coordinates are finite numbers."""
        if not math.isfinite(value):
            raise ValueError(f"Coordinate must be a finite number, got {value}")
        return value

    @property
    def dim(self) -> int:
        return 3

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def distance_to(self, other: "Point3") -> float:
        return (self - other).norm()

    def is_close_to(self, other: "Point3", tolerance: float = None) -> bool:
        if tolerance is None:
            tolerance = EPSILON
        return self.distance_to(other) <= tolerance

    def __add__(self, other: "Point3") -> "Point3":
        _check_same_dim(self, other)
        return Point3(x=self.x + other.x, y=self.y + other.y, z=self.z + other.z)

    def __sub__(self, other: "Point3") -> "Point3":
        _check_same_dim(self, other)
        return Point3(x=self.x - other.x, y=self.y - other.y, z=self.z - other.z)

    def __neg__(self) -> "Point3":
        return Point3(x=-self.x, y=-self.y, z=-self.z)

    def __mul__(self, factor: float) -> "Point3":
        return self.scale(factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> "Point3":
        return self.scale(1.0 / divisor)

    def scale(self, factor: float) -> "Point3":
        return Point3(x=self.x * factor, y=self.y * factor, z=self.z * factor)

    def dot(self, other: "Point3") -> float:
        _check_same_dim(self, other)
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Point3") -> "Point3":
        _check_same_dim(self, other)
        return Point3(
            x=self.y * other.z - self.z * other.y,
            y=self.z * other.x - self.x * other.z,
            z=self.x * other.y - self.y * other.x,
        )

    def norm(self) -> float:
        return math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)

    def unit(self) -> "Point3":
        length = self.norm()
        if length == 0:
            raise ValueError("Cannot normalize a zero-length vector")
        return self.scale(1.0 / length)

    def midpoint(self, other: "Point3") -> "Point3":
        return (self + other).scale(0.5)

    def to_2d(self) -> Point:
        """Drop the z coordinate."""
        return Point(x=self.x, y=self.y)

    def format_as_tuple(self) -> str:
        return f"({self.x}, {self.y}, {self.z})"

    def __str__(self) -> str:
        return self.format_as_tuple()


Vector = Union[Point, Point3]
PointLike = Union[Point, Point3, Sequence[float], Mapping[str, float]]

ORIGIN = Point3(x=0.0, y=0.0, z=0.0)
UP = Point3(x=0.0, y=0.0, z=1.0)


def _check_same_dim(a: Any, b: Any) -> None:
    if type(a) is not type(b):
        raise ValueError(f"Dimension mismatch: cannot combine {a!r} with {b!r}")


def as_point(value: PointLike) -> Vector:
    """
    Coerce a point-like value into a Point or Point3.

    Accepts Point/Point3 instances, sequences of 2 or 3 numbers, and
    mappings with x, y (and optionally z) keys.
    """
    if isinstance(value, (Point, Point3)):
        return value
    if isinstance(value, Mapping):
        return Point3(**value) if "z" in value else Point(**value)
    if isinstance(value, (str, bytes)):
        raise ValueError(f"Expected a 2D or 3D point, got {value!r}")
    try:
        coords = [float(c) for c in value]
    except TypeError:
        raise ValueError(f"Expected a 2D or 3D point, got {value!r}")
    if len(coords) == 2:
        return Point(x=coords[0], y=coords[1])
    if len(coords) == 3:
        return Point3(x=coords[0], y=coords[1], z=coords[2])
    raise ValueError(f"Points must have 2 or 3 coordinates, got {len(coords)}")


def as_point2(value: PointLike) -> Point:
    """Coerce to a 2D point, rejecting 3D input."""
    point = as_point(value)
    if not isinstance(point, Point):
        raise ValueError(f"Expected a 2D point, got {point}")
    return point


def as_point3(value: PointLike) -> Point3:
    """Coerce to a 3D point, lifting 2D input onto the z=0 plane."""
    point = as_point(value)
    if isinstance(point, Point):
        return point.to_3d()
    return point


def as_points(values: Sequence[PointLike]) -> List[Vector]:
    """Coerce a sequence of point-likes, requiring a single dimension."""
    points = [as_point(v) for v in values]
    if points and any(type(p) is not type(points[0]) for p in points):
        raise ValueError("All points must have the same dimension")
    return points


def approx(a: Union[float, PointLike], b: Union[float, PointLike], eps: float = EPSILON) -> bool:
    """
    Approximate equality of two scalars or two same-dimension points.

    Points compare coordinate by coordinate; points of different
    dimensions are never equal.
    """
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return abs(a - b) <= eps
    pa = as_point(a)
    pb = as_point(b)
    if type(pa) is not type(pb):
        return False
    return all(abs(ca - cb) <= eps for ca, cb in zip(pa.as_tuple(), pb.as_tuple()))


def vector_sum(vectors: Sequence[Vector]) -> Vector:
    total = vectors[0]
    for v in vectors[1:]:
        total = total + v
    return total


def mean(points: Sequence[PointLike]) -> Vector:
    pts = as_points(points)
    if not pts:
        raise ValueError("Cannot take the mean of an empty point list")
    return vector_sum(pts) / len(pts)


def vector_angle(v1: PointLike, v2: PointLike) -> float:
    """Unsigned angle between two vectors, in degrees."""
    a = as_point(v1)
    b = as_point(v2)
    cos_angle = a.dot(b) / (a.norm() * b.norm())
    return math.degrees(math.acos(max(-1.0, min(1.0, cos_angle))))


def closest_point(pt: PointLike, points: Sequence[PointLike]) -> int:
    """Index of the point in `points` nearest to `pt`."""
    target = as_point(pt)
    pts = as_points(points)
    return min(range(len(pts)), key=lambda i: pts[i].distance_to(target))


def furthest_point(pt: PointLike, points: Sequence[PointLike]) -> int:
    """Index of the point in `points` furthest from `pt`."""
    target = as_point(pt)
    pts = as_points(points)
    return max(range(len(pts)), key=lambda i: pts[i].distance_to(target))


def pointlist_bounds(points: Sequence[PointLike]) -> Tuple[Vector, Vector]:
    """Get the axis-aligned bounding box as (min_point, max_point)."""
    pts = as_points(points)
    if not pts:
        raise ValueError("Cannot bound an empty point list")
    coords = list(zip(*(p.as_tuple() for p in pts)))
    return as_point([min(c) for c in coords]), as_point([max(c) for c in coords])
