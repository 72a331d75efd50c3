# geokernel/geometry/transform.py
"""Rigid transforms used to flatten planar 3D geometry to 2D and back."""
from typing import List, Sequence, Tuple
from pydantic import Field
import math
from geokernel.geometry.point import Point, Point3, PointLike, UP, as_point2, as_point3
from geokernel.geometry.plane import PlaneLike, as_plane, plane_point_nearest_origin
from geokernel.geometry.constants import EPSILON
from geokernel.utils.base_model import ImmutableModel

Matrix3 = Tuple[Tuple[float, float, float], ...]


class PlaneTransform(ImmutableModel):
    """
    Rigid transform that maps a plane onto the XY plane.

    `to_local` moves `origin` to the origin and then rotates so that the
    axes become X, Y and Z; `to_world` is its inverse. Points of the plane
    land on z=0, and 2D points handed to `to_world` are lifted onto the
    plane.
    """
    origin: Point3 = Field(description="World point mapped to the origin")
    x_axis: Point3 = Field(description="World direction mapped to +X")
    y_axis: Point3 = Field(description="World direction mapped to +Y")
    z_axis: Point3 = Field(description="World direction mapped to +Z (the plane normal)")

    def to_local(self, point: PointLike) -> Point3:
        d = as_point3(point) - self.origin
        return Point3(x=d.dot(self.x_axis), y=d.dot(self.y_axis), z=d.dot(self.z_axis))

    def to_world(self, point: PointLike) -> Point3:
        q = as_point3(point)
        return self.origin + self.x_axis * q.x + self.y_axis * q.y + self.z_axis * q.z

    def project(self, points: Sequence[PointLike]) -> List[Point]:
        """Map world points into the plane's 2D frame, dropping the normal component."""
        return [self.to_local(p).to_2d() for p in points]

    def lift(self, points: Sequence[PointLike]) -> List[Point3]:
        return [self.to_world(p) for p in points]

    @property
    def matrix(self) -> Tuple[Tuple[float, float, float, float], ...]:
        """The forward transform as a 4x4 affine matrix."""
        rows = []
        for axis in (self.x_axis, self.y_axis, self.z_axis):
            rows.append(axis.as_tuple() + (-axis.dot(self.origin),))
        rows.append((0.0, 0.0, 0.0, 1.0))
        return tuple(rows)


def _rotation_to_up(n: Point3) -> Matrix3:
    """Minimal rotation taking the unit vector n onto +Z (Rodrigues form)."""
    c = n.dot(UP)
    if c < -1 + EPSILON:
        # Half turn about X for a normal pointing straight down
        return ((1.0, 0.0, 0.0), (0.0, -1.0, 0.0), (0.0, 0.0, -1.0))
    v = n.cross(UP)
    k = ((0.0, -v.z, v.y), (v.z, 0.0, -v.x), (-v.y, v.x, 0.0))
    k2 = tuple(
        tuple(sum(k[r][m] * k[m][col] for m in range(3)) for col in range(3))
        for r in range(3)
    )
    scale = 1.0 / (1.0 + c)
    return tuple(
        tuple((1.0 if r == col else 0.0) + k[r][col] + k2[r][col] * scale for col in range(3))
        for r in range(3)
    )


def plane_transform(plane: PlaneLike) -> PlaneTransform:
    """
    Transform that maps a plane onto the XY plane.

    The plane's point nearest the origin goes to the origin, and the normal
    is rotated onto +Z by the smallest rotation that does so.
    """
    plane = as_plane(plane)
    rows = _rotation_to_up(plane.normal)
    axes = [Point3(x=row[0], y=row[1], z=row[2]) for row in rows]
    return PlaneTransform(
        origin=plane_point_nearest_origin(plane),
        x_axis=axes[0],
        y_axis=axes[1],
        z_axis=axes[2],
    )


def rotate_2d(point: PointLike, angle: float, cp: PointLike = (0.0, 0.0)) -> Point:
    """Rotate a 2D point counterclockwise by `angle` degrees about `cp`."""
    p = as_point2(point)
    center = as_point2(cp)
    theta = math.radians(angle)
    dx, dy = p.x - center.x, p.y - center.y
    return Point(
        x=center.x + dx * math.cos(theta) - dy * math.sin(theta),
        y=center.y + dx * math.sin(theta) + dy * math.cos(theta),
    )
