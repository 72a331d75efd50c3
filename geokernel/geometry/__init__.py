"""Points, lines, planes, circles, triangles and polygons."""
from geokernel.geometry.constants import EPSILON
from geokernel.geometry.point import Point, Point3, Vector, as_point, as_points, approx
from geokernel.geometry.line import Line, LineKind
from geokernel.geometry.intersection import LineIntersection
from geokernel.geometry.plane import Plane
from geokernel.geometry.transform import PlaneTransform, plane_transform
from geokernel.geometry.triangle import RightTriangle, solve_right_triangle
from geokernel.geometry.circle import Circle, PointTangent, TangentCircle
from geokernel.geometry.polygon import Polygon

__all__ = [
    "EPSILON",
    "Point", "Point3", "Vector", "as_point", "as_points", "approx",
    "Line", "LineKind",
    "LineIntersection",
    "Plane",
    "PlaneTransform", "plane_transform",
    "RightTriangle", "solve_right_triangle",
    "Circle", "PointTangent", "TangentCircle",
    "Polygon",
]
