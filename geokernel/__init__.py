"""
geokernel - 2D/3D computational geometry kernel
"""
import logging

from geokernel.geometry import (
    EPSILON,
    Point, Point3, Vector, as_point, as_points, approx,
    Line, LineKind,
    LineIntersection,
    Plane,
    PlaneTransform, plane_transform,
    RightTriangle, solve_right_triangle,
    Circle, PointTangent, TangentCircle,
    Polygon,
)
from geokernel.utils import ImmutableModel

# Library logging stays silent until the application configures handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

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
    "ImmutableModel",
]
