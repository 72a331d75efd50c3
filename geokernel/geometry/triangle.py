# geokernel/geometry/triangle.py
"""
Right-triangle bookkeeping.

All angles are in degrees. `angle` is the angle between the adjacent leg
and the hypotenuse, `angle2` the other acute angle (90 - angle).
"""
from typing import Optional
from pydantic import Field
import math
from geokernel.geometry.point import PointLike, Point, as_points
from geokernel.utils.base_model import ImmutableModel


class RightTriangle(ImmutableModel):
    """A fully solved right triangle."""
    adjacent: float = Field(description="Leg adjacent to `angle`")
    opposite: float = Field(description="Leg opposite `angle`")
    hypotenuse: float = Field(description="Hypotenuse")
    angle: float = Field(description="Primary acute angle in degrees")
    angle2: float = Field(description="Secondary acute angle in degrees")


def _check_angle(name: str, value: float) -> None:
    if not 0 < value < 90:
        raise ValueError(f"{name} must be strictly between 0 and 90 degrees, got {value}")


def _check_length(name: str, value: float, strict: bool = False) -> None:
    if value < 0 or (strict and value == 0):
        qualifier = "positive" if strict else "non-negative"
        raise ValueError(f"{name} must be {qualifier}, got {value}")


def _check_leg(hyp: float, leg: float) -> None:
    if leg > hyp:
        raise ValueError(f"Leg ({leg}) cannot be longer than the hypotenuse ({hyp})")


def solve_right_triangle(ang: Optional[float] = None, ang2: Optional[float] = None,
                         adj: Optional[float] = None, opp: Optional[float] = None,
                         hyp: Optional[float] = None) -> RightTriangle:
    """
    Solve a right triangle from exactly two known values.

    Args:
        ang: Angle between the adjacent leg and the hypotenuse
        ang2: The other acute angle
        adj: Length of the adjacent leg
        opp: Length of the opposite leg
        hyp: Length of the hypotenuse

    Returns:
        The solved triangle

    Raises:
        ValueError: If both angles are given, the number of given values
            is not two, or a given value is out of range
    """
    if ang is not None and ang2 is not None:
        raise ValueError("You cannot specify both ang and ang2")
    given = sum(v is not None for v in (ang, ang2, adj, opp, hyp))
    if given != 2:
        raise ValueError(f"You must specify exactly two values, got {given}")

    if ang is not None:
        _check_angle("ang", ang)
    if ang2 is not None:
        _check_angle("ang2", ang2)
    for name, value in (("adj", adj), ("opp", opp), ("hyp", hyp)):
        if value is not None:
            _check_length(name, value, strict=True)

    if ang is None:
        if ang2 is not None:
            ang = 90 - ang2
        elif adj is None:
            ang = math.degrees(math.asin(max(-1.0, min(1.0, opp / hyp))))
        elif opp is None:
            ang = math.degrees(math.acos(max(-1.0, min(1.0, adj / hyp))))
        else:
            ang = math.degrees(math.atan2(opp, adj))
    if ang2 is None:
        ang2 = 90 - ang

    rad = math.radians(ang)
    if adj is None:
        adj = opp / math.tan(rad) if opp is not None else hyp * math.cos(rad)
    if opp is None:
        opp = adj * math.tan(rad) if hyp is None else hyp * math.sin(rad)
    if hyp is None:
        hyp = adj / math.cos(rad)
    elif not (adj < hyp and opp < hyp):
        raise ValueError(f"Hypotenuse ({hyp}) must be longer than both legs ({adj}, {opp})")

    return RightTriangle(adjacent=adj, opposite=opp, hypotenuse=hyp, angle=ang, angle2=ang2)


def hyp_opp_to_adj(hyp: float, opp: float) -> float:
    _check_length("hyp", hyp)
    _check_length("opp", opp)
    _check_leg(hyp, opp)
    return math.sqrt(hyp * hyp - opp * opp)


def hyp_ang_to_adj(hyp: float, ang: float) -> float:
    _check_length("hyp", hyp)
    _check_angle("ang", ang)
    return hyp * math.cos(math.radians(ang))


def opp_ang_to_adj(opp: float, ang: float) -> float:
    _check_length("opp", opp)
    _check_angle("ang", ang)
    return opp / math.tan(math.radians(ang))


def hyp_adj_to_opp(hyp: float, adj: float) -> float:
    _check_length("hyp", hyp)
    _check_length("adj", adj)
    _check_leg(hyp, adj)
    return math.sqrt(hyp * hyp - adj * adj)


def hyp_ang_to_opp(hyp: float, ang: float) -> float:
    _check_length("hyp", hyp)
    _check_angle("ang", ang)
    return hyp * math.sin(math.radians(ang))


def adj_ang_to_opp(adj: float, ang: float) -> float:
    _check_length("adj", adj)
    _check_angle("ang", ang)
    return adj * math.tan(math.radians(ang))


def adj_opp_to_hyp(adj: float, opp: float) -> float:
    _check_length("adj", adj)
    _check_length("opp", opp)
    return math.hypot(adj, opp)


def adj_ang_to_hyp(adj: float, ang: float) -> float:
    _check_length("adj", adj)
    _check_angle("ang", ang)
    return adj / math.cos(math.radians(ang))


def opp_ang_to_hyp(opp: float, ang: float) -> float:
    _check_length("opp", opp)
    _check_angle("ang", ang)
    return opp / math.sin(math.radians(ang))


def hyp_adj_to_ang(hyp: float, adj: float) -> float:
    _check_length("hyp", hyp, strict=True)
    _check_length("adj", adj)
    _check_leg(hyp, adj)
    return math.degrees(math.acos(adj / hyp))


def hyp_opp_to_ang(hyp: float, opp: float) -> float:
    _check_length("hyp", hyp, strict=True)
    _check_length("opp", opp)
    _check_leg(hyp, opp)
    return math.degrees(math.asin(opp / hyp))


def adj_opp_to_ang(adj: float, opp: float) -> float:
    _check_length("adj", adj)
    _check_length("opp", opp)
    return math.degrees(math.atan2(opp, adj))


def triangle_area(a: PointLike, b: PointLike, c: PointLike) -> float:
    """
    Area of a triangle.

    Signed for 2D input (positive when a, b, c run counterclockwise),
    unsigned for 3D input.
    """
    a, b, c = as_points([a, b, c])
    if isinstance(a, Point):
        return (a.x * (b.y - c.y) + b.x * (c.y - a.y) + c.x * (a.y - b.y)) / 2
    return 0.5 * (c - a).cross(c - b).norm()
