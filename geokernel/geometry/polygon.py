# geokernel/geometry/polygon.py
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union
from pydantic import Field, field_validator
import logging
from geokernel.geometry.point import (
    Point, Point3, Vector, PointLike, as_point, as_point2, as_point3, as_points, approx,
    closest_point, pointlist_bounds, vector_sum,
)
from geokernel.geometry.line import (
    Line, LineLike, LineKind, BoundsLike, as_bounds, find_noncollinear_points, point_on_segment,
    side_of_line, within_bounds,
)
from geokernel.geometry.intersection import general_line_intersection
from geokernel.geometry.plane import (
    Plane, plane_from_3_points, plane_from_points, general_plane_line_intersection,
)
from geokernel.geometry.transform import plane_transform, rotate_2d
from geokernel.geometry.constants import EPSILON, X_AXIS, Y_AXIS, Z_AXIS
from geokernel.utils.base_model import ImmutableModel

logger = logging.getLogger(__name__)


class Polygon(ImmutableModel):
    """
    Represents a closed polygon defined by a sequence of vertices.

    The last vertex connects back to the first; there is no repeated
    closing vertex. Vertices keep the order they were given in, so the
    signed area reflects the winding. Simplicity and (for 3D polygons)
    planarity are assumed, not checked.
    """
    vertices: List[Vector] = Field(description="List of vertices defining the polygon")

    @field_validator("vertices", mode="before")
    @classmethod
    def coerce_vertices(cls, v: Any) -> List[Vector]:
        """Accept any sequence of point-like values of one dimension."""
        return as_points(v)

    @field_validator("vertices")
    @classmethod
    def validate_vertices(cls, v: List[Vector]) -> List[Vector]:
        """Validate that we have enough vertices and no repeated neighbours."""
        if len(v) < 3:
            raise ValueError("Polygon must have at least 3 vertices")

        for i in range(len(v)):
            next_idx = (i + 1) % len(v)
            if v[i].is_close_to(v[next_idx]):
                raise ValueError(f"Consecutive vertices {i} and {next_idx} are too close")

        return v

    @property
    def dim(self) -> int:
        return self.vertices[0].dim

    @property
    def edges(self) -> List[Line]:
        """Get all edges of the polygon as Line objects."""
        n = len(self.vertices)
        return [Line(start=self.vertices[i], end=self.vertices[(i + 1) % n]) for i in range(n)]

    @property
    def area(self) -> Optional[float]:
        """Signed area for 2D polygons, unsigned area for planar 3D polygons."""
        return polygon_area(self)

    @property
    def centroid(self) -> Optional[Vector]:
        return centroid(self)

    @property
    def normal(self) -> Optional[Point3]:
        return polygon_normal(self)

    @property
    def bounding_box(self) -> Tuple[Vector, Vector]:
        """Get the bounding box as (min_point, max_point)."""
        return pointlist_bounds(self.vertices)

    @property
    def perimeter(self) -> float:
        """Calculate the perimeter of the polygon."""
        return sum(edge.length for edge in self.edges)

    def is_clockwise(self) -> bool:
        return polygon_is_clockwise(self)

    def is_convex(self) -> bool:
        return is_convex_polygon(self)

    def classify_point(self, point: PointLike, tolerance: float = None) -> int:
        """1 if inside, 0 if on the boundary, -1 if outside."""
        if tolerance is None:
            tolerance = EPSILON
        return point_in_polygon(point, self, tolerance)

    def contains_point(self, point: PointLike, tolerance: float = None) -> bool:
        """True if the point is inside the polygon or on its boundary."""
        return self.classify_point(point, tolerance) >= 0

    def clockwise(self) -> "Polygon":
        return self.with_changes(vertices=clockwise_polygon(self))

    def ccw(self) -> "Polygon":
        return self.with_changes(vertices=ccw_polygon(self))

    def __str__(self) -> str:
        return f"Polygon([{', '.join(str(v) for v in self.vertices)}])"


PolygonLike = Union[Polygon, Sequence[PointLike]]


def as_polygon_points(poly: PolygonLike) -> List[Vector]:
    """Vertices of a Polygon, or a coerced sequence of point-likes."""
    if isinstance(poly, Polygon):
        return list(poly.vertices)
    return as_points(poly)


def _polygon_2d(poly: PolygonLike, operation: str) -> List[Point]:
    points = as_polygon_points(poly)
    if points and not isinstance(points[0], Point):
        raise ValueError(f"{operation} requires a 2D polygon")
    if len(points) < 3:
        raise ValueError(f"{operation} requires at least 3 vertices, got {len(points)}")
    return points


def _deduplicate(points: List[Vector], eps: float = EPSILON) -> List[Vector]:
    """Drop consecutive repeated vertices, including a repeated closing vertex."""
    result = []
    for p in points:
        if not result or not approx(p, result[-1], eps):
            result.append(p)
    if len(result) > 1 and approx(result[0], result[-1], eps):
        result.pop()
    return result


def _edge_pairs(points: List[Vector]) -> Iterable[Tuple[Vector, Vector]]:
    n = len(points)
    for i in range(n):
        yield points[i], points[(i + 1) % n]


# ============================================================
# Area, convexity and winding
# ============================================================
def polygon_area(poly: PolygonLike, signed: bool = True) -> Optional[float]:
    """
    Area of a polygon.

    2D polygons use the shoelace formula; the result is negative for
    clockwise polygons unless `signed` is False. 3D polygons give the
    magnitude of the cross product sum projected on the polygon's normal.

    Returns:
        The area, or None for a 3D polygon that is not planar
    """
    points = as_polygon_points(poly)
    if len(points) < 3:
        return 0.0
    if isinstance(points[0], Point):
        area = sum(a.cross(b) for a, b in _edge_pairs(points)) / 2
        return area if signed else abs(area)

    plane = plane_from_points(points)
    if plane is None:
        logger.debug("Polygon is not planar; area is undefined")
        return None
    total = vector_sum([a.cross(b) for a, b in _edge_pairs(points)])
    return abs(total.dot(plane.normal)) / 2


def is_convex_polygon(poly: PolygonLike) -> bool:
    """
    True if every vertex turns the same way.

    The result is meaningless for self-intersecting polygons.
    """
    points = _polygon_2d(poly, "is_convex_polygon")
    n = len(points)
    turns = [
        (points[(i + 1) % n] - points[i]).cross(points[(i + 2) % n] - points[(i + 1) % n])
        for i in range(n)
    ]
    return not any(t > 0 for t in turns) or not any(t < 0 for t in turns)


def polygon_is_clockwise(poly: PolygonLike) -> bool:
    """
    True if a 2D polygon winds clockwise.

    The turn is measured at the vertex with the lowest x (then lowest y),
    which is always convex, so the answer holds even for polygons whose
    total signed area is ambiguous.
    """
    points = _polygon_2d(poly, "polygon_is_clockwise")
    extreme = min(range(len(points)), key=lambda i: (points[i].x, points[i].y))
    here = points[extreme]
    after = points[(extreme + 1) % len(points)]
    before = points[extreme - 1]
    return (after - here).cross(before - here) < 0


def reverse_polygon(poly: PolygonLike) -> List[Vector]:
    """Reverse the winding, keeping the first vertex first."""
    points = as_polygon_points(poly)
    return points[:1] + points[1:][::-1]


def clockwise_polygon(poly: PolygonLike) -> List[Point]:
    points = _polygon_2d(poly, "clockwise_polygon")
    return points if polygon_is_clockwise(points) else reverse_polygon(points)


def ccw_polygon(poly: PolygonLike) -> List[Point]:
    points = _polygon_2d(poly, "ccw_polygon")
    return reverse_polygon(points) if polygon_is_clockwise(points) else points


# ============================================================
# Normal, plane and centroid
# ============================================================
def polygon_normal(poly: PolygonLike, eps: float = EPSILON) -> Optional[Point3]:
    """
    Unit normal of a polygon.

    The sum of cross products of each fan triangle from vertex 0, which
    tolerates mild non-planarity. The normal points toward the side from
    which the polygon appears clockwise. 2D polygons lie on z=0.

    Returns:
        The normal, or None if the polygon is degenerate
    """
    points = _deduplicate([as_point3(p) for p in as_polygon_points(poly)], eps)
    if len(points) < 3:
        return None
    p0 = points[0]
    total = vector_sum([
        (points[i + 1] - p0).cross(points[i] - p0) for i in range(1, len(points) - 1)
    ])
    if total.norm() < eps:
        logger.debug("Polygon is degenerate; normal is undefined")
        return None
    return total.unit()


def plane_from_polygon(poly: PolygonLike, fast: bool = False,
                       eps: float = EPSILON) -> Optional[Plane]:
    """
    Plane of a polygon, with its normal agreeing with polygon_normal.

    Unless `fast` is set, every vertex must lie within eps of the plane.

    Returns:
        The plane, or None if the polygon is degenerate or not planar
    """
    points = _deduplicate([as_point3(p) for p in as_polygon_points(poly)], eps)
    plane = plane_from_points(points, fast, eps)
    if plane is None:
        return None
    normal = polygon_normal(points, eps)
    if normal is not None and normal.dot(plane.normal) < 0:
        plane = Plane(a=-plane.a, b=-plane.b, c=-plane.c, d=-plane.d)
    return plane


def centroid(poly: PolygonLike, eps: float = EPSILON) -> Optional[Vector]:
    """
    Calculate the centroid (center of area) of a polygon.

    3D polygons are flattened with their plane transform, solved in 2D and
    lifted back.

    Returns:
        The centroid, or None for a zero-area or non-planar polygon
    """
    points = as_polygon_points(poly)
    if len(points) < 3:
        raise ValueError(f"centroid requires at least 3 vertices, got {len(points)}")

    if isinstance(points[0], Point3):
        plane = plane_from_points(points, eps=eps)
        if plane is None:
            logger.debug("Polygon is not planar; centroid is undefined")
            return None
        xform = plane_transform(plane)
        flat = centroid(xform.project(points), eps)
        return None if flat is None else xform.to_world(flat)

    area = polygon_area(points)
    if abs(area) <= eps:
        logger.debug("Polygon has zero area; centroid is undefined")
        return None

    cx = 0.0
    cy = 0.0
    for current, next_vertex in _edge_pairs(points):
        cross = current.x * next_vertex.y - next_vertex.x * current.y
        cx += (current.x + next_vertex.x) * cross
        cy += (current.y + next_vertex.y) * cross

    factor = 1.0 / (6.0 * area)
    return Point(x=cx * factor, y=cy * factor)


# ============================================================
# Point containment
# ============================================================
def _winding_contribution(point: Point, start: Point, end: Point) -> int:
    """+1 for an upward crossing with the point on the left, -1 for a downward one on the right."""
    if start.y <= point.y:
        if end.y > point.y and side_of_line(point, (start, end)) > 0:
            return 1
    elif end.y <= point.y and side_of_line(point, (start, end)) < 0:
        return -1
    return 0


def point_in_polygon(point: PointLike, poly: PolygonLike, eps: float = EPSILON) -> int:
    """
    Classify a point against a 2D polygon by winding number.

    Works for self-intersecting polygons, but not for polygons with holes.

    Returns:
        0 if the point is on the boundary, 1 if inside, -1 if outside
    """
    p = as_point2(point)
    points = _polygon_2d(poly, "point_in_polygon")
    edges = [(a, b) for a, b in _edge_pairs(points) if not approx(a, b, eps)]

    for start, end in edges:
        if point_on_segment(p, (start, end), eps):
            return 0

    winding = sum(_winding_contribution(p, start, end) for start, end in edges)
    return 1 if winding != 0 else -1


# ============================================================
# Reindexing and alignment
# ============================================================
def polygon_shift(poly: PolygonLike, i: int) -> List[Vector]:
    """Rotate the vertex list so that vertex i comes first."""
    points = as_polygon_points(poly)
    i %= len(points)
    return points[i:] + points[:i]


def polygon_shift_to_closest_point(poly: PolygonLike, pt: PointLike) -> List[Vector]:
    """Rotate the vertex list so that the vertex nearest `pt` comes first."""
    points = as_polygon_points(poly)
    return polygon_shift(points, closest_point(pt, points))


def reindex_polygon(reference: PolygonLike, poly: PolygonLike,
                    return_error: bool = False) -> Union[List[Vector], Tuple[List[Vector], float]]:
    """
    Relabel a polygon's vertices to best match a reference polygon.

    2D polygons are first given the reference's winding. Every cyclic
    shift is then scored by the total distance between corresponding
    vertices, and the best shift wins. The shape itself is unchanged.

    Args:
        reference: Polygon to match
        poly: Polygon to relabel; must have the same number of vertices
        return_error: Also return the total distance of the best shift

    Returns:
        The relabeled vertices, or (vertices, total_distance)
    """
    ref = as_polygon_points(reference)
    candidate = as_polygon_points(poly)
    if len(ref) != len(candidate):
        raise ValueError(
            f"The polygons must have the same length, got {len(ref)} and {len(candidate)}"
        )
    if type(ref[0]) is not type(candidate[0]):
        raise ValueError("The polygons must have the same dimension")
    if isinstance(ref[0], Point):
        candidate = clockwise_polygon(candidate) if polygon_is_clockwise(ref) else ccw_polygon(candidate)

    n = len(ref)
    distances = [[r.distance_to(c) for c in candidate] for r in ref]
    totals = [sum(distances[i][(i + shift) % n] for i in range(n)) for shift in range(n)]
    best = min(range(n), key=lambda shift: totals[shift])
    optimal = polygon_shift(candidate, best)
    if return_error:
        return optimal, totals[best]
    return optimal


def align_polygon(reference: PolygonLike, poly: PolygonLike, angles: Iterable[float],
                  cp: PointLike = (0.0, 0.0)) -> List[Point]:
    """
    Rotate and relabel a 2D polygon to best match a reference polygon.

    Each candidate angle (degrees, counterclockwise about `cp`) is tried,
    the rotated polygon is reindexed against the reference, and the angle
    with the smallest total vertex distance wins.
    """
    ref = _polygon_2d(reference, "align_polygon")
    points = _polygon_2d(poly, "align_polygon")
    if len(ref) != len(points):
        raise ValueError(
            f"The polygons must have the same length, got {len(ref)} and {len(points)}"
        )
    angles = list(angles)
    if not angles:
        raise ValueError("align_polygon needs at least one candidate angle")

    best = None
    best_error = None
    for angle in angles:
        rotated = [rotate_2d(p, angle, cp) for p in points]
        aligned, error = reindex_polygon(ref, rotated, return_error=True)
        if best_error is None or error < best_error:
            best, best_error = aligned, error
    return best


# ============================================================
# Axis-plane splitting
# ============================================================
def _split_polygon_at(poly: PolygonLike, axis: int, value: float) -> List[List[Vector]]:
    points = as_polygon_points(poly)
    if axis >= points[0].dim:
        raise ValueError(f"Cannot split {points[0].dim}D polygons along axis {axis}")
    coords = [p.as_tuple()[axis] for p in points]
    if min(coords) >= value or max(coords) <= value:
        return [points]

    expanded = []
    for (p, q), pa, qa in zip(_edge_pairs(points), coords, coords[1:] + coords[:1]):
        expanded.append(p)
        if (pa < value < qa) or (qa < value < pa):
            u = (value - pa) / (qa - pa)
            crossing = [
                # The cut coordinate is set exactly so later comparisons match.
                value if k == axis else pc + u * (qc - pc)
                for k, (pc, qc) in enumerate(zip(p.as_tuple(), q.as_tuple()))
            ]
            expanded.append(as_point(crossing))

    sides = []
    for p in expanded:
        c = p.as_tuple()[axis]
        sides.append(0 if c == value else (-1 if c < value else 1))

    fragments = []
    for side in (-1, 1):
        chains = _side_chains(expanded, sides, side)
        for fragment in _join_chains(chains, axis):
            fragment = _deduplicate(fragment)
            if len(fragment) >= 3:
                fragments.append(fragment)
    return fragments


def _side_chains(expanded: List[Vector], sides: List[int], side: int) -> List[List[Vector]]:
    """Maximal boundary runs on one side of the cut; each starts and ends on it."""
    n = len(expanded)
    start = sides.index(-side)
    chains, run = [], []
    for k in range(1, n + 1):
        i = (start + k) % n
        if sides[i] == -side:
            # Runs that only touch the cut belong to the other side.
            if any(sides[j] == side for j in run):
                chains.append([expanded[j] for j in run])
            run = []
        else:
            run.append(i)
    return chains


def _join_chains(chains: List[List[Vector]], axis: int) -> List[List[Vector]]:
    """
    Close boundary runs into fragments along the cut.

    The run ends, sorted along the cut line, pair up into the intervals of the
    cut that lie inside the polygon. Each run continues from its last vertex
    across such an interval into the run that starts at the other end.
    """
    m = len(chains)
    ends = [chain[0] for chain in chains] + [chain[-1] for chain in chains]
    others = [k for k in range(ends[0].dim) if k != axis]

    def spread(k):
        values = [p.as_tuple()[k] for p in ends]
        return max(values) - min(values)

    along = max(others, key=spread)
    order = sorted(range(2 * m), key=lambda i: ends[i].as_tuple()[along])
    partner = {}
    for a, b in zip(order[0::2], order[1::2]):
        partner[a] = b
        partner[b] = a

    # Index i < m is the start of chain i; m + i is its end.
    fragments, used = [], set()
    for first in range(m):
        if first in used:
            continue
        fragment, i = [], first
        while i not in used:
            used.add(i)
            fragment.extend(chains[i])
            nxt = partner.get(m + i)
            if nxt is None or nxt >= m:
                logger.debug("Cut crossings do not pair up; closing fragment early")
                break
            i = nxt
        fragments.append(fragment)
    return fragments


def _split_polygons_at_each(polys: Iterable[PolygonLike], axis: int,
                            values: Iterable[float]) -> List[List[Vector]]:
    result = [as_polygon_points(poly) for poly in polys]
    for value in values:
        result = [fragment for poly in result for fragment in _split_polygon_at(poly, axis, value)]
    return result


def split_polygon_at_x(poly: PolygonLike, x: float) -> List[List[Vector]]:
    """
    Split a polygon by the plane X=x.

    Returns:
        The simple pieces at or below x, then the simple pieces at or above
        x, skipping pieces with fewer than 3 vertices. A concave polygon can
        give more than one piece on a side. A polygon that does not straddle
        x is returned whole.
    """
    return _split_polygon_at(poly, X_AXIS, x)


def split_polygon_at_y(poly: PolygonLike, y: float) -> List[List[Vector]]:
    return _split_polygon_at(poly, Y_AXIS, y)


def split_polygon_at_z(poly: PolygonLike, z: float) -> List[List[Vector]]:
    return _split_polygon_at(poly, Z_AXIS, z)


def split_polygons_at_each_x(polys: Iterable[PolygonLike], xs: Iterable[float]) -> List[List[Vector]]:
    """Split every polygon at each of the given x values in turn."""
    return _split_polygons_at_each(polys, X_AXIS, xs)


def split_polygons_at_each_y(polys: Iterable[PolygonLike], ys: Iterable[float]) -> List[List[Vector]]:
    return _split_polygons_at_each(polys, Y_AXIS, ys)


def split_polygons_at_each_z(polys: Iterable[PolygonLike], zs: Iterable[float]) -> List[List[Vector]]:
    return _split_polygons_at_each(polys, Z_AXIS, zs)


# ============================================================
# Polygon / line intersection
# ============================================================
def _clip_line_to_polygon(line: Line, poly: List[Point], bounded: BoundsLike,
                          eps: float) -> List[Line]:
    """Pieces of a 2D line, ray or segment that lie inside a polygon."""
    lower, upper = bounded
    params = []
    if lower:
        params.append(0.0)
    if upper:
        params.append(1.0)
    for start, end in _edge_pairs(poly):
        if approx(start, end, eps):
            continue
        hit = general_line_intersection(line, (start, end), eps)
        if hit.parallel:
            continue
        if -eps <= hit.u <= 1 + eps and within_bounds(hit.t, bounded, eps):
            params.append(hit.t)
    params.sort()

    pieces = []
    for t0, t1 in zip(params, params[1:]):
        if t1 - t0 <= eps:
            continue
        if point_in_polygon(line.point_at((t0 + t1) / 2), poly, eps) <= 0:
            continue
        if pieces and abs(pieces[-1][1] - t0) <= eps:
            pieces[-1][1] = t1
        else:
            pieces.append([t0, t1])
    return [Line(start=line.point_at(t0), end=line.point_at(t1)) for t0, t1 in pieces]


def polygon_line_intersection(poly: PolygonLike, line: LineLike,
                              bounded: BoundsLike = LineKind.LINE,
                              eps: float = EPSILON) -> Union[Point3, List[Line], None]:
    """
    Intersect a planar polygon with a line, ray or segment.

    A line crossing the polygon's plane yields the crossing point when it
    falls inside the polygon or on its edge. A line lying in the plane
    yields the list of segments where it overlaps the polygon.

    Returns:
        A Point3, a list of 3D Line segments, or None if the line misses
    """
    points = _deduplicate([as_point3(p) for p in as_polygon_points(poly)], eps)
    indices = find_noncollinear_points(points, eps)
    if indices is None:
        logger.debug("Polygon is degenerate; no intersection")
        return None
    plane = plane_from_3_points(*(points[i] for i in indices), eps=eps)
    result = general_plane_line_intersection(plane, line, eps)
    if result is None:
        return None

    bounds = as_bounds(bounded)
    xform = plane_transform(plane)
    flat_poly = clockwise_polygon(xform.project(points))
    found, t = result

    if t is None:
        start, end = xform.project([found.start, found.end])
        pieces = _clip_line_to_polygon(Line(start=start, end=end), flat_poly, bounds, eps)
        if not pieces:
            return None
        return [Line(start=xform.to_world(p.start), end=xform.to_world(p.end)) for p in pieces]

    if not within_bounds(t, bounds, eps):
        return None
    if point_in_polygon(xform.project([found])[0], flat_poly, eps) < 0:
        return None
    return found
