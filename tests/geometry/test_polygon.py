import pytest
from geokernel.geometry.point import Point, Point3
from geokernel.geometry.line import Line, point_on_segment
from geokernel.geometry.intersection import segment_intersection
from geokernel.geometry.polygon import (
    Polygon, align_polygon, ccw_polygon, centroid, clockwise_polygon, is_convex_polygon,
    plane_from_polygon, point_in_polygon, polygon_area, polygon_is_clockwise,
    polygon_line_intersection, polygon_normal, polygon_shift, polygon_shift_to_closest_point,
    reindex_polygon, reverse_polygon, split_polygon_at_x, split_polygon_at_y,
    split_polygon_at_z, split_polygons_at_each_x,
)
from geokernel.geometry.transform import rotate_2d

SQUARE = [[0, 0], [4, 0], [4, 4], [0, 4]]
CONCAVE = [[0, 0], [4, 0], [4, 4], [2, 1], [0, 4]]
U_SHAPE = [[0, 0], [3, 0], [3, 3], [2, 3], [2, 1], [1, 1], [1, 3], [0, 3]]


def as_tuples(points):
    return [p.as_tuple() for p in points]


def is_simple(points):
    n = len(points)
    edges = [(points[i], points[(i + 1) % n]) for i in range(n)]
    for i in range(n):
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue
            a, b = edges[i]
            c, d = edges[j]
            if segment_intersection((a, b), (c, d)) is not None:
                return False
            if any(point_on_segment(p, (c, d)) for p in (a, b)):
                return False
            if any(point_on_segment(p, (a, b)) for p in (c, d)):
                return False
    return True


class TestPolygon:
    def test_create_polygon(self):
        vertices = [
            Point(x=0.0, y=0.0),
            Point(x=1.0, y=0.0),
            Point(x=1.0, y=1.0),
            Point(x=0.0, y=1.0)
        ]
        polygon = Polygon(vertices=vertices)
        assert len(polygon.vertices) == 4
        assert polygon.dim == 2

    def test_create_from_point_likes(self):
        polygon = Polygon(vertices=[[0, 0, 1], [1, 0, 1], [0, 1, 1]])
        assert polygon.dim == 3
        assert polygon.vertices[2] == Point3(x=0.0, y=1.0, z=1.0)

    def test_insufficient_vertices(self):
        with pytest.raises(ValueError):
            Polygon(vertices=[Point(x=0.0, y=0.0), Point(x=1.0, y=0.0)])

    def test_duplicate_consecutive_vertices(self):
        vertices = [
            Point(x=0.0, y=0.0),
            Point(x=1.0, y=0.0),
            Point(x=1.0, y=0.0),  # Duplicate
            Point(x=0.0, y=1.0)
        ]
        with pytest.raises(ValueError):
            Polygon(vertices=vertices)

    def test_repeated_closing_vertex(self):
        with pytest.raises(ValueError):
            Polygon(vertices=[[0, 0], [1, 0], [0, 1], [0, 0]])

    def test_mixed_dimensions(self):
        with pytest.raises(ValueError):
            Polygon(vertices=[[0, 0], [1, 0], [0, 1, 0]])

    def test_area_keeps_winding(self):
        ccw = Polygon(vertices=[[0, 0], [1, 0], [1, 1], [0, 1]])
        assert ccw.area == pytest.approx(1.0)
        assert not ccw.is_clockwise()

        cw = Polygon(vertices=[[0, 0], [0, 1], [1, 1], [1, 0]])
        assert cw.area == pytest.approx(-1.0)
        assert cw.is_clockwise()
        assert cw.ccw().area == pytest.approx(1.0)
        assert ccw.clockwise().is_clockwise()

    def test_centroid(self):
        # Square centered at origin
        vertices = [
            Point(x=-1.0, y=-1.0),
            Point(x=1.0, y=-1.0),
            Point(x=1.0, y=1.0),
            Point(x=-1.0, y=1.0)
        ]
        polygon = Polygon(vertices=vertices)
        centroid = polygon.centroid
        assert centroid.x == pytest.approx(0.0)
        assert centroid.y == pytest.approx(0.0)

    def test_bounding_box(self):
        polygon = Polygon(vertices=[[1, 1], [4, 1], [3, 4]])
        min_point, max_point = polygon.bounding_box
        assert min_point == Point(x=1.0, y=1.0)
        assert max_point == Point(x=4.0, y=4.0)

    def test_edges_and_perimeter(self):
        polygon = Polygon(vertices=SQUARE)
        edges = polygon.edges
        assert len(edges) == 4
        assert edges[-1] == Line(start=[0, 4], end=[0, 0])
        assert polygon.perimeter == pytest.approx(16.0)

    def test_contains_point(self):
        polygon = Polygon(vertices=SQUARE)
        assert polygon.contains_point([2, 2])
        assert polygon.contains_point([4, 2])
        assert not polygon.contains_point([5, 2])
        assert polygon.contains_point([4.05, 2], tolerance=0.1)
        assert polygon.classify_point([4, 2]) == 0

    def test_convexity(self):
        assert Polygon(vertices=SQUARE).is_convex()
        assert not Polygon(vertices=CONCAVE).is_convex()

    def test_normal(self):
        assert Polygon(vertices=SQUARE).normal == Point3(x=0.0, y=0.0, z=-1.0)

    def test_string_representation(self):
        polygon = Polygon(vertices=[[0, 0], [1, 0], [0, 1]])
        assert str(polygon) == "Polygon([(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)])"


class TestPolygonArea:
    def test_signed_area(self):
        triangle = [[0, 0], [5, 10], [10, 0]]
        assert polygon_area(triangle) == pytest.approx(-50.0)
        assert polygon_area(triangle[::-1]) == pytest.approx(50.0)
        assert polygon_area(triangle, signed=False) == pytest.approx(50.0)

    def test_3d_area(self):
        square = [[0, 0, 2], [4, 0, 2], [4, 4, 2], [0, 4, 2]]
        assert polygon_area(square) == pytest.approx(16.0)
        tilted = [[0, 0, 0], [3, 0, 0], [3, 4, 4], [0, 4, 4]]
        assert polygon_area(tilted) == pytest.approx(3 * 4 * 2 ** 0.5)

    def test_non_planar_area(self):
        assert polygon_area([[0, 0, 0], [1, 0, 0], [1, 1, 1], [0, 1, 0]]) is None

    def test_degenerate_area(self):
        assert polygon_area([[0, 0], [1, 1]]) == 0.0


class TestWinding:
    def test_clockwise(self):
        assert not polygon_is_clockwise(SQUARE)
        assert polygon_is_clockwise(reverse_polygon(SQUARE))
        assert polygon_is_clockwise([[0, 0], [5, 10], [10, 0]])

    def test_reverse_keeps_first_vertex(self):
        assert as_tuples(reverse_polygon(SQUARE)) == [(0, 0), (0, 4), (4, 4), (4, 0)]

    def test_clockwise_and_ccw_polygon(self):
        assert polygon_is_clockwise(clockwise_polygon(SQUARE))
        assert not polygon_is_clockwise(ccw_polygon(SQUARE))
        assert as_tuples(ccw_polygon(SQUARE)) == [(0, 0), (4, 0), (4, 4), (0, 4)]

    def test_convexity(self):
        assert is_convex_polygon(SQUARE)
        assert is_convex_polygon(reverse_polygon(SQUARE))
        assert not is_convex_polygon(CONCAVE)

    def test_3d_polygon_rejected(self):
        with pytest.raises(ValueError):
            polygon_is_clockwise([[0, 0, 0], [1, 0, 0], [0, 1, 0]])


class TestNormalAndPlane:
    def test_polygon_normal(self):
        assert polygon_normal(SQUARE) == Point3(x=0.0, y=0.0, z=-1.0)
        assert polygon_normal(reverse_polygon(SQUARE)) == Point3(x=0.0, y=0.0, z=1.0)

    def test_degenerate_normal(self):
        assert polygon_normal([[0, 0], [1, 1], [2, 2]]) is None
        assert polygon_normal([[0, 0], [1, 1], [1, 1], [0, 0]]) is None

    def test_plane_from_polygon(self):
        plane = plane_from_polygon([[0, 0, 1], [4, 0, 1], [4, 4, 1], [0, 4, 1]])
        assert plane.normal.as_tuple() == pytest.approx((0.0, 0.0, -1.0))
        assert plane.offset == pytest.approx(-1.0)

    def test_plane_from_non_planar_polygon(self):
        points = [[0, 0, 0], [1, 0, 0], [1, 1, 1], [0, 1, 0]]
        assert plane_from_polygon(points) is None
        assert plane_from_polygon(points, fast=True) is not None


class TestCentroid:
    def test_triangle(self):
        c = centroid([[0, 0], [6, 0], [0, 6]])
        assert c.x == pytest.approx(2.0)
        assert c.y == pytest.approx(2.0)

    def test_winding_does_not_matter(self):
        c = centroid(reverse_polygon(CONCAVE))
        expected = centroid(CONCAVE)
        assert c.as_tuple() == pytest.approx(expected.as_tuple())

    def test_3d(self):
        c = centroid([[0, 0, 2], [4, 0, 2], [4, 4, 2], [0, 4, 2]])
        assert isinstance(c, Point3)
        assert c.as_tuple() == pytest.approx((2.0, 2.0, 2.0))

    def test_zero_area(self):
        assert centroid([[0, 0], [1, 1], [2, 2]]) is None


class TestPointInPolygon:
    def test_square(self):
        assert point_in_polygon([2, 2], SQUARE) == 1
        assert point_in_polygon([4, 2], SQUARE) == 0
        assert point_in_polygon([0, 0], SQUARE) == 0
        assert point_in_polygon([5, 2], SQUARE) == -1
        assert point_in_polygon([2, -1e-3], SQUARE) == -1

    def test_concave(self):
        assert point_in_polygon([2, 0.5], CONCAVE) == 1
        assert point_in_polygon([2, 3], CONCAVE) == -1
        assert point_in_polygon([3.5, 3], CONCAVE) == 1

    def test_vertex_order_does_not_matter(self):
        samples = [[2, 0.5], [2, 3], [3.5, 3], [4, 4], [1, 2.5], [-1, 1]]
        expected = [point_in_polygon(p, CONCAVE) for p in samples]
        for shift in range(len(CONCAVE)):
            for poly in (polygon_shift(CONCAVE, shift), reverse_polygon(polygon_shift(CONCAVE, shift))):
                assert [point_in_polygon(p, poly) for p in samples] == expected

    def test_repeated_vertices_are_ignored(self):
        poly = [[0, 0], [4, 0], [4, 0], [4, 4], [0, 4], [0, 0]]
        assert point_in_polygon([2, 2], poly) == 1
        assert point_in_polygon([6, 2], poly) == -1


class TestReindex:
    def test_shift(self):
        assert as_tuples(polygon_shift(SQUARE, 1)) == [(4, 0), (4, 4), (0, 4), (0, 0)]
        assert as_tuples(polygon_shift(SQUARE, -1)) == [(0, 4), (0, 0), (4, 0), (4, 4)]

    def test_shift_to_closest_point(self):
        assert polygon_shift_to_closest_point(SQUARE, [5, 5])[0] == Point(x=4.0, y=4.0)

    def test_reindex_identity(self):
        result, error = reindex_polygon(SQUARE, SQUARE, return_error=True)
        assert as_tuples(result) == as_tuples(SQUARE)
        assert error == pytest.approx(0.0)

    def test_reindex_shifted_and_reversed(self):
        scrambled = [[4, 4], [4, 0], [0, 0], [0, 4]]
        result = reindex_polygon(SQUARE, scrambled)
        assert as_tuples(result) == as_tuples(SQUARE)

    def test_reindex_error(self):
        moved = [[1, 0], [5, 0], [5, 4], [1, 4]]
        _, error = reindex_polygon(SQUARE, moved, return_error=True)
        assert error == pytest.approx(4.0)

    def test_reindex_length_mismatch(self):
        with pytest.raises(ValueError):
            reindex_polygon(SQUARE, [[0, 0], [1, 0], [0, 1]])

    def test_align_polygon(self):
        reference = [[0, 0], [4, 0], [0, 2]]
        turned = polygon_shift([rotate_2d(p, 90) for p in reference], 1)
        result = align_polygon(reference, turned, [0, 90, 180, 270])
        assert len(result) == 3
        for got, want in zip(result, reference):
            assert got.as_tuple() == pytest.approx(tuple(float(c) for c in want), abs=1e-9)

    def test_align_polygon_needs_angles(self):
        with pytest.raises(ValueError):
            align_polygon(SQUARE, SQUARE, [])


class TestSplit:
    def test_split_at_x(self):
        parts = split_polygon_at_x(SQUARE, 1)
        assert len(parts) == 2
        assert [polygon_area(p) for p in parts] == pytest.approx([4.0, 12.0])
        assert all(p.x <= 1 for p in parts[0])
        assert all(p.x >= 1 for p in parts[1])

    def test_split_at_y(self):
        parts = split_polygon_at_y(SQUARE, 3)
        assert [polygon_area(p) for p in parts] == pytest.approx([12.0, 4.0])

    def test_split_outside_polygon(self):
        assert as_tuples(split_polygon_at_x(SQUARE, 5)[0]) == as_tuples(SQUARE)
        assert len(split_polygon_at_x(SQUARE, 0)) == 1

    def test_split_concave(self):
        parts = split_polygon_at_y(CONCAVE, 2)
        assert len(parts) == 3
        assert all(is_simple(p) for p in parts)
        total = sum(abs(polygon_area(p)) for p in parts)
        assert total == pytest.approx(abs(polygon_area(CONCAVE)))

    def test_split_u_shape_through_both_arms(self):
        parts = split_polygon_at_y(U_SHAPE, 2)
        assert len(parts) == 3
        assert all(is_simple(p) for p in parts)
        assert [abs(polygon_area(p)) for p in parts] == pytest.approx([5.0, 1.0, 1.0])
        assert all(p.y <= 2 for p in parts[0])
        assert all(p.y >= 2 for part in parts[1:] for p in part)

    def test_split_u_shape_below_the_notch(self):
        parts = split_polygon_at_y(U_SHAPE, 0.5)
        assert len(parts) == 2
        assert [abs(polygon_area(p)) for p in parts] == pytest.approx([1.5, 5.5])

    def test_split_each_keeps_fragments_separate(self):
        parts = split_polygons_at_each_x([U_SHAPE], [1.5])
        assert len(parts) == 2
        assert all(is_simple(p) for p in parts)
        assert [abs(polygon_area(p)) for p in parts] == pytest.approx([3.5, 3.5])

    def test_split_at_z(self):
        wall = [[0, 0, 0], [4, 0, 0], [4, 0, 4], [0, 0, 4]]
        parts = split_polygon_at_z(wall, 1)
        assert len(parts) == 2
        assert [polygon_area(p) for p in parts] == pytest.approx([4.0, 12.0])

    def test_split_2d_at_z_rejected(self):
        with pytest.raises(ValueError):
            split_polygon_at_z(SQUARE, 1)

    def test_split_each(self):
        parts = split_polygons_at_each_x([SQUARE], [1, 2, 3])
        assert len(parts) == 4
        assert [polygon_area(p) for p in parts] == pytest.approx([4.0] * 4)


class TestPolygonLineIntersection:
    def test_crossing_line(self):
        point = polygon_line_intersection(SQUARE, [[1, 1, -1], [1, 1, 1]])
        assert isinstance(point, Point3)
        assert point.as_tuple() == pytest.approx((1.0, 1.0, 0.0))

    def test_crossing_on_edge(self):
        point = polygon_line_intersection(SQUARE, [[4, 2, -1], [4, 2, 1]])
        assert point.as_tuple() == pytest.approx((4.0, 2.0, 0.0))

    def test_missing_line(self):
        assert polygon_line_intersection(SQUARE, [[5, 5, -1], [5, 5, 1]]) is None

    def test_bounded_line(self):
        segment = [[1, 1, 1], [1, 1, 2]]
        assert polygon_line_intersection(SQUARE, segment, bounded=True) is None
        assert polygon_line_intersection(SQUARE, segment) is not None

    def test_line_in_plane(self):
        pieces = polygon_line_intersection(SQUARE, [[-1, 2, 0], [5, 2, 0]])
        assert len(pieces) == 1
        assert pieces[0].start.as_tuple() == pytest.approx((0.0, 2.0, 0.0), abs=1e-9)
        assert pieces[0].end.as_tuple() == pytest.approx((4.0, 2.0, 0.0), abs=1e-9)

    def test_segment_in_plane(self):
        pieces = polygon_line_intersection(SQUARE, [[1, 2], [3, 2]], bounded=True)
        assert len(pieces) == 1
        assert pieces[0].start.as_tuple() == pytest.approx((1.0, 2.0, 0.0), abs=1e-9)
        assert pieces[0].end.as_tuple() == pytest.approx((3.0, 2.0, 0.0), abs=1e-9)

    def test_line_in_plane_through_concave_polygon(self):
        pieces = polygon_line_intersection(CONCAVE, [[-1, 3, 0], [5, 3, 0]])
        assert len(pieces) == 2

    def test_line_in_plane_missing(self):
        assert polygon_line_intersection(SQUARE, [[-1, 9, 0], [5, 9, 0]]) is None

    def test_degenerate_polygon(self):
        assert polygon_line_intersection([[0, 0], [1, 1], [2, 2]], [[0, 0, -1], [0, 0, 1]]) is None
