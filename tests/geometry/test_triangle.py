import pytest
import math
from geokernel.geometry.triangle import (
    RightTriangle, adj_ang_to_hyp, adj_ang_to_opp, adj_opp_to_ang, adj_opp_to_hyp,
    hyp_adj_to_ang, hyp_adj_to_opp, hyp_ang_to_adj, hyp_ang_to_opp, hyp_opp_to_adj,
    hyp_opp_to_ang, opp_ang_to_adj, opp_ang_to_hyp, solve_right_triangle, triangle_area,
)


class TestSolveRightTriangle:
    def test_opposite_and_hypotenuse(self):
        tri = solve_right_triangle(opp=15, hyp=30)
        assert isinstance(tri, RightTriangle)
        assert tri.angle == pytest.approx(30.0)
        assert tri.angle2 == pytest.approx(60.0)
        assert tri.adjacent == pytest.approx(15 * math.sqrt(3))
        assert tri.opposite == pytest.approx(15.0)
        assert tri.hypotenuse == pytest.approx(30.0)

    def test_two_legs(self):
        tri = solve_right_triangle(adj=4, opp=3)
        assert tri.hypotenuse == pytest.approx(5.0)
        assert tri.angle == pytest.approx(math.degrees(math.atan2(3, 4)))

    def test_angle_and_leg(self):
        tri = solve_right_triangle(ang=45, adj=2)
        assert tri.opposite == pytest.approx(2.0)
        assert tri.hypotenuse == pytest.approx(2 * math.sqrt(2))

    def test_secondary_angle(self):
        tri = solve_right_triangle(ang2=60, hyp=10)
        assert tri.angle == pytest.approx(30.0)
        assert tri.opposite == pytest.approx(5.0)

    def test_pythagoras_holds(self):
        for kwargs in ({"ang": 20, "opp": 7}, {"hyp": 13, "adj": 5}, {"ang2": 35, "adj": 1}):
            tri = solve_right_triangle(**kwargs)
            assert tri.adjacent ** 2 + tri.opposite ** 2 == pytest.approx(tri.hypotenuse ** 2)
            assert tri.angle + tri.angle2 == pytest.approx(90.0)

    def test_both_angles_rejected(self):
        with pytest.raises(ValueError):
            solve_right_triangle(ang=30, ang2=60)

    def test_wrong_number_of_values(self):
        with pytest.raises(ValueError):
            solve_right_triangle(adj=1)
        with pytest.raises(ValueError):
            solve_right_triangle(adj=1, opp=1, hyp=2)

    def test_out_of_range_values(self):
        with pytest.raises(ValueError):
            solve_right_triangle(ang=90, adj=1)
        with pytest.raises(ValueError):
            solve_right_triangle(adj=-1, opp=1)
        with pytest.raises(ValueError):
            solve_right_triangle(opp=5, hyp=3)


class TestTriangleConverters:
    def test_adjacent(self):
        assert hyp_opp_to_adj(5, 3) == pytest.approx(4.0)
        assert hyp_ang_to_adj(2, 60) == pytest.approx(1.0)
        assert opp_ang_to_adj(1, 45) == pytest.approx(1.0)

    def test_opposite(self):
        assert hyp_adj_to_opp(5, 4) == pytest.approx(3.0)
        assert hyp_ang_to_opp(2, 30) == pytest.approx(1.0)
        assert adj_ang_to_opp(1, 45) == pytest.approx(1.0)

    def test_hypotenuse(self):
        assert adj_opp_to_hyp(3, 4) == pytest.approx(5.0)
        assert adj_ang_to_hyp(1, 60) == pytest.approx(2.0)
        assert opp_ang_to_hyp(1, 30) == pytest.approx(2.0)

    def test_angle(self):
        assert hyp_adj_to_ang(2, 1) == pytest.approx(60.0)
        assert hyp_opp_to_ang(2, 1) == pytest.approx(30.0)
        assert adj_opp_to_ang(1, 1) == pytest.approx(45.0)

    def test_invalid_input(self):
        with pytest.raises(ValueError):
            hyp_opp_to_adj(3, 5)
        with pytest.raises(ValueError):
            hyp_ang_to_adj(-1, 30)
        with pytest.raises(ValueError):
            opp_ang_to_hyp(1, 95)


class TestTriangleArea:
    def test_signed_2d_area(self):
        assert triangle_area([0, 0], [1, 0], [0, 1]) == pytest.approx(0.5)
        assert triangle_area([0, 0], [0, 1], [1, 0]) == pytest.approx(-0.5)

    def test_3d_area(self):
        assert triangle_area([0, 0, 0], [2, 0, 0], [0, 2, 2]) == pytest.approx(2 * math.sqrt(2))
