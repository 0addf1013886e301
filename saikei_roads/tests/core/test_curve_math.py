# ==============================================================================
# Saikei Roads - Procedural Road Meshes for Blender
# Copyright (c) 2025 Michael Yoder / Desert Springs Civil Engineering PLLC
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
# You should have received a copy of the GNU General Public License along with
# this program. If not, see <https://www.gnu.org/licenses/>.
#
# Primary Author: Michael Yoder
# Company: Desert Springs Civil Engineering PLLC
# ==============================================================================

"""
Bezier Curve Math Tests - NO BLENDER REQUIRED
==============================================

Run with:
    pytest saikei_roads/tests/core/test_curve_math.py -v
"""

import pytest

from saikei_roads.core import curve_math
from saikei_roads.core.vector import Vector3


@pytest.fixture
def cubic_points():
    return [
        Vector3(0.0, 0.0, 0.0),
        Vector3(2.0, 4.0, 0.0),
        Vector3(6.0, 4.0, 1.0),
        Vector3(8.0, 0.0, 3.0),
    ]


@pytest.fixture
def quadratic_points():
    return [
        Vector3(0.0, 0.0, 0.0),
        Vector3(5.0, 10.0, 0.0),
        Vector3(10.0, 0.0, -2.0),
    ]


def assert_vector_close(actual, expected, tol=1e-6):
    assert actual.x == pytest.approx(expected.x, abs=tol)
    assert actual.y == pytest.approx(expected.y, abs=tol)
    assert actual.z == pytest.approx(expected.z, abs=tol)


class TestEvaluate:
    """Tests for evaluate()."""

    @pytest.mark.unit
    def test_cubic_endpoints(self, cubic_points):
        assert curve_math.evaluate(cubic_points, 0.0) == cubic_points[0]
        assert curve_math.evaluate(cubic_points, 1.0) == cubic_points[3]

    @pytest.mark.unit
    def test_quadratic_endpoints(self, quadratic_points):
        assert curve_math.evaluate(quadratic_points, 0.0) == quadratic_points[0]
        assert curve_math.evaluate(quadratic_points, 1.0) == quadratic_points[2]

    @pytest.mark.unit
    def test_cubic_midpoint(self, cubic_points):
        # (P0 + 3 P1 + 3 P2 + P3) / 8
        expected = (cubic_points[0] + cubic_points[1] * 3.0 +
                    cubic_points[2] * 3.0 + cubic_points[3]) / 8.0
        assert_vector_close(curve_math.evaluate(cubic_points, 0.5), expected)

    @pytest.mark.unit
    def test_quadratic_midpoint(self, quadratic_points):
        assert_vector_close(
            curve_math.evaluate(quadratic_points, 0.5),
            Vector3(5.0, 5.0, -0.5),
        )

    @pytest.mark.unit
    def test_parameter_is_clamped(self, cubic_points):
        assert curve_math.evaluate(cubic_points, -0.5) == cubic_points[0]
        assert curve_math.evaluate(cubic_points, 1.5) == cubic_points[3]

    @pytest.mark.unit
    @pytest.mark.parametrize("count", [0, 1, 2, 5])
    def test_unsupported_point_count_raises(self, count):
        points = [Vector3(float(i), 0.0, 0.0) for i in range(count)]
        with pytest.raises(ValueError):
            curve_math.evaluate(points, 0.5)


class TestDerivative:
    """Tests for derivative()."""

    @pytest.mark.unit
    @pytest.mark.parametrize("t", [0.1, 0.25, 0.5, 0.75, 0.9])
    def test_cubic_matches_finite_difference(self, cubic_points, t):
        h = 1e-6
        numeric = (curve_math.evaluate(cubic_points, t + h) -
                   curve_math.evaluate(cubic_points, t - h)) / (2.0 * h)
        assert_vector_close(curve_math.derivative(cubic_points, t), numeric, tol=1e-4)

    @pytest.mark.unit
    @pytest.mark.parametrize("t", [0.1, 0.5, 0.9])
    def test_quadratic_matches_finite_difference(self, quadratic_points, t):
        h = 1e-6
        numeric = (curve_math.evaluate(quadratic_points, t + h) -
                   curve_math.evaluate(quadratic_points, t - h)) / (2.0 * h)
        assert_vector_close(curve_math.derivative(quadratic_points, t), numeric, tol=1e-4)

    @pytest.mark.unit
    def test_cubic_end_tangents(self, cubic_points):
        assert_vector_close(
            curve_math.derivative(cubic_points, 0.0),
            (cubic_points[1] - cubic_points[0]) * 3.0,
        )
        assert_vector_close(
            curve_math.derivative(cubic_points, 1.0),
            (cubic_points[3] - cubic_points[2]) * 3.0,
        )

    @pytest.mark.unit
    def test_parameter_is_clamped(self, cubic_points):
        assert_vector_close(
            curve_math.derivative(cubic_points, 2.0),
            curve_math.derivative(cubic_points, 1.0),
        )

    @pytest.mark.unit
    def test_unsupported_point_count_raises(self):
        with pytest.raises(ValueError):
            curve_math.derivative([Vector3(), Vector3()], 0.5)


class TestClamp:

    @pytest.mark.unit
    def test_clamp01(self):
        assert curve_math.clamp01(-1.0) == 0.0
        assert curve_math.clamp01(0.3) == 0.3
        assert curve_math.clamp01(7) == 1.0
