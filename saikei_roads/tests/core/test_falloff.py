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
Falloff Curve Tests - NO BLENDER REQUIRED
==========================================
"""

import pytest

from saikei_roads.core.falloff import FalloffCurve, InterpolationType


class TestPresets:

    @pytest.mark.unit
    def test_linear(self):
        curve = FalloffCurve.linear()
        assert curve.evaluate(0.0) == 0.0
        assert curve.evaluate(0.25) == pytest.approx(0.25)
        assert curve.evaluate(1.0) == 1.0

    @pytest.mark.unit
    def test_smooth(self):
        curve = FalloffCurve.smooth()
        assert curve.evaluate(0.5) == pytest.approx(0.5)
        # Smoothstep: 3t^2 - 2t^3
        assert curve.evaluate(0.25) == pytest.approx(0.15625)

    @pytest.mark.unit
    def test_constant(self):
        curve = FalloffCurve.constant(0.75)
        assert curve.evaluate(0.0) == 0.75
        assert curve.evaluate(0.6) == pytest.approx(0.75)


class TestEvaluate:

    @pytest.mark.unit
    def test_clamps_outside_range(self):
        curve = FalloffCurve.linear()
        assert curve.evaluate(-2.0) == 0.0
        assert curve.evaluate(3.0) == 1.0

    @pytest.mark.unit
    def test_step_holds_previous_value(self):
        curve = FalloffCurve([(0.0, 0.2), (0.5, 0.8), (1.0, 1.0)], InterpolationType.STEP)
        assert curve.evaluate(0.3) == 0.2
        assert curve.evaluate(0.5) == 0.8
        assert curve.evaluate(0.9) == 0.8

    @pytest.mark.unit
    def test_keyframes_sorted(self):
        curve = FalloffCurve([(1.0, 1.0), (0.0, 0.0)], InterpolationType.LINEAR)
        assert curve.keyframes == [(0.0, 0.0), (1.0, 1.0)]
        assert curve.evaluate(0.5) == pytest.approx(0.5)

    @pytest.mark.unit
    def test_single_keyframe(self):
        curve = FalloffCurve([(0.5, 0.4)])
        assert curve.evaluate(0.0) == 0.4
        assert curve.evaluate(1.0) == 0.4

    @pytest.mark.unit
    def test_interpolation_from_string(self):
        assert FalloffCurve(interpolation="LINEAR").interpolation == InterpolationType.LINEAR

    @pytest.mark.unit
    def test_empty_keyframes_raise(self):
        with pytest.raises(ValueError):
            FalloffCurve([])


class TestSerialization:

    @pytest.mark.unit
    def test_to_dict(self):
        data = FalloffCurve.linear().to_dict()
        assert data == {"keyframes": [[0.0, 0.0], [1.0, 1.0]], "interpolation": "LINEAR"}

    @pytest.mark.unit
    def test_from_dict(self):
        curve = FalloffCurve.from_dict(
            {"keyframes": [[0.0, 0.0], [0.5, 1.0]], "interpolation": "STEP"}
        )
        assert curve.interpolation == InterpolationType.STEP
        assert curve.keyframes == [(0.0, 0.0), (0.5, 1.0)]
