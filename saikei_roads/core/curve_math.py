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
Bezier Curve Math
=================

Stateless evaluation of single Bezier segments.

Cubic (4 control points) is the canonical degree; quadratic (3 control
points) is supported for simple layouts. Parameters outside [0, 1] are
clamped rather than rejected.

Cubic:
    B(t)  = (1-t)^3 P0 + 3(1-t)^2 t P1 + 3(1-t) t^2 P2 + t^3 P3
    B'(t) = 3(1-t)^2 (P1-P0) + 6(1-t) t (P2-P1) + 3t^2 (P3-P2)

Quadratic:
    B(t)  = (1-t)^2 P0 + 2(1-t) t P1 + t^2 P2
    B'(t) = 2(1-t) (P1-P0) + 2t (P2-P1)
"""

from typing import Sequence

from .vector import Vector3

QUADRATIC = 3
CUBIC = 4
SUPPORTED_POINT_COUNTS = (QUADRATIC, CUBIC)


def clamp01(t: float) -> float:
    """Clamp a curve parameter to [0, 1]."""
    return max(0.0, min(1.0, float(t)))


def _check_points(points: Sequence[Vector3]) -> int:
    count = len(points)
    if count not in SUPPORTED_POINT_COUNTS:
        raise ValueError(
            f"Bezier segment needs 3 or 4 control points, got {count}"
        )
    return count


def evaluate(points: Sequence[Vector3], t: float) -> Vector3:
    """Position on a Bezier segment.

    Args:
        points: 3 (quadratic) or 4 (cubic) control points
        t: Curve parameter, clamped to [0, 1]

    Returns:
        Point on the curve

    Raises:
        ValueError: If the control point count is not 3 or 4
    """
    count = _check_points(points)
    t = clamp01(t)
    u = 1.0 - t

    if count == CUBIC:
        return (points[0] * (u * u * u) +
                points[1] * (3.0 * u * u * t) +
                points[2] * (3.0 * u * t * t) +
                points[3] * (t * t * t))

    return (points[0] * (u * u) +
            points[1] * (2.0 * u * t) +
            points[2] * (t * t))


def derivative(points: Sequence[Vector3], t: float) -> Vector3:
    """First derivative (tangent, not normalized) of a Bezier segment.

    Args:
        points: 3 (quadratic) or 4 (cubic) control points
        t: Curve parameter, clamped to [0, 1]

    Returns:
        Tangent vector dB/dt

    Raises:
        ValueError: If the control point count is not 3 or 4
    """
    count = _check_points(points)
    t = clamp01(t)
    u = 1.0 - t

    if count == CUBIC:
        return ((points[1] - points[0]) * (3.0 * u * u) +
                (points[2] - points[1]) * (6.0 * u * t) +
                (points[3] - points[2]) * (3.0 * t * t))

    return ((points[1] - points[0]) * (2.0 * u) +
            (points[2] - points[1]) * (2.0 * t))


__all__ = [
    "QUADRATIC",
    "CUBIC",
    "SUPPORTED_POINT_COUNTS",
    "clamp01",
    "evaluate",
    "derivative",
]
