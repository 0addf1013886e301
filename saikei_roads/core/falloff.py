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
Falloff Curves
==============

Keyframed profiles controlling how strongly terrain cells near the road are
raised toward the road height. The terrain conformer only calls
`evaluate(x)` with x in [0, 1] (normalized proximity: 1 at the road
centerline), so any object with that method can be used instead.

Interpolation Types:
    LINEAR: Linear interpolation between keyframes
    SMOOTH: Smoothstep between keyframes
    STEP: Hold the previous keyframe value until the next one

Example:
    >>> curve = FalloffCurve.smooth()
    >>> curve.evaluate(1.0)
    1.0
    >>> curve.evaluate(0.0)
    0.0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple


class InterpolationType(Enum):
    """Interpolation method between keyframes."""
    LINEAR = "LINEAR"
    SMOOTH = "SMOOTH"
    STEP = "STEP"


@dataclass
class FalloffCurve:
    """
    Piecewise falloff profile over [0, 1].

    Attributes:
        keyframes: (time, value) pairs; sorted by time on construction
        interpolation: Interpolation between consecutive keyframes
    """
    keyframes: List[Tuple[float, float]] = field(
        default_factory=lambda: [(0.0, 0.0), (1.0, 1.0)]
    )
    interpolation: InterpolationType = InterpolationType.SMOOTH

    def __post_init__(self):
        """Validate and normalize keyframes after initialization."""
        if not self.keyframes:
            raise ValueError("Falloff curve needs at least one keyframe")
        self.keyframes = sorted((float(t), float(v)) for t, v in self.keyframes)
        if isinstance(self.interpolation, str):
            self.interpolation = InterpolationType(self.interpolation)

    @classmethod
    def linear(cls) -> "FalloffCurve":
        """Straight ramp from 0 at the edge to 1 at the centerline."""
        return cls([(0.0, 0.0), (1.0, 1.0)], InterpolationType.LINEAR)

    @classmethod
    def smooth(cls) -> "FalloffCurve":
        """Smoothstep ramp from 0 at the edge to 1 at the centerline."""
        return cls([(0.0, 0.0), (1.0, 1.0)], InterpolationType.SMOOTH)

    @classmethod
    def constant(cls, value: float = 1.0) -> "FalloffCurve":
        """Flat profile: every cell in range gets the full road height."""
        return cls([(0.0, value), (1.0, value)], InterpolationType.LINEAR)

    def evaluate(self, x: float) -> float:
        """
        Sample the curve.

        Args:
            x: Position in [0, 1]; values outside are clamped to the end keys

        Returns:
            Curve value at x
        """
        keys = self.keyframes
        if x <= keys[0][0]:
            return keys[0][1]
        if x >= keys[-1][0]:
            return keys[-1][1]

        for (t0, v0), (t1, v1) in zip(keys, keys[1:]):
            if t0 <= x <= t1:
                span = t1 - t0
                if span <= 0.0:
                    return v1

                t = (x - t0) / span

                if self.interpolation == InterpolationType.STEP:
                    return v0 if t < 1.0 else v1
                elif self.interpolation == InterpolationType.SMOOTH:
                    t = t * t * (3.0 - 2.0 * t)

                return v0 + t * (v1 - v0)

        return keys[-1][1]

    def to_dict(self) -> dict:
        """Serialize to a JSON-friendly dictionary."""
        return {
            "keyframes": [list(k) for k in self.keyframes],
            "interpolation": self.interpolation.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FalloffCurve":
        """Deserialize from a dictionary produced by to_dict()."""
        return cls(
            keyframes=[tuple(k) for k in data.get("keyframes", [(0.0, 0.0), (1.0, 1.0)])],
            interpolation=InterpolationType(data.get("interpolation", "SMOOTH")),
        )


__all__ = ["InterpolationType", "FalloffCurve"]
