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
Road Curve Chain
================

An ordered chain of Bezier segments describing the road centerline in the
road object's local space.

Segments are evaluated independently. The chain does not enforce tangent
continuity between segments: `append()` seeds a new segment from the end of
the previous one, after which each segment may be edited freely.

Sampling is segment-local adaptive: every segment gets its own resolution
from its own arc length, then is sampled uniformly in t. Segments are not
resampled for global arc-length uniformity.

Example:
    >>> chain = RoadCurveChain()
    >>> segment = chain.append()
    >>> samples = chain.sample(target_spacing=5.0)
    >>> [round(s.position.x, 3) for s in samples]
    [0.0, 5.0, 10.0, 15.0]
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence

from . import curve_math
from .constants import (
    ALL_LAYERS,
    ARC_LENGTH_RESOLUTION,
    CURVE_STEP,
    DEFAULT_MAX_PILLAR_HEIGHT,
    DEFAULT_MIN_PILLAR_HEIGHT,
    GROUND_TOLERANCE,
    MIN_SAMPLE_SPACING,
    RAY_START_OFFSET,
)
from .logging_config import get_logger
from .vector import DOWN, RIGHT, UP, Placement, Quaternion, Vector3

if TYPE_CHECKING:
    import saikei_roads.tool as tool

logger = get_logger(__name__)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class Sample:
    """A position and orientation on the road centerline.

    Derived data: recomputed on every rebuild, never persisted.
    """
    position: Vector3
    rotation: Quaternion


class CurveSegment:
    """
    A single Bezier segment with a fixed number of control points.

    The control point count (3 for quadratic, 4 for cubic) is fixed at
    construction and never changes afterwards.
    """

    def __init__(self, points: Sequence):
        """
        Args:
            points: 3 or 4 control points (Vector3 or (x, y, z) sequences)

        Raises:
            ValueError: If the control point count is not 3 or 4
        """
        points = [Vector3(p) for p in points]
        if len(points) not in curve_math.SUPPORTED_POINT_COUNTS:
            raise ValueError(
                f"Curve segment needs 3 or 4 control points, got {len(points)}"
            )
        self._points = points

    @classmethod
    def default(cls, point_count: int = curve_math.CUBIC) -> "CurveSegment":
        """Collinear layout along local +X starting at the origin."""
        return cls([RIGHT * (CURVE_STEP * i) for i in range(point_count)])

    @classmethod
    def seeded(
        cls,
        start: Vector3,
        direction: Vector3,
        point_count: int = curve_math.CUBIC
    ) -> "CurveSegment":
        """
        Collinear layout starting at `start` and extending along `direction`.

        Args:
            start: First control point
            direction: Extension direction; a zero vector falls back to +X
            point_count: 3 or 4

        Returns:
            New segment with points spaced by CURVE_STEP
        """
        direction = direction.normalized()
        if direction.length_squared == 0.0:
            direction = RIGHT
        return cls([start + direction * (CURVE_STEP * i) for i in range(point_count)])

    @property
    def point_count(self) -> int:
        return len(self._points)

    @property
    def points(self) -> List[Vector3]:
        """Copy of the control points."""
        return list(self._points)

    def get_control_point(self, index: int) -> Vector3:
        return self._points[self._clamp(index)]

    def set_control_point(self, index: int, point) -> None:
        self._points[self._clamp(index)] = Vector3(point)

    def evaluate(self, t: float) -> Vector3:
        return curve_math.evaluate(self._points, t)

    def derivative(self, t: float) -> Vector3:
        return curve_math.derivative(self._points, t)

    def arc_length(self, resolution: int = ARC_LENGTH_RESOLUTION) -> float:
        """Polyline length over `resolution` uniform parameter steps."""
        resolution = max(1, int(resolution))
        length = 0.0
        previous = self.evaluate(0.0)
        for j in range(1, resolution + 1):
            current = self.evaluate(j / resolution)
            length += previous.distance_to(current)
            previous = current
        return length

    def to_list(self) -> List[List[float]]:
        return [list(p.to_tuple()) for p in self._points]

    def _clamp(self, index: int) -> int:
        return max(0, min(len(self._points) - 1, int(index)))

    def __repr__(self):
        return f"CurveSegment({self._points!r})"


# =============================================================================
# Curve Chain
# =============================================================================

class RoadCurveChain:
    """
    Ordered sequence of Bezier segments.

    Out-of-range segment and point indices are clamped to the nearest valid
    index instead of raising.
    """

    def __init__(
        self,
        segments: Optional[Sequence[CurveSegment]] = None,
        point_count: int = curve_math.CUBIC
    ):
        """
        Args:
            segments: Initial segments (traversal order)
            point_count: Control points per appended segment (3 or 4)
        """
        if point_count not in curve_math.SUPPORTED_POINT_COUNTS:
            raise ValueError(f"Unsupported segment point count: {point_count}")
        self.point_count = point_count
        self._segments: List[CurveSegment] = list(segments or [])

    # -------------------------------------------------------------------------
    # Sequence access
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[CurveSegment]:
        return iter(self._segments)

    def __getitem__(self, index: int) -> CurveSegment:
        return self._segments[self._clamp(index)]

    @property
    def segments(self) -> List[CurveSegment]:
        return list(self._segments)

    def _clamp(self, index: int) -> int:
        return max(0, min(len(self._segments) - 1, int(index)))

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def append(self) -> CurveSegment:
        """
        Append a new segment.

        The first segment uses the default layout. Later segments start at
        the previous segment's last control point and extend along its
        normalized exit tangent, which gives positional continuity only.

        Returns:
            The new segment
        """
        if not self._segments:
            segment = CurveSegment.default(self.point_count)
        else:
            previous = self._segments[-1]
            segment = CurveSegment.seeded(
                previous.get_control_point(previous.point_count - 1),
                previous.derivative(1.0),
                self.point_count,
            )

        self._segments.append(segment)
        logger.debug("Appended segment %d", len(self._segments) - 1)
        return segment

    def remove_at(self, index: int) -> Optional[CurveSegment]:
        """Remove a segment by (clamped) index. No-op on an empty chain."""
        if not self._segments:
            return None
        return self._segments.pop(self._clamp(index))

    def clear(self) -> None:
        self._segments.clear()

    def reset(self, index: int) -> None:
        """Restore a segment to the default layout."""
        if self._segments:
            self._segments[self._clamp(index)] = CurveSegment.default(self.point_count)

    def get_control_point(self, segment_index: int, point_index: int) -> Optional[Vector3]:
        if not self._segments:
            return None
        return self._segments[self._clamp(segment_index)].get_control_point(point_index)

    def set_control_point(self, segment_index: int, point_index: int, position) -> None:
        """Move one control point. Both indices are clamped."""
        if not self._segments:
            return
        self._segments[self._clamp(segment_index)].set_control_point(point_index, position)

    # -------------------------------------------------------------------------
    # Measurement and sampling
    # -------------------------------------------------------------------------

    def arc_length(self, segment_index: int, resolution: int = ARC_LENGTH_RESOLUTION) -> float:
        """
        Polyline-approximated length of one segment.

        Higher resolution costs more evaluations and gives a more accurate
        length.
        """
        if not self._segments:
            return 0.0
        return self._segments[self._clamp(segment_index)].arc_length(resolution)

    def total_length(self, resolution: int = ARC_LENGTH_RESOLUTION) -> float:
        return sum(segment.arc_length(resolution) for segment in self._segments)

    def segment_resolution(self, segment_index: int, target_spacing: float) -> int:
        """Number of sample intervals for one segment: max(1, floor(length / spacing))."""
        spacing = max(MIN_SAMPLE_SPACING, float(target_spacing))
        # Tolerate polyline rounding so exact multiples of the spacing are not lost
        return max(1, int(math.floor(self.arc_length(segment_index) / spacing + 1e-9)))

    def sample(self, target_spacing: float, close_loop: bool = False) -> List[Sample]:
        """
        Sample positions and orientations along the whole chain.

        Each segment emits resolution + 1 samples uniformly spaced in t, so
        the shared joint between segments appears twice.

        Args:
            target_spacing: Desired distance between samples
            close_loop: Append an exact copy of the first sample at the end

        Returns:
            List of samples (empty for an empty chain)
        """
        samples: List[Sample] = []

        for index, segment in enumerate(self._segments):
            resolution = self.segment_resolution(index, target_spacing)
            logger.debug("Segment %d: resolution %d", index, resolution)
            for j in range(resolution + 1):
                t = j / resolution
                samples.append(Sample(
                    position=segment.evaluate(t),
                    rotation=Quaternion.look_rotation(segment.derivative(t).normalized()),
                ))

        if close_loop and samples:
            first = samples[0]
            samples.append(Sample(
                position=Vector3(first.position),
                rotation=Quaternion(*first.rotation.to_tuple()),
            ))

        return samples

    def sample_pillars(
        self,
        target_spacing: float,
        raycaster: "type[tool.Raycaster]",
        placement: Optional[Placement] = None,
        layer_mask: int = ALL_LAYERS,
        min_height: float = DEFAULT_MIN_PILLAR_HEIGHT,
        max_height: float = DEFAULT_MAX_PILLAR_HEIGHT,
        height_field: "Optional[type[tool.HeightField]]" = None,
        ray_offset: float = RAY_START_OFFSET,
    ) -> List[Sample]:
        """
        Terrain-aligned sampling for pillar placement.

        Uses the same per-segment resolution as sample(), but orientations
        come from the tangent with its vertical component removed (pillars
        stay upright). A sample is kept only when a downward ray finds a
        terrain surface below it with a clearance between `min_height` and
        `max_height`. Samples under the surface or already touching it are
        dropped.

        Args:
            target_spacing: Desired distance between samples
            raycaster: Raycast tool class
            placement: Road object placement (identity if None)
            layer_mask: Layers the ray may hit (exclude the road's own layer)
            min_height: Minimum clearance between road and ground
            max_height: Maximum clearance between road and ground
            height_field: If given, only its terrains count as ground
            ray_offset: Height above the sample the ray starts from

        Returns:
            Pillar samples in local space
        """
        placement = placement or Placement()
        samples: List[Sample] = []
        to_local = placement.rotation.inverse()

        for index, segment in enumerate(self._segments):
            resolution = self.segment_resolution(index, target_spacing)
            for j in range(resolution + 1):
                t = j / resolution
                position = segment.evaluate(t)
                world = placement.to_world(position)

                hit = raycaster.cast(world + UP * ray_offset, DOWN, max_height + ray_offset, layer_mask)
                if hit is None:
                    continue
                if height_field is not None and not height_field.is_terrain(hit.surface_id):
                    continue

                clearance = world.y - hit.point.y
                if clearance < -GROUND_TOLERANCE:
                    # Road is below the surface
                    continue
                if clearance < min_height or clearance > max_height + GROUND_TOLERANCE:
                    continue

                tangent = placement.to_world_direction(segment.derivative(t)).flattened()
                samples.append(Sample(
                    position=position,
                    rotation=Quaternion.look_rotation(to_local.rotate(tangent.normalized())),
                ))

        logger.debug("Pillar sampling kept %d samples", len(samples))
        return samples

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_list(self) -> List[List[List[float]]]:
        """Ordered list of fixed-size control point arrays."""
        return [segment.to_list() for segment in self._segments]

    @classmethod
    def from_list(cls, data: Sequence, point_count: int = curve_math.CUBIC) -> "RoadCurveChain":
        segments = [CurveSegment(points) for points in data]
        if segments:
            point_count = segments[-1].point_count
        return cls(segments, point_count=point_count)


__all__ = ["Sample", "CurveSegment", "RoadCurveChain"]
