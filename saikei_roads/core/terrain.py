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
Terrain Conformer
=================

Two independent operations between a road curve chain and the terrain:

match_elevation:
    Drop every control point straight down onto whatever is below it.
    Points over gaps (no hit) keep their position.

elevate_terrain:
    Raise the terrain under the road. The chain is walked at a fixed
    resolution, each sample is projected onto the terrain grid, and every
    grid cell near a sample is raised toward the road height:

        height = max(current, falloff(1 - distance / width) * target)

    Cells are only ever raised. Each terrain is read and written back in
    one batched window.

Both operations use injected tools (see core.tool) and never raise on a
miss: "nothing hit" is a normal outcome.
"""

import math
from dataclasses import dataclass, field
from itertools import groupby
from typing import TYPE_CHECKING, Any, Hashable, List, Optional

import numpy as np
from scipy.spatial import cKDTree

from .constants import (
    ALL_LAYERS,
    DEFAULT_ELEVATION_RESOLUTION,
    DEFAULT_ROAD_WIDTH,
    RAY_START_OFFSET,
    RAYCAST_DISTANCE,
)
from .logging_config import get_logger
from .vector import DOWN, UP, Placement

if TYPE_CHECKING:
    import saikei_roads.tool as tool
    from .road_curve import RoadCurveChain

logger = get_logger(__name__)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class TerrainHeightSample:
    """A road sample projected onto a terrain's height grid.

    Attributes:
        terrain_id: Terrain the sample landed on
        grid_x: Fractional grid column
        grid_z: Fractional grid row
        height: Normalized target height in [0, 1]
    """
    terrain_id: Hashable
    grid_x: float
    grid_z: float
    height: float


@dataclass
class ElevationResult:
    """Outcome of elevate_terrain()."""
    terrain_found: bool = False
    sample_count: int = 0
    terrains: List[Any] = field(default_factory=list)
    cells_raised: int = 0

    @property
    def message(self) -> str:
        if not self.terrain_found:
            return "No terrain found under the road"
        return (f"Raised {self.cells_raised} cells on {len(self.terrains)} "
                f"terrain(s) from {self.sample_count} samples")


def remap(value: float, from_low: float, from_high: float, to_low: float, to_high: float) -> float:
    """Linearly remap `value` from one range to another."""
    return (value - from_low) / (from_high - from_low) * (to_high - to_low) + to_low


def _terrain_sort_key(sample: TerrainHeightSample) -> str:
    return str(sample.terrain_id)


# =============================================================================
# Match Elevation
# =============================================================================

def match_elevation(
    chain: "RoadCurveChain",
    raycaster: "type[tool.Raycaster]",
    placement: Optional[Placement] = None,
    layer_mask: int = ALL_LAYERS,
    max_distance: float = RAYCAST_DISTANCE
) -> int:
    """
    Snap every control point down onto the surface below it.

    Args:
        chain: Curve chain to modify in place
        raycaster: Raycast tool class
        placement: Road object placement (identity if None)
        layer_mask: Layers the ray may hit (exclude the road's own layer)
        max_distance: Maximum drop distance

    Returns:
        Number of control points moved
    """
    placement = placement or Placement()
    moved = 0

    for segment in chain:
        for point_index in range(segment.point_count):
            world = placement.to_world(segment.get_control_point(point_index))
            hit = raycaster.cast(world, DOWN, max_distance, layer_mask)
            if hit is None:
                continue
            segment.set_control_point(point_index, placement.to_local(hit.point))
            moved += 1

    logger.info("Matched elevation: moved %d control points", moved)
    return moved


# =============================================================================
# Elevate Terrain
# =============================================================================

def collect_height_samples(
    chain: "RoadCurveChain",
    raycaster: "type[tool.Raycaster]",
    height_field: "type[tool.HeightField]",
    placement: Optional[Placement] = None,
    resolution: int = DEFAULT_ELEVATION_RESOLUTION,
    layer_mask: int = ALL_LAYERS,
    ray_offset: float = RAY_START_OFFSET,
    max_distance: float = RAYCAST_DISTANCE
) -> List[TerrainHeightSample]:
    """
    Walk the chain and project road samples onto the terrains below.

    Each segment is sampled at t = j / resolution for j in [0, resolution).
    Rays start `ray_offset` above the road so they do not begin inside the
    road's own collider.

    Returns:
        Height samples sorted (stably) by terrain identity
    """
    placement = placement or Placement()
    resolution = max(1, int(resolution))
    samples: List[TerrainHeightSample] = []

    for segment in chain:
        for j in range(resolution):
            world = placement.to_world(segment.evaluate(j / resolution))
            hit = raycaster.cast(world + UP * ray_offset, DOWN, max_distance, layer_mask)
            if hit is None or not height_field.is_terrain(hit.surface_id):
                continue

            terrain_id = hit.surface_id
            scale = height_field.heightmap_scale(terrain_id)
            origin = height_field.terrain_position(terrain_id)
            local = hit.point - origin

            height = remap(world.y - origin.y, 0.0, scale.y, 0.0, 1.0)
            samples.append(TerrainHeightSample(
                terrain_id=terrain_id,
                grid_x=local.x / scale.x,
                grid_z=local.z / scale.z,
                height=max(0.0, min(1.0, height)),
            ))

    samples.sort(key=_terrain_sort_key)
    return samples


def blend_heights(
    heights: np.ndarray,
    x_offset: int,
    z_offset: int,
    samples: List[TerrainHeightSample],
    radius: float,
    width: float,
    falloff: Any
) -> int:
    """
    Raise cells of a height window toward their nearest sample.

    Args:
        heights: (rows, cols) window, modified in place
        x_offset: Grid column of heights[:, 0]
        z_offset: Grid row of heights[0, :]
        samples: Samples on this terrain
        radius: Search radius in grid cells
        width: Road width in grid cells (falloff normalization)
        falloff: Object with evaluate(x) -> float

    Returns:
        Number of cells whose height increased
    """
    rows, cols = heights.shape
    if rows == 0 or cols == 0 or not samples:
        return 0

    tree = cKDTree(np.array([(s.grid_x, s.grid_z) for s in samples], dtype=np.float64))
    targets = np.array([s.height for s in samples], dtype=np.float64)

    grid_z, grid_x = np.mgrid[z_offset:z_offset + rows, x_offset:x_offset + cols]
    cells = np.column_stack((grid_x.ravel(), grid_z.ravel())).astype(np.float64)

    distance, nearest = tree.query(cells, distance_upper_bound=radius)
    in_range = np.isfinite(distance) & (distance <= radius)
    if not in_range.any():
        return 0

    proximity = 1.0 - distance[in_range] / width
    weights = np.array([falloff.evaluate(float(p)) for p in proximity], dtype=np.float64)
    raised = weights * targets[nearest[in_range]]

    flat = heights.reshape(-1)
    current = flat[in_range]
    flat[in_range] = np.maximum(current, raised)
    heights[...] = flat.reshape(rows, cols)

    return int(np.count_nonzero(raised > current))


def elevate_terrain(
    chain: "RoadCurveChain",
    raycaster: "type[tool.Raycaster]",
    height_field: "type[tool.HeightField]",
    falloff: Any,
    placement: Optional[Placement] = None,
    resolution: int = DEFAULT_ELEVATION_RESOLUTION,
    width: float = DEFAULT_ROAD_WIDTH,
    layer_mask: int = ALL_LAYERS,
    ray_offset: float = RAY_START_OFFSET,
    max_distance: float = RAYCAST_DISTANCE
) -> ElevationResult:
    """
    Raise the terrain under the road.

    Args:
        chain: Road curve chain (not modified)
        raycaster: Raycast tool class
        height_field: Height-field tool class
        falloff: Object with evaluate(x) -> float over [0, 1]
        placement: Road object placement (identity if None)
        resolution: Uniform samples per segment
        width: Road width in world units
        layer_mask: Layers the ray may hit (exclude the road's own layer)
        ray_offset: Height above the road the rays start from
        max_distance: Maximum ray length

    Returns:
        ElevationResult; terrain_found is False when no terrain was hit
    """
    samples = collect_height_samples(
        chain, raycaster, height_field, placement,
        resolution=resolution, layer_mask=layer_mask,
        ray_offset=ray_offset, max_distance=max_distance,
    )

    result = ElevationResult(sample_count=len(samples))
    if not samples:
        logger.info("Elevate terrain: no terrain found")
        return result

    result.terrain_found = True

    for terrain_id, group in groupby(samples, key=lambda s: s.terrain_id):
        group = list(group)
        result.cells_raised += _elevate_single_terrain(height_field, terrain_id, group, width, falloff)
        result.terrains.append(terrain_id)

    logger.info("Elevate terrain: %s", result.message)
    return result


def _elevate_single_terrain(
    height_field: "type[tool.HeightField]",
    terrain_id: Hashable,
    samples: List[TerrainHeightSample],
    width: float,
    falloff: Any
) -> int:
    """Read, blend and write back the window of one terrain covering `samples`."""
    resolution = height_field.heightmap_resolution(terrain_id)
    scale = height_field.heightmap_scale(terrain_id)

    width_cells = width / scale.x
    radius = width_cells / 2.0

    xs = [s.grid_x for s in samples]
    zs = [s.grid_z for s in samples]
    x0 = max(0, int(math.floor(min(xs) - radius)))
    z0 = max(0, int(math.floor(min(zs) - radius)))
    x1 = min(resolution - 1, int(math.ceil(max(xs) + radius)))
    z1 = min(resolution - 1, int(math.ceil(max(zs) + radius)))

    if x1 < x0 or z1 < z0:
        logger.debug("Terrain %s: samples outside heightmap, skipped", terrain_id)
        return 0

    cols = x1 - x0 + 1
    rows = z1 - z0 + 1
    heights = np.array(height_field.get_heights(terrain_id, x0, z0, cols, rows), dtype=np.float64)

    raised = blend_heights(heights, x0, z0, samples, radius, width_cells, falloff)
    height_field.set_heights(terrain_id, x0, z0, heights)

    logger.debug("Terrain %s: window (%d, %d) %dx%d, %d cells raised",
                 terrain_id, x0, z0, cols, rows, raised)
    return raised


__all__ = [
    "TerrainHeightSample",
    "ElevationResult",
    "remap",
    "match_elevation",
    "collect_height_samples",
    "blend_heights",
    "elevate_terrain",
]
