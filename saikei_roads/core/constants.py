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
Road Generation Constants
==========================

Default parameters for curve layout, sampling, terrain conforming and
pillar placement. Distances are in world units (meters).
"""

# Spacing between control points of a newly appended segment
CURVE_STEP = 5.0

# Parameter steps used when estimating a segment's arc length
ARC_LENGTH_RESOLUTION = 100

# Target distance between road rings
DEFAULT_SAMPLE_SPACING = 2.0
MIN_SAMPLE_SPACING = 0.01

# Road defaults
DEFAULT_ROAD_WIDTH = 12.0
DEFAULT_ELEVATION_RESOLUTION = 100

# Pillars
DEFAULT_MIN_PILLAR_HEIGHT = 1.0
DEFAULT_MAX_PILLAR_HEIGHT = 50.0
DEFAULT_PROP_FREQUENCY = 4

# Raycasting
RAYCAST_DISTANCE = 100.0
RAY_START_OFFSET = 2.0
GROUND_TOLERANCE = 0.01

# Collision layers (32 bits, one per layer)
LAYER_COUNT = 32
ALL_LAYERS = (1 << LAYER_COUNT) - 1
DEFAULT_ROAD_LAYER = 8


def layer_mask_excluding(layer: int) -> int:
    """Layer mask hitting every layer except `layer`.

    Args:
        layer: Layer index to exclude (clamped to the valid range)

    Returns:
        Bit mask over ALL_LAYERS
    """
    layer = max(0, min(LAYER_COUNT - 1, int(layer)))
    return ALL_LAYERS & ~(1 << layer)


def layer_in_mask(layer: int, mask: int) -> bool:
    """True if `layer` is included in `mask`."""
    return bool(mask & (1 << layer))


__all__ = [
    "CURVE_STEP",
    "ARC_LENGTH_RESOLUTION",
    "DEFAULT_SAMPLE_SPACING",
    "MIN_SAMPLE_SPACING",
    "DEFAULT_ROAD_WIDTH",
    "DEFAULT_ELEVATION_RESOLUTION",
    "DEFAULT_MIN_PILLAR_HEIGHT",
    "DEFAULT_MAX_PILLAR_HEIGHT",
    "DEFAULT_PROP_FREQUENCY",
    "RAYCAST_DISTANCE",
    "RAY_START_OFFSET",
    "GROUND_TOLERANCE",
    "LAYER_COUNT",
    "ALL_LAYERS",
    "DEFAULT_ROAD_LAYER",
    "layer_mask_excluding",
    "layer_in_mask",
]
