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
Pytest Configuration and Fixtures
==================================

Shared fixtures for the Saikei Roads test suite.

The core is tested against in-memory tool classes instead of Blender:

- make_raycaster: ground plane (optionally limited to an X range)
- make_height_field: numpy height grids keyed by terrain id
- make_mesh_sink: records every mesh it receives
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

import numpy as np
import pytest

# Add repository root to path for imports
REPO_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(REPO_ROOT))

from saikei_roads.core import tool
from saikei_roads.core.constants import layer_in_mask
from saikei_roads.core.logging_config import LOGGER_PREFIX
from saikei_roads.core.mesh_sweep import CrossSectionMesh
from saikei_roads.core.road_curve import RoadCurveChain
from saikei_roads.core.vector import Vector3


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external deps)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "blender: Requires Blender environment")


try:
    import bpy
    HAS_BLENDER = True
except ImportError:
    HAS_BLENDER = False
    bpy = None

requires_blender = pytest.mark.skipif(
    not HAS_BLENDER,
    reason="Blender environment not available"
)


# =============================================================================
# Fake Tools
# =============================================================================

@pytest.fixture
def make_raycaster() -> Callable:
    """Factory for flat-ground raycasters.

    The ground is the plane y = height on layer `layer`. With `x_range`
    set, rays outside [x_min, x_max] miss. `surface_for` maps a hit point
    to a surface id (default: always `surface_id`).

    Every cast is recorded in the class attribute `casts`.
    """
    def factory(
        height: float = 0.0,
        surface_id: str = "Terrain",
        layer: int = 0,
        x_range: Optional[Tuple[float, float]] = None,
        surface_for: Optional[Callable[[Vector3], str]] = None,
    ):
        class FlatGround(tool.Raycaster):
            casts = []

            @classmethod
            def cast(cls, origin, direction, max_distance, layer_mask):
                cls.casts.append((origin, direction, max_distance, layer_mask))
                if not layer_in_mask(layer, layer_mask):
                    return None
                if direction.y >= 0.0:
                    return None

                distance = (origin.y - height) / -direction.y
                if distance < 0.0 or distance > max_distance:
                    return None

                point = origin + direction * distance
                if x_range is not None and not x_range[0] <= point.x <= x_range[1]:
                    return None

                surface = surface_for(point) if surface_for else surface_id
                return tool.RaycastHit(point=point, surface_id=surface, distance=distance)

        return FlatGround

    return factory


@pytest.fixture
def make_height_field() -> Callable:
    """Factory for in-memory height fields.

    Args (of the factory):
        terrains: {terrain_id: heights (resolution x resolution)}
        scale: Heightmap scale shared by every terrain
        position: Terrain origin shared by every terrain

    The returned class exposes `grids` and counts writes in `set_calls`.
    """
    def factory(
        terrains: Dict[str, np.ndarray],
        scale: Vector3 = Vector3(1.0, 100.0, 1.0),
        position: Vector3 = Vector3(0.0, 0.0, 0.0),
    ):
        class InMemoryHeightField(tool.HeightField):
            grids = {key: np.array(value, dtype=np.float64) for key, value in terrains.items()}
            set_calls = []

            @classmethod
            def is_terrain(cls, surface_id):
                return surface_id in cls.grids

            @classmethod
            def heightmap_resolution(cls, terrain_id):
                return cls.grids[terrain_id].shape[0]

            @classmethod
            def heightmap_scale(cls, terrain_id):
                return scale

            @classmethod
            def terrain_position(cls, terrain_id):
                return position

            @classmethod
            def get_heights(cls, terrain_id, x_offset, z_offset, width, height):
                grid = cls.grids[terrain_id]
                return grid[z_offset:z_offset + height, x_offset:x_offset + width].copy()

            @classmethod
            def set_heights(cls, terrain_id, x_offset, z_offset, heights):
                rows, cols = heights.shape
                cls.grids[terrain_id][z_offset:z_offset + rows, x_offset:x_offset + cols] = heights
                cls.set_calls.append((terrain_id, x_offset, z_offset, heights.shape))

        return InMemoryHeightField

    return factory


@pytest.fixture
def make_mesh_sink() -> Callable:
    """Factory for mesh sinks.

    Meshes are kept in `meshes` and their layers in `layers` by name;
    removing a mesh drops it from both and records the name in `removed`.
    """
    def factory():
        class RecordingMeshSink(tool.MeshSink):
            meshes = {}
            layers = {}
            removed = []

            @classmethod
            def set_mesh(cls, name, mesh, layer):
                cls.meshes[name] = mesh
                cls.layers[name] = layer
                return name

            @classmethod
            def remove_mesh(cls, name):
                cls.meshes.pop(name, None)
                cls.layers.pop(name, None)
                cls.removed.append(name)

        return RecordingMeshSink

    return factory


# =============================================================================
# Geometry Fixtures
# =============================================================================

@pytest.fixture
def slab_section() -> CrossSectionMesh:
    """Symmetric slab: two front vertices (Z = -0.5) mirrored by two rear ones."""
    return CrossSectionMesh(
        vertices=[
            (-1.0, 0.0, -0.5),
            (1.0, 0.0, -0.5),
            (-1.0, 0.0, 0.5),
            (1.0, 0.0, 0.5),
        ],
        triangles=[0, 2, 1, 1, 2, 3],
        uvs=[(0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (1.0, 1.0)],
        normals=[(0.0, 1.0, 0.0)] * 4,
        name="Slab",
    )


@pytest.fixture
def pillar_section() -> CrossSectionMesh:
    """Single-triangle prop template."""
    return CrossSectionMesh(
        vertices=[(0.0, 0.0, 0.0), (0.5, -5.0, 0.0), (-0.5, -5.0, 0.0)],
        triangles=[0, 1, 2],
        name="Pillar",
    )


@pytest.fixture
def straight_chain() -> RoadCurveChain:
    """One default segment: (0,0,0) to (15,0,0) along +X."""
    chain = RoadCurveChain()
    chain.append()
    return chain


@pytest.fixture
def raised_chain() -> RoadCurveChain:
    """One default segment lifted to y = 10."""
    chain = RoadCurveChain()
    chain.append()
    for index in range(4):
        point = chain.get_control_point(0, index)
        chain.set_control_point(0, index, Vector3(point.x, 10.0, point.z))
    return chain


# =============================================================================
# Logging
# =============================================================================

@pytest.fixture
def saikei_caplog(caplog):
    """caplog that also receives records from the non-propagating saikei logger."""
    root = logging.getLogger(LOGGER_PREFIX)
    root.addHandler(caplog.handler)
    previous = root.level
    root.setLevel(logging.DEBUG)
    try:
        yield caplog
    finally:
        root.removeHandler(caplog.handler)
        root.setLevel(previous)
