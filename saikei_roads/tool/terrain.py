# ============================================================================
# Saikei Roads - Procedural Road Meshes for Blender
# Copyright (c) 2025 Michael Yoder / Desert Springs Civil Engineering PLLC
# Licensed under the GNU General Public License v3
# https://github.com/saikeicivil/SaikeiCivil
# ============================================================================
"""
Height-field tool implementation - grid mesh terrains.

A terrain is a mesh object holding a square grid of resolution x resolution
vertices, tagged with custom properties:

    saikei_terrain      True
    saikei_resolution   vertices per side
    saikei_cell_size    grid spacing (Blender units)
    saikei_height_scale height of a normalized value of 1.0

Vertex (x, z) of the grid is vertex index z * resolution + x and sits at
core-local (x * cell_size, height * height_scale, z * cell_size). The
terrain object may be moved and scaled but not rotated.

Usage:
    from saikei_roads.tool import HeightField

    obj = HeightField.create_terrain("Terrain", resolution=129, cell_size=1.0)
    heights = HeightField.get_heights(obj.name, 0, 0, 16, 16)
"""
from typing import Hashable, Optional

import bpy
import numpy as np

import saikei_roads.core.tool
from ..core.logging_config import get_logger
from ..core.vector import Vector3
from .blender import Blender

logger = get_logger(__name__)

TERRAIN_PROPERTY = "saikei_terrain"
RESOLUTION_PROPERTY = "saikei_resolution"
CELL_SIZE_PROPERTY = "saikei_cell_size"
HEIGHT_SCALE_PROPERTY = "saikei_height_scale"


class HeightField(saikei_roads.core.tool.HeightField):
    """Terrain heights stored as Z coordinates of grid mesh vertices."""

    @classmethod
    def get_terrain(cls, terrain_id: Hashable) -> Optional[bpy.types.Object]:
        obj = bpy.data.objects.get(str(terrain_id))
        if obj is None or obj.type != 'MESH' or not obj.get(TERRAIN_PROPERTY, False):
            return None
        return obj

    @classmethod
    def is_terrain(cls, surface_id: Hashable) -> bool:
        return cls.get_terrain(surface_id) is not None

    @classmethod
    def heightmap_resolution(cls, terrain_id: Hashable) -> int:
        return int(cls._require(terrain_id)[RESOLUTION_PROPERTY])

    @classmethod
    def heightmap_scale(cls, terrain_id: Hashable) -> Vector3:
        obj = cls._require(terrain_id)
        cell_size = float(obj[CELL_SIZE_PROPERTY])
        height_scale = float(obj[HEIGHT_SCALE_PROPERTY])
        sx, sy, sz = obj.scale
        return Vector3(cell_size * sx, height_scale * sz, cell_size * sy)

    @classmethod
    def terrain_position(cls, terrain_id: Hashable) -> Vector3:
        return Blender.from_blender(cls._require(terrain_id).matrix_world.translation)

    @classmethod
    def get_heights(
        cls,
        terrain_id: Hashable,
        x_offset: int,
        z_offset: int,
        width: int,
        height: int
    ) -> np.ndarray:
        grid = cls._read_grid(cls._require(terrain_id))
        return grid[z_offset:z_offset + height, x_offset:x_offset + width].copy()

    @classmethod
    def set_heights(
        cls,
        terrain_id: Hashable,
        x_offset: int,
        z_offset: int,
        heights: np.ndarray
    ) -> None:
        obj = cls._require(terrain_id)
        mesh = obj.data
        resolution = int(obj[RESOLUTION_PROPERTY])
        height_scale = float(obj[HEIGHT_SCALE_PROPERTY])

        co = np.empty(len(mesh.vertices) * 3, dtype=np.float32)
        mesh.vertices.foreach_get("co", co)
        co = co.reshape(resolution, resolution, 3)

        heights = np.asarray(heights, dtype=np.float64)
        rows, cols = heights.shape
        co[z_offset:z_offset + rows, x_offset:x_offset + cols, 2] = heights * height_scale

        mesh.vertices.foreach_set("co", co.ravel())
        mesh.update()
        logger.debug("Wrote %dx%d heights to terrain '%s'", cols, rows, obj.name)

    @classmethod
    def create_terrain(
        cls,
        name: str,
        resolution: int = 129,
        cell_size: float = 1.0,
        height_scale: float = 100.0,
        heights: Optional[np.ndarray] = None
    ) -> bpy.types.Object:
        """
        Create a grid mesh terrain.

        Args:
            name: Object name
            resolution: Vertices per side (at least 2)
            cell_size: Grid spacing
            height_scale: Height of a normalized value of 1.0
            heights: Optional (resolution, resolution) normalized heights

        Returns:
            The terrain object, linked to the active scene
        """
        resolution = max(2, int(resolution))
        if heights is None:
            heights = np.zeros((resolution, resolution))
        heights = np.asarray(heights, dtype=np.float64)
        if heights.shape != (resolution, resolution):
            raise ValueError(
                f"Heights shape {heights.shape} does not match resolution {resolution}"
            )

        grid_z, grid_x = np.mgrid[0:resolution, 0:resolution]
        vertices = np.column_stack((
            grid_x.ravel() * cell_size,
            heights.ravel() * height_scale,
            grid_z.ravel() * cell_size,
        ))

        index = np.arange(resolution * resolution).reshape(resolution, resolution)
        quads = np.column_stack((
            index[:-1, :-1].ravel(),
            index[1:, :-1].ravel(),
            index[1:, 1:].ravel(),
            index[:-1, 1:].ravel(),
        ))

        mesh = bpy.data.meshes.new(name)
        mesh.from_pydata(Blender.array_to_blender(vertices).tolist(), [], quads.tolist())
        mesh.update()

        obj = bpy.data.objects.new(name, mesh)
        obj[TERRAIN_PROPERTY] = True
        obj[RESOLUTION_PROPERTY] = resolution
        obj[CELL_SIZE_PROPERTY] = float(cell_size)
        obj[HEIGHT_SCALE_PROPERTY] = float(height_scale)
        Blender.link_to_scene(obj)

        logger.info("Created terrain '%s': %dx%d, cell %.2f, height %.1f",
                    obj.name, resolution, resolution, cell_size, height_scale)
        return obj

    @classmethod
    def _read_grid(cls, obj: bpy.types.Object) -> np.ndarray:
        """Normalized heights of the whole terrain, indexed [z, x]."""
        mesh = obj.data
        resolution = int(obj[RESOLUTION_PROPERTY])
        co = np.empty(len(mesh.vertices) * 3, dtype=np.float32)
        mesh.vertices.foreach_get("co", co)
        return co.reshape(resolution, resolution, 3)[:, :, 2] / float(obj[HEIGHT_SCALE_PROPERTY])

    @classmethod
    def _require(cls, terrain_id: Hashable) -> bpy.types.Object:
        obj = cls.get_terrain(terrain_id)
        if obj is None:
            raise ValueError(f"'{terrain_id}' is not a terrain object")
        return obj
