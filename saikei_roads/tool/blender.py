# ============================================================================
# Saikei Roads - Procedural Road Meshes for Blender
# Copyright (c) 2025 Michael Yoder / Desert Springs Civil Engineering PLLC
# Licensed under the GNU General Public License v3
# https://github.com/saikeicivil/SaikeiCivil
# ============================================================================
"""
Blender tool implementation - utilities shared by the other tools.

Handles the Y-up (core) / Z-up (Blender) axis conversion and common
object bookkeeping, so the road core never sees Blender coordinates.

Core (x, y, z) maps to Blender (x, -z, y): core "up" (+Y) is Blender +Z
and core "forward" (+Z) is Blender -Y. The mapping is a proper rotation,
so triangle winding is preserved.

Usage:
    from saikei_roads.tool import Blender

    world = Blender.from_blender(obj.matrix_world.translation)
    obj = Blender.get_or_create_mesh_object("Road")
"""
from typing import Any, Optional

import bpy
import numpy as np

from ..core.vector import Placement, Quaternion, Vector3

# Columns are the Blender images of core X, Y, Z
CORE_TO_BLENDER = np.array((
    (1.0, 0.0, 0.0),
    (0.0, 0.0, -1.0),
    (0.0, 1.0, 0.0),
))


class Blender:
    """Blender-specific utilities."""

    @classmethod
    def to_blender(cls, v: Vector3) -> tuple:
        """Core Y-up coordinates to a Blender Z-up tuple."""
        return (v.x, -v.z, v.y)

    @classmethod
    def from_blender(cls, co: Any) -> Vector3:
        """Blender Z-up coordinates to a core Y-up vector."""
        return Vector3(co[0], co[2], -co[1])

    @classmethod
    def array_to_blender(cls, points: np.ndarray) -> np.ndarray:
        """(N, 3) core coordinates to Blender coordinates."""
        return np.asarray(points, dtype=np.float64).reshape(-1, 3) @ CORE_TO_BLENDER.T

    @classmethod
    def array_from_blender(cls, points: np.ndarray) -> np.ndarray:
        """(N, 3) Blender coordinates to core coordinates."""
        return np.asarray(points, dtype=np.float64).reshape(-1, 3) @ CORE_TO_BLENDER

    @classmethod
    def placement_from_object(cls, obj: bpy.types.Object) -> Placement:
        """
        Core placement of an object from its world matrix.

        Object scale is ignored.
        """
        matrix = obj.matrix_world
        rotation = np.array(matrix.to_quaternion().to_matrix(), dtype=np.float64)
        core_rotation = CORE_TO_BLENDER.T @ rotation @ CORE_TO_BLENDER
        return Placement(
            location=cls.from_blender(matrix.translation),
            rotation=Quaternion.from_matrix(core_rotation.tolist()),
        )

    @classmethod
    def get_active_object(cls) -> Optional[bpy.types.Object]:
        """Get the active (selected) object."""
        return bpy.context.active_object

    @classmethod
    def get_object(cls, name: str) -> Optional[bpy.types.Object]:
        if not name:
            return None
        return bpy.data.objects.get(name)

    @classmethod
    def get_or_create_mesh_object(cls, name: str) -> bpy.types.Object:
        """
        Find the mesh object called `name`, or create and link one.

        Args:
            name: Object (and mesh data) name

        Returns:
            A mesh object linked to the active scene
        """
        obj = bpy.data.objects.get(name)
        if obj is not None and obj.type == 'MESH':
            return obj

        mesh = bpy.data.meshes.new(name)
        obj = bpy.data.objects.new(name, mesh)
        cls.link_to_scene(obj)
        return obj

    @classmethod
    def link_to_scene(cls, obj: bpy.types.Object) -> None:
        """Link an object to the active collection if it is not linked yet."""
        if obj.users_collection:
            return
        collection = bpy.context.collection or bpy.context.scene.collection
        collection.objects.link(obj)
