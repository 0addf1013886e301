# ============================================================================
# Saikei Roads - Procedural Road Meshes for Blender
# Copyright (c) 2025 Michael Yoder / Desert Springs Civil Engineering PLLC
# Licensed under the GNU General Public License v3
# https://github.com/saikeicivil/SaikeiCivil
# ============================================================================
"""
Mesh sink tool implementation - writes swept meshes into Blender.

Geometry is written in bulk with foreach_set (vertices, loops, polygons),
UVs go to the "UVMap" layer per loop and the template normals become
custom split normals.
"""
import time

import bpy
import numpy as np

import saikei_roads.core.tool
from ..core.logging_config import get_logger
from ..core.mesh_sweep import SweptMesh
from .blender import Blender
from .raycast import Raycaster

logger = get_logger(__name__)

UV_LAYER_NAME = "UVMap"


class MeshSink(saikei_roads.core.tool.MeshSink):
    """Creates or replaces mesh objects by name."""

    @classmethod
    def set_mesh(cls, name: str, mesh: SweptMesh, layer: int) -> bpy.types.Object:
        start_time = time.time()

        obj = Blender.get_or_create_mesh_object(name)
        cls.write_mesh(obj.data, mesh)
        Raycaster.set_object_layer(obj, layer)

        logger.debug("Wrote mesh '%s': %d vertices, %d triangles in %.3fs",
                     name, mesh.vertex_count, mesh.triangle_count, time.time() - start_time)
        return obj

    @classmethod
    def remove_mesh(cls, name: str) -> None:
        obj = bpy.data.objects.get(name)
        if obj is None or obj.type != 'MESH':
            return
        mesh = obj.data
        bpy.data.objects.remove(obj)
        if mesh.users == 0:
            bpy.data.meshes.remove(mesh)
        logger.debug("Removed mesh '%s'", name)

    @classmethod
    def write_mesh(cls, data: bpy.types.Mesh, mesh: SweptMesh) -> None:
        """Replace the geometry of a Blender mesh with `mesh`."""
        data.clear_geometry()
        if mesh.is_empty:
            data.update()
            return

        vertex_count = mesh.vertex_count
        triangle_count = mesh.triangle_count
        loop_count = triangle_count * 3
        loop_vertices = mesh.indices.astype(np.int32)

        data.vertices.add(vertex_count)
        data.loops.add(loop_count)
        data.polygons.add(triangle_count)

        data.vertices.foreach_set(
            "co", Blender.array_to_blender(mesh.vertices).astype(np.float32).ravel()
        )
        data.loops.foreach_set("vertex_index", loop_vertices)
        data.polygons.foreach_set("loop_start", np.arange(0, loop_count, 3, dtype=np.int32))
        data.polygons.foreach_set("loop_total", np.full(triangle_count, 3, dtype=np.int32))

        data.update()
        data.validate()

        uv_layer = data.uv_layers.get(UV_LAYER_NAME) or data.uv_layers.new(name=UV_LAYER_NAME)
        uv_layer.data.foreach_set("uv", mesh.uvs[loop_vertices].astype(np.float32).ravel())

        if np.any(mesh.normals):
            normals = Blender.array_to_blender(mesh.normals)
            data.normals_split_custom_set_from_vertices(normals.tolist())

        data.update()
