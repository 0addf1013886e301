# ============================================================================
# Saikei Roads - Procedural Road Meshes for Blender
# Copyright (c) 2025 Michael Yoder / Desert Springs Civil Engineering PLLC
# Licensed under the GNU General Public License v3
# https://github.com/saikeicivil/SaikeiCivil
# ============================================================================
"""
Road tool implementation - road state stored on Blender objects.

A road is a mesh object whose generated geometry is the swept road mesh.
Its RoadAsset (curves and parameters) is stored as JSON in the custom
property "saikei_road"; the cross-section and prop templates are other
mesh objects referenced by name.

Usage:
    from saikei_roads.tool import Road

    obj = Road.create_road_object("Road")
    road = Road.load(obj)
    road.add_curve()
    Road.save(obj, road)
"""
import json
from typing import Optional

import bpy
import numpy as np

from ..core.logging_config import get_logger
from ..core.mesh_sweep import CrossSectionMesh
from ..core.road import RoadAsset
from .blender import Blender
from .raycast import Raycaster

logger = get_logger(__name__)

ROAD_PROPERTY = "saikei_road"
CROSS_SECTION_PROPERTY = "saikei_cross_section"
PROP_MESH_PROPERTY = "saikei_prop_mesh"


class Road:
    """Load and store RoadAssets on Blender objects."""

    @classmethod
    def is_road(cls, obj: Optional[bpy.types.Object]) -> bool:
        return obj is not None and obj.type == 'MESH' and ROAD_PROPERTY in obj

    @classmethod
    def create_road_object(cls, name: str = "Road", layer: Optional[int] = None) -> bpy.types.Object:
        """
        Create an empty road mesh object holding a default RoadAsset.

        Args:
            name: Object name
            layer: Collision layer (RoadAsset default if None)

        Returns:
            The new road object
        """
        mesh = bpy.data.meshes.new(name)
        obj = bpy.data.objects.new(name, mesh)
        Blender.link_to_scene(obj)

        road = RoadAsset(name=obj.name)
        if layer is not None:
            road.collision_layer = int(layer)
        cls.save(obj, road)

        logger.info("Created road object '%s'", obj.name)
        return obj

    @classmethod
    def load(cls, obj: bpy.types.Object) -> RoadAsset:
        """
        Build the RoadAsset stored on `obj`.

        The asset takes the object's name and current placement, and the
        mesh templates referenced by the object.

        Raises:
            ValueError: If `obj` is not a road or holds invalid data
        """
        if not cls.is_road(obj):
            raise ValueError(f"'{obj.name if obj else None}' is not a road object")

        data = json.loads(obj[ROAD_PROPERTY])
        road = RoadAsset.from_dict(
            data,
            cross_section=cls.template_from_object(
                Blender.get_object(obj.get(CROSS_SECTION_PROPERTY, ""))
            ),
            prop_mesh=cls.template_from_object(
                Blender.get_object(obj.get(PROP_MESH_PROPERTY, ""))
            ),
        )
        road.name = obj.name
        road.placement = Blender.placement_from_object(obj)
        return road

    @classmethod
    def save(cls, obj: bpy.types.Object, road: RoadAsset) -> None:
        obj[ROAD_PROPERTY] = json.dumps(road.to_dict())
        Raycaster.set_object_layer(obj, road.collision_layer)

    @classmethod
    def set_templates(
        cls,
        obj: bpy.types.Object,
        cross_section: Optional[bpy.types.Object] = None,
        prop_mesh: Optional[bpy.types.Object] = None
    ) -> None:
        """Reference template mesh objects from a road object."""
        if cross_section is not None:
            obj[CROSS_SECTION_PROPERTY] = cross_section.name
        if prop_mesh is not None:
            obj[PROP_MESH_PROPERTY] = prop_mesh.name

    @classmethod
    def attach_props(cls, obj: bpy.types.Object) -> Optional[bpy.types.Object]:
        """Parent the generated "<road>_Props" object to its road, on the road's layer."""
        props = bpy.data.objects.get(f"{obj.name}_Props")
        if props is None:
            return None
        if props.parent is not obj:
            props.parent = obj
            props.matrix_parent_inverse.identity()
            props.matrix_basis.identity()
        Raycaster.set_object_layer(props, Raycaster.object_layer(obj))
        return props

    @classmethod
    def template_from_object(cls, obj: Optional[bpy.types.Object]) -> Optional[CrossSectionMesh]:
        """
        Extract a template mesh from a Blender mesh object.

        Faces are triangulated, coordinates are converted to the core's
        Y-up axes. UVs come from the active UV layer (the last loop wins
        for a vertex on a UV seam).

        Returns:
            CrossSectionMesh, or None if `obj` is missing or not a mesh
        """
        if obj is None or obj.type != 'MESH':
            return None

        mesh = obj.data
        mesh.calc_loop_triangles()
        vertex_count = len(mesh.vertices)

        co = np.empty(vertex_count * 3, dtype=np.float32)
        mesh.vertices.foreach_get("co", co)
        normals = np.empty(vertex_count * 3, dtype=np.float32)
        mesh.vertices.foreach_get("normal", normals)

        triangles = np.empty(len(mesh.loop_triangles) * 3, dtype=np.int32)
        mesh.loop_triangles.foreach_get("vertices", triangles)

        uvs = np.zeros((vertex_count, 2), dtype=np.float64)
        if mesh.uv_layers.active is not None:
            loop_uvs = np.empty(len(mesh.loops) * 2, dtype=np.float32)
            mesh.uv_layers.active.data.foreach_get("uv", loop_uvs)
            loop_vertices = np.empty(len(mesh.loops), dtype=np.int32)
            mesh.loops.foreach_get("vertex_index", loop_vertices)
            uvs[loop_vertices] = loop_uvs.reshape(-1, 2)

        return CrossSectionMesh(
            vertices=Blender.array_from_blender(co),
            triangles=triangles,
            uvs=uvs,
            normals=Blender.array_from_blender(normals),
            name=obj.name,
        )
