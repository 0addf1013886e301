# ============================================================================
# Saikei Roads - Procedural Road Meshes for Blender
# Copyright (c) 2025 Michael Yoder / Desert Springs Civil Engineering PLLC
# Licensed under the GNU General Public License v3
# https://github.com/saikeicivil/SaikeiCivil
# ============================================================================
"""
Raycast tool implementation - scene ray casts for the road core.

Objects are assigned to a collision layer with the integer custom property
"saikei_layer" (layer 0 when unset). A ray ignores objects whose layer is
not in the mask and continues past them, so a road never hits its own
mesh when its layer is excluded.

Hits report the object name as the surface id.
"""
from typing import Optional

import bpy
from mathutils import Vector

import saikei_roads.core.tool
from ..core.constants import layer_in_mask
from ..core.logging_config import get_logger
from ..core.tool import RaycastHit
from ..core.vector import Vector3
from .blender import Blender

logger = get_logger(__name__)

LAYER_PROPERTY = "saikei_layer"

# Step past an ignored surface before casting again
SKIP_DISTANCE = 1e-4
MAX_PASSES = 64


class Raycaster(saikei_roads.core.tool.Raycaster):
    """Ray casts against the evaluated scene."""

    @classmethod
    def cast(
        cls,
        origin: Vector3,
        direction: Vector3,
        max_distance: float,
        layer_mask: int
    ) -> Optional[RaycastHit]:
        depsgraph = bpy.context.evaluated_depsgraph_get()
        scene = bpy.context.scene

        start = Vector(Blender.to_blender(origin))
        ray = Vector(Blender.to_blender(direction)).normalized()
        travelled = 0.0

        for _ in range(MAX_PASSES):
            remaining = max_distance - travelled
            if remaining <= 0.0:
                return None

            hit, location, normal, index, obj, matrix = scene.ray_cast(
                depsgraph, start, ray, distance=remaining
            )
            if not hit:
                return None

            travelled += (location - start).length
            if layer_in_mask(cls.object_layer(obj), layer_mask):
                return RaycastHit(
                    point=Blender.from_blender(location),
                    surface_id=obj.name,
                    distance=travelled,
                )

            start = location + ray * SKIP_DISTANCE
            travelled += SKIP_DISTANCE

        logger.warning("Ray from %s passed %d ignored surfaces, giving up", origin, MAX_PASSES)
        return None

    @classmethod
    def object_layer(cls, obj: bpy.types.Object) -> int:
        return int(obj.get(LAYER_PROPERTY, 0))

    @classmethod
    def set_object_layer(cls, obj: bpy.types.Object, layer: int) -> None:
        obj[LAYER_PROPERTY] = int(layer)
