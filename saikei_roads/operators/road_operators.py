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
Saikei Roads - Road Operators

Operators:
- SAIKEI_OT_new_road: Create a road object from template meshes
- SAIKEI_OT_add_curve: Append a curve segment
- SAIKEI_OT_remove_curve: Remove a curve segment
- SAIKEI_OT_clear_curves: Remove every curve segment
- SAIKEI_OT_match_elevation: Drop control points onto the ground
- SAIKEI_OT_elevate_terrain: Raise terrain under the road
- SAIKEI_OT_rebuild_road: Regenerate the road and pillar meshes
- SAIKEI_OT_create_terrain: Create a flat grid terrain
"""

import traceback

import bpy
from bpy.types import Operator
from bpy.props import FloatProperty, IntProperty, StringProperty

from .. import tool
from ..core.constants import DEFAULT_ROAD_LAYER
from ..core.logging_config import get_logger
from .base_operator import SaikeiRoadOperator

logger = get_logger(__name__)


def _addon_preferences(context):
    """Add-on preferences, or None when running unregistered (scripts, tests)."""
    addon = context.preferences.addons.get(__package__.rpartition(".")[0])
    return addon.preferences if addon else None


class SAIKEI_OT_new_road(Operator):
    """Create a new road object"""
    bl_idname = "saikei.new_road"
    bl_label = "New Road"
    bl_description = "Create a road object swept from a cross-section mesh"
    bl_options = {'REGISTER', 'UNDO'}

    name: StringProperty(
        name="Name",
        default="Road"
    )

    cross_section: StringProperty(
        name="Cross-Section",
        description="Mesh object swept along the road",
        default=""
    )

    prop_mesh: StringProperty(
        name="Pillar",
        description="Mesh object placed as pillars under the road",
        default=""
    )

    collision_layer: IntProperty(
        name="Collision Layer",
        description="Layer of the road mesh, ignored by the road's own raycasts",
        default=DEFAULT_ROAD_LAYER,
        min=0,
        max=31
    )

    def execute(self, context):
        try:
            obj = tool.Road.create_road_object(self.name, layer=self.collision_layer)
            tool.Road.set_templates(
                obj,
                cross_section=tool.Blender.get_object(self.cross_section),
                prop_mesh=tool.Blender.get_object(self.prop_mesh),
            )

            road = tool.Road.load(obj)
            preferences = _addon_preferences(context)
            if preferences is not None:
                road.width = preferences.default_width
                road.sample_spacing = preferences.default_sample_spacing
            road.add_curve()

            tool.Road.save(obj, road)
            road.rebuild(tool.Raycaster, tool.MeshSink, tool.HeightField)
            tool.Road.attach_props(obj)

            self.report({'INFO'}, f"Created road '{obj.name}'")
            return {'FINISHED'}

        except Exception as e:
            logger.error("Operator %s failed: %s", self.bl_idname, e)
            logger.error(traceback.format_exc())
            self.report({'ERROR'}, str(e))
            return {'CANCELLED'}


class SAIKEI_OT_add_curve(SaikeiRoadOperator):
    """Append a curve segment to the active road"""
    bl_idname = "saikei.add_curve"
    bl_label = "Add Curve"
    bl_options = {'REGISTER', 'UNDO'}

    def _execute(self, context, obj, road):
        road.add_curve()
        self.rebuild(obj, road)
        self.report({'INFO'}, f"Road has {len(road.curves)} curves")
        return {'FINISHED'}


class SAIKEI_OT_remove_curve(SaikeiRoadOperator):
    """Remove a curve segment from the active road"""
    bl_idname = "saikei.remove_curve"
    bl_label = "Remove Curve"
    bl_options = {'REGISTER', 'UNDO'}

    index: IntProperty(
        name="Index",
        description="Segment to remove (clamped to the last segment)",
        default=-1
    )

    def _execute(self, context, obj, road):
        if not len(road.curves):
            self.report({'WARNING'}, "Road has no curves")
            return {'CANCELLED'}

        index = self.index if self.index >= 0 else len(road.curves) - 1
        road.remove_curve(index)
        self.rebuild(obj, road)
        return {'FINISHED'}


class SAIKEI_OT_clear_curves(SaikeiRoadOperator):
    """Remove every curve segment from the active road"""
    bl_idname = "saikei.clear_curves"
    bl_label = "Clear Curves"
    bl_options = {'REGISTER', 'UNDO'}

    def _execute(self, context, obj, road):
        road.clear_curves()
        self.rebuild(obj, road)
        return {'FINISHED'}


class SAIKEI_OT_match_elevation(SaikeiRoadOperator):
    """Drop every control point onto the surface below it"""
    bl_idname = "saikei.match_elevation"
    bl_label = "Match Elevation"
    bl_options = {'REGISTER', 'UNDO'}

    def _execute(self, context, obj, road):
        moved = road.match_elevation(tool.Raycaster)
        self.rebuild(obj, road)
        self.report({'INFO'}, f"Moved {moved} control points")
        return {'FINISHED'}


class SAIKEI_OT_elevate_terrain(SaikeiRoadOperator):
    """Raise the terrain under the active road"""
    bl_idname = "saikei.elevate_terrain"
    bl_label = "Elevate Terrain"
    bl_options = {'REGISTER', 'UNDO'}

    def _execute(self, context, obj, road):
        result = road.elevate_terrain(tool.Raycaster, tool.HeightField)
        self.report({'INFO'}, result.message)
        return {'FINISHED'}


class SAIKEI_OT_rebuild_road(SaikeiRoadOperator):
    """Regenerate the road and pillar meshes"""
    bl_idname = "saikei.rebuild_road"
    bl_label = "Rebuild Road"
    bl_options = {'REGISTER', 'UNDO'}

    def _execute(self, context, obj, road):
        result = self.rebuild(obj, road)
        self.report(
            {'INFO'},
            f"Road rebuilt: {result.road_mesh.vertex_count:,} vertices, "
            f"{result.pillar_count} pillars in {result.generation_time:.2f}s"
        )
        return {'FINISHED'}


class SAIKEI_OT_create_terrain(Operator):
    """Create a flat grid terrain"""
    bl_idname = "saikei.create_terrain"
    bl_label = "Create Terrain"
    bl_options = {'REGISTER', 'UNDO'}

    resolution: IntProperty(
        name="Resolution",
        description="Vertices per side",
        default=129,
        min=2,
        max=2049
    )

    cell_size: FloatProperty(
        name="Cell Size",
        default=1.0,
        min=0.01
    )

    height_scale: FloatProperty(
        name="Height Scale",
        description="Height of a normalized terrain value of 1",
        default=100.0,
        min=0.01
    )

    def execute(self, context):
        try:
            obj = tool.HeightField.create_terrain(
                "Terrain", self.resolution, self.cell_size, self.height_scale
            )
            self.report({'INFO'}, f"Created terrain '{obj.name}'")
            return {'FINISHED'}

        except Exception as e:
            logger.error("Operator %s failed: %s", self.bl_idname, e)
            logger.error(traceback.format_exc())
            self.report({'ERROR'}, str(e))
            return {'CANCELLED'}


# Registration
classes = (
    SAIKEI_OT_new_road,
    SAIKEI_OT_add_curve,
    SAIKEI_OT_remove_curve,
    SAIKEI_OT_clear_curves,
    SAIKEI_OT_match_elevation,
    SAIKEI_OT_elevate_terrain,
    SAIKEI_OT_rebuild_road,
    SAIKEI_OT_create_terrain,
)


def register():
    """Register operators."""
    for cls in classes:
        bpy.utils.register_class(cls)


def unregister():
    """Unregister operators."""
    for cls in reversed(classes):
        bpy.utils.unregister_class(cls)
