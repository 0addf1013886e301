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
SaikeiRoadOperator Base Class
=============================

Provides a base class for operators acting on the active road object.

The base class:
1. Loads the RoadAsset of the active road object
2. Calls _execute() with error handling
3. Reports errors to the user and logs them with traceback

Usage:
    class SAIKEI_OT_my_operator(SaikeiRoadOperator):
        bl_idname = "saikei.my_operator"
        bl_label = "My Operator"

        def _execute(self, context, obj, road):
            road.add_curve()
            self.store(obj, road)
            return {'FINISHED'}
"""

import traceback
from typing import Set

import bpy
from bpy.types import Operator

from .. import tool
from ..core.logging_config import get_logger
from ..core.road import RebuildResult, RoadAsset

logger = get_logger(__name__)


class SaikeiRoadOperator(Operator):
    """
    Base class for operators on the active road.

    Methods to Override:
        _execute(context, obj, road): Implement your operator logic here.
            Return {'FINISHED'} or {'CANCELLED'}.

    Helper Methods:
        store(obj, road): Write the road back to its object
        rebuild(obj, road): Regenerate and write the road meshes
    """

    @classmethod
    def poll(cls, context):
        return tool.Road.is_road(context.active_object)

    def execute(self, context) -> Set[str]:
        """
        Execute the operator with error handling.

        Do not override this method. Override _execute() instead.
        """
        obj = context.active_object

        try:
            road = tool.Road.load(obj)
            return self._execute(context, obj, road)

        except Exception as e:
            logger.error("Operator %s failed: %s", self.bl_idname, e)
            logger.error(traceback.format_exc())

            self.report({'ERROR'}, str(e))
            return {'CANCELLED'}

    def _execute(self, context, obj: bpy.types.Object, road: RoadAsset) -> Set[str]:
        raise NotImplementedError(
            f"Operator {self.__class__.__name__} must implement _execute()"
        )

    def store(self, obj: bpy.types.Object, road: RoadAsset) -> None:
        tool.Road.save(obj, road)

    def rebuild(self, obj: bpy.types.Object, road: RoadAsset) -> RebuildResult:
        """Store the road, regenerate its meshes and attach the pillar object."""
        self.store(obj, road)
        result = road.rebuild(tool.Raycaster, tool.MeshSink, tool.HeightField)
        tool.Road.attach_props(obj)
        return result
