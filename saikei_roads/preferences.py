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
Saikei Roads Extension Preferences

Stores defaults for new roads and the logging level.
"""

import bpy
from bpy.types import AddonPreferences
from bpy.props import BoolProperty, FloatProperty

from .core.constants import DEFAULT_ROAD_WIDTH, DEFAULT_SAMPLE_SPACING, MIN_SAMPLE_SPACING
from .core.logging_config import disable_debug, enable_debug


def _update_debug_logging(self, context):
    if self.debug_logging:
        enable_debug()
    else:
        disable_debug()


class SaikeiRoadsPreferences(AddonPreferences):
    """Saikei Roads extension preferences"""

    # This must match the extension name
    bl_idname = __package__

    default_width: FloatProperty(
        name="Default Road Width",
        description="Width of new roads, used when elevating terrain",
        default=DEFAULT_ROAD_WIDTH,
        min=0.1
    )

    default_sample_spacing: FloatProperty(
        name="Default Sample Spacing",
        description="Target distance between road rings for new roads",
        default=DEFAULT_SAMPLE_SPACING,
        min=MIN_SAMPLE_SPACING
    )

    debug_logging: BoolProperty(
        name="Debug Logging",
        description="Log per-segment and per-terrain detail to the console",
        default=False,
        update=_update_debug_logging
    )

    def draw(self, context):
        """Draw preferences UI"""
        layout = self.layout

        box = layout.box()
        box.label(text="New Roads", icon='MOD_CURVE')
        col = box.column(align=True)
        col.prop(self, "default_width")
        col.prop(self, "default_sample_spacing")

        layout.separator()

        box = layout.box()
        box.label(text="Debugging", icon='CONSOLE')
        box.prop(self, "debug_logging")


# Registration
classes = (
    SaikeiRoadsPreferences,
)

def register():
    for cls in classes:
        bpy.utils.register_class(cls)

def unregister():
    for cls in reversed(classes):
        bpy.utils.unregister_class(cls)
