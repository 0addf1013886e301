# ============================================================================
# Saikei Roads - Procedural Road Meshes for Blender
# Copyright (c) 2025 Michael Yoder / Desert Springs Civil Engineering PLLC
# Licensed under the GNU General Public License v3
# https://github.com/saikeicivil/SaikeiCivil
# ============================================================================
"""
Tool layer for Saikei Roads - Blender implementations of core interfaces.

Usage:
    import saikei_roads.tool as tool

    road = tool.Road.load(obj)
    road.match_elevation(tool.Raycaster)
    road.rebuild(tool.Raycaster, tool.MeshSink, tool.HeightField)

    # In core functions, tools are passed as parameters:
    def my_core_function(raycaster: type[tool.Raycaster]):
        hit = raycaster.cast(origin, DOWN, 100.0, mask)
"""

from .blender import Blender
from .raycast import Raycaster
from .terrain import HeightField
from .mesh import MeshSink
from .road import Road

__all__ = [
    "Blender",
    "Raycaster",
    "HeightField",
    "MeshSink",
    "Road",
]


def register():
    """Register tool layer (no-op for now)."""
    pass


def unregister():
    """Unregister tool layer (no-op for now)."""
    pass
