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
Saikei Roads Core Module

Core functionality and data structures for Saikei Roads.
This module contains:
- Interface definitions (tool.py) for the three-layer architecture
- Bezier curve math, curve chains and sampling
- The cross-section sweep and prop replication
- Terrain conforming (match elevation, elevate terrain)

Architecture:
    Layer 1: Core (this module) - Pure Python interfaces and business logic
    Layer 2: Tool (saikei_roads.tool) - Blender-specific implementations
    Layer 3: Operators - Blender operators and preferences

Nothing in this package imports bpy, so it can be used and tested
outside Blender.
"""

# Import logging configuration first (no dependencies)
from .logging_config import get_logger, setup_logging

# Import interface definitions (no external dependencies)
from .tool import (
    interface,
    RaycastHit,
    Raycaster,
    HeightField,
    MeshSink,
)

from . import constants
from . import curve_math
from .vector import Vector3, Quaternion, Placement
from .falloff import FalloffCurve, InterpolationType
from .road_curve import Sample, CurveSegment, RoadCurveChain
from .mesh_sweep import CrossSectionMesh, SweptMesh, build_road_mesh, build_prop_mesh
from .terrain import ElevationResult, TerrainHeightSample, match_elevation, elevate_terrain
from .road import RebuildResult, RoadAsset, save_road, load_road

logger = get_logger(__name__)


def register():
    """Register core module"""
    logger.info("Core module loaded")


def unregister():
    """Unregister core module"""
    pass
