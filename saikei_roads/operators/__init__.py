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
Saikei Roads Operators Module

Blender operators for road editing and generation.
"""

from ..core.logging_config import get_logger

from . import base_operator  # Must be first - provides base class
from . import road_operators

logger = get_logger(__name__)

_operator_modules = [
    road_operators,
]


def register():
    """Register all operator modules"""
    for module in _operator_modules:
        module.register()
    logger.info("Registered %d operator modules", len(_operator_modules))


def unregister():
    """Unregister all operator modules"""
    for module in reversed(_operator_modules):
        module.unregister()
