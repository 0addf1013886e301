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
Saikei Roads Extension
Version 0.1.0

Procedural road meshes for Blender: a cross-section mesh swept along a
chain of Bezier curves, pillars under elevated sections and terrain
raised to meet the road.

The core (saikei_roads.core) has no Blender dependency. Blender modules
are imported when the extension is registered.
"""

__version__ = "0.1.0"


def register():
    """Register extension modules and classes"""
    from . import preferences
    from . import core
    from . import tool  # Tool layer (Blender implementations of core interfaces)
    from . import operators

    from .core.logging_config import (
        setup_logging,
        get_logger,
        log_startup_banner,
        log_startup_complete,
    )

    # Initialize logging first
    setup_logging()
    logger = get_logger(__name__)

    log_startup_banner(__version__)

    # Register modules in order
    logger.info("Loading modules...")
    preferences.register()  # Register preferences FIRST (operators read defaults)
    core.register()
    tool.register()
    operators.register()

    log_startup_complete()


def unregister():
    """Unregister extension modules and classes"""
    from . import preferences
    from . import core
    from . import tool
    from . import operators

    from .core.logging_config import get_logger, log_shutdown

    logger = get_logger(__name__)
    logger.info("Saikei Roads Extension - Unregistering...")

    # Unregister modules in reverse order
    operators.unregister()
    tool.unregister()
    core.unregister()
    preferences.unregister()

    log_shutdown()


if __name__ == "__main__":
    register()
