# ============================================================================
# Saikei Roads - Procedural Road Meshes for Blender
# Copyright (c) 2025 Michael Yoder / Desert Springs Civil Engineering PLLC
# Licensed under the GNU General Public License v3
# https://github.com/saikeicivil/SaikeiCivil
# ============================================================================
"""
Interface definitions for Saikei Roads tools.

The road core never talks to a physics engine, a terrain store or a
renderer directly. It receives tool classes implementing the interfaces
below:

    Layer 1: Core (saikei_roads.core) - Pure Python business logic
    Layer 2: Tool (saikei_roads.tool) - Blender-specific implementations
    Layer 3: Operators - the build trigger surface

Usage:
    from typing import TYPE_CHECKING

    if TYPE_CHECKING:
        import saikei_roads.tool as tool

    def conform(raycaster: type[tool.Raycaster], height_field: type[tool.HeightField]):
        hit = raycaster.cast(origin, DOWN, 100.0, mask)
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Hashable, Optional
import abc

if TYPE_CHECKING:
    import numpy as np
    from .mesh_sweep import SweptMesh
    from .vector import Vector3


def interface(cls):
    """
    Decorator that converts all public methods to @classmethod @abstractmethod.

    Tool classes are passed as types (not instances) to core functions, and
    all methods are called as class methods.

    Example:
        @interface
        class Raycaster:
            def cast(cls, origin, direction, max_distance, layer_mask): pass

        class SceneRaycaster(core.tool.Raycaster):
            @classmethod
            def cast(cls, origin, direction, max_distance, layer_mask):
                return actual_implementation()
    """
    for name, method in list(cls.__dict__.items()):
        if callable(method) and not name.startswith('_'):
            setattr(cls, name, classmethod(abc.abstractmethod(method)))
    cls.__original_qualname__ = cls.__qualname__
    return cls


@dataclass
class RaycastHit:
    """Result of a successful raycast.

    Attributes:
        point: World-space hit position
        surface_id: Identity of the surface that was hit (a terrain id
            when the surface is a terrain)
        distance: Distance from the ray origin to the hit
    """
    point: "Vector3"
    surface_id: Hashable = None
    distance: float = 0.0


# =============================================================================
# Core Interfaces
# =============================================================================

@interface
class Raycaster:
    """Physics raycast service."""

    def cast(
        cls,
        origin: "Vector3",
        direction: "Vector3",
        max_distance: float,
        layer_mask: int
    ) -> Optional[RaycastHit]:
        """
        Cast a ray and return the first hit.

        Args:
            origin: World-space ray origin
            direction: Ray direction (normalized)
            max_distance: Maximum ray length
            layer_mask: Bit mask of collision layers the ray may hit

        Returns:
            The hit, or None when nothing was hit. A miss is a normal outcome.
        """
        pass


@interface
class HeightField:
    """Terrain height-field storage.

    Heights are normalized to [0, 1] of the terrain's vertical scale.
    Grids are indexed [z, x] (rows along Z).
    """

    def is_terrain(cls, surface_id: Hashable) -> bool:
        """True if the hit surface is a terrain this service manages."""
        pass

    def heightmap_resolution(cls, terrain_id: Hashable) -> int:
        """Number of samples along each side of the heightmap."""
        pass

    def heightmap_scale(cls, terrain_id: Hashable) -> "Vector3":
        """World units per grid cell on X and Z; full height range on Y."""
        pass

    def terrain_position(cls, terrain_id: Hashable) -> "Vector3":
        """World-space position of grid cell (0, 0) at height 0."""
        pass

    def get_heights(
        cls,
        terrain_id: Hashable,
        x_offset: int,
        z_offset: int,
        width: int,
        height: int
    ) -> "np.ndarray":
        """
        Read a rectangular window of heights.

        Returns:
            Float array of shape (height, width)
        """
        pass

    def set_heights(
        cls,
        terrain_id: Hashable,
        x_offset: int,
        z_offset: int,
        heights: "np.ndarray"
    ) -> None:
        """Write a rectangular window of heights back in one batch."""
        pass


@interface
class MeshSink:
    """Receives generated meshes for rendering and collision registration."""

    def set_mesh(cls, name: str, mesh: "SweptMesh", layer: int) -> Any:
        """
        Create or replace the named mesh.

        Args:
            name: Mesh name
            mesh: Generated buffers
            layer: Collision layer of the mesh (the road's own layer, which
                the road's raycasts exclude)

        Returns:
            Host-specific handle (e.g. the Blender object)
        """
        pass

    def remove_mesh(cls, name: str) -> None:
        """Remove the named mesh if it exists."""
        pass


__all__ = ["interface", "RaycastHit", "Raycaster", "HeightField", "MeshSink"]
