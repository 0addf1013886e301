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
Road Asset
==========

Aggregate root for a single road: the curve chain, the mesh templates and
the build parameters. Every host action (add/remove/clear curves, move a
control point, match elevation, elevate terrain, rebuild) goes through a
RoadAsset method.

Tools are injected as classes, following the three-layer architecture:

    road = RoadAsset(name="Bridge", cross_section=deck)
    road.add_curve()
    road.match_elevation(tool.Raycaster)
    result = road.rebuild(tool.Raycaster, tool.MeshSink)

Mesh templates are host assets: they are not persisted by to_dict().
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from . import terrain
from .constants import (
    DEFAULT_ELEVATION_RESOLUTION,
    DEFAULT_MAX_PILLAR_HEIGHT,
    DEFAULT_MIN_PILLAR_HEIGHT,
    DEFAULT_PROP_FREQUENCY,
    DEFAULT_ROAD_LAYER,
    DEFAULT_ROAD_WIDTH,
    DEFAULT_SAMPLE_SPACING,
    LAYER_COUNT,
    layer_mask_excluding,
)
from .falloff import FalloffCurve
from .logging_config import get_logger
from .mesh_sweep import CrossSectionMesh, SweptMesh, build_prop_mesh, build_road_mesh
from .road_curve import CurveSegment, RoadCurveChain
from .vector import Placement

if TYPE_CHECKING:
    import saikei_roads.tool as tool

logger = get_logger(__name__)

FORMAT_VERSION = "1.0"


@dataclass
class RebuildResult:
    """Statistics from a rebuild."""
    road_mesh: SweptMesh
    prop_mesh: Optional[SweptMesh] = None
    sample_count: int = 0
    pillar_count: int = 0
    generation_time: float = 0.0

    @property
    def vertex_count(self) -> int:
        count = self.road_mesh.vertex_count
        if self.prop_mesh is not None:
            count += self.prop_mesh.vertex_count
        return count


@dataclass
class RoadAsset:
    """
    A procedurally generated road.

    Attributes:
        name: Road name (also used for the output meshes)
        curves: Centerline curve chain in local space
        cross_section: Template swept along the road (None skips the sweep)
        prop_mesh: Pillar template (None skips pillars)
        width: Road width used by elevate_terrain
        min_pillar_height: Minimum road clearance for a pillar
        max_pillar_height: Maximum road clearance for a pillar
        prop_frequency: Place a pillar at every n-th pillar sample
        pillars_enabled: Generate pillars on rebuild
        sample_spacing: Target distance between road rings
        close_loop: Repeat the first ring at the end
        elevation_resolution: Samples per segment for elevate_terrain
        falloff: Terrain falloff curve
        placement: Road object location and rotation in world space
        collision_layer: Layer of the road's own collider, excluded from raycasts
    """
    name: str = "Road"
    curves: RoadCurveChain = field(default_factory=RoadCurveChain)
    cross_section: Optional[CrossSectionMesh] = None
    prop_mesh: Optional[CrossSectionMesh] = None
    width: float = DEFAULT_ROAD_WIDTH
    min_pillar_height: float = DEFAULT_MIN_PILLAR_HEIGHT
    max_pillar_height: float = DEFAULT_MAX_PILLAR_HEIGHT
    prop_frequency: int = DEFAULT_PROP_FREQUENCY
    pillars_enabled: bool = True
    sample_spacing: float = DEFAULT_SAMPLE_SPACING
    close_loop: bool = False
    elevation_resolution: int = DEFAULT_ELEVATION_RESOLUTION
    falloff: Any = field(default_factory=FalloffCurve.smooth)
    placement: Placement = field(default_factory=Placement)
    collision_layer: int = DEFAULT_ROAD_LAYER

    def __post_init__(self):
        """Validate parameters after initialization."""
        if self.width <= 0:
            raise ValueError(f"Road width must be positive, got {self.width}")
        if self.sample_spacing <= 0:
            raise ValueError(f"Sample spacing must be positive, got {self.sample_spacing}")
        if self.min_pillar_height > self.max_pillar_height:
            raise ValueError(
                f"Minimum pillar height ({self.min_pillar_height}) exceeds "
                f"maximum ({self.max_pillar_height})"
            )
        if self.prop_frequency < 1:
            raise ValueError(f"Prop frequency must be at least 1, got {self.prop_frequency}")
        if self.elevation_resolution < 1:
            raise ValueError(
                f"Elevation resolution must be at least 1, got {self.elevation_resolution}"
            )
        if not 0 <= self.collision_layer < LAYER_COUNT:
            raise ValueError(
                f"Collision layer must be in [0, {LAYER_COUNT}), got {self.collision_layer}"
            )

    @property
    def layer_mask(self) -> int:
        """Raycast mask excluding the road's own layer."""
        return layer_mask_excluding(self.collision_layer)

    @property
    def props_name(self) -> str:
        """Name of the generated pillar mesh."""
        return f"{self.name}_Props"

    # -------------------------------------------------------------------------
    # Curve editing
    # -------------------------------------------------------------------------

    def add_curve(self) -> CurveSegment:
        segment = self.curves.append()
        logger.info("Road '%s': added curve %d", self.name, len(self.curves) - 1)
        return segment

    def remove_curve(self, index: int) -> Optional[CurveSegment]:
        removed = self.curves.remove_at(index)
        if removed is not None:
            logger.info("Road '%s': removed curve, %d left", self.name, len(self.curves))
        return removed

    def clear_curves(self) -> None:
        self.curves.clear()
        logger.info("Road '%s': cleared curves", self.name)

    def set_control_point(self, segment_index: int, point_index: int, position) -> None:
        self.curves.set_control_point(segment_index, point_index, position)

    # -------------------------------------------------------------------------
    # Terrain
    # -------------------------------------------------------------------------

    def match_elevation(self, raycaster: "type[tool.Raycaster]") -> int:
        """Drop every control point onto the surface below. Returns points moved."""
        return terrain.match_elevation(
            self.curves, raycaster, self.placement, layer_mask=self.layer_mask
        )

    def elevate_terrain(
        self,
        raycaster: "type[tool.Raycaster]",
        height_field: "type[tool.HeightField]"
    ) -> terrain.ElevationResult:
        """Raise the terrain under the road using this road's width and falloff."""
        return terrain.elevate_terrain(
            self.curves,
            raycaster,
            height_field,
            self.falloff,
            placement=self.placement,
            resolution=self.elevation_resolution,
            width=self.width,
            layer_mask=self.layer_mask,
        )

    # -------------------------------------------------------------------------
    # Build
    # -------------------------------------------------------------------------

    def rebuild(
        self,
        raycaster: "Optional[type[tool.Raycaster]]" = None,
        mesh_sink: "Optional[type[tool.MeshSink]]" = None,
        height_field: "Optional[type[tool.HeightField]]" = None
    ) -> RebuildResult:
        """
        Regenerate the road mesh (and pillar mesh) from the curve chain.

        Args:
            raycaster: Needed for pillars; None skips them
            mesh_sink: Receives "<name>" and "<name>_Props" meshes if given.
                A skipped road step sends an empty road mesh; a skipped
                pillar step removes "<name>_Props"
            height_field: If given, pillars only stand on its terrains

        Returns:
            RebuildResult with the generated buffers and counts
        """
        start_time = time.time()

        samples = self.curves.sample(self.sample_spacing, self.close_loop)

        if self.cross_section is None:
            logger.info("Road '%s': no cross-section mesh, skipping road mesh", self.name)
            road_mesh = SweptMesh.empty()
        else:
            road_mesh = build_road_mesh(self.cross_section, samples)

        prop_mesh = None
        pillar_count = 0
        if not self.pillars_enabled:
            logger.debug("Road '%s': pillars disabled", self.name)
        elif self.prop_mesh is None:
            logger.info("Road '%s': no prop mesh, skipping pillars", self.name)
        elif raycaster is None:
            logger.info("Road '%s': no raycaster, skipping pillars", self.name)
        else:
            pillar_samples = self.curves.sample_pillars(
                self.sample_spacing,
                raycaster,
                placement=self.placement,
                layer_mask=self.layer_mask,
                min_height=self.min_pillar_height,
                max_height=self.max_pillar_height,
                height_field=height_field,
            )
            prop_mesh = build_prop_mesh(self.prop_mesh, pillar_samples, self.prop_frequency)
            pillar_count = len(pillar_samples[::self.prop_frequency])

        if mesh_sink is not None:
            # A skipped step clears its output instead of leaving a stale mesh
            mesh_sink.set_mesh(self.name, road_mesh, self.collision_layer)
            if prop_mesh is not None:
                mesh_sink.set_mesh(self.props_name, prop_mesh, self.collision_layer)
            else:
                mesh_sink.remove_mesh(self.props_name)

        result = RebuildResult(
            road_mesh=road_mesh,
            prop_mesh=prop_mesh,
            sample_count=len(samples),
            pillar_count=pillar_count,
            generation_time=time.time() - start_time,
        )

        logger.info("Road '%s' rebuilt:", self.name)
        logger.info("  Samples: %d", result.sample_count)
        logger.info("  Vertices: %s", f"{road_mesh.vertex_count:,}")
        logger.info("  Triangles: %s", f"{road_mesh.triangle_count:,}")
        logger.info("  Pillars: %d", result.pillar_count)
        logger.info("  Time: %.3fs", result.generation_time)

        return result

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the road to a JSON-friendly dictionary.

        Mesh templates are not included.
        """
        return {
            "version": FORMAT_VERSION,
            "name": self.name,
            "curves": self.curves.to_list(),
            "point_count": self.curves.point_count,
            "width": self.width,
            "min_pillar_height": self.min_pillar_height,
            "max_pillar_height": self.max_pillar_height,
            "prop_frequency": self.prop_frequency,
            "pillars_enabled": self.pillars_enabled,
            "sample_spacing": self.sample_spacing,
            "close_loop": self.close_loop,
            "elevation_resolution": self.elevation_resolution,
            "falloff": self.falloff.to_dict() if hasattr(self.falloff, "to_dict") else None,
            "placement": self.placement.to_dict(),
            "collision_layer": self.collision_layer,
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        cross_section: Optional[CrossSectionMesh] = None,
        prop_mesh: Optional[CrossSectionMesh] = None
    ) -> "RoadAsset":
        """
        Deserialize a road from a dictionary produced by to_dict().

        Args:
            data: Serialized road
            cross_section: Template to attach (not persisted)
            prop_mesh: Pillar template to attach (not persisted)

        Raises:
            ValueError: If the data holds invalid curves or parameters
        """
        falloff_data = data.get("falloff")
        return cls(
            name=data.get("name", "Road"),
            curves=RoadCurveChain.from_list(
                data.get("curves", []), int(data.get("point_count", 4))
            ),
            cross_section=cross_section,
            prop_mesh=prop_mesh,
            width=float(data.get("width", DEFAULT_ROAD_WIDTH)),
            min_pillar_height=float(data.get("min_pillar_height", DEFAULT_MIN_PILLAR_HEIGHT)),
            max_pillar_height=float(data.get("max_pillar_height", DEFAULT_MAX_PILLAR_HEIGHT)),
            prop_frequency=int(data.get("prop_frequency", DEFAULT_PROP_FREQUENCY)),
            pillars_enabled=bool(data.get("pillars_enabled", True)),
            sample_spacing=float(data.get("sample_spacing", DEFAULT_SAMPLE_SPACING)),
            close_loop=bool(data.get("close_loop", False)),
            elevation_resolution=int(data.get("elevation_resolution", DEFAULT_ELEVATION_RESOLUTION)),
            falloff=FalloffCurve.from_dict(falloff_data) if falloff_data else FalloffCurve.smooth(),
            placement=Placement.from_dict(data.get("placement", {})),
            collision_layer=int(data.get("collision_layer", DEFAULT_ROAD_LAYER)),
        )


# =============================================================================
# JSON Files
# =============================================================================

def save_road(road: RoadAsset, filepath: Union[str, Path]) -> None:
    """Write a road to a JSON file."""
    with open(filepath, "w") as jsonfile:
        json.dump(road.to_dict(), jsonfile, indent=2)
    logger.info("Saved road '%s' to %s", road.name, filepath)


def load_road(
    filepath: Union[str, Path],
    cross_section: Optional[CrossSectionMesh] = None,
    prop_mesh: Optional[CrossSectionMesh] = None
) -> RoadAsset:
    """Read a road written by save_road()."""
    with open(filepath, "r") as jsonfile:
        data = json.load(jsonfile)
    road = RoadAsset.from_dict(data, cross_section=cross_section, prop_mesh=prop_mesh)
    logger.info("Loaded road '%s' from %s (%d curves)", road.name, filepath, len(road.curves))
    return road


__all__ = [
    "RebuildResult",
    "RoadAsset",
    "save_road",
    "load_road",
]
