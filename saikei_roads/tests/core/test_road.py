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
Road Asset Tests - NO BLENDER REQUIRED
=======================================

Run with:
    pytest saikei_roads/tests/core/test_road.py -v
"""

import json

import numpy as np
import pytest

from saikei_roads.core import tool
from saikei_roads.core.constants import DEFAULT_ROAD_LAYER, layer_in_mask
from saikei_roads.core.falloff import FalloffCurve, InterpolationType
from saikei_roads.core.road import RoadAsset, load_road, save_road
from saikei_roads.core.vector import Placement, Quaternion, Vector3


@pytest.fixture
def road(slab_section, pillar_section):
    road = RoadAsset(
        name="Bridge",
        cross_section=slab_section,
        prop_mesh=pillar_section,
        sample_spacing=5.0,
        prop_frequency=2,
    )
    road.add_curve()
    for index in range(4):
        point = road.curves.get_control_point(0, index)
        road.set_control_point(0, index, Vector3(point.x, 10.0, point.z))
    return road


class TestValidation:

    @pytest.mark.unit
    def test_defaults(self):
        road = RoadAsset()
        assert road.width == 12.0
        assert road.elevation_resolution == 100
        assert road.collision_layer == DEFAULT_ROAD_LAYER
        assert len(road.curves) == 0

    @pytest.mark.unit
    @pytest.mark.parametrize("kwargs", [
        {"width": 0.0},
        {"sample_spacing": -1.0},
        {"min_pillar_height": 10.0, "max_pillar_height": 5.0},
        {"prop_frequency": 0},
        {"elevation_resolution": 0},
        {"collision_layer": 32},
    ])
    def test_invalid_parameters_raise(self, kwargs):
        with pytest.raises(ValueError):
            RoadAsset(**kwargs)

    @pytest.mark.unit
    def test_layer_mask_excludes_own_layer(self):
        road = RoadAsset(collision_layer=3)
        assert not layer_in_mask(3, road.layer_mask)
        assert layer_in_mask(0, road.layer_mask)


class TestCurveEditing:

    @pytest.mark.unit
    def test_add_remove_clear(self):
        road = RoadAsset()
        road.add_curve()
        road.add_curve()
        assert len(road.curves) == 2

        road.remove_curve(5)
        assert len(road.curves) == 1

        road.clear_curves()
        assert len(road.curves) == 0
        assert road.remove_curve(0) is None


class TestRebuild:

    @pytest.mark.unit
    def test_rebuild_sends_meshes_to_sink(self, road, make_raycaster, make_mesh_sink):
        sink = make_mesh_sink()

        result = road.rebuild(make_raycaster(height=0.0), sink)

        assert result.sample_count == 4
        assert result.road_mesh.vertex_count == 4 * 4
        assert sink.meshes["Bridge"] is result.road_mesh
        assert sink.meshes["Bridge_Props"] is result.prop_mesh
        assert result.generation_time >= 0.0

    @pytest.mark.unit
    def test_pillars_use_prop_frequency(self, road, make_raycaster):
        result = road.rebuild(make_raycaster(height=0.0))

        # 4 pillar samples, every 2nd one used
        assert result.pillar_count == 2
        assert result.prop_mesh.vertex_count == 2 * 3

    @pytest.mark.unit
    def test_no_raycaster_skips_pillars(self, road, make_mesh_sink):
        sink = make_mesh_sink()

        result = road.rebuild(mesh_sink=sink)

        assert result.prop_mesh is None
        assert result.pillar_count == 0
        assert "Bridge_Props" not in sink.meshes

    @pytest.mark.unit
    def test_pillars_disabled(self, road, make_raycaster):
        road.pillars_enabled = False
        assert road.rebuild(make_raycaster()).prop_mesh is None

    @pytest.mark.unit
    def test_missing_prop_mesh_skips_pillars(self, road, make_raycaster):
        road.prop_mesh = None
        assert road.rebuild(make_raycaster()).prop_mesh is None

    @pytest.mark.unit
    def test_missing_cross_section_skips_road_mesh(self, road, make_mesh_sink, saikei_caplog):
        road.cross_section = None
        sink = make_mesh_sink()

        result = road.rebuild(mesh_sink=sink)

        assert result.road_mesh.is_empty
        assert sink.meshes["Bridge"].is_empty
        assert "no cross-section mesh" in saikei_caplog.text

    @pytest.mark.unit
    def test_pillar_raycasts_exclude_road_layer(self, road, make_raycaster):
        raycaster = make_raycaster(height=0.0)

        road.rebuild(raycaster)

        assert raycaster.casts
        assert all(not layer_in_mask(road.collision_layer, cast[3]) for cast in raycaster.casts)

    @pytest.mark.unit
    def test_closed_loop(self, road):
        road.close_loop = True
        result = road.rebuild()
        assert result.sample_count == 5

    @pytest.mark.unit
    def test_empty_road(self, slab_section, make_raycaster, make_mesh_sink):
        road = RoadAsset(cross_section=slab_section)
        sink = make_mesh_sink()

        result = road.rebuild(make_raycaster(), sink)

        assert result.sample_count == 0
        assert result.road_mesh.is_empty
        assert result.vertex_count == 0


class TestGeneratedMeshes:

    @pytest.fixture
    def scene_raycaster(self):
        """Ground at y = 0 with last rebuild's pillars standing on it.

        The pillar tops sit at the road height, so a ray from above the road
        hits them first unless the pillar layer is masked out.
        """
        def factory(sink, road_height):
            class SceneRaycaster(tool.Raycaster):
                @classmethod
                def cast(cls, origin, direction, max_distance, layer_mask):
                    props_layer = sink.layers.get("Bridge_Props")
                    if (props_layer is not None and layer_in_mask(props_layer, layer_mask)
                            and origin.y >= road_height):
                        return tool.RaycastHit(
                            point=Vector3(origin.x, road_height, origin.z),
                            surface_id="Bridge_Props",
                            distance=origin.y - road_height,
                        )
                    return tool.RaycastHit(
                        point=Vector3(origin.x, 0.0, origin.z),
                        surface_id="Terrain",
                        distance=origin.y,
                    )

            return SceneRaycaster

        return factory

    @pytest.mark.unit
    def test_generated_meshes_on_road_layer(self, road, make_raycaster, make_mesh_sink):
        sink = make_mesh_sink()

        road.rebuild(make_raycaster(), sink)

        assert sink.layers == {"Bridge": road.collision_layer, "Bridge_Props": road.collision_layer}

    @pytest.mark.unit
    def test_repeated_rebuilds_keep_pillars(self, road, make_mesh_sink, scene_raycaster):
        sink = make_mesh_sink()
        raycaster = scene_raycaster(sink, road_height=10.0)

        first = road.rebuild(raycaster, sink)
        second = road.rebuild(raycaster, sink)

        assert first.pillar_count == 2
        assert second.pillar_count == 2

    @pytest.mark.unit
    def test_disabling_pillars_removes_stale_props(self, road, make_raycaster, make_mesh_sink):
        sink = make_mesh_sink()
        road.rebuild(make_raycaster(), sink)
        assert "Bridge_Props" in sink.meshes

        road.pillars_enabled = False
        road.rebuild(make_raycaster(), sink)

        assert "Bridge_Props" not in sink.meshes
        assert sink.removed == ["Bridge_Props"]

    @pytest.mark.unit
    def test_missing_templates_clear_both_meshes(self, road, make_raycaster, make_mesh_sink):
        sink = make_mesh_sink()
        road.rebuild(make_raycaster(), sink)

        road.cross_section = None
        road.prop_mesh = None
        road.rebuild(make_raycaster(), sink)

        assert sink.meshes["Bridge"].is_empty
        assert "Bridge_Props" not in sink.meshes


class TestTerrainOperations:

    @pytest.mark.unit
    def test_match_elevation(self, road, make_raycaster):
        moved = road.match_elevation(make_raycaster(height=3.0))

        assert moved == 4
        assert all(p.y == pytest.approx(3.0) for p in road.curves[0].points)

    @pytest.mark.unit
    def test_match_elevation_ignores_road_layer(self, road, make_raycaster):
        own_mesh = make_raycaster(height=9.0, layer=road.collision_layer)
        assert road.match_elevation(own_mesh) == 0

    @pytest.mark.unit
    def test_elevate_terrain_uses_road_width(self, road, make_raycaster, make_height_field):
        height_field = make_height_field({"Terrain": np.zeros((32, 32))})
        road.width = 2.0

        result = road.elevate_terrain(make_raycaster(), height_field)

        grid = height_field.grids["Terrain"]
        assert result.terrain_found
        assert grid[0, 0] > 0.0
        assert grid[2, 0] == 0.0

    @pytest.mark.unit
    def test_elevate_terrain_without_terrain(self, road, make_raycaster, make_height_field):
        height_field = make_height_field({"Terrain": np.zeros((32, 32))})
        result = road.elevate_terrain(make_raycaster(surface_id="Rock"), height_field)
        assert not result.terrain_found


class TestPersistence:

    @pytest.mark.unit
    def test_dict_round_trip(self, road):
        road.falloff = FalloffCurve([(0.0, 0.0), (0.5, 1.0)], InterpolationType.STEP)
        road.placement = Placement(Vector3(1.0, 2.0, 3.0), Quaternion.from_axis_angle(Vector3(0, 1, 0), 0.5))
        road.close_loop = True

        restored = RoadAsset.from_dict(json.loads(json.dumps(road.to_dict())))

        assert restored.name == "Bridge"
        assert restored.curves.to_list() == road.curves.to_list()
        assert restored.prop_frequency == 2
        assert restored.close_loop is True
        assert restored.falloff.keyframes == road.falloff.keyframes
        assert restored.falloff.interpolation == InterpolationType.STEP
        assert restored.placement.location == road.placement.location
        assert restored.placement.rotation == road.placement.rotation

    @pytest.mark.unit
    def test_meshes_not_persisted(self, road):
        data = road.to_dict()
        assert "cross_section" not in data
        assert RoadAsset.from_dict(data).cross_section is None

    @pytest.mark.unit
    def test_from_dict_attaches_templates(self, road, slab_section):
        restored = RoadAsset.from_dict(road.to_dict(), cross_section=slab_section)
        assert restored.cross_section is slab_section

    @pytest.mark.unit
    def test_invalid_data_raises(self):
        with pytest.raises(ValueError):
            RoadAsset.from_dict({"curves": [[[0, 0, 0]]]})
        with pytest.raises(ValueError):
            RoadAsset.from_dict({"width": -4})

    @pytest.mark.unit
    def test_short_control_points_raise(self):
        with pytest.raises(ValueError):
            RoadAsset.from_dict({"curves": [[[0, 0], [1, 0], [2, 0], [3, 0]]]})

    @pytest.mark.unit
    def test_save_and_load(self, road, tmp_path):
        path = tmp_path / "bridge.json"

        save_road(road, path)
        loaded = load_road(path)

        assert json.loads(path.read_text())["name"] == "Bridge"
        assert loaded.curves.to_list() == road.curves.to_list()
        assert loaded.sample_spacing == road.sample_spacing
