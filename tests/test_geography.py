"""Tests for mask sources and the coastal distance field."""

import numpy as np
import pytest

from py_climsim.config.config import settings
from py_climsim.core.geography import (
    ArrayMaskSource,
    CustomMapSource,
    ProceduralMapSource,
    VirtualContinentSource,
    build_grid,
    build_grid_graph,
    compute_distance_map,
    earth_stats,
)


def single_pixel_source(rows, cols, row, col):
    is_land = np.zeros((rows, cols), dtype=bool)
    is_land[row, col] = True
    elevation = np.where(is_land, 100.0, -4000.0)
    return ArrayMaskSource(elevation, is_land)


class TestCoastalDistance:
    """Test the signed coastal distance field."""

    @pytest.fixture
    def island_grid(self):
        # Row 9 of 19 is the equator, column 0 sits on the longitude seam
        return build_grid(19, 36, single_pixel_source(19, 36, 9, 0))

    def test_land_pixel_positive(self, island_grid):
        dist = island_grid.dist_coast
        assert dist[9, 0] > 0
        assert dist[9, 0] == pytest.approx(island_grid.km_per_unit)
        assert np.all(dist[~island_grid.is_land] < 0)

    def test_wraps_across_seam(self, island_grid):
        dist = island_grid.dist_coast
        km = island_grid.km_per_unit

        # Column 35 is one step from column 0, not 35
        assert dist[9, 35] == pytest.approx(-km)
        assert dist[9, 35] == pytest.approx(dist[9, 1])
        assert dist[9, 34] == pytest.approx(dist[9, 2])

    def test_increases_with_graph_distance(self, island_grid):
        dist = np.abs(island_grid.dist_coast)

        along_equator = [dist[9, k] for k in range(1, 18)]
        assert all(b > a for a, b in zip(along_equator, along_equator[1:]))

        west = [dist[9, (-k) % 36] for k in range(1, 18)]
        assert all(b > a for a, b in zip(west, west[1:]))

        north = [dist[9 - k, 0] for k in range(1, 9)]
        south = [dist[9 + k, 0] for k in range(1, 9)]
        assert all(b > a for a, b in zip(north, north[1:]))
        assert all(b > a for a, b in zip(south, south[1:]))

    def test_all_ocean_is_unbounded(self):
        source = ArrayMaskSource(np.full((10, 20), -4000.0), np.zeros((10, 20), dtype=bool))
        grid = build_grid(10, 20, source)
        assert np.all(np.isneginf(grid.dist_coast))

    def test_all_land_is_unbounded(self):
        source = ArrayMaskSource(np.full((10, 20), 500.0), np.ones((10, 20), dtype=bool))
        grid = build_grid(10, 20, source)
        assert np.all(np.isposinf(grid.dist_coast))

    def test_distance_map_without_sources(self):
        graph = build_grid_graph(5, 8, np.ones(5))
        dist = compute_distance_map(graph, np.zeros((5, 8), dtype=bool))
        assert np.all(np.isinf(dist))

    def test_horizontal_cost_floor_near_poles(self):
        # At the pole cos(lat) is 0; horizontal steps still cost the floor value
        graph = build_grid_graph(5, 8, np.cos(np.radians([90.0, 45.0, 0.0, -45.0, -90.0])))
        is_source = np.zeros((5, 8), dtype=bool)
        is_source[0, 0] = True
        dist = compute_distance_map(graph, is_source)
        assert dist[0, 1] == pytest.approx(0.05)
        assert dist[0, 4] == pytest.approx(0.2)


class TestBuildGrid:
    """Test grid construction from mask sources."""

    def test_rejects_degenerate_grid(self):
        with pytest.raises(ValueError):
            build_grid(1, 10)
        with pytest.raises(ValueError):
            build_grid(10, 0)

    def test_rejects_oversized_grid(self, monkeypatch):
        monkeypatch.setattr(settings, "max_grid_cells", 100)
        with pytest.raises(ValueError, match="cell limit"):
            build_grid(20, 20, VirtualContinentSource())

    def test_default_resolution_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "default_resolution_lat", 10)
        monkeypatch.setattr(settings, "default_resolution_lon", 20)

        grid = build_grid(mask_source=VirtualContinentSource())

        assert (grid.rows, grid.cols) == (10, 20)
        assert grid.dist_coast.shape == (10, 20)

    def test_array_source_shape_checked(self):
        source = ArrayMaskSource(np.zeros((4, 4)), np.zeros((4, 4), dtype=bool))
        with pytest.raises(ValueError):
            build_grid(5, 4, source)

    def test_procedural_source_deterministic(self):
        first = ProceduralMapSource(seed=11).generate(19, 36)
        second = ProceduralMapSource(seed=11).generate(19, 36)
        other = ProceduralMapSource(seed=12).generate(19, 36)

        np.testing.assert_array_equal(first[0], second[0])
        np.testing.assert_array_equal(first[1], second[1])
        assert not np.array_equal(first[0], other[0])

    def test_procedural_elevation_matches_mask(self):
        elevation, is_land = ProceduralMapSource(seed=3).generate(37, 72)
        assert np.all(elevation[is_land] >= 0)
        assert np.all(elevation[~is_land] < 0)
        # The polar row of the statistics table has no land
        assert not is_land[0].any()

    def test_virtual_continent_is_centred(self):
        rows, cols = 37, 72
        elevation, is_land = VirtualContinentSource().generate(rows, cols)

        land_frac, _ = earth_stats(float(90.0 - 18 * 5.0))
        assert is_land[18].sum() == int(np.floor(land_frac * cols))
        assert is_land[-1, cols // 2]
        assert not is_land[0].any()
        assert np.all(elevation[~is_land] == -4000.0)

    def test_custom_source_resamples(self):
        src_elev = np.arange(8, dtype=float)
        src_land = src_elev >= 4
        elevation, is_land = CustomMapSource(src_elev, src_land, width=4, height=2).generate(4, 8)

        assert elevation.shape == (4, 8)
        assert elevation[0, 0] == 0
        assert elevation[0, 7] == 3
        assert elevation[3, 0] == 4
        np.testing.assert_array_equal(is_land[2:], True)
        np.testing.assert_array_equal(is_land[:2], False)

    def test_custom_source_rejects_mismatch(self):
        with pytest.raises(ValueError):
            CustomMapSource(np.zeros(8), np.zeros(6, dtype=bool), width=4, height=2).generate(4, 8)

    def test_earth_stats_interpolates(self):
        frac, bins = earth_stats(0.0)
        expected = (np.array([0.127284, 0.055370, 0.028120, 0.026203, 0.005908])
                    + np.array([0.069399, 0.066868, 0.054080, 0.019938, 0.003743])) / 2
        np.testing.assert_allclose(bins, expected)
        assert frac == pytest.approx(expected.sum())


def test_module_imports():
    """Test that the geography module imports correctly."""
    from py_climsim.core import geography
    assert hasattr(geography, 'build_grid')
    assert hasattr(geography, 'compute_coastal_distance')
