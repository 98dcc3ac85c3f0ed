"""Tests for the planet grid data structure."""

import numpy as np
import pytest

from py_climsim.core.grid import MONTHS, SEA_LEVEL_PRESSURE, GridOwnershipError, PlanetGrid


class TestPlanetGrid:
    """Test grid construction, coordinates and field ownership."""

    @pytest.fixture
    def grid(self):
        rows, cols = 19, 36
        return PlanetGrid(
            rows=rows,
            cols=cols,
            elevation=np.full(rows * cols, -4000.0),
            is_land=np.zeros(rows * cols, dtype=bool),
        )

    def test_flat_arrays_are_reshaped(self, grid):
        assert grid.elevation.shape == (19, 36)
        assert grid.is_land.shape == (19, 36)
        assert grid.n_cells == 19 * 36

    def test_rejects_degenerate_dimensions(self):
        with pytest.raises(ValueError):
            PlanetGrid(rows=1, cols=10, elevation=np.zeros(10), is_land=np.zeros(10, dtype=bool))
        with pytest.raises(ValueError):
            PlanetGrid(rows=10, cols=0, elevation=np.zeros(0), is_land=np.zeros(0, dtype=bool))

    def test_rejects_mismatched_arrays(self):
        with pytest.raises(ValueError):
            PlanetGrid(rows=4, cols=4, elevation=np.zeros(15), is_land=np.zeros(16, dtype=bool))

    def test_latitude_row_conversion(self, grid):
        assert grid.lat_from_row(0) == pytest.approx(90.0)
        assert grid.lat_from_row(grid.rows - 1) == pytest.approx(-90.0)
        assert grid.lat_from_row(9) == pytest.approx(0.0)
        assert grid.row_from_lat(grid.lat_from_row(4.25)) == pytest.approx(4.25)
        assert grid.lats[0] == pytest.approx(90.0)
        assert grid.lats[-1] == pytest.approx(-90.0)

    def test_longitude_wraps(self, grid):
        assert grid.lon_from_col(0) == pytest.approx(-180.0)
        assert grid.lon_from_col(grid.cols) == pytest.approx(-180.0)
        assert grid.lon_from_col(-1) == pytest.approx(180.0 - grid.lon_step_deg)
        assert grid.wrap_col(-1) == grid.cols - 1
        assert grid.clamp_row(-5) == 0
        assert grid.clamp_row(100) == grid.rows - 1

    def test_monthly_fields_initialised(self, grid):
        assert grid.wind_u.shape == (MONTHS, 19, 36)
        assert np.all(grid.pressure == SEA_LEVEL_PRESSURE)
        assert np.all(grid.wind_v == 0)

    def test_write_field_by_owner(self, grid):
        grid.write_field("dist_coast", np.zeros((19, 36)), stage="geography")
        assert "dist_coast" in grid.written_fields
        grid.require("dist_coast")

    def test_write_field_by_other_stage_fails(self, grid):
        with pytest.raises(GridOwnershipError):
            grid.write_field("dist_coast", np.zeros((19, 36)), stage="itcz")
        with pytest.raises(GridOwnershipError):
            grid.write_field("collision_mask", np.zeros((19, 36)), stage="wind_belts")

    def test_unknown_field_fails(self, grid):
        with pytest.raises(GridOwnershipError):
            grid.write_field("elevation", np.zeros((19, 36)), stage="geography")

    def test_write_field_shape_checked(self, grid):
        with pytest.raises(ValueError):
            grid.write_field("heat_map_val", np.zeros((36, 19)), stage="itcz")
        with pytest.raises(ValueError):
            grid.write_field("wind_u", np.zeros((19, 36)), stage="wind_belts")

    def test_require_missing_field(self, grid):
        with pytest.raises(ValueError, match="heat_map_val"):
            grid.require("heat_map_val")

    def test_reset_monthly_fields(self, grid):
        grid.write_field("pressure", np.zeros((MONTHS, 19, 36)), stage="wind_belts")
        grid.reset_monthly_fields()
        assert np.all(grid.pressure == SEA_LEVEL_PRESSURE)
        assert "pressure" not in grid.written_fields

    def test_cell_snapshot(self, grid):
        grid.write_field("dist_coast", np.full((19, 36), -500.0), stage="geography")
        cell = grid.cell(9, 36 + 3, month=6)

        assert cell.lat == pytest.approx(0.0)
        assert cell.lon == pytest.approx(grid.lons[3])
        assert cell.is_land is False
        assert cell.dist_coast == pytest.approx(-500.0)
        assert np.isnan(cell.heat_map_val)
        assert cell.pressure == pytest.approx(SEA_LEVEL_PRESSURE)


def test_module_imports():
    """Test that the grid module imports correctly."""
    from py_climsim.core import grid
    assert hasattr(grid, 'PlanetGrid')
    assert hasattr(grid, 'FIELD_OWNERS')
