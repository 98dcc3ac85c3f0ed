"""Tests for the full simulation pipeline."""

import numpy as np
import pytest

from py_climsim.config.params import PhysicsParams, with_overrides
from py_climsim.core.geography import VirtualContinentSource, build_grid
from py_climsim.core.grid import MONTHS, PlanetGrid
from py_climsim.core.pipeline import run_simulation


class TestPipeline:
    """Test the stage sequence."""

    @pytest.fixture
    def grid(self):
        return build_grid(37, 72, VirtualContinentSource())

    @pytest.fixture
    def physics(self):
        return with_overrides(PhysicsParams(), ocean_streamline_steps=120)

    def test_stages_run_in_order(self, grid, physics):
        progress = []
        result = run_simulation(grid, physics=physics, target_months=[0],
                                on_progress=lambda pct, label, step: progress.append((pct, step)))

        assert progress == [(10, "itcz"), (40, "wind"), (60, "ocean"), (100, "done")]
        assert result.cell_count == 3
        assert result.hadley_width_deg == pytest.approx(30.0)
        assert result.grid is grid

    def test_fields_populated(self, grid, physics):
        result = run_simulation(grid, physics=physics, target_months=[0])

        for name in ("heat_map_val", "wind_u", "wind_v", "pressure", "collision_mask"):
            assert name in grid.written_fields
        assert result.itcz.itcz_lines.shape == (MONTHS, 72)
        assert len(result.ocean.streamlines) == MONTHS
        assert [s.phase for s in result.ocean.phase_stats] == ["ECC", "EC"]

    def test_rerun_resets_monthly_fields(self, grid, physics):
        run_simulation(grid, physics=physics, target_months=[0])
        first_u = grid.wind_u.copy()
        run_simulation(grid, physics=physics, target_months=[0])
        np.testing.assert_array_equal(grid.wind_u, first_u)

    def test_debug_month(self, grid, physics):
        result = run_simulation(grid, physics=physics, debug_month=6)
        assert result.ocean.debug is not None
        np.testing.assert_allclose(result.ocean.debug.itcz_line, result.itcz.itcz_lines[6])

    def test_requires_coastal_distance(self):
        grid = PlanetGrid(rows=10, cols=20, elevation=np.zeros(200), is_land=np.zeros(200, dtype=bool))
        with pytest.raises(ValueError):
            run_simulation(grid)


def test_module_imports():
    """Test that the pipeline module imports correctly."""
    from py_climsim.core import pipeline
    assert hasattr(pipeline, 'run_simulation')
    assert hasattr(pipeline, 'SimulationResult')
