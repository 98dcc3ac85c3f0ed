"""Tests for the ocean collision field."""

import math

import numpy as np
import pytest

from py_climsim.config.params import PhysicsParams, with_overrides
from py_climsim.core.geography import ArrayMaskSource, build_grid
from py_climsim.core.ocean_collision import (
    CollisionField,
    compute_collision_field,
    field_gradient,
    max_adjacent_difference,
    smooth_field,
)


def strip_world(rows=36, cols=72, west=30, east=41):
    """A north-south continent between columns `west` and `east`."""
    is_land = np.zeros((rows, cols), dtype=bool)
    lats = 90.0 - np.arange(rows) * (180.0 / (rows - 1))
    is_land[np.abs(lats) <= 60.0, west:east + 1] = True
    elevation = np.where(is_land, 200.0, -4000.0)
    return build_grid(rows, cols, ArrayMaskSource(elevation, is_land))


class TestCollisionField:
    """Test the smoothed wall field."""

    @pytest.fixture
    def grid(self):
        return strip_world()

    def test_written_to_grid(self, grid):
        field = compute_collision_field(grid, PhysicsParams())
        assert "collision_mask" in grid.written_fields
        np.testing.assert_array_equal(grid.collision_mask, field.values)

    def test_sign_convention(self, grid):
        field = CollisionField.from_grid(grid, PhysicsParams())
        assert field.is_wall(35, 18)
        assert not field.is_wall(10, 18)
        assert field.environment(35.0, 18.0).dist > 0
        assert field.environment(10.0, 18.0).dist < 0

    def test_buffer_shifts_field(self, grid):
        raw = with_overrides(PhysicsParams(), ocean_smoothing=0, ocean_collision_buffer=0.0)
        buffered = with_overrides(PhysicsParams(), ocean_smoothing=0, ocean_collision_buffer=200.0)

        a = CollisionField.from_grid(grid, raw).values
        b = CollisionField.from_grid(grid, buffered).values
        np.testing.assert_allclose(b - a, 200.0)
        np.testing.assert_allclose(a, grid.dist_coast)

    def test_blur_never_sharpens(self, grid):
        previous = math.inf
        for passes in range(5):
            physics = with_overrides(PhysicsParams(), ocean_smoothing=passes)
            values = CollisionField.from_grid(grid, physics).values
            step = max_adjacent_difference(values)
            assert step <= previous + 1e-9
            previous = step

    def test_blur_preserves_constant_field(self):
        values = np.full((6, 8), -250.0)
        np.testing.assert_allclose(smooth_field(values, 3), values)

    def test_blur_wraps_longitude(self):
        values = np.zeros((5, 8))
        values[:, 0] = 9.0
        smoothed = smooth_field(values, 1)
        # The spike spreads to both seam neighbours
        np.testing.assert_allclose(smoothed[2, 7], 3.0, atol=1e-12)
        np.testing.assert_allclose(smoothed[2, 1], 3.0, atol=1e-12)
        np.testing.assert_allclose(smoothed[2, 4], 0.0, atol=1e-12)

    def test_gradient_points_to_land(self, grid):
        field = CollisionField.from_grid(grid, PhysicsParams())
        west_coast = field.environment(28.0, 18.0)
        east_coast = field.environment(43.0, 18.0)

        assert west_coast.gx > 0
        assert east_coast.gx < 0

        nx, ny, length = field.normal(28.0, 18.0)
        assert length > 0
        assert math.hypot(nx, ny) == pytest.approx(1.0)
        assert nx > 0.9

    def test_gradient_central_differences(self):
        values = np.arange(20, dtype=float).reshape(4, 5)
        gx, gy = field_gradient(values)

        assert gx[1, 2] == pytest.approx(1.0)
        assert gy[1, 2] == pytest.approx(5.0)
        # Clamped at the poles, wrapped at the seam
        assert gy[0, 2] == pytest.approx(2.5)
        assert gx[1, 0] == pytest.approx((1.0 - 4.0) * 0.5)

    def test_bilinear_interpolation(self):
        values = np.array([[0.0, 10.0, 20.0], [30.0, 40.0, 50.0], [60.0, 70.0, 80.0]])
        field = CollisionField(values)

        assert field.environment(1.0, 1.0).dist == pytest.approx(40.0)
        assert field.environment(0.5, 0.5).dist == pytest.approx(20.0)
        assert field.environment(0.25, 1.0).dist == pytest.approx(32.5)

    def test_interpolation_wraps(self, grid):
        field = CollisionField.from_grid(grid, PhysicsParams())
        here = field.environment(3.3, 17.6)
        wrapped = field.environment(3.3 + grid.cols, 17.6)
        behind = field.environment(3.3 - grid.cols, 17.6)

        assert wrapped.dist == pytest.approx(here.dist)
        assert behind.gx == pytest.approx(here.gx)

    def test_rows_clamped(self, grid):
        field = CollisionField.from_grid(grid, PhysicsParams())
        assert field.environment(5.0, -3.0).dist == pytest.approx(field.values[0, 5])
        assert field.environment(5.0, grid.rows + 2.0).dist == pytest.approx(field.values[-1, 5])

    def test_all_ocean_is_finite(self):
        source = ArrayMaskSource(np.full((12, 24), -4000.0), np.zeros((12, 24), dtype=bool))
        grid = build_grid(12, 24, source)
        field = CollisionField.from_grid(grid, PhysicsParams())

        assert np.all(np.isfinite(field.values))
        assert np.all(field.values < 0)
        nx, ny, length = field.normal(4.5, 6.5)
        assert (nx, ny, length) == (0.0, 0.0, 0.0)

    def test_requires_coastal_distance(self, grid):
        grid.written_fields.discard("dist_coast")
        with pytest.raises(ValueError):
            CollisionField.from_grid(grid)

    def test_max_adjacent_difference(self):
        values = np.array([[0.0, 1.0, 3.0], [0.0, 1.0, 3.0]])
        # Wrap pair (3, 0) dominates
        assert max_adjacent_difference(values) == pytest.approx(3.0)


def test_module_imports():
    """Test that the collision module imports correctly."""
    from py_climsim.core import ocean_collision
    assert hasattr(ocean_collision, 'CollisionField')
    assert hasattr(ocean_collision, 'compute_collision_field')
