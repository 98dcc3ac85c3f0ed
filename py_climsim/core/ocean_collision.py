"""
Smoothed coastline "wall" field for the ocean-current engine.

The field is the coastal distance shifted by a safety buffer: positive inside
land or too close to a coast, negative in open ocean. Its gradient points
towards land and, normalised, is the surface normal used for slide and
impact decisions.
"""

import math
from typing import NamedTuple, Optional, Tuple

import numpy as np
import structlog
from scipy import ndimage

from ..config.params import PhysicsParams
from .grid import PlanetGrid

logger = structlog.get_logger()


class Environment(NamedTuple):
    """Interpolated wall distance and gradient at a continuous position."""

    dist: float
    gx: float
    gy: float


def smooth_field(values: np.ndarray, passes: int) -> np.ndarray:
    """Apply `passes` 3x3 box blurs, clamped in latitude and wrapped in longitude."""
    smoothed = np.asarray(values, dtype=np.float64)
    for _ in range(passes):
        smoothed = ndimage.uniform_filter(smoothed, size=3, mode=("nearest", "wrap"))
    return smoothed


def field_gradient(values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Central differences; x wraps, y is clamped at the poles."""
    rows = values.shape[0]
    gx = (np.roll(values, -1, axis=1) - np.roll(values, 1, axis=1)) * 0.5

    down = np.minimum(np.arange(rows) + 1, rows - 1)
    up = np.maximum(np.arange(rows) - 1, 0)
    gy = (values[down] - values[up]) * 0.5
    return gx, gy


def max_adjacent_difference(values: np.ndarray) -> float:
    """Largest absolute difference between edge-adjacent cells (x wraps)."""
    dx = np.abs(values - np.roll(values, -1, axis=1))
    dy = np.abs(np.diff(values, axis=0))
    return float(max(dx.max(initial=0.0), dy.max(initial=0.0)))


class CollisionField:
    """Wall field with its gradient and bilinear sampling."""

    def __init__(self, values: np.ndarray):
        self.values = np.asarray(values, dtype=np.float64)
        self.rows, self.cols = self.values.shape
        self.grad_x, self.grad_y = field_gradient(self.values)

        # Plain lists keep per-sample lookups cheap inside the agent loop
        self._dist = self.values.tolist()
        self._gx = self.grad_x.tolist()
        self._gy = self.grad_y.tolist()

    @classmethod
    def from_grid(cls, grid: PlanetGrid, physics: Optional[PhysicsParams] = None) -> "CollisionField":
        """
        Build the field from a grid's coastal distance.

        Grids without any coast (all ocean or all land) have infinite
        distances; those are saturated to a finite bound so the gradient and
        interpolation stay finite.
        """
        physics = physics or PhysicsParams()
        grid.require("dist_coast")

        bound = grid.km_per_unit * (grid.rows + grid.cols)
        dist = np.nan_to_num(grid.dist_coast, nan=0.0, posinf=bound, neginf=-bound)

        values = smooth_field(dist + physics.ocean_collision_buffer, physics.ocean_smoothing)
        return cls(values)

    def environment(self, x: float, y: float) -> Environment:
        """Bilinear sample of the field and its gradient at (x=col, y=row)."""
        c = math.floor(x)
        r = math.floor(y)
        fx = x - c
        fy = y - r

        c0 = c % self.cols
        c1 = (c + 1) % self.cols
        r0 = min(max(r, 0), self.rows - 1)
        r1 = min(max(r + 1, 0), self.rows - 1)

        w00 = (1 - fx) * (1 - fy)
        w10 = fx * (1 - fy)
        w01 = (1 - fx) * fy
        w11 = fx * fy

        def sample(arr):
            return arr[r0][c0] * w00 + arr[r0][c1] * w10 + arr[r1][c0] * w01 + arr[r1][c1] * w11

        return Environment(sample(self._dist), sample(self._gx), sample(self._gy))

    def normal(self, x: float, y: float) -> Tuple[float, float, float]:
        """
        Unit normal pointing towards land.

        Returns:
            Tuple of (nx, ny, gradient length); (0, 0, 0) where the gradient vanishes
        """
        env = self.environment(x, y)
        length = math.hypot(env.gx, env.gy)
        if length == 0:
            return 0.0, 0.0, 0.0
        return env.gx / length, env.gy / length, length

    def is_wall(self, col: int, row: int) -> bool:
        row = min(max(row, 0), self.rows - 1)
        return self._dist[row][col % self.cols] > 0


def compute_collision_field(grid: PlanetGrid, physics: Optional[PhysicsParams] = None) -> CollisionField:
    """Build the collision field and store it as the grid's collision mask."""
    physics = physics or PhysicsParams()
    logger.info("Computing collision field", buffer_km=physics.ocean_collision_buffer,
                smoothing=physics.ocean_smoothing)

    field = CollisionField.from_grid(grid, physics)
    grid.write_field("collision_mask", field.values, stage="ocean_collision")

    logger.info("Collision field computed", wall_cells=int((field.values > 0).sum()),
                max_step=round(max_adjacent_difference(field.values), 3))
    return field
