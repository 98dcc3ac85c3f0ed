"""
ITCZ (Inter-Tropical Convergence Zone) latitude solver.

This module implements:
- Circulation cell count and Hadley cell width estimate
- The heat-influence map (distance to coast with an altitude penalty)
- Planetary inertia coefficients for sea/land movement ratios
- Per-longitude hemisphere solves and the 12 monthly ITCZ lines
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import structlog

from ..config.params import AtmosphereParams, PhysicsParams, PlanetParams
from .grid import MONTHS, PlanetGrid

logger = structlog.get_logger()


@dataclass
class ITCZResult:
    """Monthly ITCZ latitudes and the circulation parameters behind them."""

    itcz_lines: np.ndarray  # (12, cols) latitude per month per column
    cell_count: int  # circulation cells per hemisphere
    hadley_width_deg: float
    lat_north: np.ndarray  # (cols,) July extreme
    lat_south: np.ndarray  # (cols,) January extreme
    inertia: float
    k_sea: float
    k_land: float
    kernel_deg: float
    kernel_cols: int


def estimate_cell_count(planet: PlanetParams, physics: PhysicsParams) -> Tuple[int, float]:
    """
    Estimate circulation cells per hemisphere from size and spin.

    N scales with radius * sqrt(rotation rate), anchored to three cells on
    the reference planet.

    Returns:
        Tuple of (cell count, Hadley cell width in degrees)
    """
    radius_ratio = planet.radius / physics.cell_ref_radius
    rotation_ratio = physics.cell_ref_rotation / planet.rotation_period
    estimate = physics.cell_ref_count * radius_ratio * math.sqrt(rotation_ratio)

    cell_count = int(round(min(max(estimate, 1.0), float(physics.cell_max_count))))
    return cell_count, 90.0 / cell_count


def compute_heat_map(grid: PlanetGrid, physics: PhysicsParams) -> np.ndarray:
    """
    Heat-influence value per cell in [-1, 1].

    S = clamp(dist_coast / saturation, -1, 1); land cells are damped by
    P = max(0, 1 - altitude_km / altitude_limit).
    """
    grid.require("dist_coast")
    s_dist = np.clip(grid.dist_coast / physics.itcz_saturation_dist, -1.0, 1.0)

    altitude_km = grid.elevation / 1000.0
    p_alt = np.where(
        grid.is_land,
        np.maximum(0.0, 1.0 - altitude_km / physics.itcz_altitude_limit),
        1.0,
    )
    return s_dist * p_alt


def solve_hemisphere(
    heat_map: np.ndarray,
    lats: np.ndarray,
    obliquity: float,
    k_sea: float,
    k_land: float,
    kernel_cols: int,
    north: bool,
) -> np.ndarray:
    """
    ITCZ latitude magnitude per column for one hemisphere's summer extreme.

    Averages the heat map over rows in [0, obliquity] of the hemisphere,
    weighted by cos(lat), and over a circular window of +/- kernel_cols
    columns.

    Returns:
        Array (cols,) of non-negative latitude shifts
    """
    if north:
        band = (lats >= 0) & (lats <= obliquity)
    else:
        band = (lats <= 0) & (lats >= -obliquity)

    weights = np.cos(np.radians(lats[band]))
    column_sums = (heat_map[band] * weights[:, None]).sum(axis=0)

    window_sum = np.zeros_like(column_sums)
    for dc in range(-kernel_cols, kernel_cols + 1):
        window_sum += np.roll(column_sums, -dc)

    weight_total = weights.sum() * (2 * kernel_cols + 1)
    if weight_total == 0:
        return np.zeros_like(column_sums)

    l_eff = window_sum / weight_total
    t = (l_eff + 1.0) / 2.0
    shift_ratio = (1.0 - t) * k_sea + t * k_land
    return obliquity * shift_ratio


def monthly_lines(lat_north: np.ndarray, lat_south: np.ndarray) -> np.ndarray:
    """
    Blend the two extremes into 12 monthly lines.

    Month 0 is the full southern extreme and month 6 the full northern one;
    the phase follows -cos(month * pi / 6).
    """
    lines = np.zeros((MONTHS, lat_north.size))
    for m in range(MONTHS):
        phase = -math.cos(m * math.pi / 6)
        t = (phase + 1) / 2
        lines[m] = lat_south * (1 - t) + lat_north * t
    return lines


class ITCZSolver:
    """Computes the convergence-zone latitude for each month and longitude."""

    def __init__(
        self,
        grid: PlanetGrid,
        planet: Optional[PlanetParams] = None,
        atmosphere: Optional[AtmosphereParams] = None,
        physics: Optional[PhysicsParams] = None,
    ):
        """
        Initialize the ITCZ solver.

        Args:
            grid: PlanetGrid with dist_coast populated
            planet: Planet parameters
            atmosphere: Atmosphere parameters
            physics: Tuning constants
        """
        self.grid = grid
        self.planet = planet or PlanetParams()
        self.atmosphere = atmosphere or AtmosphereParams()
        self.physics = physics or PhysicsParams()

    def planetary_coefficients(self) -> Tuple[float, float, float]:
        """
        Inertia coefficient M and the sea/land movement ratios.

        Returns:
            Tuple of (M, k_sea, k_land)
        """
        phys = self.physics
        pressure_hpa = self.atmosphere.surface_pressure * 1000.0

        term_year = (self.planet.orbital_period / phys.itcz_ref_year) ** phys.itcz_inertia_exp
        term_pressure = (phys.itcz_ref_pressure / pressure_hpa) ** phys.itcz_inertia_exp
        inertia = min(max(term_year * term_pressure, phys.itcz_inertia_min), phys.itcz_inertia_max)

        k_sea = min(phys.itcz_base_sea_ratio * inertia, phys.itcz_sea_ratio_cap)
        k_land = min(phys.itcz_base_land_ratio * inertia, phys.itcz_land_ratio_cap)
        return inertia, k_sea, k_land

    def kernel_size(self) -> Tuple[float, int]:
        """Smoothing radius in degrees and in columns."""
        phys = self.physics
        kernel_deg = min(
            phys.itcz_kernel_angle * (self.planet.rotation_period / phys.itcz_ref_day),
            phys.itcz_kernel_max,
        )
        return kernel_deg, int(math.ceil(kernel_deg / self.grid.lon_step_deg))

    def solve(self) -> ITCZResult:
        grid = self.grid
        obliquity = self.planet.obliquity

        logger.info("Solving ITCZ", rows=grid.rows, cols=grid.cols, obliquity=obliquity)

        cell_count, hadley_width = estimate_cell_count(self.planet, self.physics)

        heat_map = compute_heat_map(grid, self.physics)
        grid.write_field("heat_map_val", heat_map, stage="itcz")

        inertia, k_sea, k_land = self.planetary_coefficients()
        kernel_deg, kernel_cols = self.kernel_size()

        lat_north = solve_hemisphere(heat_map, grid.lats, obliquity, k_sea, k_land, kernel_cols, north=True)
        lat_south = -solve_hemisphere(heat_map, grid.lats, obliquity, k_sea, k_land, kernel_cols, north=False)

        lines = monthly_lines(lat_north, lat_south)

        logger.info("ITCZ solved", cell_count=cell_count, hadley_width=hadley_width,
                    inertia=round(inertia, 4), kernel_cols=kernel_cols,
                    north_mean=float(lat_north.mean()), south_mean=float(lat_south.mean()))

        return ITCZResult(
            itcz_lines=lines,
            cell_count=cell_count,
            hadley_width_deg=hadley_width,
            lat_north=lat_north,
            lat_south=lat_south,
            inertia=inertia,
            k_sea=k_sea,
            k_land=k_land,
            kernel_deg=kernel_deg,
            kernel_cols=kernel_cols,
        )


def solve_itcz(
    grid: PlanetGrid,
    planet: Optional[PlanetParams] = None,
    atmosphere: Optional[AtmosphereParams] = None,
    physics: Optional[PhysicsParams] = None,
) -> ITCZResult:
    """Compute the heat map and the monthly ITCZ lines for a grid."""
    return ITCZSolver(grid, planet, atmosphere, physics).solve()
