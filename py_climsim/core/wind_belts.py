"""
Zonal wind, meridional convergence and pressure belts.

Band boundaries come from the circulation cell count; the tropical band uses
a trade-wind profile measured from the monthly ITCZ line, the extra-tropical
bands alternate westerlies and easterlies.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import structlog

from ..config.params import OceanEcGapMode, PhysicsParams, PlanetParams, TradePeakOffsetMode
from .grid import MONTHS, PlanetGrid
from .itcz import ITCZResult

logger = structlog.get_logger()


@dataclass
class WindBeltsResult:
    """Global band layout plus the parameters handed to the ocean stage."""

    hadley_edge_deg: float
    cell_boundaries_deg: List[float]  # ascending, last element is 90
    doldrums_half_width_deg: float
    trade_peak_offset_deg: float
    ocean_ec_lat_gap_derived: float
    model_level: str = "trade"
    debug: Dict[str, Any] = field(default_factory=dict)


def compute_cell_boundaries(cell_count: int, hadley_width: float, physics: PhysicsParams) -> List[float]:
    """
    Band-boundary latitudes for one hemisphere.

    The first boundary is the scaled Hadley edge; the remaining span up to
    the pole is split with weights i**jet_spacing_exp so the belts widen
    poleward. The last boundary is always exactly 90 and the list is
    strictly increasing.
    """
    if cell_count < 1:
        raise ValueError(f"cell_count must be >= 1, got {cell_count}")

    first = min(hadley_width * physics.wind_hadley_width_scale, 90.0)
    if first >= 90.0:
        # The tropical cell already reaches the pole
        return [90.0]
    boundaries = [first]

    if cell_count > 1:
        remaining = 90.0 - first
        weights = [i ** physics.wind_jet_spacing_exp for i in range(1, cell_count)]
        weight_sum = sum(weights)

        current = first
        for weight in weights[:-1]:
            current += weight / weight_sum * remaining
            boundaries.append(current)

    if boundaries[-1] < 90.0:
        boundaries.append(90.0)
    else:
        boundaries[-1] = 90.0
    return boundaries


def trade_peak_offset(hadley_edge: float, physics: PhysicsParams) -> float:
    if physics.wind_trade_peak_offset_mode == TradePeakOffsetMode.ABS:
        return physics.wind_trade_peak_offset_deg
    return hadley_edge * physics.wind_trade_peak_offset_frac


def derive_ec_gap(trade_offset: float, physics: PhysicsParams) -> Tuple[float, Optional[str]]:
    """
    Latitude gap between the ITCZ and the Equatorial Current target.

    Returns:
        Tuple of (gap in degrees, clamp note or None)
    """
    if physics.wind_ocean_ec_gap_mode == OceanEcGapMode.MANUAL:
        return physics.ocean_ec_lat_gap, None

    gap = min(physics.wind_ocean_ec_gap_clamp_max, max(physics.wind_ocean_ec_gap_clamp_min, trade_offset))
    note = None
    if gap != trade_offset:
        note = f"trade peak offset {trade_offset:.2f} clamped to {gap:.2f}"
    return gap, note


def belt_indices(abs_lats: np.ndarray, boundaries: List[float]) -> np.ndarray:
    """Index of the first boundary at or above each |lat|, capped at the last belt."""
    idx = np.searchsorted(np.asarray(boundaries), abs_lats, side="left")
    return np.minimum(idx, len(boundaries) - 1)


class WindBelts:
    """Fills the monthly wind_u, wind_v and pressure fields of a grid."""

    def __init__(
        self,
        grid: PlanetGrid,
        itcz: ITCZResult,
        planet: Optional[PlanetParams] = None,
        physics: Optional[PhysicsParams] = None,
    ):
        self.grid = grid
        self.itcz = itcz
        self.planet = planet or PlanetParams()
        self.physics = physics or PhysicsParams()
        self.rotation_sign = -1.0 if self.planet.is_retrograde else 1.0

    def pressure(self, lats: np.ndarray, dist_itcz: np.ndarray, boundaries: List[float]) -> np.ndarray:
        """ITCZ low plus alternating highs and lows at each non-polar boundary."""
        phys = self.physics
        width = phys.wind_pressure_belt_width
        amplitude = phys.wind_pressure_anomaly_max

        p_itcz = -amplitude * np.exp(-((np.abs(dist_itcz) / width) ** 2))

        p_belts = np.zeros_like(lats)
        hemisphere = np.where(lats >= 0, 1.0, -1.0)
        for i, b in enumerate(boundaries[:-1]):
            sign = 1.0 if i % 2 == 0 else -1.0
            d = lats - hemisphere * b
            p_belts += sign * amplitude * phys.wind_pressure_belt_factor * np.exp(-((d / width) ** 2))

        return phys.wind_base_pressure + p_itcz + p_belts[:, None]

    def zonal_wind(self, lats: np.ndarray, dist_itcz: np.ndarray, boundaries: List[float],
                   trade_offset: float) -> np.ndarray:
        phys = self.physics
        abs_lats = np.abs(lats)

        # Tropical band: trade winds peaking trade_offset degrees from the ITCZ
        x = np.abs(dist_itcz) / max(phys.wind_trade_peak_offset_floor, trade_offset)
        trade = phys.wind_base_speed_easterly * x * np.exp(1.0 - x)
        u_tropical = -np.minimum(trade, phys.wind_tropical_u_cap) * self.rotation_sign

        # Extra-tropical bands: odd index westerly, even index easterly
        idx = belt_indices(abs_lats, boundaries)
        sign = np.where(idx % 2 == 1, 1.0, -1.0)
        base = np.where(sign > 0, phys.wind_base_speed_westerly, phys.wind_base_speed_easterly)
        rot_factor = (phys.cell_ref_rotation / self.planet.rotation_period) ** phys.wind_speed_rotation_exp
        u_extra = sign * base * rot_factor * self.rotation_sign

        tropical = (abs_lats <= boundaries[0])[:, None]
        return np.where(tropical, u_tropical, u_extra[:, None])

    def meridional_wind(self, dist_itcz: np.ndarray) -> np.ndarray:
        phys = self.physics
        width = phys.wind_itcz_convergence_width
        v = -np.sin(dist_itcz / width * math.pi) * phys.wind_itcz_convergence_speed
        return np.where(np.abs(dist_itcz) < width, v, 0.0)

    def compute(self) -> WindBeltsResult:
        grid = self.grid
        phys = self.physics

        logger.info("Computing wind belts", cell_count=self.itcz.cell_count,
                    retrograde=self.planet.is_retrograde)

        boundaries = compute_cell_boundaries(self.itcz.cell_count, self.itcz.hadley_width_deg, phys)
        trade_offset = trade_peak_offset(boundaries[0], phys)

        shape = (MONTHS, grid.rows, grid.cols)
        wind_u = np.zeros(shape)
        wind_v = np.zeros(shape)
        pressure = np.zeros(shape)

        lats = grid.lats
        for m in range(MONTHS):
            dist_itcz = lats[:, None] - self.itcz.itcz_lines[m][None, :]
            wind_u[m] = self.zonal_wind(lats, dist_itcz, boundaries, trade_offset)
            wind_v[m] = self.meridional_wind(dist_itcz)
            pressure[m] = self.pressure(lats, dist_itcz, boundaries)

        grid.write_field("wind_u", wind_u, stage="wind_belts")
        grid.write_field("wind_v", wind_v, stage="wind_belts")
        grid.write_field("pressure", pressure, stage="wind_belts")

        gap, clamp_note = derive_ec_gap(trade_offset, phys)

        debug: Dict[str, Any] = {
            "params_used": {
                "rotation_sign": self.rotation_sign,
                "cell_count": self.itcz.cell_count,
                "hadley_width": boundaries[0],
                "derived_trade_offset": trade_offset,
            }
        }
        if clamp_note:
            debug["clamp_info"] = clamp_note

        logger.info("Wind belts computed", boundaries=[round(b, 2) for b in boundaries],
                    trade_offset=trade_offset, ec_gap=gap)

        return WindBeltsResult(
            hadley_edge_deg=boundaries[0],
            cell_boundaries_deg=boundaries,
            doldrums_half_width_deg=phys.wind_doldrums_width_deg,
            trade_peak_offset_deg=trade_offset,
            ocean_ec_lat_gap_derived=gap,
            debug=debug,
        )


def compute_wind_belts(
    grid: PlanetGrid,
    itcz_result: ITCZResult,
    planet: Optional[PlanetParams] = None,
    physics: Optional[PhysicsParams] = None,
) -> WindBeltsResult:
    """Populate monthly wind and pressure on the grid and return the band layout."""
    return WindBelts(grid, itcz_result, planet, physics).compute()
