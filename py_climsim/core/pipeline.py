"""
Sequential simulation pipeline: ITCZ -> wind belts -> ocean currents.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import structlog

from ..config.params import AtmosphereParams, PhysicsParams, PlanetParams
from .grid import PlanetGrid
from .itcz import ITCZResult, solve_itcz
from .ocean_currents import OceanCurrentsResult, compute_ocean_currents
from .wind_belts import WindBeltsResult, compute_wind_belts

logger = structlog.get_logger()

ProgressCallback = Callable[[int, str, str], None]


@dataclass
class SimulationResult:
    grid: PlanetGrid
    itcz: ITCZResult
    wind: WindBeltsResult
    ocean: OceanCurrentsResult
    cell_count: int
    hadley_width_deg: float


def run_simulation(
    grid: PlanetGrid,
    planet: Optional[PlanetParams] = None,
    atmosphere: Optional[AtmosphereParams] = None,
    physics: Optional[PhysicsParams] = None,
    target_months: Optional[Sequence[int]] = None,
    debug_month: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> SimulationResult:
    """
    Run every stage on a grid built by build_grid.

    Args:
        grid: PlanetGrid with dist_coast populated
        planet: Planet parameters
        atmosphere: Atmosphere parameters
        physics: Tuning constants
        target_months: Months for the ocean pass
        debug_month: Single month to record ocean debug frames for
        on_progress: Called as on_progress(percent, label, step_id) between stages

    Returns:
        SimulationResult with every stage's output
    """
    planet = planet or PlanetParams()
    atmosphere = atmosphere or AtmosphereParams()
    physics = physics or PhysicsParams()

    def report(percent: int, label: str, step_id: str):
        logger.info("Simulation progress", percent=percent, stage=step_id)
        if on_progress is not None:
            on_progress(percent, label, step_id)

    grid.require("dist_coast")
    grid.reset_monthly_fields()

    report(10, "Solving ITCZ", "itcz")
    itcz = solve_itcz(grid, planet, atmosphere, physics)

    report(40, "Computing wind belts", "wind")
    wind = compute_wind_belts(grid, itcz, planet, physics)

    report(60, "Tracing ocean currents", "ocean")
    ocean = compute_ocean_currents(
        grid,
        itcz.itcz_lines,
        physics,
        target_months=target_months,
        debug_month=debug_month,
        ec_lat_gap=wind.ocean_ec_lat_gap_derived,
    )

    report(100, "Done", "done")

    return SimulationResult(
        grid=grid,
        itcz=itcz,
        wind=wind,
        ocean=ocean,
        cell_count=itcz.cell_count,
        hadley_width_deg=itcz.hadley_width_deg,
    )
