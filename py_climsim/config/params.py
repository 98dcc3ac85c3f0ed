"""
Planet, atmosphere and physics-tuning parameter records.

Every tunable used by the simulation pipeline lives here as a named field
with its default, so no algorithm hides a magic number.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List


class TradePeakOffsetMode(str, Enum):
    """How the trade-wind peak distance from the ITCZ is derived."""

    ABS = "abs"
    HADLEY_FRAC = "hadleyFrac"


class OceanEcGapMode(str, Enum):
    """Source of the ITCZ-to-Equatorial-Current latitude gap."""

    MANUAL = "manual"
    DERIVED_FROM_TRADE_PEAK = "derivedFromTradePeak"


@dataclass
class PlanetParams:
    """Star, orbit and body parameters."""

    radius: float = 6371.0  # km
    gravity: float = 9.81  # m/s^2
    rotation_period: float = 24.0  # hours
    obliquity: float = 23.44  # degrees
    eccentricity: float = 0.0167  # 0 to 1
    semi_major_axis: float = 1.0  # AU
    solar_luminosity: float = 1.0  # relative to the Sun
    perihelion_angle: float = 283.0  # degrees from vernal equinox
    is_retrograde: bool = False  # rotation direction
    orbital_period: float = 8760.0  # hours (year length)


@dataclass
class AtmosphereParams:
    """Atmosphere and ocean bulk parameters."""

    surface_pressure: float = 1.0  # bar
    greenhouse_factor: float = 1.0
    albedo_land: float = 0.28
    albedo_ocean: float = 0.06
    albedo_ice: float = 0.55
    lapse_rate: float = 6.5  # K/km
    heat_capacity_ocean: float = 1.0  # relative factor
    meridional_transport: float = 35.0  # heat diffusion efficiency


@dataclass
class PhysicsParams:
    """Heuristic tuning constants for the ITCZ, wind and ocean stages."""

    # Heat map
    itcz_saturation_dist: float = 2000.0  # km, distance at which S saturates
    itcz_altitude_limit: float = 5.0  # km, altitude where land heating vanishes

    # Planetary coefficients
    itcz_ref_pressure: float = 1013.0  # hPa
    itcz_ref_year: float = 8760.0  # hours
    itcz_ref_day: float = 24.0  # hours
    itcz_inertia_exp: float = 0.5
    itcz_inertia_min: float = 0.05  # lower clamp of the inertia coefficient M
    itcz_inertia_max: float = 1.5  # upper clamp of M

    # Movement ratios
    itcz_base_sea_ratio: float = 0.2
    itcz_base_land_ratio: float = 0.9
    itcz_sea_ratio_cap: float = 0.8
    itcz_land_ratio_cap: float = 1.0

    # Smoothing kernel
    itcz_kernel_angle: float = 15.0  # degrees at the reference day length
    itcz_kernel_max: float = 60.0  # degrees

    # Circulation cell estimate
    cell_ref_radius: float = 6371.0  # km
    cell_ref_rotation: float = 24.0  # hours
    cell_ref_count: float = 3.0  # cells per hemisphere on the reference planet
    cell_max_count: int = 15

    # Wind belts
    wind_hadley_width_scale: float = 1.0
    wind_jet_spacing_exp: float = 1.2
    wind_base_speed_easterly: float = 5.0  # m/s
    wind_base_speed_westerly: float = 8.0  # m/s
    wind_speed_rotation_exp: float = 0.5
    wind_itcz_convergence_speed: float = 2.0  # m/s
    wind_itcz_convergence_width: float = 10.0  # degrees
    wind_base_pressure: float = 1013.0  # hPa
    wind_pressure_anomaly_max: float = 20.0  # hPa
    wind_pressure_belt_factor: float = 0.8  # belt anomaly relative to the ITCZ low
    wind_pressure_belt_width: float = 8.0  # degrees
    wind_doldrums_width_deg: float = 6.0
    wind_trade_peak_offset_mode: TradePeakOffsetMode = TradePeakOffsetMode.ABS
    wind_trade_peak_offset_deg: float = 8.0
    wind_trade_peak_offset_frac: float = 0.25
    wind_trade_peak_offset_floor: float = 0.1  # degrees, guards the profile divisor
    wind_tropical_u_cap: float = 10.0  # m/s
    wind_ocean_ec_gap_mode: OceanEcGapMode = OceanEcGapMode.MANUAL
    wind_ocean_ec_gap_clamp_min: float = 2.0  # degrees
    wind_ocean_ec_gap_clamp_max: float = 20.0  # degrees

    # Ocean currents: run control
    ocean_streamline_steps: int = 500  # hard cap on macro steps per phase
    ocean_sub_steps: int = 10  # integration sub-steps per macro step
    ocean_macro_dt: float = 0.5  # time units per macro step
    ocean_agent_strength: float = 2.0  # streamline strength tag

    # Ocean currents: forces
    ocean_base_speed: float = 1.0  # grid cells per time unit
    ocean_ecc_drive_factor: float = 0.05  # eastward drive = base_speed * factor
    ocean_pattern_force: float = 0.1  # ECC spring constant towards the ITCZ row
    ocean_ec_pattern_force: float = 0.15  # EC proportional gain
    ocean_ec_damping: float = 0.2  # EC derivative gain
    ocean_ec_lat_gap: float = 7.5  # degrees between ITCZ and EC target
    ocean_inertia_x: float = 0.05  # first-order lag of EC westward speed
    ocean_repulse_strength: float = 0.5  # coast repulsion gain
    ocean_deflect_lat: float = 15.0  # degrees of allowed deviation from target
    ocean_min_speed: float = 1e-6  # below this an agent has zero velocity

    # Ocean currents: speeds
    ocean_spawn_speed_multiplier: float = 0.8
    ocean_crawl_speed_multiplier: float = 1.2
    ocean_max_speed_multiplier: float = 3.0

    # Ocean currents: spawning
    ocean_spawn_depth: float = 20.0  # km, ECC spawns only where dist < -depth
    ocean_gap_fill_divisor: int = 64  # ECC baseline spawn every cols/divisor columns
    ocean_spawn_offset: float = 15.0  # grid cells west of the safe point
    ocean_safe_spawn_depth: float = 30.0  # km of open ocean required for EC spawn
    ocean_safe_spawn_search: int = 60  # cells searched westward
    ocean_safe_spawn_fallback: float = 10.0  # extra cells when no safe point found

    # Ocean currents: collision
    ocean_collision_buffer: float = 200.0  # km
    ocean_smoothing: int = 2  # box-blur passes
    ocean_impact_threshold: float = 0.05  # minimum velocity . normal for impact
    ocean_bisection_iterations: int = 4
    ocean_head_on_normal_x: float = -0.2  # ECC head-on when normal x exceeds this
    ocean_arrival_normal_x: float = -0.2  # EC arrival when normal x is below this
    ocean_slide_epsilon: float = 0.1  # cells to back off the wall after a slide
    ocean_slide_friction: float = 0.9  # EC velocity kept after sliding
    ocean_push_out: float = 0.1  # cells pushed along the normal after EC slide
    ocean_recovery_push: float = 0.1  # extra cells when escaping from inside land
    ocean_max_recovery_push: float = 1.0  # cap on a single recovery displacement
    ocean_min_gradient: float = 1e-4  # gradient length treated as degenerate

    # Ocean currents: crawl mode
    ocean_coast_sense_dist: float = 60.0  # km, near-coast radius
    ocean_crawl_lat_threshold: float = 2.0  # degrees away from target to crawl
    ocean_crawl_trap_normal_x: float = -0.2  # land roughly eastward above this
    ocean_crawl_accel: float = 0.2
    ocean_crawl_wall_push: float = 0.1
    ocean_crawl_fallback_gain: float = 0.05

    # Ocean currents: lifecycle
    ocean_stagnation_factor: float = 0.05  # of macro dt
    ocean_ecc_stagnation_steps: int = 20
    ocean_ec_stagnation_steps: int = 30
    ocean_ecc_polar_exit: float = 88.0  # degrees
    ocean_ec_polar_exit: float = 85.0  # degrees
    ocean_prune_min_points: int = 5  # pruning starts once the path is longer
    ocean_prune_similarity: float = 0.95
    ocean_min_streamline_points: int = 6
    ocean_spawn_death_age: int = 5
    ocean_infant_age: int = 20
    ocean_ec_impact_stride: int = 5  # record every n-th EC arrival


EARTH_PARAMS = PlanetParams()
EARTH_ATMOSPHERE = AtmosphereParams()
DEFAULT_PHYSICS_PARAMS = PhysicsParams()

RESOLUTION_PRESETS: List[Dict[str, int]] = [
    {"label": "low", "lat": 90, "lon": 180},
    {"label": "medium", "lat": 180, "lon": 360},
    {"label": "high", "lat": 360, "lon": 720},
]


def with_overrides(params, **overrides):
    """Return a copy of a parameter record with some fields replaced."""
    return replace(params, **overrides)
