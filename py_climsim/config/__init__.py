"""
Configuration for the climate simulation.
"""

from .config import Settings, settings
from .params import (
    DEFAULT_PHYSICS_PARAMS,
    EARTH_ATMOSPHERE,
    EARTH_PARAMS,
    RESOLUTION_PRESETS,
    AtmosphereParams,
    OceanEcGapMode,
    PhysicsParams,
    PlanetParams,
    TradePeakOffsetMode,
    with_overrides,
)

__all__ = ['Settings', 'settings', 'PlanetParams', 'AtmosphereParams', 'PhysicsParams',
           'TradePeakOffsetMode', 'OceanEcGapMode', 'EARTH_PARAMS', 'EARTH_ATMOSPHERE',
           'DEFAULT_PHYSICS_PARAMS', 'RESOLUTION_PRESETS', 'with_overrides']
