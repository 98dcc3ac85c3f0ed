"""
Core simulation functionality.
"""

from .grid import PlanetGrid, GridOwnershipError, MONTHS
from .geography import (build_grid, ProceduralMapSource, VirtualContinentSource, CustomMapSource,
                        ArrayMaskSource)
from .itcz import ITCZSolver, ITCZResult, solve_itcz
from .wind_belts import WindBelts, WindBeltsResult, compute_wind_belts
from .ocean_collision import CollisionField, compute_collision_field
from .ocean_currents import (OceanCurrentEngine, OceanCurrentsResult, DebugFrameRecorder,
                             compute_ocean_currents)
from .pipeline import SimulationResult, run_simulation

__all__ = ['PlanetGrid', 'GridOwnershipError', 'MONTHS',
           'build_grid', 'ProceduralMapSource', 'VirtualContinentSource', 'CustomMapSource', 'ArrayMaskSource',
           'ITCZSolver', 'ITCZResult', 'solve_itcz',
           'WindBelts', 'WindBeltsResult', 'compute_wind_belts',
           'CollisionField', 'compute_collision_field',
           'OceanCurrentEngine', 'OceanCurrentsResult', 'DebugFrameRecorder', 'compute_ocean_currents',
           'SimulationResult', 'run_simulation']
