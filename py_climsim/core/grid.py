"""
Planet grid data structure.

The grid is a fixed row-major lat/lon raster. Row 0 sits at +90 degrees and
the last row at -90; columns start at -180 and wrap around. Derived fields
are written by the pipeline stages that own them, each exactly once per run.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, NamedTuple, Optional, Set

import numpy as np

MONTHS = 12
KM_PER_DEGREE = 111.1
SEA_LEVEL_PRESSURE = 1013.0  # hPa

# Stage that owns each derived field
FIELD_OWNERS: Dict[str, str] = {
    "dist_coast": "geography",
    "heat_map_val": "itcz",
    "wind_u": "wind_belts",
    "wind_v": "wind_belts",
    "pressure": "wind_belts",
    "collision_mask": "ocean_collision",
}


class GridOwnershipError(RuntimeError):
    """Raised when a stage writes a grid field it does not own."""


class GridCell(NamedTuple):
    """Read-only view of a single cell (monthly values for one month)."""

    lat: float
    lon: float
    elevation: float
    is_land: bool
    dist_coast: float
    heat_map_val: float
    collision_mask: float
    wind_u: float
    wind_v: float
    pressure: float


@dataclass
class PlanetGrid:
    """Lat/lon raster with per-cell geography and monthly climate fields."""

    rows: int
    cols: int
    elevation: np.ndarray  # metres, signed
    is_land: np.ndarray  # bool

    # Derived fields
    dist_coast: Optional[np.ndarray] = None  # km, + inland, - offshore
    heat_map_val: Optional[np.ndarray] = None  # -1 (ocean) .. +1 (inland)
    collision_mask: Optional[np.ndarray] = None  # smoothed wall field

    # Monthly fields, shape (12, rows, cols)
    wind_u: Optional[np.ndarray] = None
    wind_v: Optional[np.ndarray] = None
    pressure: Optional[np.ndarray] = None

    # Reserved for stages that are not part of the pipeline
    insolation: Optional[np.ndarray] = None
    temp: Optional[np.ndarray] = None
    precip: Optional[np.ndarray] = None

    written_fields: Set[str] = field(default_factory=set)

    def __post_init__(self):
        if self.rows < 2 or self.cols < 1:
            raise ValueError(
                f"Grid needs at least 2 rows and 1 column, got {self.rows}x{self.cols}"
            )

        self.elevation = np.asarray(self.elevation, dtype=np.float64)
        self.is_land = np.asarray(self.is_land, dtype=bool)
        shape = (self.rows, self.cols)

        if self.elevation.size != self.rows * self.cols or self.is_land.size != self.rows * self.cols:
            raise ValueError(
                f"Elevation/land arrays must hold {self.rows * self.cols} cells "
                f"(got {self.elevation.size} and {self.is_land.size})"
            )
        self.elevation = self.elevation.reshape(shape)
        self.is_land = self.is_land.reshape(shape)

        self.lats = 90.0 - np.arange(self.rows) * self.lat_step_deg
        self.lons = -180.0 + np.arange(self.cols) * self.lon_step_deg
        self.cos_lats = np.cos(np.radians(self.lats))

        self.reset_monthly_fields()

    def reset_monthly_fields(self):
        """Restore the monthly arrays to their initial values."""
        monthly = (MONTHS, self.rows, self.cols)
        self.wind_u = np.zeros(monthly)
        self.wind_v = np.zeros(monthly)
        self.pressure = np.full(monthly, SEA_LEVEL_PRESSURE)
        self.insolation = np.zeros(monthly)
        self.temp = np.zeros(monthly)
        self.precip = np.zeros(monthly)
        self.written_fields -= {"wind_u", "wind_v", "pressure"}

    @property
    def n_cells(self) -> int:
        return self.rows * self.cols

    @property
    def lat_step_deg(self) -> float:
        return 180.0 / (self.rows - 1)

    @property
    def lon_step_deg(self) -> float:
        return 360.0 / self.cols

    @property
    def km_per_unit(self) -> float:
        """Kilometres per grid step along a meridian."""
        return self.lat_step_deg * KM_PER_DEGREE

    def lat_from_row(self, row: float) -> float:
        return 90.0 - (row / (self.rows - 1)) * 180.0

    def row_from_lat(self, lat: float) -> float:
        return (90.0 - lat) / 180.0 * (self.rows - 1)

    def lon_from_col(self, col: float) -> float:
        """Longitude of a (possibly fractional, unwrapped) column, in [-180, 180)."""
        lon = -180.0 + (col / self.cols) * 360.0
        return (lon + 180.0) % 360.0 - 180.0

    def wrap_col(self, col: int) -> int:
        return col % self.cols

    def clamp_row(self, row: int) -> int:
        return min(max(row, 0), self.rows - 1)

    def write_field(self, name: str, values, stage: str) -> None:
        """
        Store a derived field on behalf of a pipeline stage.

        Args:
            name: Field name, one of FIELD_OWNERS
            values: Array of shape (rows, cols), or (12, rows, cols) for monthly fields
            stage: Name of the stage doing the write
        """
        owner = FIELD_OWNERS.get(name)
        if owner is None:
            raise GridOwnershipError(f"'{name}' is not a derived grid field")
        if owner != stage:
            raise GridOwnershipError(f"'{name}' is owned by '{owner}', not '{stage}'")

        values = np.asarray(values, dtype=np.float64)
        expected = (MONTHS, self.rows, self.cols) if name in ("wind_u", "wind_v", "pressure") else (self.rows, self.cols)
        if values.shape != expected:
            raise ValueError(f"'{name}' must have shape {expected}, got {values.shape}")

        setattr(self, name, values)
        self.written_fields.add(name)

    def require(self, *names: str) -> None:
        """Fail fast when an upstream stage has not populated a field yet."""
        missing = [name for name in names if name not in self.written_fields]
        if missing:
            raise ValueError(f"Grid fields not computed yet: {', '.join(missing)}")

    def cell(self, row: int, col: int, month: int = 0) -> GridCell:
        """Return a snapshot of one cell."""
        row = self.clamp_row(row)
        col = self.wrap_col(col)

        def value(arr):
            return float(arr[row, col]) if arr is not None else math.nan

        return GridCell(
            lat=float(self.lats[row]),
            lon=float(self.lons[col]),
            elevation=float(self.elevation[row, col]),
            is_land=bool(self.is_land[row, col]),
            dist_coast=value(self.dist_coast),
            heat_map_val=value(self.heat_map_val),
            collision_mask=value(self.collision_mask),
            wind_u=float(self.wind_u[month, row, col]),
            wind_v=float(self.wind_v[month, row, col]),
            pressure=float(self.pressure[month, row, col]),
        )
