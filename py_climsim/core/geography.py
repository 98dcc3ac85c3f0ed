"""
Geography: elevation/land-mask generation and the coastal distance field.

This module implements:
- Mask sources (procedural noise continents, a single virtual continent,
  resampled in-memory rasters)
- Multi-source shortest-path distance on the lat/lon grid graph
- The signed coastal distance field (+ inland, - offshore, in km)
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import numpy as np
import structlog
from opensimplex import OpenSimplex
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import dijkstra

from ..config.config import settings
from .grid import PlanetGrid
from .noise import fbm_sphere, ridge_sphere, sphere_coordinates

logger = structlog.get_logger()

MIN_ROW_SCALE = 0.05  # horizontal edge cost floor near the poles

# Land fraction per elevation bin for 5-degree latitude bands (Earth statistics)
EARTH_STATS = np.array([
    [-87.5, 0.009136, 0.005815, 0.010033, 0.116746, 0.858269],
    [-82.5, 0.182381, 0.054400, 0.074232, 0.194747, 0.492565],
    [-77.5, 0.105328, 0.030922, 0.064255, 0.167538, 0.478696],
    [-72.5, 0.066211, 0.026735, 0.041187, 0.105193, 0.351210],
    [-67.5, 0.031472, 0.012559, 0.028720, 0.079115, 0.056712],
    [-62.5, 0.001042, 0.000928, 0.000742, 0.000542, 0.000014],
    [-57.5, 0.000577, 0.000235, 0.000088, 0.000001, 0.000000],
    [-52.5, 0.008500, 0.005344, 0.001909, 0.000576, 0.000029],
    [-47.5, 0.006720, 0.007734, 0.008397, 0.003197, 0.000090],
    [-42.5, 0.009831, 0.008563, 0.010758, 0.008184, 0.000046],
    [-37.5, 0.032157, 0.018558, 0.008091, 0.006136, 0.001342],
    [-32.5, 0.075449, 0.043259, 0.019907, 0.015779, 0.004317],
    [-27.5, 0.065395, 0.069657, 0.037809, 0.033558, 0.009961],
    [-22.5, 0.049050, 0.094212, 0.051427, 0.038900, 0.012486],
    [-17.5, 0.051153, 0.066741, 0.055849, 0.049413, 0.014746],
    [-12.5, 0.037755, 0.066506, 0.034395, 0.055945, 0.010383],
    [-7.5, 0.077269, 0.067036, 0.048390, 0.033348, 0.006208],
    [-2.5, 0.127284, 0.055370, 0.028120, 0.026203, 0.005908],
    [2.5, 0.069399, 0.066868, 0.054080, 0.019938, 0.003743],
    [7.5, 0.076775, 0.078565, 0.056015, 0.024192, 0.007546],
    [12.5, 0.051216, 0.114230, 0.051100, 0.014747, 0.004682],
    [17.5, 0.058799, 0.134731, 0.071279, 0.020531, 0.005816],
    [22.5, 0.081182, 0.126006, 0.095200, 0.038894, 0.009185],
    [27.5, 0.098845, 0.127138, 0.084591, 0.052514, 0.039378],
    [32.5, 0.111337, 0.061413, 0.077413, 0.073114, 0.098636],
    [37.5, 0.069925, 0.075435, 0.060837, 0.119961, 0.097831],
    [42.5, 0.089671, 0.112500, 0.090149, 0.138303, 0.040349],
    [47.5, 0.147069, 0.167387, 0.111808, 0.088747, 0.024053],
    [52.5, 0.195211, 0.187629, 0.134505, 0.064310, 0.011058],
    [57.5, 0.230437, 0.169657, 0.101665, 0.045804, 0.000871],
    [62.5, 0.280279, 0.231287, 0.104468, 0.072484, 0.011983],
    [67.5, 0.298780, 0.229438, 0.121484, 0.046157, 0.028845],
    [72.5, 0.201980, 0.057586, 0.020519, 0.019809, 0.057262],
    [77.5, 0.062937, 0.035822, 0.028418, 0.044103, 0.067972],
    [82.5, 0.023247, 0.030204, 0.042001, 0.038523, 0.002930],
    [87.5, 0.000000, 0.000000, 0.000000, 0.000000, 0.000000],
])

# Elevation ranges (m) of the hypsometric bins
BIN_RANGES = [(0, 200), (200, 500), (500, 1000), (1000, 2000), (2000, 6000)]


class MaskSource(Protocol):
    """Anything that can produce elevation and land mask rasters."""

    def generate(self, rows: int, cols: int) -> Tuple[np.ndarray, np.ndarray]:
        ...


def row_latitudes(rows: int) -> np.ndarray:
    return 90.0 - np.arange(rows) * (180.0 / (rows - 1))


def earth_stats(lat: float) -> Tuple[float, np.ndarray]:
    """
    Interpolate the Earth land statistics at a latitude.

    Returns:
        Tuple of (land fraction, per-bin land fractions)
    """
    band_lats = EARTH_STATS[:, 0]
    i = 0
    while i < len(band_lats) - 1 and band_lats[i + 1] < lat:
        i += 1
    j = min(i + 1, len(band_lats) - 1)

    t = 0.0
    if band_lats[j] != band_lats[i]:
        t = (lat - band_lats[i]) / (band_lats[j] - band_lats[i])
    t = min(max(t, 0.0), 1.0)

    bins = EARTH_STATS[i, 1:] * (1 - t) + EARTH_STATS[j, 1:] * t
    return float(bins.sum()), bins


@dataclass
class ProceduralMapSource:
    """Noise continents whose per-row hypsometry follows Earth statistics."""

    seed: int = 42
    continent_octaves: int = 6
    mountain_octaves: int = 6
    ocean_depth_scale: float = 6000.0  # m

    def raw_heights(self, rows: int, cols: int) -> np.ndarray:
        lats = row_latitudes(rows)
        lons = -180.0 + np.arange(cols) * (360.0 / cols)
        nx, ny, nz = sphere_coordinates(lats, lons)

        continents = fbm_sphere(OpenSimplex(seed=self.seed), nx, ny, nz, self.continent_octaves)
        mountains = ridge_sphere(OpenSimplex(seed=self.seed + 300), nx, ny, nz, self.mountain_octaves)

        # Domain warp: two coarse fields displace the sample point
        qx = fbm_sphere(OpenSimplex(seed=self.seed + 900), nx, ny, nz, 2)
        qy = fbm_sphere(OpenSimplex(seed=self.seed + 901), ny, nz, nx, 2)
        warp = fbm_sphere(OpenSimplex(seed=self.seed + 902), nx + qx, ny + qy, nz, 4)

        return continents * 0.6 + mountains * 0.3 + warp * 0.1

    def generate(self, rows: int, cols: int) -> Tuple[np.ndarray, np.ndarray]:
        logger.info("Generating procedural map", rows=rows, cols=cols, seed=self.seed)

        raw = self.raw_heights(rows, cols)
        elevation = np.zeros((rows, cols), dtype=np.float64)
        is_land = np.zeros((rows, cols), dtype=bool)

        for r, lat in enumerate(row_latitudes(rows)):
            land_frac, bins = earth_stats(lat)
            order = np.argsort(raw[r], kind="stable")
            values = raw[r, order]

            sea_count = int(np.floor((1 - land_frac) * cols))
            land_count = cols - sea_count

            # A fully flooded row still needs a finite sea level
            if sea_count < cols:
                threshold = values[sea_count]
            else:
                threshold = values[-1] + 0.05

            depth = np.maximum(0.0, threshold - values[:sea_count])
            elevation[r, order[:sea_count]] = -10 - (depth * 4.0) ** 1.2 * self.ocean_depth_scale

            if land_count <= 0:
                continue

            start = 0
            for b, (h_min, h_max) in enumerate(BIN_RANGES):
                frac_of_land = bins[b] / land_frac if land_frac > 0.0001 else 0.0
                if b == len(BIN_RANGES) - 1:
                    count = land_count - start
                else:
                    count = int(np.floor(frac_of_land * land_count))
                count = max(0, min(count, land_count - start))

                for k in range(count):
                    idx = order[sea_count + start + k]
                    is_land[r, idx] = True
                    elevation[r, idx] = h_min + (k / max(1, count)) * (h_max - h_min)
                start += count

        return elevation, is_land


@dataclass
class VirtualContinentSource:
    """One contiguous continent centred on the middle column."""

    ocean_elevation: float = -4000.0
    land_elevation: float = 0.0

    def generate(self, rows: int, cols: int) -> Tuple[np.ndarray, np.ndarray]:
        logger.info("Generating virtual continent", rows=rows, cols=cols)

        elevation = np.full((rows, cols), self.ocean_elevation, dtype=np.float64)
        is_land = np.zeros((rows, cols), dtype=bool)

        centre = cols // 2
        dist = np.abs(np.arange(cols) - centre)
        wrapped = np.minimum(dist, cols - dist)
        order = np.argsort(wrapped, kind="stable")

        for r, lat in enumerate(row_latitudes(rows)):
            land_frac, _ = earth_stats(lat)
            land_cols = order[: int(np.floor(land_frac * cols))]
            is_land[r, land_cols] = True
            elevation[r, land_cols] = self.land_elevation

        return elevation, is_land


@dataclass
class CustomMapSource:
    """Nearest-neighbour resample of an imported row-major raster."""

    elevation: np.ndarray
    is_land: np.ndarray
    width: int
    height: int

    def generate(self, rows: int, cols: int) -> Tuple[np.ndarray, np.ndarray]:
        src_elev = np.asarray(self.elevation, dtype=np.float64).ravel()
        src_land = np.asarray(self.is_land, dtype=bool).ravel()
        if src_elev.size == 0 or src_elev.size != src_land.size:
            raise ValueError("Custom map elevation and land mask must be non-empty and equal in size")

        src_r = np.floor(np.arange(rows) / rows * self.height).astype(int)
        src_c = np.floor(np.arange(cols) / cols * self.width).astype(int)
        src_idx = np.minimum(src_r[:, None] * self.width + src_c[None, :], src_elev.size - 1)

        logger.info("Resampling custom map", source=(self.height, self.width), target=(rows, cols))
        return src_elev[src_idx], src_land[src_idx]


@dataclass
class ArrayMaskSource:
    """Rasters that already have the grid's shape."""

    elevation: np.ndarray
    is_land: np.ndarray

    def generate(self, rows: int, cols: int) -> Tuple[np.ndarray, np.ndarray]:
        elevation = np.asarray(self.elevation, dtype=np.float64)
        is_land = np.asarray(self.is_land, dtype=bool)
        if elevation.shape != (rows, cols) or is_land.shape != (rows, cols):
            raise ValueError(
                f"Mask arrays must have shape {(rows, cols)}, got {elevation.shape} and {is_land.shape}"
            )
        return elevation, is_land


def build_grid_graph(rows: int, cols: int, cos_lats: np.ndarray) -> csr_matrix:
    """
    Build the undirected lat/lon cell graph.

    Vertical neighbours cost 1; horizontal neighbours cost
    max(0.05, |cos(lat)|) and wrap around in longitude. Poles do not wrap.
    """
    idx = np.arange(rows * cols).reshape(rows, cols)

    src = [idx[:-1, :].ravel()]
    dst = [idx[1:, :].ravel()]
    weights = [np.ones((rows - 1) * cols)]

    if cols > 1:
        row_scale = np.maximum(MIN_ROW_SCALE, np.abs(cos_lats))
        src.append(idx.ravel())
        dst.append(np.roll(idx, -1, axis=1).ravel())
        weights.append(np.repeat(row_scale, cols))

    n = rows * cols
    return csr_matrix(
        (np.concatenate(weights), (np.concatenate(src), np.concatenate(dst))),
        shape=(n, n),
    )


def compute_distance_map(graph: csr_matrix, is_source: np.ndarray) -> np.ndarray:
    """
    Multi-source shortest-path distance (grid units) to the nearest source cell.

    Cells unreachable from any source, or every cell when there are no
    sources, stay at infinity.
    """
    sources = np.flatnonzero(is_source.ravel())
    if sources.size == 0:
        return np.full(is_source.shape, np.inf)

    dist = dijkstra(graph, directed=False, indices=sources, min_only=True)
    return dist.reshape(is_source.shape)


def compute_coastal_distance(is_land: np.ndarray, lats: np.ndarray, km_per_unit: float) -> np.ndarray:
    """
    Signed coastal distance in km: + inland for land, - offshore for ocean.

    Args:
        is_land: Boolean land mask (rows, cols)
        lats: Row latitudes in degrees
        km_per_unit: Kilometres per grid step
    """
    rows, cols = is_land.shape
    graph = build_grid_graph(rows, cols, np.cos(np.radians(lats)))

    dist_from_ocean = compute_distance_map(graph, ~is_land)
    dist_from_land = compute_distance_map(graph, is_land)

    return np.where(is_land, dist_from_ocean, -dist_from_land) * km_per_unit


def build_grid(
    rows: Optional[int] = None,
    cols: Optional[int] = None,
    mask_source: Optional[MaskSource] = None,
) -> PlanetGrid:
    """
    Build a planet grid from a mask source and compute its coastal distance.

    Args:
        rows: Number of latitude rows (>= 2); settings default when omitted
        cols: Number of longitude columns (>= 1); settings default when omitted
        mask_source: Elevation/land generator; procedural noise by default

    Returns:
        PlanetGrid with elevation, land mask and dist_coast populated
    """
    rows = settings.default_resolution_lat if rows is None else rows
    cols = settings.default_resolution_lon if cols is None else cols

    if rows < 2 or cols < 1:
        raise ValueError(f"Grid needs at least 2 rows and 1 column, got {rows}x{cols}")

    if rows * cols > settings.max_grid_cells:
        raise ValueError(f"Grid of {rows}x{cols} exceeds the {settings.max_grid_cells} cell limit")

    mask_source = mask_source or ProceduralMapSource(seed=settings.random_seed)
    elevation, is_land = mask_source.generate(rows, cols)
    grid = PlanetGrid(rows=rows, cols=cols, elevation=elevation, is_land=is_land)

    logger.info("Computing coastal distance field", rows=rows, cols=cols,
                land_cells=int(grid.is_land.sum()))
    dist = compute_coastal_distance(grid.is_land, grid.lats, grid.km_per_unit)
    grid.write_field("dist_coast", dist, stage="geography")

    return grid
