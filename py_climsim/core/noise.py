"""
Seeded OpenSimplex noise sampled on the unit sphere.

Sampling the 3D noise at unit-sphere coordinates gives fields without a
seam at the date line or pinching at the poles. Each generator is an
``OpenSimplex`` instance, so the seed alone fixes the result.
"""

import numpy as np
from opensimplex import OpenSimplex

BASE_SCALE = 2.0


def sample3(noise: OpenSimplex, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
    """Pointwise noise3 over equally shaped coordinate arrays, in [-1, 1]."""
    return np.vectorize(noise.noise3, otypes=[np.float64])(x, y, z)


def fbm_sphere(noise: OpenSimplex, nx: np.ndarray, ny: np.ndarray, nz: np.ndarray,
               octaves: int, persistence: float = 0.5, lacunarity: float = 2.0) -> np.ndarray:
    """Fractal Brownian motion, normalised to [0, 1]."""
    total = np.zeros(np.shape(nx), dtype=np.float64)
    amp = 1.0
    freq = BASE_SCALE
    norm = 0.0

    for _ in range(max(1, octaves)):
        sample = (sample3(noise, nx * freq, ny * freq, nz * freq) + 1.0) / 2.0
        total += sample * amp
        norm += amp
        amp *= persistence
        freq *= lacunarity

    return total / norm


def ridge_sphere(noise: OpenSimplex, nx: np.ndarray, ny: np.ndarray, nz: np.ndarray,
                 octaves: int) -> np.ndarray:
    """
    Ridged multifractal noise in [0, 1].

    Each octave is folded to (1 - |n|)^2 and weighted by the previous
    octave, so ridges sharpen where the coarser octave already peaks.
    Octaves are decorrelated by shifting the sample point.
    """
    total = np.zeros(np.shape(nx), dtype=np.float64)
    prev = np.ones(np.shape(nx), dtype=np.float64)
    amp = 0.5
    freq = BASE_SCALE
    norm = 0.0

    for i in range(max(1, octaves)):
        shift = i * 13.0
        n = sample3(noise, nx * freq + shift, ny * freq + shift, nz * freq + shift)
        n = (1.0 - np.abs(n)) ** 2
        total += n * amp * prev
        norm += amp
        prev = n
        freq *= 2.0
        amp *= 0.5

    return total / norm


def sphere_coordinates(lats: np.ndarray, lons: np.ndarray):
    """Unit-sphere coordinates (nx, ny, nz) for a lat/lon raster, y up."""
    lat_rad = np.radians(lats)[:, None]
    lon_rad = np.radians(lons)[None, :]
    nx = np.cos(lat_rad) * np.cos(lon_rad)
    ny = np.broadcast_to(np.sin(lat_rad), nx.shape)
    nz = np.cos(lat_rad) * np.sin(lon_rad)
    return nx, np.array(ny), nz
