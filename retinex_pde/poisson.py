"""poisson.py: Poisson equation solved in the DCT domain

The DCT-II coefficients F(i, j) of the laplacian are scaled by
    u(i, j) = F(i, j) * m / (4 - 2 cos(i PI / nx) - 2 cos(j PI / ny) [+ 2 u / (nx ny - 1)])
    u(0, 0) = 0
where m is the DCT normalisation term 1 / (nx ny). Fixing the DC term to 0 removes the
additive constant left undetermined by the Poisson equation.
"""

from __future__ import annotations

__author__ = "Gian-Mateo (GM) Tifone"
__copyright__ = "2025, RIT MISHA"
__credits__ = ["Gian-Mateo Tifone"]
__license__ = "MIT"
__version__ = "1.1.0"
__maintainer__ = "MISHA Team"
__email__ = "mt9485@rit.edu"
__status__ = "Development" # "Prototype", "Development", "Production"



# --------------------------------------------------------------------------------------------
# Imports
# --------------------------------------------------------------------------------------------
import logging
import threading
from typing import Optional, Tuple

import numpy as np

from .errors import AllocationError, InvalidDimensionError


logger = logging.getLogger(__name__)

# (nx, ny, scale, u)
CacheKey = Tuple[int, int, float, Optional[float]]


# --------------------------------------------------------------------------------------------
# Coefficient tables
# --------------------------------------------------------------------------------------------
def cos_table(size:int) -> np.ndarray:
    """Returns the float64 table cos(k PI / size) for k in [0..size[."""
    if size < 1:
        raise InvalidDimensionError(f"-- Error: cosine table size must be >= 1, got {size} --")
    return np.cos((np.pi * np.arange(size, dtype=np.float64)) / size)


def spectral_coefficients(nx:int, ny:int, scale:float, u:float|None = None) -> np.ndarray:
    """
    Builds the (ny, nx) table of multipliers applied to the DCT coefficients.

    Args:
        nx (int): Number of columns.
        ny (int): Number of rows.
        scale (float): Global multiplier, the DCT normalisation term 1 / (nx ny).
        u (float | None, optional): Spectral damping strength, adds 2u / (nx ny - 1) to every denominator.
            None selects the undamped kernel. Defaults to None.

    Returns:
        np.ndarray: float64 multipliers, entry [0, 0] is exactly 0.
    """
    if u is not None and nx * ny < 2:
        raise InvalidDimensionError("-- Error: spectral damping needs at least 2 coefficients --")

    cosi = cos_table(nx)
    cosj = cos_table(ny)

    try:
        denom = 4.0 - 2.0 * cosi[np.newaxis, :] - 2.0 * cosj[:, np.newaxis]
    except MemoryError as e:
        raise AllocationError(f"coefficient table allocation error ({ny}, {nx})") from e
    if u is not None:
        denom += (2.0 * u) / (nx * ny - 1)

    # denom[0, 0] == 0 for the undamped kernel; the entry is overwritten below
    denom[0, 0] = 1.0
    coef = scale / denom
    coef[0, 0] = 0.0

    logger.debug(f"[POISSON] DCT coefficients *= {scale:g} / (4 - 2cos(i PI / {nx}) - 2cos(j PI / {ny})"
                 + (f" + {2.0 * u / (nx * ny - 1):g})" if u is not None else ")"))
    return coef


class SpectralCoefficientCache:
    """
    Keeps the last coefficient table for re-use across calls with identical geometry
    (typically the three RGB planes of one image).

    The table is rebuilt whenever nx, ny, scale or u differ from the cached key. Lookup and
    rebuild happen under a lock, so one cache can be shared by channel worker threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._key:CacheKey|None = None
        self._coef:np.ndarray|None = None
        self.rebuilds = 0


    def _is_stale(self, nx:int, ny:int, scale:float, u:float|None) -> bool:
        if self._key is None or self._coef is None:
            return True
        s_nx, s_ny, s_scale, s_u = self._key
        if nx != s_nx or ny != s_ny:
            return True
        # any numeric drift forces recomputation
        if 0.0 < abs(scale - s_scale):
            return True
        if (u is None) != (s_u is None):
            return True
        return u is not None and 0.0 < abs(u - s_u)


    def get(self, nx:int, ny:int, scale:float, u:float|None = None) -> np.ndarray:
        """Returns the (read-only) coefficient table for (nx, ny, scale, u), building it if needed."""
        with self._lock:
            if self._is_stale(nx, ny, scale, u):
                coef = spectral_coefficients(nx, ny, scale, u)
                coef.setflags(write=False)
                self._coef = coef
                self._key = (nx, ny, scale, u)
                self.rebuilds += 1
                logger.debug(f"[POISSON] Coefficient cache rebuilt for {self._key}")
            return self._coef


    def clear(self) -> None:
        with self._lock:
            self._key = None
            self._coef = None



# --------------------------------------------------------------------------------------------
# Solver
# --------------------------------------------------------------------------------------------
def solve_spectral(
    coeffs:np.ndarray,
    scale:float,
    u:float|None = None,
    cache:SpectralCoefficientCache|None = None,
    ) -> np.ndarray:
    """
    Solves the Poisson equation in the DCT domain, in place.

    Args:
        coeffs (np.ndarray): Forward DCT-II coefficients of the laplacian, shape (ny, nx).
        scale (float): Global multiplier, normally 1 / (nx ny).
        u (float | None, optional): Spectral damping strength. Defaults to None.
        cache (SpectralCoefficientCache | None, optional): Coefficient cache. If None, the table is recomputed. Defaults to None.

    Returns:
        np.ndarray: coeffs, updated. coeffs[0, 0] is exactly 0.
    """
    if not isinstance(coeffs, np.ndarray) or coeffs.ndim != 2 or coeffs.size == 0:
        raise InvalidDimensionError("-- Error: spectral coefficients must be a non-empty 2D array --")

    ny, nx = coeffs.shape
    coef = cache.get(nx, ny, scale, u) if cache is not None else spectral_coefficients(nx, ny, scale, u)

    coeffs *= coef
    # also when the input DC term is inf or NaN
    coeffs[0, 0] = 0.0
    return coeffs
