"""retinex.py: Retinex PDE, solved with a forward and backward DCT

Stages (per plane):
    1. Discrete laplacian with threshold(s)
    2. Forward DCT-II (the DCT implicitly symmetrises the laplacian in both directions)
    3. Poisson equation in the DCT domain
    4. Backward DCT-III
"""

from __future__ import annotations

__author__ = "Gian-Mateo (GM) Tifone"
__copyright__ = "2025, RIT MISHA"
__credits__ = ["Gian-Mateo Tifone"]
__license__ = "MIT"
__version__ = "1.2.0"
__maintainer__ = "MISHA Team"
__email__ = "mt9485@rit.edu"
__status__ = "Development" # "Prototype", "Development", "Production"



# --------------------------------------------------------------------------------------------
# Imports
# --------------------------------------------------------------------------------------------
import logging
from math import inf
from time import time

import numpy as np
from scipy import fft

from .errors import AllocationError, ComputationError, InvalidDimensionError
from .laplacian import discrete_laplacian
from .poisson import SpectralCoefficientCache, solve_spectral


logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------------------------
# Helper Functions
# --------------------------------------------------------------------------------------------
def _dct2(data:np.ndarray, dct_type:int) -> np.ndarray:
    """Unnormalized 2D DCT. dct_type=2 is the forward transform, dct_type=3 the backward one (x 4 nx ny)."""
    try:
        return fft.dctn(data, type=dct_type, norm="backward")
    except MemoryError as e:
        raise AllocationError(f"DCT allocation error {data.shape}") from e
    except Exception as e:
        raise ComputationError(f"DCT-{'II' if dct_type == 2 else 'III'} failed on {data.shape}: {e}") from e



# --------------------------------------------------------------------------------------------
# Retinex PDE
# --------------------------------------------------------------------------------------------
def retinex_pde(
    plane:np.ndarray,
    threshold_low:float = 0.0,
    threshold_high:float = inf,
    u:float|None = None,
    cache:SpectralCoefficientCache|None = None,
    out:np.ndarray|None = None,
    ) -> np.ndarray:
    """
    Solves the Retinex PDE on one plane.

    The output is only defined up to an additive constant (the DC term is set to 0) and a
    global scale, it is meant to be normalized afterwards.

    Args:
        plane (np.ndarray): Input plane, shape (ny, nx). Left untouched unless passed as out.
        threshold_low (float, optional): Retinex threshold, differences with |d| <= threshold_low are ignored. Defaults to 0.
        threshold_high (float, optional): Differences above threshold_high are clamped. Defaults to inf.
        u (float | None, optional): Spectral damping strength. None for the plain Poisson kernel. Defaults to None.
        cache (SpectralCoefficientCache | None, optional): Shared coefficient cache. Defaults to None.
        out (np.ndarray | None, optional): float32 output plane, may be plane itself for in-place use.
            If None, a new plane is returned. Defaults to None.

    Raises:
        InvalidDimensionError: plane is not 2D, or nx < 2 or ny < 2.
        ComputationError: The DCT library failed.
        AllocationError: A scratch buffer could not be allocated.

    Returns:
        np.ndarray: The retinex plane (float32).
    """
    if not isinstance(plane, np.ndarray) or plane.ndim != 2:
        raise InvalidDimensionError("-- Error: retinex input must be a 2D plane --")
    ny, nx = plane.shape
    if nx < 2 or ny < 2:
        raise InvalidDimensionError(f"-- Error: retinex needs nx >= 2 and ny >= 2, got nx={nx} ny={ny} --")
    if out is not None and (out.shape != plane.shape or out.dtype != np.float32):
        raise ValueError(f"-- Error: out must be a float32 plane of shape {plane.shape} --")

    start = time()

    # laplacian : plane -> laplace
    laplace = discrete_laplacian(plane, threshold_low, threshold_high)

    # forward DCT : laplace -> spectrum
    spectrum = _dct2(laplace, 2)
    del laplace

    # Poisson PDE in the DCT domain, 1 / (nx ny) is the DCT normalisation term
    solve_spectral(spectrum, 1.0 / (nx * ny), u, cache)

    # backward DCT : spectrum -> out
    result = _dct2(spectrum, 3)
    del spectrum

    if out is None:
        out = result.astype(np.float32, copy=False)
    else:
        out[...] = result

    logger.debug(f"[RETINEX] Plane {nx}x{ny} solved in {(time() - start):.3f}s")
    return out
