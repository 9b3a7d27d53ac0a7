"""laplacian.py: Threshold-gated discrete laplacian of a 2D plane

For each pixel, sums the four one-sided differences (center - neighbour) with its existing
neighbours. Differences with "outside of the array" are 0. Each difference d is gated:
    |d| >  threshold_high  ->  +-threshold_high
    |d| >  threshold_low   ->  d
    otherwise              ->  0
With both thresholds at 0 this is 4*center - sum(neighbours) in the interior.
"""

from __future__ import annotations

__author__ = "Gian-Mateo (GM) Tifone"
__copyright__ = "2025, RIT MISHA"
__credits__ = ["Gian-Mateo Tifone"]
__license__ = "MIT"
__version__ = "1.0.2"
__maintainer__ = "MISHA Team"
__email__ = "mt9485@rit.edu"
__status__ = "Development" # "Prototype", "Development", "Production"



# --------------------------------------------------------------------------------------------
# Imports
# --------------------------------------------------------------------------------------------
from math import inf, isnan

import numpy as np
from numba import njit

from .errors import AllocationError, InvalidDimensionError


# --------------------------------------------------------------------------------------------
# Kernels
# --------------------------------------------------------------------------------------------
# No fastmath: threshold_high is +inf for the single threshold form
@njit(cache=True, inline='always')
def _gate(diff, t_low, t_high):
    mag = abs(diff)
    if mag > t_high:
        if diff > 0:
            return t_high
        return -t_high
    if mag > t_low:
        return diff
    return 0.0


@njit(cache=True)
def _border_cell(data_in, j, i, t_low, t_high):
    ny, nx = data_in.shape
    c = data_in[j, i]
    acc = 0.0
    if i > 0:
        acc += _gate(c - data_in[j, i - 1], t_low, t_high)
    if i < nx - 1:
        acc += _gate(c - data_in[j, i + 1], t_low, t_high)
    if j > 0:
        acc += _gate(c - data_in[j - 1, i], t_low, t_high)
    if j < ny - 1:
        acc += _gate(c - data_in[j + 1, i], t_low, t_high)
    return acc


@njit(cache=True, nogil=True)
def _laplacian_kernel(data_in, data_out, t_low, t_high):
    ny, nx = data_in.shape

    # interior, all four neighbours exist
    for j in range(1, ny - 1):
        for i in range(1, nx - 1):
            c = data_in[j, i]
            acc = _gate(c - data_in[j, i - 1], t_low, t_high)
            acc += _gate(c - data_in[j, i + 1], t_low, t_high)
            acc += _gate(c - data_in[j - 1, i], t_low, t_high)
            acc += _gate(c - data_in[j + 1, i], t_low, t_high)
            data_out[j, i] = acc

    # first and last rows
    for i in range(nx):
        data_out[0, i] = _border_cell(data_in, 0, i, t_low, t_high)
        if ny > 1:
            data_out[ny - 1, i] = _border_cell(data_in, ny - 1, i, t_low, t_high)

    # first and last columns, corners excluded
    for j in range(1, ny - 1):
        data_out[j, 0] = _border_cell(data_in, j, 0, t_low, t_high)
        if nx > 1:
            data_out[j, nx - 1] = _border_cell(data_in, j, nx - 1, t_low, t_high)

    return data_out



# --------------------------------------------------------------------------------------------
# Discrete Laplacian
# --------------------------------------------------------------------------------------------
def discrete_laplacian(
    data_in:np.ndarray,
    threshold_low:float = 0.0,
    threshold_high:float = inf,
    out:np.ndarray|None = None,
    ) -> np.ndarray:
    """
    Computes the threshold-gated discrete laplacian of a plane.

    Args:
        data_in (np.ndarray): Input plane, shape (ny, nx).
        threshold_low (float, optional): Differences with |d| <= threshold_low are dropped. Defaults to 0.
        threshold_high (float, optional): Differences with |d| > threshold_high are clamped to +-threshold_high.
            The single threshold form is threshold_high = inf. Defaults to inf.
        out (np.ndarray | None, optional): float32 output plane of the same shape. Must not share memory with data_in.
            If None, a new plane is allocated. Defaults to None.

    Raises:
        InvalidDimensionError: data_in is not a non-empty 2D array.

    Returns:
        np.ndarray: out, the float32 laplacian.
    """
    if not isinstance(data_in, np.ndarray) or data_in.ndim != 2 or data_in.size == 0:
        raise InvalidDimensionError("-- Error: laplacian input must be a non-empty 2D plane --")
    if isnan(threshold_low) or isnan(threshold_high) or threshold_low < 0 or threshold_high < 0:
        raise ValueError("-- Error: laplacian thresholds must be >= 0 --")

    data = np.ascontiguousarray(data_in, dtype=np.float32)

    if out is None:
        try:
            out = np.empty_like(data)
        except MemoryError as e:
            raise AllocationError(f"laplacian allocation error {data.shape}") from e
    else:
        if out.shape != data.shape or out.dtype != np.float32:
            raise ValueError(f"-- Error: out must be a float32 plane of shape {data.shape} --")
        if np.shares_memory(out, data):
            raise ValueError("-- Error: laplacian cannot run in place (out shares memory with data_in) --")

    return _laplacian_kernel(data, out, np.float32(threshold_low), np.float32(threshold_high))
