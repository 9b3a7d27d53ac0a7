"""normalize.py: Histogram-based normalization of float planes

The core routine, _flatten_minmax_nb(), approximates the data distribution with an
integer histogram: every value is rounded half-up (floor(x + 0.5)) into one bin.
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
import sys
import warnings
from math import floor, isfinite
from typing import Tuple

import numpy as np

from .errors import AllocationError, ArithmeticRangeError, FlattenRangeWarning, InvalidDimensionError


logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------------------------
# Helper Functions
# --------------------------------------------------------------------------------------------
def _check_plane(plane:np.ndarray) -> None:
    """Normalization works in place on a non-empty floating point array."""
    if not isinstance(plane, np.ndarray):
        raise TypeError("-- Error: plane must be a numpy array --")
    if not np.issubdtype(plane.dtype, np.floating):
        raise TypeError("-- Error: plane must have a floating point dtype --")
    if plane.size == 0:
        raise InvalidDimensionError("-- Error: plane is empty --")


def _clamp_flatten_counts(size:int, nb_min:int, nb_max:int) -> Tuple[int, int]:
    """Negative or too many flattened pixels is recoverable: both counts fall back to (size - 1) // 2."""
    if nb_min < 0 or nb_max < 0 or nb_min + nb_max >= size:
        clamped = (size - 1) // 2
        warnings.warn(
            f"invalid number of pixels to flatten ({nb_min} + {nb_max}, size {size}), using (size - 1) / 2 = {clamped}",
            FlattenRangeWarning,
            stacklevel=3,
        )
        logger.warning(f"[NORMALIZE] Flatten counts clamped to {clamped}")
        return clamped, clamped
    return nb_min, nb_max


def minmax(plane:np.ndarray) -> Tuple[float, float]:
    """Returns the (min, max) of a plane."""
    _check_plane(plane)
    return float(plane.min()), float(plane.max())


def flatten_minmax(plane:np.ndarray, flat_min:float, flat_max:float) -> np.ndarray:
    """
    Saturates, in place, values below flat_min (resp. above flat_max) to flat_min (resp. flat_max).

    Args:
        plane (np.ndarray): Input/output plane.
        flat_min (float): Lower saturation limit.
        flat_max (float): Upper saturation limit. Must be >= flat_min.

    Returns:
        np.ndarray: plane, updated.
    """
    if flat_max < flat_min:
        raise ValueError("-- Error: flat_max must be >= flat_min --")
    np.clip(plane, flat_min, flat_max, out=plane)
    return plane


def _histogram(plane:np.ndarray, vmin:float, vmax:float) -> Tuple[np.ndarray, float]:
    """
    Integer histogram of the rounded plane values.

    Returns:
        Tuple[np.ndarray, float]: (counts, imin) where counts[k] is the number of pixels with floor(x + 0.5) == imin + k.
    """
    if not (isfinite(vmin) and isfinite(vmax)):
        raise ArithmeticRangeError(f"the data range is not finite : {vmin} - {vmax}")
    imin = float(floor(vmin + 0.5))
    imax = float(floor(vmax + 0.5))
    # bins must stay addressable on every architecture
    if imax - imin + 1 > sys.maxsize:
        raise ArithmeticRangeError(f"the data range is too wide for an integer histogram : {imin} - {imax}")
    histo_size = int(imax - imin) + 1

    try:
        bins = (np.floor(plane.astype(np.float64) + 0.5) - imin).astype(np.intp).ravel()
        histo = np.bincount(bins, minlength=histo_size)
    except MemoryError as e:
        raise AllocationError(f"histogram allocation error ({histo_size} bins)") from e
    except ValueError as e:
        # numpy refuses arrays it cannot index
        raise ArithmeticRangeError(f"the data range is too wide for an integer histogram : {imin} - {imax}") from e

    return histo, imin


def _flatten_minmax_nb(
    plane:np.ndarray,
    vmin:float,
    vmax:float,
    nb_min:int,
    nb_max:int,
    ) -> Tuple[float, float]:
    """
    Flattens extremal pixels in place so that at least nb_min (resp. nb_max) pixels end up
    saturated at the new minimum (resp. maximum).

    Returns:
        Tuple[float, float]: New (min, max) of the plane.
    """
    histo, imin = _histogram(plane, vmin, vmax)
    last = histo.size - 1

    # forward traversal of the cumulative histogram
    if nb_min > 0:
        cumul = np.cumsum(histo)
        k = int(np.searchsorted(cumul, nb_min, side="left"))
        i = k if cumul[k] > nb_min else k + 1
        flat_min = imin + i
    else:
        flat_min = imin

    # backward traversal
    if nb_max > 0:
        cumul = np.cumsum(histo[::-1])
        k = int(np.searchsorted(cumul, nb_max, side="left"))
        i = last - k if cumul[k] > nb_max else last - k - 1
        flat_max = imin + i
    else:
        flat_max = imin + last

    # overlapping counts: single value output
    if flat_max < flat_min:
        flat_min = (flat_min + flat_max) / 2
        flat_max = flat_min

    logger.debug(f"[NORMALIZE] Flatten limits: {flat_min} - {flat_max}")
    flatten_minmax(plane, flat_min, flat_max)
    return float(np.float32(flat_min)), float(np.float32(flat_max))



# --------------------------------------------------------------------------------------------
# Normalization
# --------------------------------------------------------------------------------------------
def normalize_histogram(
    plane:np.ndarray,
    target_min:float,
    target_max:float,
    flatten_nb_min:int = 0,
    flatten_nb_max:int = 0,
    ) -> np.ndarray:
    """
    Rescales a plane, in place, to [target_min, target_max], optionally flattening a number
    of extremal pixels first.

    Args:
        plane (np.ndarray): Input/output float plane.
        target_min (float): Output minimum.
        target_max (float): Output maximum.
        flatten_nb_min (int, optional): Number of darkest pixels to saturate. Defaults to 0.
        flatten_nb_max (int, optional): Number of brightest pixels to saturate. Defaults to 0.

    Raises:
        ArithmeticRangeError: The rounded data range cannot be histogrammed.
        AllocationError: The histogram could not be allocated.

    Returns:
        np.ndarray: plane, normalized.
    """
    _check_plane(plane)
    flatten_nb_min, flatten_nb_max = _clamp_flatten_counts(plane.size, int(flatten_nb_min), int(flatten_nb_max))

    # target_max == target_min : shortcut
    if target_max == target_min:
        plane.fill(target_min)
        return plane

    vmin, vmax = minmax(plane)
    if flatten_nb_min > 0 or flatten_nb_max > 0:
        vmin, vmax = _flatten_minmax_nb(plane, vmin, vmax, flatten_nb_min, flatten_nb_max)

    # max <= min : constant output
    if vmax <= vmin:
        plane.fill((target_max + target_min) / 2)
        return plane

    # norm(x) = (x - min) * (t_max - t_min) / (max - min) + t_min
    scale = (float(target_max) - float(target_min)) / (vmax - vmin)
    plane[...] = (plane.astype(np.float64) - vmin) * scale + float(target_min)
    return plane


def normalize(
    plane:np.ndarray,
    target_min:float,
    target_max:float,
    flatten_min:float = 0.0,
    flatten_max:float = 0.0,
    ) -> np.ndarray:
    """
    Proportion-based entry to normalize_histogram().

    Args:
        plane (np.ndarray): Input/output float plane.
        target_min (float): Output minimum.
        target_max (float): Output maximum.
        flatten_min (float, optional): Proportion of darkest pixels to saturate, in [0,1]. Defaults to 0.
        flatten_max (float, optional): Proportion of brightest pixels to saturate, in [0,1]. Defaults to 0.

    Returns:
        np.ndarray: plane, normalized.
    """
    if not (0.0 <= flatten_min <= 1.0 and 0.0 <= flatten_max <= 1.0) or flatten_min + flatten_max > 1.0:
        raise ValueError("-- Error: flattening proportions must be in [0,1] and sum to <= 1 --")
    _check_plane(plane)

    nb_min = int(floor(flatten_min * plane.size + 0.5))
    nb_max = int(floor(flatten_max * plane.size + 0.5))
    return normalize_histogram(plane, target_min, target_max, nb_min, nb_max)


def normalize_mean_std(plane:np.ndarray, reference:np.ndarray) -> np.ndarray:
    """
    Affine rescale of a plane, in place, so that its mean and standard deviation match a reference plane.

    Args:
        plane (np.ndarray): Input/output float plane.
        reference (np.ndarray): Reference plane, any shape.

    Returns:
        np.ndarray: plane, rescaled.
    """
    _check_plane(plane)
    _check_plane(reference)

    ref = reference.astype(np.float64)
    mean_ref, std_ref = float(ref.mean()), float(ref.std())
    data = plane.astype(np.float64)
    mean_out, std_out = float(data.mean()), float(data.std())

    if std_out == 0:
        plane.fill(mean_ref)
        return plane

    a = std_ref / std_out
    b = mean_ref - a * mean_out
    plane[...] = data * a + b
    return plane
