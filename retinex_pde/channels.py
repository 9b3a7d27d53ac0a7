"""channels.py: Per-channel orchestration of the Retinex PDE and normalization

An image is split into independent planes (R, G, B[, A]). Each non-alpha plane is
    - retinex: Retinex PDE, then normalized to [0,255] with 1.5% flattening per side
    - balanced: normalized only, same flattening, for side-by-side comparison
The alpha plane, if any, is copied untouched. There is no cross-channel coupling.
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
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List

import numpy as np
from tqdm import tqdm

from .config import RetinexConfig
from .errors import InvalidDimensionError
from .normalize import normalize_histogram
from .poisson import SpectralCoefficientCache
from .retinex import retinex_pde


logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------------------------
# Custom Datatypes
# --------------------------------------------------------------------------------------------
Plane = np.ndarray

@dataclass
class RetinexResult:
    balanced: np.ndarray    # normalized only, shape (ny, nx[, nc])
    retinex: np.ndarray     # retinex + normalized, shape (ny, nx[, nc])



# --------------------------------------------------------------------------------------------
# Helper Functions
# --------------------------------------------------------------------------------------------
def non_alpha_channels(nc:int) -> int:
    """Images have either 1 (gray) or 3 (RGB) non-alpha channels."""
    if nc < 1 or nc > 4:
        raise InvalidDimensionError(f"-- Error: unsupported number of channels: {nc} --")
    return 3 if nc >= 3 else 1


def split_planes(image:np.ndarray) -> List[Plane]:
    """
    Deinterlaces an image into independent float32 planes.

    Args:
        image (np.ndarray): Image of shape (ny, nx) or (ny, nx, nc).

    Returns:
        List[np.ndarray]: nc contiguous float32 planes of shape (ny, nx).
    """
    if image.ndim == 2:
        return [np.array(image, dtype=np.float32, order="C")]
    if image.ndim != 3:
        raise InvalidDimensionError(f"-- Error: image must be 2D or 3D, got shape {image.shape} --")
    non_alpha_channels(image.shape[2])
    return [np.array(image[:, :, c], dtype=np.float32, order="C") for c in range(image.shape[2])]


def merge_planes(planes:List[Plane]) -> np.ndarray:
    """Interlaces planes back into an image; a single plane gives a 2D image."""
    if not planes:
        raise InvalidDimensionError("-- Error: no planes to merge --")
    if len(planes) == 1:
        return planes[0]
    return np.stack(planes, axis=-1)


def _normalize_plane(plane:Plane, config:RetinexConfig) -> Plane:
    """Image normalization: flatten counts are truncated, int(proportion * size), not rounded."""
    nb_min = int(config.flatten_min * plane.size)
    nb_max = int(config.flatten_max * plane.size)
    return normalize_histogram(plane, config.target_min, config.target_max, nb_min, nb_max)


def _run_channels(
    planes:List[Plane],
    channel_fn:Callable[[Plane], Plane],
    config:RetinexConfig,
    desc:str,
    ) -> List[Plane]:
    """Applies channel_fn to every non-alpha plane, sequentially or on a thread pool. Alpha is copied."""
    nc_non_alpha = non_alpha_channels(len(planes))
    outputs = [plane.copy() for plane in planes]

    prog_bar = tqdm(total=nc_non_alpha, desc=desc, unit="ch", colour="CYAN") if config.verbose else None
    try:
        if config.max_workers is None or config.max_workers == 1 or nc_non_alpha == 1:
            for c in range(nc_non_alpha):
                outputs[c] = channel_fn(outputs[c])
                if prog_bar is not None: prog_bar.update(1)
        else:
            with ThreadPoolExecutor(max_workers=config.max_workers) as ex:
                futures = [ex.submit(channel_fn, outputs[c]) for c in range(nc_non_alpha)]
                # results kept in channel order
                for c, future in enumerate(futures):
                    outputs[c] = future.result()
                    if prog_bar is not None: prog_bar.update(1)
    finally:
        if prog_bar is not None: prog_bar.close()

    return outputs



# --------------------------------------------------------------------------------------------
# Channel Orchestration
# --------------------------------------------------------------------------------------------
def balance_channels(planes:List[Plane], config:RetinexConfig|None = None) -> List[Plane]:
    """
    Normalizes a copy of each non-alpha plane (no retinex).

    Args:
        planes (List[np.ndarray]): 1, 3 or 4 planes. Left untouched.
        config (RetinexConfig | None, optional): Target range and flattening. Defaults to RetinexConfig().

    Returns:
        List[np.ndarray]: Balanced planes, alpha copied.
    """
    config = (config or RetinexConfig()).validate()

    def _balance(plane:Plane) -> Plane:
        return _normalize_plane(plane, config)

    return _run_channels(planes, _balance, config, desc="[BALANCE] Channels")


def retinex_channels(
    planes:List[Plane],
    config:RetinexConfig|None = None,
    cache:SpectralCoefficientCache|None = None,
    ) -> List[Plane]:
    """
    Runs the Retinex PDE then the normalization on a copy of each non-alpha plane.

    Args:
        planes (List[np.ndarray]): 1, 3 or 4 planes of identical shape. Left untouched.
        config (RetinexConfig | None, optional): Run parameters. Defaults to RetinexConfig().
        cache (SpectralCoefficientCache | None, optional): Coefficient cache shared by the channels.
            If None and config.use_cache, a cache local to this call is used. Defaults to None.

    Returns:
        List[np.ndarray]: Retinex planes, alpha copied.
    """
    config = (config or RetinexConfig()).validate()
    if cache is None and config.use_cache:
        cache = SpectralCoefficientCache()

    def _retinex(plane:Plane) -> Plane:
        retinex_pde(plane, config.threshold_low, config.threshold_high, config.u, cache, out=plane)
        return _normalize_plane(plane, config)

    return _run_channels(planes, _retinex, config, desc="[RETINEX] Channels")


def process_image(
    image:np.ndarray,
    config:RetinexConfig|None = None,
    cache:SpectralCoefficientCache|None = None,
    ) -> RetinexResult:
    """
    Produces the balanced and the retinex versions of an image.

    Args:
        image (np.ndarray): Decoded image, shape (ny, nx) or (ny, nx, nc), values in [0,255].
        config (RetinexConfig | None, optional): Run parameters. Defaults to RetinexConfig().
        cache (SpectralCoefficientCache | None, optional): Coefficient cache. Defaults to None.

    Returns:
        RetinexResult: float32 images with the input layout.
    """
    config = (config or RetinexConfig()).validate()
    planes = split_planes(image)
    logger.info(f"[RETINEX] Processing {planes[0].shape[1]}x{planes[0].shape[0]} image, {len(planes)} channel(s)")

    balanced = balance_channels(planes, config)
    retinex = retinex_channels(planes, config, cache)

    return RetinexResult(balanced=merge_planes(balanced), retinex=merge_planes(retinex))
