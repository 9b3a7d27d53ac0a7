#!/usr/bin/env python3

"""retinex_pde/__init__.py: Import header for the Retinex PDE pipeline"""

__version__ = "1.0.0"

from .config import RetinexConfig
from .errors import (
    RetinexError,
    InvalidDimensionError,
    ArithmeticRangeError,
    AllocationError,
    ComputationError,
    FlattenRangeWarning,
)
from .normalize import normalize, normalize_histogram, normalize_mean_std
from .laplacian import discrete_laplacian
from .poisson import SpectralCoefficientCache, solve_spectral
from .retinex import retinex_pde
from .channels import RetinexResult, balance_channels, retinex_channels, process_image
from .pipeline import retinex_file, process_directory

__all__ = [
    "RetinexConfig",
    "RetinexError",
    "InvalidDimensionError",
    "ArithmeticRangeError",
    "AllocationError",
    "ComputationError",
    "FlattenRangeWarning",
    "normalize",
    "normalize_histogram",
    "normalize_mean_std",
    "discrete_laplacian",
    "SpectralCoefficientCache",
    "solve_spectral",
    "retinex_pde",
    "RetinexResult",
    "balance_channels",
    "retinex_channels",
    "process_image",
    "retinex_file",
    "process_directory",
]


# -----------------------------------------------
# Authorship Information
# -----------------------------------------------
__author__ = "Gian-Mateo (GM) Tifone"
__copyright__ = "2025, RIT MISHA"
__credits__ = ["Gian-Mateo Tifone"]
__license__ = "MIT"
__maintainer__ = "MISHA Team"
__email__ = "mt9485@rit.edu"
__status__ = "Development" # "Prototype", "Development", "Production"
