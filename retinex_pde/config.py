"""config.py: Retinex PDE run parameters"""

from __future__ import annotations

__author__ = "Gian-Mateo (GM) Tifone"
__copyright__ = "2025, RIT MISHA"
__credits__ = ["Gian-Mateo Tifone"]
__license__ = "MIT"
__version__ = "1.0.0"
__maintainer__ = "MISHA Team"
__email__ = "mt9485@rit.edu"
__status__ = "Development" # "Prototype", "Development", "Production"



# --------------------------------------------------------------------------------------------
# Imports
# --------------------------------------------------------------------------------------------
from dataclasses import dataclass
from math import inf, isnan


# Limits accepted on the command line
THRESHOLD_LIMITS = (0.0, 255.0)
U_LIMITS = (0.0, 100.0)

# Per-side saturation used by the historical command line (1.5% low + 1.5% high)
DEFAULT_FLATTEN = 0.015



# --------------------------------------------------------------------------------------------
# Configuration
# --------------------------------------------------------------------------------------------
@dataclass
class RetinexConfig:
    """
    Parameters of one Retinex PDE run.

    Args:
        threshold_low (float): Directional differences with |d| <= threshold_low are ignored. Defaults to 0.
        threshold_high (float): Directional differences with |d| > threshold_high are clamped to +-threshold_high. Defaults to inf (no clamp).
        flatten_min (float): Proportion, in [0,1], of darkest pixels saturated before rescaling. Defaults to 0.015.
        flatten_max (float): Proportion, in [0,1], of brightest pixels saturated before rescaling. Defaults to 0.015.
        u (float | None): Spectral damping strength. None selects the undamped Poisson kernel. Defaults to None.
        target_min (float): Output range minimum. Defaults to 0.
        target_max (float): Output range maximum. Defaults to 255.
        max_workers (int | None): Channel worker threads. None or 1 runs channels sequentially. Defaults to None.
        use_cache (bool): Re-use spectral coefficient tables between channels. Defaults to True.
        verbose (bool): Enable info logging and progress bars. Defaults to False.
    """
    threshold_low: float = 0.0
    threshold_high: float = inf
    flatten_min: float = DEFAULT_FLATTEN
    flatten_max: float = DEFAULT_FLATTEN
    u: float | None = None
    target_min: float = 0.0
    target_max: float = 255.0
    max_workers: int | None = None
    use_cache: bool = True
    verbose: bool = False


    def validate(self) -> "RetinexConfig":
        """Checks parameter ranges, raises ValueError on the first violation. Returns self."""
        if isnan(self.threshold_low) or isnan(self.threshold_high):
            raise ValueError("-- Error: retinex thresholds cannot be NaN --")
        if self.threshold_low < 0 or self.threshold_high < 0:
            raise ValueError("-- Error: retinex thresholds must be >= 0 --")
        if not (0.0 <= self.flatten_min <= 1.0 and 0.0 <= self.flatten_max <= 1.0):
            raise ValueError("-- Error: flattening proportions must be in [0,1] --")
        if self.flatten_min + self.flatten_max > 1.0:
            raise ValueError("-- Error: flatten_min + flatten_max must be <= 1 --")
        if self.u is not None and not (U_LIMITS[0] <= self.u <= U_LIMITS[1]):
            raise ValueError(f"-- Error: u must be in [{U_LIMITS[0]:g}..{U_LIMITS[1]:g}] --")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("-- Error: max_workers must be >= 1 --")
        return self
