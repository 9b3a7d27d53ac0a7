"""errors.py: Exception and warning taxonomy for the Retinex PDE pipeline"""

__author__ = "Gian-Mateo (GM) Tifone"
__copyright__ = "2025, RIT MISHA"
__credits__ = ["Gian-Mateo Tifone"]
__license__ = "MIT"
__version__ = "1.0.0"
__maintainer__ = "MISHA Team"
__email__ = "mt9485@rit.edu"
__status__ = "Development" # "Prototype", "Development", "Production"



# --------------------------------------------------------------------------------------------
# Errors (unrecoverable for the current call)
# --------------------------------------------------------------------------------------------
class RetinexError(Exception):
    """Base class of every error raised by the numeric core."""


class InvalidDimensionError(RetinexError, ValueError):
    """Plane dimensions are non-positive, or too small for the transform (nx < 2 or ny < 2)."""


class ArithmeticRangeError(RetinexError, ArithmeticError):
    """The rounded data range cannot be represented as an integer histogram."""


class AllocationError(RetinexError, MemoryError):
    """A scratch buffer (histogram, Laplacian, spectrum) could not be allocated."""


class ComputationError(RetinexError, RuntimeError):
    """The external DCT library failed to plan or execute a transform."""



# --------------------------------------------------------------------------------------------
# Warnings (recoverable, processing continues)
# --------------------------------------------------------------------------------------------
class FlattenRangeWarning(UserWarning):
    """Too many pixels were requested for flattening; counts were clamped to (size - 1) // 2."""
