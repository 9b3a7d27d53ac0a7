"""cli.py: Command-line interface for the Retinex PDE

The input image is normalized to [0-255], saturating a percentage of pixels (--flatten-min,
--flatten-max) at both ends of the histogram, and saved as the balanced image. The same
input is processed by the Retinex PDE, with two thresholds in the discrete laplacian
(--threshold-min, --threshold-max) and an optional damping (-u) of the DCT coefficients,
then normalized the same way and saved as the retinex image.
"""

from __future__ import annotations

__author__ = "Gian-Mateo (GM) Tifone"
__copyright__ = "2025, RIT MISHA"
__credits__ = ["Gian-Mateo Tifone"]
__license__ = "MIT"
__version__ = "1.0.1"
__maintainer__ = "MISHA Team"
__email__ = "mt9485@rit.edu"
__status__ = "Development" # "Prototype", "Development", "Production"



# --------------------------------------------------------------------------------------------
# Imports
# --------------------------------------------------------------------------------------------
import argparse
import logging
from typing import Callable, Sequence

from . import __version__ as package_version
from .config import DEFAULT_FLATTEN, THRESHOLD_LIMITS, U_LIMITS, RetinexConfig
from .errors import RetinexError
from .pipeline import process_directory, retinex_file


logger = logging.getLogger("retinex_pde")


# --------------------------------------------------------------------------------------------
# Argument types
# --------------------------------------------------------------------------------------------
def _bounded(lo:float, hi:float, what:str) -> Callable[[str], float]:
    """argparse type: float in [lo, hi]."""
    def _parse(text:str) -> float:
        try:
            value = float(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"{what} must be a number, got '{text}'")
        if not (lo <= value <= hi):
            raise argparse.ArgumentTypeError(f"{what} must be in [{lo:g}..{hi:g}], got {value:g}")
        return value
    return _parse


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="retinex-pde",
        description="PDE implementation of the Land Retinex theory",
    )
    p.add_argument("paths", nargs="+",
                   help="input_image norm_image rtnx_image, or input_dir output_dir with --batch")
    p.add_argument("-t", "--threshold-min", type=_bounded(*THRESHOLD_LIMITS, "the retinex thresholds"), default=0.0,
                   help="Retinex min threshold, differences below are ignored. [0..255], default 0.")
    p.add_argument("-T", "--threshold-max", type=_bounded(*THRESHOLD_LIMITS, "the retinex thresholds"), default=255.0,
                   help="Retinex max threshold, differences above are clamped. [0..255], default 255.")
    p.add_argument("-f", "--flatten-min", type=_bounded(0.0, 100.0, "the flattening percentage"), default=DEFAULT_FLATTEN * 100,
                   help="Percentage of darkest pixels saturated. [0..100], default 1.5.")
    p.add_argument("-F", "--flatten-max", type=_bounded(0.0, 100.0, "the flattening percentage"), default=DEFAULT_FLATTEN * 100,
                   help="Percentage of brightest pixels saturated. [0..100], default 1.5.")
    p.add_argument("-u", type=_bounded(*U_LIMITS, "the u parameter"), nargs="?", const=2.0, default=None,
                   help="Damp the DCT coefficients with parameter U. [0..100], 2 if given without value. "
                        "Without -u the plain (undamped) Poisson kernel is used.")
    p.add_argument("-w", "--workers", type=int, default=None,
                   help="Number of channel worker threads. Default sequential.")
    p.add_argument("--no-cache", action="store_true",
                   help="Recompute the spectral coefficients for every channel.")
    p.add_argument("--batch", action="store_true",
                   help="Process every image of input_dir, writing <name>_norm / <name>_rtnx to output_dir.")
    p.add_argument("--ext", default="png",
                   help="Output file format in --batch mode. Default png.")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Print progress information.")
    p.add_argument("--version", action="version", version=f"%(prog)s {package_version}")
    return p



# --------------------------------------------------------------------------------------------
# Driver Code
# --------------------------------------------------------------------------------------------
def main(argv:Sequence[str]|None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    n_expected = 2 if args.batch else 3
    if len(args.paths) != n_expected:
        parser.error(f"expected {n_expected} paths, got {len(args.paths)}")
    if args.flatten_min + args.flatten_max > 100.0:
        parser.error("the flattening percentages must sum to <= 100")
    if args.workers is not None and args.workers < 1:
        parser.error("the number of workers must be >= 1")

    # Verbose enables info, else prints warnings/errors only
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(message)s",
    )

    config = RetinexConfig(
        threshold_low=args.threshold_min,
        threshold_high=args.threshold_max,
        flatten_min=args.flatten_min / 100.0,
        flatten_max=args.flatten_max / 100.0,
        u=args.u,
        max_workers=args.workers,
        use_cache=not args.no_cache,
        verbose=args.verbose,
    )
    logger.debug(f"[CLI] params: {config}")

    try:
        if args.batch:
            process_directory(args.paths[0], args.paths[1], output_extension=args.ext, config=config)
        else:
            retinex_file(*args.paths, config=config)
    except (RetinexError, OSError, ValueError) as e:
        logger.error(f"[CLI] {e}")
        return 1

    return 0
