"""pipeline.py: File-level Retinex PDE pipeline

Implements: Retinex Poisson Equation, a model for color perception.
[Ref] Limare, Petro, Sbert, Morel, "Retinex Poisson Equation: a Model for Color Perception", IPOL 2011

Does: Removes illumination gradients while preserving local contrast.

Stages:
    0. Read image (8-bit, gray/RGB/RGBA)
    1. Balanced output - normalization only, 1.5% flattening per side
    2. Retinex output  - Retinex PDE per channel, then the same normalization
    3. Write both outputs
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
import os
import warnings
from time import time
from typing import Dict, Tuple

from tqdm import tqdm

from .channels import RetinexResult, process_image
from .config import RetinexConfig
from .poisson import SpectralCoefficientCache
from .utils.fileio import SUPPORTED_EXTENSIONS, discover_image_files, imread, imwrite


logger = logging.getLogger(__name__)



# --------------------------------------------------------------------------------------------
# Single image
# --------------------------------------------------------------------------------------------
def retinex_file(
    input_path:str,
    norm_path:str,
    rtnx_path:str,
    config:RetinexConfig|None = None,
    cache:SpectralCoefficientCache|None = None,
    ) -> RetinexResult:
    """
    Runs the Retinex PDE pipeline on one image file.

    Args:
        input_path (str): Image to read.
        norm_path (str): Output path of the balanced (normalized only) image.
        rtnx_path (str): Output path of the retinex image.
        config (RetinexConfig | None, optional): Run parameters. Defaults to RetinexConfig().
        cache (SpectralCoefficientCache | None, optional): Coefficient cache, re-usable across images. Defaults to None.

    Returns:
        RetinexResult: The float32 balanced and retinex images.
    """
    config = (config or RetinexConfig()).validate()
    start = time()

    image = imread(input_path)
    logger.info(f"[RETINEX] Read {input_path} {image.shape}")

    result = process_image(image, config, cache)

    imwrite(norm_path, result.balanced)
    imwrite(rtnx_path, result.retinex)

    logger.info(f"[RETINEX] Wrote {norm_path} and {rtnx_path} in {(time() - start):.2f}s")
    return result


def _output_paths(input_path:str, output_dir:str, extension:str) -> Tuple[str, str]:
    base, _ = os.path.splitext(os.path.basename(input_path))
    return (
        os.path.join(output_dir, f"{base}_norm.{extension}"),
        os.path.join(output_dir, f"{base}_rtnx.{extension}"),
    )



# --------------------------------------------------------------------------------------------
# Directory
# --------------------------------------------------------------------------------------------
def process_directory(
    input_dir:str,
    output_dir:str,
    input_image_types:str|tuple[str, ...] = SUPPORTED_EXTENSIONS,
    output_extension:str = "png",
    config:RetinexConfig|None = None,
    ) -> Dict[str, Tuple[str, str]]:
    """
    Runs the Retinex PDE pipeline on every image of a directory.

    Args:
        input_dir (str):
            Directory containing the input images.
        output_dir (str):
            Output directory. Each input <name> gives <name>_norm and <name>_rtnx.
        input_image_types (str | tuple[str, ...], optional):
            File extension(s) without the `.` (e.g. tif, png, jpg). Defaults to every OpenCV-readable type.
        output_extension (str, optional):
            Output file format. Defaults to "png".
        config (RetinexConfig | None, optional):
            Run parameters. Defaults to RetinexConfig().

    Returns:
        Dict[str, Tuple[str, str]]: {input path: (balanced path, retinex path)} for every image processed.
    """
    config = (config or RetinexConfig()).validate()
    input_files = discover_image_files(input_dir, input_image_types)

    # Check input data exists
    if not input_files: raise FileNotFoundError(f"No input images found in {input_dir} with extension(s): {input_image_types}")

    os.makedirs(output_dir, exist_ok=True)
    cache = SpectralCoefficientCache() if config.use_cache else None
    written = {}

    for path in tqdm(input_files, desc="[RETINEX] Images", unit="img", colour="CYAN", disable=not config.verbose):
        norm_path, rtnx_path = _output_paths(path, output_dir, output_extension)
        try:
            retinex_file(path, norm_path, rtnx_path, config, cache)
        except (OSError, ValueError, ArithmeticError, RuntimeError, MemoryError) as e:
            warnings.warn(f"Failed to process image '{path}': {e}")
            logger.error(f"[RETINEX] Skipped {path}: {e}")
            continue
        written[path] = (norm_path, rtnx_path)

    logger.info(f"[RETINEX] Complete. {len(written)}/{len(input_files)} image(s) written to: {output_dir}")
    return written
