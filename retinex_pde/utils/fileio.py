"""fileio.py: Image file read and write"""

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
import cv2 as cv
import numpy as np
from typing import List, Tuple
from glob import glob
import os


SUPPORTED_EXTENSIONS = ('bmp', 'dib', 'jpeg', 'jpg', 'jpe', 'jp2', 'png', 'webp', 'pbm', 'pgm', 'ppm', 'sr', 'ras', 'tiff', 'tif')



# --------------------------------------------------------------------------------------------
# Helper function
# --------------------------------------------------------------------------------------------
def _check_filepath(filepath:str) -> None:
    if filepath is None:
        raise ValueError("[FILEIO] Filepath cannot be None")
    if not isinstance(filepath, str):
        raise TypeError("[FILEIO] Provide absolute (e.g. C:Users/.../image.png) or relative (e.g. ../data/image.png) \
                        path to image location on your drive. \
                        Ensure you include the image name and its extension (e.g. /<MyPathWithoutBracket>/image.png")


def _to_rgb(image:np.ndarray) -> np.ndarray:
    """OpenCV channel order (BGR/BGRA) to RGB/RGBA. Gray images are returned as-is."""
    if image.ndim == 2:
        return image
    match image.shape[2]:
        case 1:
            return image[:, :, 0]
        case 2:
            return image
        case 3:
            return cv.cvtColor(image, cv.COLOR_BGR2RGB)
        case 4:
            return cv.cvtColor(image, cv.COLOR_BGRA2RGBA)
        case _:
            raise ValueError(f"[FILEIO] Unsupported number of channels: {image.shape[2]}")


def _to_bgr(image:np.ndarray) -> np.ndarray:
    """RGB/RGBA to OpenCV channel order."""
    if image.ndim == 2 or image.shape[2] == 2:
        return image
    if image.shape[2] == 3:
        return cv.cvtColor(image, cv.COLOR_RGB2BGR)
    return cv.cvtColor(image, cv.COLOR_RGBA2BGRA)



# --------------------------------------------------------------------------------------------
# Input
# --------------------------------------------------------------------------------------------
def imread(filepath:str) -> np.ndarray:
    """
    Reads in an 8-bit image as float32 values in [0,255]. Protects against returning None.

    Args:
        filepath (str): Directory to image, include image name and extension e.g. "data/image.png"

    Raises:
        ValueError: Filepath cannot be empty (None)
        TypeError: filepath must be a string (str)
        FileNotFoundError: file was not found in filepath directory

    Returns:
        np.ndarray: Image in RGB(A) order, shape (ny, nx) or (ny, nx, nc)
    """
    _check_filepath(filepath)
    image = cv.imread(filepath, cv.IMREAD_UNCHANGED)

    # Check image validity
    if image is None:
        raise FileNotFoundError(f"[FILEIO] Imread file not found or unreadable: {filepath}")
    if image.dtype != np.uint8:
        # 16-bit and float sources are reduced to 8 bits
        image = cv.normalize(image, None, 0, 255, cv.NORM_MINMAX, dtype=cv.CV_8U) if image.dtype != np.uint16 \
            else (image >> 8).astype(np.uint8)

    return _to_rgb(image).astype(np.float32)


def discover_image_files(
    input_dir: str,
    input_image_type: str|Tuple[str, ...] = SUPPORTED_EXTENSIONS
    ) -> List[str]:
    """
    Discovers and returns a list of image files in a directory matching the given type(s).

    Args:
        input_dir (str): Directory to search for input images.
        input_image_type (str | tuple[str, ...]): File extension(s) to include (e.g. "tif" or ("tif", "png"))

    Returns:
        List[str]: Sorted list of full paths to input image files.
    """
    if not os.path.isdir(input_dir):
        raise FileNotFoundError(f"[FILEIO] Directory not found: {input_dir}")
    if isinstance(input_image_type, str):
        input_image_type = (input_image_type,)

    input_files = []
    for file_extension in input_image_type:
        input_files.extend(glob(os.path.join(input_dir, f"*.{file_extension.lstrip('.')}")))

    return sorted(set(input_files))



# --------------------------------------------------------------------------------------------
# Output
# --------------------------------------------------------------------------------------------
def to_uint8(image:np.ndarray) -> np.ndarray:
    """Rounds and clips float values to 8-bit [0,255]."""
    return np.clip(np.floor(image + 0.5), 0, 255).astype(np.uint8)


def imwrite(filepath:str, image:np.ndarray) -> None:
    """
    Writes a float image (RGB(A) order, values in [0,255]) as 8-bit.

    Args:
        filepath (str): Output path, including the extension that selects the format.
        image (np.ndarray): Image, shape (ny, nx) or (ny, nx, nc).

    Raises:
        IOError: OpenCV could not write the file.
    """
    _check_filepath(filepath)

    out_dir = os.path.dirname(filepath)
    if out_dir and not os.path.exists(out_dir):
        os.makedirs(out_dir)

    try:
        written = cv.imwrite(filepath, _to_bgr(to_uint8(image)))
    except cv.error as e:
        # e.g. no writer for the extension
        raise IOError(f"[FILEIO] Failed to write image: {filepath}") from e
    if not written:
        raise IOError(f"[FILEIO] Failed to write image: {filepath}")
