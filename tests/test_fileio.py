import os

import cv2 as cv
import numpy as np
import pytest

from retinex_pde.utils.fileio import discover_image_files, imread, imwrite, to_uint8


def test_to_uint8_rounds_half_up_and_clips():
    values = np.array([-3.0, 0.49, 0.5, 127.5, 254.6, 300.0], dtype=np.float32)
    np.testing.assert_array_equal(to_uint8(values), [0, 0, 1, 128, 255, 255])


def test_rgb_channel_order_survives_roundtrip(tmp_path):
    image = np.zeros((4, 5, 3), dtype=np.float32)
    image[:, :, 0] = 255.0  # red
    path = str(tmp_path / "red.png")
    imwrite(path, image)

    # OpenCV stores BGR
    assert np.all(cv.imread(path)[:, :, 2] == 255)
    back = imread(path)
    assert back.dtype == np.float32
    np.testing.assert_array_equal(back, image)


def test_gray_and_alpha_images(tmp_path):
    gray = np.arange(20, dtype=np.float32).reshape(4, 5)
    imwrite(str(tmp_path / "gray.png"), gray)
    assert imread(str(tmp_path / "gray.png")).shape == (4, 5)

    rgba = np.full((3, 3, 4), 10.0, dtype=np.float32)
    rgba[:, :, 3] = 200.0
    imwrite(str(tmp_path / "rgba.png"), rgba)
    np.testing.assert_array_equal(imread(str(tmp_path / "rgba.png")), rgba)


def test_sixteen_bit_input_reduced_to_eight(tmp_path):
    path = str(tmp_path / "deep.png")
    cv.imwrite(path, np.full((2, 2), 0xFF00, dtype=np.uint16))
    assert np.all(imread(path) == 255.0)


def test_imwrite_creates_directories(tmp_path):
    path = tmp_path / "a" / "b" / "out.png"
    imwrite(str(path), np.zeros((2, 2), dtype=np.float32))
    assert path.exists()


def test_imread_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        imread(str(tmp_path / "missing.png"))
    with pytest.raises(ValueError):
        imread(None)
    with pytest.raises(TypeError):
        imread(42)


def test_discover_image_files(tmp_path):
    for name in ("b.png", "a.png", "c.tif", "notes.txt"):
        (tmp_path / name).write_bytes(b"")

    found = discover_image_files(str(tmp_path), ("png", ".tif"))
    assert [os.path.basename(p) for p in found] == ["a.png", "b.png", "c.tif"]
    assert len(discover_image_files(str(tmp_path), "png")) == 2

    with pytest.raises(FileNotFoundError):
        discover_image_files(str(tmp_path / "nope"))


def test_imwrite_unknown_extension(tmp_path):
    with pytest.raises(IOError):
        imwrite(str(tmp_path / "out.xyz"), np.zeros((2, 2), dtype=np.float32))


def test_utils_authorship_matches_package():
    import retinex_pde
    import retinex_pde.utils

    assert retinex_pde.utils.__author__ == retinex_pde.__author__
