import numpy as np
import pytest

from retinex_pde.errors import ComputationError, InvalidDimensionError
from retinex_pde.laplacian import discrete_laplacian
from retinex_pde.normalize import normalize
from retinex_pde.poisson import SpectralCoefficientCache
from retinex_pde.retinex import retinex_pde


def test_zero_plane_gives_zero():
    out = retinex_pde(np.zeros((6, 5), dtype=np.float32))
    assert out.dtype == np.float32
    assert np.all(out == 0)


@pytest.mark.parametrize("shape", [(1, 5), (5, 1), (1, 1)])
def test_too_small_planes_rejected(shape):
    with pytest.raises(InvalidDimensionError):
        retinex_pde(np.ones(shape, dtype=np.float32))


def test_non_2d_rejected():
    with pytest.raises(InvalidDimensionError):
        retinex_pde(np.ones(16, dtype=np.float32))
    with pytest.raises(InvalidDimensionError):
        retinex_pde(np.ones((4, 4, 3), dtype=np.float32))


def test_without_threshold_recovers_zero_mean_input(rng):
    # DCT-III(DCT-II(x)) = 4 nx ny x, only the DC term is lost
    plane = (rng.random((9, 14)) * 255).astype(np.float32)
    out = retinex_pde(plane)

    expected = 4.0 * (plane.astype(np.float64) - plane.astype(np.float64).mean())
    np.testing.assert_allclose(out, expected, atol=2e-2)


def test_solution_satisfies_poisson_equation(rng):
    plane = (rng.random((8, 11)) * 255).astype(np.float32)
    out = retinex_pde(plane, threshold_low=10.0, threshold_high=60.0)

    gated = discrete_laplacian(plane, 10.0, 60.0).astype(np.float64)
    np.testing.assert_allclose(discrete_laplacian(out) / 4.0, gated, atol=5e-2)
    assert abs(float(out.astype(np.float64).mean())) < 1e-2


def _mirror(a:np.ndarray) -> np.ndarray:
    top = np.hstack([a, a[:, ::-1]])
    return np.vstack([top, top[::-1, :]])


def test_matches_mirrored_fourier_solve(rng):
    ny, nx = 7, 10
    plane = (rng.random((ny, nx)) * 255).astype(np.float32)
    out = retinex_pde(plane, threshold_low=8.0, threshold_high=90.0)

    spectrum = np.fft.fft2(_mirror(discrete_laplacian(plane, 8.0, 90.0).astype(np.float64)))
    ky = np.arange(2 * ny)[:, np.newaxis]
    kx = np.arange(2 * nx)[np.newaxis, :]
    denom = 4.0 - 2.0 * np.cos(np.pi * kx / nx) - 2.0 * np.cos(np.pi * ky / ny)
    denom[0, 0] = 1.0
    spectrum /= denom
    spectrum[0, 0] = 0.0
    reference = np.fft.ifft2(spectrum).real[:ny, :nx]

    # unnormalized DCT pair: x 4
    np.testing.assert_allclose(out, 4.0 * reference, atol=5e-2)


def test_threshold_removes_smooth_gradient():
    # small steps of a linear ramp are all below the threshold
    y, x = np.mgrid[0:16, 0:16]
    plane = (2.0 * x + y).astype(np.float32)
    out = retinex_pde(plane, threshold_low=3.0)
    assert np.allclose(out, 0.0, atol=1e-3)


def test_impulse_is_deterministic():
    plane = np.zeros((4, 4), dtype=np.float32)
    plane[1, 2] = 100.0

    first = retinex_pde(plane.copy(), threshold_low=5.0)
    second = retinex_pde(plane.copy(), threshold_low=5.0)
    assert first.tobytes() == second.tobytes()
    assert first[1, 2] == first.max()


def test_impulse_end_to_end_without_threshold():
    plane = np.zeros((4, 4), dtype=np.float32)
    plane[1, 2] = 100.0

    runs = [normalize(retinex_pde(plane.copy(), threshold_low=0.0), 0, 255, 0, 0) for _ in range(2)]
    assert runs[0].tobytes() == runs[1].tobytes()

    # same image up to float rounding, but not bit-identical
    balanced = normalize(plane.copy(), 0, 255, 0, 0)
    np.testing.assert_allclose(runs[0], balanced, atol=1e-3)
    assert runs[0].tobytes() != balanced.tobytes()


def test_retinex_differs_from_balance_only():
    # illumination ramp below the threshold plus a reflectance step above it
    y, x = np.mgrid[0:8, 0:12]
    plane = (2.0 * x + 100.0 * (x >= 6)).astype(np.float32)

    retinex = normalize(retinex_pde(plane, threshold_low=3.0), 0, 255)
    balanced = normalize(plane.copy(), 0, 255)

    assert not np.array_equal(retinex, balanced)
    # the ramp is gone: each side of the step is flat
    assert np.ptp(retinex[:, :6]) < 1e-2
    assert np.ptp(retinex[:, 6:]) < 1e-2


def test_damping_changes_result(rng):
    plane = (rng.random((8, 8)) * 255).astype(np.float32)
    plain = retinex_pde(plane)
    damped = retinex_pde(plane, u=2.0)

    assert not np.allclose(plain, damped)
    assert np.linalg.norm(damped) < np.linalg.norm(plain)
    assert abs(float(damped.astype(np.float64).mean())) < 1e-2


def test_cache_is_reused(rng):
    cache = SpectralCoefficientCache()
    plane = (rng.random((6, 7)) * 255).astype(np.float32)

    a = retinex_pde(plane, cache=cache)
    b = retinex_pde(plane, cache=cache)
    np.testing.assert_array_equal(a, b)
    np.testing.assert_array_equal(a, retinex_pde(plane))
    assert cache.rebuilds == 1


def test_in_place_output(rng):
    plane = (rng.random((5, 6)) * 255).astype(np.float32)
    expected = retinex_pde(plane, threshold_low=4.0)

    out = retinex_pde(plane, threshold_low=4.0, out=plane)
    assert out is plane
    np.testing.assert_array_equal(out, expected)


def test_input_left_untouched(rng):
    plane = (rng.random((5, 6)) * 255).astype(np.float32)
    before = plane.copy()
    retinex_pde(plane, threshold_low=4.0)
    np.testing.assert_array_equal(plane, before)


def test_bad_output_buffer(rng):
    plane = rng.random((5, 6)).astype(np.float32)
    with pytest.raises(ValueError):
        retinex_pde(plane, out=np.empty((6, 5), dtype=np.float32))
    with pytest.raises(ValueError):
        retinex_pde(plane, out=np.empty((5, 6), dtype=np.float64))


def test_dct_failure_is_reported(monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("planner failure")

    monkeypatch.setattr("scipy.fft.dctn", _boom)
    with pytest.raises(ComputationError):
        retinex_pde(np.ones((4, 4), dtype=np.float32))
