import cv2 as cv
import numpy as np
import pytest

from retinex_pde import __version__
from retinex_pde.cli import build_parser, main


@pytest.fixture
def input_png(tmp_path, rng):
    path = tmp_path / "in.png"
    cv.imwrite(str(path), rng.integers(0, 256, size=(10, 8, 3), dtype=np.uint8))
    return path


def test_single_image(tmp_path, input_png):
    norm, rtnx = tmp_path / "norm.png", tmp_path / "rtnx.png"
    assert main(["-t", "5", str(input_png), str(norm), str(rtnx)]) == 0

    for path in (norm, rtnx):
        out = cv.imread(str(path), cv.IMREAD_UNCHANGED)
        assert out.shape == (10, 8, 3)
        assert out.min() == 0 and out.max() == 255


def test_all_options(tmp_path, input_png):
    args = ["-t", "2", "-T", "40", "-f", "0", "-F", "3", "-u", "-w", "2", "--no-cache", "-v",
            str(input_png), str(tmp_path / "n.png"), str(tmp_path / "r.png")]
    assert main(args) == 0
    assert (tmp_path / "r.png").exists()


def test_parser_defaults():
    args = build_parser().parse_args(["a", "b", "c"])
    assert (args.threshold_min, args.threshold_max) == (0.0, 255.0)
    assert args.flatten_min == pytest.approx(1.5)
    assert args.flatten_max == pytest.approx(1.5)
    assert args.u is None
    assert build_parser().parse_args(["a", "b", "c", "-u"]).u == 2.0
    assert build_parser().parse_args(["-u", "7.5", "a", "b", "c"]).u == 7.5
    assert "undamped" in build_parser().format_help()


@pytest.mark.parametrize("argv", [
    ["-t", "300", "a", "b", "c"],
    ["-t", "x", "a", "b", "c"],
    ["-u", "101", "a", "b", "c"],
    ["-f", "60", "-F", "60", "a", "b", "c"],
    ["-w", "0", "a", "b", "c"],
    ["a", "b"],
    ["--batch", "a", "b", "c"],
])
def test_invalid_arguments_exit_with_usage(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    assert exc.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_missing_input_returns_error(tmp_path):
    assert main([str(tmp_path / "none.png"), str(tmp_path / "n.png"), str(tmp_path / "r.png")]) == 1
    assert not (tmp_path / "n.png").exists()


def test_batch_skips_unreadable_files(tmp_path, rng):
    in_dir, out_dir = tmp_path / "in", tmp_path / "out"
    in_dir.mkdir()
    for name in ("a.png", "b.png"):
        cv.imwrite(str(in_dir / name), rng.integers(0, 256, size=(6, 7), dtype=np.uint8))
    (in_dir / "broken.png").write_bytes(b"not an image")

    with pytest.warns(UserWarning, match="broken.png"):
        assert main(["--batch", "-t", "3", str(in_dir), str(out_dir)]) == 0

    written = sorted(p.name for p in out_dir.iterdir())
    assert written == ["a_norm.png", "a_rtnx.png", "b_norm.png", "b_rtnx.png"]


def test_batch_empty_directory_returns_error(tmp_path):
    (tmp_path / "in").mkdir()
    assert main(["--batch", str(tmp_path / "in"), str(tmp_path / "out")]) == 1


def test_unknown_output_extension_returns_error(tmp_path, input_png):
    assert main([str(input_png), str(tmp_path / "n.xyz"), str(tmp_path / "r.xyz")]) == 1


def test_batch_unknown_output_extension_skips_files(tmp_path, input_png):
    out_dir = tmp_path / "out"
    with pytest.warns(UserWarning, match="in.png"):
        assert main(["--batch", "--ext", "xyz", str(tmp_path), str(out_dir)]) == 0
    assert list(out_dir.iterdir()) == []
