import numpy as np
import pytest

from mandelbrot import BOUNDED, MandelbrotSet


@pytest.fixture(params=[True, False], ids=["interior-check", "plain"])
def mandelbrot_set(request):
    return MandelbrotSet(max_iterations=100, interior_check=request.param)


def test_known_points(mandelbrot_set):
    assert mandelbrot_set.escape_time(0j) is None
    assert mandelbrot_set.escape_time(-1 + 0j) is None
    assert mandelbrot_set.escape_time(-2 + 0j) is None
    assert mandelbrot_set.escape_time(1j) is None


def test_escape_index_uses_strict_radius(mandelbrot_set):
    # z1 = 2 lies on the radius, z2 = 6 is outside
    assert mandelbrot_set.escape_time(2 + 0j) == 1
    # z1 = 1, z2 = 2, z3 = 5
    assert mandelbrot_set.escape_time(1 + 0j) == 2
    assert mandelbrot_set.escape_time(3 + 0j) == 0
    assert mandelbrot_set.escape_time(1 + 1j) == 1


def test_contains_and_convergence():
    mandelbrot_set = MandelbrotSet(max_iterations=50)
    assert -1 in mandelbrot_set
    assert 2 not in mandelbrot_set
    assert mandelbrot_set.convergence(-0.5 + 0j) == 1.0
    assert mandelbrot_set.convergence(2 + 0j) == pytest.approx(1 / 50)


def test_interior_check_does_not_change_results():
    checked = MandelbrotSet(max_iterations=300, interior_check=True)
    plain = MandelbrotSet(max_iterations=300, interior_check=False)
    for re in np.linspace(-2.0, 0.6, 53):
        for im in np.linspace(-1.2, 1.2, 41):
            c = complex(re, im)
            assert checked.escape_time(c) == plain.escape_time(c), c


@pytest.mark.parametrize("method", ["escape_row", "escape_row_compiled"])
def test_escape_row_matches_scalar(mandelbrot_set, method):
    re, im = np.meshgrid(np.linspace(-2.2, 0.8, 61), np.linspace(-1.3, 1.3, 27))
    points = re + 1j * im
    row = getattr(mandelbrot_set, method)(points)
    assert row.shape == points.shape
    assert row.dtype == np.int32
    expected = [[BOUNDED if n is None else n for n in map(mandelbrot_set.escape_time, line)]
                for line in points.tolist()]
    assert row.tolist() == expected


@pytest.mark.parametrize("method", ["escape_row", "escape_row_compiled"])
def test_escape_row_empty(method):
    assert getattr(MandelbrotSet(10), method)(np.empty(0, dtype=complex)).shape == (0,)


@pytest.mark.parametrize("interior_check", [True, False])
def test_compiled_row_matches_scalar_edge_points(interior_check):
    mandelbrot_set = MandelbrotSet(max_iterations=80, interior_check=interior_check)
    # Radius boundary, cardioid cusp, bulb edge and a far point
    points = np.array([2 + 0j, -2 + 0j, 0.25 + 0j, -0.75 + 0.1j, -1.25 + 0j, 0.3 + 0.5j, 40 - 40j])
    expected = [BOUNDED if n is None else n for n in map(mandelbrot_set.escape_time, points.tolist())]
    assert mandelbrot_set.escape_row_compiled(points).tolist() == expected


def test_custom_escape_radius():
    # Bigger radius, later escape
    assert MandelbrotSet(50, escape_radius=10.0).escape_time(2 + 0j) == 2


@pytest.mark.parametrize("kwargs", [
    {"max_iterations": 0},
    {"max_iterations": -5},
    {"max_iterations": 10, "escape_radius": 0.0},
    {"max_iterations": 10, "escape_radius": -2.0},
])
def test_rejects_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        MandelbrotSet(**kwargs)
