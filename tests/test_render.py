import pytest

from mandelbrot import (BOUNDED, AspectPolicy, MandelbrotSet, RenderConfig, RenderError, Resolution,
                        Strategy, Viewport, pixel_to_point, render, render_image)


@pytest.mark.parametrize("kernel", ["numba", "python", "numpy"])
def test_scenario_golden(scenario, scenario_golden, kernel):
    viewport, resolution, max_iterations = scenario
    buffer = render_image(viewport, resolution, max_iterations, 4, kernel=kernel)
    assert buffer.values.tolist() == scenario_golden
    assert buffer.get(0, 1) is None and buffer.get(1, 1) is None
    assert buffer.get(3, 0) == 1 and buffer.get(3, 1) == 2


@pytest.mark.parametrize("options", [
    {"worker_count": 8},
    {"worker_count": 3, "strategy": Strategy.STATIC},
    {"worker_count": 8, "strategy": "static", "chunk_rows": 1},
    {"worker_count": 5, "chunk_rows": 4},
    {"worker_count": 8, "kernel": "numpy"},
    {"worker_count": 2, "kernel": "numpy", "chunk_rows": 3, "strategy": "static"},
    {"worker_count": 8, "kernel": "numba"},
    {"worker_count": 3, "kernel": "numba", "chunk_rows": 2, "strategy": "static"},
    {"worker_count": 6, "kernel": "numba", "chunk_rows": 1},
    {"worker_count": 64},
])
def test_output_independent_of_scheduling(seahorse, options):
    viewport, resolution, max_iterations = seahorse
    sequential = render_image(viewport, resolution, max_iterations, 1, kernel="python")
    assert render_image(viewport, resolution, max_iterations, **options) == sequential


def test_render_is_idempotent(seahorse):
    viewport, resolution, max_iterations = seahorse
    config = RenderConfig(max_iterations=max_iterations, workers=4)
    first = render(viewport, resolution, config)
    second = render(viewport, resolution, config)
    assert first == second
    assert first is not second


def test_render_matches_pointwise_evaluation(seahorse):
    viewport, resolution, max_iterations = seahorse
    buffer = render_image(viewport, resolution, max_iterations, 4)
    mandelbrot_set = MandelbrotSet(max_iterations)
    for y in range(resolution.height):
        for x in range(resolution.width):
            assert buffer.get(x, y) == mandelbrot_set.escape_time(pixel_to_point(resolution, (x, y), viewport))


def test_buffer_is_frozen(scenario):
    viewport, resolution, max_iterations = scenario
    buffer = render_image(viewport, resolution, max_iterations, 2)
    assert buffer.frozen
    assert not buffer.values.flags.writeable


def test_expand_aspect_changes_viewport(scenario):
    viewport, _, max_iterations = scenario
    resolution = Resolution(5, 5)
    stretched = render_image(viewport, resolution, max_iterations, 2)
    expanded = render_image(viewport, resolution, max_iterations, 2, aspect=AspectPolicy.EXPAND)
    assert expanded != stretched
    assert expanded == render_image(viewport.fit(resolution, "expand"), resolution, max_iterations, 2)


def test_strict_aspect_refuses_mismatch(scenario):
    viewport, _, max_iterations = scenario
    with pytest.raises(ValueError):
        render_image(viewport, Resolution(5, 5), max_iterations, 2, aspect="strict")


def test_worker_fault_fails_whole_render(scenario, monkeypatch):
    viewport, resolution, max_iterations = scenario
    original = MandelbrotSet.escape_time

    def faulty(self, c):
        if c.real == 1.0 and c.imag == 0.0:
            raise OverflowError("unchecked arithmetic")
        return original(self, c)

    monkeypatch.setattr(MandelbrotSet, "escape_time", faulty)
    with pytest.raises(RenderError) as excinfo:
        render_image(viewport, resolution, max_iterations, 4, kernel="python")
    assert isinstance(excinfo.value.__cause__, OverflowError)


def test_compiled_kernel_is_the_default():
    assert RenderConfig().kernel == "numba"


def test_default_worker_count_uses_cpu_count(monkeypatch):
    monkeypatch.setattr("os.cpu_count", lambda: 6)
    assert RenderConfig().worker_count == 6
    assert RenderConfig(workers=2).worker_count == 2


@pytest.mark.parametrize("kwargs", [
    {"kernel": "cuda"},
    {"workers": 0},
    {"chunk_rows": 0},
    {"max_iterations": 0},
    {"strategy": "round-robin"},
    {"aspect": "crop"},
])
def test_config_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        RenderConfig(**kwargs)


def test_single_row_and_column_images():
    viewport = Viewport(-2.0 + 1.0j, 1.0 - 1.0j)
    row = render_image(viewport, Resolution(4, 1), 50, 3)
    column = render_image(viewport, Resolution(1, 3), 50, 3)
    assert row.values.tolist() == [[0, 2, BOUNDED, 1]]
    assert column.values.tolist() == [[0], [BOUNDED], [0]]
