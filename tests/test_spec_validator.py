import math

import pytest

from fractalpool.fractals.base import FractalSpec, PRESET_REGIONS, Region, default_spec
from fractalpool.fractals.spec_validator import ConfigError, validate_fractal_spec
from fractalpool.utils.enums import FractalType


def _spec(**kw):
    base = dict(fractal=FractalType.MANDELBROT, region=Region(-2.0, -1.0, 1.0, 1.0),
                width=8, height=8, max_iter=50, escape_radius=2.0)
    base.update(kw)
    return FractalSpec(**base)


def test_valid_spec_passes():
    validate_fractal_spec(_spec(), 4)
    validate_fractal_spec(_spec(max_iter=1))
    validate_fractal_spec(_spec(max_iter=255))


@pytest.mark.parametrize("kw", [
    {"max_iter": 0},
    {"max_iter": 256},
    {"escape_radius": 0.0},
    {"escape_radius": -2.0},
    {"escape_radius": math.nan},
    {"width": 0},
    {"height": -4},
    {"region": Region(-2.0, math.inf, 1.0, 1.0)},
    {"fractal": "mandelbrot"},
])
def test_invalid_spec_raises_config_error(kw):
    with pytest.raises(ConfigError):
        validate_fractal_spec(_spec(**kw))


def test_worker_count_must_divide_height():
    with pytest.raises(ConfigError, match="does not evenly divide"):
        validate_fractal_spec(_spec(height=10), 4)


def test_errors_are_aggregated():
    with pytest.raises(ConfigError) as info:
        validate_fractal_spec(_spec(max_iter=300, escape_radius=-1.0, width=0))
    msg = str(info.value)
    assert "Iterations must be between 1 - 255" in msg
    assert "Escape radius" in msg
    assert "width" in msg


def test_config_error_is_a_value_error():
    assert issubclass(ConfigError, ValueError)


def test_default_spec_uses_preset_region():
    spec = default_spec(FractalType.BURNING_SHIP, 64, 32)
    assert spec.region == PRESET_REGIONS[FractalType.BURNING_SHIP]
    assert (spec.max_iter, spec.escape_radius) == (255, 2.0)
    assert spec.shape == (32, 64)
    validate_fractal_spec(spec, 32)
