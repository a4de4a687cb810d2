from .base import (Band, BandResult, FractalSpec, Region, PRESET_REGIONS,
                   ITER_DTYPE, default_spec)
from .spec_validator import ConfigError, validate_fractal_spec

__all__ = [
    "Band",
    "BandResult",
    "FractalSpec",
    "Region",
    "PRESET_REGIONS",
    "ITER_DTYPE",
    "default_spec",
    "ConfigError",
    "validate_fractal_spec",
]
