"""Parallel escape-time fractal engine: row bands on a thread pool."""
from fractalpool.fractals import (Band, BandResult, ConfigError, FractalSpec,
                                  Region, PRESET_REGIONS, default_spec)
from fractalpool.rendering import (BandTask, ComputePool, FractalService,
                                   RunHandle, TaskFault, split_bands)
from fractalpool.utils.enums import FractalType, RunState

__version__ = "0.3.0"

__all__ = [
    "Band",
    "BandResult",
    "BandTask",
    "ComputePool",
    "ConfigError",
    "FractalService",
    "FractalSpec",
    "FractalType",
    "PRESET_REGIONS",
    "Region",
    "RunHandle",
    "RunState",
    "TaskFault",
    "default_spec",
    "split_bands",
]
