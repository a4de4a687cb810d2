from __future__ import annotations

import math
from typing import List, Optional

from fractalpool.fractals.base import FractalSpec
from fractalpool.utils.enums import FractalType


MIN_ITER = 1
MAX_ITER = 255


class ConfigError(ValueError):
    """Aggregated FractalSpec / worker-count validation error(s)."""


def _spec_errors(spec: FractalSpec) -> List[str]:
    errors: List[str] = []

    if not isinstance(spec.fractal, FractalType):
        errors.append(f"Unknown fractal type {spec.fractal!r}.")

    # --- image size ---
    if int(spec.width) < 1:
        errors.append(f"Image width must be positive, got {spec.width}.")
    if int(spec.height) < 1:
        errors.append(f"Image height must be positive, got {spec.height}.")

    # --- escape loop ---
    if not MIN_ITER <= int(spec.max_iter) <= MAX_ITER:
        errors.append(f"Iterations must be between {MIN_ITER} - {MAX_ITER}, not {spec.max_iter}.")
    radius = float(spec.escape_radius)
    if not math.isfinite(radius) or radius <= 0:
        errors.append(f"Escape radius must be a positive number, got {spec.escape_radius}.")

    # --- region ---
    r = spec.region
    for name in ("start_x", "start_y", "end_x", "end_y"):
        if not math.isfinite(getattr(r, name)):
            errors.append(f"Region {name} must be finite, got {getattr(r, name)}.")

    return errors


def _worker_errors(height: int, num_workers: int, check_height: bool = True) -> List[str]:
    errors: List[str] = []
    if check_height and height < 1:
        errors.append(f"Image height must be positive, got {height}.")
    if num_workers < 1:
        errors.append(f"Worker count must be at least 1, got {num_workers}.")
    elif height >= 1:
        if num_workers > height:
            errors.append(f"Worker count {num_workers} exceeds image height {height}.")
        elif height % num_workers != 0:
            errors.append(f"Worker count {num_workers} does not evenly divide image height {height}.")
    return errors


def validate_fractal_spec(spec: FractalSpec, num_workers: Optional[int] = None) -> None:
    """
    Validates a FractalSpec (and optionally the worker count it will be
    split across). Raises ConfigError listing every problem found.
    """
    errors = _spec_errors(spec)
    if num_workers is not None:
        # Height itself is already checked above.
        errors.extend(_worker_errors(int(spec.height), int(num_workers), check_height=False))

    if errors:
        raise ConfigError("FractalSpec validation failed:\n- " + "\n- ".join(errors))


def validate_worker_count(height: int, num_workers: int) -> None:
    errors = _worker_errors(int(height), int(num_workers))
    if errors:
        raise ConfigError("Worker count validation failed:\n- " + "\n- ".join(errors))
