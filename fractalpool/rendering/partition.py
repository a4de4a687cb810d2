from __future__ import annotations

from typing import List

from fractalpool.fractals.base import Band, FractalSpec
from fractalpool.fractals.spec_validator import validate_worker_count


def split_bands(spec: FractalSpec, num_workers: int) -> List[Band]:
    """
    Stripe splitting along y: num_workers bands of equal height, ordered by
    index, covering every row of the image exactly once.
    Raises ConfigError when the worker count does not divide the height.
    """
    height = int(spec.height)
    parts = int(num_workers)
    validate_worker_count(height, parts)

    r = spec.region
    step_y = spec.step_y
    band_h = height // parts

    bands: List[Band] = []
    for i in range(parts):
        off = i * band_h
        bands.append(Band(
            index=i,
            row_start=off,
            row_count=band_h,
            start_x=r.start_x,
            start_y=r.start_y + step_y * off,
            end_x=r.end_x,
            end_y=r.start_y + step_y * (off + band_h - 1),
        ))
    return bands


def band_rows(bands: List[Band]) -> List[int]:
    """Flattened list of the rows covered by the bands, in band order."""
    rows: List[int] = []
    for b in bands:
        rows.extend(range(b.row_start, b.row_start + b.row_count))
    return rows
