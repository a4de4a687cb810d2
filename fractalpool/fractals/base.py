from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict

import numpy as np

from fractalpool.utils.enums import FractalType


# Iteration counts are stored as unsigned ints; max_iter never exceeds 255.
ITER_DTYPE = np.uint32


def _step(start: float, end: float, samples: int) -> float:
    if samples <= 1:
        return 0.0
    return (end - start) / (samples - 1)


@dataclass(frozen=True)
class Region:
    """
    Rectangle of the complex plane.
    (start_x, start_y) maps to pixel (0, 0), (end_x, end_y) to the last
    column / last row. Ends may be smaller than starts (flipped axes).
    """
    start_x: float
    start_y: float
    end_x: float
    end_y: float

    @property
    def width(self) -> float:
        return self.end_x - self.start_x

    @property
    def height(self) -> float:
        return self.end_y - self.start_y


@dataclass(frozen=True)
class FractalSpec:
    """
    Everything a single generation run needs.
    Fractal selects the recurrence, region the part of the plane to sample.
    Width and height are the size of the output grid in pixels.
    Max_iter caps the escape loop (1..255) and escape_radius is the
    magnitude beyond which an iterate counts as diverged.
    """
    fractal: FractalType
    region: Region
    width: int
    height: int
    max_iter: int = 255
    escape_radius: float = 2.0

    @property
    def step_x(self) -> float:
        return _step(self.region.start_x, self.region.end_x, self.width)

    @property
    def step_y(self) -> float:
        return _step(self.region.start_y, self.region.end_y, self.height)

    @property
    def shape(self):
        return self.height, self.width

    def with_region(self, region: Region) -> "FractalSpec":
        return replace(self, region=region)


@dataclass(frozen=True)
class Band:
    """
    Contiguous block of rows computed by one worker, together with the
    slice of the plane those rows sample.
    """
    index: int
    row_start: int
    row_count: int
    start_x: float
    start_y: float
    end_x: float
    end_y: float

    @property
    def rows(self) -> slice:
        return slice(self.row_start, self.row_start + self.row_count)


@dataclass(frozen=True)
class BandResult:
    index: int
    row_start: int
    row_count: int
    grid: np.ndarray    # (row_count, width) iteration counts


# Default view of each fractal when it is first selected or reset.
PRESET_REGIONS: Dict[FractalType, Region] = {
    FractalType.MANDELBROT:   Region(-2.15, -1.3, 0.6, 1.3),
    FractalType.BURNING_SHIP: Region(-1.8, -0.08, -1.7, 0.025),
    FractalType.JULIA_SET:    Region(-1.7, -1.0, 1.7, 1.0),
    FractalType.MULTIBROT:    Region(-1.0, -1.3, 1.0, 1.3),
}


def default_spec(
    fractal: FractalType,
    width: int,
    height: int,
    max_iter: int = 255,
    escape_radius: float = 2.0,
) -> FractalSpec:
    return FractalSpec(fractal=fractal,
                       region=PRESET_REGIONS[fractal],
                       width=int(width),
                       height=int(height),
                       max_iter=int(max_iter),
                       escape_radius=float(escape_radius))
