from typing import Tuple

from fractalpool.fractals.base import FractalSpec, Region
from fractalpool.fractals.spec_validator import ConfigError


def pixel_to_plane(px, py, spec: FractalSpec) -> Tuple[float, float]:
    fx = spec.region.start_x + spec.step_x * px
    fy = spec.region.start_y + spec.step_y * py
    return fx, fy


def pixel_rect_to_region(spec: FractalSpec, p0, p1) -> Region:
    """
    Plane region selected by the pixel rectangle with opposite corners p0
    and p1 (either order). The smaller pixel coordinate becomes the start.
    """
    (ax, ay), (bx, by) = p0, p1
    x_lo, x_hi = sorted((ax, bx))
    y_lo, y_hi = sorted((ay, by))
    if x_lo == x_hi or y_lo == y_hi:
        raise ConfigError(f"Zoom rectangle {p0} -> {p1} has no area.")

    r = spec.region
    sx = r.width / spec.width
    sy = r.height / spec.height
    return Region(start_x=r.start_x + sx * x_lo,
                  start_y=r.start_y + sy * y_lo,
                  end_x=r.start_x + sx * x_hi,
                  end_y=r.start_y + sy * y_hi)
