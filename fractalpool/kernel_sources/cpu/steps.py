from numba import njit

from fractalpool.kernel_sources.cpu.escape import build_point_kernel, build_row_kernel
from fractalpool.kernel_sources.registry import register_kernel
from fractalpool.utils.enums import FractalType


# Fixed Julia parameter c = cx + i*cy.
JULIA_CX = -0.726895347709114071439
JULIA_CY = 0.188887129043845954792


@njit(nogil=True)
def mandelbrot_step(x, y, x0, y0):
    return x * x - y * y + x0, 2.0 * x * y + y0


@njit(nogil=True)
def burning_ship_step(x, y, x0, y0):
    return x * x - y * y + x0, abs(2.0 * x * y) + y0


@njit(nogil=True)
def julia_step(x, y, x0, y0):
    # The seed only picks the starting iterate; every update adds c.
    return x * x - y * y + JULIA_CX, 2.0 * x * y + JULIA_CY


@njit(nogil=True)
def multibrot_step(x, y, x0, y0):
    return x * x * x - 3.0 * x * y * y + x0, 3.0 * x * x * y - y * y * y + y0


def _register(fractal, step):
    escape_point = build_point_kernel(step)
    register_kernel(
        fractal,
        step=step,
        escape_point=escape_point,
        escape_row=build_row_kernel(escape_point),
    )


_register(FractalType.MANDELBROT, mandelbrot_step)
_register(FractalType.BURNING_SHIP, burning_ship_step)
_register(FractalType.JULIA_SET, julia_step)
_register(FractalType.MULTIBROT, multibrot_step)
