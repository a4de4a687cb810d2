import math

from numba import njit


def build_point_kernel(step):
    """
    Escape-time loop for a single seed, specialised on a compiled step
    function. Returns the number of steps taken before |z| left the escape
    radius, or max_iter if it never did.
    """
    @njit(nogil=True)
    def escape_point(x0, y0, max_iter, escape_radius):
        x = x0
        y = y0
        dist = x * x + y * y
        n = 0
        # Compare |z| itself, not |z|^2 against radius^2.
        while n < max_iter and math.sqrt(dist) <= escape_radius:
            n += 1
            x, y = step(x, y, x0, y0)
            dist = x * x + y * y
        return n

    return escape_point


def build_row_kernel(escape_point):
    """Fills one row of iteration counts; seeds march along x by step_x."""
    @njit(nogil=True)
    def escape_row(out_row, x_start, step_x, y0, max_iter, escape_radius):
        for col in range(out_row.shape[0]):
            x0 = x_start + step_x * col
            out_row[col] = escape_point(x0, y0, max_iter, escape_radius)

    return escape_row
