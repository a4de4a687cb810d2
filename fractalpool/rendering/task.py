from __future__ import annotations

import threading
from typing import Optional

import numpy as np

from fractalpool.fractals.base import Band, BandResult, FractalSpec, ITER_DTYPE
from fractalpool.kernel_sources import load_kernel


class CancelledRun(Exception):
    """Raised inside a band when its run was cancelled; never user-visible."""


class TaskFault(RuntimeError):
    """A band failed to compute. Carries the band so the fault can be reported."""

    def __init__(self, band: Band, cause: BaseException) -> None:
        super().__init__(f"Band {band.index} (rows {band.row_start}..{band.row_start + band.row_count - 1}) "
                         f"failed: {cause!r}")
        self.band = band
        self.cause = cause


class CancelToken:
    """
    Cancellation flag shared by every band of a run. BandTask checks it
    between rows, so a band stops at the next row boundary, not mid-row.
    """

    def __init__(self) -> None:
        self._flag = threading.Event()
    def cancel(self) -> None:
        self._flag.set()
    def is_cancelled(self) -> bool:
        return self._flag.is_set()


class BandTask:
    """
    Computes the iteration counts of one band of rows.

    The kernel is resolved from the registry once, when the task is built,
    so the per-pixel loop never branches on the fractal type. Cancellation
    is checked between rows.
    """

    def __init__(self, spec: FractalSpec) -> None:
        self.spec = spec
        self._escape_row = load_kernel(spec.fractal)["escape_row"]

    def run(
        self,
        band: Band,
        *,
        out: Optional[np.ndarray] = None,
        cancel: Optional[CancelToken] = None,
    ) -> BandResult:
        spec = self.spec
        W = int(spec.width)
        if out is None:
            out = np.zeros((band.row_count, W), dtype=ITER_DTYPE)
        elif out.shape != (band.row_count, W):
            raise ValueError(f"Output buffer shape {out.shape} does not match band ({band.row_count}, {W})")

        step_x = float(spec.step_x)
        step_y = float(spec.step_y)
        max_iter = int(spec.max_iter)
        radius = float(spec.escape_radius)
        start_y = float(spec.region.start_y)

        for r in range(band.row_count):
            if cancel is not None and cancel.is_cancelled():
                raise CancelledRun(f"band {band.index} cancelled at row {band.row_start + r}")
            # Same expression for a row whatever band it lands in.
            y0 = start_y + step_y * (band.row_start + r)
            self._escape_row(out[r], float(band.start_x), step_x, y0, max_iter, radius)

        return BandResult(band.index, band.row_start, band.row_count, out)
