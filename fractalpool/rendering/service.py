from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, Optional, Tuple

import numpy as np

from fractalpool.fractals.base import FractalSpec, Region, PRESET_REGIONS
from fractalpool.fractals.spec_validator import validate_fractal_spec, validate_worker_count
from fractalpool.rendering.events import FrameEvent, LogEvent
from fractalpool.rendering.executor import ComputePool, RunHandle
from fractalpool.rendering.task import TaskFault
from fractalpool.utils.coords import pixel_rect_to_region
from fractalpool.utils.enums import FractalType

logger = logging.getLogger(__name__)


class FractalService:
    """
    Consumer-facing facade that owns:
      - configuration (fractal, region, image size, escape settings, workers),
      - lifecycle (start/stop/shutdown),
      - event dispatch (frame/log).

    Every setter validates before it changes anything, so a rejected value
    leaves the previous configuration in place. Settings only take effect
    on the next start_render().
    """

    def __init__(
        self,
        width: int = 2048,
        height: int = 2048,
        fractal: FractalType = FractalType.MANDELBROT,
        max_iter: int = 255,
        escape_radius: float = 2.0,
        workers: int = 64,
        pool: Optional[ComputePool] = None,
    ) -> None:
        # ----- Compute config -----
        self._spec = FractalSpec(fractal=fractal,
                                 region=PRESET_REGIONS[fractal],
                                 width=int(width),
                                 height=int(height),
                                 max_iter=int(max_iter),
                                 escape_radius=float(escape_radius))
        self.workers = int(workers)
        validate_fractal_spec(self._spec, self.workers)

        # ----- Execution -----
        self.pool = pool or ComputePool()
        self._downstream_sink = self.pool.on_error
        self.pool.on_error = self._on_fault
        self._handle: Optional[RunHandle] = None
        self._render_seq = 0
        self._start_time: Optional[float] = None

        # Callbacks
        self.on_frame: Optional[Callable[[FrameEvent], None]] = None
        self.on_log: Optional[Callable[[LogEvent], None]] = None

    # ---------------------------------------------------------------------
    # Configuration
    # ---------------------------------------------------------------------

    @property
    def spec(self) -> FractalSpec:
        return self._spec

    @property
    def handle(self) -> Optional[RunHandle]:
        """Handle of the most recently started run."""
        return self._handle

    @property
    def fractal(self) -> FractalType:
        return self._spec.fractal

    def _update(self, spec: FractalSpec) -> None:
        validate_fractal_spec(spec, self.workers)
        self._spec = spec

    def set_fractal(self, fractal: FractalType) -> None:
        """Switch fractal and jump to its default view."""
        self._update(replace(self._spec, fractal=fractal, region=PRESET_REGIONS[fractal]))

    def reset_view(self) -> None:
        self._update(self._spec.with_region(PRESET_REGIONS[self._spec.fractal]))

    def set_region(self, region: Region) -> None:
        self._update(self._spec.with_region(region))

    def zoom(self, p0: Tuple[float, float], p1: Tuple[float, float]) -> Region:
        """Zoom into the pixel rectangle spanned by p0 and p1."""
        region = pixel_rect_to_region(self._spec, p0, p1)
        self.set_region(region)
        return region

    def set_max_iter(self, new_max: int) -> None:
        self._update(replace(self._spec, max_iter=int(new_max)))

    def set_escape_radius(self, radius: float) -> None:
        self._update(replace(self._spec, escape_radius=float(radius)))

    def set_image_size(self, width: int, height: int) -> None:
        self._update(replace(self._spec, width=int(width), height=int(height)))

    def set_workers(self, workers: int) -> None:
        validate_worker_count(self._spec.height, int(workers))
        self.workers = int(workers)

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------

    def start_render(self) -> RunHandle:
        """Start a run for the current configuration, superseding any other."""
        self._render_seq += 1
        self._start_time = time.time()
        spec, seq = self._spec, self._render_seq
        handle = self.pool.start_run(spec, self.workers,
                                     on_complete=lambda grid: self._on_complete(spec, seq, grid))
        self._handle = handle
        return handle

    def render(self, timeout: Optional[float] = None) -> Optional[np.ndarray]:
        """Blocking render. Returns None if the run was superseded or stopped."""
        return self.start_render().wait(timeout)

    def stop(self) -> None:
        self.pool.cancel_run()
        self._handle = None

    def shutdown(self) -> None:
        """Stop and release the worker threads."""
        try:
            self.stop()
        finally:
            self.pool.close()

    # ---------------------------------------------------------------------
    # Pool callbacks
    # ---------------------------------------------------------------------

    def _on_complete(self, spec: FractalSpec, seq: int, grid: np.ndarray) -> None:
        if self.on_frame:
            self.on_frame(FrameEvent(grid, int(spec.width), int(spec.height), seq))
        if self._start_time is not None:
            elapsed = round(time.time() - self._start_time, 3)
            logger.info("Render time: %ss", elapsed)
            if self.on_log:
                self.on_log(LogEvent(f"Render time: {elapsed}s", level=None))

    def _on_fault(self, fault: TaskFault) -> None:
        logger.error("[FractalService] %s", fault, exc_info=fault.cause)
        if self.on_log:
            self.on_log(LogEvent(f"[FractalService] {fault}", level="error"))
        # An injected pool keeps its own sink after ours.
        if self._downstream_sink is not None:
            self._downstream_sink(fault)
