from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Callable, List, Optional, Set

import numpy as np

from fractalpool.fractals.base import Band, FractalSpec, ITER_DTYPE
from fractalpool.fractals.spec_validator import validate_fractal_spec
from fractalpool.rendering.partition import split_bands
from fractalpool.rendering.task import BandTask, CancelledRun, CancelToken, TaskFault
from fractalpool.utils.enums import RunState

logger = logging.getLogger(__name__)

CompleteCallback = Callable[[np.ndarray], None]
ErrorSink = Callable[[TaskFault], None]


# ---- Run state ----------------------------------------------------------

class GenerationRun:
    """
    Bookkeeping for one generation request. Every field except the grid
    rows owned by the bands is guarded by the pool lock.
    """

    def __init__(self, seq: int, spec: FractalSpec, bands: List[Band],
                 on_complete: Optional[CompleteCallback]) -> None:
        self.seq = seq
        self.spec = spec
        self.bands = bands
        self.on_complete = on_complete
        self.token = CancelToken()
        self.state = RunState.PENDING

        # Preallocated target; each band gets an exclusive view of its rows.
        self.grid: Optional[np.ndarray] = np.zeros(spec.shape, dtype=ITER_DTYPE)
        self.outstanding: Set[int] = {b.index for b in bands}
        self.futures: List[Future] = []
        self.faults: List[TaskFault] = []
        self.result: Optional[np.ndarray] = None
        self.done = threading.Event()
        self.t0 = time.perf_counter()


class RunHandle:
    """Caller-side view of a run started by ComputePool.start_run()."""

    def __init__(self, run: GenerationRun, pool: "ComputePool") -> None:
        self._run = run
        self._pool = pool

    @property
    def seq(self) -> int:
        return self._run.seq

    @property
    def spec(self) -> FractalSpec:
        return self._run.spec

    @property
    def state(self) -> RunState:
        return self._run.state

    @property
    def faults(self) -> List[TaskFault]:
        return list(self._run.faults)

    @property
    def outstanding(self) -> int:
        return len(self._run.outstanding)

    def done(self) -> bool:
        return self._run.done.is_set()

    def wait(self, timeout: Optional[float] = None) -> Optional[np.ndarray]:
        """
        Block until the run completes or is cancelled.
        Returns the full grid, or None when the run was cancelled.
        """
        if not self._run.done.wait(timeout):
            raise TimeoutError(f"Run {self.seq} did not finish within {timeout}s")
        return self._run.result

    @property
    def result(self) -> Optional[np.ndarray]:
        return self.wait()

    def cancel(self) -> None:
        self._pool._cancel_locked(self._run)


# ---- Coordinator --------------------------------------------------------

class ComputePool:
    """
    Runs the bands of a fractal on a fixed-size thread pool and hands the
    merged grid to a completion callback once every band has reported.

    At most one run is live at a time: starting a run cancels the previous
    one, and results arriving for a run that is no longer live are dropped.
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        *,
        on_error: Optional[ErrorSink] = None,
        telemetry: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.max_workers = int(max_workers or os.cpu_count() or 1)
        self.on_error = on_error
        self.log = telemetry or (lambda *_: None)

        self._executor = ThreadPoolExecutor(max_workers=self.max_workers,
                                            thread_name_prefix="fractal-band")
        self._lock = threading.RLock()
        self._live: Optional[GenerationRun] = None
        self._seq = 0
        self._closed = False

    # ---- Lifecycle ------------------------------------------------------

    def __enter__(self) -> "ComputePool":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._cancel(self._live)
        self._executor.shutdown(wait=True, cancel_futures=True)

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return self._live is not None

    # ---- Runs -----------------------------------------------------------

    def start_run(
        self,
        spec: FractalSpec,
        num_workers: int,
        on_complete: Optional[CompleteCallback] = None,
    ) -> RunHandle:
        """
        Validate, split into bands and dispatch. Returns without waiting.
        ConfigError is raised here, before anything is cancelled or submitted.
        """
        validate_fractal_spec(spec, num_workers)
        bands = split_bands(spec, num_workers)
        task = BandTask(spec)

        with self._lock:
            if self._closed:
                raise RuntimeError("ComputePool is closed")
            self._cancel(self._live)

            self._seq += 1
            run = GenerationRun(self._seq, spec, bands, on_complete)
            self._live = run
            run.state = RunState.RUNNING
            for band in bands:
                fut = self._executor.submit(task.run, band,
                                            out=run.grid[band.rows],
                                            cancel=run.token)
                run.futures.append(fut)
                fut.add_done_callback(partial(self._on_band_done, run, band))

        logger.debug("Run %d started: %s %dx%d across %d bands",
                     run.seq, spec.fractal.name, spec.width, spec.height, len(bands))
        return RunHandle(run, self)

    def cancel_run(self) -> None:
        """Cancel the live run, if any. on_complete will not fire for it."""
        with self._lock:
            self._cancel(self._live)

    def _cancel_locked(self, run: GenerationRun) -> None:
        with self._lock:
            self._cancel(run)

    def _cancel(self, run: Optional[GenerationRun]) -> None:
        if run is None or run.state.is_terminal:
            return
        run.token.cancel()
        for fut in run.futures:
            fut.cancel()
        run.state = RunState.CANCELLED
        run.outstanding.clear()
        run.grid = None
        if self._live is run:
            self._live = None
        run.done.set()
        logger.debug("Run %d cancelled", run.seq)

    # ---- Completion -----------------------------------------------------

    def _on_band_done(self, run: GenerationRun, band: Band, fut: Future) -> None:
        if fut.cancelled():
            return
        exc = fut.exception()
        if isinstance(exc, CancelledRun):
            return

        fault: Optional[TaskFault] = None
        finished = False
        with self._lock:
            if run is not self._live or run.state is not RunState.RUNNING:
                logger.debug("Dropping band %d of superseded run %d", band.index, run.seq)
                return

            if exc is None:
                res = fut.result()
                run.grid[res.row_start:res.row_start + res.row_count] = res.grid
            else:
                fault = TaskFault(band, exc)
                fault.__cause__ = exc
                run.faults.append(fault)

            run.outstanding.discard(band.index)
            if not run.outstanding:
                # Terminal from here on: a later cancel_run is a no-op.
                run.state = RunState.COMPLETED
                run.result = run.grid
                self._live = None
                finished = True

        # Consumer code runs without the lock held.
        if fault is not None:
            self._report(fault)
        if finished:
            self._finish(run)

    def _finish(self, run: GenerationRun) -> None:
        elapsed = (time.perf_counter() - run.t0) * 1000.0
        self.log(f"[ComputePool] run {run.seq} finished {len(run.bands)} bands in {elapsed:.2f} ms")
        try:
            if run.on_complete is not None:
                run.on_complete(run.result)
        except Exception:
            logger.exception("Completion callback for run %d failed", run.seq)
        finally:
            run.done.set()

    def _report(self, fault: TaskFault) -> None:
        if self.on_error is not None:
            try:
                self.on_error(fault)
                return
            except Exception:
                logger.exception("Error sink failed while reporting %s", fault)
        logger.error("%s", fault, exc_info=fault.cause)
