import sys
import threading
from pathlib import Path

import pytest

# Add repo root to path
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from fractalpool.fractals.base import FractalSpec, Region
from fractalpool.rendering import executor as executor_mod
from fractalpool.rendering.task import BandTask
from fractalpool.utils.enums import FractalType


@pytest.fixture
def scenario_spec():
    """The 4x4 Mandelbrot overview used throughout the engine tests."""
    return FractalSpec(fractal=FractalType.MANDELBROT,
                       region=Region(-2.15, -1.3, 0.6, 1.3),
                       width=4, height=4,
                       max_iter=10, escape_radius=2.0)


@pytest.fixture
def small_spec():
    return FractalSpec(fractal=FractalType.MANDELBROT,
                       region=Region(-2.15, -1.3, 0.6, 1.3),
                       width=24, height=16,
                       max_iter=60, escape_radius=2.0)


class GatedTask:
    """
    BandTask stand-in whose bands block on a per-band gate and can be told
    to fail, so tests control completion order.
    """
    gates = {}
    failing = set()

    def __init__(self, spec):
        self._inner = BandTask(spec)

    def run(self, band, *, out=None, cancel=None):
        gate = self.gates.get(band.index)
        if gate is not None:
            gate.wait(10)
        if band.index in self.failing:
            raise ArithmeticError(f"band {band.index} blew up")
        return self._inner.run(band, out=out, cancel=cancel)


@pytest.fixture
def gated(monkeypatch):
    """Patch the pool to use GatedTask; returns a helper to create gates."""
    GatedTask.gates = {}
    GatedTask.failing = set()
    monkeypatch.setattr(executor_mod, "BandTask", GatedTask)

    class Gates:
        def close(self, *indices):
            for i in indices:
                GatedTask.gates[i] = threading.Event()

        def open(self, *indices):
            for i in indices:
                GatedTask.gates[i].set()

        def fail(self, *indices):
            GatedTask.failing.update(indices)

    return Gates()
