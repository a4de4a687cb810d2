from enum import Enum, auto


class FractalType(Enum):
    MANDELBROT = auto()
    JULIA_SET = auto()
    BURNING_SHIP = auto()
    MULTIBROT = auto()


class RunState(Enum):
    PENDING = auto()
    RUNNING = auto()
    COMPLETED = auto()
    CANCELLED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.CANCELLED)
