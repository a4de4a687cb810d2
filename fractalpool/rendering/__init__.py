from .executor import ComputePool, RunHandle
from .partition import split_bands
from .service import FractalService
from .task import BandTask, CancelledRun, CancelToken, TaskFault

__all__ = [
    "ComputePool",
    "RunHandle",
    "split_bands",
    "FractalService",
    "BandTask",
    "CancelledRun",
    "CancelToken",
    "TaskFault",
]
