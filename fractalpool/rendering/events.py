from dataclasses import dataclass
import numpy as np
from typing import Optional

@dataclass(frozen=True)
class FrameEvent:
    data: np.ndarray    # (height, width) iteration counts
    width: int
    height: int
    seq: int            # generation / run sequence number

@dataclass(frozen=True)
class LogEvent:
    message: str
    level: Optional[str]
