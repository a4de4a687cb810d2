from __future__ import annotations
from typing import Any, Dict, List

from fractalpool.utils.enums import FractalType

# [fractal] -> meta ("step", "escape_point", "escape_row", ...)
_REGISTRY: Dict[FractalType, Dict[str, Any]] = {}


def register_kernel(fractal: FractalType, **meta: Any) -> None:
    """
    Register kernel metadata for a given fractal.
    Example:
        register_kernel(FractalType.MANDELBROT, step=mandelbrot_step, escape_row=row_fn)
    """
    _REGISTRY[fractal] = meta


def load_kernel(fractal: FractalType) -> Dict[str, Any]:
    """
    Load kernel metadata from the registry for the given fractal.
    Raises KeyError if not found.
    """
    try:
        meta = _REGISTRY[fractal]
    except KeyError as e:
        raise KeyError(f"Kernel not found for fractal='{fractal}'") from e
    _validate_meta(fractal, meta)
    return meta


def list_kernels() -> List[FractalType]:
    return sorted(_REGISTRY, key=lambda f: f.value)


def _validate_meta(fractal: FractalType, meta: Dict[str, Any]) -> None:
    for key in ("step", "escape_point", "escape_row"):
        if key not in meta or not callable(meta[key]):
            raise KeyError(f"registry[{fractal.name}] must provide a callable '{key}'")
