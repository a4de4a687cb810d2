# Kernel sources package
from .registry import register_kernel, load_kernel, list_kernels
from . import cpu  # noqa: F401

__all__ = [
    "load_kernel",
    "register_kernel",
    "list_kernels",
]
