from . import steps  # noqa: F401  (registers the CPU kernels)
