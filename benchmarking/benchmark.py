"""
Benchmark the band-parallel fractal engine.
Sweeps fractal types, resolutions and worker (band) counts.

Usage examples:
  python benchmarking/benchmark.py --fractals mandelbrot,julia_set --res 512x512,1024x1024 \
      --workers 1,4,16,64 --max-iter 255 --runs 3

  python benchmarking/benchmark.py --threads 8 --csv results.csv
"""

import os
import csv
import time
import argparse
import logging
import platform
from typing import List, Tuple

from fractalpool.rendering.executor import ComputePool
from fractalpool.rendering.service import FractalService
from fractalpool.utils.enums import FractalType

logger = logging.getLogger("benchmark")


# --- Helpers -----------------------------------------------------------------

def parse_resolution_list(res_str: str) -> List[Tuple[int, int]]:
    """
    Parse resolutions like "512x512,1024x1024".
    """
    if not res_str:
        return [(512, 512), (1024, 1024), (2048, 2048)]
    out: List[Tuple[int, int]] = []
    for token in res_str.split(','):
        token = token.strip().lower()
        if not token:
            continue
        w, h = token.split('x')
        out.append((int(w), int(h)))
    return out


def parse_int_list(token: str) -> List[int]:
    return [int(t) for t in token.split(',') if t.strip()]


def parse_fractals(token: str) -> List[FractalType]:
    return [FractalType[t.strip().upper()] for t in token.split(',') if t.strip()]


def benchmark_service(service: FractalService, runs: int) -> float:
    # Warm-up run pays for the numba compile.
    service.render()
    times = []
    for _ in range(runs):
        start = time.perf_counter()
        service.render()
        times.append(time.perf_counter() - start)
    return sum(times) / runs


# --- Main --------------------------------------------------------------------

def main() -> None:
    ap = argparse.ArgumentParser(description="Band-parallel fractal benchmark")
    ap.add_argument("--fractals", default="mandelbrot", help="Comma list of FractalType names")
    ap.add_argument("--res", default="", help="Comma list of WxH resolutions")
    ap.add_argument("--workers", default="1,2,4,8,16,64", help="Comma list of band counts")
    ap.add_argument("--threads", type=int, default=0, help="Thread pool size (0 = cpu count)")
    ap.add_argument("--max-iter", type=int, default=255)
    ap.add_argument("--escape", type=float, default=2.0)
    ap.add_argument("--runs", type=int, default=3)
    ap.add_argument("--csv", default="benchmark_results.csv")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    resolutions = parse_resolution_list(args.res)
    worker_counts = parse_int_list(args.workers)
    fractals = parse_fractals(args.fractals)
    cpu_info = platform.processor() or platform.machine()

    if os.path.exists(args.csv):
        os.remove(args.csv)

    pool = ComputePool(max_workers=args.threads or None)
    try:
        with open(args.csv, 'w', newline='') as f:
            writer = csv.writer(f)
            # Hardware summary header
            writer.writerow(['Hardware Summary'])
            writer.writerow(['CPU', cpu_info])
            writer.writerow(['Threads', pool.max_workers])
            writer.writerow([])
            writer.writerow(['Fractal', 'Resolution', 'Workers', 'Time (s)', 'FPS'])

            for kind in fractals:
                for width, height in resolutions:
                    for workers in worker_counts:
                        if height % workers != 0:
                            logger.info("Skipping %d workers for height %d (not a divisor)", workers, height)
                            continue
                        service = FractalService(width=width, height=height, fractal=kind,
                                                 max_iter=args.max_iter, escape_radius=args.escape,
                                                 workers=workers, pool=pool)
                        avg = benchmark_service(service, args.runs)
                        fps = 1.0 / avg if avg > 0 else 0.0
                        logger.info("%s %dx%d workers=%d: %.3fs | FPS: %.2f",
                                    kind.name, width, height, workers, avg, fps)
                        writer.writerow([kind.name, f'{width}x{height}', workers,
                                         f'{avg:.3f}', f'{fps:.2f}'])
        logger.info("Benchmark results saved to %s", args.csv)
    finally:
        pool.close()


if __name__ == '__main__':
    main()
