"""
scripts/bench_rnn_to_cnn_paths.py

Benchmark script (NOT a unit test) for `RnnToCnnPreProcessor`.

It measures `pre_process` / `backprop` for the three forward dispatch cases:
- mini-batch of one        (N == 1)
- time series length one   (T == 1)
- general                  (permute + reshape)

and compares each against a plain NumPy reference
(``x.transpose(0, 2, 1).reshape(N*T, C, H, W)``).

Usage examples
--------------
# Default shapes
python scripts/bench_rnn_to_cnn_paths.py

# Larger images, more repeats
python scripts/bench_rnn_to_cnn_paths.py --C 16 --H 32 --W 32 --repeats 50

Notes
-----
- Timings include Python call overhead; they measure end-to-end cost at the
  Python API level.
"""

from __future__ import annotations

import os
import sys

# Ensure repo_root/src is importable when running this file directly:
# repo_root/
#   src/layerflow/...
#   scripts/bench_rnn_to_cnn_paths.py
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")

if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

import argparse
import statistics
import time
from typing import Callable

import numpy as np

from layerflow.infrastructure._preprocessors import RnnToCnnPreProcessor
from layerflow.infrastructure._tensor import Tensor
from layerflow.infrastructure.layers._layer_state import LayerState


def _time(fn: Callable[[], object], *, repeats: int, warmup: int) -> float:
    for _ in range(warmup):
        fn()
    samples = []
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        samples.append(time.perf_counter() - t0)
    return statistics.median(samples)


def bench_case(
    n: int, t: int, c: int, h: int, w: int, *, repeats: int, warmup: int
) -> None:
    pre = RnnToCnnPreProcessor(h, w, c)
    x_np = np.random.randn(n, c * h * w, t).astype(np.float32)
    x = Tensor.from_numpy(x_np)
    layer = LayerState()
    layer.set_input(x)
    y = pre.pre_process(x, layer)

    fwd = _time(lambda: pre.pre_process(x, layer), repeats=repeats, warmup=warmup)
    bwd = _time(lambda: pre.backprop(y, layer), repeats=repeats, warmup=warmup)
    ref = _time(
        lambda: np.ascontiguousarray(x_np.transpose(0, 2, 1)).reshape(n * t, c, h, w),
        repeats=repeats,
        warmup=warmup,
    )

    print(
        f"N={n:<4d} T={t:<4d} CHW={c}x{h}x{w:<4d} "
        f"pre_process={fwd * 1e6:9.1f}us  backprop={bwd * 1e6:9.1f}us  "
        f"numpy_ref={ref * 1e6:9.1f}us"
    )


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--C", type=int, default=4)
    ap.add_argument("--H", type=int, default=16)
    ap.add_argument("--W", type=int, default=16)
    ap.add_argument("--N", type=int, default=32)
    ap.add_argument("--T", type=int, default=20)
    ap.add_argument("--repeats", type=int, default=20)
    ap.add_argument("--warmup", type=int, default=3)
    args = ap.parse_args()

    np.random.seed(0)
    for n, t in [(1, args.T), (args.N, 1), (args.N, args.T)]:
        bench_case(
            n, t, args.C, args.H, args.W, repeats=args.repeats, warmup=args.warmup
        )


if __name__ == "__main__":
    main()
