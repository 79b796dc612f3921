#!/usr/bin/env python3
"""Measure how many updates per second the collection loop sustains.

Usage:
  python scripts/bench_collector.py [--updates N] [--producers P] [--memory]

Every update rewrites a file, so the number mostly reflects the file system.
"""

from __future__ import annotations

import argparse
import tempfile
import threading
import time

from statdir import Collector, MemoryFileSystem
from statdir.metrics import metrics


def main() -> int:
    p = argparse.ArgumentParser(description="Benchmark the statdir collection loop")
    p.add_argument("--updates", type=int, default=10000, help="Total increments to send")
    p.add_argument("--producers", type=int, default=4, help="Number of producer threads")
    p.add_argument("--memory", action="store_true", help="Use the in-memory file system")
    args = p.parse_args()

    with tempfile.TemporaryDirectory() as tmp:
        fs = MemoryFileSystem() if args.memory else None
        c = Collector(f"{tmp}/STAT", fs=fs)
        c.add_counter("FOO")
        per_producer = max(1, args.updates // args.producers)

        def _produce() -> None:
            for _ in range(per_producer):
                c.inc("FOO", 1)

        with c:
            threads = [threading.Thread(target=_produce) for _ in range(args.producers)]
            t0 = time.perf_counter()
            for t in threads:
                t.start()
            for t in threads:
                t.join()
            elapsed = time.perf_counter() - t0

        total = c.value_of("FOO")
        writes = metrics.snapshot()["timings"].get("collector.write_duration", {})
        print(f"{total} updates from {args.producers} producers in {elapsed:.3f}s ({total / elapsed:.0f}/s)")
        if writes:
            print(f"mean write {writes['mean'] * 1e6:.1f}us, worst {writes['max'] * 1e6:.1f}us")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
