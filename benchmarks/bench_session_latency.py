"""Benchmark: attribute operation latency — per-call p50/p99.

Measures set_attribute/get_attribute round trips against the in-memory
store, which isolates the session layer's own overhead (two store calls,
listener dispatch and a TTL batch per operation) from network latency.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from redis_session_manager import (
    CookieSessionConfig,
    InMemoryStoreClient,
    RequestContext,
    SessionManager,
)

_WARMUP: int = 200
_ITERATIONS: int = 5_000


def bench_attribute_latency() -> dict[str, object]:
    """Benchmark one set_attribute + get_attribute pair per iteration.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p50_latency_ms, p99_latency_ms.
    """
    config = CookieSessionConfig()
    manager = SessionManager(InMemoryStoreClient(), config)
    session = manager.create_session(RequestContext(), config)

    for i in range(_WARMUP):
        session.set_attribute(f"warmup-{i % 10}", str(i))

    latencies_ms: list[float] = []
    for i in range(_ITERATIONS):
        name = f"attr-{i % 50}"
        t0 = time.perf_counter()
        session.set_attribute(name, str(i))
        session.get_attribute(name)
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "attribute_set_get_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p50_latency_ms": round(sorted_lats[n // 2], 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
    }
    print(
        f"[bench_session_latency] {result['operation']}: "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_attribute_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
