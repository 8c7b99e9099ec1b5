import io
import os
import sys
import time
import pstats
import cProfile
import functools
from typing import Callable, Any
from contextlib import redirect_stdout
from memory_profiler import memory_usage

from src.presentation import render_lines
from src.report_memory import report_memory
from src.report_time import report_time

file_path = "data.txt"
output_file = "src/benchmark_results.txt"


def measure_time(func: Callable, *args, **kwargs) -> tuple[float, Any]:
    """Measures wall-clock execution time and returns it with the result."""
    start_time = time.perf_counter()
    result = func(*args, **kwargs)
    end_time = time.perf_counter()
    return end_time - start_time, result


def measure_memory(func: Callable, *args, **kwargs) -> tuple[float, Any]:
    """Measures peak memory (MB) with memory_profiler and returns it with the result."""
    mem_samples, result = memory_usage((func, args, kwargs), interval=0.1, retval=True)
    return max(mem_samples), result


def profile_performance(func):
    """
    Runs the function once under memory_profiler while timing it, so time and
    peak memory come from the same execution.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        def time_wrapped_func():
            return measure_time(func, *args, **kwargs)

        peak_mem, (duration, result) = measure_memory(time_wrapped_func)
        return peak_mem, duration, result

    return wrapper


def profile_detailed(func, limit: int = 15):
    """cProfile breakdown of one call, sorted by cumulative time. Adds overhead to the measured time."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        profiler = cProfile.Profile()
        result = profiler.runcall(func, *args, **kwargs)
        stream = io.StringIO()
        pstats.Stats(profiler, stream=stream).sort_stats("cumulative").print_stats(limit)
        return result, stream.getvalue()

    return wrapper


def run_benchmark(file_path: str, output_file: str) -> None:
    print(f"\n[BENCHMARK] Comparing report strategies on {file_path}")

    with open(output_file, "w", encoding="utf-8") as f:
        f.write("=" * 80 + "\n")
        f.write("=== REPORT STRATEGY BENCHMARK (CANONICAL LOGS) ===\n")
        f.write("=" * 80 + "\n\n")

        for name, func in [("Time", report_time), ("Memory", report_memory)]:
            f.write(f"--- Running {name} ---\n")
            print(f"Benchmarking {name}...")

            log_buffer = io.StringIO()
            with redirect_stdout(log_buffer):
                (peak_mem, duration, report), detailed_stats = profile_detailed(
                    profile_performance(func)
                )(file_path)

            f.write("Performance Metrics:\n")
            f.write(f"  > Execution Time: {duration:.4f} s\n")
            f.write(f"  > Peak Memory: {peak_mem:.2f} MB\n")
            f.write("Detailed Profile (cProfile):\n")
            f.write(detailed_stats + "\n")
            f.write("Canonical Log (Wide Event):\n")
            f.write(log_buffer.getvalue())
            f.write("Report:\n")
            f.write("\n".join(render_lines(report)) + "\n\n")

    print(f"\nBenchmark completed. Results saved to {output_file}")


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else file_path
    if os.path.exists(target):
        run_benchmark(target, output_file)
    else:
        print(f"Error: {target} not found")
