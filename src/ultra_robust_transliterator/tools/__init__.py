"""Developer tools module for Ultra Robust Transliterator.

This module provides performance profiling of table loading and
transliteration throughput.
"""

from .profiling import (
    PerformanceProfiler,
    PerformanceReport,
    ProfilingSession,
    StagePerformance,
    benchmark_languages,
)

__all__ = [
    "PerformanceProfiler",
    "PerformanceReport",
    "ProfilingSession",
    "StagePerformance",
    "benchmark_languages",
]
