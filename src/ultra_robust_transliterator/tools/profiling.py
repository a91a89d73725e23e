"""Performance profiling tools for Ultra Robust Transliterator.

Provides timing and memory tracking for transliteration runs, split into the
table loading and transliteration stages, with JSON report export.
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import psutil

from ultra_robust_transliterator.api import TransliterationEngine
from ultra_robust_transliterator.character import CodepointDecoder
from ultra_robust_transliterator.shared.logging import get_logger
from ultra_robust_transliterator.tables import TableStore
from ultra_robust_transliterator.tables.source import split_codepoint

BYTES_PER_MB = 1024 * 1024
MS_PER_SECOND = 1000


def referenced_blocks(batch: Iterable[bytes]) -> List[int]:
    """Base blocks needed to transliterate a batch, sorted.

    ASCII and malformed units never consult the base table.
    """
    decoder = CodepointDecoder()
    blocks = set()
    for data in batch:
        for unit in decoder.decode(data):
            if unit.is_valid and not unit.is_ascii:
                blocks.add(split_codepoint(unit.codepoint)[0])
    return sorted(blocks)


@dataclass
class StagePerformance:
    """Performance metrics for one stage of a profiling session."""

    stage_name: str
    start_time: float
    end_time: float
    memory_start: int  # bytes
    memory_end: int  # bytes
    operations_count: int = 0

    @property
    def duration_ms(self) -> float:
        """Stage duration in milliseconds."""
        return (self.end_time - self.start_time) * MS_PER_SECOND

    @property
    def memory_delta(self) -> int:
        """Resident memory change in bytes."""
        return self.memory_end - self.memory_start

    @property
    def ops_per_second(self) -> float:
        duration_s = self.end_time - self.start_time
        return self.operations_count / duration_s if duration_s > 0 else 0.0


@dataclass
class ProfilingSession:
    """Container for a complete profiling session."""

    session_id: str
    start_time: float
    end_time: float
    input_size: int  # bytes
    stages: List[StagePerformance] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_duration_ms(self) -> float:
        """Total session duration in milliseconds."""
        return (self.end_time - self.start_time) * MS_PER_SECOND

    @property
    def throughput_mb_per_s(self) -> float:
        """Processing throughput in MB/s."""
        duration_s = self.end_time - self.start_time
        if duration_s <= 0:
            return 0.0
        return (self.input_size / BYTES_PER_MB) / duration_s

    def stage(self, stage_name: str) -> Optional[StagePerformance]:
        """Get the first stage recorded under a name."""
        for stage in self.stages:
            if stage.stage_name == stage_name:
                return stage
        return None


@dataclass
class PerformanceReport:
    """Summary of a set of profiling sessions."""

    sessions: List[ProfilingSession]
    generation_time: float

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    @property
    def average_duration_ms(self) -> float:
        """Average session duration."""
        if not self.sessions:
            return 0.0
        return sum(s.total_duration_ms for s in self.sessions) / len(self.sessions)

    @property
    def average_throughput_mb_per_s(self) -> float:
        """Average throughput across sessions."""
        if not self.sessions:
            return 0.0
        return sum(s.throughput_mb_per_s for s in self.sessions) / len(self.sessions)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the report to a JSON-compatible dictionary."""
        return {
            "generation_time": self.generation_time,
            "summary": {
                "session_count": self.session_count,
                "average_duration_ms": self.average_duration_ms,
                "average_throughput_mb_s": self.average_throughput_mb_per_s,
            },
            "sessions": [
                {
                    "session_id": session.session_id,
                    "input_size": session.input_size,
                    "total_duration_ms": session.total_duration_ms,
                    "throughput_mb_s": session.throughput_mb_per_s,
                    "metadata": session.metadata,
                    "stages": [
                        {
                            "stage_name": stage.stage_name,
                            "duration_ms": stage.duration_ms,
                            "memory_delta": stage.memory_delta,
                            "operations_count": stage.operations_count,
                            "ops_per_second": stage.ops_per_second,
                        }
                        for stage in session.stages
                    ],
                }
                for session in self.sessions
            ],
        }


class PerformanceProfiler:
    """Timing and memory profiler for transliteration runs.

    Examples:
        Profiling a cold and a warm run:
        >>> profiler = PerformanceProfiler()
        >>> session = profiler.profile_transliteration("cold", ["Größe"], "de")
        >>> session.stage("table_loading").duration_ms >= 0
        True
    """

    def __init__(self, enable_memory_tracking: bool = True):
        """Initialize performance profiler.

        Args:
            enable_memory_tracking: Whether to sample resident memory with psutil
        """
        self.enable_memory_tracking = enable_memory_tracking
        self.sessions: List[ProfilingSession] = []
        self.logger = get_logger(__name__, None, "performance_profiler")
        self._process = psutil.Process() if enable_memory_tracking else None

    def _memory_rss(self) -> int:
        return self._process.memory_info().rss if self._process else 0

    def start_session(self, session_id: str, input_size: int = 0) -> ProfilingSession:
        """Start a new profiling session."""
        session = ProfilingSession(
            session_id=session_id,
            start_time=time.perf_counter(),
            end_time=0.0,
            input_size=input_size,
        )
        self.logger.info(
            "Started profiling session",
            extra={
                "session_id": session_id,
                "input_size": input_size,
                "memory_tracking": self.enable_memory_tracking,
            }
        )
        return session

    def end_session(self, session: ProfilingSession) -> None:
        """End a profiling session and store results."""
        session.end_time = time.perf_counter()
        self.sessions.append(session)

        self.logger.info(
            "Ended profiling session",
            extra={
                "session_id": session.session_id,
                "duration_ms": session.total_duration_ms,
                "throughput_mb_s": session.throughput_mb_per_s,
                "stage_count": len(session.stages),
            }
        )

    def profile_stage(self, session: ProfilingSession, stage_name: str) -> "StageProfiler":
        """Context manager recording one stage into a session."""
        return StageProfiler(self, session, stage_name)

    def profile_transliteration(
        self,
        session_id: str,
        texts: Iterable[str],
        language_code: str = "en",
        store: Optional[TableStore] = None,
        iterations: int = 1
    ) -> ProfilingSession:
        """Profile transliterating a batch of texts.

        Table loading is measured separately from transliteration. Pass an
        already warm ``store`` to measure steady-state throughput only.

        Args:
            session_id: Unique identifier for the session
            texts: Texts to transliterate
            language_code: Language whose overrides are used
            store: Table store to use (a fresh one if None)
            iterations: Number of passes over the texts

        Returns:
            The completed ProfilingSession
        """
        if iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {iterations}")

        batch = [text.encode("utf-8", errors="surrogatepass") for text in texts]
        input_size = sum(len(data) for data in batch) * iterations
        session = self.start_session(session_id, input_size)
        session.metadata = {"language_code": language_code, "iterations": iterations}

        with self.profile_stage(session, "table_loading") as stage:
            if store is None:
                store = TableStore()
            engine = TransliterationEngine(store)
            blocks = referenced_blocks(batch)
            store.preload(languages=[language_code], blocks=blocks)
            stage.operations_count = 1 + len(blocks)

        with self.profile_stage(session, "transliteration") as stage:
            output_size = 0
            for _ in range(iterations):
                for data in batch:
                    output_size += len(engine.transliterate(data, language_code))
            stage.operations_count = len(batch) * iterations

        session.metadata["output_size"] = output_size
        session.metadata["tables"] = store.statistics
        self.end_session(session)
        return session

    def add_stage_performance(
        self,
        session: ProfilingSession,
        stage: StagePerformance
    ) -> None:
        """Add stage performance data to session."""
        session.stages.append(stage)

        self.logger.debug(
            "Added stage performance data",
            extra={
                "session_id": session.session_id,
                "stage_name": stage.stage_name,
                "duration_ms": stage.duration_ms,
                "memory_delta": stage.memory_delta,
            }
        )

    def generate_report(self) -> PerformanceReport:
        """Generate a report over all completed sessions."""
        return PerformanceReport(
            sessions=self.sessions.copy(),
            generation_time=time.time()
        )

    def save_report(self, report: PerformanceReport, output_path: Path) -> None:
        """Save performance report to a JSON file."""
        output_path.write_text(json.dumps(report.to_dict(), indent=2))

        self.logger.info(
            "Saved performance report",
            extra={
                "output_path": str(output_path),
                "session_count": report.session_count,
            }
        )

    def clear_sessions(self) -> None:
        """Clear all stored profiling sessions."""
        session_count = len(self.sessions)
        self.sessions.clear()

        self.logger.info(
            "Cleared profiling sessions",
            extra={"cleared_count": session_count}
        )


class StageProfiler:
    """Context manager for profiling one stage."""

    def __init__(self, profiler: PerformanceProfiler, session: ProfilingSession, stage_name: str):
        self.profiler = profiler
        self.session = session
        self.stage_name = stage_name
        self.stage: Optional[StagePerformance] = None

    def __enter__(self) -> StagePerformance:
        self.stage = StagePerformance(
            stage_name=self.stage_name,
            start_time=time.perf_counter(),
            end_time=0.0,
            memory_start=self.profiler._memory_rss(),
            memory_end=0,
        )
        return self.stage

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.stage is None:
            return
        self.stage.end_time = time.perf_counter()
        self.stage.memory_end = self.profiler._memory_rss()
        self.profiler.add_stage_performance(self.session, self.stage)


def benchmark_languages(
    texts: Iterable[str],
    languages: Iterable[str],
    iterations: int = 10
) -> Dict[str, PerformanceReport]:
    """Benchmark warm transliteration throughput per language.

    All languages share one store, so each report measures lookups rather
    than first loads after its first session.

    Args:
        texts: Texts to transliterate
        languages: Language codes to compare
        iterations: Number of passes per language

    Returns:
        Dictionary mapping language codes to performance reports
    """
    batch = list(texts)
    store = TableStore()
    results = {}

    for language_code in languages:
        profiler = PerformanceProfiler()
        profiler.profile_transliteration(
            f"{language_code}_warmup", batch, language_code, store
        )
        profiler.clear_sessions()
        profiler.profile_transliteration(
            language_code, batch, language_code, store, iterations
        )
        results[language_code] = profiler.generate_report()

    return results
