"""Tests for the performance profiling module."""

import json

import pytest

from ultra_robust_transliterator.tables import TableStore
from ultra_robust_transliterator.tools.profiling import (
    PerformanceProfiler,
    PerformanceReport,
    ProfilingSession,
    StagePerformance,
    benchmark_languages,
    referenced_blocks,
)


class TestStagePerformance:
    """Test StagePerformance data class."""

    def test_stage_performance_creation(self):
        """Test stage performance object creation."""
        stage = StagePerformance(
            stage_name="transliteration",
            start_time=1000.0,
            end_time=1001.0,
            memory_start=1024,
            memory_end=2048,
            operations_count=100
        )

        assert stage.duration_ms == 1000.0
        assert stage.memory_delta == 1024
        assert stage.ops_per_second == 100.0

    def test_stage_performance_zero_duration(self):
        """Test stage performance with zero duration."""
        stage = StagePerformance("instant", 1000.0, 1000.0, 0, 0, operations_count=5)
        assert stage.ops_per_second == 0.0


class TestProfilingSession:
    """Test ProfilingSession data class."""

    def test_throughput(self):
        """Test throughput calculation."""
        session = ProfilingSession("s", start_time=1000.0, end_time=1002.0, input_size=2 * 1024 * 1024)
        assert session.total_duration_ms == 2000.0
        assert session.throughput_mb_per_s == pytest.approx(1.0)

    def test_zero_duration(self):
        """Test throughput of an instant session."""
        assert ProfilingSession("s", 1.0, 1.0, 100).throughput_mb_per_s == 0.0

    def test_stage_lookup(self):
        """Test finding stages by name."""
        session = ProfilingSession("s", 0.0, 1.0, 0)
        stage = StagePerformance("table_loading", 0.0, 0.5, 0, 0)
        session.stages.append(stage)
        assert session.stage("table_loading") is stage
        assert session.stage("missing") is None


class TestPerformanceProfiler:
    """Test PerformanceProfiler."""

    def test_profile_transliteration(self):
        """Test profiling a batch with separate stages."""
        profiler = PerformanceProfiler()
        session = profiler.profile_transliteration(
            "cold", ["Größe", "Søren"], "de", iterations=3
        )

        assert session.input_size == sum(
            len(t.encode("utf-8")) for t in ["Größe", "Søren"]
        ) * 3
        assert [s.stage_name for s in session.stages] == [
            "table_loading", "transliteration"
        ]
        assert session.stage("transliteration").operations_count == 6
        assert session.metadata["output_size"] == len("Groesse" + "Soren") * 3
        assert session.metadata["tables"]["loaded_languages"] == 1
        assert profiler.sessions == [session]

    def test_shared_store(self):
        """Test profiling against a warm store."""
        store = TableStore()
        store.preload(languages=["dk"])
        profiler = PerformanceProfiler(enable_memory_tracking=False)
        session = profiler.profile_transliteration("warm", ["Ø"], "dk", store=store)

        assert session.metadata["tables"]["loaded_languages"] == 1
        assert session.stage("transliteration").memory_delta == 0

    def test_invalid_iterations(self):
        """Test that at least one iteration is required."""
        with pytest.raises(ValueError, match="iterations"):
            PerformanceProfiler().profile_transliteration("x", ["a"], iterations=0)

    def test_report_and_save(self, tmp_path):
        """Test report generation and JSON export."""
        profiler = PerformanceProfiler(enable_memory_tracking=False)
        profiler.profile_transliteration("one", ["Ä"], "de")
        report = profiler.generate_report()
        assert isinstance(report, PerformanceReport)
        assert report.session_count == 1

        output = tmp_path / "report.json"
        profiler.save_report(report, output)
        data = json.loads(output.read_text())
        assert data["summary"]["session_count"] == 1
        assert data["sessions"][0]["stages"][1]["stage_name"] == "transliteration"

    def test_empty_report(self):
        """Test averages of an empty report."""
        report = PerformanceProfiler(enable_memory_tracking=False).generate_report()
        assert report.average_duration_ms == 0.0
        assert report.average_throughput_mb_per_s == 0.0

    def test_clear_sessions(self):
        """Test clearing stored sessions."""
        profiler = PerformanceProfiler(enable_memory_tracking=False)
        profiler.profile_transliteration("one", ["a"])
        profiler.clear_sessions()
        assert profiler.sessions == []


class TestBenchmarkLanguages:
    """Test language benchmarking."""

    def test_benchmark_languages(self):
        """Test one report per language."""
        results = benchmark_languages(["Ä Ö Ü"], ["de", "dk"], iterations=2)
        assert set(results) == {"de", "dk"}
        for report in results.values():
            assert report.session_count == 1
            assert report.sessions[0].metadata["iterations"] == 2


class TestTableLoadingStage:
    """Test that table loading is measured apart from transliteration."""

    class SnapshotProfiler(PerformanceProfiler):
        """Profiler recording the store state as each stage closes."""

        def __init__(self, store):
            super().__init__(enable_memory_tracking=False)
            self.store = store
            self.snapshots = {}

        def add_stage_performance(self, session, stage):
            self.snapshots[stage.stage_name] = (
                self.store.loaded_blocks, self.store.statistics["cache_misses"]
            )
            super().add_stage_performance(session, stage)

    def test_blocks_loaded_before_transliteration(self):
        """Test that every referenced base block loads in the loading stage."""
        store = TableStore()
        profiler = self.SnapshotProfiler(store)
        session = profiler.profile_transliteration("cold", ["Größe ц"], "de", store=store)

        assert profiler.snapshots["table_loading"][0] == [0, 4]
        assert profiler.snapshots["transliteration"] == profiler.snapshots["table_loading"]
        assert session.stage("table_loading").operations_count == 3

    def test_referenced_blocks(self):
        """Test that ASCII and malformed units reference no blocks."""
        batch = ["abc".encode("utf-8"), "ᐑ𐌰".encode("utf-8") + bytes([0xF8, 0x80])]
        assert referenced_blocks(batch) == [0x14, 0x103]
