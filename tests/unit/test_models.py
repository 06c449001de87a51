"""
Unit tests for core data models.
"""

from datetime import datetime

from monitor.models import (
    DiffRecord,
    DiffTag,
    FetchResult,
    ResourceOutcome,
    ResourceState,
    RunResult,
    new_lines,
    old_lines,
)


class TestDiffRecord:
    """Tests for DiffRecord model."""

    def test_constructors_set_tag(self):
        """Test that the named constructors set the matching tag."""
        assert DiffRecord.unchanged("a") == DiffRecord(DiffTag.UNCHANGED, "a")
        assert DiffRecord.added("a").tag is DiffTag.ADDED
        assert DiffRecord.removed("a").tag is DiffTag.REMOVED

    def test_records_are_hashable(self):
        """Test that frozen records can be used in sets."""
        records = {DiffRecord.added("x"), DiffRecord.added("x"), DiffRecord.removed("x")}
        assert len(records) == 2

    def test_rebuild_old_and_new_lines(self):
        """Test rebuilding both sides from a diff."""
        diff = [
            DiffRecord.unchanged("A"),
            DiffRecord.removed("B"),
            DiffRecord.added("X"),
            DiffRecord.unchanged("C"),
        ]
        assert old_lines(diff) == ["A", "B", "C"]
        assert new_lines(diff) == ["A", "X", "C"]


class TestFetchResult:
    """Tests for FetchResult model."""

    def test_success_property_true_for_2xx(self):
        """Test that success is True for 2xx status codes."""
        for status in [200, 201, 204, 299]:
            result = FetchResult(
                url="https://example.com",
                status_code=status,
                content=b"<html></html>",
                fetch_time_ms=100,
            )
            assert result.success is True

    def test_success_property_false_for_non_2xx(self):
        """Test that success is False for non-2xx status codes."""
        for status in [301, 404, 500]:
            result = FetchResult(
                url="https://example.com",
                status_code=status,
                content=b"",
                fetch_time_ms=100,
            )
            assert result.success is False


class TestRunResult:
    """Tests for RunResult model."""

    def _result(self) -> RunResult:
        return RunResult(
            started_at=datetime(2024, 1, 1, 12, 0, 0),
            finished_at=datetime(2024, 1, 1, 12, 0, 5),
            outcomes=[
                ResourceOutcome(url="https://a.example", state=ResourceState.NEW),
                ResourceOutcome(url="https://b.example", state=ResourceState.CHANGED),
                ResourceOutcome(url="https://c.example", state=ResourceState.UNCHANGED_RAW),
                ResourceOutcome(
                    url="https://d.example", state=ResourceState.FAILED, error="boom"
                ),
            ],
        )

    def test_counts(self):
        """Test processed, failed and per-state counts."""
        result = self._result()

        assert result.urls_processed == 4
        assert result.urls_failed == 1
        assert result.count(ResourceState.NEW) == 1
        assert result.count(ResourceState.UNCHANGED_CONTENT) == 0

    def test_get_changed_and_failed(self):
        """Test filtering outcomes by state."""
        result = self._result()

        assert [o.url for o in result.get_changed()] == ["https://b.example"]
        assert [o.url for o in result.get_failed()] == ["https://d.example"]
        assert result.get_failed()[0].error == "boom"

    def test_empty_run(self):
        """Test a run without URLs."""
        result = RunResult(started_at=datetime.now(), finished_at=None, outcomes=[])

        assert result.urls_processed == 0
        assert result.urls_failed == 0
        assert result.aborted is False
