# backend/tests/utils/test_run_context.py
"""
Tests for run id context management.
"""

from portfolio_insights.utils.context import bind_run_id, clear_run_id, get_run_id, set_run_id


class TestRunIdContext:
    """Tests for run id context functions."""

    def test_get_returns_none_when_not_set(self):
        """Should return None when no run id is bound."""
        clear_run_id()
        assert get_run_id() is None

    def test_set_and_get_run_id(self):
        set_run_id("refresh-123")
        assert get_run_id() == "refresh-123"
        clear_run_id()

    def test_clear_run_id(self):
        set_run_id("refresh-456")
        clear_run_id()
        assert get_run_id() is None


class TestBindRunId:
    """Tests for the bind_run_id context manager."""

    def test_binds_explicit_id(self):
        with bind_run_id("dashboard-1") as run_id:
            assert run_id == "dashboard-1"
            assert get_run_id() == "dashboard-1"

        assert get_run_id() is None

    def test_generates_id_when_omitted(self):
        with bind_run_id() as run_id:
            assert len(run_id) == 32
            assert get_run_id() == run_id

    def test_restores_outer_id(self):
        with bind_run_id("outer"):
            with bind_run_id("inner"):
                assert get_run_id() == "inner"
            assert get_run_id() == "outer"

    def test_restores_on_exception(self):
        try:
            with bind_run_id("failing"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert get_run_id() is None
