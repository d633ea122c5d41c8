# backend/portfolio_insights/utils/context.py
"""
Computation context for the portfolio insights engine.

Holds the run id of the valuation currently being computed so log lines
from every calculator can be tied back to a single dashboard refresh.

Uses Python's contextvars, so concurrent computations on different threads
or asyncio tasks each see their own run id.

Usage:
    from portfolio_insights.utils.context import bind_run_id

    with bind_run_id("dashboard-refresh-42"):
        summary = compute_summary(snapshot)
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

# =============================================================================
# CONTEXT VARIABLES
# =============================================================================

_run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)


# =============================================================================
# RUN ID
# =============================================================================

def get_run_id() -> str | None:
    """
    Get the current computation's run id.

    Returns:
        The run id, or None if the caller did not bind one.
    """
    return _run_id_var.get()


def set_run_id(run_id: str) -> None:
    """Set the run id for the current context."""
    _run_id_var.set(run_id)


def clear_run_id() -> None:
    """Clear the run id."""
    _run_id_var.set(None)


@contextmanager
def bind_run_id(run_id: str | None = None) -> Iterator[str]:
    """
    Bind a run id for the duration of a block, restoring the previous one after.

    Args:
        run_id: Explicit id; a random hex id is generated when omitted

    Yields:
        The bound run id
    """
    value = run_id or uuid4().hex
    token = _run_id_var.set(value)
    try:
        yield value
    finally:
        _run_id_var.reset(token)
