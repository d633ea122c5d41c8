# backend/portfolio_insights/utils/__init__.py
"""Logging and run-context utilities."""

from portfolio_insights.utils.context import bind_run_id, clear_run_id, get_run_id, set_run_id
from portfolio_insights.utils.logging import get_logger, setup_logging
