# backend/portfolio_insights/services/__init__.py
"""
Service layer for the valuation engine.

Services:
- Have NO knowledge of how data is fetched or stored
- Raise domain-specific exceptions
- Receive their collaborators via constructor injection

Usage:
    from portfolio_insights.services import PortfolioInsightsService
    from portfolio_insights.services import (
        DataSourceError,
        FXConversionError,
        InvalidCurrencyError,
    )

Architecture:
    services/
    ├── __init__.py              # This file - main exports
    ├── exceptions.py            # Domain exceptions
    ├── constants.py             # Numeric and classification constants
    ├── protocols.py             # Collaborator interfaces (Protocol classes)
    └── valuation/               # Valuation and insights engine
        ├── types.py             # Engine data types
        ├── currency.py          # Currency conversion
        ├── classification.py    # Tag parsing, stablecoin reclassifier
        ├── attribution.py       # Native vs FX change attribution
        ├── calculators.py       # Valuation aggregator
        ├── insights.py          # Breakdown and insight builder
        └── service.py           # PortfolioInsightsService (orchestrator)
"""

from portfolio_insights.services.exceptions import (
    DataSourceError,
    FXConversionError,
    FXRateError,
    InvalidCurrencyError,
    ServiceError,
    ValidationError,
)
from portfolio_insights.services.valuation import PortfolioInsightsService

__all__ = [
    "PortfolioInsightsService",
    "ServiceError",
    "ValidationError",
    "InvalidCurrencyError",
    "FXRateError",
    "FXConversionError",
    "DataSourceError",
]
