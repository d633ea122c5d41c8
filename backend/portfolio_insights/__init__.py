# backend/portfolio_insights/__init__.py
"""
Portfolio insights engine.

Values crypto, equity and cash holdings in one primary currency and splits
their 24h change into a native-return part and an FX-only part that add up
exactly at every level.

Packages:
    config.py   - Settings loaded from environment variables
    services/   - Valuation engine, exceptions, collaborator protocols
    schemas/    - Pydantic input and response models
    utils/      - Logging and run context
"""

__version__ = "1.0.0"
