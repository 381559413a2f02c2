"""
propmodel - Property Investment Modeling Engine

Turns property, loan and rental facts into multi-year cashflow projections,
yield ratios, IRR estimates, debt-snowball payoff schedules and per-unit
cost allocations for multi-tenant buildings.

Modules:
    - core: Settings, logging, exceptions and ratio definitions
    - domain: Data models and pure calculators (amortization, tax, IRR)
    - application: Analysis, multi-unit, snowball and export services
"""

__version__ = "1.0.0"
