"""Application services."""

from .analysis import InvestmentAnalyzer, analyze_investment, run_stress_tests
from .exporter import ResultExporter
from .multi_unit import MultiUnitAnalyzer, analyze_multi_unit
from .snowball import SnowballSimulator, simulate_snowball

__all__ = [
    "InvestmentAnalyzer",
    "analyze_investment",
    "run_stress_tests",
    "MultiUnitAnalyzer",
    "analyze_multi_unit",
    "SnowballSimulator",
    "simulate_snowball",
    "ResultExporter",
]
