"""Data models for propmodel."""

from .analysis import (
    AnalysisInputs,
    InvestmentAnalysis,
    LongTermRental,
    MixedRental,
    ShortTermRental,
)
from .multi_unit import MultiUnitAnalysis, MultiUnitInputs, UnitInput
from .snowball import SnowballProperty, SnowballResult, SnowballStrategy, SnowballSummary

__all__ = [
    "AnalysisInputs",
    "InvestmentAnalysis",
    "LongTermRental",
    "ShortTermRental",
    "MixedRental",
    "MultiUnitInputs",
    "MultiUnitAnalysis",
    "UnitInput",
    "SnowballProperty",
    "SnowballResult",
    "SnowballStrategy",
    "SnowballSummary",
]
