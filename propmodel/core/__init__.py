"""Core settings, logging, errors and ratio definitions."""

from .exceptions import (
    ConfigurationError,
    ExportError,
    InvalidParameterError,
    PropModelError,
)
from .glossary import (
    calculate_bar,
    calculate_break_even_occupancy,
    calculate_cap_rate,
    calculate_cash_on_cash,
    calculate_dscr,
    calculate_nar,
)
from .settings import EngineSettings, get_settings

__all__ = [
    "EngineSettings",
    "get_settings",
    "calculate_bar",
    "calculate_nar",
    "calculate_cash_on_cash",
    "calculate_cap_rate",
    "calculate_dscr",
    "calculate_break_even_occupancy",
    # Exceptions
    "PropModelError",
    "InvalidParameterError",
    "ConfigurationError",
    "ExportError",
]
