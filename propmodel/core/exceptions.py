"""Custom exceptions for propmodel.

Domain-specific exception types. Numeric edge cases never raise; these are
reserved for invalid engine arguments, configuration and export failures.
"""

from __future__ import annotations

from typing import Any


class PropModelError(Exception):
    """Base exception for all propmodel errors."""
    pass


# --- Argument Errors ---

class InvalidParameterError(PropModelError):
    """Invalid parameter value provided."""

    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        msg = f"Invalid parameter '{param_name}': {value}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


# --- Configuration Errors ---

class ConfigurationError(PropModelError):
    """Error in engine configuration."""
    pass


# --- Export Errors ---

class ExportError(PropModelError):
    """Failed to write an export file."""
    pass
