"""Engine settings with environment variable support.

Uses pydantic-settings for typed configuration validation. Every fallback the
calling layer would otherwise hard-code lives here as a named field.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings

from propmodel.core.exceptions import ConfigurationError


class EngineSettings(BaseSettings):
    """Engine configuration loaded from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")
    log_to_file: bool = Field(default=False, description="Also write logs/propmodel.log")

    # Financing fallbacks
    default_interest_rate_pct: float = Field(default=3.5, ge=0, description="Rate used when none is on file")
    default_loan_term_years: int = Field(default=30, gt=0, le=50)

    # Tax fallbacks
    default_cadastral_value_pct: float = Field(
        default=60.0, ge=0, le=100, description="VPT as % of price when no VPT is on file"
    )

    # Ratio caps
    dscr_cap: float = Field(default=999.0, gt=0, description="DSCR reported when there is no debt service")

    # IRR solver
    irr_lower_bound: float = Field(default=-0.99, gt=-1.0, description="Lowest rate searched (fraction)")
    irr_upper_bound: float = Field(default=10.0, description="Highest rate searched (fraction)")
    irr_max_iterations: int = Field(default=200, ge=1)
    irr_tolerance: float = Field(default=1e-7, gt=0, description="NPV tolerance relative to gross flows")
    irr_outlay_basis: Literal["total_investment", "equity"] = Field(
        default="total_investment", description="Initial outlay used in the IRR series"
    )

    # Snowball
    snowball_max_months: int = Field(default=600, ge=1, le=1200)

    # Multi-unit
    renovation_cost_per_score_point: float = Field(default=500.0, ge=0)
    default_value_growth_pct: float = Field(default=3.0)

    model_config = {
        "env_prefix": "PROPMODEL_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def check_irr_bounds(self) -> "EngineSettings":
        if self.irr_upper_bound <= self.irr_lower_bound:
            raise ValueError("irr_upper_bound must be greater than irr_lower_bound")
        return self


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached engine settings.

    Raises:
        ConfigurationError: If an environment override fails validation.
    """
    try:
        return EngineSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid engine settings: {e}") from e
