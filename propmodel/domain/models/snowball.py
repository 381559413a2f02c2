"""Debt-snowball data models."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, computed_field


class SnowballStrategy(str, Enum):
    """Which loan receives the extra payment each month."""

    SMALLEST_BALANCE = "smallest"
    HIGHEST_INTEREST = "highest_interest"


class SnowballProperty(BaseModel):
    """Loan state of one property, assembled by the caller."""

    id: str
    name: str = ""
    debt: float = Field(description="Current outstanding balance in €")
    monthly_payment: float = Field(description="Scheduled monthly payment in €")
    net_cashflow: float = Field(default=0.0, description="Rent minus payment, per month")
    interest_rate_pct: float = Field(default=0.0, ge=0)

    model_config = {"frozen": True}


class SnowballResult(BaseModel):
    """Payoff outcome of one loan."""

    property_id: str
    property_name: str
    months_to_payoff: int | None = Field(description="None when the month cap was reached first")
    payoff_date: date | None
    interest_paid: float = 0.0

    model_config = {"frozen": True}

    @computed_field
    @property
    def paid_off(self) -> bool:
        return self.months_to_payoff is not None


class SnowballSummary(BaseModel):
    """Full simulation outcome, results ordered by payoff sequence."""

    strategy: SnowballStrategy
    extra_monthly_payment: float
    results: tuple[SnowballResult, ...]
    excluded_ids: tuple[str, ...] = ()
    months_simulated: int = 0
    total_interest: float = 0.0

    model_config = {"frozen": True}

    @computed_field
    @property
    def all_paid_off(self) -> bool:
        return all(r.paid_off for r in self.results)

    @computed_field
    @property
    def debt_free_months(self) -> int | None:
        """Months until the last loan is gone, None if never within the cap."""
        if not self.results:
            return 0
        if not self.all_paid_off:
            return None
        return max(r.months_to_payoff for r in self.results)


class SnowballImpact(BaseModel):
    """Effect of adding one property to an existing snowball."""

    months_without: int | None
    months_with: int | None
    months_saved: int | None
    new_property_cashflow_positive: bool

    model_config = {"frozen": True}
