"""Single-asset analysis data models.

Inputs describe one property purchase: acquisition costs, financing, a
rental assumption, operating costs and growth rates. Outputs are frozen
records produced fresh on every analysis call.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, computed_field

from propmodel.domain.calculator.financial import (
    calculate_monthly_payment,
    calculate_remaining_balance,
)
from propmodel.domain.calculator.tax import PropertyUse

# Days per month used for the short-stay part of a mixed rental year
SHORT_STAY_DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365


class LoanTerms(BaseModel):
    """Loan state owned by the calling context."""

    principal: float = Field(default=0.0, ge=0, description="Loan amount in €")
    annual_rate_pct: float = Field(default=0.0, ge=0, description="Nominal annual rate %")
    term_years: int = Field(default=30, gt=0, description="Loan term in years")
    months_elapsed: int = Field(default=0, ge=0, description="Payments already made")

    model_config = {"frozen": True}

    @computed_field
    @property
    def monthly_payment(self) -> float:
        return calculate_monthly_payment(self.principal, self.annual_rate_pct, self.term_years)

    @computed_field
    @property
    def remaining_balance(self) -> float:
        return calculate_remaining_balance(
            self.principal, self.annual_rate_pct, self.term_years, self.months_elapsed
        )


# --- Rental assumption (tagged variant) ---

class LongTermRental(BaseModel):
    """Classic long-term lease."""

    kind: Literal["long_term"] = "long_term"
    monthly_rent: float = Field(default=0.0, description="Monthly rent in €")

    model_config = {"frozen": True}

    def annual_gross(self) -> float:
        return self.monthly_rent * 12


class ShortTermRental(BaseModel):
    """Tourist rental priced per night."""

    kind: Literal["short_term"] = "short_term"
    nightly_rate: float = Field(default=0.0, description="Average daily rate in €")
    occupancy_pct: float = Field(default=0.0, description="Booked nights %")

    model_config = {"frozen": True}

    def annual_gross(self) -> float:
        return DAYS_PER_YEAR * (self.occupancy_pct / 100.0) * self.nightly_rate

    def with_occupancy(self, occupancy_pct: float) -> ShortTermRental:
        return self.model_copy(update={"occupancy_pct": occupancy_pct})


class MixedRental(BaseModel):
    """Long-term lease for part of the year, short stays for the rest."""

    kind: Literal["mixed"] = "mixed"
    monthly_rent: float = Field(default=0.0, description="Monthly long-term rent in €")
    nightly_rate: float = Field(default=0.0, description="Average daily rate in €")
    occupancy_pct: float = Field(default=0.0, description="Booked nights % in the short-stay season")
    long_term_months: int = Field(default=6, ge=0, le=12)

    model_config = {"frozen": True}

    def annual_gross(self) -> float:
        short_days = (12 - self.long_term_months) * SHORT_STAY_DAYS_PER_MONTH
        return (
            self.monthly_rent * self.long_term_months
            + short_days * (self.occupancy_pct / 100.0) * self.nightly_rate
        )

    def with_occupancy(self, occupancy_pct: float) -> MixedRental:
        return self.model_copy(update={"occupancy_pct": occupancy_pct})


RentalAssumption = Annotated[
    Union[LongTermRental, ShortTermRental, MixedRental],
    Field(discriminator="kind"),
]


# --- Inputs ---

class AcquisitionCosts(BaseModel):
    """One-time costs on top of the price."""

    transfer_tax: float | None = Field(
        default=None, ge=0, description="IMT in €; computed from price and use when None"
    )
    notary_fees: float = Field(default=0.0, ge=0)
    renovation_costs: float = Field(default=0.0, ge=0)
    furnishing_costs: float = Field(default=0.0, ge=0)

    model_config = {"frozen": True}


class Financing(BaseModel):
    """Mortgage terms. An explicit loan amount takes precedence over LTV."""

    ltv_pct: float = Field(default=0.0, ge=0, description="Loan-to-value % of the price")
    loan_amount: float | None = Field(default=None, ge=0, description="Explicit loan amount in €")
    interest_rate_pct: float | None = Field(
        default=None, ge=0, description="Nominal rate %; configured default when None"
    )
    term_years: int | None = Field(default=None, gt=0, description="Term; configured default when None")

    model_config = {"frozen": True}

    def resolve_loan_amount(self, purchase_price: float) -> float:
        if self.loan_amount is not None:
            return self.loan_amount
        return purchase_price * self.ltv_pct / 100.0


class OperatingCosts(BaseModel):
    """Recurring costs, year-1 values."""

    management_pct: float = Field(default=0.0, ge=0, description="Management fee % of gross rent")
    maintenance_yearly: float = Field(default=0.0, ge=0)
    property_tax_rate_pct: float | None = Field(
        default=None, ge=0, description="Municipal IMI rate %; the standard municipal rate when None"
    )
    cadastral_value: float | None = Field(
        default=None, ge=0, description="VPT in €; estimated from the price when None"
    )
    property_tax_yearly: float | None = Field(
        default=None, ge=0, description="Explicit IMI in €/year, overrides rate x VPT"
    )
    insurance_yearly: float = Field(default=0.0, ge=0)
    condo_monthly: float = Field(default=0.0, ge=0)
    utilities_monthly: float = Field(default=0.0, ge=0)

    model_config = {"frozen": True}


class GrowthAssumptions(BaseModel):
    """Annual compounding growth rates in %."""

    rent_growth_pct: float = 0.0
    cost_growth_pct: float = 0.0
    value_growth_pct: float = 0.0

    model_config = {"frozen": True}


class RentalTaxProfile(BaseModel):
    """Inputs for the rental income tax estimate."""

    tax_year: int = Field(default=2026)
    contract_years: float = Field(default=1.0, ge=0)
    renewals: int = Field(default=0, ge=0)
    aggregated: bool = Field(default=False, description="Englobamento: taxed with other income")
    long_duration_contract: bool = Field(default=False, description="DHD contract")

    model_config = {"frozen": True}


class AnalysisInputs(BaseModel):
    """Everything needed to analyze one property."""

    purchase_price: float = Field(default=0.0, ge=0, description="Acquisition price in €")
    property_use: PropertyUse = PropertyUse.NON_RESIDENTIAL
    acquisition: AcquisitionCosts = Field(default_factory=AcquisitionCosts)
    financing: Financing = Field(default_factory=Financing)
    rental: RentalAssumption = Field(default_factory=LongTermRental)
    operating: OperatingCosts = Field(default_factory=OperatingCosts)
    growth: GrowthAssumptions = Field(default_factory=GrowthAssumptions)
    horizon_years: int = Field(default=10, ge=1, le=50, description="Projection horizon")
    disposal_cost_pct: float = Field(default=0.0, ge=0, description="Selling costs % of exit value")
    tax_profile: RentalTaxProfile | None = None

    model_config = {"frozen": True}


# --- Outputs ---

class YearlyCashflow(BaseModel):
    """One projected year."""

    year: int
    gross_revenue: float
    opex: float
    noi: float
    debt_service: float
    net_cashflow: float
    cumulative_cashflow: float

    model_config = {"frozen": True}


class ExitAnalysis(BaseModel):
    """Valuation at the end of the horizon."""

    market_value: float
    remaining_debt: float
    disposal_costs: float = 0.0
    net_exit: float
    total_return: float

    model_config = {"frozen": True}


class InvestmentAnalysis(BaseModel):
    """Engine output for a single property."""

    total_investment: float
    equity: float
    loan_amount: float
    monthly_payment: float

    bar: float = Field(description="Gross initial yield %")
    nar: float = Field(description="Net initial yield %")
    cash_on_cash: float = Field(description="Year-1 cashflow / equity %")
    dscr: float
    break_even_occupancy: float = Field(description="Occupancy % where NOI covers debt service")
    irr: float = Field(description="Internal rate of return %")

    yearly_cashflows: tuple[YearlyCashflow, ...]
    exit_analysis: ExitAnalysis

    income_tax_rate_pct: float | None = None
    after_tax_cashflow_year1: float | None = None

    model_config = {"frozen": True}

    @computed_field
    @property
    def horizon_years(self) -> int:
        return len(self.yearly_cashflows)
