"""Multi-unit building data models.

A building holds N rentable units sharing one mortgage and one set of
common costs. Each unit carries a cost-allocation weight.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, computed_field

from propmodel.domain.calculator.tax import PropertyUse


class TenantCategory(str, Enum):
    LONG_TERM = "long_term"
    TOURISM = "tourism"
    STUDENT = "student"


EnergyLabel = Literal["A", "B", "C", "D", "E", "F"]


class UnitInput(BaseModel):
    """One rentable unit."""

    id: str
    name: str = ""
    area_m2: float = Field(default=0.0, ge=0)
    monthly_rent: float = Field(default=0.0)
    allocation_weight: float = Field(default=0.0, ge=0, description="Share of shared costs, any scale")
    occupancy_pct: float = Field(default=100.0, ge=0, le=100)
    tenant_category: TenantCategory = TenantCategory.LONG_TERM

    # Feature scores
    energy_label: EnergyLabel = "C"
    renovation_need_score: int = Field(default=1, ge=1, le=10)
    tenant_retention_months: float = Field(default=12.0, ge=0)

    model_config = {"frozen": True}


class SharedCosts(BaseModel):
    """Building-level costs split across units."""

    gas_monthly: float = Field(default=0.0, ge=0)
    water_monthly: float = Field(default=0.0, ge=0)
    condo_monthly: float = Field(default=0.0, ge=0)
    maintenance_yearly: float = Field(default=0.0, ge=0)
    insurance_yearly: float = Field(default=0.0, ge=0)

    model_config = {"frozen": True}

    @computed_field
    @property
    def annual_total(self) -> float:
        monthly = self.gas_monthly + self.water_monthly + self.condo_monthly
        return monthly * 12 + self.maintenance_yearly + self.insurance_yearly


class MultiUnitInputs(BaseModel):
    """Building purchase, financing and its units."""

    name: str = ""
    purchase_price: float = Field(default=0.0, ge=0)
    property_use: PropertyUse = PropertyUse.NON_RESIDENTIAL
    transfer_tax: float | None = Field(default=None, ge=0, description="IMT; computed when None")
    notary_fees: float = Field(default=0.0, ge=0)
    renovation_costs: float = Field(default=0.0, ge=0)

    equity: float = Field(default=0.0, ge=0, description="Own capital committed")
    loan_amount: float = Field(default=0.0, ge=0)
    interest_rate_pct: float | None = Field(default=None, ge=0)
    term_years: int | None = Field(default=None, gt=0)
    monthly_payment: float | None = Field(
        default=None, ge=0, description="Manual payment; computed from the loan when None"
    )
    market_value: float = Field(default=0.0, ge=0, description="0 means use total investment")

    units: tuple[UnitInput, ...] = ()
    shared_costs: SharedCosts = Field(default_factory=SharedCosts)

    tax_year: int = 2026
    contract_years: float = Field(default=1.0, ge=0)
    horizon_years: int = Field(default=10, ge=1, le=50)
    value_growth_pct: float | None = Field(default=None, description="Configured default when None")

    model_config = {"frozen": True}


class UnitAnalysis(BaseModel):
    """Annual figures for one unit."""

    id: str
    name: str
    area_m2: float
    allocation_share: float = Field(description="Normalized weight, 0-1")

    gross_rent: float
    allocated_costs: float
    noi: float
    debt_service_share: float
    net_cashflow: float
    after_tax_cashflow: float

    yield_per_m2: float
    opex_ratio: float
    occupancy_pct: float
    tenant_retention_months: float
    cash_on_cash: float
    dscr: float

    energy_label: str
    renovation_need_score: int
    tenant_category: TenantCategory

    model_config = {"frozen": True}


class DiversificationEntry(BaseModel):
    tenant_category: TenantCategory
    count: int
    percentage: float

    model_config = {"frozen": True}


class MultiUnitAnalysis(BaseModel):
    """Portfolio-level result for a multi-unit building."""

    # Totals
    total_gross_rent: float
    total_noi: float
    total_net_cashflow: float
    total_after_tax_cashflow: float
    total_debt_service: float

    # Property level
    total_investment: float
    equity: float
    monthly_payment: float
    income_tax_rate_pct: float
    cap_rate: float
    dscr: float
    cash_on_cash: float
    break_even_occupancy: float
    irr: float

    # Averages
    average_occupancy_pct: float
    average_opex_ratio: float
    average_tenant_retention_months: float

    # Risk
    renovation_estimate_3y: float
    diversification: tuple[DiversificationEntry, ...]

    units: tuple[UnitAnalysis, ...]

    model_config = {"frozen": True}
