"""Pytest fixtures for propmodel tests."""

import os
import sys

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from propmodel.core.settings import EngineSettings, get_settings
from propmodel.domain.calculator.tax import PropertyUse
from propmodel.domain.models.analysis import (
    AcquisitionCosts,
    AnalysisInputs,
    Financing,
    LongTermRental,
    OperatingCosts,
)
from propmodel.domain.models.multi_unit import (
    MultiUnitInputs,
    SharedCosts,
    TenantCategory,
    UnitInput,
)
from propmodel.domain.models.snowball import SnowballProperty


@pytest.fixture
def settings():
    """Default engine settings, independent of any local .env file."""
    return EngineSettings(_env_file=None)


@pytest.fixture(autouse=True)
def _fresh_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def unlevered_inputs():
    """Cash purchase, flat rent, no costs, no growth.

    Every figure is easy to check by hand: 12,000/yr on 200,000.
    """
    return AnalysisInputs(
        purchase_price=200_000,
        property_use=PropertyUse.NON_RESIDENTIAL,
        acquisition=AcquisitionCosts(transfer_tax=0.0),
        financing=Financing(ltv_pct=0.0),
        rental=LongTermRental(monthly_rent=1_000),
        operating=OperatingCosts(property_tax_yearly=0.0),
        horizon_years=10,
    )


@pytest.fixture
def levered_inputs():
    """Typical financed long-term rental."""
    return AnalysisInputs(
        purchase_price=200_000,
        property_use=PropertyUse.RESIDENTIAL,
        acquisition=AcquisitionCosts(notary_fees=2_000, renovation_costs=10_000),
        financing=Financing(ltv_pct=80.0, interest_rate_pct=3.5, term_years=25),
        rental=LongTermRental(monthly_rent=1_100),
        operating=OperatingCosts(
            management_pct=8.0,
            maintenance_yearly=600,
            property_tax_rate_pct=0.3,
            insurance_yearly=250,
            condo_monthly=40,
        ),
        horizon_years=10,
        disposal_cost_pct=3.0,
    )


@pytest.fixture
def building_inputs():
    """Three units, shared costs of 3,000/yr, a 1,000/month manual payment."""
    return MultiUnitInputs(
        name="Rua das Flores 12",
        purchase_price=300_000,
        transfer_tax=0.0,
        equity=100_000,
        loan_amount=200_000,
        interest_rate_pct=3.5,
        term_years=30,
        monthly_payment=1_000,
        market_value=400_000,
        shared_costs=SharedCosts(condo_monthly=100, maintenance_yearly=1_800),
        units=(
            UnitInput(id="a", name="T2 Left", area_m2=80, monthly_rent=1_000, allocation_weight=50),
            UnitInput(
                id="b",
                name="T1 Right",
                area_m2=60,
                monthly_rent=800,
                allocation_weight=30,
                tenant_category=TenantCategory.TOURISM,
            ),
            UnitInput(id="c", name="Studio", area_m2=40, monthly_rent=600, allocation_weight=20),
        ),
    )


@pytest.fixture
def two_loans():
    """Interest-free loans so payoff months can be computed by hand."""
    return [
        SnowballProperty(id="small", name="Studio", debt=1_000, monthly_payment=100),
        SnowballProperty(id="large", name="T3", debt=3_000, monthly_payment=100),
    ]
