"""Invariant tests for the modeling engine.

Verifies rules that must ALWAYS hold, regardless of specific inputs.
Inputs are drawn from a seeded generator so failures are reproducible.
"""

import random

import pytest

from propmodel.application.services.analysis import analyze_investment
from propmodel.application.services.multi_unit import allocate_cost, analyze_multi_unit
from propmodel.application.services.snowball import simulate_snowball
from propmodel.core.glossary import calculate_break_even_occupancy
from propmodel.domain.calculator.financial import (
    calculate_monthly_payment,
    calculate_remaining_balance,
)
from propmodel.domain.calculator.irr import solve_irr
from propmodel.domain.calculator.tax import PropertyUse
from propmodel.domain.models.analysis import (
    AcquisitionCosts,
    AnalysisInputs,
    Financing,
    GrowthAssumptions,
    LongTermRental,
    MixedRental,
    OperatingCosts,
    ShortTermRental,
)
from propmodel.domain.models.multi_unit import MultiUnitInputs, SharedCosts, UnitInput
from propmodel.domain.models.snowball import SnowballProperty

# --- Fixtures ---

@pytest.fixture
def rng():
    return random.Random(20261019)


def _random_rental(rng):
    kind = rng.choice(["long", "short", "mixed", "none"])
    if kind == "long":
        return LongTermRental(monthly_rent=rng.uniform(300, 3000))
    if kind == "short":
        return ShortTermRental(nightly_rate=rng.uniform(40, 250), occupancy_pct=rng.uniform(0, 100))
    if kind == "mixed":
        return MixedRental(
            monthly_rent=rng.uniform(300, 2000),
            nightly_rate=rng.uniform(40, 250),
            occupancy_pct=rng.uniform(0, 100),
            long_term_months=rng.randint(0, 12),
        )
    return LongTermRental()


def _random_inputs(rng):
    return AnalysisInputs(
        purchase_price=rng.choice([0.0, rng.uniform(50_000, 900_000)]),
        property_use=rng.choice(list(PropertyUse)),
        acquisition=AcquisitionCosts(notary_fees=rng.uniform(0, 5000)),
        financing=Financing(
            ltv_pct=rng.choice([0.0, rng.uniform(10, 90)]),
            interest_rate_pct=rng.choice([None, 0.0, rng.uniform(0.5, 8)]),
            term_years=rng.choice([None, rng.randint(5, 35)]),
        ),
        rental=_random_rental(rng),
        operating=OperatingCosts(
            management_pct=rng.uniform(0, 20),
            maintenance_yearly=rng.uniform(0, 3000),
            property_tax_rate_pct=rng.choice([None, rng.uniform(0.3, 0.45)]),
        ),
        growth=GrowthAssumptions(
            rent_growth_pct=rng.uniform(-2, 5),
            cost_growth_pct=rng.uniform(0, 4),
            value_growth_pct=rng.uniform(-3, 6),
        ),
        horizon_years=rng.choice([5, 10, 15, 30]),
        disposal_cost_pct=rng.uniform(0, 6),
    )


# --- Invariant Tests ---

class TestAmortizationInvariants:
    """Rules that must be mathematically true."""

    def test_remaining_balance_bounds(self, rng):
        for _ in range(200):
            principal = rng.uniform(1_000, 1_000_000)
            rate = rng.uniform(0, 12)
            years = rng.randint(1, 40)
            months = rng.randint(-12, years * 12 + 24)
            balance = calculate_remaining_balance(principal, rate, years, months)
            assert 0.0 <= balance <= principal

    def test_remaining_balance_endpoints(self, rng):
        for _ in range(100):
            principal = rng.uniform(1_000, 1_000_000)
            rate = rng.uniform(0.01, 12)
            years = rng.randint(1, 40)
            assert calculate_remaining_balance(principal, rate, years, 0) == principal
            assert calculate_remaining_balance(principal, rate, years, years * 12) == pytest.approx(0.0, abs=1e-6)

    def test_zero_rate_payment(self, rng):
        for _ in range(50):
            principal = rng.uniform(1_000, 500_000)
            years = rng.randint(1, 40)
            assert calculate_monthly_payment(principal, 0, years) == pytest.approx(principal / (years * 12))


class TestIrrInvariants:

    def test_single_period_round_trip(self, rng):
        for _ in range(100):
            outlay = rng.uniform(1_000, 1_000_000)
            rate = rng.uniform(-0.9, 5.0)
            assert solve_irr([-outlay, outlay * (1 + rate)]) == pytest.approx(rate, abs=1e-5)


class TestAnalysisInvariants:

    def test_never_raises_and_stays_consistent(self, rng):
        for _ in range(60):
            inputs = _random_inputs(rng)
            result = analyze_investment(inputs)

            assert len(result.yearly_cashflows) == inputs.horizon_years
            assert 0.0 <= result.break_even_occupancy <= 100.0
            assert 0.0 <= result.exit_analysis.remaining_debt <= result.loan_amount + 0.01

            running = 0.0
            for row in result.yearly_cashflows:
                running += row.net_cashflow
                assert row.cumulative_cashflow == pytest.approx(running, abs=0.01 * row.year + 0.01)

    def test_repeatable(self, rng):
        for _ in range(10):
            inputs = _random_inputs(rng)
            assert analyze_investment(inputs) == analyze_investment(inputs)

    def test_break_even_range(self, rng):
        for _ in range(200):
            value = calculate_break_even_occupancy(
                rng.uniform(-1000, 20000),
                rng.choice([0.0, rng.uniform(0, 40000)]),
                rng.choice([0.0, rng.uniform(0, 60000)]),
                rng.uniform(0, 100),
            )
            assert 0.0 <= value <= 100.0


class TestAllocationInvariants:

    def test_allocated_shares_sum_to_cost(self, rng):
        for _ in range(200):
            n = rng.randint(1, 12)
            units = [
                UnitInput(id=str(i), allocation_weight=rng.choice([0.0, rng.uniform(0, 150)]))
                for i in range(n)
            ]
            cost = rng.uniform(0, 50_000)
            assert sum(allocate_cost(cost, units)) == pytest.approx(cost, abs=1e-6)

    def test_building_totals_match_units(self, rng):
        for _ in range(30):
            units = tuple(
                UnitInput(
                    id=str(i),
                    monthly_rent=rng.uniform(300, 2000),
                    allocation_weight=rng.uniform(0, 100),
                    occupancy_pct=rng.uniform(0, 100),
                )
                for i in range(rng.randint(1, 8))
            )
            inputs = MultiUnitInputs(
                purchase_price=rng.uniform(100_000, 1_000_000),
                equity=rng.uniform(10_000, 300_000),
                loan_amount=rng.uniform(0, 700_000),
                interest_rate_pct=rng.uniform(1, 6),
                shared_costs=SharedCosts(condo_monthly=rng.uniform(0, 300), maintenance_yearly=rng.uniform(0, 5000)),
                units=units,
            )
            result = analyze_multi_unit(inputs)
            shared = inputs.shared_costs.annual_total
            assert sum(u.allocated_costs for u in result.units) == pytest.approx(shared, abs=1e-6)
            assert sum(u.debt_service_share for u in result.units) == pytest.approx(result.total_debt_service, abs=0.01)
            assert result.total_noi == pytest.approx(sum(u.noi for u in result.units), abs=0.01)


class TestSnowballInvariants:

    def _loans(self, rng, n):
        loans = []
        for i in range(n):
            debt = rng.uniform(5_000, 300_000)
            rate = rng.uniform(0, 7)
            years = rng.randint(5, 30)
            loans.append(SnowballProperty(
                id=f"loan-{i}",
                debt=debt,
                monthly_payment=calculate_monthly_payment(debt, rate, years) + 1.0,
                interest_rate_pct=rate,
            ))
        return loans

    def test_terminates_with_all_paid(self, rng):
        """Payments that amortize within 30 years always finish within the cap."""
        for strategy in ("smallest", "highest_interest"):
            for _ in range(20):
                loans = self._loans(rng, rng.randint(1, 8))
                summary = simulate_snowball(loans, rng.uniform(0, 2000), strategy)
                assert summary.all_paid_off
                assert len(summary.results) == len(loans)
                assert summary.debt_free_months <= 360

    @pytest.mark.parametrize("strategy", ["smallest", "highest_interest"])
    def test_payoff_months_never_later_with_more_extra(self, rng, strategy):
        """Every loan, not just the last one, pays off no later as extra grows."""
        for _ in range(60):
            loans = []
            for i in range(rng.randint(2, 5)):
                debt = rng.uniform(5_000, 40_000)
                rate = rng.uniform(0, 7)
                loans.append(SnowballProperty(
                    id=f"loan-{i}",
                    debt=debt,
                    monthly_payment=calculate_monthly_payment(debt, rate, rng.randint(2, 20)) + 1.0,
                    interest_rate_pct=rate,
                ))

            previous = None
            for extra in range(0, 1700, 100):
                summary = simulate_snowball(loans, extra, strategy)
                months = {r.property_id: r.months_to_payoff for r in summary.results}
                assert summary.all_paid_off
                if previous is not None:
                    for loan_id, month in months.items():
                        assert month <= previous[loan_id], (loan_id, extra)
                previous = months
