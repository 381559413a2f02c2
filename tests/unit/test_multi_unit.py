"""Unit tests for propmodel.application.services.multi_unit module."""

import pytest

from propmodel.application.services.multi_unit import (
    MultiUnitAnalyzer,
    allocate_cost,
    allocation_shares,
    analyze_multi_unit,
    tenant_diversification,
)
from propmodel.domain.calculator.tax import PropertyUse
from propmodel.domain.models.multi_unit import MultiUnitInputs, TenantCategory, UnitInput


def _units(*weights):
    return [UnitInput(id=str(i), allocation_weight=w) for i, w in enumerate(weights)]


class TestAllocation:
    """Weights are normalized by their sum at allocation time."""

    def test_shares_sum_to_one(self):
        assert sum(allocation_shares(_units(50, 30, 20))) == pytest.approx(1.0)

    def test_any_scale(self):
        assert allocation_shares(_units(5, 3, 2)) == pytest.approx(allocation_shares(_units(50, 30, 20)))

    def test_weights_not_summing_to_100(self):
        assert allocate_cost(3000, _units(40, 40)) == pytest.approx([1500, 1500])

    def test_zero_weights_split_equally(self):
        assert allocate_cost(3000, _units(0, 0, 0)) == pytest.approx([1000, 1000, 1000])

    def test_no_units(self):
        assert allocation_shares([]) == []

    def test_allocated_sum_equals_cost(self):
        assert sum(allocate_cost(3001.37, _units(7, 13, 1, 0.5))) == pytest.approx(3001.37)


class TestDiversification:

    def test_counts_and_percentages(self):
        units = [
            UnitInput(id="1"),
            UnitInput(id="2", tenant_category=TenantCategory.TOURISM),
            UnitInput(id="3"),
        ]
        entries = tenant_diversification(units)
        assert [e.tenant_category for e in entries] == [TenantCategory.LONG_TERM, TenantCategory.TOURISM]
        assert [e.count for e in entries] == [2, 1]
        assert [e.percentage for e in entries] == [66.67, 33.33]

    def test_empty(self):
        assert tenant_diversification([]) == []


class TestMultiUnitAnalysis:
    """Three units; shared costs 3,000/yr split 50/30/20; 12,000/yr debt service."""

    def test_unit_allocations(self, building_inputs, settings):
        units = analyze_multi_unit(building_inputs, settings).units
        assert [u.allocated_costs for u in units] == pytest.approx([1500, 900, 600])
        assert [u.debt_service_share for u in units] == pytest.approx([6000, 3600, 2400])

    def test_unit_figures(self, building_inputs, settings):
        a, b, c = analyze_multi_unit(building_inputs, settings).units
        assert a.gross_rent == pytest.approx(12000)
        assert a.noi == pytest.approx(10500)
        assert a.net_cashflow == pytest.approx(4500)
        assert b.net_cashflow == pytest.approx(5100)
        assert c.net_cashflow == pytest.approx(4200)

    def test_unit_cash_on_cash_uses_equity_share(self, building_inputs, settings):
        a, b, c = analyze_multi_unit(building_inputs, settings).units
        assert a.cash_on_cash == 9.0
        assert b.cash_on_cash == 17.0
        assert c.cash_on_cash == 21.0

    def test_unit_dscr(self, building_inputs, settings):
        a = analyze_multi_unit(building_inputs, settings).units[0]
        assert a.dscr == 1.75

    def test_totals(self, building_inputs, settings):
        result = analyze_multi_unit(building_inputs, settings)
        assert result.total_gross_rent == 28800
        assert result.total_noi == 25800
        assert result.total_net_cashflow == 13800
        assert result.total_debt_service == 12000

    def test_portfolio_ratios_from_totals(self, building_inputs, settings):
        """Aggregate first, then divide."""
        result = analyze_multi_unit(building_inputs, settings)
        assert result.dscr == 2.15
        assert result.cap_rate == 6.45
        assert result.cash_on_cash == 13.8
        mean_unit_dscr = sum(u.dscr for u in result.units) / len(result.units)
        assert result.dscr != pytest.approx(mean_unit_dscr, abs=0.01)

    def test_break_even(self, building_inputs, settings):
        # (3,000 + 12,000) / 28,800
        assert analyze_multi_unit(building_inputs, settings).break_even_occupancy == 52.08

    def test_weight_scale_does_not_matter(self, building_inputs, settings):
        scaled = building_inputs.model_copy(update={
            "units": tuple(
                u.model_copy(update={"allocation_weight": u.allocation_weight / 10})
                for u in building_inputs.units
            )
        })
        base = analyze_multi_unit(building_inputs, settings)
        other = analyze_multi_unit(scaled, settings)
        assert [u.net_cashflow for u in other.units] == pytest.approx([u.net_cashflow for u in base.units])

    def test_tax_and_after_tax(self, building_inputs, settings):
        result = analyze_multi_unit(building_inputs, settings)
        # Average rent 800/month in 2026: reduced rate
        assert result.income_tax_rate_pct == 10.0
        assert result.units[0].after_tax_cashflow == pytest.approx(4050)
        assert result.total_after_tax_cashflow == pytest.approx(13800 * 0.9, abs=0.01)

    def test_losses_not_taxed(self, building_inputs, settings):
        inputs = building_inputs.model_copy(update={"monthly_payment": 3000})
        a = analyze_multi_unit(inputs, settings).units[0]
        assert a.net_cashflow < 0
        assert a.after_tax_cashflow == pytest.approx(a.net_cashflow)

    def test_occupancy(self, building_inputs, settings):
        units = list(building_inputs.units)
        units[0] = units[0].model_copy(update={"occupancy_pct": 50})
        inputs = building_inputs.model_copy(update={"units": tuple(units)})
        result = analyze_multi_unit(inputs, settings)
        assert result.units[0].gross_rent == pytest.approx(6000)
        assert result.average_occupancy_pct == pytest.approx(83.33, abs=0.01)

    def test_features(self, building_inputs, settings):
        result = analyze_multi_unit(building_inputs, settings)
        a = result.units[0]
        assert a.yield_per_m2 == 150.0
        assert a.opex_ratio == 12.5
        assert result.renovation_estimate_3y == 1500.0
        assert [d.count for d in result.diversification] == [2, 1]

    def test_computed_payment(self, building_inputs, settings):
        inputs = building_inputs.model_copy(update={"monthly_payment": None})
        result = analyze_multi_unit(inputs, settings)
        assert 890 < result.monthly_payment < 910

    def test_transfer_tax_computed(self, building_inputs, settings):
        inputs = building_inputs.model_copy(update={"transfer_tax": None, "property_use": PropertyUse.NON_RESIDENTIAL})
        assert analyze_multi_unit(inputs, settings).total_investment == 319500

    def test_irr_positive(self, building_inputs, settings):
        assert analyze_multi_unit(building_inputs, settings).irr > 0

    def test_no_units(self, settings):
        result = MultiUnitAnalyzer(settings).analyze(MultiUnitInputs(purchase_price=100000))
        assert result.units == ()
        assert result.total_gross_rent == 0
        assert result.dscr == 0
        assert result.average_occupancy_pct == 0
