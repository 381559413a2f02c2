"""Multi-unit building analysis.

Splits shared building costs and the mortgage across units by their
allocation weight, then aggregates unit figures into portfolio metrics.
Portfolio ratios are computed from summed NOI and debt service, never by
averaging per-unit ratios.
"""

from __future__ import annotations

from propmodel.core.glossary import (
    calculate_break_even_occupancy,
    calculate_cap_rate,
    calculate_cash_on_cash,
    calculate_dscr,
    calculate_opex_ratio,
)
from propmodel.core.logging import get_logger
from propmodel.core.settings import EngineSettings, get_settings
from propmodel.domain.calculator.financial import (
    calculate_monthly_payment,
    calculate_remaining_balance,
)
from propmodel.domain.calculator.irr import solve_irr
from propmodel.domain.calculator.tax import calculate_transfer_tax, rental_income_tax_rate
from propmodel.domain.models.multi_unit import (
    DiversificationEntry,
    MultiUnitAnalysis,
    MultiUnitInputs,
    TenantCategory,
    UnitAnalysis,
    UnitInput,
)

log = get_logger(__name__)


def allocation_shares(units: tuple[UnitInput, ...] | list[UnitInput]) -> list[float]:
    """Normalize allocation weights so they sum to 1.

    Weights may use any scale. When every weight is zero the units share
    equally.
    """
    if not units:
        return []
    total = sum(u.allocation_weight for u in units)
    if total <= 0:
        return [1.0 / len(units)] * len(units)
    return [u.allocation_weight / total for u in units]


def allocate_cost(amount: float, units: tuple[UnitInput, ...] | list[UnitInput]) -> list[float]:
    """Split ``amount`` across units by normalized weight."""
    return [amount * share for share in allocation_shares(units)]


def tenant_diversification(units: tuple[UnitInput, ...] | list[UnitInput]) -> list[DiversificationEntry]:
    """Count units per tenant category, in order of first appearance."""
    counts: dict[TenantCategory, int] = {}
    for unit in units:
        counts[unit.tenant_category] = counts.get(unit.tenant_category, 0) + 1

    n = len(units)
    return [
        DiversificationEntry(
            tenant_category=category,
            count=count,
            percentage=round(count / n * 100.0, 2),
        )
        for category, count in counts.items()
    ]


class MultiUnitAnalyzer:
    """Cost allocation and aggregation engine for multi-unit buildings."""

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or get_settings()

    def analyze(self, inputs: MultiUnitInputs) -> MultiUnitAnalysis:
        """Analyze a building and its units.

        Args:
            inputs: Building purchase, financing, shared costs and units

        Returns:
            MultiUnitAnalysis
        """
        settings = self.settings
        units = inputs.units
        n_units = len(units)

        transfer_tax = inputs.transfer_tax
        if transfer_tax is None:
            transfer_tax = calculate_transfer_tax(inputs.purchase_price, inputs.property_use)
        total_investment = (
            inputs.purchase_price + transfer_tax + inputs.notary_fees + inputs.renovation_costs
        )

        rate = inputs.interest_rate_pct
        if rate is None:
            rate = settings.default_interest_rate_pct
        term = inputs.term_years or settings.default_loan_term_years

        if inputs.monthly_payment is not None:
            monthly_payment = inputs.monthly_payment
        else:
            monthly_payment = calculate_monthly_payment(inputs.loan_amount, rate, term)
        annual_debt_service = monthly_payment * 12

        average_rent = sum(u.monthly_rent for u in units) / n_units if n_units else 0.0
        tax_rate, _ = rental_income_tax_rate(
            inputs.tax_year,
            contract_years=inputs.contract_years,
            monthly_rent=average_rent,
        )

        shared_annual = inputs.shared_costs.annual_total
        shares = allocation_shares(units)

        unit_results = [
            self._analyze_unit(unit, share, shared_annual, annual_debt_service, inputs.equity, tax_rate)
            for unit, share in zip(units, shares)
        ]

        total_gross = sum(u.gross_rent for u in unit_results)
        total_noi = sum(u.noi for u in unit_results)
        total_net = sum(u.net_cashflow for u in unit_results)
        total_after_tax = sum(u.after_tax_cashflow for u in unit_results)

        value = inputs.market_value if inputs.market_value > 0 else total_investment
        potential_rent = sum(u.monthly_rent * 12 for u in units)

        if total_gross <= 0:
            cap_rate = dscr = cash_on_cash = break_even = 0.0
        else:
            cap_rate = calculate_cap_rate(total_noi, value)
            dscr = calculate_dscr(total_noi, annual_debt_service, cap=settings.dscr_cap)
            cash_on_cash = calculate_cash_on_cash(total_net, inputs.equity)
            break_even = calculate_break_even_occupancy(
                shared_annual, annual_debt_service, potential_rent
            )

        irr = self._irr(inputs, total_noi, monthly_payment, rate, term, value, total_investment)

        if n_units:
            avg_occupancy = sum(u.occupancy_pct for u in units) / n_units
            avg_opex_ratio = sum(u.opex_ratio for u in unit_results) / n_units
            avg_retention = sum(u.tenant_retention_months for u in units) / n_units
            avg_renovation = sum(u.renovation_need_score for u in units) / n_units
        else:
            avg_occupancy = avg_opex_ratio = avg_retention = avg_renovation = 0.0

        renovation_3y = avg_renovation * settings.renovation_cost_per_score_point * n_units

        log.debug(
            "multi_unit_analyzed",
            name=inputs.name,
            units=n_units,
            total_noi=round(total_noi, 2),
            dscr=dscr,
            irr=irr,
        )

        return MultiUnitAnalysis(
            total_gross_rent=round(total_gross, 2),
            total_noi=round(total_noi, 2),
            total_net_cashflow=round(total_net, 2),
            total_after_tax_cashflow=round(total_after_tax, 2),
            total_debt_service=round(annual_debt_service, 2),
            total_investment=round(total_investment, 2),
            equity=round(inputs.equity, 2),
            monthly_payment=round(monthly_payment, 2),
            income_tax_rate_pct=tax_rate,
            cap_rate=cap_rate,
            dscr=dscr,
            cash_on_cash=cash_on_cash,
            break_even_occupancy=break_even,
            irr=irr,
            average_occupancy_pct=round(avg_occupancy, 2),
            average_opex_ratio=round(avg_opex_ratio, 2),
            average_tenant_retention_months=round(avg_retention, 2),
            renovation_estimate_3y=round(renovation_3y, 2),
            diversification=tuple(tenant_diversification(units)),
            units=tuple(unit_results),
        )

    def _analyze_unit(
        self,
        unit: UnitInput,
        share: float,
        shared_annual: float,
        annual_debt_service: float,
        equity: float,
        tax_rate_pct: float,
    ) -> UnitAnalysis:
        gross = unit.monthly_rent * 12 * unit.occupancy_pct / 100.0
        allocated = shared_annual * share
        noi = gross - allocated
        debt_share = annual_debt_service * share
        net = noi - debt_share
        # Losses are not taxed
        after_tax = net - max(0.0, net) * tax_rate_pct / 100.0

        return UnitAnalysis(
            id=unit.id,
            name=unit.name,
            area_m2=unit.area_m2,
            allocation_share=share,
            gross_rent=gross,
            allocated_costs=allocated,
            noi=noi,
            debt_service_share=debt_share,
            net_cashflow=net,
            after_tax_cashflow=after_tax,
            yield_per_m2=round(gross / unit.area_m2, 2) if unit.area_m2 > 0 else 0.0,
            opex_ratio=calculate_opex_ratio(allocated, gross),
            occupancy_pct=unit.occupancy_pct,
            tenant_retention_months=unit.tenant_retention_months,
            cash_on_cash=calculate_cash_on_cash(net, equity * share),
            dscr=calculate_dscr(noi, debt_share, cap=self.settings.dscr_cap),
            energy_label=unit.energy_label,
            renovation_need_score=unit.renovation_need_score,
            tenant_category=unit.tenant_category,
        )

    def _irr(
        self,
        inputs: MultiUnitInputs,
        total_noi: float,
        monthly_payment: float,
        rate: float,
        term: int,
        value: float,
        total_investment: float,
    ) -> float:
        """IRR (%) over the horizon with constant NOI and a grown exit value."""
        horizon = inputs.horizon_years
        growth = inputs.value_growth_pct
        if growth is None:
            growth = self.settings.default_value_growth_pct

        outlay = total_investment if self.settings.irr_outlay_basis == "total_investment" else inputs.equity
        flows = [-outlay]
        for year in range(1, horizon + 1):
            months_paid = min(12, max(0, term * 12 - (year - 1) * 12))
            flows.append(total_noi - monthly_payment * months_paid)

        exit_value = value * (1.0 + growth / 100.0) ** horizon
        remaining = calculate_remaining_balance(inputs.loan_amount, rate, term, horizon * 12)
        flows[-1] += exit_value - remaining
        return round(solve_irr(flows, self.settings) * 100.0, 2)


def analyze_multi_unit(
    inputs: MultiUnitInputs,
    settings: EngineSettings | None = None,
) -> MultiUnitAnalysis:
    """Analyze a multi-unit building.

    Convenience wrapper around MultiUnitAnalyzer.
    """
    return MultiUnitAnalyzer(settings).analyze(inputs)
