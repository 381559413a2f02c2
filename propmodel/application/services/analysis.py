"""Single-asset investment analysis.

Turns one property's purchase, financing, rental and cost assumptions into a
year-by-year cashflow projection, yield ratios, an exit valuation and an IRR.
Also provides the risk assessment and the sensitivity/stress scenarios built
on top of the projection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from propmodel.core.glossary import (
    calculate_bar,
    calculate_break_even_occupancy,
    calculate_cash_on_cash,
    calculate_dscr,
    calculate_nar,
)
from propmodel.core.logging import get_logger
from propmodel.core.settings import EngineSettings, get_settings
from propmodel.domain.calculator.financial import (
    calculate_monthly_payment,
    calculate_remaining_balance,
)
from propmodel.domain.calculator.irr import solve_irr
from propmodel.domain.calculator.tax import (
    calculate_property_tax,
    calculate_rental_income_tax,
    calculate_transfer_tax,
    estimate_cadastral_value,
)
from propmodel.domain.models.analysis import (
    AnalysisInputs,
    ExitAnalysis,
    InvestmentAnalysis,
    LongTermRental,
    MixedRental,
    ShortTermRental,
    YearlyCashflow,
)

log = get_logger(__name__)


def _round(value: float) -> float:
    return round(value, 2)


def annual_gross_rent(inputs: AnalysisInputs) -> float:
    """Year-1 gross rent from the active rental path."""
    return inputs.rental.annual_gross()


def feasibility_gross_rent(rental: LongTermRental | ShortTermRental | MixedRental) -> float:
    """Best-case annual rent for first-pass deal screening.

    Takes the larger of the full-year long-term and full-year short-term
    figures. Never used inside a projection.
    """
    if isinstance(rental, LongTermRental):
        return rental.annual_gross()
    if isinstance(rental, ShortTermRental):
        return rental.annual_gross()
    long_term = rental.monthly_rent * 12
    short_term = ShortTermRental(
        nightly_rate=rental.nightly_rate, occupancy_pct=rental.occupancy_pct
    ).annual_gross()
    return max(long_term, short_term)


def feasibility_bar(
    purchase_price: float, rental: LongTermRental | ShortTermRental | MixedRental
) -> float:
    """Screening BAR using the best-case rent."""
    return calculate_bar(feasibility_gross_rent(rental), purchase_price)


class InvestmentAnalyzer:
    """Single-property projection engine.

    Stateless apart from its settings; every call builds a fresh result.
    """

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or get_settings()

    # --- building blocks ---

    def transfer_tax(self, inputs: AnalysisInputs) -> float:
        if inputs.acquisition.transfer_tax is not None:
            return inputs.acquisition.transfer_tax
        return calculate_transfer_tax(inputs.purchase_price, inputs.property_use)

    def total_investment(self, inputs: AnalysisInputs) -> float:
        acq = inputs.acquisition
        return (
            inputs.purchase_price
            + self.transfer_tax(inputs)
            + acq.notary_fees
            + acq.renovation_costs
            + acq.furnishing_costs
        )

    def loan_terms(self, inputs: AnalysisInputs) -> tuple[float, float, int]:
        """Return (loan amount, rate %, term years) with configured fallbacks."""
        fin = inputs.financing
        rate = fin.interest_rate_pct
        if rate is None:
            rate = self.settings.default_interest_rate_pct
        term = fin.term_years or self.settings.default_loan_term_years
        return fin.resolve_loan_amount(inputs.purchase_price), rate, term

    def property_tax_yearly(self, inputs: AnalysisInputs) -> float:
        op = inputs.operating
        if op.property_tax_yearly is not None:
            return op.property_tax_yearly
        vpt = op.cadastral_value
        if vpt is None:
            vpt = estimate_cadastral_value(
                inputs.purchase_price, self.settings.default_cadastral_value_pct
            )
        return calculate_property_tax(vpt, rate_pct=op.property_tax_rate_pct).annual_amount

    def fixed_costs_yearly(self, inputs: AnalysisInputs) -> float:
        """Year-1 operating costs that do not scale with rent."""
        op = inputs.operating
        return (
            op.maintenance_yearly
            + self.property_tax_yearly(inputs)
            + op.insurance_yearly
            + op.condo_monthly * 12
            + op.utilities_monthly * 12
        )

    def opex(self, gross_rent: float, fixed_costs: float, inputs: AnalysisInputs) -> float:
        return gross_rent * inputs.operating.management_pct / 100.0 + fixed_costs

    # --- main entry point ---

    def analyze(self, inputs: AnalysisInputs) -> InvestmentAnalysis:
        """Run the full analysis.

        Args:
            inputs: Property, financing, rental and cost assumptions

        Returns:
            InvestmentAnalysis
        """
        total_investment = self.total_investment(inputs)
        loan_amount, rate, term = self.loan_terms(inputs)
        equity = total_investment - loan_amount

        monthly_payment = calculate_monthly_payment(loan_amount, rate, term)
        term_months = term * 12

        gross_1 = annual_gross_rent(inputs)
        fixed_1 = self.fixed_costs_yearly(inputs)
        rent_growth = 1.0 + inputs.growth.rent_growth_pct / 100.0
        cost_growth = 1.0 + inputs.growth.cost_growth_pct / 100.0

        yearly: list[YearlyCashflow] = []
        net_flows: list[float] = []
        cumulative = 0.0

        for year in range(1, inputs.horizon_years + 1):
            gross = gross_1 * rent_growth ** (year - 1)
            fixed = fixed_1 * cost_growth ** (year - 1)
            opex = self.opex(gross, fixed, inputs)
            noi = gross - opex

            months_paid = min(12, max(0, term_months - (year - 1) * 12))
            debt_service = monthly_payment * months_paid

            net = noi - debt_service
            cumulative += net
            net_flows.append(net)

            yearly.append(YearlyCashflow(
                year=year,
                gross_revenue=_round(gross),
                opex=_round(opex),
                noi=_round(noi),
                debt_service=_round(debt_service),
                net_cashflow=_round(net),
                cumulative_cashflow=_round(cumulative),
            ))

        # Exit valuation
        horizon = inputs.horizon_years
        market_value = inputs.purchase_price * (1.0 + inputs.growth.value_growth_pct / 100.0) ** horizon
        remaining_debt = calculate_remaining_balance(loan_amount, rate, term, horizon * 12)
        disposal_costs = market_value * inputs.disposal_cost_pct / 100.0
        net_exit = market_value - remaining_debt - disposal_costs

        exit_analysis = ExitAnalysis(
            market_value=_round(market_value),
            remaining_debt=_round(remaining_debt),
            disposal_costs=_round(disposal_costs),
            net_exit=_round(net_exit),
            total_return=_round(net_exit + cumulative),
        )

        # Year-1 ratios
        opex_1 = self.opex(gross_1, fixed_1, inputs)
        noi_1 = gross_1 - opex_1
        debt_service_1 = monthly_payment * min(12, term_months)
        net_1 = noi_1 - debt_service_1

        if gross_1 <= 0:
            log.debug("analysis_without_rent", purchase_price=inputs.purchase_price)
            bar = nar = cash_on_cash = dscr = break_even = 0.0
        else:
            bar = calculate_bar(gross_1, inputs.purchase_price)
            nar = calculate_nar(noi_1, total_investment)
            cash_on_cash = calculate_cash_on_cash(net_1, equity)
            dscr = calculate_dscr(noi_1, debt_service_1, cap=self.settings.dscr_cap)
            break_even = calculate_break_even_occupancy(
                fixed_1, debt_service_1, gross_1, inputs.operating.management_pct
            )

        irr = self.irr(net_flows, net_exit, total_investment, equity)

        tax_rate = None
        after_tax_1 = None
        if inputs.tax_profile is not None:
            profile = inputs.tax_profile
            rental_tax = calculate_rental_income_tax(
                profile.tax_year,
                monthly_rent=gross_1 / 12.0,
                contract_years=profile.contract_years,
                renewals=profile.renewals,
                aggregated=profile.aggregated,
                long_duration_contract=profile.long_duration_contract,
            )
            tax_rate = rental_tax.rate_pct
            after_tax_1 = _round(net_1 - rental_tax.annual_amount)

        log.debug(
            "investment_analyzed",
            total_investment=round(total_investment, 2),
            loan_amount=round(loan_amount, 2),
            horizon=horizon,
            irr=irr,
            dscr=dscr,
        )

        return InvestmentAnalysis(
            total_investment=_round(total_investment),
            equity=_round(equity),
            loan_amount=_round(loan_amount),
            monthly_payment=_round(monthly_payment),
            bar=bar,
            nar=nar,
            cash_on_cash=cash_on_cash,
            dscr=dscr,
            break_even_occupancy=break_even,
            irr=irr,
            yearly_cashflows=tuple(yearly),
            exit_analysis=exit_analysis,
            income_tax_rate_pct=tax_rate,
            after_tax_cashflow_year1=after_tax_1,
        )

    def irr(
        self,
        net_flows: list[float],
        net_exit: float,
        total_investment: float,
        equity: float,
    ) -> float:
        """IRR (%) of [-outlay, CF1, ..., CFN + net exit]."""
        if not net_flows:
            return 0.0
        outlay = total_investment if self.settings.irr_outlay_basis == "total_investment" else equity
        flows = [-outlay, *net_flows]
        flows[-1] += net_exit
        return round(solve_irr(flows, self.settings) * 100.0, 2)


def analyze_investment(
    inputs: AnalysisInputs,
    settings: EngineSettings | None = None,
) -> InvestmentAnalysis:
    """Analyze one property.

    Convenience wrapper around InvestmentAnalyzer.
    """
    return InvestmentAnalyzer(settings).analyze(inputs)


# --- Risk assessment ---

RiskLevel = Literal["good", "moderate", "risky"]


@dataclass(frozen=True)
class RiskAssessment:
    level: RiskLevel
    score: int
    reasons: list[str] = field(default_factory=list)


def assess_risk(analysis: InvestmentAnalysis) -> RiskAssessment:
    """Score DSCR, IRR, cash-on-cash and break-even occupancy.

    Each metric adds 0 (comfortable), 1 (tight) or 2 (weak) points.
    0-1 points is good, 2-3 moderate, more is risky.
    """
    reasons: list[str] = []
    score = 0

    if analysis.dscr >= 1.2:
        reasons.append("DSCR >= 1.2: debt service well covered")
    elif analysis.dscr >= 1.0:
        reasons.append("DSCR 1.0-1.2: thin margin")
        score += 1
    else:
        reasons.append("DSCR < 1.0: rent does not cover the mortgage")
        score += 2

    if analysis.irr >= 12:
        reasons.append("IRR >= 12%: excellent return")
    elif analysis.irr >= 8:
        reasons.append("IRR 8-12%: reasonable return")
        score += 1
    else:
        reasons.append("IRR < 8%: low return")
        score += 2

    if analysis.cash_on_cash >= 8:
        reasons.append("Cash-on-cash >= 8%: good return on equity")
    elif analysis.cash_on_cash >= 4:
        reasons.append("Cash-on-cash 4-8%: moderate return on equity")
        score += 1
    else:
        reasons.append("Cash-on-cash < 4%: low return on equity")
        score += 2

    if analysis.break_even_occupancy <= 60:
        reasons.append("Break-even <= 60%: large vacancy buffer")
    elif analysis.break_even_occupancy <= 80:
        reasons.append("Break-even 60-80%: acceptable vacancy buffer")
        score += 1
    else:
        reasons.append("Break-even > 80%: little room for vacancy")
        score += 2

    if score <= 1:
        level: RiskLevel = "good"
    elif score <= 3:
        level = "moderate"
    else:
        level = "risky"
    return RiskAssessment(level=level, score=score, reasons=reasons)


# --- Sensitivity ---

@dataclass(frozen=True)
class SensitivityResult:
    """Scenario outcome compared with the base case."""

    label: str
    analysis: InvestmentAnalysis
    dscr_delta: float
    irr_delta: float
    cashflow_year1_delta: float


def apply_scenario(
    inputs: AnalysisInputs,
    interest_rate_pct: float | None = None,
    occupancy_pct: float | None = None,
    rent_change_pct: float = 0.0,
) -> AnalysisInputs:
    """Return a copy of ``inputs`` with the scenario shocks applied.

    Occupancy only affects the short-stay part of the rental assumption.
    The rent change scales both the monthly rent and the nightly rate.
    """
    factor = 1.0 + rent_change_pct / 100.0
    rental = inputs.rental
    if isinstance(rental, LongTermRental):
        rental = rental.model_copy(update={"monthly_rent": rental.monthly_rent * factor})
    else:
        update: dict[str, float] = {"nightly_rate": rental.nightly_rate * factor}
        if isinstance(rental, MixedRental):
            update["monthly_rent"] = rental.monthly_rent * factor
        rental = rental.model_copy(update=update)
        if occupancy_pct is not None:
            rental = rental.with_occupancy(occupancy_pct)

    update_inputs: dict[str, object] = {"rental": rental}
    if interest_rate_pct is not None:
        update_inputs["financing"] = inputs.financing.model_copy(
            update={"interest_rate_pct": max(0.0, interest_rate_pct)}
        )
    return inputs.model_copy(update=update_inputs)


def run_sensitivity(
    inputs: AnalysisInputs,
    interest_rate_pct: float | None = None,
    occupancy_pct: float | None = None,
    rent_change_pct: float = 0.0,
    label: str = "custom",
    settings: EngineSettings | None = None,
    base: InvestmentAnalysis | None = None,
) -> SensitivityResult:
    """Re-run the analysis under shocked assumptions and report the deltas."""
    analyzer = InvestmentAnalyzer(settings)
    base = base or analyzer.analyze(inputs)
    scenario = analyzer.analyze(
        apply_scenario(inputs, interest_rate_pct, occupancy_pct, rent_change_pct)
    )

    base_cf = base.yearly_cashflows[0].net_cashflow if base.yearly_cashflows else 0.0
    scenario_cf = scenario.yearly_cashflows[0].net_cashflow if scenario.yearly_cashflows else 0.0

    return SensitivityResult(
        label=label,
        analysis=scenario,
        dscr_delta=round(scenario.dscr - base.dscr, 2),
        irr_delta=round(scenario.irr - base.irr, 2),
        cashflow_year1_delta=_round(scenario_cf - base_cf),
    )


HIGH_VACANCY_OCCUPANCY_PCT = 50.0
RATE_SHOCK_PCT = 2.0


def run_stress_tests(
    inputs: AnalysisInputs,
    settings: EngineSettings | None = None,
) -> list[SensitivityResult]:
    """Run the preset scenarios: base, rate +2pt, high vacancy, rent -15%, worst case."""
    analyzer = InvestmentAnalyzer(settings)
    base = analyzer.analyze(inputs)
    _, base_rate, _ = analyzer.loan_terms(inputs)

    presets: list[tuple[str, float, float | None, float]] = [
        ("base", base_rate, None, 0.0),
        ("rate_increase", base_rate + RATE_SHOCK_PCT, None, 0.0),
        ("high_vacancy", base_rate, HIGH_VACANCY_OCCUPANCY_PCT, 0.0),
        ("rent_decrease", base_rate, None, -15.0),
        ("worst_case", base_rate + RATE_SHOCK_PCT, HIGH_VACANCY_OCCUPANCY_PCT, -10.0),
    ]
    return [
        run_sensitivity(inputs, rate, occupancy, rent, label=label, settings=analyzer.settings, base=base)
        for label, rate, occupancy, rent in presets
    ]
