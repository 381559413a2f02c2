"""
Standardized Financial Definitions & Formulas.
Single Source of Truth for the yield and coverage ratios.

Every ratio returns a plain float and never divides by zero: an empty
denominator yields 0.0 (or the DSCR cap when there is no debt to cover).
Percentages are expressed as 0-100 and rounded to two decimals.
"""
from typing import Literal

MetricStatus = Literal["good", "warning", "danger"]


def _pct(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return round(numerator / denominator * 100.0, 2)


def calculate_bar(annual_gross_rent: float, purchase_price: float) -> float:
    """BAR (gross initial yield) = annual gross rent / acquisition price."""
    return _pct(annual_gross_rent, purchase_price)


def calculate_nar(annual_noi: float, total_investment: float) -> float:
    """NAR (net initial yield) = annual NOI / total investment."""
    return _pct(annual_noi, total_investment)


def calculate_cash_on_cash(annual_net_cashflow: float, equity: float) -> float:
    """Cash-on-cash = annual cashflow after debt service / equity invested."""
    return _pct(annual_net_cashflow, equity)


def calculate_cap_rate(annual_noi: float, market_value: float) -> float:
    """Cap rate = annual NOI / market value."""
    return _pct(annual_noi, market_value)


def calculate_dscr(annual_noi: float, annual_debt_service: float, cap: float = 999.0) -> float:
    """
    DSCR = NOI / annual debt service.

    Without debt service the property is always covered and the ratio is
    reported as ``cap``. The result never exceeds ``cap``.
    """
    if annual_debt_service <= 1e-9:
        return cap
    return round(min(cap, annual_noi / annual_debt_service), 2)


def calculate_break_even_occupancy(
    fixed_opex: float,
    annual_debt_service: float,
    potential_gross_rent: float,
    variable_opex_pct: float = 0.0,
) -> float:
    """
    Occupancy (%) at which NOI exactly covers debt service.

    Gross rent and the variable (percentage-of-rent) costs both scale with
    occupancy, fixed costs do not:

        occ * G * (1 - v) - fixed = debt_service

    The result is clamped to [0, 100]. No rent at all yields 0.0 and so does
    a property without debt service (always covered).
    """
    if potential_gross_rent <= 0 or annual_debt_service <= 1e-9:
        return 0.0

    margin = potential_gross_rent * (1.0 - variable_opex_pct / 100.0)
    if margin <= 0:
        return 100.0

    occupancy = (fixed_opex + annual_debt_service) / margin * 100.0
    return round(max(0.0, min(100.0, occupancy)), 2)


def calculate_opex_ratio(annual_opex: float, annual_gross_rent: float) -> float:
    """Share of gross rent consumed by operating costs (%)."""
    return _pct(annual_opex, annual_gross_rent)


# Status thresholds: (good_from, warning_from, higher_is_better)
METRIC_THRESHOLDS: dict[str, tuple[float, float, bool]] = {
    "cash_on_cash": (12.0, 8.0, True),
    "cap_rate": (6.0, 5.0, True),
    "dscr": (1.5, 1.2, True),
    "yield_per_m2": (150.0, 100.0, True),
    "occupancy": (90.0, 70.0, True),
    "tenant_retention": (24.0, 6.0, True),
    "opex_ratio": (30.0, 50.0, False),
    "break_even_occupancy": (50.0, 70.0, False),
    "renovation_need": (3.0, 7.0, False),
}


def classify_metric(metric: str, value: float) -> MetricStatus:
    """
    Traffic-light status of a portfolio metric.

    Unknown metrics are reported as "warning".
    """
    if metric not in METRIC_THRESHOLDS:
        return "warning"

    good, warning, higher_is_better = METRIC_THRESHOLDS[metric]
    if higher_is_better:
        if value >= good:
            return "good"
        return "warning" if value >= warning else "danger"

    if value <= good:
        return "good"
    return "warning" if value <= warning else "danger"
